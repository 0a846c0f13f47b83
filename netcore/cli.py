"""Command-line client: sends the sample messages in rotation and prints replies."""

from __future__ import annotations

import argparse
import sys
import time
from typing import Iterator, TextIO

from .buffer import ProtoBuffer
from .client import NetCallback, NetClient, NoConnectionError
from .codec import ProtoBufferError
from .messages import (
    KeyEvent,
    Message,
    Tag,
    TestRecord,
    UnknownTagError,
    WindowData,
    build_payload,
    decode,
    next_tag,
)

DEFAULT_PORT = 8008


def format_hex_dump(data: bytes) -> str:
    """Show ``data`` as upper-case hex bytes, sixteen to a line."""
    raw = bytes(data)
    return "\n".join(
        "".join(f" {byte:02X} " for byte in raw[start : start + 16])
        for start in range(0, len(raw), 16)
    )


def _describe_window(window: WindowData) -> Iterator[str]:
    for name, rows in (
        ("pos", window.pos),
        ("up", window.up),
        ("dir", window.direction),
        ("project", window.project),
    ):
        for row in rows:
            yield f"{name}:" + " ".join(f"{value:f}" for value in row)


def _describe_test(record: TestRecord) -> Iterator[str]:
    yield f"int8_t {record.int8 & 0xFF:x}"
    yield f"uint8_t {record.uint8:x}"
    yield f"int16_t {record.int16 & 0xFFFF:x}"
    yield f"uint16_t {record.uint16:x}"
    yield f"int32_t {record.int32 & 0xFFFFFFFF:x}"
    yield f"uint32_t {record.uint32:x}"
    yield f"int64_t {record.int64 & 0xFFFFFFFFFFFFFFFF:x}"
    yield f"uint64_t {record.uint64:x}"
    yield f"float {record.float_value:f}"
    yield f"double {record.double_value:f}"
    yield f"c string {record.text}"
    yield "".join(f" {byte:x} " for byte in record.raw)


def _describe(tag: Tag, value: Message) -> Iterator[str]:
    if tag is Tag.WINDOW:
        yield from _describe_window(value)
    elif tag is Tag.COLOR:
        yield f"color {value}"
    elif tag is Tag.KEYCODE:
        assert isinstance(value, KeyEvent)
        yield f"keyCode {value.code} keyAction {value.action}"
    elif tag is Tag.LIGHT:
        yield f"light {value}"
    elif tag is Tag.TEST:
        yield from _describe_test(value)
    elif tag is Tag.MORE:
        yield f"num {len(value)}"
        for item in value:
            yield f"item len {item.length}  tag {int(item.tag)}"
            yield from _describe(item.tag, item.value)


class PrintingCallback(NetCallback):
    """Prints every packet received: a hex dump followed by its decoded content."""

    def __init__(self, out: TextIO | None = None) -> None:
        self._out = out

    def recv(self, tag: int, data: bytes) -> None:
        out = self._out if self._out is not None else sys.stdout
        print(f"recv data: tag {tag}", file=out)
        print(format_hex_dump(data), file=out)
        print(file=out)
        buf = ProtoBuffer()
        buf.write(data)
        try:
            value = decode(tag, buf)
        except UnknownTagError:
            print(f"tag {tag} error", file=out)
            return
        except ProtoBufferError as exc:
            print(f"tag {tag} malformed: {exc}", file=out)
            return
        for line in _describe(Tag(tag), value):
            print(line, file=out)


def _parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="netcore", description="Send sample tagged messages to a server."
    )
    parser.add_argument("address", help="server IPv4 address")
    parser.add_argument("--port", type=int, default=DEFAULT_PORT, help="server port")
    parser.add_argument(
        "--interval", type=float, default=1.0, help="seconds between messages"
    )
    parser.add_argument(
        "--count", type=int, default=None, help="stop after this many messages"
    )
    return parser


def main(argv: list[str] | None = None) -> int:
    """Connect to a server and send the sample messages in rotation."""
    args = _parser().parse_args(argv)
    client = NetClient.singleton()
    client.init(PrintingCallback())
    try:
        try:
            client.add(args.address, args.port)
        except OSError as exc:
            print(f"cannot connect to {args.address}:{args.port}: {exc}", file=sys.stderr)
            return 1
        tag = Tag.WINDOW
        sent = 0
        while args.count is None or sent < args.count:
            try:
                client.send(tag, build_payload(tag))
            except NoConnectionError as exc:
                print(f"send tag {int(tag)} failed: {exc}", file=sys.stderr)
            sent += 1
            tag = next_tag(tag)
            time.sleep(args.interval)
    except KeyboardInterrupt:
        pass
    finally:
        client.exit()
    return 0