"""The tagged message types exchanged by the client and how they are encoded.

Each message kind has a tag, a writer that appends the sample content the
client sends, and a reader that decodes it from a buffer. A ``MORE``
message bundles several other messages, each preceded by its length
(tag plus payload) and its tag.
"""

from __future__ import annotations

import enum
from dataclasses import dataclass
from itertools import chain
from typing import Callable, Union

from .buffer import ProtoBuffer
from .codec import ProtoBufferError


class Tag(enum.IntEnum):
    """Tags of the messages the client understands."""

    WINDOW = 0x100
    COLOR = 0x101
    KEYCODE = 0x102
    LIGHT = 0x103
    MORE = 0x110
    TEST = 0xFFFFFFFF


class UnknownTagError(ValueError):
    """Raised for a tag that has no message kind."""

    def __init__(self, tag: int) -> None:
        self.tag = tag
        super().__init__(f"tag {tag} error")


Row = tuple[float, ...]
Matrix = tuple[Row, ...]


@dataclass(frozen=True)
class WindowData:
    """Camera state for two views: position, up and direction vectors, projection."""

    pos: Matrix
    up: Matrix
    direction: Matrix
    project: Matrix


@dataclass(frozen=True)
class KeyEvent:
    """A key code and what happened to the key."""

    code: int
    action: int


@dataclass(frozen=True)
class TestRecord:
    """One value of every encodable type, used to check the wire format."""

    int8: int
    uint8: int
    int16: int
    uint16: int
    int32: int
    uint32: int
    int64: int
    uint64: int
    float_value: float
    double_value: float
    text: str
    raw: bytes


Message = Union[WindowData, int, KeyEvent, TestRecord, list]


@dataclass(frozen=True)
class MoreItem:
    """One message inside a ``MORE`` bundle."""

    length: int
    tag: Tag
    value: Message


_PROJECTION_ROW = (0.1, 0.2, 0.3, 1.0)

WINDOW_SAMPLE = WindowData(
    pos=((0.10, 0.20, 0.30), (0.40, 0.5, 0.6)),
    up=((0.13, 0.24, 0.36), (0.43, 0.51, 0.62)),
    direction=((0.31, 0.42, 0.65), (0.76, 0.89, 0.91)),
    project=(_PROJECTION_ROW * 4, _PROJECTION_ROW * 4),
)
COLOR_SAMPLE = 2
KEY_SAMPLE = KeyEvent(code=0, action=1)
LIGHT_SAMPLE = 2
TEST_SAMPLE = TestRecord(
    int8=0x45,
    uint8=0xF2,
    int16=0x3343,
    uint16=0xFFFA,
    int32=0x69121928,
    uint32=0xFF671721,
    int64=0x77700000213,
    uint64=0xFF33232323888,
    float_value=434034.012,
    double_value=8945239.6565,
    text="windows callbacks32",
    raw=bytes([0xEE, 0xCC, 0xAA, 0x44, 0x66, 0x99, 0x22]).ljust(16, b"\0"),
)
MORE_TAGS = (Tag.WINDOW, Tag.COLOR, Tag.KEYCODE, Tag.LIGHT, Tag.TEST)
RAW_SIZE = 16


def _tag(tag: int) -> Tag:
    try:
        return Tag(tag)
    except ValueError:
        raise UnknownTagError(tag) from None


# -- writing -----------------------------------------------------------------


def write_window_data(buf: ProtoBuffer) -> None:
    """Append the sample window state."""
    s = WINDOW_SAMPLE
    for value in chain.from_iterable(chain(s.pos, s.up, s.direction, s.project)):
        buf.write_float(value)


def write_color_data(buf: ProtoBuffer) -> None:
    """Append the sample colour."""
    buf.write_uint32(COLOR_SAMPLE)


def write_key_data(buf: ProtoBuffer) -> None:
    """Append the sample key event."""
    buf.write_uint32(KEY_SAMPLE.code)
    buf.write_uint32(KEY_SAMPLE.action)


def write_light_data(buf: ProtoBuffer) -> None:
    """Append the sample light value."""
    buf.write_uint32(LIGHT_SAMPLE)


def write_test_data(buf: ProtoBuffer) -> None:
    """Append one value of every type."""
    s = TEST_SAMPLE
    buf.write_int8(s.int8)
    buf.write_uint8(s.uint8)
    buf.write_int16(s.int16)
    buf.write_uint16(s.uint16)
    buf.write_int32(s.int32)
    buf.write_uint32(s.uint32)
    buf.write_int64(s.int64)
    buf.write_uint64(s.uint64)
    buf.write_float(s.float_value)
    buf.write_double(s.double_value)
    buf.write_cstring(s.text)
    buf.write(s.raw)


def write_more_data(buf: ProtoBuffer) -> None:
    """Append a bundle holding one sample of every other message kind."""
    buf.write_uint32(len(MORE_TAGS))
    for tag in MORE_TAGS:
        payload = build_payload(tag)
        buf.write_uint32(len(payload) + 4)
        buf.write_uint32(tag)
        buf.write(payload)


_WRITERS: dict[Tag, Callable[[ProtoBuffer], None]] = {
    Tag.WINDOW: write_window_data,
    Tag.COLOR: write_color_data,
    Tag.KEYCODE: write_key_data,
    Tag.LIGHT: write_light_data,
    Tag.MORE: write_more_data,
    Tag.TEST: write_test_data,
}


def build_payload(tag: int) -> bytes:
    """Return the sample payload sent for ``tag``."""
    buf = ProtoBuffer()
    _WRITERS[_tag(tag)](buf)
    return buf.data


# -- reading -----------------------------------------------------------------


def _read_matrix(buf: ProtoBuffer, rows: int, cols: int) -> Matrix:
    return tuple(tuple(buf.read_float() for _ in range(cols)) for _ in range(rows))


def read_window(buf: ProtoBuffer) -> WindowData:
    """Read a window state."""
    pos = _read_matrix(buf, 2, 3)
    up = _read_matrix(buf, 2, 3)
    direction = _read_matrix(buf, 2, 3)
    project = _read_matrix(buf, 2, 16)
    return WindowData(pos=pos, up=up, direction=direction, project=project)


def read_color(buf: ProtoBuffer) -> int:
    """Read a colour value."""
    return buf.read_uint32()


def read_keycode(buf: ProtoBuffer) -> KeyEvent:
    """Read a key event."""
    code = buf.read_uint32()
    action = buf.read_uint32()
    return KeyEvent(code=code, action=action)


def read_light(buf: ProtoBuffer) -> int:
    """Read a light value."""
    return buf.read_uint32()


def read_test(buf: ProtoBuffer) -> TestRecord:
    """Read one value of every type."""
    return TestRecord(
        int8=buf.read_int8(),
        uint8=buf.read_uint8(),
        int16=buf.read_int16(),
        uint16=buf.read_uint16(),
        int32=buf.read_int32(),
        uint32=buf.read_uint32(),
        int64=buf.read_int64(),
        uint64=buf.read_uint64(),
        float_value=buf.read_float(),
        double_value=buf.read_double(),
        text=buf.read_cstring(),
        raw=buf.read(RAW_SIZE),
    )


def read_more(buf: ProtoBuffer) -> list[MoreItem]:
    """Read a bundle of messages; bundles may not be nested."""
    count = buf.read_uint32()
    items: list[MoreItem] = []
    for _ in range(count):
        length = buf.read_uint32()
        tag = buf.read_uint32()
        if tag == Tag.MORE:
            raise ProtoBufferError(f"tag {tag} cannot be nested in a bundle")
        kind = _tag(tag)
        items.append(MoreItem(length=length, tag=kind, value=decode(kind, buf)))
    return items


_READERS: dict[Tag, Callable[[ProtoBuffer], Message]] = {
    Tag.WINDOW: read_window,
    Tag.COLOR: read_color,
    Tag.KEYCODE: read_keycode,
    Tag.LIGHT: read_light,
    Tag.MORE: read_more,
    Tag.TEST: read_test,
}


def decode(tag: int, buf: ProtoBuffer) -> Message:
    """Read the message of kind ``tag`` from ``buf``."""
    return _READERS[_tag(tag)](buf)


_NEXT = {
    Tag.WINDOW: Tag.COLOR,
    Tag.COLOR: Tag.KEYCODE,
    Tag.KEYCODE: Tag.LIGHT,
    Tag.LIGHT: Tag.MORE,
    Tag.MORE: Tag.TEST,
    Tag.TEST: Tag.WINDOW,
}


def next_tag(tag: int) -> Tag:
    """The tag sent after ``tag`` in the client's rotation."""
    return _NEXT[_tag(tag)]