# netcore

netcore is a small TCP messaging client. Every message goes on the wire as a frame:

| field  | size             | meaning                          |
|--------|------------------|----------------------------------|
| length | 4 bytes, big end | tag size plus payload size       |
| tag    | 4 bytes, big end | message type                     |
| data   | length − 4 bytes | payload                          |

Tags below `0x100` are internal. When a frame with tag `0` arrives, the client closes the
connection it came on. Frames with other internal tags are dropped. When the client
disconnects, it first sends a goodbye frame: length 8, with an all-zero tag and value.

Payloads are built and parsed with `ProtoBuffer`, a growable byte buffer. It has typed
sequential writes and reads and is big-endian by default.

## Install

```
pip install .
```

## Buffer

```python
from netcore.buffer import ProtoBuffer

buf = ProtoBuffer()
buf.write_uint32(0x101)
buf.write_float(0.5)
buf.write_cstring("hello")

assert buf.read_uint32() == 0x101
assert buf.read_float() == 0.5
assert buf.read_cstring() == "hello"
```

`ProtoBuffer` has methods `write_int8` … `write_uint64`, `write_float`, `write_double`,
`write_cstring` and `write`, and the `read_*` methods that match them. It also has these
properties:

* `data`
* `size`
* `position`
* `capacity`
* `byte_order`

`reset()` empties the buffer and keeps its storage. A read past the end of the content
raises `ProtoBufferError`.

`IndexedBuffer` in `netcore.indexed` adds `set_*` and `get_*` access at a fixed byte offset.
This access works only within content that has already been written. It changes neither
the size nor the read position.

The low-level encoders live in `netcore.codec`: `pack`, `unpack`, `encode_cstring` and
`find_cstring`. They use the `Kind` and `ByteOrder` enums.

## Connection

`netcore.connection.Connection` wraps a single socket. It offers:

* `connect(address, port)`
* `send(data)`, which sends raw bytes
* `recv()`, which returns the body of one length-prefixed frame
* `select(timeout_ms, kind)`
* `close()`
* `disconnect()`, which sends the goodbye frame and then closes

When a frame cannot be read whole, `recv()` raises `FrameError`.

## Client

```python
from netcore.client import NetClient, NetCallback

class Printer(NetCallback):
    def recv(self, tag, data):
        print(hex(tag), data)

client = NetClient.singleton()
client.init(Printer())
client.add("127.0.0.1", 8008)
client.send(0x101, b"\x00\x00\x00\x02")
client.exit()
```

`NetClient` runs a sender thread and a receiver thread. Each packet passed to `send` is
queued for every connected server. Each frame with a tag of `0x100` or above is handed to
the callback.

* `remove(address)` disconnects every connection to that address.
* Calling an operation in the wrong state raises `ClientStateError`.
* Calling `send` with no server connected raises `NoConnectionError`.
* `encode_packet(tag, data)` builds a single frame.

## Demo message set

`netcore.messages` defines these demo messages:

* window (`0x100`)
* color (`0x101`)
* key code (`0x102`)
* light (`0x103`)
* composite "more" (`0x110`)
* test record (`0xFFFFFFFF`)

`build_payload(tag)` returns the sample payload for a tag. `decode(tag, buf)` reads a
message back from a buffer. `next_tag(tag)` gives the next tag in the send rotation. An
unknown tag raises `UnknownTagError`.

## Command line

```
netcore-client 127.0.0.1
```

This connects to port 8008 and sends each demo message in turn, one per second. Every
message that arrives is printed as a hex dump followed by its decoded contents.

Options:

* `--port` sets the server port.
* `--interval` sets the number of seconds between messages.
* `--count` stops after that many messages.

## What it does not do

netcore is only the client side. It has no server that accepts connections or answers
messages, so you need a peer that speaks the frame format above. Addresses are IPv4 by
default.