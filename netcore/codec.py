"""Fixed-width value encoding shared by the protocol buffers.

Every value is stored in a fixed number of bytes in either big-endian
or little-endian order. Integers are truncated to their width the way a
C cast would, floats use IEEE-754 single or double precision, and
strings travel NUL-terminated.
"""

from __future__ import annotations

import enum
import struct


class ProtoBufferError(ValueError):
    """Raised when a value cannot be encoded or the data cannot be decoded."""


class ByteOrder(enum.IntEnum):
    """Byte order of multi-byte values."""

    LITTLE = 0
    BIG = 1

    @property
    def prefix(self) -> str:
        return ">" if self is ByteOrder.BIG else "<"


class Kind(enum.Enum):
    """A fixed-width value type and its struct format code."""

    INT8 = "b"
    UINT8 = "B"
    INT16 = "h"
    UINT16 = "H"
    INT32 = "i"
    UINT32 = "I"
    INT64 = "q"
    UINT64 = "Q"
    FLOAT = "f"
    DOUBLE = "d"

    def size(self) -> int:
        """Number of bytes a value of this kind occupies."""
        return struct.calcsize("<" + self.value)

    @property
    def is_float(self) -> bool:
        return self in (Kind.FLOAT, Kind.DOUBLE)

    @property
    def is_signed(self) -> bool:
        return self.value.islower()


def _truncate(kind: Kind, value: int) -> int:
    bits = kind.size() * 8
    value &= (1 << bits) - 1
    if kind.is_signed and value >= 1 << (bits - 1):
        value -= 1 << bits
    return value


def pack(kind: Kind, value: int | float, order: ByteOrder = ByteOrder.BIG) -> bytes:
    """Encode ``value`` as ``kind`` in the given byte order.

    Integers wider than the kind are truncated to its width.
    """
    order = ByteOrder(order)
    fmt = order.prefix + kind.value
    if kind.is_float:
        if isinstance(value, bool) or not isinstance(value, (int, float)):
            raise TypeError(f"{kind.name} needs a number, got {type(value).__name__}")
        try:
            return struct.pack(fmt, float(value))
        except (OverflowError, struct.error) as exc:
            raise ProtoBufferError(f"cannot encode {value!r} as {kind.name}") from exc
    if isinstance(value, bool) or not isinstance(value, int):
        raise TypeError(f"{kind.name} needs an integer, got {type(value).__name__}")
    return struct.pack(fmt, _truncate(kind, value))


def unpack(kind: Kind, data: bytes, order: ByteOrder = ByteOrder.BIG) -> int | float:
    """Decode a value of ``kind`` from the first bytes of ``data``."""
    order = ByteOrder(order)
    size = kind.size()
    if len(data) < size:
        raise ProtoBufferError(
            f"{kind.name} needs {size} bytes, only {len(data)} available"
        )
    (value,) = struct.unpack(order.prefix + kind.value, bytes(data[:size]))
    return value


def encode_cstring(value: str | bytes) -> bytes:
    """Encode a string NUL-terminated.

    As with a C string, anything after an embedded NUL is dropped.
    """
    if isinstance(value, str):
        raw = value.encode("utf-8", errors="surrogateescape")
    elif isinstance(value, (bytes, bytearray, memoryview)):
        raw = bytes(value)
    else:
        raise TypeError(f"cannot encode {type(value).__name__} as a C string")
    end = raw.find(b"\0")
    if end >= 0:
        raw = raw[:end]
    return raw + b"\0"


def find_cstring(data: bytes, start: int = 0) -> tuple[str, int]:
    """Find the NUL-terminated string beginning at ``start``.

    Returns the string and the position just after its terminator.
    """
    if start < 0 or start >= len(data):
        raise ProtoBufferError(f"no string at position {start}")
    end = bytes(data).find(b"\0", start)
    if end < 0:
        raise ProtoBufferError(f"string at position {start} is not terminated")
    text = bytes(data[start:end]).decode("utf-8", errors="surrogateescape")
    return text, end + 1