"""A growable byte buffer with a write end and a read cursor.

Values are appended at the end of the buffer and read back from the
current read position, in the buffer's byte order (big-endian unless
told otherwise). Storage grows in steps of 1024 bytes.
"""

from __future__ import annotations

from .codec import (
    ByteOrder,
    Kind,
    ProtoBufferError,
    encode_cstring,
    find_cstring,
    pack,
    unpack,
)

GROWTH_STEP = 1024
DEFAULT_CAPACITY = 1024


class ProtoBuffer:
    """Byte buffer that packs fixed-width values and reads them back in order."""

    def __init__(
        self,
        byte_order: ByteOrder = ByteOrder.BIG,
        capacity: int = DEFAULT_CAPACITY,
    ) -> None:
        if capacity < 0:
            raise ValueError(f"capacity must not be negative, got {capacity}")
        self._order = ByteOrder(byte_order)
        self._buf = bytearray(capacity)
        self._size = 0
        self._pos = 0

    # -- state -------------------------------------------------------------

    def __len__(self) -> int:
        return self._size

    def __bytes__(self) -> bytes:
        return bytes(self._buf[: self._size])

    def __repr__(self) -> str:
        return (
            f"{type(self).__name__}(size={self._size}, position={self._pos}, "
            f"capacity={len(self._buf)}, byte_order={self._order.name})"
        )

    @property
    def data(self) -> bytes:
        """The bytes written so far."""
        return bytes(self._buf[: self._size])

    @property
    def size(self) -> int:
        """Number of bytes of content; the write position."""
        return self._size

    @size.setter
    def size(self, value: int) -> None:
        if value < 0:
            raise ValueError(f"size must not be negative, got {value}")
        self._reserve(value)
        self._size = value

    @property
    def position(self) -> int:
        """The read position."""
        return self._pos

    @position.setter
    def position(self, value: int) -> None:
        if value < 0 or value > self._size:
            raise ProtoBufferError(
                f"position {value} outside the content of {self._size} bytes"
            )
        self._pos = value

    @property
    def capacity(self) -> int:
        """Bytes of storage currently held."""
        return len(self._buf)

    @capacity.setter
    def capacity(self, value: int) -> None:
        if value < 0:
            raise ValueError(f"capacity must not be negative, got {value}")
        current = len(self._buf)
        if value > current:
            self._buf.extend(bytes(value - current))
        elif value < current:
            del self._buf[value:]
            self._size = min(self._size, value)
            self._pos = min(self._pos, value)

    @property
    def byte_order(self) -> ByteOrder:
        """Byte order used for multi-byte values."""
        return self._order

    @byte_order.setter
    def byte_order(self, value: ByteOrder) -> None:
        self._order = ByteOrder(value)

    def reset(self) -> None:
        """Empty the buffer and rewind the read position, keeping storage."""
        self._size = 0
        self._pos = 0

    @property
    def remaining(self) -> int:
        """Bytes left to read."""
        return self._size - self._pos

    # -- internals ---------------------------------------------------------

    def _reserve(self, extra: int) -> None:
        if len(self._buf) >= self._size + extra:
            return
        step = (extra // GROWTH_STEP + 1) * GROWTH_STEP
        self._buf.extend(bytes(step))

    def _append(self, raw: bytes) -> None:
        self._reserve(len(raw))
        self._buf[self._size : self._size + len(raw)] = raw
        self._size += len(raw)

    def _write(self, kind: Kind, value: int | float) -> None:
        self._append(pack(kind, value, self._order))

    def _read(self, kind: Kind) -> int | float:
        size = kind.size()
        if self._pos + size > self._size:
            raise ProtoBufferError(
                f"{kind.name} needs {size} bytes, only {self.remaining} left to read"
            )
        value = unpack(kind, self._buf[self._pos : self._pos + size], self._order)
        self._pos += size
        return value

    # -- writing -----------------------------------------------------------

    def write_int8(self, value: int) -> None:
        self._write(Kind.INT8, value)

    def write_uint8(self, value: int) -> None:
        self._write(Kind.UINT8, value)

    def write_int16(self, value: int) -> None:
        self._write(Kind.INT16, value)

    def write_uint16(self, value: int) -> None:
        self._write(Kind.UINT16, value)

    def write_int32(self, value: int) -> None:
        self._write(Kind.INT32, value)

    def write_uint32(self, value: int) -> None:
        self._write(Kind.UINT32, value)

    def write_int64(self, value: int) -> None:
        self._write(Kind.INT64, value)

    def write_uint64(self, value: int) -> None:
        self._write(Kind.UINT64, value)

    def write_float(self, value: float) -> None:
        self._write(Kind.FLOAT, value)

    def write_double(self, value: float) -> None:
        self._write(Kind.DOUBLE, value)

    def write_cstring(self, value: str | bytes) -> None:
        """Append a NUL-terminated string."""
        self._append(encode_cstring(value))

    def write(self, data: bytes | bytearray | memoryview) -> None:
        """Append raw bytes."""
        if not isinstance(data, (bytes, bytearray, memoryview)):
            raise TypeError(f"cannot write {type(data).__name__} as bytes")
        self._append(bytes(data))

    # -- reading -----------------------------------------------------------

    def read_int8(self) -> int:
        return self._read(Kind.INT8)

    def read_uint8(self) -> int:
        return self._read(Kind.UINT8)

    def read_int16(self) -> int:
        return self._read(Kind.INT16)

    def read_uint16(self) -> int:
        return self._read(Kind.UINT16)

    def read_int32(self) -> int:
        return self._read(Kind.INT32)

    def read_uint32(self) -> int:
        return self._read(Kind.UINT32)

    def read_int64(self) -> int:
        return self._read(Kind.INT64)

    def read_uint64(self) -> int:
        return self._read(Kind.UINT64)

    def read_float(self) -> float:
        return self._read(Kind.FLOAT)

    def read_double(self) -> float:
        return self._read(Kind.DOUBLE)

    def read_cstring(self) -> str:
        """Read a NUL-terminated string and move past its terminator."""
        text, end = find_cstring(self._buf[: self._size], self._pos)
        self._pos = end
        return text

    def read(self, size: int) -> bytes:
        """Read up to ``size`` raw bytes; fewer if less content is left."""
        if size <= 0:
            raise ValueError(f"size must be positive, got {size}")
        if self._pos >= self._size:
            raise ProtoBufferError("no data left to read")
        count = min(size, self._size - self._pos)
        chunk = bytes(self._buf[self._pos : self._pos + count])
        self._pos += count
        return chunk