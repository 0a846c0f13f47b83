"""Random access to the content of a protocol buffer.

``IndexedBuffer`` adds positional ``set_*`` and ``get_*`` methods to
``ProtoBuffer``. They work only within the bytes already written. They
never change the size of the content or the read position.
"""

from __future__ import annotations

from .buffer import ProtoBuffer
from .codec import Kind, ProtoBufferError, encode_cstring, find_cstring, pack, unpack


class IndexedBuffer(ProtoBuffer):
    """A ``ProtoBuffer`` whose content can be overwritten and read at any index."""

    # -- internals ---------------------------------------------------------

    def _check(self, index: int, length: int) -> None:
        if index < 0 or index + length > self.size:
            raise ProtoBufferError(
                f"{length} bytes at index {index} fall outside "
                f"the content of {self.size} bytes"
            )

    def _store(self, index: int, raw: bytes) -> None:
        self._check(index, len(raw))
        self._buf[index : index + len(raw)] = raw

    def _set(self, kind: Kind, index: int, value: int | float) -> None:
        self._check(index, kind.size())
        self._store(index, pack(kind, value, self.byte_order))

    def _get(self, kind: Kind, index: int) -> int | float:
        size = kind.size()
        self._check(index, size)
        return unpack(kind, self._buf[index : index + size], self.byte_order)

    # -- overwriting -------------------------------------------------------

    def set_int8(self, index: int, value: int) -> None:
        self._set(Kind.INT8, index, value)

    def set_uint8(self, index: int, value: int) -> None:
        self._set(Kind.UINT8, index, value)

    def set_int16(self, index: int, value: int) -> None:
        self._set(Kind.INT16, index, value)

    def set_uint16(self, index: int, value: int) -> None:
        self._set(Kind.UINT16, index, value)

    def set_int32(self, index: int, value: int) -> None:
        self._set(Kind.INT32, index, value)

    def set_uint32(self, index: int, value: int) -> None:
        self._set(Kind.UINT32, index, value)

    def set_int64(self, index: int, value: int) -> None:
        self._set(Kind.INT64, index, value)

    def set_uint64(self, index: int, value: int) -> None:
        self._set(Kind.UINT64, index, value)

    def set_float(self, index: int, value: float) -> None:
        self._set(Kind.FLOAT, index, value)

    def set_double(self, index: int, value: float) -> None:
        self._set(Kind.DOUBLE, index, value)

    def set_cstring(self, index: int, value: str | bytes) -> None:
        """Overwrite content at ``index`` with a NUL-terminated string."""
        self._store(index, encode_cstring(value))

    def set(self, index: int, data: bytes | bytearray | memoryview) -> None:
        """Overwrite content at ``index`` with raw bytes."""
        if not isinstance(data, (bytes, bytearray, memoryview)):
            raise TypeError(f"cannot set {type(data).__name__} as bytes")
        self._store(index, bytes(data))

    # -- reading at an index -----------------------------------------------

    def get_int8(self, index: int) -> int:
        return self._get(Kind.INT8, index)

    def get_uint8(self, index: int) -> int:
        return self._get(Kind.UINT8, index)

    def get_int16(self, index: int) -> int:
        return self._get(Kind.INT16, index)

    def get_uint16(self, index: int) -> int:
        return self._get(Kind.UINT16, index)

    def get_int32(self, index: int) -> int:
        return self._get(Kind.INT32, index)

    def get_uint32(self, index: int) -> int:
        return self._get(Kind.UINT32, index)

    def get_int64(self, index: int) -> int:
        return self._get(Kind.INT64, index)

    def get_uint64(self, index: int) -> int:
        return self._get(Kind.UINT64, index)

    def get_float(self, index: int) -> float:
        return self._get(Kind.FLOAT, index)

    def get_double(self, index: int) -> float:
        return self._get(Kind.DOUBLE, index)

    def get_cstring(self, index: int) -> str:
        """Return the NUL-terminated string that starts at ``index``."""
        text, _ = find_cstring(self._buf[: self.size], index)
        return text

    def get(self, index: int, size: int) -> bytes:
        """Return up to ``size`` bytes starting at ``index``."""
        if size <= 0:
            raise ValueError(f"size must be positive, got {size}")
        if index < 0 or index >= self.size:
            raise ProtoBufferError(
                f"index {index} outside the content of {self.size} bytes"
            )
        count = min(size, self.size - index)
        return bytes(self._buf[index : index + count])