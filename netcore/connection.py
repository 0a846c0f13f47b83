"""A single framed TCP connection.

Frames on the wire carry a four-byte big-endian length followed by that
many bytes of body. All socket use goes through one lock, so a
connection may be shared between a sending and a receiving thread.
"""

from __future__ import annotations

import enum
import select as _select
import socket
import struct
import threading

_LENGTH = struct.Struct(">I")

# A frame of length 8 whose body is an all-zero tag and value: tells the
# peer that this side is going away.
GOODBYE_FRAME = b"\x00\x00\x00\x08" + bytes(8)


class SelectKind(enum.IntEnum):
    """What to wait for in :meth:`Connection.select`."""

    READ = 0
    WRITE = 1
    EXCEPT = 2


class FrameError(ConnectionError):
    """Raised when a frame cannot be read whole."""


class Connection:
    """A socket that sends raw bytes and receives length-prefixed frames."""

    def __init__(self, address: str = "", sock: socket.socket | None = None) -> None:
        self._address = address
        self._sock = sock
        self._lock = threading.RLock()

    def __repr__(self) -> str:
        return f"{type(self).__name__}(address={self._address!r}, socket_id={self.socket_id})"

    def __enter__(self) -> Connection:
        return self

    def __exit__(self, *exc_info: object) -> None:
        self.close()

    # -- state -------------------------------------------------------------

    @property
    def address(self) -> str:
        """The address this connection was made to."""
        return self._address

    @property
    def socket_id(self) -> int:
        """The socket's file descriptor, or -1 when not connected."""
        with self._lock:
            return self._sock.fileno() if self._sock is not None else -1

    @property
    def connected(self) -> bool:
        """Whether an open socket is held."""
        return self.socket_id >= 0

    def _require_socket(self) -> socket.socket:
        sock = self._sock
        if sock is None or sock.fileno() < 0:
            raise ConnectionError(f"not connected to {self._address or 'any peer'}")
        return sock

    # -- operations --------------------------------------------------------

    def connect(
        self,
        address: str,
        port: int,
        family: int = socket.AF_INET,
        type: int = socket.SOCK_STREAM,
        proto: int = 0,
    ) -> None:
        """Open a connection to ``address``:``port``; raises ``OSError`` on failure."""
        sock = socket.socket(family, type, proto)
        try:
            sock.connect((address, port))
        except OSError:
            sock.close()
            raise
        with self._lock:
            previous = self._sock
            self._sock = sock
            self._address = address
        if previous is not None:
            previous.close()

    def send(self, data: bytes | bytearray | memoryview) -> int:
        """Send all of ``data`` and return the number of bytes sent."""
        payload = bytes(data)
        with self._lock:
            self._require_socket().sendall(payload)
        return len(payload)

    def recv(self) -> bytes:
        """Read one length-prefixed frame and return its body."""
        with self._lock:
            sock = self._require_socket()
            (size,) = _LENGTH.unpack(_read_exact(sock, _LENGTH.size))
            return _read_exact(sock, size)

    def select(self, timeout_ms: int, kind: SelectKind = SelectKind.READ) -> bool:
        """Wait up to ``timeout_ms`` for the socket to become ready.

        Returns False when the time runs out first.
        """
        kind = SelectKind(kind)
        with self._lock:
            sock = self._require_socket()
        waits: list[list[socket.socket]] = [[], [], []]
        waits[kind] = [sock]
        try:
            ready = _select.select(*waits, timeout_ms / 1000)
        except (OSError, ValueError) as exc:
            raise ConnectionError(f"select on {self._address} failed") from exc
        return any(ready)

    def close(self) -> bool:
        """Close the socket. Returns False if it was already closed."""
        with self._lock:
            if self._sock is None:
                return False
            self._sock.close()
            self._sock = None
            return True

    def disconnect(self) -> bool:
        """Tell the peer goodbye and close. Returns False if not connected."""
        with self._lock:
            if self._sock is None:
                return False
            try:
                self._sock.sendall(GOODBYE_FRAME)
            except OSError:
                pass
            self._sock.close()
            self._sock = None
            return True


def _read_exact(sock: socket.socket, size: int) -> bytes:
    data = bytearray()
    while len(data) < size:
        try:
            chunk = sock.recv(size - len(data))
        except OSError as exc:
            raise FrameError(f"read failed after {len(data)} of {size} bytes") from exc
        if not chunk:
            raise FrameError(f"connection closed after {len(data)} of {size} bytes")
        data += chunk
    return bytes(data)