"""A client that keeps several server connections and talks tagged packets.

Each packet is a four-byte big-endian length, a four-byte big-endian
tag and the payload; the length counts the tag and the payload. Sending
and receiving happen on two background threads. Packets with a tag
below 0x100 are internal: tag 0 closes the connection it came on, the
others are dropped. All other packets go to the callback.
"""

from __future__ import annotations

import abc
import enum
import logging
import select as _select
import struct
import threading
from collections import deque

from .connection import Connection

log = logging.getLogger(__name__)

_HEADER = struct.Struct(">II")
INTERNAL_TAG_LIMIT = 0x100
RECV_POLL_SECONDS = 1.0


class ClientStatus(enum.IntEnum):
    """Life-cycle state of a :class:`NetClient`."""

    STOPPED = 0
    INITIALIZING = 1
    RUNNING = 2
    EXITING = 3


class ClientStateError(RuntimeError):
    """Raised when an operation does not suit the client's current state."""


class NoConnectionError(RuntimeError):
    """Raised when sending while no server is connected."""


class NetCallback(abc.ABC):
    """Receiver of packets that arrive from servers."""

    @abc.abstractmethod
    def recv(self, tag: int, data: bytes) -> None:
        """Handle one packet's tag and payload."""


def encode_packet(tag: int, data: bytes | bytearray | memoryview) -> bytes:
    """Frame ``data`` with its length and ``tag``."""
    if not 0 <= tag <= 0xFFFFFFFF:
        raise ValueError(f"tag {tag} does not fit in 32 bits")
    payload = bytes(data)
    return _HEADER.pack(len(payload) + 4, tag) + payload


class NetClient:
    """Sends tagged packets to every connected server and dispatches replies."""

    _instance: NetClient | None = None
    _instance_lock = threading.Lock()

    def __init__(self) -> None:
        self._lock = threading.Lock()
        self._wake = threading.Condition(self._lock)
        self._status = ClientStatus.STOPPED
        self._connections: list[Connection] = []
        self._pending: deque[bytes] = deque()
        self._threads: list[threading.Thread] = []
        self._active = 0
        self._callback: NetCallback | None = None

    @classmethod
    def singleton(cls) -> NetClient:
        """The process-wide shared client."""
        if cls._instance is None:
            with cls._instance_lock:
                if cls._instance is None:
                    cls._instance = cls()
        return cls._instance

    @property
    def status(self) -> ClientStatus:
        with self._lock:
            return self._status

    def _require_running(self) -> None:
        if self._status is not ClientStatus.RUNNING:
            raise ClientStateError(f"client is {self._status.name.lower()}, not running")

    # -- public operations -------------------------------------------------

    def init(self, callback: NetCallback) -> None:
        """Start the sending and receiving threads."""
        with self._lock:
            if self._status is not ClientStatus.STOPPED:
                raise ClientStateError(f"client is already {self._status.name.lower()}")
            self._status = ClientStatus.RUNNING
            self._callback = callback
            self._threads = [
                threading.Thread(target=self._send_loop, name="netclient-send", daemon=True),
                threading.Thread(target=self._recv_loop, name="netclient-recv", daemon=True),
            ]
            self._active = len(self._threads)
            threads = list(self._threads)
        for thread in threads:
            thread.start()

    def add(self, address: str, port: int) -> None:
        """Connect to a server; raises ``OSError`` when that fails."""
        with self._lock:
            self._require_running()
        connection = Connection()
        try:
            connection.connect(address, port)
        except OSError:
            log.warning("cannot add server %s port %d", address, port)
            raise
        with self._wake:
            self._connections.append(connection)
            self._wake.notify_all()

    def remove(self, address: str) -> bool:
        """Disconnect every connection to ``address``; True if any was found.

        Connections that have already closed are dropped as well.
        """
        found = False
        with self._wake:
            self._require_running()
            kept: list[Connection] = []
            for connection in self._connections:
                if connection.address == address:
                    if connection.connected:
                        connection.disconnect()
                    connection.close()
                    found = True
                elif connection.connected:
                    kept.append(connection)
            self._connections = kept
            self._wake.notify_all()
        return found

    def exit(self) -> None:
        """Stop the background threads and close all connections."""
        with self._wake:
            if self._status is ClientStatus.STOPPED:
                return
            self._status = ClientStatus.EXITING
            self._wake.notify_all()
            threads = list(self._threads)
        current = threading.current_thread()
        for thread in threads:
            if thread is not current:
                thread.join()
        with self._lock:
            connections, self._connections = self._connections, []
            self._pending.clear()
        for connection in connections:
            connection.close()

    def send(self, tag: int, data: bytes | bytearray | memoryview) -> None:
        """Queue a packet for every connected server."""
        packet = encode_packet(tag, data)
        with self._wake:
            self._require_running()
            if not self._connections:
                raise NoConnectionError("no server is connected")
            self._pending.append(packet)
            self._wake.notify_all()

    # -- background threads ------------------------------------------------

    def _thread_done(self) -> None:
        with self._wake:
            self._active -= 1
            if self._active == 0:
                self._status = ClientStatus.STOPPED
            self._wake.notify_all()

    def _drop(self, failed: list[Connection]) -> None:
        with self._lock:
            self._connections = [c for c in self._connections if c not in failed]

    def _send_loop(self) -> None:
        try:
            while True:
                with self._wake:
                    while self._status is ClientStatus.RUNNING and not (
                        self._pending and self._connections
                    ):
                        self._wake.wait()
                    if self._status is not ClientStatus.RUNNING:
                        break
                    packets = list(self._pending)
                    self._pending.clear()
                for packet in packets:
                    with self._lock:
                        connections = list(self._connections)
                    failed: list[Connection] = []
                    for connection in connections:
                        if not connection.connected:
                            failed.append(connection)
                            continue
                        try:
                            connection.send(packet)
                        except OSError as exc:
                            log.debug("send to %s failed: %s", connection.address, exc)
                            connection.disconnect()
                            failed.append(connection)
                    if failed:
                        self._drop(failed)
        finally:
            self._thread_done()

    def _recv_loop(self) -> None:
        try:
            while True:
                with self._wake:
                    while self._status is ClientStatus.RUNNING and not self._connections:
                        self._wake.wait()
                    if self._status is not ClientStatus.RUNNING:
                        break
                    self._connections = [c for c in self._connections if c.connected]
                    by_fd = {c.socket_id: c for c in self._connections}
                if not by_fd:
                    continue
                try:
                    readable, _, _ = _select.select(list(by_fd), [], [], RECV_POLL_SECONDS)
                except (OSError, ValueError):
                    continue
                for fd in readable:
                    self._receive(by_fd[fd])
        finally:
            self._thread_done()

    def _receive(self, connection: Connection) -> None:
        try:
            frame = connection.recv()
        except OSError as exc:
            log.debug("receive from %s failed: %s", connection.address, exc)
            connection.disconnect()
            return
        if len(frame) < 4:
            log.debug("frame from %s too short for a tag", connection.address)
            connection.disconnect()
            return
        tag = int.from_bytes(frame[:4], "big")
        if tag < INTERNAL_TAG_LIMIT:
            if tag == 0:
                connection.close()
            log.debug("internal tag %d from %s", tag, connection.address)
            return
        callback = self._callback
        if callback is None:
            return
        try:
            callback.recv(tag, frame[4:])
        except Exception:
            log.exception("callback failed for tag %#x", tag)