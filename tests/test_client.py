import queue
import socket

import pytest

from netcore.client import (
    ClientStateError,
    ClientStatus,
    NetCallback,
    NetClient,
    NoConnectionError,
    encode_packet,
)


class Collector(NetCallback):
    def __init__(self):
        self.frames = queue.Queue()

    def recv(self, tag, data):
        self.frames.put((tag, data))


def _read(sock, size):
    data = b""
    while len(data) < size:
        chunk = sock.recv(size - len(data))
        if not chunk:
            break
        data += chunk
    return data


def _read_packet(sock):
    header = _read(sock, 4)
    return header + _read(sock, int.from_bytes(header, "big"))


@pytest.fixture
def server():
    srv = socket.socket()
    srv.bind(("127.0.0.1", 0))
    srv.listen()
    srv.settimeout(5)
    yield srv
    srv.close()


@pytest.fixture
def running(server):
    client = NetClient()
    callback = Collector()
    client.init(callback)
    client.add("127.0.0.1", server.getsockname()[1])
    peer, _ = server.accept()
    peer.settimeout(5)
    yield client, callback, peer
    client.exit()
    peer.close()


def test_encode_packet_layout():
    assert encode_packet(0x100, b"ab") == b"\x00\x00\x00\x06\x00\x00\x01\x00ab"


def test_encode_packet_rejects_wide_tag():
    with pytest.raises(ValueError):
        encode_packet(1 << 32, b"")


def test_new_client_is_stopped():
    assert NetClient().status is ClientStatus.STOPPED


def test_operations_before_init_raise():
    client = NetClient()
    with pytest.raises(ClientStateError):
        client.send(0x100, b"")
    with pytest.raises(ClientStateError):
        client.add("127.0.0.1", 1)
    with pytest.raises(ClientStateError):
        client.remove("127.0.0.1")


def test_init_twice_raises():
    client = NetClient()
    client.init(Collector())
    try:
        assert client.status is ClientStatus.RUNNING
        with pytest.raises(ClientStateError):
            client.init(Collector())
    finally:
        client.exit()


def test_send_without_connection_raises():
    client = NetClient()
    client.init(Collector())
    try:
        with pytest.raises(NoConnectionError):
            client.send(0x101, b"\x00")
    finally:
        client.exit()


def test_exit_stops_and_allows_restart():
    client = NetClient()
    client.init(Collector())
    client.exit()
    assert client.status is ClientStatus.STOPPED
    client.init(Collector())
    assert client.status is ClientStatus.RUNNING
    client.exit()
    assert client.status is ClientStatus.STOPPED


def test_add_refused_raises():
    probe = socket.socket()
    probe.bind(("127.0.0.1", 0))
    port = probe.getsockname()[1]
    probe.close()
    client = NetClient()
    client.init(Collector())
    try:
        with pytest.raises(OSError):
            client.add("127.0.0.1", port)
    finally:
        client.exit()


def test_send_reaches_server(running):
    client, _, peer = running
    client.send(0x101, b"\x00\x00\x00\x02")
    assert _read_packet(peer) == encode_packet(0x101, b"\x00\x00\x00\x02")


def test_sends_arrive_in_order(running):
    client, _, peer = running
    client.send(0x102, b"a")
    client.send(0x103, b"bc")
    assert [_read_packet(peer), _read_packet(peer)] == [
        encode_packet(0x102, b"a"),
        encode_packet(0x103, b"bc"),
    ]


def test_received_packet_goes_to_callback(running):
    _, callback, peer = running
    peer.sendall(encode_packet(0x200, b"hi"))
    assert callback.frames.get(timeout=5) == (0x200, b"hi")


def test_internal_tags_are_not_dispatched(running):
    _, callback, peer = running
    peer.sendall(encode_packet(5, b"zz"))
    peer.sendall(encode_packet(0x110, b"ok"))
    assert callback.frames.get(timeout=5) == (0x110, b"ok")
    assert callback.frames.empty()


def test_tag_zero_closes_connection(running):
    _, _, peer = running
    peer.sendall(encode_packet(0, b""))
    assert peer.recv(1) == b""


def test_remove_sends_goodbye(running):
    client, _, peer = running
    assert client.remove("10.0.0.1") is False
    assert client.remove("127.0.0.1") is True
    assert _read(peer, 12) == b"\x00\x00\x00\x08" + bytes(8)
    with pytest.raises(NoConnectionError):
        client.send(0x100, b"")


def test_singleton_is_shared():
    first = NetClient.singleton()
    second = NetClient.singleton()
    assert first is second
    assert first.status is ClientStatus.STOPPED
    assert NetClient() is not first


def test_callback_is_abstract():
    with pytest.raises(TypeError):
        NetCallback()