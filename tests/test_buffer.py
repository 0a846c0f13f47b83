import pytest

from netcore.buffer import ProtoBuffer
from netcore.codec import ByteOrder, ProtoBufferError


def test_default_state():
    buf = ProtoBuffer()
    assert buf.byte_order is ByteOrder.BIG
    assert buf.capacity == 1024
    assert len(buf) == 0
    assert buf.position == 0
    assert bytes(buf) == b""


def test_big_endian_wire_bytes():
    buf = ProtoBuffer()
    buf.write_uint32(0x100)
    buf.write_int16(0x3343)
    assert buf.data == b"\x00\x00\x01\x00\x33\x43"


def test_little_endian_wire_bytes():
    buf = ProtoBuffer(ByteOrder.LITTLE)
    buf.write_uint32(0x100)
    buf.write_int16(0x3343)
    assert buf.data == b"\x00\x01\x00\x00\x43\x33"


@pytest.mark.parametrize("order", [ByteOrder.BIG, ByteOrder.LITTLE])
def test_round_trip_of_test_record(order):
    buf = ProtoBuffer(order)
    buf.write_int8(0x45)
    buf.write_uint8(0xF2)
    buf.write_int16(0x3343)
    buf.write_uint16(0xFFFA)
    buf.write_int32(0x69121928)
    buf.write_uint32(0xFF671721)
    buf.write_int64(0x77700000213)
    buf.write_uint64(0xFF33232323888)
    buf.write_float(434034.012)
    buf.write_double(8945239.6565)
    buf.write_cstring("windows callbacks32")
    vdata = bytes([0xEE, 0xCC, 0xAA, 0x44, 0x66, 0x99, 0x22]) + bytes(9)
    buf.write(vdata)

    assert buf.read_int8() == 0x45
    assert buf.read_uint8() == 0xF2
    assert buf.read_int16() == 0x3343
    assert buf.read_uint16() == 0xFFFA
    assert buf.read_int32() == 0x69121928
    assert buf.read_uint32() == 0xFF671721
    assert buf.read_int64() == 0x77700000213
    assert buf.read_uint64() == 0xFF33232323888
    assert buf.read_float() == pytest.approx(434034.012, rel=1e-6)
    assert buf.read_double() == 8945239.6565
    assert buf.read_cstring() == "windows callbacks32"
    assert buf.read(16) == vdata
    assert buf.position == len(buf)


def test_signed_reads_of_unsigned_writes():
    buf = ProtoBuffer()
    buf.write_uint8(0xF2)
    buf.write_uint16(0xFFFA)
    buf.position = 0
    assert buf.read_int8() == 0xF2 - 0x100
    assert buf.read_int16() == 0xFFFA - 0x10000


def test_integers_truncate_to_width():
    buf = ProtoBuffer()
    buf.write_uint8(0x1FF)
    assert buf.data == b"\xff"


def test_read_past_end_raises():
    buf = ProtoBuffer()
    buf.write_uint16(7)
    with pytest.raises(ProtoBufferError):
        buf.read_uint32()
    assert buf.position == 0
    assert buf.read_uint16() == 7
    with pytest.raises(ProtoBufferError):
        buf.read_uint8()


def test_read_returns_what_is_left():
    buf = ProtoBuffer()
    buf.write(b"abc")
    assert buf.read(16) == b"abc"
    with pytest.raises(ProtoBufferError):
        buf.read(1)


def test_read_rejects_non_positive_size():
    buf = ProtoBuffer()
    buf.write(b"abc")
    with pytest.raises(ValueError):
        buf.read(0)


def test_cstring_without_terminator_raises():
    buf = ProtoBuffer()
    buf.write(b"abc")
    with pytest.raises(ProtoBufferError):
        buf.read_cstring()
    assert buf.position == 0


def test_cstring_bytes_on_wire():
    buf = ProtoBuffer()
    buf.write_cstring("debug")
    assert buf.data == b"debug\0"


def test_reset_keeps_capacity_and_empties():
    buf = ProtoBuffer()
    buf.write(bytes(2000))
    cap = buf.capacity
    buf.reset()
    assert len(buf) == 0
    assert buf.position == 0
    assert buf.capacity == cap
    with pytest.raises(ProtoBufferError):
        buf.read_uint8()


def test_growth_keeps_content():
    buf = ProtoBuffer()
    payload = bytes(range(256)) * 5
    buf.write(payload)
    assert buf.capacity >= len(buf) == len(payload)
    assert buf.capacity % 1024 == 0
    assert buf.data == payload


def test_position_setter_bounds():
    buf = ProtoBuffer()
    buf.write_uint32(5)
    buf.position = 4
    assert buf.position == 4
    with pytest.raises(ProtoBufferError):
        buf.position = 5


def test_size_setter_grows_capacity():
    buf = ProtoBuffer(capacity=16)
    buf.size = 40
    assert len(buf) == 40
    assert buf.capacity >= 40


def test_shrinking_capacity_clamps_size_and_position():
    buf = ProtoBuffer()
    buf.write(b"0123456789")
    buf.position = 8
    buf.capacity = 4
    assert buf.capacity == 4
    assert len(buf) == 4
    assert buf.position == 4
    assert buf.data == b"0123"


def test_byte_order_setter_changes_reading():
    buf = ProtoBuffer()
    buf.write_uint16(0x0102)
    buf.byte_order = ByteOrder.LITTLE
    assert buf.byte_order is ByteOrder.LITTLE
    assert buf.read_uint16() == 0x0201


def test_write_rejects_non_bytes():
    buf = ProtoBuffer()
    with pytest.raises(TypeError):
        buf.write("text")
    with pytest.raises(TypeError):
        buf.write_uint32("1")
    assert len(buf) == 0


def test_negative_capacity_rejected():
    with pytest.raises(ValueError):
        ProtoBuffer(capacity=-1)