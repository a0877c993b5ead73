import io
import logging

import pytest

from framelink.core.buffer import Buffer
from framelink.core.models.byteorder import BIG_ENDIAN, LITTLE_ENDIAN, ByteOrder
from framelink.core.models.message import BytesMessage
from framelink.core.protocol.errors import (
    EndOfStream,
    PacketTooLarge,
    UnexpectedEndOfInput,
    UnsupportedHeaderWidth,
)
from framelink.core.protocol.simple import SimpleProtocol, packet_n
from tests.fake.fake_transport import FailingReader, FailingWriter, FakeReader, FakeWriter


def frame(protocol: SimpleProtocol, payload: bytes) -> bytes:
    buffer = Buffer()
    writer = FakeWriter()
    protocol.packet(buffer, BytesMessage(payload))
    protocol.write(writer, buffer)
    return writer.buffer


class HintMessage:
    """Message with an arbitrary capacity hint."""

    def __init__(self, payload: bytes, hint: int) -> None:
        self.payload = payload
        self.hint = hint
        self.seen_length: int | None = None

    def recommend_buffer_size(self) -> int:
        return self.hint

    def write_buffer(self, buffer: Buffer) -> None:
        self.seen_length = len(buffer)
        buffer.append(self.payload)


class BrokenMessage:
    def recommend_buffer_size(self) -> int:
        return 0

    def write_buffer(self, buffer: Buffer) -> None:
        raise ValueError("cannot encode")


@pytest.mark.ut
@pytest.mark.parametrize("n", [0, 3, 5, 16, -1])
def test_unsupported_head_size(n):
    with pytest.raises(UnsupportedHeaderWidth, match="unsupported packet head size"):
        packet_n(n, BIG_ENDIAN)


@pytest.mark.ut
def test_unsupported_head_size_is_a_value_error():
    with pytest.raises(ValueError):
        SimpleProtocol(3)


@pytest.mark.ut
def test_defaults():
    proto = packet_n(4)

    assert proto.head_size == 4
    assert proto.byte_order is ByteOrder.BIG
    assert proto.max_packet_size == 0


@pytest.mark.ut
def test_byte_order_accepts_plain_string():
    assert SimpleProtocol(2, "little").byte_order is ByteOrder.LITTLE


@pytest.mark.ut
def test_round_trip(head_size, byte_order):
    proto = packet_n(head_size, byte_order)
    payload = bytes(range(256)) * 3
    if head_size == 1:
        payload = payload[:255]

    wire = frame(proto, payload)
    assert len(wire) == head_size + len(payload)

    buffer = Buffer()
    reader = FakeReader(wire)
    proto.read(reader, buffer)

    assert bytes(buffer) == payload
    assert reader.remaining == b""


@pytest.mark.ut
def test_header_holds_payload_length_only(head_size, byte_order):
    proto = packet_n(head_size, byte_order)

    wire = frame(proto, b"abc")

    assert int.from_bytes(wire[:head_size], byte_order.value) == 3


@pytest.mark.ut
def test_adjacent_packets(head_size, byte_order):
    proto = packet_n(head_size, byte_order)
    payloads = [b"first", b"", b"x" * 200, b"last"]
    wire = b"".join(frame(proto, p) for p in payloads)

    reader = FakeReader(wire)
    buffer = Buffer()
    received = []
    for _ in payloads:
        proto.read(reader, buffer)
        received.append(bytes(buffer))

    assert received == payloads
    assert reader.remaining == b""
    with pytest.raises(EndOfStream):
        proto.read(reader, buffer)


@pytest.mark.ut
def test_empty_packet(head_size, byte_order):
    proto = packet_n(head_size, byte_order)

    wire = frame(proto, b"")
    assert wire == b"\x00" * head_size

    reader = FakeReader(wire + b"trailing")
    buffer = Buffer()
    buffer.append(b"stale")
    proto.read(reader, buffer)

    assert len(buffer) == 0
    assert reader.consumed == head_size


@pytest.mark.ut
def test_short_reads(head_size, byte_order):
    proto = packet_n(head_size, byte_order)
    wire = frame(proto, b"one byte at a time")

    reader = FakeReader(wire, chunk=1)
    buffer = Buffer()
    proto.read(reader, buffer)

    assert bytes(buffer) == b"one byte at a time"
    assert reader.calls == len(wire)


@pytest.mark.ut
def test_byte_order_mismatch_reverses_length():
    big = packet_n(2, BIG_ENDIAN)
    little = packet_n(2, LITTLE_ENDIAN)

    wire = frame(big, b"a" * 0x0102)

    assert wire[:2] == b"\x01\x02"
    assert little.head_struct.unpack(wire[:2])[0] == 0x0201

    with pytest.raises(UnexpectedEndOfInput):
        little.read(FakeReader(wire), Buffer())


@pytest.mark.ut
def test_s1_hello_two_byte_big_endian():
    proto = packet_n(2, BIG_ENDIAN)

    wire = frame(proto, b"hello")
    assert wire == bytes.fromhex("00 05 68 65 6c 6c 6f")

    buffer = Buffer()
    proto.read(FakeReader(wire), buffer)
    assert len(buffer) == 5
    assert buffer == b"hello"


@pytest.mark.ut
def test_s2_empty_one_byte_little_endian():
    proto = packet_n(1, LITTLE_ENDIAN)

    wire = frame(proto, b"")
    assert wire == b"\x00"

    buffer = Buffer()
    proto.read(FakeReader(wire), buffer)
    assert len(buffer) == 0


@pytest.mark.ut
def test_s3_300_bytes_four_byte_big_endian():
    proto = packet_n(4, BIG_ENDIAN)
    payload = b"\xab" * 300

    wire = frame(proto, payload)
    assert wire[:4] == bytes.fromhex("00 00 01 2c")
    assert wire[4:] == payload

    buffer = Buffer()
    proto.read(FakeReader(wire), buffer)
    assert buffer == payload


@pytest.mark.ut
def test_s4_write_too_large_emits_nothing():
    proto = packet_n(2, BIG_ENDIAN)
    proto.max_packet_size = 4

    buffer = Buffer()
    writer = FakeWriter()
    proto.packet(buffer, BytesMessage(b"hello"))

    with pytest.raises(PacketTooLarge, match="packet too large") as exc:
        proto.write(writer, buffer)

    assert exc.value.size == 5
    assert exc.value.limit == 4
    assert writer.calls == 0
    assert writer.buffer == b""


@pytest.mark.ut
def test_s5_read_too_large_consumes_header_only():
    proto = packet_n(2, BIG_ENDIAN)
    proto.max_packet_size = 4

    reader = FakeReader(bytes.fromhex("00 05 68 65 6c 6c 6f"))

    with pytest.raises(PacketTooLarge):
        proto.read(reader, Buffer())

    assert reader.consumed == 2


@pytest.mark.ut
def test_s6_two_adjacent_one_byte_packets():
    proto = packet_n(1)
    reader = FakeReader(bytes.fromhex("03 41 42 43 02 58 59"))
    buffer = Buffer()

    proto.read(reader, buffer)
    assert buffer == b"ABC"

    proto.read(reader, buffer)
    assert buffer == b"XY"

    assert reader.remaining == b""


@pytest.mark.ut
def test_max_packet_size_is_inclusive():
    proto = SimpleProtocol(2, max_packet_size=4)

    wire = frame(proto, b"abcd")
    buffer = Buffer()
    proto.read(FakeReader(wire), buffer)

    assert buffer == b"abcd"


@pytest.mark.ut
def test_negative_max_packet_size_rejected():
    with pytest.raises(ValueError):
        SimpleProtocol(2, max_packet_size=-1)


@pytest.mark.ut
def test_payload_beyond_header_width_rejected():
    proto = packet_n(1)
    buffer = Buffer()
    writer = FakeWriter()
    proto.packet(buffer, BytesMessage(b"x" * 256))

    with pytest.raises(PacketTooLarge) as exc:
        proto.write(writer, buffer)

    assert exc.value.limit == 255
    assert writer.calls == 0


@pytest.mark.ut
def test_packet_reserves_header_and_honours_hint():
    proto = packet_n(4)
    buffer = Buffer()
    message = HintMessage(b"abc", hint=64)

    proto.packet(buffer, message)

    assert message.seen_length == 4
    assert len(buffer) == 7
    assert buffer.capacity == 64
    assert bytes(buffer)[4:] == b"abc"


@pytest.mark.ut
def test_packet_hint_smaller_than_header_still_reserves_header():
    proto = packet_n(8)
    buffer = Buffer()
    message = HintMessage(b"abc", hint=0)

    proto.packet(buffer, message)

    assert message.seen_length == 8
    assert len(buffer) == 11


@pytest.mark.ut
def test_packet_reuses_region_when_capacity_suffices():
    proto = packet_n(2)
    buffer = Buffer(128)
    buffer.append(b"previous packet")
    region = buffer._data

    proto.packet(buffer, HintMessage(b"new", hint=16))

    assert buffer._data is region
    assert bytes(buffer)[2:] == b"new"


@pytest.mark.ut
def test_message_growing_buffer_is_retained():
    proto = packet_n(2)
    buffer = Buffer()

    proto.packet(buffer, HintMessage(b"y" * 100, hint=4))
    grown = buffer.capacity
    assert grown >= 102

    proto.read(FakeReader(b"\x00\x03abc"), buffer)
    assert buffer.capacity == grown
    assert buffer == b"abc"


@pytest.mark.ut
def test_message_error_propagates_unchanged():
    proto = packet_n(2)

    with pytest.raises(ValueError, match="cannot encode"):
        proto.packet(Buffer(), BrokenMessage())


@pytest.mark.ut
def test_write_unpacked_buffer_rejected():
    proto = packet_n(4)
    buffer = Buffer()
    buffer.append(b"ab")

    with pytest.raises(ValueError):
        proto.write(FakeWriter(), buffer)


@pytest.mark.ut
def test_write_uses_single_call():
    proto = packet_n(4)
    buffer = Buffer()
    writer = FakeWriter()

    proto.packet(buffer, BytesMessage(b"payload"))
    proto.write(writer, buffer)

    assert writer.calls == 1


@pytest.mark.ut
def test_transport_errors_propagate_unchanged():
    proto = packet_n(2)
    buffer = Buffer()
    proto.packet(buffer, BytesMessage(b"data"))

    error = BrokenPipeError("gone")
    with pytest.raises(BrokenPipeError) as exc:
        proto.write(FailingWriter(error), buffer)
    assert exc.value is error

    error = ConnectionResetError("reset")
    with pytest.raises(ConnectionResetError) as exc:
        proto.read(FailingReader(error), buffer)
    assert exc.value is error


@pytest.mark.ut
def test_read_end_of_stream_on_boundary():
    with pytest.raises(EndOfStream):
        packet_n(4).read(FakeReader(b""), Buffer())


@pytest.mark.ut
def test_read_truncated_header():
    with pytest.raises(UnexpectedEndOfInput) as exc:
        packet_n(4).read(FakeReader(b"\x00\x00"), Buffer())

    assert exc.value.expected == 4
    assert exc.value.received == 2


@pytest.mark.ut
def test_read_truncated_payload():
    with pytest.raises(UnexpectedEndOfInput) as exc:
        packet_n(1).read(FakeReader(b"\x05abc"), Buffer())

    assert exc.value.expected == 5
    assert exc.value.received == 3


@pytest.mark.ut
def test_read_reuses_larger_buffer():
    proto = packet_n(1)
    buffer = Buffer(64)
    region = buffer._data

    proto.read(FakeReader(b"\x02hi"), buffer)

    assert buffer._data is region
    assert buffer == b"hi"


@pytest.mark.ut
def test_eight_byte_header_large_length_guarded():
    proto = SimpleProtocol(8, max_packet_size=1024)
    reader = FakeReader(b"\xff" * 8)

    with pytest.raises(PacketTooLarge) as exc:
        proto.read(reader, Buffer())

    assert exc.value.size == 2 ** 64 - 1
    assert reader.consumed == 8


@pytest.mark.ut
def test_too_large_is_logged(caplog):
    proto = SimpleProtocol(1, max_packet_size=1)

    with caplog.at_level(logging.DEBUG, logger="core.protocol.simple"):
        with pytest.raises(PacketTooLarge):
            proto.read(FakeReader(b"\x02ab"), Buffer())

    assert "exceeds max_packet_size=1" in caplog.text


@pytest.mark.ut
def test_encode_decode_helpers():
    proto = packet_n(2, LITTLE_ENDIAN)

    wire = proto.encode(b"hello")

    assert wire == b"\x05\x00hello"
    assert proto.decode(wire + b"\x01\x00!") == b"hello"


@pytest.mark.ut
def test_works_with_file_objects(tmp_path):
    proto = packet_n(4)
    path = tmp_path / "packets.bin"

    with path.open("wb") as fh:
        buffer = Buffer()
        for payload in (b"alpha", b"beta"):
            proto.packet(buffer, BytesMessage(payload))
            proto.write(fh, buffer)

    received = []
    with path.open("rb") as fh:
        buffer = Buffer()
        while True:
            try:
                proto.read(fh, buffer)
            except EndOfStream:
                break
            received.append(bytes(buffer))

    assert received == [b"alpha", b"beta"]


@pytest.mark.ut
def test_bytesio_round_trip():
    proto = packet_n(8, LITTLE_ENDIAN)
    stream = io.BytesIO()
    buffer = Buffer()

    proto.packet(buffer, BytesMessage(b"abc"))
    proto.write(stream, buffer)
    stream.seek(0)

    proto.read(stream, buffer)
    assert buffer == b"abc"


@pytest.mark.ut
def test_write_to_blocked_writer_is_not_reported_as_sent():
    proto = packet_n(2)
    buffer = Buffer()
    writer = FakeWriter(block_after=0)
    proto.packet(buffer, BytesMessage(b"payload"))

    with pytest.raises(BlockingIOError):
        proto.write(writer, buffer)

    assert writer.buffer == b""
