import asyncio
import io
import logging
import struct

from framelink.core.buffer import Buffer
from framelink.core.helpers.io import read_exactly, read_fully, write_fully
from framelink.core.models.byteorder import ByteOrder
from framelink.core.models.message import BytesMessage
from framelink.core.ports.message import Message
from framelink.core.ports.transport import Reader, Writer
from framelink.core.protocol.base import AsyncProtocol, Protocol
from framelink.core.protocol.errors import PacketTooLarge, UnsupportedHeaderWidth

_HEAD_FORMATS = {1: "B", 2: "H", 4: "I", 8: "Q"}


class SimpleProtocol(Protocol, AsyncProtocol):
    """
    Length-prefixed packet protocol, like Erlang's {packet, N}.

    Every packet on the wire is a fixed-width unsigned header holding the
    payload length, in the configured byte order, immediately followed by
    the payload. There is no escape, trailer or magic, and packets are
    adjacent with no separator. An empty packet is a zero header alone.

    The header codec is resolved once, at construction, to a precompiled
    struct. The header scratch space is allocated per read, so an instance
    holds no mutable state besides `max_packet_size` and may be shared by
    several threads or tasks; the Buffers they use may not.

    Partial writes are handled by `write_fully`: a compliant writer sees
    exactly one write call per packet. Timeouts and cancellation belong to
    the transport, whose errors propagate unchanged.
    """
    def __init__(
        self,
        head_size: int,
        byte_order: ByteOrder = ByteOrder.BIG,
        max_packet_size: int = 0,
    ) -> None:
        if head_size not in _HEAD_FORMATS:
            raise UnsupportedHeaderWidth(head_size)
        if max_packet_size < 0:
            raise ValueError(f"Negative max_packet_size: {max_packet_size}")

        self._n = head_size
        self._byte_order = ByteOrder(byte_order)
        self._head = struct.Struct(self._byte_order.struct_prefix + _HEAD_FORMATS[head_size])
        self._head_limit = (1 << (8 * head_size)) - 1
        self.max_packet_size = max_packet_size
        self._logger = logging.getLogger("core.protocol.simple")

    def __repr__(self) -> str:
        return (
            f"SimpleProtocol(head_size={self._n}, byte_order={self._byte_order.value!r}, "
            f"max_packet_size={self.max_packet_size})"
        )

    @property
    def head_size(self) -> int:
        return self._n

    @property
    def byte_order(self) -> ByteOrder:
        return self._byte_order

    @property
    def head_struct(self) -> struct.Struct:
        return self._head

    def packet(self, buffer: Buffer, message: Message) -> None:
        """
        Serialize `message` into `buffer`, behind a header placeholder.

        The capacity hint is honoured when it exceeds the current capacity;
        otherwise the region is reused. A hint smaller than the header
        still leaves room for it. Message errors propagate unchanged.
        """
        size = message.recommend_buffer_size()
        if buffer.capacity < size:
            buffer.renew(self._n, size)
        else:
            buffer.resize(self._n)
        message.write_buffer(buffer)

    def write(self, writer: Writer, buffer: Buffer) -> None:
        """
        Stamp the header of a packed buffer and emit it in full.

        Oversized payloads are rejected before the writer is touched.
        """
        self._encode_head(buffer)
        write_fully(writer, buffer.view())

    def read(self, reader: Reader, buffer: Buffer) -> None:
        """
        Read one packet and leave its payload in `buffer`.

        Raises EndOfStream when the reader is exhausted before the header,
        UnexpectedEndOfInput when it is exhausted within the packet, and
        PacketTooLarge right after a header declaring more than
        `max_packet_size`; in that last case the payload is left unread
        and the stream is no longer usable.
        """
        head = bytearray(self._n)
        read_fully(reader, memoryview(head), allow_eof=True)
        size = self._decode_head(head)

        self._prepare(buffer, size)
        if size == 0:
            return

        read_fully(reader, buffer.view())

    async def write_async(self, writer: asyncio.StreamWriter, buffer: Buffer) -> None:
        self._encode_head(buffer)
        writer.write(bytes(buffer))
        await writer.drain()

    async def read_async(self, reader: asyncio.StreamReader, buffer: Buffer) -> None:
        head = await read_exactly(reader, self._n, allow_eof=True)
        size = self._decode_head(head)

        self._prepare(buffer, size)
        if size == 0:
            return

        payload = await read_exactly(reader, size)
        buffer.write_at(0, payload)

    def encode(self, payload: bytes | bytearray | memoryview) -> bytes:
        """Frame a single payload and return the on-wire bytes."""
        buffer = Buffer()
        self.packet(buffer, BytesMessage(bytes(payload)))
        out = io.BytesIO()
        self.write(out, buffer)
        return out.getvalue()

    def decode(self, frame: bytes | bytearray | memoryview) -> bytes:
        """Return the payload of the first packet found in `frame`."""
        buffer = Buffer()
        self.read(io.BytesIO(frame), buffer)
        return bytes(buffer)

    def _encode_head(self, buffer: Buffer) -> None:
        size = len(buffer) - self._n
        if size < 0:
            raise ValueError(
                f"Buffer of {len(buffer)} bytes is shorter than the {self._n}-byte header; "
                "was it packed?"
            )
        self._check_size(size)
        self._head.pack_into(buffer.view(), 0, size)

    def _decode_head(self, head: bytes | bytearray) -> int:
        (size,) = self._head.unpack(head)
        self._check_size(size)
        return size

    def _check_size(self, size: int) -> None:
        if self.max_packet_size and size > self.max_packet_size:
            self._logger.debug(
                f"Packet of {size} bytes exceeds max_packet_size={self.max_packet_size}"
            )
            raise PacketTooLarge(size, self.max_packet_size)
        if size > self._head_limit:
            self._logger.debug(
                f"Packet of {size} bytes does not fit a {self._n}-byte header"
            )
            raise PacketTooLarge(size, self._head_limit)

    @staticmethod
    def _prepare(buffer: Buffer, size: int) -> None:
        if buffer.capacity < size:
            buffer.renew(size)
        else:
            buffer.resize(size)


def packet_n(n: int, byte_order: ByteOrder = ByteOrder.BIG) -> SimpleProtocol:
    """
    Create a {packet, N} protocol with an n-byte header (1, 2, 4 or 8).
    """
    return SimpleProtocol(n, byte_order)
