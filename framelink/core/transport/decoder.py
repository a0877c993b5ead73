import logging

from framelink.core.protocol.errors import PacketTooLarge
from framelink.core.protocol.simple import SimpleProtocol


class PacketDecoder:
    """
    Incremental decoder for push-based transports.

    Where SimpleProtocol.read pulls exactly header-then-payload from a
    reader, PacketDecoder is fed whatever chunks the transport delivers
    (for instance from asyncio.Protocol.data_received) and hands back every
    payload completed so far. Partial headers and payloads are kept until
    more data arrives.

    The header of each packet is checked against the protocol's
    `max_packet_size` as soon as it is complete, so a hostile length is
    rejected before its payload is buffered. After PacketTooLarge the
    decoder is out of sync with the stream and must be discarded along
    with the connection.
    """
    def __init__(self, protocol: SimpleProtocol) -> None:
        self._protocol = protocol
        self._n = protocol.head_size
        self._head = protocol.head_struct
        self._buffer = bytearray()
        self._expected_length: int | None = None
        self._logger = logging.getLogger("core.transport.decoder")

    @property
    def pending(self) -> int:
        """Number of buffered bytes not yet returned as a payload."""
        return len(self._buffer)

    def feed(self, data: bytes | bytearray | memoryview) -> list[bytes]:
        self._buffer.extend(data)
        payloads: list[bytes] = []

        while True:
            if self._expected_length is None:
                if len(self._buffer) < self._n:
                    return payloads

                size = self._head.unpack_from(self._buffer)[0]
                limit = self._protocol.max_packet_size
                if limit and size > limit:
                    self._logger.warning(f"Packet of {size} bytes exceeds limit {limit}")
                    raise PacketTooLarge(size, limit)

                self._expected_length = size
                del self._buffer[:self._n]

            if len(self._buffer) < self._expected_length:
                return payloads

            payloads.append(bytes(self._buffer[:self._expected_length]))
            del self._buffer[:self._expected_length]
            self._expected_length = None
