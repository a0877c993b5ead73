import asyncio
import logging
from typing import Any, AsyncIterator

from framelink.core.buffer import Buffer
from framelink.core.models.message import BytesMessage
from framelink.core.ports.message import Message
from framelink.core.protocol.base import AsyncProtocol
from framelink.core.protocol.errors import EndOfStream


class PacketStream:
    """
    Exchanges packets over one asyncio stream pair.

    PacketStream owns a send buffer and a receive buffer, both reused for
    every packet so that steady traffic does not allocate per message. It
    is meant to be used by a single task at a time: the buffers are
    single-owner, and interleaving two sends would corrupt the frame being
    stamped.

    PacketStream does not connect, reconnect or apply timeouts. Those
    belong to whoever opened the streams, typically with
    asyncio.open_connection or asyncio.start_server.
    """
    def __init__(
        self,
        protocol: AsyncProtocol,
        reader: asyncio.StreamReader,
        writer: asyncio.StreamWriter,
    ) -> None:
        self.protocol = protocol
        self._reader = reader
        self._writer = writer
        self._send_buffer = Buffer()
        self._recv_buffer = Buffer()
        self._logger = logging.getLogger("core.transport.stream")

    async def send(self, message: Message | bytes) -> None:
        """Frame and send a message; raw bytes are sent as the payload."""
        if isinstance(message, (bytes, bytearray, memoryview)):
            message = BytesMessage(bytes(message))

        self.protocol.packet(self._send_buffer, message)
        await self.protocol.write_async(self._writer, self._send_buffer)

    async def receive(self) -> bytes:
        """
        Wait for the next packet and return its payload.

        Raises EndOfStream once the peer closed the stream between two
        packets.
        """
        await self.protocol.read_async(self._reader, self._recv_buffer)
        return bytes(self._recv_buffer)

    def __aiter__(self) -> AsyncIterator[bytes]:
        return self._iterate()

    async def _iterate(self) -> AsyncIterator[bytes]:
        while True:
            try:
                payload = await self.receive()
            except EndOfStream:
                self._logger.debug("Peer closed the stream")
                return
            yield payload

    async def close(self) -> None:
        self._writer.close()
        try:
            await self._writer.wait_closed()
        except (ConnectionError, OSError) as ex:
            self._logger.debug(f"Error while closing stream: {ex}")

    async def __aenter__(self) -> "PacketStream":
        return self

    async def __aexit__(self, *exc_info: Any) -> None:
        await self.close()
