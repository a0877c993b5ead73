import asyncio
from typing import Protocol as _Protocol, runtime_checkable

from framelink.core.buffer import Buffer
from framelink.core.ports.message import Message
from framelink.core.ports.transport import Reader, Writer


@runtime_checkable
class Protocol(_Protocol):
    """
    Packet splitting contract tying a Message, a Buffer and a byte
    transport together.

    - packet: serialize a message into the buffer, header placeholder
      first. The buffer may grow.
    - write: stamp the header in place and emit the whole buffer.
    - read: consume exactly one packet and leave its payload, without
      header, in the buffer. The buffer may grow.

    Implementations are free to pick another framing (delimiters, fixed
    size records, ...) as long as these three contracts hold.
    """

    def packet(self, buffer: Buffer, message: Message) -> None: ...

    def write(self, writer: Writer, buffer: Buffer) -> None: ...

    def read(self, reader: Reader, buffer: Buffer) -> None: ...


@runtime_checkable
class AsyncProtocol(_Protocol):
    """
    Same contracts as Protocol, over asyncio streams.

    Required by PacketStream only; a framing used with plain readers and
    writers does not need it.
    """

    def packet(self, buffer: Buffer, message: Message) -> None: ...

    async def write_async(self, writer: asyncio.StreamWriter, buffer: Buffer) -> None: ...

    async def read_async(self, reader: asyncio.StreamReader, buffer: Buffer) -> None: ...
