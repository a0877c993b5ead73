import asyncio

from framelink.core.ports.transport import Reader, Writer
from framelink.core.protocol.errors import EndOfStream, ShortWrite, UnexpectedEndOfInput


def read_fully(reader: Reader, view: memoryview, allow_eof: bool = False) -> int:
    """
    Fill `view` completely from `reader`, looping over short reads.

    When the reader is exhausted before the first byte and `allow_eof` is
    set, EndOfStream is raised: the stream ended cleanly on a packet
    boundary. Any other exhaustion raises UnexpectedEndOfInput. Errors
    raised by the reader propagate unchanged.
    """
    total = len(view)
    received = 0
    while received < total:
        count = reader.readinto(view[received:])
        if count is None:
            raise BlockingIOError("Reader has no data available (non-blocking mode)")
        if count == 0:
            if received == 0 and allow_eof:
                raise EndOfStream()
            raise UnexpectedEndOfInput(total, received)
        received += count
    return received


def write_fully(writer: Writer, data: bytes | bytearray | memoryview) -> int:
    """
    Hand all of `data` to `writer`.

    A compliant writer accepts everything in a single call. Writers that
    report a partial count are called again with the remainder; a writer
    reporting zero progress raises ShortWrite. A raw non-blocking writer
    returning None accepted nothing, so BlockingIOError is raised.
    """
    view = memoryview(data)
    total = len(view)
    written = 0
    while written < total:
        count = writer.write(view[written:])
        if count is None:
            raise BlockingIOError(
                f"Writer accepted no data (non-blocking mode), {written} of {total} bytes written"
            )
        if count == 0:
            raise ShortWrite(total, written)
        written += count
    return written


async def read_exactly(reader: asyncio.StreamReader, size: int, allow_eof: bool = False) -> bytes:
    """
    asyncio counterpart of read_fully, built on StreamReader.readexactly.
    """
    try:
        return await reader.readexactly(size)
    except asyncio.IncompleteReadError as ex:
        if not ex.partial and allow_eof:
            raise EndOfStream() from None
        raise UnexpectedEndOfInput(size, len(ex.partial)) from ex
