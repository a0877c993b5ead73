from typing import Protocol


class Reader(Protocol):
    """
    Byte source consumed by Protocol.read.

    Follows the io.RawIOBase contract: readinto may fill fewer bytes than
    requested, and returns 0 once the stream is exhausted. Files opened in
    binary mode and socket.makefile("rb") qualify as is.
    """

    def readinto(self, buffer: memoryview) -> int | None:
        """Fill `buffer` with up to len(buffer) bytes; return the count."""


class Writer(Protocol):
    """
    Byte sink fed by Protocol.write.

    write should accept the whole region or raise. Raw non-blocking
    streams return None when nothing could be written; that is reported as
    BlockingIOError, so only blocking writers are supported.
    """

    def write(self, data: bytes | bytearray | memoryview) -> int | None:
        """Write `data`; return the number of bytes accepted."""
