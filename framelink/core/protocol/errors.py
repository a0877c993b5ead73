class FramingError(Exception):
    """Base class for every error raised by the framing layer."""


class UnsupportedHeaderWidth(FramingError, ValueError):
    def __init__(self, head_size: int) -> None:
        self.head_size = head_size
        super().__init__(f"unsupported packet head size: {head_size}")


class PacketTooLarge(FramingError):
    """
    A payload exceeds the configured maximum, or cannot be represented
    in the header width.

    Raised by write before any byte reaches the writer, and by read right
    after the header has been consumed. In the latter case the stream is
    positioned in the middle of a packet and cannot be resynchronised:
    the caller should close the transport.
    """
    def __init__(self, size: int, limit: int) -> None:
        self.size = size
        self.limit = limit
        super().__init__(f"packet too large: {size} > {limit}")


class EndOfStream(FramingError, EOFError):
    """The reader is exhausted on a packet boundary."""


class UnexpectedEndOfInput(FramingError, EOFError):
    def __init__(self, expected: int, received: int) -> None:
        self.expected = expected
        self.received = received
        super().__init__(
            f"unexpected end of input: expected {expected} bytes, got {received}"
        )


class ShortWrite(FramingError, OSError):
    def __init__(self, expected: int, written: int) -> None:
        self.expected = expected
        self.written = written
        super().__init__(f"short write: {written} of {expected} bytes accepted")
