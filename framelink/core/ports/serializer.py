from typing import Protocol, Any


class Serializer(Protocol):
    """
    Turns a Python value into packet payload bytes and back.

    SerializedMessage calls `serialize` once per message, before the
    buffer is prepared, so an unencodable value fails without touching the
    buffer. `deserialize` receives the payload left by Protocol.read,
    usually as a memoryview over the caller's Buffer, and must not keep a
    reference to it: the next read overwrites the region.
    """

    def serialize(self, message: Any) -> bytes:
        """Return the payload bytes for `message`; raise on unsupported values."""

    def deserialize(self, data: bytes | memoryview) -> Any:
        """Rebuild the value from one payload, header excluded."""
