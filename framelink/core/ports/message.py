from typing import Protocol, runtime_checkable

from framelink.core.buffer import Buffer


@runtime_checkable
class Message(Protocol):
    """
    Defines the interface of a payload producer handed to
    Protocol.packet.

    Implementations must:
    - keep recommend_buffer_size pure and cheap
    - append after the header placeholder, never touching it
    - let their own errors propagate unchanged
    """

    def recommend_buffer_size(self) -> int:
        """Capacity hint in bytes, header included. Advisory only."""

    def write_buffer(self, buffer: Buffer) -> None:
        """Append the payload to a buffer whose header bytes are reserved."""
