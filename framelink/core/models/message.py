from dataclasses import dataclass, field
from typing import Any

from framelink.core.buffer import Buffer
from framelink.core.ports.serializer import Serializer


MAX_HEAD_SIZE = 8
"""
Widest supported header. Messages do not know which protocol will frame
them, so their capacity hint reserves room for the widest one.
"""


@dataclass(frozen=True)
class BytesMessage:
    """
    Message carrying an already encoded payload.
    """
    payload: bytes

    def recommend_buffer_size(self) -> int:
        return len(self.payload) + MAX_HEAD_SIZE

    def write_buffer(self, buffer: Buffer) -> None:
        buffer.append(self.payload)


@dataclass(frozen=True)
class SerializedMessage:
    """
    Message whose payload is produced by a Serializer.

    The value is encoded once, on construction, so the capacity hint is
    exact and serialization errors surface before any buffer is touched.
    """
    value: Any
    serializer: Serializer
    _encoded: bytes = field(init=False, repr=False, compare=False)

    def __post_init__(self) -> None:
        # frozen: assignment goes through object.__setattr__
        object.__setattr__(self, "_encoded", self.serializer.serialize(self.value))

    @property
    def encoded(self) -> bytes:
        return self._encoded

    def recommend_buffer_size(self) -> int:
        return len(self._encoded) + MAX_HEAD_SIZE

    def write_buffer(self, buffer: Buffer) -> None:
        buffer.append(self._encoded)
