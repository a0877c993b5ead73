from dataclasses import dataclass

from framelink.core.models.byteorder import ByteOrder
from framelink.core.protocol.simple import SimpleProtocol


@dataclass
class ProtocolConfig:
    """
    Static configuration of a length-prefixed protocol.
    """
    head_size: int = 4
    """
    Width of the length header in bytes: 1, 2, 4 or 8.
    """

    byte_order: ByteOrder = ByteOrder.BIG
    """
    Byte order of the header, identical on both ends of the stream.
    """

    max_packet_size: int = 0
    """
    Maximum payload size in bytes, header excluded. 0 means unlimited.
    Protects readers against memory exhaustion from hostile headers.
    """

    def build(self) -> SimpleProtocol:
        return SimpleProtocol(
            self.head_size,
            self.byte_order,
            max_packet_size=self.max_packet_size,
        )
