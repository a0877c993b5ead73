from enum import Enum


class ByteOrder(str, Enum):
    """
    Encoding of the multi-byte packet header.

    The value doubles as the `struct` prefix and the `int.from_bytes`
    byteorder name, so both views stay in sync.
    """
    BIG = "big"
    LITTLE = "little"

    @property
    def struct_prefix(self) -> str:
        return ">" if self is ByteOrder.BIG else "<"


BIG_ENDIAN = ByteOrder.BIG
LITTLE_ENDIAN = ByteOrder.LITTLE
