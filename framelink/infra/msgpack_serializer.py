import msgpack
from typing import Any

from framelink.core.ports.serializer import Serializer


class MsgPackSerializer(Serializer):
    """
    Payload codec backed by msgpack.

    bytes values travel as msgpack bin and strings as str, so both survive
    a round trip unchanged. Decoding copies out of the given buffer, which
    makes it safe to deserialize straight from `Buffer.view()`.
    """
    def serialize(self, message: Any) -> bytes:
        return msgpack.packb(message, use_bin_type=True)

    def deserialize(self, data: bytes | memoryview) -> Any:
        return msgpack.unpackb(data, raw=False)
