import pytest

from framelink.core.models.byteorder import ByteOrder
from framelink.infra.msgpack_serializer import MsgPackSerializer


HEAD_SIZES = (1, 2, 4, 8)
BYTE_ORDERS = (ByteOrder.BIG, ByteOrder.LITTLE)


@pytest.fixture
def serializer():
    return MsgPackSerializer()


@pytest.fixture(params=HEAD_SIZES, ids=lambda n: f"n{n}")
def head_size(request) -> int:
    return request.param


@pytest.fixture(params=BYTE_ORDERS, ids=lambda bo: bo.value)
def byte_order(request) -> ByteOrder:
    return request.param
