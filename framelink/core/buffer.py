from typing import Any


class Buffer:
    """
    Growable byte region staging one packet in memory.

    The backing bytearray is the capacity; `len(buffer)` is the logical
    length, i.e. the visible content. Shrinking only moves the logical
    length, so the region can be reused across packets without
    reallocation. Bytes beyond the logical length are left untouched and
    must not be assumed to be zero.

    A Buffer is owned by exactly one caller at a time. Protocols operate on
    it by reference and never keep it. It is not thread-safe.
    """
    __slots__ = ("_data", "_length")

    def __init__(self, capacity: int = 0) -> None:
        if capacity < 0:
            raise ValueError(f"Negative capacity: {capacity}")
        self._data = bytearray(capacity)
        self._length = 0

    def __len__(self) -> int:
        return self._length

    def __bytes__(self) -> bytes:
        return bytes(self._data[:self._length])

    def __eq__(self, other: Any) -> bool:
        if isinstance(other, Buffer):
            return self.view() == other.view()
        if isinstance(other, (bytes, bytearray, memoryview)):
            return self.view() == other
        return NotImplemented

    __hash__ = None  # type: ignore[assignment]

    def __repr__(self) -> str:
        return f"Buffer(length={self._length}, capacity={self.capacity})"

    @property
    def capacity(self) -> int:
        return len(self._data)

    def view(self, start: int = 0, end: int | None = None) -> memoryview:
        """
        Return a writable view over the logical region.

        The view is invalidated by any operation that reallocates the
        region (renew, or a resize/append beyond capacity).
        """
        stop = self._length if end is None else min(end, self._length)
        return memoryview(self._data)[start:stop]

    def resize(self, length: int) -> None:
        """
        Set the logical length.

        Within capacity the region is reused as is and existing content is
        preserved. Beyond capacity a new region of exactly `length` bytes is
        allocated and the current content copied over.
        """
        if length < 0:
            raise ValueError(f"Negative length: {length}")
        if length > len(self._data):
            self._grow(length)
        self._length = length

    def renew(self, length: int, capacity: int | None = None) -> None:
        """Replace the region with a fresh one, dropping the old content."""
        if length < 0:
            raise ValueError(f"Negative length: {length}")
        capacity = length if capacity is None else max(capacity, length)
        self._data = bytearray(capacity)
        self._length = length

    def write_at(self, offset: int, data: bytes | bytearray | memoryview) -> None:
        """Overwrite bytes of the logical region starting at `offset`."""
        end = offset + len(data)
        if offset < 0 or end > self._length:
            raise IndexError(
                f"Write [{offset}, {end}) outside of buffer length {self._length}"
            )
        self._data[offset:end] = data

    def append(self, data: bytes | bytearray | memoryview) -> None:
        """Append at the logical end, growing the region when needed."""
        start = self._length
        end = start + len(data)
        if end > len(self._data):
            self._grow(max(end, 2 * len(self._data)))
        self._data[start:end] = data
        self._length = end

    def clear(self) -> None:
        self._length = 0

    def _grow(self, capacity: int) -> None:
        data = bytearray(capacity)
        data[:self._length] = self._data[:self._length]
        self._data = data
