"""Grow-only byte buffer that collects the body of one diagram block."""
from __future__ import annotations

DEFAULT_CAPACITY = 8192


class AccumulatorGrowthError(MemoryError):
    """Raised when the block buffer cannot grow to hold appended data."""

    def __init__(self, requested: int) -> None:
        super().__init__(f"failed to grow block buffer to {requested} bytes")
        self.requested = requested


class BlockAccumulator:
    """Collects block lines between a start and an end delimiter.

    The backing ``bytearray`` only ever grows, doubling its capacity when an
    append would not leave room for the NUL terminator kept at
    ``buf[length]``. ``clear`` resets the logical length so the storage is
    reused by the next block.

    ``mark_offset`` records where renderer input begins: bytes appended
    before the mark (an echoed start delimiter) are kept for requoting but
    excluded from ``submission``.
    """

    def __init__(self, capacity: int = DEFAULT_CAPACITY) -> None:
        self._capacity = max(capacity, 1)
        self._buf = bytearray(self._capacity)
        self._length = 0
        self._offset = 0

    def __len__(self) -> int:
        return self._length

    @property
    def capacity(self) -> int:
        return self._capacity

    @property
    def offset(self) -> int:
        return self._offset

    def append(self, data: bytes) -> None:
        needed = self._length + len(data)
        if needed >= self._capacity:
            self._grow(needed)
        end = self._length + len(data)
        self._buf[self._length : end] = data
        self._length = end
        self._buf[end] = 0

    def _grow(self, needed: int) -> None:
        capacity = self._capacity
        while needed >= capacity:
            capacity *= 2
        try:
            self._buf.extend(bytes(capacity - self._capacity))
        except MemoryError as exc:
            raise AccumulatorGrowthError(capacity) from exc
        self._capacity = capacity

    def clear(self) -> None:
        self._length = 0
        self._offset = 0
        self._buf[0] = 0

    def mark_offset(self) -> int:
        self._offset = self._length
        return self._offset

    def data_from(self, offset: int) -> bytes:
        if offset < 0 or offset > self._length:
            raise IndexError(f"offset {offset} outside buffer of length {self._length}")
        return bytes(self._buf[offset : self._length])

    def contents(self) -> bytes:
        return self.data_from(0)

    def submission(self) -> bytes:
        """Bytes handed to the renderer: everything after the marked offset."""
        return self.data_from(self._offset)

    def terminated(self) -> memoryview:
        """Read-only view of the submission range including its NUL terminator."""
        return memoryview(self._buf)[self._offset : self._length + 1].toreadonly()
