"""
Fixed-capacity ring buffer.

Used for the pose history (plain push) and the cloud point buffers, where a
scan writes its samples at offsets from the cursor and then advances the
cursor by the scan size, leaving slots of missed samples untouched.
"""

from typing import Generic, Iterator, List, Optional, TypeVar

T = TypeVar('T')


class RingBuffer(Generic[T]):
    """
    Ring buffer with explicit empty slots.

    Usage:
        buf = RingBuffer(3)
        buf.push(1); buf.push(2); buf.push(3); buf.push(4)
        list(buf)       # [2, 3, 4]
        buf.latest()    # 4
    """

    def __init__(self, capacity: int):
        if capacity < 1:
            raise ValueError(f"capacity must be at least 1, got {capacity}")
        self._slots: List[Optional[T]] = [None] * capacity
        self._cursor = 0    # Next slot to write

    @property
    def capacity(self) -> int:
        return len(self._slots)

    @property
    def cursor(self) -> int:
        return self._cursor

    def push(self, item: T):
        """Write at the cursor and advance it by one."""
        self._slots[self._cursor] = item
        self._cursor = (self._cursor + 1) % self.capacity

    def put(self, offset: int, item: T):
        """Write at cursor + offset without moving the cursor."""
        self._slots[(self._cursor + offset) % self.capacity] = item

    def advance(self, n: int):
        """Move the cursor forward by n slots."""
        self._cursor = (self._cursor + n) % self.capacity

    def latest(self) -> Optional[T]:
        """Most recently pushed item, or None when empty."""
        for item in self._reversed():
            return item
        return None

    def oldest(self) -> Optional[T]:
        for item in self:
            return item
        return None

    def clear(self):
        self._slots = [None] * self.capacity
        self._cursor = 0

    def __iter__(self) -> Iterator[T]:
        """Filled slots, oldest to newest."""
        n = self.capacity
        for i in range(n):
            item = self._slots[(self._cursor + i) % n]
            if item is not None:
                yield item

    def _reversed(self) -> Iterator[T]:
        n = self.capacity
        for i in range(1, n + 1):
            item = self._slots[(self._cursor - i) % n]
            if item is not None:
                yield item

    def __len__(self) -> int:
        return sum(1 for item in self._slots if item is not None)
