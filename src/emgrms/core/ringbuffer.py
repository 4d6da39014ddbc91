from __future__ import annotations

from collections.abc import Iterable, Iterator
from typing import Generic, TypeVar

T = TypeVar("T")


class RingBuffer(Generic[T]):
    """
    Fixed-capacity buffer keeping the most recent items, oldest first.
    Items beyond ``capacity`` are dropped from the front.
    """

    def __init__(self, capacity: int) -> None:
        if capacity <= 0:
            raise ValueError("capacity must be positive")
        self._capacity = int(capacity)
        self._data: list[T | None] = [None] * self._capacity
        self._start = 0
        self._size = 0

    @property
    def capacity(self) -> int:
        return self._capacity

    def append(self, item: T) -> None:
        idx = (self._start + self._size) % self._capacity
        self._data[idx] = item
        if self._size < self._capacity:
            self._size += 1
        else:
            self._start = (self._start + 1) % self._capacity

    def extend(self, items: Iterable[T]) -> None:
        """Append every item in order; only the newest ``capacity`` survive."""
        for item in items:
            self.append(item)

    def clear(self) -> None:
        self._data = [None] * self._capacity
        self._start = 0
        self._size = 0

    def to_list(self) -> list[T]:
        """Return the logical contents as a new list, oldest first."""
        return list(self)

    def __len__(self) -> int:  # pragma: no cover - trivial
        return self._size

    def __getitem__(self, index: int) -> T:
        """Support buf[i] and buf[-1] indexing over the *logical* contents."""
        size = self._size
        if index < 0:
            index += size
        if index < 0 or index >= size:
            raise IndexError("RingBuffer index out of range")
        return self._data[(self._start + index) % self._capacity]  # type: ignore[return-value]

    def __iter__(self) -> Iterator[T]:
        for i in range(self._size):
            yield self._data[(self._start + i) % self._capacity]  # type: ignore[misc]
