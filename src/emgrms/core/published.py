"""Thread-safe sequences published to display consumers."""

from __future__ import annotations

import threading
from collections.abc import Iterable
from typing import List, Optional

from .ringbuffer import RingBuffer


class PublishedSeries:
    """Ordered float sequence plus lock, shared between one writer and readers.

    The writer appends under the lock; readers call :meth:`snapshot` to get a
    private copy, so a reader never sees a half-applied ``extend``. When
    ``capacity`` is given the series keeps only the newest ``capacity`` items.
    """

    def __init__(self, name: str, capacity: Optional[int] = None) -> None:
        self.name = name
        self._capacity = capacity
        self._bounded: Optional[RingBuffer[float]] = RingBuffer(capacity) if capacity is not None else None
        self._items: List[float] = []
        self._lock = threading.RLock()

    @property
    def capacity(self) -> Optional[int]:
        return self._capacity

    def append(self, value: float) -> None:
        with self._lock:
            if self._bounded is not None:
                self._bounded.append(float(value))
            else:
                self._items.append(float(value))

    def extend(self, values: Iterable[float]) -> None:
        """Append a batch atomically with respect to :meth:`snapshot`."""
        batch = [float(v) for v in values]
        with self._lock:
            if self._bounded is not None:
                self._bounded.extend(batch)
            else:
                self._items.extend(batch)

    def clear(self) -> None:
        with self._lock:
            if self._bounded is not None:
                self._bounded.clear()
            else:
                self._items.clear()

    def snapshot(self) -> List[float]:
        """Return a thread-safe copy of the contents for read-only use."""
        with self._lock:
            if self._bounded is not None:
                return self._bounded.to_list()
            return list(self._items)

    def latest(self) -> Optional[float]:
        """Return the newest value, or ``None`` if the series is empty."""
        with self._lock:
            source = self._bounded if self._bounded is not None else self._items
            if len(source) == 0:
                return None
            return source[-1]

    def __len__(self) -> int:
        with self._lock:
            if self._bounded is not None:
                return len(self._bounded)
            return len(self._items)

    def __repr__(self) -> str:
        return f"PublishedSeries(name={self.name!r}, size={len(self)}, capacity={self._capacity})"
