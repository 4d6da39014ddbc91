"""Fixed-interval RMS windows and the trailing max reducer."""

from __future__ import annotations

from collections import deque
from dataclasses import dataclass, field
from typing import Deque, Iterable, List, Optional

from ..analysis.features import rms

__all__ = ["WindowAccumulator", "MaxWindowReducer"]


@dataclass(slots=True)
class WindowAccumulator:
    """Buffers samples and emits their RMS once ``interval_s`` has elapsed.

    Flushing is driven by incoming batches, not by a clock: a call to
    :meth:`on_samples` emits at most one value even if several intervals
    passed since the previous flush, and the emitted RMS covers every sample
    buffered since that flush.
    """

    interval_s: float
    _pending: List[float] = field(init=False, default_factory=list, repr=False)
    _last_flush: float = field(init=False, default=0.0, repr=False)

    def __post_init__(self) -> None:
        if self.interval_s <= 0.0:
            raise ValueError("interval_s must be positive.")

    @property
    def pending(self) -> List[float]:
        """Copy of the samples received since the last flush."""
        return list(self._pending)

    @property
    def last_flush(self) -> float:
        return self._last_flush

    def on_start(self, now: float = 0.0) -> None:
        self._pending.clear()
        self._last_flush = float(now)

    def on_samples(self, batch: Iterable[float], now_elapsed: float) -> Optional[float]:
        """Buffer ``batch`` and return the window RMS when the interval is due."""
        self._pending.extend(float(v) for v in batch)
        if now_elapsed - self._last_flush < self.interval_s:
            return None
        value = rms(self._pending)
        self._pending.clear()
        self._last_flush = float(now_elapsed)
        return value


@dataclass(slots=True)
class MaxWindowReducer:
    """Rolling maximum over the last ``size`` medium-term values.

    Nothing is emitted until the buffer holds exactly ``size`` values; from
    then on every push emits the max of the newest ``size`` values.
    """

    size: int = 10
    _values: Deque[float] = field(init=False, repr=False)

    def __post_init__(self) -> None:
        if self.size < 1:
            raise ValueError("size must be at least 1.")
        self._values = deque(maxlen=self.size)

    def reset(self) -> None:
        self._values.clear()

    def __len__(self) -> int:
        return len(self._values)

    def on_medium_term_value(self, value: float) -> Optional[float]:
        self._values.append(float(value))
        if len(self._values) == self.size:
            return max(self._values)
        return None
