"""Shared dataclasses for recording sessions and display snapshots."""

from dataclasses import dataclass, field
from datetime import datetime
from typing import List, NamedTuple, Optional, Tuple


class RecordedSample(NamedTuple):
    elapsed_s: float
    value: float


@dataclass
class SessionRecording:
    """Everything recorded between ``record()`` and ``stop_and_export()``.

    ``times`` and ``values`` are parallel lists; the three statistic lists are
    in emission order.
    """

    started_at: datetime
    duration_s: float = 0.0
    times: List[float] = field(default_factory=list)
    values: List[float] = field(default_factory=list)
    short_term: List[float] = field(default_factory=list)
    medium_term: List[float] = field(default_factory=list)
    max_term: List[float] = field(default_factory=list)

    def __len__(self) -> int:
        return len(self.values)

    def samples(self) -> List[RecordedSample]:
        return [RecordedSample(t, v) for t, v in zip(self.times, self.values)]


@dataclass(frozen=True)
class DisplaySnapshot:
    values: Tuple[float, ...]
    short_term: Tuple[float, ...]
    medium_term: Tuple[float, ...]
    max_term: Tuple[float, ...]
    is_recording: bool
    elapsed_s: Optional[float] = None
