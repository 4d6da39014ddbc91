"""Flat CSV rendering of a finished recording session.

One row per recorded sample. The three statistic columns are filled only on
the row that completes a window and are otherwise left blank:

- 0.1 s and 1 s RMS use a time threshold: the next unused value lands on the
  first row whose elapsed time reaches ``(k + 1) * interval``.
- the rolling max uses a row count: the next unused value lands on every
  ``max_export_every_rows``-th row (10 by default).
"""

from __future__ import annotations

import csv
import io
from typing import TYPE_CHECKING, Iterator, List, Optional, Sequence

from ..config.runtime import RmsConfig

if TYPE_CHECKING:  # pragma: no cover - import cycle with core.session
    from ..core.models import SessionRecording

EXPORT_HEADERS = ("Time (s)", "EMG (Raw Data)", "0.1s RMS", "1s RMS", "10s Max RMS")
DURATION_LABEL = "Recording Duration (s):"


def _fmt(value: float) -> str:
    return repr(float(value))


class _ThresholdCursor:
    """Hands out statistic values in order once a row crosses the next boundary."""

    __slots__ = ("_values", "_interval", "_index")

    def __init__(self, values: Sequence[float], interval: float) -> None:
        self._values = values
        self._interval = interval
        self._index = 0

    def take(self, elapsed: float) -> str:
        if self._index >= len(self._values):
            return ""
        if elapsed < (self._index + 1) * self._interval:
            return ""
        value = self._values[self._index]
        self._index += 1
        return _fmt(value)


def iter_export_rows(
    recording: SessionRecording,
    config: Optional[RmsConfig] = None,
) -> Iterator[List[str]]:
    """Yield the five string fields of every data row, in recorded order."""
    cfg = config or RmsConfig()
    short = _ThresholdCursor(recording.short_term, cfg.short_interval_s)
    medium = _ThresholdCursor(recording.medium_term, cfg.medium_interval_s)
    max_values = recording.max_term
    max_index = 0
    every = cfg.max_export_every_rows

    for i, (elapsed, value) in enumerate(recording.samples()):
        max_field = ""
        if (i + 1) % every == 0 and max_index < len(max_values):
            max_field = _fmt(max_values[max_index])
            max_index += 1
        yield [
            _fmt(elapsed),
            _fmt(value),
            short.take(elapsed),
            medium.take(elapsed),
            max_field,
        ]


def render_export(recording: SessionRecording, config: Optional[RmsConfig] = None) -> str:
    """Render ``recording`` as the export CSV text (duration line, header, rows)."""
    buffer = io.StringIO()
    writer = csv.writer(buffer, lineterminator="\n")
    writer.writerow([DURATION_LABEL, _fmt(recording.duration_s)])
    writer.writerow(EXPORT_HEADERS)
    writer.writerows(iter_export_rows(recording, config))
    return buffer.getvalue()
