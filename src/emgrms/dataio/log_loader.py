"""Load raw EMG sample logs for replay through a session."""

from pathlib import Path
from typing import Iterable, NamedTuple, Optional
import io

import numpy as np


class RawSamples(NamedTuple):
    values: np.ndarray
    times: Optional[np.ndarray] = None


def _looks_numeric_csv_line(line: str) -> bool:
    """Heuristically decide if a CSV line is numeric-only (no header)."""
    tokens = [t for t in line.strip().split(",") if t]
    if not tokens:
        return False
    try:
        for t in tokens:
            float(t)
        return True
    except ValueError:
        return False


def load_raw_samples(path: Path) -> RawSamples:
    """
    Load a raw sample log with one ``value`` or ``time,value`` per row.

    A single header row is skipped automatically. With two or more columns
    the first is taken as time in seconds and the last as the sample value.
    """
    with Path(path).open("r", encoding="utf-8") as f:
        first_line = f.readline()
        rest = f.read()

    text = first_line + rest if _looks_numeric_csv_line(first_line) else rest
    if not text.strip():
        return RawSamples(values=np.empty(0, dtype=np.float64))

    data = np.loadtxt(io.StringIO(text), delimiter=",", ndmin=2, dtype=np.float64)
    if data.shape[1] == 1:
        return RawSamples(values=data[:, 0])
    return RawSamples(values=data[:, -1], times=data[:, 0])


def chunk_array(array: np.ndarray, chunk_size: int) -> Iterable[np.ndarray]:
    """Yield fixed-size chunks from an array."""
    if chunk_size <= 0:
        raise ValueError(f"chunk_size must be a positive integer, got {chunk_size}")

    total = array.shape[0]
    for start in range(0, total, chunk_size):
        yield array[start : start + chunk_size]
