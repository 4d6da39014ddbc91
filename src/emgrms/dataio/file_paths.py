"""Helpers for constructing export file names."""

from datetime import datetime
from typing import Optional

EXPORT_SUFFIX = ".csv"
TIMESTAMP_FORMAT = "%Y-%m-%dT%H_%M_%S"


def export_filename(prefix: str, now: Optional[datetime] = None) -> str:
    """
    Build a timestamped export file name.

    Example: "EMG_Recording_2025-12-04T15_30_45.csv"
    """
    stamp = (now or datetime.now()).strftime(TIMESTAMP_FORMAT)
    return f"{prefix}{stamp}{EXPORT_SUFFIX}"
