"""Minimal helpers for opt-in debug/instrumentation hooks."""

from __future__ import annotations

import logging
import os
import time
from contextlib import contextmanager
from typing import Callable, Iterator

logger = logging.getLogger(__name__)

DEBUG_EMGRMS = os.getenv("EMGRMS_DEBUG", "").lower() in {"1", "true", "yes", "on"}


def debug_enabled() -> bool:
    """Return True when lightweight instrumentation should run."""
    return DEBUG_EMGRMS


@contextmanager
def time_block(label: str, *, emitter: Callable[[str], None] | None = None) -> Iterator[None]:
    """
    Context manager that reports elapsed time when debugging is enabled.

    Messages go to ``emitter`` when given, otherwise to this module's logger
    at DEBUG level.
    """
    if not DEBUG_EMGRMS:
        yield
        return

    start = time.perf_counter()
    try:
        yield
    finally:
        elapsed_ms = (time.perf_counter() - start) * 1000.0
        message = f"{label} took {elapsed_ms:.3f} ms"
        if emitter is None:
            logger.debug(message)
        else:
            emitter(message)
