"""Core streaming engine: windows, published buffers, and the session.

This package sits between the acquisition callback and the display/export
consumers. :class:`StreamingSession` fans each batch out to the recorded log,
the bounded live buffer, and the RMS windows, and renders the export on stop.
"""

# Data structures shared by the session
from .ringbuffer import RingBuffer
from .published import PublishedSeries
from .models import DisplaySnapshot, RecordedSample, SessionRecording
from .windows import MaxWindowReducer, WindowAccumulator

# Session state machine
from .session import SessionState, SessionStateError, StreamingSession

__all__ = [
    "RingBuffer",
    "PublishedSeries",
    "DisplaySnapshot",
    "RecordedSample",
    "SessionRecording",
    "WindowAccumulator",
    "MaxWindowReducer",
    "SessionState",
    "SessionStateError",
    "StreamingSession",
]
