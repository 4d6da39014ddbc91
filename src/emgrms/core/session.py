"""Recording session: fans incoming sample batches out to windows and buffers."""

from __future__ import annotations

import enum
import logging
import threading
import time
from datetime import datetime
from typing import Callable, Iterable, List, Optional, Union

from ..config.runtime import RmsConfig
from ..dataio.export import render_export
from ..dataio.file_paths import export_filename
from ..dataio.storage import BackgroundExportWriter, ExportStorage, ExportWriteHandle
from ..tools.debug import time_block
from .models import DisplaySnapshot, SessionRecording
from .published import PublishedSeries
from .windows import MaxWindowReducer, WindowAccumulator

logger = logging.getLogger(__name__)

Clock = Callable[[], float]
SnapshotListener = Callable[[DisplaySnapshot], None]


class SessionState(enum.Enum):
    IDLE = "idle"
    RECORDING = "recording"


class SessionStateError(RuntimeError):
    """Raised when a transition is requested from the wrong state."""


class StreamingSession:
    """
    Owns the Idle/Recording state machine and every per-session buffer.

    ``append`` is meant to be called by one producer (the acquisition
    callback). Display consumers read the published series, call
    :meth:`snapshot`, or register a listener; all of them may live on other
    threads. Each public call runs under a single lock so the recorded log,
    the windows, and the published histories always move together.

    Parameters
    ----------
    config:
        Window intervals, display capacity, and export naming.
    storage:
        Where exports are written. A plain :class:`ExportStorage` is wrapped
        in a :class:`BackgroundExportWriter`; ``None`` disables writing.
    clock:
        Monotonic time source in seconds.
    wall_clock:
        Produces the datetime used in export file names.
    """

    def __init__(
        self,
        config: Optional[RmsConfig] = None,
        *,
        storage: Union[ExportStorage, BackgroundExportWriter, None] = None,
        clock: Clock = time.monotonic,
        wall_clock: Callable[[], datetime] = datetime.now,
    ) -> None:
        self.config = (config or RmsConfig()).sanitized()
        if storage is None or isinstance(storage, BackgroundExportWriter):
            self._writer = storage
        else:
            self._writer = BackgroundExportWriter(storage)
        self._clock = clock
        self._wall_clock = wall_clock
        self._lock = threading.RLock()

        self._state = SessionState.IDLE
        self._start_time: Optional[float] = None
        self._started_at: Optional[datetime] = None
        self._times: List[float] = []
        self._recorded: List[float] = []
        self._last_recording: Optional[SessionRecording] = None
        self.last_write: Optional[ExportWriteHandle] = None

        self._short = WindowAccumulator(self.config.short_interval_s)
        self._medium = WindowAccumulator(self.config.medium_interval_s)
        self._max = MaxWindowReducer(self.config.max_window_count)

        self.values = PublishedSeries("values", capacity=self.config.display_capacity)
        self.short_term = PublishedSeries("short_term")
        self.medium_term = PublishedSeries("medium_term")
        self.max_term = PublishedSeries("max_term")

        self._listeners: List[SnapshotListener] = []

    # ------------------------------------------------------------------ state
    @property
    def state(self) -> SessionState:
        return self._state

    @property
    def is_recording(self) -> bool:
        return self._state is SessionState.RECORDING

    @property
    def start_time(self) -> Optional[float]:
        return self._start_time

    @property
    def recorded_times(self) -> List[float]:
        with self._lock:
            return list(self._times)

    @property
    def recorded_values(self) -> List[float]:
        with self._lock:
            return list(self._recorded)

    @property
    def last_recording(self) -> Optional[SessionRecording]:
        """The recording produced by the most recent :meth:`stop_and_export`."""
        return self._last_recording

    # -------------------------------------------------------------- listeners
    def add_listener(self, callback: SnapshotListener) -> None:
        """Call ``callback`` with a :class:`DisplaySnapshot` after every append."""
        with self._lock:
            self._listeners.append(callback)

    def remove_listener(self, callback: SnapshotListener) -> None:
        with self._lock:
            try:
                self._listeners.remove(callback)
            except ValueError:
                pass

    # ------------------------------------------------------------- lifecycle
    def record(self) -> None:
        """Start a new recording, discarding everything from the previous one."""
        with self._lock:
            if self.is_recording:
                logger.info("Restarting recording; %d unsaved samples discarded", len(self._recorded))
            self._start_time = self._clock()
            self._started_at = self._wall_clock()
            self._times.clear()
            self._recorded.clear()
            self._last_recording = None
            self._short.on_start(0.0)
            self._medium.on_start(0.0)
            self._max.reset()
            for series in (self.values, self.short_term, self.medium_term, self.max_term):
                series.clear()
            self._state = SessionState.RECORDING
        logger.info("Recording started")

    def append(self, batch: Iterable[float]) -> None:
        """
        Feed a batch of raw samples.

        The live display buffer always receives the batch. Everything else
        (recorded log, windows, histories) is updated only while recording,
        with every sample in the batch stamped with the same elapsed time.
        """
        values = [float(v) for v in batch]
        with self._lock:
            self.values.extend(values)
            elapsed: Optional[float] = None
            if self.is_recording:
                elapsed = self._clock() - self._start_time
                self._record_locked(values, elapsed)
            listeners = list(self._listeners)
            snapshot = self._snapshot_locked(elapsed) if listeners else None

        for callback in listeners:
            try:
                callback(snapshot)
            except Exception:
                logger.exception("Snapshot listener %r failed", callback)

    def stop_and_export(self) -> str:
        """
        Stop recording and return the export CSV text.

        The text is also handed to the background writer when storage is
        configured; the write outcome never affects the return value.

        Raises
        ------
        SessionStateError
            If no recording is in progress.
        """
        with self._lock:
            if not self.is_recording:
                logger.warning("stop_and_export() rejected: session is idle")
                raise SessionStateError("stop_and_export() requires an active recording")
            duration = self._clock() - self._start_time
            self._state = SessionState.IDLE
            recording = SessionRecording(
                started_at=self._started_at,
                duration_s=duration,
                times=list(self._times),
                values=list(self._recorded),
                short_term=self.short_term.snapshot(),
                medium_term=self.medium_term.snapshot(),
                max_term=self.max_term.snapshot(),
            )
            self._last_recording = recording

        with time_block("render_export"):
            text = render_export(recording, self.config)
        filename = export_filename(self.config.export_prefix, self._wall_clock())

        logger.info(
            "Recording stopped after %.3f s with %d samples",
            duration,
            len(recording),
        )
        if self._writer is not None:
            self.last_write = self._writer.submit(filename, text)
        return text

    # -------------------------------------------------------------- snapshots
    def snapshot(self) -> DisplaySnapshot:
        """Consistent copy of all four display sequences."""
        with self._lock:
            elapsed = None
            if self.is_recording:
                elapsed = self._clock() - self._start_time
            return self._snapshot_locked(elapsed)

    # ---------------------------------------------------------------- helpers
    def _record_locked(self, values: List[float], elapsed: float) -> None:
        self._times.extend([elapsed] * len(values))
        self._recorded.extend(values)

        short_value = self._short.on_samples(values, elapsed)
        if short_value is not None:
            self.short_term.append(short_value)

        medium_value = self._medium.on_samples(values, elapsed)
        if medium_value is not None:
            self.medium_term.append(medium_value)
            max_value = self._max.on_medium_term_value(medium_value)
            if max_value is not None:
                self.max_term.append(max_value)

    def _snapshot_locked(self, elapsed: Optional[float]) -> DisplaySnapshot:
        return DisplaySnapshot(
            values=tuple(self.values.snapshot()),
            short_term=tuple(self.short_term.snapshot()),
            medium_term=tuple(self.medium_term.snapshot()),
            max_term=tuple(self.max_term.snapshot()),
            is_recording=self.is_recording,
            elapsed_s=elapsed,
        )
