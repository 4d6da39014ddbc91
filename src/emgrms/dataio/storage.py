"""Export storage: write rendered CSV text to disk off the caller's thread."""

from __future__ import annotations

import logging
import threading
from dataclasses import dataclass, field
from pathlib import Path
from typing import Callable, Optional, Protocol

logger = logging.getLogger(__name__)


class ExportStorage(Protocol):
    """Anything that can persist a named UTF-8 text payload."""

    def write(self, filename: str, text: str) -> Path:  # pragma: no cover - protocol
        ...


class DirectoryStorage:
    """Writes each export as a file inside ``directory``.

    The directory is created on first write.
    """

    def __init__(self, directory: Path | str) -> None:
        self.directory = Path(directory)

    def write(self, filename: str, text: str) -> Path:
        self.directory.mkdir(parents=True, exist_ok=True)
        path = self.directory / filename
        with path.open("w", encoding="utf-8", newline="") as fh:
            fh.write(text)
        return path


@dataclass
class ExportWriteResult:
    filename: str
    path: Optional[Path] = None
    error: Optional[str] = None

    @property
    def ok(self) -> bool:
        return self.error is None


@dataclass
class ExportWriteHandle:
    filename: str
    thread: threading.Thread
    _done: threading.Event = field(default_factory=threading.Event, repr=False)
    _result: Optional[ExportWriteResult] = field(default=None, repr=False)

    @property
    def done(self) -> bool:
        return self._done.is_set()

    @property
    def result(self) -> Optional[ExportWriteResult]:
        """The outcome once the write finished, otherwise ``None``."""
        return self._result

    def wait(self, timeout: Optional[float] = None) -> Optional[ExportWriteResult]:
        self._done.wait(timeout)
        return self._result

    def _finish(self, result: ExportWriteResult) -> None:
        self._result = result
        self._done.set()


CompletionCallback = Callable[[ExportWriteResult], None]


class BackgroundExportWriter:
    """Fire-and-forget writer: each submit runs the storage write on a daemon thread.

    Failures are logged and reported through ``on_complete``; they are never
    raised to the submitting thread, and nothing is retried.
    """

    def __init__(
        self,
        storage: ExportStorage,
        *,
        on_complete: Optional[CompletionCallback] = None,
    ) -> None:
        self.storage = storage
        self.on_complete = on_complete

    def submit(self, filename: str, text: str) -> ExportWriteHandle:
        handle: ExportWriteHandle

        def _target() -> None:
            handle._finish(self._write(filename, text))
            self._notify(handle.result)

        thread = threading.Thread(
            target=_target,
            name=f"EmgRmsExportWriter({filename})",
            daemon=True,
        )
        handle = ExportWriteHandle(filename=filename, thread=thread)
        thread.start()
        return handle

    def _write(self, filename: str, text: str) -> ExportWriteResult:
        try:
            path = self.storage.write(filename, text)
        except Exception as exc:
            logger.exception("Export write failed for %s", filename)
            return ExportWriteResult(filename=filename, error=str(exc) or type(exc).__name__)
        logger.info("Export written to %s", path)
        return ExportWriteResult(filename=filename, path=path)

    def _notify(self, result: Optional[ExportWriteResult]) -> None:
        if self.on_complete is None or result is None:
            return
        try:
            self.on_complete(result)
        except Exception:
            logger.exception("Export completion callback failed for %s", result.filename)
