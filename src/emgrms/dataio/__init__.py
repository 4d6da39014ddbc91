"""Data input/output helpers (CSV export, file names, storage, replay logs).

Utility modules here keep disk-level concerns isolated from the session:
- :mod:`export` renders a finished recording as CSV text.
- :mod:`file_paths` builds timestamped export file names.
- :mod:`storage` writes exports on a background thread.
- :mod:`log_loader` parses raw sample logs for offline replay.
"""

from .export import EXPORT_HEADERS, iter_export_rows, render_export
from .file_paths import export_filename
from .storage import (
    BackgroundExportWriter,
    DirectoryStorage,
    ExportStorage,
    ExportWriteHandle,
    ExportWriteResult,
)

__all__ = [
    "EXPORT_HEADERS",
    "iter_export_rows",
    "render_export",
    "export_filename",
    "BackgroundExportWriter",
    "DirectoryStorage",
    "ExportStorage",
    "ExportWriteHandle",
    "ExportWriteResult",
]
