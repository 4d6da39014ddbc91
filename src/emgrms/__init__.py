"""Streaming multi-window RMS aggregation for live EMG recording.

Subpackages:
- analysis: pure signal statistics (RMS)
- core: windows, published buffers, and the recording session
- dataio: CSV export, export file naming, storage, and replay loading
- config: tunable defaults and application paths
- tools: opt-in debug instrumentation
"""

__version__ = "0.1.0"
