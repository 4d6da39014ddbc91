"""Command-line replay of a raw EMG log through a recording session.

``emgrms replay samples.csv`` feeds the log in batches with a simulated clock,
stops the session, and writes the export CSV exactly as a live recording would.
"""

from __future__ import annotations

import argparse
import logging
import sys
from pathlib import Path
from typing import Optional, Sequence

import numpy as np

from .config.app_config import AppPaths
from .config.runtime import load_config
from .core.session import StreamingSession
from .dataio.log_loader import chunk_array, load_raw_samples
from .dataio.storage import DirectoryStorage

logger = logging.getLogger(__name__)


class ReplayClock:
    """Manually advanced clock standing in for ``time.monotonic``."""

    def __init__(self, start: float = 0.0) -> None:
        self.now = float(start)

    def __call__(self) -> float:
        return self.now


def _build_arg_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="emgrms",
        description="Streaming multi-window RMS recorder for EMG samples.",
    )
    parser.add_argument("-v", "--verbose", action="store_true", help="Enable debug logging")
    sub = parser.add_subparsers(dest="command", required=True)

    replay = sub.add_parser("replay", help="Replay a raw sample log and export the session CSV")
    replay.add_argument("file", type=Path, help="CSV with one value, or time,value, per row")
    replay.add_argument(
        "--rate",
        type=float,
        default=1000.0,
        help="Sample rate in Hz used when the log has no time column (default: 1000)",
    )
    replay.add_argument(
        "--batch-size",
        type=int,
        default=50,
        help="Samples delivered per append call (default: 50)",
    )
    replay.add_argument("--config", type=Path, default=None, help="Optional YAML config file")
    replay.add_argument(
        "--output-dir",
        type=Path,
        default=None,
        help="Directory for the export (default: config export_dir or data/exports)",
    )
    replay.add_argument(
        "--print",
        dest="print_export",
        action="store_true",
        help="Also print the export CSV to stdout",
    )
    replay.add_argument(
        "--timeout",
        type=float,
        default=10.0,
        help="Seconds to wait for the export write (default: 10)",
    )
    return parser


def _batch_times(times: Optional[np.ndarray], count: int, rate: float, batch_size: int) -> np.ndarray:
    """Clock reading at the end of each batch, relative to the first sample."""
    ends = np.minimum(np.arange(batch_size, count + batch_size, batch_size), count) - 1
    if times is not None and times.size:
        return times[ends] - times[0]
    return (ends + 1) / rate


def replay(args: argparse.Namespace) -> int:
    if args.batch_size <= 0:
        logger.error("--batch-size must be positive")
        return 1
    if args.rate <= 0:
        logger.error("--rate must be positive")
        return 1

    try:
        config = load_config(args.config)
        samples = load_raw_samples(args.file)
    except (OSError, ValueError) as exc:
        logger.error("Could not load input: %s", exc)
        return 1

    output_dir = args.output_dir or (Path(config.export_dir) if config.export_dir else AppPaths().exports)
    clock = ReplayClock()
    session = StreamingSession(config, storage=DirectoryStorage(output_dir), clock=clock)

    session.record()
    stamps = _batch_times(samples.times, samples.values.size, args.rate, args.batch_size)
    for stamp, batch in zip(stamps, chunk_array(samples.values, args.batch_size)):
        clock.now = float(stamp)
        session.append(batch.tolist())
    text = session.stop_and_export()

    if args.print_export:
        sys.stdout.write(text)

    handle = session.last_write
    result = handle.wait(args.timeout) if handle is not None else None
    if result is None:
        logger.error("Export write did not finish within %.1f s", args.timeout)
        return 1
    if not result.ok:
        logger.error("Export write failed: %s", result.error)
        return 1

    recording = session.last_recording
    logger.info(
        "Replayed %d samples (%d short, %d medium, %d max values) -> %s",
        len(recording),
        len(recording.short_term),
        len(recording.medium_term),
        len(recording.max_term),
        result.path,
    )
    return 0


def main(argv: Sequence[str] | None = None) -> int:
    parser = _build_arg_parser()
    args = parser.parse_args(argv)
    logging.basicConfig(
        level=logging.DEBUG if args.verbose else logging.INFO,
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
    )
    if args.command == "replay":
        return replay(args)
    parser.error(f"Unknown command {args.command!r}")
    return 2


if __name__ == "__main__":
    raise SystemExit(main())
