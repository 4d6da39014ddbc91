"""Runtime configuration for the streaming RMS windows and export."""

from __future__ import annotations

from dataclasses import dataclass, fields
from pathlib import Path
from typing import Any, Mapping, MutableMapping, Optional

import yaml


@dataclass(slots=True)
class RmsConfig:
    """
    Tuning knobs for windowing, live display, and export naming.

    The defaults produce 0.1 s and 1 s RMS windows, a rolling max over the
    last 10 one-second values, and a 1000-sample live display.

    ``max_export_every_rows`` is the export row count between max-of-10
    fields. It is a row trigger, independent of ``max_window_count``.
    """

    short_interval_s: float = 0.1
    medium_interval_s: float = 1.0
    max_window_count: int = 10
    max_export_every_rows: int = 10
    display_capacity: int = 1000

    export_prefix: str = "EMG_Recording_"
    export_dir: Optional[str] = None

    def sanitized(self) -> RmsConfig:
        """Return a copy with derived limits applied."""
        export_dir = self.export_dir
        if export_dir is not None:
            export_dir = str(export_dir).strip() or None
        return RmsConfig(
            short_interval_s=max(1e-3, float(self.short_interval_s)),
            medium_interval_s=max(1e-3, float(self.medium_interval_s)),
            max_window_count=max(1, int(self.max_window_count)),
            max_export_every_rows=max(1, int(self.max_export_every_rows)),
            display_capacity=max(1, int(self.display_capacity)),
            export_prefix=str(self.export_prefix),
            export_dir=export_dir,
        )


def _recognized_fields() -> set[str]:
    """Return the dataclass field names accepted by :class:`RmsConfig`."""
    return {f.name for f in fields(RmsConfig)}


def _normalize_mapping(data: Mapping[str, Any]) -> MutableMapping[str, Any]:
    """Flatten an optional top-level ``session`` block into the mapping."""
    if "session" in data and isinstance(data["session"], Mapping):
        merged: MutableMapping[str, Any] = {}
        for key, value in data.items():
            if key == "session":
                merged.update(value)
            else:
                merged[key] = value
        return merged
    return dict(data)


def config_from_mapping(data: Mapping[str, Any] | None) -> RmsConfig:
    """Build :class:`RmsConfig` from ``data`` (ignoring unknown keys)."""
    if not data:
        return RmsConfig()
    normalized = _normalize_mapping(data)
    known = _recognized_fields()
    payload = {key: normalized[key] for key in normalized.keys() & known}
    return RmsConfig(**payload).sanitized()


def load_config(path: str | Path | None) -> RmsConfig:
    """
    Load configuration from a YAML file at ``path``.

    Missing files fall back to default :class:`RmsConfig`.
    """
    if path is None:
        return RmsConfig()
    cfg_path = Path(path)
    if not cfg_path.exists():
        return RmsConfig()
    with cfg_path.open("r", encoding="utf-8") as fh:
        raw = yaml.safe_load(fh) or {}
    if not isinstance(raw, Mapping):
        raise ValueError(f"Expected mapping in {cfg_path}, got {type(raw).__name__}")
    return config_from_mapping(raw)


__all__ = ["RmsConfig", "config_from_mapping", "load_config"]
