"""Configuration objects and helpers.

``runtime`` holds the window/display/export tuning loaded from an optional
YAML file; ``app_config`` knows where exports land on disk.
"""

from .app_config import AppPaths
from .runtime import RmsConfig, config_from_mapping, load_config

__all__ = ["AppPaths", "RmsConfig", "config_from_mapping", "load_config"]
