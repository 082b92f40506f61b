"""Core utilities for autodump."""

from __future__ import annotations

from .config import DEFAULTS, AutodumpConfig, DumpIntervals, load_config

__all__ = [
    "AutodumpConfig",
    "DEFAULTS",
    "DumpIntervals",
    "load_config",
]
