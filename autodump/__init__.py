"""Self-monitoring dump scheduler for long-running processes."""

from __future__ import annotations

import logging

__all__ = [
    "AutodumpConfig",
    "DumpIntervals",
    "DumpScheduler",
    "load_config",
    "start",
    "stop",
]

logging.getLogger(__name__).addHandler(logging.NullHandler())

from .core import AutodumpConfig, DumpIntervals, load_config  # noqa: E402
from .runtime import DumpScheduler, start, stop  # noqa: E402
