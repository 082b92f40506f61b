"""Global configuration values for the autodump scheduler."""

from __future__ import annotations

import os
from dataclasses import dataclass, field
from datetime import timedelta
from pathlib import Path
from typing import Optional

DEFAULT_DUMP_DIRECTORY = "./"
DEFAULT_MAX_DUMPS_PER_DAY = 10


@dataclass(frozen=True)
class DumpIntervals:
    """Minimum time between two dumps of the same kind."""

    memory: timedelta = timedelta(seconds=60)
    cpu: timedelta = timedelta(seconds=60)
    thread: timedelta = timedelta(seconds=60)


@dataclass(frozen=True)
class AutodumpConfig:
    """Process-wide settings, fixed once the scheduler is started."""

    dump_directory: Path = Path(DEFAULT_DUMP_DIRECTORY)
    max_dumps_per_day: int = DEFAULT_MAX_DUMPS_PER_DAY
    tick_interval: float = 5.0  # seconds
    cpu_profile_duration: float = 10.0  # seconds
    intervals: DumpIntervals = field(default_factory=DumpIntervals)
    thread_spike_ratio: float = 1.25
    window_size: int = 10
    # ``dumps_today > max`` lets one extra dump through per day; True uses ``>=``.
    strict_daily_limit: bool = False
    # False feeds zeros into the memory window instead of the sampled percent.
    record_sampled_memory: bool = True
    # start tracemalloc with the scheduler so heap dumps carry allocation sites
    trace_allocations: bool = True

    def __post_init__(self) -> None:
        # frozen: normalise through object.__setattr__
        object.__setattr__(self, "dump_directory", Path(self.dump_directory or DEFAULT_DUMP_DIRECTORY))
        if self.max_dumps_per_day <= 0:
            object.__setattr__(self, "max_dumps_per_day", DEFAULT_MAX_DUMPS_PER_DAY)
        if self.window_size <= 0:
            raise ValueError("window_size must be positive")
        if self.tick_interval <= 0:
            raise ValueError("tick_interval must be positive")


def getenv_str(name: str, default: str) -> str:
    v = os.getenv(name)
    return v if v is not None and v.strip() else default


def getenv_int(name: str, default: int, min_val: Optional[int] = None, max_val: Optional[int] = None) -> int:
    raw = os.getenv(name)
    if raw is None:
        return default
    try:
        val = int(raw)
    except ValueError:
        return default
    if min_val is not None:
        val = max(min_val, val)
    if max_val is not None:
        val = min(max_val, val)
    return val


def getenv_float(name: str, default: float, min_val: Optional[float] = None, max_val: Optional[float] = None) -> float:
    raw = os.getenv(name)
    if raw is None:
        return default
    try:
        val = float(raw)
    except ValueError:
        return default
    if min_val is not None:
        val = max(min_val, val)
    if max_val is not None:
        val = min(max_val, val)
    return val


def getenv_bool(name: str, default: bool) -> bool:
    raw = os.getenv(name)
    if raw is None:
        return default
    return raw.strip().lower() in {"1", "true", "t", "yes", "y", "on"}


def load_config() -> AutodumpConfig:
    """Build a config from ``AUTODUMP_*`` environment variables.

    Unset or unparsable values keep their defaults.
    """

    base = DumpIntervals()
    intervals = DumpIntervals(
        memory=timedelta(seconds=getenv_float(
            "AUTODUMP_MEM_INTERVAL_SECONDS", base.memory.total_seconds(), min_val=0.0)),
        cpu=timedelta(seconds=getenv_float(
            "AUTODUMP_CPU_INTERVAL_SECONDS", base.cpu.total_seconds(), min_val=0.0)),
        thread=timedelta(seconds=getenv_float(
            "AUTODUMP_THREAD_INTERVAL_SECONDS", base.thread.total_seconds(), min_val=0.0)),
    )
    return AutodumpConfig(
        dump_directory=Path(getenv_str("AUTODUMP_DIR", DEFAULT_DUMP_DIRECTORY)),
        max_dumps_per_day=getenv_int("AUTODUMP_MAX_PER_DAY", DEFAULT_MAX_DUMPS_PER_DAY),
        tick_interval=getenv_float("AUTODUMP_TICK_SECONDS", 5.0, min_val=0.1),
        cpu_profile_duration=getenv_float("AUTODUMP_CPU_PROFILE_SECONDS", 10.0, min_val=0.1),
        intervals=intervals,
        strict_daily_limit=getenv_bool("AUTODUMP_STRICT_LIMIT", False),
    )


DEFAULTS = AutodumpConfig()
