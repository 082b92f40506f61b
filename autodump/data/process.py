"""Resource usage of the current process."""

from __future__ import annotations

import os
import threading

import psutil

_PROCESS: psutil.Process | None = None


def _current_process() -> psutil.Process:
    global _PROCESS
    # re-resolve after a fork
    if _PROCESS is None or _PROCESS.pid != os.getpid():
        _PROCESS = psutil.Process(os.getpid())
    return _PROCESS


def sample_process_memory_percent() -> float:
    """Resident set size as a percentage of total physical memory."""

    return float(_current_process().memory_percent())


def sample_cpu_percent() -> float:
    """Process CPU usage since the previous call.

    Like ``psutil.cpu_percent(interval=None)``, the very first call returns 0.0.
    The value can exceed 100 on multi-core hosts.
    """

    return float(_current_process().cpu_percent(interval=None))


def sample_concurrent_task_count() -> int:
    return threading.active_count()
