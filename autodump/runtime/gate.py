"""Exclusion flag for the CPU profiler."""

from __future__ import annotations

import threading


class DumpGate:
    """Set while a CPU capture runs; cleared by its stop timer.

    Every access goes through one lock, so the scheduler's ``is_busy`` read
    and the timer's clear never interleave.
    """

    def __init__(self) -> None:
        self._lock = threading.Lock()
        self._cpu_profiling = False

    def try_enter_cpu_profile(self) -> bool:
        with self._lock:
            if self._cpu_profiling:
                return False
            self._cpu_profiling = True
            return True

    def exit_cpu_profile(self) -> None:
        with self._lock:
            self._cpu_profiling = False

    def is_busy(self) -> bool:
        with self._lock:
            return self._cpu_profiling
