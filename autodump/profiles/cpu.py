"""CPU profile capture using cProfile.

Only one capture may run at a time. Since Python 3.12 cProfile hooks into
``sys.monitoring``, which is interpreter wide: a capture started on the
scheduler thread sees every thread and may be stopped from the timer thread.
The output uses the marshalled pstats format, so ``pstats.Stats(path)`` or
snakeviz can load it.
"""

from __future__ import annotations

import cProfile
import marshal
import threading
from typing import BinaryIO

_lock = threading.Lock()
_profiler: cProfile.Profile | None = None
_target: BinaryIO | None = None


def cpu_profile_active() -> bool:
    with _lock:
        return _profiler is not None


def start_cpu_snapshot(fh: BinaryIO) -> None:
    """Begin profiling into ``fh``.

    Raises RuntimeError when a capture started here is still running.
    ``cProfile`` itself raises ValueError when another profiling tool
    already holds the interpreter hook.
    """

    global _profiler, _target
    with _lock:
        if _profiler is not None:
            raise RuntimeError("cpu profiling already in progress")
        profiler = cProfile.Profile()
        profiler.enable()
        _profiler = profiler
        _target = fh


def stop_cpu_snapshot() -> None:
    """Stop the running capture and write it. No-op when nothing runs."""

    global _profiler, _target
    with _lock:
        profiler, fh = _profiler, _target
        _profiler = None
        _target = None
    if profiler is None:
        return
    profiler.disable()
    profiler.create_stats()
    if fh is not None:
        marshal.dump(profiler.stats, fh)
        fh.flush()
