"""Heap snapshots based on tracemalloc."""

from __future__ import annotations

import gc
import time
import tracemalloc
from typing import BinaryIO

DEFAULT_FRAMES = 25


def ensure_tracing(frames: int = DEFAULT_FRAMES) -> bool:
    """Start tracemalloc unless it already runs. Returns True if it was started here."""

    if tracemalloc.is_tracing():
        return False
    tracemalloc.start(frames)
    return True


def write_heap_snapshot(fh: BinaryIO, limit: int = 200) -> None:
    """Write the top allocation sites, largest first, as text."""

    lines = [f"heap profile: {time.strftime('%Y-%m-%d %H:%M:%S')}"]
    if tracemalloc.is_tracing():
        current, peak = tracemalloc.get_traced_memory()
        snapshot = tracemalloc.take_snapshot().filter_traces((
            tracemalloc.Filter(False, tracemalloc.__file__),
        ))
        stats = snapshot.statistics("traceback")
        lines.append(f"traced: current={current} peak={peak} sites={len(stats)}")
        for stat in stats[:limit]:
            lines.append("")
            lines.append(f"{stat.size} bytes in {stat.count} blocks")
            lines.extend(stat.traceback.format())
    else:
        lines.append("tracemalloc is not tracing; allocation sites unavailable")

    lines.append("")
    lines.append("gc:")
    for generation, counts in enumerate(gc.get_stats()):
        lines.append(
            f"  gen{generation}: collections={counts.get('collections', 0)} "
            f"collected={counts.get('collected', 0)} uncollectable={counts.get('uncollectable', 0)}"
        )
    fh.write(("\n".join(lines) + "\n").encode("utf-8"))
