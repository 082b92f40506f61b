"""Interpreter allocation statistics."""

from __future__ import annotations

import gc
import tracemalloc

from autodump.models.resource_snapshot import MemoryAllocationStats


def sample_memory_allocation_stats() -> MemoryAllocationStats:
    in_use_bytes = 0
    in_use_objects = 0
    peak_bytes = 0
    if tracemalloc.is_tracing():
        snapshot = tracemalloc.take_snapshot()
        for stat in snapshot.statistics("filename"):
            in_use_bytes += stat.size
            in_use_objects += stat.count
        _, peak_bytes = tracemalloc.get_traced_memory()

    freed_objects = sum(generation.get("collected", 0) for generation in gc.get_stats())
    allocated_bytes = max(peak_bytes, in_use_bytes)
    return MemoryAllocationStats(
        allocated_bytes=allocated_bytes,
        freed_bytes=allocated_bytes - in_use_bytes,
        in_use_bytes=in_use_bytes,
        allocated_objects=in_use_objects + freed_objects,
        freed_objects=freed_objects,
        in_use_objects=in_use_objects,
    )
