"""Data provider package."""

from .memory import sample_memory_allocation_stats
from .process import (
    sample_concurrent_task_count,
    sample_cpu_percent,
    sample_process_memory_percent,
)

__all__ = [
    "sample_concurrent_task_count",
    "sample_cpu_percent",
    "sample_memory_allocation_stats",
    "sample_process_memory_percent",
]
