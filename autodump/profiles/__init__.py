"""Writers producing the diagnostic artifacts."""

from .cpu import cpu_profile_active, start_cpu_snapshot, stop_cpu_snapshot
from .heap import ensure_tracing, write_heap_snapshot
from .stacks import write_stack_snapshot

__all__ = [
    "cpu_profile_active",
    "ensure_tracing",
    "start_cpu_snapshot",
    "stop_cpu_snapshot",
    "write_heap_snapshot",
    "write_stack_snapshot",
]
