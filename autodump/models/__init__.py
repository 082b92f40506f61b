"""Models exported by autodump."""

from .resource_snapshot import (
    DumpRecord,
    MemoryAllocationStats,
    ResourceKind,
    TriggerDecision,
)

__all__ = [
    "DumpRecord",
    "MemoryAllocationStats",
    "ResourceKind",
    "TriggerDecision",
]
