"""Dataclasses describing samples, trigger decisions and written dumps."""

from __future__ import annotations

from dataclasses import dataclass
from datetime import datetime
from enum import Enum
from pathlib import Path


class ResourceKind(str, Enum):
    """Resource watched by a monitor; the value is the dump file prefix."""

    MEMORY = "heap"
    CPU = "cpu"
    THREAD = "goroutine"

    @property
    def label(self) -> str:
        return _LABELS[self]


_LABELS = {
    ResourceKind.MEMORY: "mem",
    ResourceKind.CPU: "cpu",
    ResourceKind.THREAD: "g",
}


@dataclass(slots=True, frozen=True)
class TriggerDecision:
    fire: bool
    avg_before: float


@dataclass(slots=True)
class MemoryAllocationStats:
    """Best-effort allocation counters for the current interpreter.

    ``in_use_*`` come from tracemalloc when it is tracing. Freed objects are
    the totals collected by the garbage collector; allocated values are
    derived from those two.
    """

    allocated_bytes: int
    freed_bytes: int
    in_use_bytes: int
    allocated_objects: int
    freed_objects: int
    in_use_objects: int


@dataclass(slots=True)
class DumpRecord:
    kind: ResourceKind
    path: Path
    timestamp: datetime
    sample: int
    window_average: float
