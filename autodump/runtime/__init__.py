"""Scheduler runtime: windows, budget, gate, monitors and the control loop."""

from __future__ import annotations

from .budget import DumpBudget
from .gate import DumpGate
from .monitor import CPUMonitor, MemoryMonitor, ResourceMonitor, ThreadMonitor
from .scheduler import DumpScheduler, start, stop
from .sink import SnapshotSink, snapshot_path
from .window import RollingWindow

__all__ = [
    "CPUMonitor",
    "DumpBudget",
    "DumpGate",
    "DumpScheduler",
    "MemoryMonitor",
    "ResourceMonitor",
    "RollingWindow",
    "SnapshotSink",
    "ThreadMonitor",
    "snapshot_path",
    "start",
    "stop",
]
