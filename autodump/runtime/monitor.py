"""Per-resource trigger rules."""

from __future__ import annotations

from datetime import datetime, timedelta

from autodump.models import ResourceKind, TriggerDecision
from autodump.runtime.gate import DumpGate
from autodump.runtime.window import DEFAULT_CAPACITY, RollingWindow


class ResourceMonitor:
    """Keeps the sample history of one resource and decides when to dump it.

    Every sample enters the window, whether or not a dump follows.
    ``last_dump_time`` moves only through :meth:`mark_dumped`, which the
    scheduler calls once the snapshot has been written.
    """

    kind: ResourceKind

    def __init__(self, min_interval: timedelta, *, window_size: int = DEFAULT_CAPACITY) -> None:
        self.min_interval = min_interval
        self.window = RollingWindow(window_size)
        self.last_dump_time: datetime | None = None

    def decide(self, now: datetime, sample: int) -> TriggerDecision:
        self.window.push(sample)
        average = self.window.average()
        if self.last_dump_time is not None and now - self.last_dump_time < self.min_interval:
            return TriggerDecision(fire=False, avg_before=average)
        return TriggerDecision(fire=self._should_fire(sample, average), avg_before=average)

    def _should_fire(self, sample: int, average: float) -> bool:
        raise NotImplementedError

    def mark_dumped(self, now: datetime) -> None:
        if self.last_dump_time is None or now > self.last_dump_time:
            self.last_dump_time = now


class MemoryMonitor(ResourceMonitor):
    """Periodic heap checkpoints, gated on time only."""

    kind = ResourceKind.MEMORY

    def _should_fire(self, sample: int, average: float) -> bool:
        return True


class CPUMonitor(ResourceMonitor):
    """Fires when the interval elapsed and the CPU gate can be taken.

    A positive decision leaves the gate held; the caller owns releasing it.
    """

    kind = ResourceKind.CPU

    def __init__(self, min_interval: timedelta, gate: DumpGate, *, window_size: int = DEFAULT_CAPACITY) -> None:
        super().__init__(min_interval, window_size=window_size)
        self.gate = gate

    def _should_fire(self, sample: int, average: float) -> bool:
        return self.gate.try_enter_cpu_profile()


class ThreadMonitor(ResourceMonitor):
    """Fires on a spike above the rolling average (current sample included)."""

    kind = ResourceKind.THREAD

    def __init__(
        self,
        min_interval: timedelta,
        *,
        spike_ratio: float = 1.25,
        window_size: int = DEFAULT_CAPACITY,
    ) -> None:
        super().__init__(min_interval, window_size=window_size)
        self.spike_ratio = spike_ratio

    def _should_fire(self, sample: int, average: float) -> bool:
        return float(sample) > average * self.spike_ratio
