from __future__ import annotations

from datetime import datetime

import pytest

from autodump import AutodumpConfig, DumpScheduler
from autodump.runtime.sink import SnapshotSink

BASE = datetime(2024, 5, 1, 12, 0, 0)


class FakeTimer:
    def __init__(self, interval, function):
        self.interval = interval
        self.function = function
        self.started = False
        self.cancelled = False

    def start(self):
        self.started = True

    def cancel(self):
        self.cancelled = True

    def fire(self):
        self.function()


class Recorder:
    """Writers that record calls instead of profiling the test process."""

    def __init__(self):
        self.cpu_started = 0
        self.cpu_stopped = 0

    def heap(self, fh):
        fh.write(b"heap")

    def stacks(self, fh):
        fh.write(b"stacks")

    def cpu_start(self, fh):
        self.cpu_started += 1
        fh.write(b"cpu")

    def cpu_stop(self):
        self.cpu_stopped += 1


@pytest.fixture
def timers():
    return []


@pytest.fixture
def recorder():
    return Recorder()


@pytest.fixture
def make_scheduler(tmp_path, timers, recorder):
    def factory(
        *,
        sink=None,
        memory=lambda: 12.5,
        cpu=lambda: 3.0,
        tasks=lambda: 4,
        allocation_stats=lambda: None,
        **overrides,
    ):
        overrides.setdefault("trace_allocations", False)
        config = AutodumpConfig(dump_directory=tmp_path, **overrides)
        if sink is None:
            sink = SnapshotSink(
                tmp_path,
                heap_writer=recorder.heap,
                stack_writer=recorder.stacks,
                cpu_starter=recorder.cpu_start,
                cpu_stopper=recorder.cpu_stop,
            )

        def timer_factory(interval, function):
            timer = FakeTimer(interval, function)
            timers.append(timer)
            return timer

        return DumpScheduler(
            config,
            sink=sink,
            clock=lambda: BASE,
            timer_factory=timer_factory,
            sample_memory_percent=memory,
            sample_allocation_stats=allocation_stats,
            sample_cpu_percent=cpu,
            sample_task_count=tasks,
        )

    return factory
