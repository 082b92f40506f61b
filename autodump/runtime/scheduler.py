"""Background control loop deciding when to write diagnostic dumps."""

from __future__ import annotations

import logging
import threading
import time
from collections import defaultdict, deque
from collections.abc import Callable
from dataclasses import asdict
from datetime import datetime
from pathlib import Path
from typing import Any, Deque

from autodump import data, profiles
from autodump.core.config import AutodumpConfig
from autodump.models import DumpRecord, MemoryAllocationStats, ResourceKind
from autodump.runtime.budget import DumpBudget, day_key
from autodump.runtime.gate import DumpGate
from autodump.runtime.monitor import CPUMonitor, MemoryMonitor, ResourceMonitor, ThreadMonitor
from autodump.runtime.sink import SnapshotSink

logger = logging.getLogger(__name__)

HISTORY_SIZE = 100

TimerFactory = Callable[[float, Callable[[], None]], Any]


class DumpScheduler:
    """Samples the process every tick and writes heap, CPU or stack dumps.

    Each tick, unless a CPU capture is running or today's budget is spent,
    evaluates memory, then CPU, then thread count. Any of them may fire and
    each fired dump counts against the shared daily budget. A CPU capture
    keeps running after the tick returns; a timer stops it after
    ``cpu_profile_duration`` seconds and reopens the gate.

    Failures (sampling, file IO, profiler start) only skip the resource for
    that tick. They are logged and never escape the scheduler.
    """

    def __init__(
        self,
        config: AutodumpConfig | None = None,
        *,
        sink: SnapshotSink | None = None,
        clock: Callable[[], datetime] = datetime.now,
        timer_factory: TimerFactory = threading.Timer,
        sample_memory_percent: Callable[[], float] = data.sample_process_memory_percent,
        sample_allocation_stats: Callable[[], MemoryAllocationStats] = data.sample_memory_allocation_stats,
        sample_cpu_percent: Callable[[], float] = data.sample_cpu_percent,
        sample_task_count: Callable[[], int] = data.sample_concurrent_task_count,
    ) -> None:
        self.config = config or AutodumpConfig()
        self.sink = sink or SnapshotSink(self.config.dump_directory)
        self._clock = clock
        self._timer_factory = timer_factory
        self._sample_memory_percent = sample_memory_percent
        self._sample_allocation_stats = sample_allocation_stats
        self._sample_cpu_percent = sample_cpu_percent
        self._sample_task_count = sample_task_count

        cfg = self.config
        self.gate = DumpGate()
        self.budget = DumpBudget(cfg.max_dumps_per_day, strict=cfg.strict_daily_limit, now=clock())
        self.memory_monitor = MemoryMonitor(cfg.intervals.memory, window_size=cfg.window_size)
        self.cpu_monitor = CPUMonitor(cfg.intervals.cpu, self.gate, window_size=cfg.window_size)
        self.thread_monitor = ThreadMonitor(
            cfg.intervals.thread,
            spike_ratio=cfg.thread_spike_ratio,
            window_size=cfg.window_size,
        )

        self._lock = threading.RLock()
        self._stop = threading.Event()
        self._thread: threading.Thread | None = None
        self._cpu_timer: Any = None

        self._dumps_today = 0
        self._last_global_dump_time = clock()
        self._history: Deque[DumpRecord] = deque(maxlen=HISTORY_SIZE)
        self._failures: defaultdict[str, int] = defaultdict(int)
        self._diagnostics: dict[str, Any] = {
            "ticks": 0,
            "busy_ticks": 0,
            "budget_skipped_ticks": 0,
            "last_tick_at": None,
            "last_tick_duration": 0.0,
            "consecutive_failures": 0,
            "last_error": None,
        }

    # ------------------------------------------------------------------ lifecycle

    @property
    def running(self) -> bool:
        thread = self._thread
        return thread is not None and thread.is_alive()

    def start(self) -> "DumpScheduler":
        if self.running:
            return self
        if self.config.trace_allocations:
            profiles.ensure_tracing()
        self._stop.clear()
        self._thread = threading.Thread(target=self._run, name="DumpScheduler", daemon=True)
        self._thread.start()
        logger.info(
            "autodump started: dir=%s tick=%.1fs max_per_day=%d",
            self.config.dump_directory,
            self.config.tick_interval,
            self.config.max_dumps_per_day,
        )
        return self

    def stop(self, timeout: float | None = None) -> None:
        """Stop the loop and finish a running CPU capture right away."""

        self._stop.set()
        thread = self._thread
        if thread and thread.is_alive() and thread is not threading.current_thread():
            thread.join(timeout=timeout)
        self._thread = None

        timer = self._cpu_timer
        if timer is not None:
            timer.cancel()
            self._finish_cpu_profile()

    def _run(self) -> None:
        while not self._stop.wait(self.config.tick_interval):
            start_time = time.perf_counter()
            try:
                self.tick()
            except Exception as exc:
                logger.exception("Unexpected error during dump tick")
                self._update_diagnostics(success=False, duration=time.perf_counter() - start_time, error=exc)
            else:
                self._update_diagnostics(success=True, duration=time.perf_counter() - start_time)

    # ------------------------------------------------------------------ tick

    def tick(self, now: datetime | None = None) -> list[DumpRecord]:
        """Run one evaluation cycle and return the dumps it wrote."""

        now = now or self._clock()
        with self._lock:
            self._diagnostics["ticks"] += 1
            if self.gate.is_busy():
                logger.debug("cpu profile in progress, skipping tick")
                self._diagnostics["busy_ticks"] += 1
                return []

            if day_key(now) != day_key(self._last_global_dump_time):
                self._dumps_today = 0
            elif self._budget_spent():
                logger.debug("daily dump budget spent (%d), skipping tick", self._dumps_today)
                self._diagnostics["budget_skipped_ticks"] += 1
                return []

            fired: list[DumpRecord] = []
            for evaluate in (self._evaluate_memory, self._evaluate_cpu, self._evaluate_thread):
                record = evaluate(now)
                if record is None:
                    continue
                self._dumps_today += 1
                self._last_global_dump_time = now
                self._history.append(record)
                fired.append(record)
                logger.info("dump %s: %s", record.kind.label, record.path)
            return fired

    def _budget_spent(self) -> bool:
        limit = self.config.max_dumps_per_day
        if self.config.strict_daily_limit:
            return self._dumps_today >= limit
        return self._dumps_today > limit

    def _evaluate_memory(self, now: datetime) -> DumpRecord | None:
        if self.config.record_sampled_memory:
            sampler = self._sample_memory_percent
        else:
            sampler = _zero_sample
        return self._evaluate(self.memory_monitor, sampler, now, self._dump_heap)

    def _evaluate_cpu(self, now: datetime) -> DumpRecord | None:
        return self._evaluate(self.cpu_monitor, self._sample_cpu_percent, now, self._dump_cpu)

    def _evaluate_thread(self, now: datetime) -> DumpRecord | None:
        return self._evaluate(self.thread_monitor, self._sample_task_count, now, self.sink.write_stacks)

    def _evaluate(
        self,
        monitor: ResourceMonitor,
        sampler: Callable[[], float],
        now: datetime,
        dump: Callable[[datetime], Path],
    ) -> DumpRecord | None:
        kind = monitor.kind
        try:
            sample = int(sampler())
        except Exception as exc:
            logger.exception("Sampling %s usage failed", kind.name.lower())
            self._record_failure(f"{kind.name.lower()}.sample", exc)
            return None

        decision = monitor.decide(now, sample)
        if not decision.fire:
            return None

        release_gate = kind is ResourceKind.CPU
        if not self.budget.try_reserve(now):
            logger.warning(
                "daily dump budget exhausted (%d/%d), %s dump dropped",
                self.budget.dumps_today,
                self.budget.max_per_day,
                kind.label,
            )
            if release_gate:
                self.gate.exit_cpu_profile()
            return None

        try:
            path = dump(now)
        except Exception as exc:
            logger.exception("Writing %s dump failed", kind.value)
            self._record_failure(f"{kind.name.lower()}.write", exc)
            self.budget.release()
            if release_gate:
                self.gate.exit_cpu_profile()
            return None

        monitor.mark_dumped(now)
        return DumpRecord(
            kind=kind,
            path=path,
            timestamp=now,
            sample=sample,
            window_average=decision.avg_before,
        )

    # ------------------------------------------------------------------ dumps

    def _dump_heap(self, now: datetime) -> Path:
        try:
            stats = self._sample_allocation_stats()
        except Exception:
            logger.warning("Collecting allocation stats failed", exc_info=True)
        else:
            logger.debug("memory stats %s", stats)
        return self.sink.write_heap(now)

    def _dump_cpu(self, now: datetime) -> Path:
        path = self.sink.start_cpu(now)
        try:
            timer = self._timer_factory(self.config.cpu_profile_duration, self._finish_cpu_profile)
            if isinstance(timer, threading.Thread):
                timer.daemon = True
            self._cpu_timer = timer
            timer.start()
        except BaseException:
            # nothing will stop the capture later
            self._cpu_timer = None
            self.sink.stop_cpu()
            raise
        return path

    def _finish_cpu_profile(self) -> None:
        self._cpu_timer = None
        try:
            path = self.sink.stop_cpu()
        except Exception as exc:
            logger.exception("Finishing cpu profile failed")
            self._record_failure("cpu.stop", exc)
        else:
            if path is not None:
                logger.info("cpu profile written: %s", path)
        finally:
            self.gate.exit_cpu_profile()

    # ------------------------------------------------------------------ diagnostics

    def _record_failure(self, key: str, exc: BaseException) -> None:
        with self._lock:
            self._failures[key] += 1
            self._diagnostics["last_error"] = {
                "source": key,
                "message": str(exc),
                "type": exc.__class__.__name__,
                "timestamp": time.time(),
            }

    def _update_diagnostics(self, *, success: bool, duration: float, error: Exception | None = None) -> None:
        now = time.time()
        with self._lock:
            self._diagnostics["last_tick_at"] = now
            self._diagnostics["last_tick_duration"] = duration
            if success:
                self._diagnostics["consecutive_failures"] = 0
            else:
                self._diagnostics["consecutive_failures"] += 1
                self._diagnostics["last_error"] = {
                    "source": "tick",
                    "message": str(error) if error else "unknown",
                    "type": error.__class__.__name__ if error else "UnknownException",
                    "timestamp": now,
                }

    @property
    def dumps_today(self) -> int:
        return self._dumps_today

    def history(self) -> list[DumpRecord]:
        with self._lock:
            return list(self._history)

    def snapshot(self) -> dict[str, Any]:
        with self._lock:
            monitors = {
                monitor.kind.value: {
                    "last_dump_time": monitor.last_dump_time.isoformat() if monitor.last_dump_time else None,
                    "min_interval_seconds": monitor.min_interval.total_seconds(),
                    "window": monitor.window.samples(),
                }
                for monitor in (self.memory_monitor, self.cpu_monitor, self.thread_monitor)
            }
            return {
                "running": self.running,
                "dumps_today": self._dumps_today,
                "budget": {
                    "day": self.budget.day_key,
                    "reserved": self.budget.dumps_today,
                    "max_per_day": self.budget.max_per_day,
                    "strict": self.budget.strict,
                },
                "last_dump_time": self._last_global_dump_time.isoformat(),
                "cpu_profiling": self.gate.is_busy(),
                "monitors": monitors,
                "recent_dumps": [
                    {**asdict(record), "kind": record.kind.value, "path": str(record.path),
                     "timestamp": record.timestamp.isoformat()}
                    for record in self._history
                ],
                "diagnostics": {**self._diagnostics, "failures": dict(self._failures)},
            }


def _zero_sample() -> float:
    return 0.0


_default: DumpScheduler | None = None
_default_lock = threading.Lock()


def start(config: AutodumpConfig | None = None) -> DumpScheduler:
    """Start the process-wide scheduler once; later calls return the same one."""

    global _default
    with _default_lock:
        if _default is None:
            _default = DumpScheduler(config)
        elif config is not None and config != _default.config:
            logger.warning("autodump already configured; ignoring new configuration")
        return _default.start()


def stop(timeout: float | None = None) -> None:
    global _default
    with _default_lock:
        scheduler, _default = _default, None
    if scheduler is not None:
        scheduler.stop(timeout=timeout)
