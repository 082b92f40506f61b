"""Writes snapshot files into the dump directory."""

from __future__ import annotations

import contextlib
import logging
import threading
from collections.abc import Callable
from datetime import datetime
from pathlib import Path
from typing import BinaryIO

from autodump import profiles
from autodump.models import ResourceKind

logger = logging.getLogger(__name__)

TIMESTAMP_FORMAT = "%Y%m%d%H%M%S"

Writer = Callable[[BinaryIO], None]


def snapshot_path(directory: Path, kind: ResourceKind, now: datetime) -> Path:
    """``<directory>/<kind>.dump_<YYYYMMDDHHMMSS>``; same-second dumps share a name."""

    return Path(directory) / f"{kind.value}.dump_{now.strftime(TIMESTAMP_FORMAT)}"


class SnapshotSink:
    """Opens dump files and hands them to the profile writers.

    Any failure propagates to the caller, after a partially written file
    has been removed.
    """

    def __init__(
        self,
        directory: Path,
        *,
        heap_writer: Writer = profiles.write_heap_snapshot,
        stack_writer: Writer = profiles.write_stack_snapshot,
        cpu_starter: Writer = profiles.start_cpu_snapshot,
        cpu_stopper: Callable[[], None] = profiles.stop_cpu_snapshot,
    ) -> None:
        self.directory = Path(directory)
        self._heap_writer = heap_writer
        self._stack_writer = stack_writer
        self._cpu_starter = cpu_starter
        self._cpu_stopper = cpu_stopper
        self._cpu_lock = threading.Lock()
        self._cpu_file: BinaryIO | None = None
        self._cpu_path: Path | None = None

    def _open(self, kind: ResourceKind, now: datetime) -> tuple[Path, BinaryIO]:
        self.directory.mkdir(parents=True, exist_ok=True)
        path = snapshot_path(self.directory, kind, now)
        return path, open(path, "wb")

    def _write(self, kind: ResourceKind, now: datetime, writer: Writer) -> Path:
        path, fh = self._open(kind, now)
        try:
            with fh:
                writer(fh)
        except BaseException:
            with contextlib.suppress(OSError):
                path.unlink()
            raise
        return path

    def write_heap(self, now: datetime) -> Path:
        return self._write(ResourceKind.MEMORY, now, self._heap_writer)

    def write_stacks(self, now: datetime) -> Path:
        return self._write(ResourceKind.THREAD, now, self._stack_writer)

    def start_cpu(self, now: datetime) -> Path:
        """Open the CPU dump file and start capturing into it."""

        with self._cpu_lock:
            if self._cpu_file is not None:
                raise RuntimeError(f"cpu capture already writing to {self._cpu_path}")
            path, fh = self._open(ResourceKind.CPU, now)
            try:
                self._cpu_starter(fh)
            except BaseException:
                fh.close()
                with contextlib.suppress(OSError):
                    path.unlink()
                raise
            self._cpu_file = fh
            self._cpu_path = path
            return path

    def stop_cpu(self) -> Path | None:
        """Finish the running capture and close its file. Returns its path, if any."""

        with self._cpu_lock:
            fh, path = self._cpu_file, self._cpu_path
            self._cpu_file = None
            self._cpu_path = None
        if fh is None:
            return None
        try:
            self._cpu_stopper()
        finally:
            fh.close()
        return path

    @property
    def cpu_capture_path(self) -> Path | None:
        with self._cpu_lock:
            return self._cpu_path
