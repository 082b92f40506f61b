from datetime import datetime

import pytest

from autodump.models import ResourceKind
from autodump.runtime.sink import SnapshotSink, snapshot_path

NOW = datetime(2024, 1, 2, 3, 4, 5)


def test_snapshot_path_naming(tmp_path):
    assert snapshot_path(tmp_path, ResourceKind.MEMORY, NOW) == tmp_path / "heap.dump_20240102030405"
    assert snapshot_path(tmp_path, ResourceKind.CPU, NOW).name == "cpu.dump_20240102030405"
    assert snapshot_path(tmp_path, ResourceKind.THREAD, NOW).name == "goroutine.dump_20240102030405"


def test_write_heap_creates_missing_directory(tmp_path, recorder):
    target = tmp_path / "dumps" / "nested"
    sink = SnapshotSink(target, heap_writer=recorder.heap)

    path = sink.write_heap(NOW)

    assert path == target / "heap.dump_20240102030405"
    assert path.read_bytes() == b"heap"


def test_failed_writer_leaves_no_file(tmp_path):
    def broken(fh):
        fh.write(b"partial")
        raise RuntimeError("encoder failed")

    sink = SnapshotSink(tmp_path, stack_writer=broken)
    with pytest.raises(RuntimeError):
        sink.write_stacks(NOW)
    assert list(tmp_path.iterdir()) == []


def test_unwritable_directory_raises(tmp_path):
    blocker = tmp_path / "not-a-dir"
    blocker.write_text("x")
    sink = SnapshotSink(blocker / "dumps")
    with pytest.raises(OSError):
        sink.write_heap(NOW)


def test_cpu_capture_lifecycle(tmp_path, recorder):
    sink = SnapshotSink(tmp_path, cpu_starter=recorder.cpu_start, cpu_stopper=recorder.cpu_stop)

    path = sink.start_cpu(NOW)
    assert sink.cpu_capture_path == path
    with pytest.raises(RuntimeError):
        sink.start_cpu(NOW)

    assert sink.stop_cpu() == path
    assert recorder.cpu_stopped == 1
    assert path.read_bytes() == b"cpu"
    assert sink.stop_cpu() is None
    assert recorder.cpu_stopped == 1


def test_cpu_start_failure_removes_file(tmp_path):
    def refuse(fh):
        raise ValueError("Another profiling tool is already active")

    sink = SnapshotSink(tmp_path, cpu_starter=refuse)
    with pytest.raises(ValueError):
        sink.start_cpu(NOW)
    assert sink.cpu_capture_path is None
    assert list(tmp_path.iterdir()) == []
