"""Smoke test: run the dump scheduler briefly and list what it wrote."""

from __future__ import annotations

import logging
import sys
import tempfile
import time
from datetime import timedelta
from pathlib import Path


ROOT = Path(__file__).resolve().parents[1]
if str(ROOT) not in sys.path:
    sys.path.insert(0, str(ROOT))

from autodump import AutodumpConfig, DumpIntervals, DumpScheduler


def run_smoke(duration: float = 3.0) -> None:
    logging.basicConfig(level=logging.INFO, format="%(asctime)s %(levelname)s [%(name)s] %(message)s")
    with tempfile.TemporaryDirectory(prefix="autodump-smoke-") as tmp:
        config = AutodumpConfig(
            dump_directory=Path(tmp),
            tick_interval=0.5,
            cpu_profile_duration=1.0,
            intervals=DumpIntervals(
                memory=timedelta(seconds=1),
                cpu=timedelta(seconds=1),
                thread=timedelta(seconds=1),
            ),
        )
        scheduler = DumpScheduler(config).start()
        try:
            time.sleep(duration)
        finally:
            scheduler.stop(timeout=2.0)

        files = sorted(p.name for p in Path(tmp).iterdir())
        assert any(name.startswith("heap.dump_") for name in files), "no heap dump written"
        print("SMOKE_OK", {"files": files, "dumps_today": scheduler.dumps_today})


if __name__ == "__main__":
    run_smoke()
