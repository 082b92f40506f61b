"""Stack dump of every live thread."""

from __future__ import annotations

import sys
import threading
import traceback
from typing import BinaryIO


def write_stack_snapshot(fh: BinaryIO) -> None:
    frames = sys._current_frames()
    threads = {thread.ident: thread for thread in threading.enumerate()}
    lines = [f"thread profile: total {len(frames)}"]
    for ident, frame in frames.items():
        thread = threads.get(ident)
        if thread is not None:
            header = f"thread {ident} [{thread.name}{', daemon' if thread.daemon else ''}]:"
        else:
            header = f"thread {ident} [unknown]:"
        lines.append("")
        lines.append(header)
        lines.extend(entry.rstrip("\n") for entry in traceback.format_stack(frame))
    fh.write(("\n".join(lines) + "\n").encode("utf-8"))
