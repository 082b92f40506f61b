"""Fixed-size history of recent samples."""

from __future__ import annotations

from collections import deque
from statistics import mean
from typing import Deque

DEFAULT_CAPACITY = 10


class RollingWindow:
    """FIFO of the last ``capacity`` samples; each push evicts at most the oldest one."""

    def __init__(self, capacity: int = DEFAULT_CAPACITY) -> None:
        if capacity <= 0:
            raise ValueError("capacity must be positive")
        self._capacity = capacity
        self._samples: Deque[int] = deque()

    @property
    def capacity(self) -> int:
        return self._capacity

    def push(self, sample: int) -> None:
        self._samples.append(sample)
        if len(self._samples) > self._capacity:
            self._samples.popleft()

    def average(self) -> float:
        if not self._samples:
            raise ValueError("average of an empty window")
        return float(mean(self._samples))

    def samples(self) -> list[int]:
        return list(self._samples)

    def __len__(self) -> int:
        return len(self._samples)
