"""Daily ceiling on the number of dumps."""

from __future__ import annotations

from datetime import datetime

DAY_KEY_FORMAT = "%Y%m%d"


def day_key(moment: datetime) -> str:
    return moment.strftime(DAY_KEY_FORMAT)


class DumpBudget:
    """Counts dumps since local midnight.

    The ceiling check is ``dumps_today > max_per_day``, which admits
    ``max_per_day + 1`` dumps per day. ``strict=True`` switches to ``>=``.
    Only the scheduler thread calls into a budget.
    """

    def __init__(self, max_per_day: int, *, strict: bool = False, now: datetime | None = None) -> None:
        self.max_per_day = max_per_day
        self.strict = strict
        self._dumps_today = 0
        self._day_key = day_key(now or datetime.now())

    @property
    def dumps_today(self) -> int:
        return self._dumps_today

    @property
    def day_key(self) -> str:
        return self._day_key

    def _roll(self, now: datetime) -> None:
        key = day_key(now)
        if key != self._day_key:
            self._day_key = key
            self._dumps_today = 0

    def _over_limit(self) -> bool:
        if self.strict:
            return self._dumps_today >= self.max_per_day
        return self._dumps_today > self.max_per_day

    def exhausted(self, now: datetime) -> bool:
        self._roll(now)
        return self._over_limit()

    def try_reserve(self, now: datetime) -> bool:
        self._roll(now)
        if self._over_limit():
            return False
        self._dumps_today += 1
        return True

    def release(self) -> None:
        """Give back a reservation whose dump was never written."""

        if self._dumps_today > 0:
            self._dumps_today -= 1
