"""Clock adapters."""

import time

from cadence.domain.constants import MS_PER_DAY
from cadence.domain.ports import Clock


class SystemClock(Clock):
    """Wall-clock time in epoch milliseconds."""

    def now_ms(self) -> int:
        return time.time_ns() // 1_000_000


class FixedClock(Clock):
    """
    A clock that only moves when told to.

    Used by tests and simulations to get exact, repeatable due times.
    """

    def __init__(self, now_ms: int = 0):
        self._now = now_ms

    def now_ms(self) -> int:
        return self._now

    def set(self, now_ms: int) -> None:
        self._now = now_ms

    def advance(self, ms: int = 0, *, days: int = 0) -> int:
        self._now += ms + days * MS_PER_DAY
        return self._now
