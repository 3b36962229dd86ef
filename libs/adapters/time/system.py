from __future__ import annotations

import threading
import time

from domain.model import UPLOAD_INTERVAL_S
from ports.time import ClockPort, TickerPort


class SystemClockPort(ClockPort):
    def now(self) -> float:
        return time.time()


class IntervalTickerPort(TickerPort):
    """Fixed-rate ticker; deadlines are anchored so slow uploads don't drift the schedule."""

    def __init__(self, interval_s: float = UPLOAD_INTERVAL_S) -> None:
        self._interval = float(interval_s)
        self._next: float | None = None

    def wait(self, stop: threading.Event) -> bool:
        now = time.monotonic()
        if self._next is None:
            self._next = now + self._interval
        elif self._next <= now:
            # missed ticks are collapsed into one, like a "skip" missed-tick policy
            missed = int((now - self._next) // self._interval) + 1
            self._next += missed * self._interval
            return not stop.is_set()
        if stop.wait(timeout=max(0.0, self._next - now)):
            return False
        self._next += self._interval
        return True
