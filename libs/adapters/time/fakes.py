from __future__ import annotations

import threading
from queue import Empty, SimpleQueue

from ports.time import ClockPort, TickerPort


class FakeClockPort(ClockPort):
    """Frozen unix time; tests move it with `advance()`."""

    def __init__(self, start: float = 1_700_000_000.0) -> None:
        self._now = float(start)

    def now(self) -> float:
        return self._now

    def advance(self, seconds: float) -> None:
        self._now += seconds


class ManualTickerPort(TickerPort):
    """Ticks only when the test calls `tick()`; stop still wins when observed first."""

    def __init__(self, poll_s: float = 0.005) -> None:
        self._q: SimpleQueue[None] = SimpleQueue()
        self._poll = poll_s
        self.waits = 0

    def tick(self, n: int = 1) -> None:
        for _ in range(n):
            self._q.put(None)

    def wait(self, stop: threading.Event) -> bool:
        self.waits += 1
        while not stop.is_set():
            try:
                self._q.get(timeout=self._poll)
                return True
            except Empty:
                continue
        return False
