from __future__ import annotations

import threading
from abc import ABC, abstractmethod


class ClockPort(ABC):
    @abstractmethod
    def now(self) -> float: ...  # unix seconds


class TickerPort(ABC):
    """Paces the upload loop."""

    @abstractmethod
    def wait(self, stop: threading.Event) -> bool:
        """Block until the next tick (True) or until `stop` is set (False)."""
