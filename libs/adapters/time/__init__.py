from .fakes import FakeClockPort, ManualTickerPort
from .system import IntervalTickerPort, SystemClockPort

__all__ = ["FakeClockPort", "ManualTickerPort", "IntervalTickerPort", "SystemClockPort"]
