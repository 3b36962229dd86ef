from __future__ import annotations

from abc import ABC, abstractmethod
from collections.abc import Iterable

from domain.model import ProfilerState, Report


class ProfilerPort(ABC):
    """Capture handle around a sampling profiler; domain never sees the sampler itself."""

    spy_name: str = "unknown"

    @property
    @abstractmethod
    def state(self) -> ProfilerState: ...

    @abstractmethod
    def initialize(self, sample_rate: int, blocklist: Iterable[str]) -> None: ...

    @abstractmethod
    def start(self) -> None: ...

    @abstractmethod
    def stop(self) -> None: ...

    @abstractmethod
    def report(self) -> Report:
        """Return the samples collected since the previous report and reset."""


class ReportEncoderPort(ABC):
    @abstractmethod
    def encode(self, report: Report) -> bytes: ...
