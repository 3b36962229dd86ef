from __future__ import annotations

from collections import deque
from collections.abc import Iterable, Mapping

from domain.errors import CaptureSnapshotError
from domain.model import ProfilerState, Report, Stack
from ports.profiler import ProfilerPort
from ports.time import ClockPort

from adapters.time.fakes import FakeClockPort

DEFAULT_SAMPLES: Mapping[Stack, int] = {("main", "work"): 3}


class FakeProfilerPort(ProfilerPort):
    """Scripted capture handle: queued reports, optional init/snapshot failures."""

    spy_name = "fake"

    def __init__(
        self,
        reports: Iterable[Report] = (),
        fail_init: Exception | None = None,
        samples: Mapping[Stack, int] = DEFAULT_SAMPLES,
        clock: ClockPort | None = None,
    ) -> None:
        self.reports: deque[Report] = deque(reports)
        self.fail_init = fail_init
        self.fail_snapshots = 0
        self.snapshot_error: Exception | None = None
        self.samples = dict(samples)
        self.clock = clock or FakeClockPort()
        self.calls: list[str] = []
        self.sample_rate = 0
        self.blocklist: frozenset[str] = frozenset()
        self.running = False
        self.initialized = False

    @property
    def state(self) -> ProfilerState:
        if self.running:
            return ProfilerState.RUNNING
        return ProfilerState.READY if self.initialized else ProfilerState.UNINITIALIZED

    def initialize(self, sample_rate: int, blocklist: Iterable[str]) -> None:
        self.calls.append("initialize")
        if self.fail_init is not None:
            raise self.fail_init
        self.sample_rate = sample_rate
        self.blocklist = frozenset(blocklist)
        self.initialized = True

    def start(self) -> None:
        self.calls.append("start")
        self.running = True

    def stop(self) -> None:
        self.calls.append("stop")
        self.running = False

    def report(self) -> Report:
        self.calls.append("report")
        if self.snapshot_error is not None:
            raise self.snapshot_error
        if self.fail_snapshots > 0:
            self.fail_snapshots -= 1
            raise CaptureSnapshotError("scripted snapshot failure")
        if self.reports:
            return self.reports.popleft()
        return Report(
            start_time=self.clock.now(), sample_rate=self.sample_rate, samples=dict(self.samples)
        )
