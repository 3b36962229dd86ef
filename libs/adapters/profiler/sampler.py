from __future__ import annotations

import logging
import sys
import threading
from collections import Counter
from collections.abc import Iterable
from typing import Final

from domain.errors import CaptureInitError, CaptureSnapshotError
from domain.model import ProfilerState, Report, Stack
from ports.profiler import ProfilerPort
from ports.time import ClockPort

from adapters.time.system import SystemClockPort

LOG: Final = logging.getLogger("agent.sampler")

MAX_DEPTH: Final = 128


def frame_name(frame) -> str:
    co = frame.f_code
    return f"{co.co_filename}:{frame.f_lineno} - {co.co_name}"


class ThreadSampler(ProfilerPort):
    """
    Wall-clock sampler: a daemon thread grabs every other thread's stack via
    sys._current_frames() `sample_rate` times per second and counts them.
    Frames whose filename contains a blocklist entry are dropped.
    """

    spy_name = "pysampler"

    def __init__(self, clock: ClockPort | None = None, max_depth: int = MAX_DEPTH) -> None:
        self._clock = clock or SystemClockPort()
        self._max_depth = max_depth
        self._lock = threading.Lock()
        self._samples: Counter[Stack] = Counter()
        self._window_start = 0.0
        self._rate = 0
        self._blocklist: tuple[str, ...] = ()
        self._initialized = False
        self._halt = threading.Event()
        self._thread: threading.Thread | None = None

    @property
    def running(self) -> bool:
        return self._thread is not None and self._thread.is_alive()

    @property
    def state(self) -> ProfilerState:
        if self.running:
            return ProfilerState.RUNNING
        return ProfilerState.READY if self._initialized else ProfilerState.UNINITIALIZED

    def initialize(self, sample_rate: int, blocklist: Iterable[str]) -> None:
        if self.running:
            raise CaptureInitError("sampler is already running")
        if int(sample_rate) <= 0:
            raise CaptureInitError(f"sample_rate must be positive, got {sample_rate}")
        self._rate = int(sample_rate)
        self._blocklist = tuple(b for b in blocklist if b)
        self._initialized = True

    def start(self) -> None:
        if not self._initialized:
            raise CaptureInitError("sampler started before initialize()")
        if self.running:
            return
        self._halt.clear()
        with self._lock:
            self._samples.clear()
            self._window_start = self._clock.now()
        self._thread = threading.Thread(target=self._loop, name="pyroscope-sampler", daemon=True)
        self._thread.start()
        LOG.debug("sampler started at %d Hz", self._rate)

    def stop(self) -> None:
        self._halt.set()
        t, self._thread = self._thread, None
        if t is not None:
            t.join(timeout=1.0)

    def report(self) -> Report:
        if not self._initialized:
            raise CaptureSnapshotError("sampler was never initialized")
        now = self._clock.now()
        with self._lock:
            samples, self._samples = self._samples, Counter()
            start, self._window_start = self._window_start, now
        return Report(start_time=start, sample_rate=self._rate, samples=dict(samples))

    def sample_once(self) -> int:
        """Take one sample of every thread except the caller. Returns stacks recorded."""
        own = threading.get_ident()
        stacks: list[Stack] = []
        for tid, frame in sys._current_frames().items():
            if tid == own:
                continue
            stack = self._walk(frame)
            if stack:
                stacks.append(stack)
        with self._lock:
            self._samples.update(stacks)
        return len(stacks)

    def _walk(self, frame) -> Stack:
        names: list[str] = []
        depth = 0
        while frame is not None and depth < self._max_depth:
            filename = frame.f_code.co_filename
            if not any(b in filename for b in self._blocklist):
                names.append(frame_name(frame))
            frame = frame.f_back
            depth += 1
        names.reverse()
        return tuple(names)

    def _loop(self) -> None:
        period = 1.0 / self._rate
        while not self._halt.wait(period):
            try:
                self.sample_once()
            except Exception:
                LOG.exception("sampling pass failed")
