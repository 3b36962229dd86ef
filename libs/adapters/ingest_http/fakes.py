from __future__ import annotations

import threading
import time
from dataclasses import dataclass

from domain.errors import IngestError
from domain.model import Report
from ports.ingest import IngestPort


@dataclass(frozen=True)
class IngestCall:
    report: Report
    endpoint_url: str
    series_name: str
    started: float
    finished: float


class RecordingIngestPort(IngestPort):
    """Records every upload; `fail_with` makes the next uploads raise."""

    def __init__(self, delay_s: float = 0.0) -> None:
        self.calls: list[IngestCall] = []  # successful uploads only
        self.attempts = 0
        self.fail_with: IngestError | None = None
        self.delay_s = delay_s
        self.in_flight = 0
        self.max_in_flight = 0
        self.closed = False
        self._lock = threading.Lock()

    def ingest(self, report: Report, endpoint_url: str, series_name: str) -> None:
        with self._lock:
            self.attempts += 1
            self.in_flight += 1
            self.max_in_flight = max(self.max_in_flight, self.in_flight)
        started = time.perf_counter()
        try:
            if self.delay_s:
                time.sleep(self.delay_s)
            if self.fail_with is not None:
                raise self.fail_with
        finally:
            with self._lock:
                self.in_flight -= 1
        self.calls.append(
            IngestCall(report, endpoint_url, series_name, started, time.perf_counter())
        )

    def close(self) -> None:
        self.closed = True
