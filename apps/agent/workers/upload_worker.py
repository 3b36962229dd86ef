# apps/agent/workers/upload_worker.py
from __future__ import annotations

import logging
import threading
from typing import Final

from domain.agent.service import UploadService
from domain.errors import AgentError, CaptureError, NotRunningError, StartError
from domain.model import SchedulerState
from ports.time import TickerPort

LOG: Final = logging.getLogger("agent")


class UploadScheduler:
    """
    Owns one capture session on a background thread.

    IDLE --start--> RUNNING --stop--> STOPPING --flush--> STOPPED

    The caller and the worker share only the stop Event and the worker's
    final result; the service (capture handle + ingest client) is touched
    by the worker thread alone.
    """

    def __init__(
        self, service: UploadService, ticker: TickerPort, name: str = "pyroscope-upload"
    ) -> None:
        self._service = service
        self._ticker = ticker
        self._name = name
        self._stop = threading.Event()
        self._thread: threading.Thread | None = None
        self._result: AgentError | None = None
        self._state = SchedulerState.IDLE
        self._state_lock = threading.Lock()

    @property
    def state(self) -> SchedulerState:
        return self._state

    def _set_state(self, state: SchedulerState) -> None:
        with self._state_lock:
            LOG.debug("scheduler %s -> %s", self._state.value, state.value)
            self._state = state

    def start(self) -> None:
        if self._state is not SchedulerState.IDLE:
            raise StartError(f"scheduler cannot start from {self._state.value}")
        t = threading.Thread(target=self._run, name=self._name, daemon=True)
        self._set_state(SchedulerState.RUNNING)
        try:
            t.start()
        except RuntimeError as ex:
            self._set_state(SchedulerState.STOPPED)
            raise StartError(f"could not launch upload thread: {ex}") from ex
        self._thread = t

    def join(self) -> AgentError | None:
        """Signal stop, wait for the worker to exit, return its failure (if any)."""
        t = self._thread
        if t is None:
            raise NotRunningError()
        self._stop.set()
        t.join()
        self._thread = None
        return self._result

    # --- worker thread ------------------------------------------------------

    def _run(self) -> None:
        svc = self._service
        try:
            svc.open()
        except CaptureError as ex:
            LOG.error("profiler initialization failed: %s", ex)
            self._result = ex
            svc.close()
            self._set_state(SchedulerState.STOPPED)
            return

        LOG.info("profiling %s -> %s", svc.ctx.series_name, svc.config.endpoint_url)
        try:
            # stop is checked on each wait; an in-flight upload always completes
            while self._ticker.wait(self._stop):
                svc.cycle()
            self._set_state(SchedulerState.STOPPING)
            self._result = svc.cycle()
        except CaptureError as ex:
            LOG.error("capture handle unusable, upload loop ends: %s", ex)
            self._result = ex
        except Exception as ex:
            # profiling must never take the host down; surface through stop()
            LOG.exception("upload loop crashed")
            self._result = AgentError(f"upload loop crashed: {ex!r}")
        finally:
            svc.close()
            self._set_state(SchedulerState.STOPPED)
            LOG.info("profiling stopped after %d cycles", svc.ctx.cycles)
