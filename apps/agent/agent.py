from __future__ import annotations

import logging
from collections.abc import Callable, Iterable, Mapping
from typing import Final

from adapters.ingest_http import HttpIngestClient
from adapters.profiler import FoldedReportEncoder, ThreadSampler
from adapters.time import IntervalTickerPort
from domain.agent.service import ErrorHook, UploadService
from domain.errors import AgentError, NotRunningError, StartError
from domain.model import AgentConfig, SchedulerState
from domain.tags import validate_tags
from ports.ingest import IngestPort
from ports.profiler import ProfilerPort
from ports.time import TickerPort

from apps.agent.workers.upload_worker import UploadScheduler

LOG: Final = logging.getLogger("agent")

ProfilerFactory = Callable[[], ProfilerPort]
IngestFactory = Callable[[str], IngestPort]  # spy_name -> client
TickerFactory = Callable[[], TickerPort]


def _default_ingest(spy_name: str) -> IngestPort:
    return HttpIngestClient(FoldedReportEncoder(), spy_name=spy_name)


class ProfilingAgent:
    """
    Public handle. Every start() gets a fresh capture handle, ingest client
    and upload thread; the config is shared read-only between runs.

        agent = ProfilingAgent.builder("http://localhost:4040", "my.app").build()
        agent.start()
        ...
        agent.stop()  # final flush; re-raises the worker's failure, if any
    """

    def __init__(
        self,
        config: AgentConfig,
        profiler_factory: ProfilerFactory = ThreadSampler,
        ingest_factory: IngestFactory = _default_ingest,
        ticker_factory: TickerFactory = IntervalTickerPort,
        on_error: ErrorHook | None = None,
    ) -> None:
        self.config: Final = config
        self._profiler_factory = profiler_factory
        self._ingest_factory = ingest_factory
        self._ticker_factory = ticker_factory
        self._on_error = on_error
        self._scheduler: UploadScheduler | None = None

    @staticmethod
    def builder(endpoint_url: str, application_name: str) -> AgentBuilder:
        return AgentBuilder(endpoint_url, application_name)

    @property
    def state(self) -> SchedulerState:
        if self._scheduler is None:
            return SchedulerState.IDLE
        return self._scheduler.state

    @property
    def is_running(self) -> bool:
        return self._scheduler is not None

    def start(self) -> None:
        if self._scheduler is not None:
            raise StartError("agent is already running")
        try:
            profiler = self._profiler_factory()
            ingest = self._ingest_factory(profiler.spy_name)
        except Exception as ex:
            raise StartError(f"could not build capture session: {ex!r}") from ex
        service = UploadService(self.config, profiler, ingest, on_error=self._on_error)
        scheduler = UploadScheduler(service, self._ticker_factory())
        try:
            scheduler.start()
        except StartError:
            service.close()
            raise
        self._scheduler = scheduler
        LOG.debug("agent started for %s", self.config.application_name)

    def stop(self) -> None:
        scheduler = self._scheduler
        if scheduler is None:
            raise NotRunningError()
        self._scheduler = None
        err = scheduler.join()
        LOG.debug("agent stopped (error=%r)", err)
        if err is not None:
            raise err

    def __enter__(self) -> ProfilingAgent:
        self.start()
        return self

    def __exit__(self, exc_type: type[BaseException] | None, *exc: object) -> None:
        if exc_type is None:
            self.stop()
            return
        # the body already failed; don't mask its exception with a flush error
        try:
            self.stop()
        except AgentError as ex:
            LOG.warning("final flush failed while handling %s: %s", exc_type.__name__, ex)


class AgentBuilder:
    def __init__(self, endpoint_url: str, application_name: str) -> None:
        self._url = endpoint_url
        self._app = application_name
        self._sample_rate = 100
        self._tags: dict[str, str] = {}
        self._blocklist: frozenset[str] = frozenset()
        self._on_error: ErrorHook | None = None
        self._profiler_factory: ProfilerFactory = ThreadSampler
        self._ingest_factory: IngestFactory = _default_ingest

    def frequency(self, hz: int) -> AgentBuilder:
        if hz <= 0:
            raise ValueError("frequency must be positive")
        self._sample_rate = int(hz)
        return self

    def tags(self, tags: Mapping[str, str]) -> AgentBuilder:
        self._tags = validate_tags(tags)
        return self

    def blocklist(self, entries: Iterable[str]) -> AgentBuilder:
        self._blocklist = frozenset(entries)
        return self

    def on_error(self, hook: ErrorHook) -> AgentBuilder:
        self._on_error = hook
        return self

    def profiler(self, factory: ProfilerFactory) -> AgentBuilder:
        self._profiler_factory = factory
        return self

    def ingest(self, factory: IngestFactory) -> AgentBuilder:
        self._ingest_factory = factory
        return self

    def build(self) -> ProfilingAgent:
        if not self._url:
            raise ValueError("endpoint_url is required")
        if not self._app:
            raise ValueError("application_name is required")
        config = AgentConfig(
            endpoint_url=self._url,
            application_name=self._app,
            tags=self._tags,
            sample_rate=self._sample_rate,
            blocklist=self._blocklist,
        )
        return ProfilingAgent(
            config,
            profiler_factory=self._profiler_factory,
            ingest_factory=self._ingest_factory,
            on_error=self._on_error,
        )
