from __future__ import annotations

import time

import pytest
from adapters.ingest_http import RecordingIngestPort
from adapters.profiler import FakeProfilerPort
from adapters.time import ManualTickerPort
from domain.errors import CaptureInitError, IngestError, NotRunningError, StartError
from domain.model import AgentConfig, SchedulerState

from apps.agent import ProfilingAgent


def _agent(ingest: RecordingIngestPort, profilers: list[FakeProfilerPort] | None = None):
    made = profilers if profilers is not None else []

    def make_profiler() -> FakeProfilerPort:
        p = FakeProfilerPort()
        made.append(p)
        return p

    cfg = AgentConfig("http://pyro:4040", "svc", tags={"env": "prod"})
    return ProfilingAgent(
        cfg,
        profiler_factory=make_profiler,
        ingest_factory=lambda spy: ingest,
        ticker_factory=ManualTickerPort,
    )


def test_stop_without_start_returns_not_running_immediately():
    agent = _agent(RecordingIngestPort())
    t0 = time.perf_counter()
    with pytest.raises(NotRunningError):
        agent.stop()
    assert time.perf_counter() - t0 < 0.5
    assert agent.state is SchedulerState.IDLE


def test_start_stop_flushes_once():
    ingest = RecordingIngestPort()
    agent = _agent(ingest)
    agent.start()
    assert agent.is_running
    agent.stop()
    assert not agent.is_running
    assert len(ingest.calls) == 1


def test_second_stop_is_not_running():
    agent = _agent(RecordingIngestPort())
    agent.start()
    agent.stop()
    with pytest.raises(NotRunningError):
        agent.stop()


def test_double_start_is_rejected():
    agent = _agent(RecordingIngestPort())
    agent.start()
    try:
        with pytest.raises(StartError):
            agent.start()
    finally:
        agent.stop()


def test_agent_can_be_restarted_with_fresh_capture_handle():
    ingest = RecordingIngestPort()
    profilers: list[FakeProfilerPort] = []
    agent = _agent(ingest, profilers)
    for _ in range(2):
        agent.start()
        agent.stop()
    assert len(profilers) == 2
    assert all(p.calls[-1] == "stop" for p in profilers)
    assert len(ingest.calls) == 2


def test_stop_reraises_flush_failure():
    ingest = RecordingIngestPort()
    agent = _agent(ingest)
    agent.start()
    ingest.fail_with = IngestError("boom", status_code=500)
    with pytest.raises(IngestError) as ei:
        agent.stop()
    assert ei.value.status_code == 500


def test_stop_reraises_init_failure():
    ingest = RecordingIngestPort()
    cfg = AgentConfig("http://pyro:4040", "svc")
    agent = ProfilingAgent(
        cfg,
        profiler_factory=lambda: FakeProfilerPort(fail_init=CaptureInitError("nope")),
        ingest_factory=lambda spy: ingest,
        ticker_factory=ManualTickerPort,
    )
    agent.start()
    with pytest.raises(CaptureInitError):
        agent.stop()
    assert ingest.attempts == 0


def test_context_manager_starts_and_stops():
    ingest = RecordingIngestPort()
    with _agent(ingest) as agent:
        assert agent.is_running
    assert len(ingest.calls) == 1


def test_builder_produces_immutable_config():
    ingest = RecordingIngestPort()
    agent = (
        ProfilingAgent.builder("http://pyro:4040", "example.basic")
        .frequency(99)
        .tags({"TagB": "ValueB", "TagA": "ValueA"})
        .blocklist(["site-packages/gevent"])
        .profiler(FakeProfilerPort)
        .ingest(lambda spy: ingest)
        .build()
    )
    assert agent.config.sample_rate == 99
    assert dict(agent.config.tags) == {"TagA": "ValueA", "TagB": "ValueB"}
    assert agent.config.blocklist == frozenset({"site-packages/gevent"})

    # default 10s ticker: stop wakes the worker right away
    t0 = time.perf_counter()
    agent.start()
    agent.stop()
    assert time.perf_counter() - t0 < 2.0
    assert ingest.calls[0].series_name == "example.basic{TagA=ValueA,TagB=ValueB}"


def test_builder_validates_inputs():
    b = ProfilingAgent.builder("http://pyro:4040", "svc")
    with pytest.raises(ValueError):
        b.frequency(0)
    with pytest.raises(ValueError):
        b.tags({"bad,key": "v"})
    with pytest.raises(ValueError):
        ProfilingAgent.builder("", "svc").build()


def test_context_manager_keeps_body_exception_when_flush_fails():
    ingest = RecordingIngestPort()
    with pytest.raises(KeyError):
        with _agent(ingest) as agent:
            ingest.fail_with = IngestError("flush failed")
            raise KeyError("from the host")
    assert not agent.is_running


def test_context_manager_raises_flush_failure_on_clean_exit():
    ingest = RecordingIngestPort()
    with pytest.raises(IngestError):
        with _agent(ingest):
            ingest.fail_with = IngestError("flush failed")


def test_factory_failure_becomes_start_error():
    def broken_profiler() -> FakeProfilerPort:
        raise OSError("no sampler available")

    cfg = AgentConfig("http://pyro:4040", "svc")
    agent = ProfilingAgent(cfg, profiler_factory=broken_profiler, ticker_factory=ManualTickerPort)
    with pytest.raises(StartError) as ei:
        agent.start()
    assert isinstance(ei.value.__cause__, OSError)
    assert not agent.is_running

    def broken_ingest(spy: str) -> RecordingIngestPort:
        raise ValueError("bad endpoint")

    agent = ProfilingAgent(
        cfg,
        profiler_factory=FakeProfilerPort,
        ingest_factory=broken_ingest,
        ticker_factory=ManualTickerPort,
    )
    with pytest.raises(StartError):
        agent.start()
    with pytest.raises(NotRunningError):
        agent.stop()
