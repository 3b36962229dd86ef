from __future__ import annotations

import logging

from adapters.profiler import ThreadSampler
from domain.agent.service import ErrorHook
from domain.model import AgentConfig

from apps.agent.agent import ProfilingAgent
from apps.agent.settings import AgentSettings


def build_config(settings: AgentSettings) -> AgentConfig:
    return AgentConfig(
        endpoint_url=settings.server_address,
        application_name=settings.application_name,
        tags=settings.tags,
        sample_rate=settings.sample_rate,
        blocklist=frozenset(settings.blocklist),
    )


def build_agent(settings: AgentSettings, on_error: ErrorHook | None = None) -> ProfilingAgent:
    return ProfilingAgent(
        build_config(settings),
        profiler_factory=ThreadSampler,
        on_error=on_error,
    )


def configure_logging(settings: AgentSettings, quiet: bool = False) -> None:
    logging.basicConfig(
        level="WARNING" if quiet else settings.log_level,
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
    )
