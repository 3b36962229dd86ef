from __future__ import annotations

import math
from collections.abc import Mapping
from dataclasses import dataclass, field
from enum import Enum
from types import MappingProxyType
from typing import Final

# Pyroscope buckets ingested profiles in 10s windows; the upload cadence must match.
UPLOAD_INTERVAL_S: Final = 10

Stack = tuple[str, ...]  # root first


class SchedulerState(str, Enum):
    IDLE = "IDLE"
    RUNNING = "RUNNING"
    STOPPING = "STOPPING"
    STOPPED = "STOPPED"


class ProfilerState(str, Enum):
    UNINITIALIZED = "UNINITIALIZED"
    READY = "READY"
    RUNNING = "RUNNING"


@dataclass(frozen=True)
class AgentConfig:
    endpoint_url: str
    application_name: str
    tags: Mapping[str, str] = field(default_factory=dict)
    sample_rate: int = 100
    blocklist: frozenset[str] = frozenset()

    def __post_init__(self) -> None:
        # read-only views so a built config can be shared with the worker
        object.__setattr__(self, "tags", MappingProxyType(dict(self.tags)))
        object.__setattr__(self, "blocklist", frozenset(self.blocklist))


@dataclass(frozen=True)
class Report:
    start_time: float  # unix seconds
    sample_rate: int
    samples: Mapping[Stack, int] = field(default_factory=dict)

    def is_empty(self) -> bool:
        return not any(self.samples.values())


@dataclass(frozen=True)
class UploadWindow:
    from_: int
    until: int

    @classmethod
    def for_start(cls, start_time: float) -> UploadWindow:
        start = math.floor(start_time)
        from_ = start - start % UPLOAD_INTERVAL_S
        return cls(from_=from_, until=from_ + UPLOAD_INTERVAL_S)
