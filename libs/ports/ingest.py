from __future__ import annotations

from abc import ABC, abstractmethod

from domain.model import Report


class IngestPort(ABC):
    """Ships one report to the remote aggregation service."""

    @abstractmethod
    def ingest(self, report: Report, endpoint_url: str, series_name: str) -> None: ...

    def close(self) -> None:
        pass
