from __future__ import annotations


class AgentError(Exception):
    """Base for everything the profiling agent raises."""


class CaptureError(AgentError):
    pass


class CaptureInitError(CaptureError):
    """Profiler could not be initialized or started; fatal to the upload loop."""


class CaptureSnapshotError(CaptureError):
    """Profiler failed to produce a report for one cycle."""


class IngestError(AgentError):
    def __init__(self, message: str, status_code: int | None = None) -> None:
        super().__init__(message)
        self.status_code = status_code


class StartError(AgentError):
    pass


class StopError(AgentError):
    pass


class NotRunningError(StopError):
    def __init__(self, message: str = "agent is not running") -> None:
        super().__init__(message)
