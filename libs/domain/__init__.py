from .errors import (
    AgentError,
    CaptureError,
    CaptureInitError,
    CaptureSnapshotError,
    IngestError,
    NotRunningError,
    StartError,
    StopError,
)
from .model import (
    UPLOAD_INTERVAL_S,
    AgentConfig,
    ProfilerState,
    Report,
    SchedulerState,
    UploadWindow,
)
from .tags import merge_tags_with_app_name, validate_tags

__all__ = [
    "UPLOAD_INTERVAL_S",
    "AgentConfig",
    "Report",
    "SchedulerState",
    "ProfilerState",
    "UploadWindow",
    "merge_tags_with_app_name",
    "validate_tags",
    "AgentError",
    "CaptureError",
    "CaptureInitError",
    "CaptureSnapshotError",
    "IngestError",
    "StartError",
    "StopError",
    "NotRunningError",
]
