from .client import HttpIngestClient
from .fakes import IngestCall, RecordingIngestPort

__all__ = ["HttpIngestClient", "IngestCall", "RecordingIngestPort"]
