from .model import UploadContext
from .service import MAX_SNAPSHOT_FAILURES, UploadService

__all__ = ["UploadContext", "UploadService", "MAX_SNAPSHOT_FAILURES"]
