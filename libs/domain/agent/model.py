from __future__ import annotations

from dataclasses import dataclass


@dataclass
class UploadContext:
    series_name: str
    cycles: int = 0
    failures: int = 0
    snapshot_failures: int = 0  # consecutive
    last_error: Exception | None = None
