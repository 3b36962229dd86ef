from .ingest import IngestPort
from .profiler import ProfilerPort, ReportEncoderPort
from .time import ClockPort, TickerPort

__all__ = [
    "ProfilerPort",
    "ReportEncoderPort",
    "IngestPort",
    "ClockPort",
    "TickerPort",
]
