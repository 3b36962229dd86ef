from .fakes import FakeProfilerPort
from .folded import FoldedReportEncoder
from .sampler import ThreadSampler

__all__ = ["FakeProfilerPort", "FoldedReportEncoder", "ThreadSampler"]
