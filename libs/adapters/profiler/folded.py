from __future__ import annotations

from domain.model import Report
from ports.profiler import ReportEncoderPort


class FoldedReportEncoder(ReportEncoderPort):
    """`root;child;leaf <count>` per line, the format Pyroscope ingests as `format=folded`."""

    def encode(self, report: Report) -> bytes:
        if report.is_empty():
            return b""
        lines = []
        for stack, count in report.samples.items():
            if count <= 0 or not stack:
                continue
            lines.append(";".join(f.replace(";", ":") for f in stack) + f" {count}")
        if not lines:
            return b""
        lines.sort()
        return ("\n".join(lines) + "\n").encode("utf-8")
