# libs/domain/agent/service.py
from __future__ import annotations

import logging
from collections.abc import Callable
from typing import Final

from domain.errors import AgentError, CaptureInitError, CaptureSnapshotError, IngestError
from domain.model import AgentConfig, ProfilerState
from domain.tags import merge_tags_with_app_name
from ports.ingest import IngestPort
from ports.profiler import ProfilerPort

from .model import UploadContext

LOG: Final = logging.getLogger("agent")

# consecutive failed snapshots before the capture handle counts as unusable
MAX_SNAPSHOT_FAILURES: Final = 3

ErrorHook = Callable[[AgentError], None]


class UploadService:
    """Pure domain service (no threads). One call to `cycle()` = one capture + upload."""

    def __init__(
        self,
        config: AgentConfig,
        profiler: ProfilerPort,
        ingest: IngestPort,
        on_error: ErrorHook | None = None,
    ) -> None:
        self.config: Final = config
        self.profiler: Final = profiler
        self.ingest: Final = ingest
        self.on_error: Final = on_error
        self.ctx = UploadContext(
            series_name=merge_tags_with_app_name(config.application_name, config.tags)
        )

    def open(self) -> None:
        """Initialize and start the capture handle. Raises CaptureInitError."""
        try:
            self.profiler.initialize(self.config.sample_rate, self.config.blocklist)
            self.profiler.start()
        except CaptureInitError:
            raise
        except Exception as ex:
            raise CaptureInitError(f"profiler failed to start: {ex!r}") from ex

    def close(self) -> None:
        if self.profiler.state is ProfilerState.RUNNING:
            try:
                self.profiler.stop()
            except Exception as ex:
                LOG.warning("profiler stop failed: %r", ex)
        try:
            self.ingest.close()
        except Exception as ex:
            LOG.warning("ingest client close failed: %r", ex)

    def cycle(self) -> AgentError | None:
        """
        Capture the current report and upload it.

        Per-cycle failures are returned, not raised, so the loop keeps going.
        Raises CaptureError when the capture handle is no longer usable.
        """
        self.ctx.cycles += 1
        try:
            try:
                report = self.profiler.report()
            except (CaptureInitError, CaptureSnapshotError):
                raise
            except Exception as ex:
                raise CaptureSnapshotError(f"profiler report failed: {ex!r}") from ex
        except CaptureSnapshotError as ex:
            self.ctx.snapshot_failures += 1
            if self.ctx.snapshot_failures >= MAX_SNAPSHOT_FAILURES:
                raise
            return self._failed(ex)
        self.ctx.snapshot_failures = 0

        try:
            self.ingest.ingest(report, self.config.endpoint_url, self.ctx.series_name)
        except IngestError as ex:
            return self._failed(ex)
        except Exception as ex:
            return self._failed(IngestError(f"unexpected ingest failure: {ex!r}"))

        self.ctx.last_error = None
        return None

    def _failed(self, err: AgentError) -> AgentError:
        self.ctx.failures += 1
        self.ctx.last_error = err
        LOG.warning("upload cycle %d failed: %s", self.ctx.cycles, err)
        if self.on_error is not None:
            try:
                self.on_error(err)
            except Exception:
                LOG.exception("on_error hook raised")
        return err
