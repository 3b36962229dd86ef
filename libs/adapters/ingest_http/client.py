from __future__ import annotations

import logging
from typing import Final

import httpx
from domain.errors import IngestError
from domain.model import Report, UploadWindow
from ports.ingest import IngestPort
from ports.profiler import ReportEncoderPort
from shared.contracts.v1.ingest import CONTENT_TYPE, IngestQuery

LOG: Final = logging.getLogger("agent.ingest")


class HttpIngestClient(IngestPort):
    """
    One POST per report to `{endpoint}/ingest`. No retries and no timeout
    override; transport errors and non-2xx replies become IngestError.
    """

    def __init__(
        self,
        encoder: ReportEncoderPort,
        spy_name: str,
        client: httpx.Client | None = None,
    ) -> None:
        self._encoder = encoder
        self._spy_name = spy_name
        self._client = client or httpx.Client()

    def ingest(self, report: Report, endpoint_url: str, series_name: str) -> None:
        try:
            body = self._encoder.encode(report)
        except Exception as ex:
            raise IngestError(f"failed to encode report: {ex!r}") from ex
        if not body:
            LOG.debug("empty report for %s, skipping upload", series_name)
            return

        window = UploadWindow.for_start(report.start_time)
        query = IngestQuery(
            name=series_name,
            from_=window.from_,
            until=window.until,
            sample_rate=report.sample_rate,
            spy_name=self._spy_name,
        )
        url = f"{endpoint_url.rstrip('/')}/ingest"
        try:
            resp = self._client.post(
                url,
                params=query.to_params(),
                content=body,
                headers={"Content-Type": CONTENT_TYPE},
            )
            resp.raise_for_status()
        except httpx.HTTPStatusError as ex:
            raise IngestError(
                f"ingest rejected with HTTP {ex.response.status_code}",
                status_code=ex.response.status_code,
            ) from ex
        except httpx.HTTPError as ex:
            raise IngestError(f"ingest request failed: {ex!r}") from ex

        LOG.debug(
            "uploaded %d bytes for %s [%d, %d)", len(body), series_name, window.from_, window.until
        )

    def close(self) -> None:
        self._client.close()
