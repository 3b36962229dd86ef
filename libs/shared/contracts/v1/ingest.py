from __future__ import annotations

from typing import Any, Literal

from pydantic import BaseModel, ConfigDict, Field

CONTENT_TYPE: Literal["binary/octet-stream"] = "binary/octet-stream"


class IngestQuery(BaseModel):
    """Query string of `POST {server}/ingest`."""

    model_config = ConfigDict(populate_by_name=True, frozen=True)

    name: str
    from_: int = Field(alias="from")
    until: int
    format: Literal["folded"] = "folded"
    sample_rate: int = Field(alias="sampleRate")
    spy_name: str = Field(alias="spyName")

    def to_params(self) -> dict[str, Any]:
        return self.model_dump(by_alias=True)
