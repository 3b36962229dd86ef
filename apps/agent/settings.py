from __future__ import annotations

from collections.abc import Mapping
from typing import Any, Literal

from domain.tags import validate_tags
from pydantic import field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict


class AgentSettings(BaseSettings):
    model_config = SettingsConfigDict(env_prefix="PYRO_", extra="ignore")

    server_address: str = "http://localhost:4040"
    application_name: str = "python.app"
    sample_rate: int = 100
    tags: dict[str, str] = {}
    blocklist: list[str] = []

    log_level: Literal["DEBUG", "INFO", "WARNING", "ERROR"] = "INFO"

    @field_validator("tags", mode="before")
    @classmethod
    def _check_tags(cls, v: Any) -> Any:
        # values may arrive JSON-decoded as numbers
        return validate_tags(v) if isinstance(v, Mapping) else v

    @field_validator("sample_rate")
    @classmethod
    def _check_rate(cls, v: int) -> int:
        if v <= 0:
            raise ValueError("sample_rate must be positive")
        return v
