"""Pydantic models describing how to reach the document index."""

from __future__ import annotations

from pathlib import Path
from typing import Any

from pydantic import BaseModel, Field, field_validator, model_validator

from ..engine.sink import build_endpoints


class SinkSettings(BaseModel):
    """Connection and batching settings for one target index."""

    host: str = "http://localhost:4080"
    user: str = "admin"
    password: str = ""
    index: str
    flush_interval: float = Field(default=1.0, gt=0, description="Seconds between scheduled flushes.")
    timeout: float = Field(default=15.0, gt=0, description="HTTP timeout in seconds.")
    max_pending: int | None = Field(
        default=None,
        ge=1,
        description="Flush early once this many records are buffered; unbounded when null.",
    )
    log_file: Path | None = None
    verbose: bool = Field(default=False, description="Emit debug-level logs.")

    @field_validator("host", "index", mode="before")
    @classmethod
    def _strip(cls, value: Any) -> Any:
        if isinstance(value, str):
            return value.strip()
        return value

    @field_validator("log_file", mode="before")
    @classmethod
    def _coerce_path(cls, value: Any) -> Path | None:
        if value in (None, ""):
            return None
        return Path(value)

    @model_validator(mode="after")
    def _validate_endpoints(self) -> "SinkSettings":
        build_endpoints(self.host, self.index)
        return self

    def masked(self) -> dict[str, Any]:
        """Return a JSON-ready dump with the password hidden."""

        payload = self.model_dump(mode="json")
        if payload.get("password"):
            payload["password"] = "******"
        return payload


__all__ = ["SinkSettings"]
