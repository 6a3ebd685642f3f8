"""Admin settings page schema (token signing, multisite display)."""
from __future__ import annotations

from typing import Any

from pydantic import BaseModel, field_validator


class AdminConfig(BaseModel):
    multisite: bool = False
    # None → random per-process secret; tokens do not survive a restart
    token_secret: str | None = None
    token_ttl_seconds: int = 86400

    @field_validator("token_secret", mode="before")
    @classmethod
    def _secret_as_text(cls, v: Any) -> Any:
        # env overrides cast digit-only values to int
        if isinstance(v, (int, float)) and not isinstance(v, bool):
            return str(v)
        return v
