"""Observability schemas (metrics + logging)."""
from __future__ import annotations

from pydantic import BaseModel, Field


class MetricsConfig(BaseModel):
    # GET /metrics on the admin API
    expose_endpoint: bool = True


class LoggingConfig(BaseModel):
    level: str = Field("info", pattern="^(debug|info|warn|error)$")
    format: str = Field("json", pattern="^(json|text)$")
    file: str | None = None
