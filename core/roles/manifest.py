"""Role manifest schema."""
from __future__ import annotations

from typing import Dict
from pydantic import BaseModel, field_validator, ConfigDict


class RoleManifest(BaseModel):
    name: str
    display_name: str
    capabilities: Dict[str, bool] = {}

    model_config = ConfigDict(extra="forbid")

    @field_validator("name")
    @classmethod
    def _name_not_empty(cls, v: str) -> str:  # noqa: D401
        if not v.strip():
            raise ValueError("name cannot be empty")
        return v
