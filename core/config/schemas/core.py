"""Core schemas: branding, storage, roles, client role."""
from __future__ import annotations

from pydantic import BaseModel, Field


class BrandingConfig(BaseModel):
    name: str = "Sitepilot"


class StorageConfig(BaseModel):
    backend: str = Field("memory", pattern="^(memory|yaml)$")
    path: str = "data/settings.yaml"


class RolesConfig(BaseModel):
    registry_dir: str = "configs/roles"


class ClientRoleConfig(BaseModel):
    role: str = "sitepilot_user"
    reference_role: str = "administrator"
