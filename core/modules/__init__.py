"""Modules package.

Settings modules: each declares a field catalog, stores its settings and
enabled checkbox keys in a SettingsStore, and may project its enabled set
into a derived artifact (the client role) whenever it is saved.
"""
from __future__ import annotations

from .definition import ModuleDefinition  # noqa: F401
from .fields import Field, FieldType, FieldCatalog  # noqa: F401
from .resolver import SettingsResolver, ALL_MARKER, is_empty  # noqa: F401
from .save import SaveRequest, TokenSigner, sanitize_text_field  # noqa: F401
from .registry import ModuleRegistry, Module, NavItem  # noqa: F401
from .projector import CapabilityProjector, ProjectionState  # noqa: F401
from .client_role import client_role_module, capability_fields  # noqa: F401

__all__ = [
    "ModuleDefinition",
    "Field",
    "FieldType",
    "FieldCatalog",
    "SettingsResolver",
    "ALL_MARKER",
    "is_empty",
    "SaveRequest",
    "TokenSigner",
    "sanitize_text_field",
    "ModuleRegistry",
    "Module",
    "NavItem",
    "CapabilityProjector",
    "ProjectionState",
    "client_role_module",
    "capability_fields",
]
