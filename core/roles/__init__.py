"""Roles and capabilities.

Responsibilities:
- Load reference role manifests from a YAML registry directory
- Provide the RoleStore port used by capability projectors
- In-memory RoleStore implementation
"""
from .manifest import RoleManifest  # noqa: F401
from .store import Role, RoleStore, InMemoryRoleStore  # noqa: F401
from .loader import load_role_manifests, clear_manifest_cache  # noqa: F401

__all__ = [
    "RoleManifest",
    "Role",
    "RoleStore",
    "InMemoryRoleStore",
    "load_role_manifests",
    "clear_manifest_cache",
]
