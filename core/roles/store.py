"""Role model and role store port."""
from __future__ import annotations

from dataclasses import dataclass, field
from threading import RLock
from types import MappingProxyType
from typing import Dict, Iterable, Mapping, Protocol, runtime_checkable

from .manifest import RoleManifest


@dataclass(frozen=True)
class Role:
    name: str
    display_name: str
    capabilities: Mapping[str, bool] = field(default_factory=dict)

    def __post_init__(self) -> None:
        object.__setattr__(
            self, "capabilities", MappingProxyType(dict(self.capabilities))
        )

    def has_cap(self, capability: str) -> bool:
        return bool(self.capabilities.get(capability, False))

    @classmethod
    def from_manifest(cls, manifest: RoleManifest) -> "Role":
        return cls(
            name=manifest.name,
            display_name=manifest.display_name,
            capabilities=manifest.capabilities,
        )


@runtime_checkable
class RoleStore(Protocol):
    """Host role storage (reference roles + derived roles)."""

    def get_role(self, name: str) -> Role | None:
        """Return the role or None."""

    def add_role(self, role: Role) -> bool:
        """Add role; False when a role with that name already exists."""

    def remove_role(self, name: str) -> bool:
        """Remove role; False when it did not exist."""

    def replace_role(self, role: Role) -> None:
        """Remove any role with the same name, then add ``role``."""

    def names(self) -> list[str]:
        """Names of all stored roles."""


class InMemoryRoleStore:
    def __init__(self, roles: Iterable[Role] = ()) -> None:
        self._roles: Dict[str, Role] = {}
        self._lock = RLock()
        for role in roles:
            self._roles[role.name] = role

    @classmethod
    def from_manifests(
        cls, manifests: Mapping[str, RoleManifest]
    ) -> "InMemoryRoleStore":
        return cls(Role.from_manifest(m) for m in manifests.values())

    def get_role(self, name: str) -> Role | None:
        with self._lock:
            return self._roles.get(name)

    def add_role(self, role: Role) -> bool:
        with self._lock:
            if role.name in self._roles:
                return False
            self._roles[role.name] = role
            return True

    def remove_role(self, name: str) -> bool:
        with self._lock:
            return self._roles.pop(name, None) is not None

    def replace_role(self, role: Role) -> None:
        with self._lock:
            self.remove_role(role.name)
            self.add_role(role)

    def names(self) -> list[str]:
        with self._lock:
            return list(self._roles)
