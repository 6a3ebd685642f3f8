"""Capability projection: rebuild a derived role from an enabled set.

States:
    STALE         initial, or a save is being applied
    MATERIALIZED  role matches the last saved enabled set

The role is replaced as a whole on every rebuild; nothing from the
previous capability set survives.
"""
from __future__ import annotations

import logging
from enum import Enum
from typing import TYPE_CHECKING, Iterable

from core.eventbus import EventBus
from core.events import RoleProjected, emit
from core.roles import Role, RoleStore

if TYPE_CHECKING:
    from .registry import Module

logger = logging.getLogger(__name__)


class ProjectionState(str, Enum):
    STALE = "stale"
    MATERIALIZED = "materialized"


class CapabilityProjector:
    def __init__(
        self,
        role_name: str,
        display_name: str,
        roles: RoleStore,
        bus: EventBus | None = None,
    ) -> None:
        self.role_name = role_name
        self.display_name = display_name
        self._roles = roles
        self._bus = bus
        self._state = ProjectionState.STALE

    @property
    def state(self) -> ProjectionState:
        return self._state

    def rebuild(self, enabled: Iterable[str]) -> Role:
        self._state = ProjectionState.STALE
        capabilities = {cap: True for cap in enabled}
        role = Role(self.role_name, self.display_name, capabilities)
        self._roles.replace_role(role)
        self._state = ProjectionState.MATERIALIZED
        logger.info(
            "[role-projected] role=%s capabilities=%d",
            self.role_name,
            len(capabilities),
        )
        emit(
            self._bus,
            RoleProjected(
                role=self.role_name,
                display_name=self.display_name,
                capabilities_count=len(capabilities),
            ),
        )
        return role

    def __call__(self, module: "Module") -> None:
        """``on_saved`` hook: project the module's enabled settings."""
        if self._bus is None:
            self._bus = module.registry.bus
        self.rebuild(module.get_enabled_settings())


__all__ = ["CapabilityProjector", "ProjectionState"]
