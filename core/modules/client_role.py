"""Client Role module.

Offers every capability of a reference role (``administrator``) as a
checkbox and, on save, recreates the client role with exactly the checked
capabilities.
"""
from __future__ import annotations

import logging
from typing import Any, Mapping

from core.roles import RoleStore
from .definition import ModuleDefinition
from .fields import Field, FieldType
from .projector import CapabilityProjector

logger = logging.getLogger(__name__)

MODULE_ID = "client-role"
ROLE_NAME = "sitepilot_user"
REFERENCE_ROLE = "administrator"
# Numeric user levels kept for back-compat, not real capabilities
LEVEL_MARKER = "level_"


def capability_fields(capabilities: Mapping[str, Any]) -> list[Field]:
    return [
        Field(key=cap, type=FieldType.CHECKBOX, label=cap)
        for cap in capabilities
        if LEVEL_MARKER not in cap
    ]


def client_role_module(
    roles: RoleStore,
    branding_name: str = "Sitepilot",
    role_name: str = ROLE_NAME,
    reference_role: str = REFERENCE_ROLE,
) -> ModuleDefinition:
    projector = CapabilityProjector(
        role_name, f"{branding_name} Client", roles
    )

    def fields() -> list[Field]:
        reference = roles.get_role(reference_role)
        if reference is None:
            logger.warning(
                "[client-role] reference role missing: %s", reference_role
            )
            return []
        return capability_fields(reference.capabilities)

    return ModuleDefinition(
        id=MODULE_ID,
        name="Client Role",
        description="Setup a custom client role and select capabilities.",
        fields=fields,
        on_saved=projector,
    )


__all__ = [
    "client_role_module",
    "capability_fields",
    "MODULE_ID",
    "ROLE_NAME",
    "REFERENCE_ROLE",
]
