"""Central error taxonomy and exception hierarchy.

Every exception raised by the engine carries an ``error_type`` drawn from
the taxonomy below so metrics and API responses use stable codes.
"""
from __future__ import annotations

_ALLOWED_ERROR_TYPES = {
    # registry
    "duplicate-registration",
    "reserved-module-id",
    "unknown-module",
    "duplicate-field",
    # save
    "unauthorized",
    # collaborators
    "role-load-failed",
    "store-io",
    # config
    "config-invalid",
    "config-out-of-range",
    # infra
    "event-handler-error",
    "internal",
}


class SitepilotError(Exception):
    """Base engine exception."""

    error_type = "internal"


class DuplicateModuleError(SitepilotError):
    """Two module definitions share the same id."""

    error_type = "duplicate-registration"


class ReservedModuleError(SitepilotError):
    error_type = "reserved-module-id"


class UnknownModuleError(SitepilotError, KeyError):
    error_type = "unknown-module"

    def __str__(self) -> str:  # KeyError quotes its message otherwise
        return str(self.args[0]) if self.args else ""


class DuplicateFieldError(SitepilotError):
    """A module's field list declares the same key twice."""

    error_type = "duplicate-field"


class RoleLoadError(SitepilotError):
    """Raised when a role manifest cannot be parsed or is duplicated."""

    error_type = "role-load-failed"


class StoreError(SitepilotError):
    error_type = "store-io"


def validate_error_type(code: str) -> str:
    assert (
        code in _ALLOWED_ERROR_TYPES
    ), f"Unknown error_type '{code}' (not in taxonomy)"
    return code


def map_exception(e: Exception) -> str:
    if isinstance(e, SitepilotError):
        return validate_error_type(e.error_type)
    return "internal"


__all__ = [
    "SitepilotError",
    "DuplicateModuleError",
    "ReservedModuleError",
    "UnknownModuleError",
    "DuplicateFieldError",
    "RoleLoadError",
    "StoreError",
    "validate_error_type",
    "map_exception",
]
