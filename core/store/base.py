"""Settings store port and key naming."""
from __future__ import annotations

from typing import Any, Protocol, runtime_checkable


@runtime_checkable
class SettingsStore(Protocol):
    """Persisted key/value mapping the engine reads from and writes to."""

    def get(self, key: str) -> Any | None:
        """Return stored value or None when absent."""

    def set(self, key: str, value: Any) -> None:
        """Store value under key (replacing any previous value)."""


def settings_key(module_id: str) -> str:
    return f"{module_id}_settings"


def enabled_settings_key(module_id: str) -> str:
    return f"{module_id}_enabled_settings"
