"""Settings resolution.

Values resolve through: stored value → caller default → field default →
empty string, so modules can be queried before their first save and new
fields with defaults need no data migration. Every result passes through
the module's filter chain before it is returned.
"""
from __future__ import annotations

from collections.abc import Mapping
from typing import TYPE_CHECKING, Any

from core.filters import (
    ENABLED_SETTINGS,
    SETTINGS,
    FilterChain,
    enabled_setting_point,
    setting_point,
)
from core.store import SettingsStore, enabled_settings_key, settings_key
from .fields import FieldCatalog

if TYPE_CHECKING:
    from .definition import ModuleDefinition

ALL_MARKER = "all"


def is_empty(value: Any) -> bool:
    """Stored-data emptiness: None, "", "0", 0, 0.0, False, empty containers.

    Matches how existing settings data was written, so a stored ``"0"`` or
    ``False`` falls through to defaults.
    """
    if value is None or value is False:
        return True
    if isinstance(value, str):
        return value == "" or value == "0"
    if isinstance(value, (int, float)):
        return value == 0
    if isinstance(value, (list, tuple, dict, set, frozenset)):
        return len(value) == 0
    return False


def _strip_marker(keys: Any) -> list[str]:
    if not isinstance(keys, (list, tuple)):
        return []
    return list(dict.fromkeys(k for k in keys if k != ALL_MARKER))


class SettingsResolver:
    def __init__(
        self,
        store: SettingsStore,
        filters: FilterChain,
        catalog: FieldCatalog,
    ) -> None:
        self._store = store
        self._filters = filters
        self._catalog = catalog

    @property
    def store(self) -> SettingsStore:
        return self._store

    def get_settings(self, module_id: str) -> dict[str, Any]:
        raw = self._store.get(settings_key(module_id))
        settings = dict(raw) if isinstance(raw, Mapping) else {}
        return self._filters.apply(SETTINGS, settings, scope=module_id)

    def get_setting(
        self, definition: "ModuleDefinition", key: str, default: Any = ""
    ) -> Any:
        settings = self.get_settings(definition.id)
        if key in settings and not is_empty(settings[key]):
            value = settings[key]
        elif not is_empty(default):
            value = default
        else:
            field = self._catalog.get_field(definition, key)
            if field is not None and field.default is not None:
                value = field.default
            else:
                value = ""
        return self._filters.apply(
            setting_point(key), value, scope=definition.id
        )

    def get_enabled_settings(self, module_id: str) -> list[str]:
        enabled = _strip_marker(
            self._store.get(enabled_settings_key(module_id))
        )
        enabled = self._filters.apply(
            ENABLED_SETTINGS, enabled, scope=module_id
        )
        return _strip_marker(enabled)

    def is_setting_enabled(self, module_id: str, key: str) -> bool:
        enabled = key in self.get_enabled_settings(module_id)
        return bool(
            self._filters.apply(
                enabled_setting_point(key), enabled, scope=module_id
            )
        )


__all__ = ["SettingsResolver", "ALL_MARKER", "is_empty"]
