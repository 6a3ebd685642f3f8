"""Settings store backends.

``build_store`` picks a backend from ``StorageConfig``:
    memory -> InMemorySettingsStore
    yaml   -> YamlSettingsStore(path)
"""
from __future__ import annotations

from typing import Any

from .base import SettingsStore, settings_key, enabled_settings_key
from .memory import InMemorySettingsStore
from .yaml_store import YamlSettingsStore


def build_store(storage_cfg: Any | None) -> SettingsStore:
    backend = getattr(storage_cfg, "backend", "memory")
    if backend == "yaml":
        return YamlSettingsStore(storage_cfg.path)
    return InMemorySettingsStore()


__all__ = [
    "SettingsStore",
    "InMemorySettingsStore",
    "YamlSettingsStore",
    "build_store",
    "settings_key",
    "enabled_settings_key",
]
