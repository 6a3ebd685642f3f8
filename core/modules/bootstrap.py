"""Build the configured module registry."""
from __future__ import annotations

import logging
from functools import lru_cache
from typing import Any

from core.config import get_config
from core.roles import InMemoryRoleStore, RoleStore, load_role_manifests
from core.store import SettingsStore, build_store, enabled_settings_key
from .client_role import client_role_module
from .registry import Module, ModuleRegistry
from .save import TokenSigner

logger = logging.getLogger(__name__)


def restore_projection(registry: ModuleRegistry, module: Module) -> bool:
    """Re-run ``on_saved`` for a module that already has a saved record.

    Derived artifacts (the client role) live in the role store, which is
    rebuilt from manifests on start; the saved enabled set is durable.
    """
    if module.definition.on_saved is None:
        return False
    stored = registry.resolver.store.get(enabled_settings_key(module.id))
    if not isinstance(stored, list):
        return False
    module.definition.on_saved(module)
    logger.info("[projection-restored] module=%s", module.id)
    return True


def build_registry(
    cfg: Any | None = None,
    *,
    store: SettingsStore | None = None,
    roles: RoleStore | None = None,
) -> ModuleRegistry:
    cfg = cfg or get_config()
    if store is None:
        store = build_store(cfg.storage)
    if roles is None:
        roles = InMemoryRoleStore.from_manifests(
            load_role_manifests(cfg.roles.registry_dir)
        )
    if cfg.admin.token_secret is None:
        logger.warning(
            "[admin-token-secret] unset; using a random per-process secret"
        )
    registry = ModuleRegistry(
        store,
        tokens=TokenSigner(
            cfg.admin.token_secret, ttl_seconds=cfg.admin.token_ttl_seconds
        ),
        default_enabled=cfg.modules.enabled,
    )
    module = registry.register(
        client_role_module(
            roles,
            branding_name=cfg.branding.name,
            role_name=cfg.client_role.role,
            reference_role=cfg.client_role.reference_role,
        )
    )
    restore_projection(registry, module)
    return registry


@lru_cache(maxsize=1)
def get_registry() -> ModuleRegistry:
    return build_registry()


__all__ = ["build_registry", "get_registry", "restore_projection"]
