"""ModuleRegistry and bound Module handles.

Responsibilities:
 - Register module definitions (duplicate ids rejected)
 - Force-enable required modules through the filter chain
 - Resolve the global enabled-module list and admin nav items
 - Run the save flow: verify token → persist → on_saved → SettingsSaved
"""
from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import Any, Iterable, Iterator, Mapping

from core.errors import (
    DuplicateModuleError,
    ReservedModuleError,
    StoreError,
    UnknownModuleError,
)
from core.eventbus import EventBus
from core.events import (
    ModuleRegistered,
    ModulesSaved,
    SettingsSaved,
    SettingsSaveRejected,
    emit,
)
from core.filters import (
    MODULES_ENABLED,
    FilterChain,
    enabled_setting_point,
    return_true,
)
from core.store import SettingsStore, enabled_settings_key, settings_key
from .definition import ModuleDefinition
from .fields import Field, FieldCatalog
from .resolver import ALL_MARKER, SettingsResolver
from .save import SaveRequest, TokenSigner, TOKEN_SUFFIX, sanitize_text_field

logger = logging.getLogger(__name__)

# The global enabled-module list is stored as this pseudo module's
# enabled settings.
MODULES_ID = "modules"


@dataclass(frozen=True)
class NavItem:
    id: str
    title: str
    show: bool
    priority: int


class Module:
    """A registered definition bound to its registry's resolver."""

    __slots__ = ("definition", "registry")

    def __init__(
        self, definition: ModuleDefinition, registry: "ModuleRegistry"
    ) -> None:
        self.definition = definition
        self.registry = registry

    @property
    def id(self) -> str:
        return self.definition.id

    def get_id(self) -> str:
        return self.definition.id

    def is_active(self) -> bool:
        return bool(self.definition.is_active())

    def get_fields(self) -> list[Field]:
        return self.registry.catalog.get_fields(self.definition)

    def get_checkbox_count(self) -> int:
        return self.registry.catalog.get_checkbox_count(self.definition)

    def get_settings(self) -> dict[str, Any]:
        return self.registry.resolver.get_settings(self.id)

    def get_setting(self, key: str, default: Any = "") -> Any:
        return self.registry.resolver.get_setting(self.definition, key, default)

    def get_enabled_settings(self) -> list[str]:
        return self.registry.resolver.get_enabled_settings(self.id)

    def is_setting_enabled(self, key: str) -> bool:
        return self.registry.resolver.is_setting_enabled(self.id, key)

    def __repr__(self) -> str:
        return f"Module({self.id!r})"


def _require_modules(required: tuple[str, ...], modules: list[str]) -> list[str]:
    modules = list(modules)
    for module_id in required:
        if module_id not in modules:
            modules.append(module_id)
    return modules


class ModuleRegistry:
    def __init__(
        self,
        store: SettingsStore,
        *,
        filters: FilterChain | None = None,
        bus: EventBus | None = None,
        tokens: TokenSigner | None = None,
        default_enabled: Iterable[str] = (),
    ) -> None:
        self._store = store
        self.filters = filters if filters is not None else FilterChain()
        self.bus = bus if bus is not None else EventBus()
        self.tokens = tokens if tokens is not None else TokenSigner()
        self.catalog = FieldCatalog(self.filters)
        self.resolver = SettingsResolver(store, self.filters, self.catalog)
        self._modules: dict[str, Module] = {}
        self._default_enabled = list(default_enabled)

    # --- Registration ----------------------------------------------------
    def register(self, definition: ModuleDefinition) -> Module:
        if definition.id == MODULES_ID:
            raise ReservedModuleError(
                f"Module id '{MODULES_ID}' is reserved"
            )
        if definition.id in self._modules:
            raise DuplicateModuleError(
                f"Module '{definition.id}' already registered"
            )
        module = Module(definition, self)
        self._modules[definition.id] = module
        if definition.requires:
            tag = f"require:{definition.id}"
            for dep in definition.requires:
                self.filters.add(
                    enabled_setting_point(ALL_MARKER),
                    return_true,
                    scope=dep,
                    name=tag,
                )
            required = definition.requires

            def _enable_required(modules: list[str]) -> list[str]:
                return _require_modules(required, modules)

            self.filters.add(MODULES_ENABLED, _enable_required, name=tag)
        logger.debug(
            "[module-registered] id=%s requires=%s",
            definition.id,
            ",".join(definition.requires) or "-",
        )
        emit(
            self.bus,
            ModuleRegistered(
                module_id=definition.id,
                priority=definition.priority,
                requires=list(definition.requires),
            ),
        )
        return module

    def get(self, module_id: str) -> Module:
        module = self._modules.get(module_id)
        if module is None:
            raise UnknownModuleError(f"Module '{module_id}' not registered")
        return module

    def get_id(self, module: Module | ModuleDefinition) -> str:
        return module.id

    def is_active(self, module_id: str) -> bool:
        return self.get(module_id).is_active()

    def __contains__(self, module_id: object) -> bool:
        return module_id in self._modules

    def __iter__(self) -> Iterator[Module]:
        return iter(list(self._modules.values()))

    def __len__(self) -> int:
        return len(self._modules)

    # --- Enabled modules -------------------------------------------------
    def enabled_modules(self) -> list[str]:
        stored = self._store.get(enabled_settings_key(MODULES_ID))
        if isinstance(stored, list):
            modules = list(stored)
        else:
            modules = list(self._default_enabled)
        modules = self.filters.apply(MODULES_ENABLED, modules)
        return list(dict.fromkeys(modules))

    def set_enabled_modules(self, module_ids: Iterable[str]) -> list[str]:
        ids = list(dict.fromkeys(sanitize_text_field(m) for m in module_ids))
        self._store.set(enabled_settings_key(MODULES_ID), ids)
        for module in self:
            if module.definition.on_modules_saved is not None:
                module.definition.on_modules_saved(self)
        enabled = self.enabled_modules()
        emit(self.bus, ModulesSaved(enabled=enabled))
        return enabled

    def loaded_modules(self) -> list[Module]:
        enabled = set(self.enabled_modules())
        order = {mid: i for i, mid in enumerate(self._modules)}
        loaded = [
            m for m in self._modules.values()
            if m.id in enabled and m.is_active()
        ]
        return sorted(
            loaded, key=lambda m: (m.definition.priority, order[m.id])
        )

    def nav_items(
        self, *, network_admin: bool = False, multisite: bool = False
    ) -> list[NavItem]:
        items = []
        for module in self.loaded_modules():
            if not module.get_fields():
                continue
            items.append(
                NavItem(
                    id=module.id,
                    title=module.definition.name,
                    show=network_admin or not multisite,
                    priority=module.definition.priority,
                )
            )
        return items

    # --- Save ------------------------------------------------------------
    def save(self, request: SaveRequest) -> bool:
        """Persist one module's posted settings.

        Returns False (nothing written, no on_saved) when the token does
        not verify for the module.
        """
        module = self.get(request.module_id)
        if not self.tokens.verify(module.id, request.token):
            logger.warning("[settings-save-rejected] module=%s", module.id)
            emit(
                self.bus,
                SettingsSaveRejected(module_id=module.id, reason="unauthorized"),
            )
            return False

        declared = {f.key for f in module.get_fields()} | {ALL_MARKER}
        enabled = []
        for raw in request.enabled_keys:
            key = sanitize_text_field(raw)
            if key in declared and key not in enabled:
                enabled.append(key)
            elif key not in declared:
                logger.debug(
                    "[settings-save] module=%s dropped unknown key=%s",
                    module.id,
                    key,
                )
        values = {
            k: v for k, v in request.values.items() if isinstance(k, str)
        }

        previous = self._store.get(settings_key(module.id))
        self._store.set(settings_key(module.id), values)
        try:
            self._store.set(enabled_settings_key(module.id), enabled)
        except StoreError:
            # keep the two records consistent
            self._store.set(settings_key(module.id), previous)
            raise

        if module.definition.on_saved is not None:
            module.definition.on_saved(module)
        logger.info(
            "[settings-saved] module=%s enabled=%d values=%d",
            module.id,
            len(enabled),
            len(values),
        )
        emit(
            self.bus,
            SettingsSaved(
                module_id=module.id,
                enabled_count=len(enabled),
                settings_count=len(values),
            ),
        )
        return True

    def save_form(self, form: Mapping[str, Any]) -> list[str]:
        """Save every loaded module whose token is present in ``form``."""
        saved = []
        for module in self.loaded_modules():
            if module.id + TOKEN_SUFFIX not in form:
                continue
            if self.save(SaveRequest.from_form(module.id, form)):
                saved.append(module.id)
        return saved


__all__ = ["ModuleRegistry", "Module", "NavItem", "MODULES_ID"]
