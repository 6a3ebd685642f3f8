"""Event dataclasses emitted by the settings engine.

Events travel over the registry's own ``EventBus``; the event name is the
dataclass name and the payload is ``to_event()``.
"""
from __future__ import annotations

from dataclasses import dataclass, asdict, field
from time import time
from typing import Any, Dict, Protocol

from core import metrics as _metrics
from core.eventbus import EventBus


class SupportsEvent(Protocol):  # pragma: no cover
    def to_event(self) -> Dict[str, Any]:  # noqa: D401
        ...


@dataclass(slots=True)
class BaseEvent:
    def to_event(self) -> Dict[str, Any]:  # noqa: D401
        data = asdict(self)
        data["ts"] = data.get("ts") or time()
        return data


@dataclass(slots=True)
class ModuleRegistered(BaseEvent):
    module_id: str
    priority: int
    requires: list[str] = field(default_factory=list)


@dataclass(slots=True)
class SettingsSaved(BaseEvent):
    """Settings for one module persisted (after on_saved ran)."""
    module_id: str
    enabled_count: int
    settings_count: int


@dataclass(slots=True)
class SettingsSaveRejected(BaseEvent):
    """Save dropped before any write.

    reason: unauthorized (missing/expired/forged token)
    """
    module_id: str
    reason: str


@dataclass(slots=True)
class ModulesSaved(BaseEvent):
    enabled: list[str]


@dataclass(slots=True)
class RoleProjected(BaseEvent):
    """Derived role rebuilt from an enabled set."""
    role: str
    display_name: str
    capabilities_count: int


def _metrics_collector(name: str, payload: Dict[str, Any]) -> None:
    if name == "SettingsSaved":
        _metrics.inc(
            "settings_saved_total", {"module": payload.get("module_id")}
        )
    elif name == "SettingsSaveRejected":
        _metrics.inc_save_rejected(
            payload.get("module_id", "unknown"),
            payload.get("reason", "unknown"),
        )
    elif name == "ModuleRegistered":
        _metrics.inc(
            "module_registered_total", {"module": payload.get("module_id")}
        )
    elif name == "RoleProjected":
        _metrics.observe_role_projection(
            payload.get("role", "unknown"),
            payload.get("capabilities_count", 0),
        )


def emit(bus: EventBus | None, ev: BaseEvent | SupportsEvent) -> None:
    """Record metrics for ``ev`` and dispatch it on ``bus`` (if any)."""
    name = ev.__class__.__name__
    payload = ev.to_event()
    _metrics_collector(name, payload)
    if bus is not None:
        bus.emit(name, payload)


__all__ = [
    "emit",
    "BaseEvent",
    "ModuleRegistered",
    "SettingsSaved",
    "SettingsSaveRejected",
    "ModulesSaved",
    "RoleProjected",
]
