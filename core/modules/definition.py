"""Module definitions: static declaration of one settings module."""
from __future__ import annotations

from dataclasses import dataclass
from typing import TYPE_CHECKING, Callable, Iterable, Optional

if TYPE_CHECKING:
    from .fields import Field
    from .registry import Module, ModuleRegistry


def _always_active() -> bool:
    return True


@dataclass(frozen=True)
class ModuleDefinition:
    id: str
    name: str
    description: str | None = None
    priority: int = 50
    requires: tuple[str, ...] = ()
    fields: Optional[Callable[[], Iterable["Field"]]] = None
    on_saved: Optional[Callable[["Module"], None]] = None
    on_modules_saved: Optional[Callable[["ModuleRegistry"], None]] = None
    # Host-specific checks (license, environment) may report False
    is_active: Callable[[], bool] = _always_active

    def __post_init__(self) -> None:
        if not self.id or not self.id.strip():
            raise ValueError("module id cannot be empty")
        object.__setattr__(self, "requires", tuple(self.requires))


__all__ = ["ModuleDefinition"]
