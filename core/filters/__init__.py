"""Override/filter chain.

Transforms are registered per ``(scope, point)`` where scope is a module id
(or ``None`` for global points) and run in ascending priority, then
registration order. Each transform receives the current value plus any
extra positional args passed to ``apply`` and returns the new value. With
no transforms registered ``apply`` is the identity.

Extension points used by the engine:
    fields                  list[Field] for a module
    settings                dict of stored values for a module
    setting:<key>           resolved value of one setting
    enabled_settings        enabled key list for a module
    enabled_setting:<key>   bool membership of one key
    modules_enabled         global enabled module id list (scope None)
"""
from __future__ import annotations

from dataclasses import dataclass, field
from itertools import count
from threading import RLock
from typing import Any, Callable, Dict, List, Optional, Tuple

Transform = Callable[..., Any]

FIELDS = "fields"
SETTINGS = "settings"
ENABLED_SETTINGS = "enabled_settings"
MODULES_ENABLED = "modules_enabled"
DEFAULT_PRIORITY = 10


def setting_point(key: str) -> str:
    return f"setting:{key}"


def enabled_setting_point(key: str) -> str:
    return f"enabled_setting:{key}"


def return_true(*_args: Any) -> bool:
    return True


def return_false(*_args: Any) -> bool:
    return False


@dataclass(order=True)
class _Entry:
    priority: int
    seq: int
    transform: Transform = field(compare=False)
    name: Optional[str] = field(default=None, compare=False)


class FilterChain:
    def __init__(self) -> None:
        self._chains: Dict[Tuple[Optional[str], str], List[_Entry]] = {}
        self._seq = count()
        self._lock = RLock()

    def add(
        self,
        point: str,
        transform: Transform,
        *,
        scope: Optional[str] = None,
        priority: int = DEFAULT_PRIORITY,
        name: Optional[str] = None,
    ) -> Callable[[], None]:
        """Register ``transform``; returns a callable that removes it."""
        entry = _Entry(priority, next(self._seq), transform, name)
        key = (scope, point)
        with self._lock:
            chain = self._chains.setdefault(key, [])
            chain.append(entry)
            chain.sort()

        def _remove() -> None:  # noqa: D401
            with self._lock:
                try:
                    self._chains.get(key, []).remove(entry)
                except ValueError:
                    pass

        return _remove

    def remove(
        self, point: str, name: str, *, scope: Optional[str] = None
    ) -> int:
        """Remove every transform registered under ``name``; returns count."""
        with self._lock:
            chain = self._chains.get((scope, point), [])
            kept = [e for e in chain if e.name != name]
            removed = len(chain) - len(kept)
            self._chains[(scope, point)] = kept
        return removed

    def has(self, point: str, *, scope: Optional[str] = None) -> bool:
        with self._lock:
            return bool(self._chains.get((scope, point)))

    def apply(
        self,
        point: str,
        value: Any,
        *args: Any,
        scope: Optional[str] = None,
    ) -> Any:
        with self._lock:
            chain = list(self._chains.get((scope, point), ()))
        for entry in chain:
            value = entry.transform(value, *args)
        return value

    def reset_for_tests(self) -> None:  # pragma: no cover
        with self._lock:
            self._chains.clear()


__all__ = [
    "FilterChain",
    "Transform",
    "FIELDS",
    "SETTINGS",
    "ENABLED_SETTINGS",
    "MODULES_ENABLED",
    "DEFAULT_PRIORITY",
    "setting_point",
    "enabled_setting_point",
    "return_true",
    "return_false",
]
