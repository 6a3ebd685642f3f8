"""In-memory settings store (tests, single process)."""
from __future__ import annotations

from copy import deepcopy
from threading import RLock
from typing import Any, Dict, Mapping


class InMemorySettingsStore:
    def __init__(self, initial: Mapping[str, Any] | None = None) -> None:
        self._data: Dict[str, Any] = deepcopy(dict(initial or {}))
        self._lock = RLock()

    def get(self, key: str) -> Any | None:
        with self._lock:
            return deepcopy(self._data.get(key))

    def set(self, key: str, value: Any) -> None:
        with self._lock:
            self._data[key] = deepcopy(value)

    def keys(self) -> list[str]:
        with self._lock:
            return list(self._data)

    def as_dict(self) -> Dict[str, Any]:
        with self._lock:
            return deepcopy(self._data)
