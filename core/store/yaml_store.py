"""YAML file backed settings store.

The whole mapping lives in one file. Every ``set`` rewrites it through a
temp file + ``os.replace`` so readers never observe a half-written file.
"""
from __future__ import annotations

import os
import tempfile
from copy import deepcopy
from pathlib import Path
from threading import RLock
from typing import Any, Dict

import yaml
from yaml import YAMLError

from core.errors import StoreError


class YamlSettingsStore:
    def __init__(self, path: str | Path) -> None:
        self._path = Path(path)
        self._lock = RLock()
        self._data: Dict[str, Any] | None = None

    @property
    def path(self) -> Path:
        return self._path

    def _load(self) -> Dict[str, Any]:
        if self._data is not None:
            return self._data
        if not self._path.exists():
            self._data = {}
            return self._data
        try:
            raw = yaml.safe_load(self._path.read_text(encoding="utf-8"))
        except (OSError, YAMLError) as e:
            raise StoreError(f"Cannot read settings {self._path}: {e}") from e
        if raw is None:
            raw = {}
        if not isinstance(raw, dict):
            raise StoreError(
                f"Settings file {self._path} must contain a mapping"
            )
        self._data = raw
        return self._data

    def _flush(self, data: Dict[str, Any]) -> None:
        self._path.parent.mkdir(parents=True, exist_ok=True)
        fd, tmp = tempfile.mkstemp(
            dir=str(self._path.parent), prefix=".settings-", suffix=".yaml"
        )
        try:
            with os.fdopen(fd, "w", encoding="utf-8") as f:
                yaml.safe_dump(data, f, sort_keys=True, allow_unicode=True)
            os.replace(tmp, self._path)
        except OSError as e:
            try:
                os.unlink(tmp)
            except OSError:
                pass
            raise StoreError(
                f"Cannot write settings {self._path}: {e}"
            ) from e

    def get(self, key: str) -> Any | None:
        with self._lock:
            return deepcopy(self._load().get(key))

    def set(self, key: str, value: Any) -> None:
        with self._lock:
            data = dict(self._load())
            data[key] = deepcopy(value)
            self._flush(data)
            self._data = data

    def reload(self) -> None:
        """Drop the cached mapping; next access re-reads the file."""
        with self._lock:
            self._data = None
