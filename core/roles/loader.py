"""Role registry loader: reads all YAML role manifests in a directory."""
from __future__ import annotations

import logging
import threading
from pathlib import Path
from typing import Dict

import yaml
from yaml import YAMLError

from core.errors import RoleLoadError
from .manifest import RoleManifest

logger = logging.getLogger(__name__)

_registry_lock = threading.Lock()
_manifest_cache: Dict[Path, Dict[str, RoleManifest]] = {}


def _iter_manifest_files(registry_dir: Path):
    for path in sorted(registry_dir.glob("*.yaml")):
        if path.is_file():
            yield path


def _load_manifest_file(path: Path) -> RoleManifest:
    """Load a single role manifest.

    YAML containing tab characters is re-tried with tabs replaced by two
    spaces so one hand-edited file does not take down every role.
    """
    raw_text = path.read_text(encoding="utf-8")
    try:
        data = yaml.safe_load(raw_text) or {}
    except YAMLError as e:
        if "\t" not in raw_text:
            raise RoleLoadError(f"Invalid role manifest {path.name}: {e}") from e
        logger.warning("[role-manifest] re-parsing tabs->spaces: %s", path.name)
        try:
            data = yaml.safe_load(raw_text.replace("\t", "  ")) or {}
        except YAMLError as e2:
            raise RoleLoadError(
                f"Invalid role manifest {path.name}: {e2}"
            ) from e2
    try:
        return RoleManifest(**data)
    except Exception as e:  # noqa: BLE001
        raise RoleLoadError(f"Invalid role manifest {path.name}: {e}") from e


def load_role_manifests(registry_dir: str | Path) -> Dict[str, RoleManifest]:
    """Load all role manifests keyed by role name (thread-safe cache)."""
    root = Path(registry_dir).resolve()
    with _registry_lock:
        if root in _manifest_cache:
            return _manifest_cache[root]
        if not root.exists():
            logger.warning("[role-manifest] registry dir missing: %s", root)
            _manifest_cache[root] = {}
            return _manifest_cache[root]
        index: Dict[str, RoleManifest] = {}
        for mf in _iter_manifest_files(root):
            manifest = _load_manifest_file(mf)
            if manifest.name in index:
                raise RoleLoadError(
                    f"Duplicate role name in registry: {manifest.name}"
                )
            index[manifest.name] = manifest
        _manifest_cache[root] = index
        return index


def clear_manifest_cache(registry_dir: str | Path | None = None) -> None:
    """Clear cached manifest index.

    If registry_dir provided, clear only that entry; else clear all.
    """
    with _registry_lock:
        if registry_dir is None:
            _manifest_cache.clear()
        else:
            _manifest_cache.pop(Path(registry_dir).resolve(), None)
