"""Pytest configuration ensuring project root is importable.

Adds repository root and src/ to sys.path explicitly to avoid
interpreter/path quirks when the package is not installed.
"""
from __future__ import annotations

import sys
from pathlib import Path
import os
import pytest

ROOT = Path(__file__).resolve().parent.parent
if str(ROOT) not in sys.path:
    sys.path.insert(0, str(ROOT))
SRC = ROOT / "src"
if SRC.exists() and str(SRC) not in sys.path:
    sys.path.insert(0, str(SRC))


@pytest.fixture(autouse=True)
def _isolate_config_env():  # noqa: D401
    """Ensure global config/metrics side effects do not leak between tests.

    - Clear aggregated config + registry caches between tests
    - Reset metrics counters
    - Restore SP_CONFIG_DIR to original value
    """
    from core.config import clear_config_cache  # local import
    from core.modules.bootstrap import get_registry
    from core.roles import clear_manifest_cache
    from core import metrics

    prev = os.environ.get("SP_CONFIG_DIR")
    clear_config_cache()
    get_registry.cache_clear()
    clear_manifest_cache()
    metrics.reset_for_tests()
    try:
        yield
    finally:
        clear_config_cache()
        get_registry.cache_clear()
        clear_manifest_cache()
        if prev is None:
            os.environ.pop("SP_CONFIG_DIR", None)
        else:
            os.environ["SP_CONFIG_DIR"] = prev


REFERENCE_CAPS = {
    "edit_posts": True,
    "level_7": True,
    "manage_options": True,
    "publish_posts": True,
}


@pytest.fixture
def roles():
    from core.roles import InMemoryRoleStore, Role

    return InMemoryRoleStore(
        [Role("administrator", "Administrator", REFERENCE_CAPS)]
    )


@pytest.fixture
def store():
    from core.store import InMemorySettingsStore

    return InMemorySettingsStore()


@pytest.fixture
def registry(store):
    from core.modules import ModuleRegistry, TokenSigner

    return ModuleRegistry(
        store, tokens=TokenSigner("test-secret"), default_enabled=[]
    )
