"""Configuration loading & validation.

Precedence (last wins): base.yaml → overrides.local.yaml → ENV (SP__*).

- ``schema_version`` missing → assume 1, warn.
- ``modules`` missing → enabled list inferred from legacy module sections.
- AggregatedConfig holds validated sub-schemas (opaque here).

Unknown top-level keys are rejected.
"""
from __future__ import annotations

import logging
import os
import pathlib
import threading
from functools import lru_cache
from typing import Any, Dict, List, Type

import yaml
from core import metrics
from core.errors import validate_error_type
from pydantic import BaseModel, Field, ConfigDict

from .schemas.admin import AdminConfig
from .schemas.core import (
    BrandingConfig,
    ClientRoleConfig,
    RolesConfig,
    StorageConfig,
)
from .schemas.observability import MetricsConfig, LoggingConfig

logger = logging.getLogger(__name__)


class ModulesConfig(BaseModel):
    enabled: List[str] = Field(default_factory=list)


class AggregatedConfig(BaseModel):
    schema_version: int = 1
    modules: ModulesConfig = ModulesConfig()
    # Sub-schemas (opaque to this layer → Any)
    admin: Any | None = None
    branding: Any | None = None
    client_role: Any | None = None
    storage: Any | None = None
    roles: Any | None = None
    metrics: Any | None = None
    logging: Any | None = None

    model_config = ConfigDict(extra="forbid")


DEFAULT_CONFIG_DIR = "configs"
ENV_PREFIX = "SP__"

# Section name → module id it implies being enabled (legacy configs).
LEGACY_MODULE_KEYS = {
    "client_role": "client-role",
}

SUB_SCHEMA_CLASSES: Dict[str, Type[BaseModel]] = {
    "admin": AdminConfig,
    "branding": BrandingConfig,
    "client_role": ClientRoleConfig,
    "storage": StorageConfig,
    "roles": RolesConfig,
    "metrics": MetricsConfig,
    "logging": LoggingConfig,
}


WEAK_TOKEN_SECRETS = frozenset({"", "change-me"})


class ConfigError(Exception):
    pass


def _load_yaml_if_exists(path: pathlib.Path) -> Dict[str, Any]:
    if not path.exists():
        return {}
    with path.open("r", encoding="utf-8") as f:
        return yaml.safe_load(f) or {}


def _merge_dict(
    base: Dict[str, Any], override: Dict[str, Any]
) -> Dict[str, Any]:
    for k, v in override.items():
        if isinstance(v, dict) and isinstance(base.get(k), dict):
            base[k] = _merge_dict(base[k], v)
        else:
            base[k] = v
    return base


def _cast_env_value(value: str) -> Any:
    if value.lower() in {"true", "false"}:
        return value.lower() == "true"
    try:
        return int(value)
    except ValueError:
        try:
            return float(value)
        except ValueError:
            return value


def _apply_env(cfg: Dict[str, Any]) -> None:
    prefix_len = len(ENV_PREFIX)
    for env_key, value in os.environ.items():
        if not env_key.startswith(ENV_PREFIX):
            continue
        path_parts = env_key[prefix_len:].lower().split("__")
        target = cfg
        for part in path_parts[:-1]:
            if part not in target or not isinstance(target[part], dict):
                target[part] = {}
            target = target[part]
        target[path_parts[-1]] = _cast_env_value(value)
        dotted_path = ".".join(path_parts)
        metrics.inc("env_override_total", {"path": dotted_path})
        logger.info(
            "[config-env-override] path=%s value=*** source=env", dotted_path
        )


_lock = threading.Lock()


def _resolve_config_dir() -> pathlib.Path:
    """Resolve config directory each call honoring env var changes."""
    return pathlib.Path(os.getenv("SP_CONFIG_DIR", DEFAULT_CONFIG_DIR))


def _migrate_legacy(data: Dict[str, Any]) -> Dict[str, Any]:
    """Apply in-place migrations for legacy configs (no schema_version).

    Rules:
    - If `schema_version` absent → set to 1 and emit warning.
    - If `modules` absent → infer enabled list from present legacy sections.
    """
    if "schema_version" not in data:
        logger.warning("[config-migration] schema_version missing → assuming 1")
        data["schema_version"] = 1
    if "modules" not in data:
        enabled = [mid for k, mid in LEGACY_MODULE_KEYS.items() if k in data]
        data["modules"] = {"enabled": enabled}
    else:
        modules = data.get("modules")
        if not isinstance(modules, dict):
            modules = data["modules"] = {}
        modules.setdefault("enabled", [])
    return data


def _validate_sub_schemas(raw: Dict[str, Any]) -> Dict[str, Any]:
    """Validate each known section via its schema class.

    Missing sections get schema defaults so callers never see None.
    """
    validated: Dict[str, Any] = {}
    for name, cls in SUB_SCHEMA_CLASSES.items():
        try:
            validated[name] = cls.model_validate(raw.get(name) or {})
        except Exception as e:  # noqa: BLE001
            metrics.inc(
                "config_validation_errors_total",
                {"path": name, "code": "config-invalid"},
            )
            raise ConfigError(
                f"Validation failed for section '{name}': {e}"
            ) from e
    return validated


def _normalize_and_validate(raw: Dict[str, Any]) -> None:
    """Apply cross-field normalizations and bounds validation.

    Normalizations:
      - modules.enabled: drop duplicates, keep first occurrence order.
    Validations (error → raise):
      - admin.token_ttl_seconds > 0
      - admin.token_secret not blank and not the old placeholder
      - client_role.role non-empty
    """
    errors: list[tuple[str, str, str]] = []  # (path, code, msg)
    enabled = raw.get("modules", {}).get("enabled")
    if isinstance(enabled, list):
        raw["modules"]["enabled"] = list(dict.fromkeys(enabled))

    admin = raw.get("admin") or {}
    ttl = admin.get("token_ttl_seconds") if isinstance(admin, dict) else None
    if isinstance(ttl, (int, float)) and ttl <= 0:
        errors.append(
            ("admin.token_ttl_seconds", "config-out-of-range", ">0 required")
        )
    secret = admin.get("token_secret") if isinstance(admin, dict) else None
    if secret is not None and str(secret).strip() in WEAK_TOKEN_SECRETS:
        errors.append(
            ("admin.token_secret", "config-invalid", "set a real secret or omit")
        )

    client_role = raw.get("client_role") or {}
    role = client_role.get("role") if isinstance(client_role, dict) else None
    if role is not None and not str(role).strip():
        errors.append(
            ("client_role.role", "config-invalid", "role name required")
        )

    if errors:
        for path, code, _ in errors:
            validate_error_type(code)
            metrics.inc(
                "config_validation_errors_total",
                {"path": path, "code": code},
            )
        details = ", ".join(f"{p}:{c}:{m}" for p, c, m in errors)
        raise ConfigError(f"config validation failed: {details}")


@lru_cache(maxsize=1)
def get_config() -> AggregatedConfig:  # noqa: D401
    with _lock:
        cfg_dir = _resolve_config_dir()
        base_cfg = _load_yaml_if_exists(cfg_dir / "base.yaml")
        overrides_cfg = _load_yaml_if_exists(cfg_dir / "overrides.local.yaml")
        merged = _merge_dict(base_cfg, overrides_cfg)
        _apply_env(merged)
        migrated = _migrate_legacy(merged)
        _normalize_and_validate(migrated)
        validated_sub = _validate_sub_schemas(migrated)
        try:
            agg = AggregatedConfig.model_validate(migrated)
        except Exception as e:  # noqa: BLE001
            raise ConfigError(str(e)) from e
        for k, v in validated_sub.items():
            setattr(agg, k, v)
        return agg


def clear_config_cache() -> None:
    """Clear cached config (primarily for tests)."""
    get_config.cache_clear()


def as_dict() -> Dict[str, Any]:
    return get_config().model_dump()
