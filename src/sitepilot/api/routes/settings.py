"""/settings and /modules routes: admin settings page backend."""
from __future__ import annotations

from typing import Any, Dict, List

from fastapi import APIRouter, Depends, HTTPException, Request
from pydantic import BaseModel, Field

from core.config import get_config
from core.errors import UnknownModuleError
from core.modules import Module, ModuleRegistry, SaveRequest
from core.modules.bootstrap import get_registry
from core.modules.registry import MODULES_ID

router = APIRouter()


class SaveBody(BaseModel):  # noqa: D401
    token: str | None = None
    values: Dict[str, Any] = Field(default_factory=dict)
    enabled: List[str] = Field(default_factory=list)


class ModulesBody(BaseModel):  # noqa: D401
    token: str | None = None
    enabled: List[str] = Field(default_factory=list)


def registry_dep(request: Request) -> ModuleRegistry:
    registry = getattr(request.app.state, "registry", None)
    if registry is None:
        registry = get_registry()
        request.app.state.registry = registry
    return registry


def _module_or_404(registry: ModuleRegistry, module_id: str) -> Module:
    try:
        return registry.get(module_id)
    except UnknownModuleError as e:
        raise HTTPException(status_code=404, detail=str(e)) from e


def _module_payload(registry: ModuleRegistry, module: Module) -> dict:
    return {
        "id": module.id,
        "name": module.definition.name,
        "description": module.definition.description,
        "fields": [f.model_dump(mode="json") for f in module.get_fields()],
        "settings": module.get_settings(),
        "enabled": module.get_enabled_settings(),
        "checkbox_count": module.get_checkbox_count(),
        "token": registry.tokens.issue(module.id),
    }


@router.get("/settings/nav")
def nav(
    network_admin: bool = False,
    registry: ModuleRegistry = Depends(registry_dep),
):  # noqa: D401
    multisite = get_config().admin.multisite
    items = registry.nav_items(network_admin=network_admin, multisite=multisite)
    return {
        "items": [
            {
                "id": i.id,
                "title": i.title,
                "show": i.show,
                "priority": i.priority,
            }
            for i in items
        ]
    }


@router.get("/settings/{module_id}")
def read_settings(
    module_id: str, registry: ModuleRegistry = Depends(registry_dep)
):  # noqa: D401
    module = _module_or_404(registry, module_id)
    return _module_payload(registry, module)


@router.post("/settings/{module_id}")
def save_settings(
    module_id: str,
    body: SaveBody,
    registry: ModuleRegistry = Depends(registry_dep),
):  # noqa: D401
    module = _module_or_404(registry, module_id)
    if module.id not in {m.id for m in registry.loaded_modules()}:
        raise HTTPException(
            status_code=404, detail=f"Module '{module.id}' not loaded"
        )
    request = SaveRequest(
        module_id=module.id,
        token=body.token,
        values=body.values,
        enabled_keys=body.enabled,
    )
    if not registry.save(request):
        raise HTTPException(status_code=403, detail="invalid or expired token")
    return {"saved": True, "enabled": module.get_enabled_settings()}


@router.post("/settings")
def save_form(
    form: Dict[str, Any], registry: ModuleRegistry = Depends(registry_dep)
):  # noqa: D401
    """Whole-page submit: every module with its token in the form saves."""
    return {"saved": registry.save_form(form)}


@router.get("/modules")
def modules(registry: ModuleRegistry = Depends(registry_dep)):  # noqa: D401
    return {
        "registered": [m.id for m in registry],
        "enabled": registry.enabled_modules(),
        "loaded": [m.id for m in registry.loaded_modules()],
        "token": registry.tokens.issue(MODULES_ID),
    }


@router.put("/modules")
def update_modules(
    body: ModulesBody, registry: ModuleRegistry = Depends(registry_dep)
):  # noqa: D401
    if not registry.tokens.verify(MODULES_ID, body.token):
        raise HTTPException(status_code=403, detail="invalid or expired token")
    return {"enabled": registry.set_enabled_modules(body.enabled)}
