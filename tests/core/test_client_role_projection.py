import pytest

from core import metrics
from core.modules import (
    CapabilityProjector,
    ProjectionState,
    SaveRequest,
    capability_fields,
    client_role_module,
)
from core.roles import InMemoryRoleStore


def _save(registry, enabled):
    return registry.save(
        SaveRequest(
            module_id="client-role",
            token=registry.tokens.issue("client-role"),
            enabled_keys=enabled,
        )
    )


def test_capability_fields_exclude_level_markers():
    fields = capability_fields(
        {"edit_posts": True, "level_7": True, "manage_options": True}
    )
    assert [f.key for f in fields] == ["edit_posts", "manage_options"]
    assert all(f.type == "checkbox" and f.label == f.key for f in fields)


def test_field_catalog_from_reference_role(registry, roles):
    module = registry.register(client_role_module(roles))
    keys = [f.key for f in module.get_fields()]
    assert keys == ["edit_posts", "manage_options", "publish_posts"]
    assert module.get_checkbox_count() == 3


def test_save_rebuilds_role_without_leftovers(registry, roles):
    definition = client_role_module(roles, branding_name="Acme")
    registry.register(definition)
    projector = definition.on_saved
    assert projector.state == ProjectionState.STALE

    assert _save(registry, ["edit_posts", "publish_posts"])
    assert projector.state == ProjectionState.MATERIALIZED
    role = roles.get_role("sitepilot_user")
    assert role.display_name == "Acme Client"
    assert dict(role.capabilities) == {"edit_posts": True, "publish_posts": True}

    assert _save(registry, ["all", "edit_posts", "manage_options"])
    role = roles.get_role("sitepilot_user")
    assert dict(role.capabilities) == {
        "edit_posts": True,
        "manage_options": True,
    }
    assert not role.has_cap("publish_posts")
    assert metrics.counter(
        "role_projected_total", {"role": "sitepilot_user"}
    ) == 2


def test_save_is_idempotent(registry, roles):
    registry.register(client_role_module(roles))
    _save(registry, ["edit_posts", "manage_options"])
    first = dict(roles.get_role("sitepilot_user").capabilities)
    _save(registry, ["edit_posts", "manage_options"])
    second = dict(roles.get_role("sitepilot_user").capabilities)
    assert first == second == {"edit_posts": True, "manage_options": True}


def test_rejected_save_leaves_role_untouched(registry, roles):
    registry.register(client_role_module(roles))
    _save(registry, ["edit_posts"])
    ok = registry.save(
        SaveRequest("client-role", "bad.token", enabled_keys=["manage_options"])
    )
    assert ok is False
    assert dict(roles.get_role("sitepilot_user").capabilities) == {
        "edit_posts": True
    }


def test_level_keys_cannot_be_enabled(registry, roles):
    registry.register(client_role_module(roles))
    _save(registry, ["level_7", "edit_posts"])
    assert dict(roles.get_role("sitepilot_user").capabilities) == {
        "edit_posts": True
    }


def test_missing_reference_role_yields_no_panel(registry):
    registry.register(client_role_module(InMemoryRoleStore()))
    module = registry.get("client-role")
    assert module.get_fields() == []
    assert module.get_checkbox_count() == 0
    registry.set_enabled_modules(["client-role"])
    assert registry.nav_items() == []


def test_projector_failure_keeps_state_stale():
    class BrokenRoles(InMemoryRoleStore):
        def replace_role(self, role):
            raise RuntimeError("host role storage down")

    projector = CapabilityProjector("r", "R", BrokenRoles())
    with pytest.raises(RuntimeError):
        projector.rebuild(["edit_posts"])
    assert projector.state == ProjectionState.STALE
