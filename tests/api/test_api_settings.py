import pytest
from fastapi.testclient import TestClient

from core.modules import (
    Field,
    FieldType,
    ModuleDefinition,
    ModuleRegistry,
    TokenSigner,
    client_role_module,
)
from core.store import InMemorySettingsStore
from sitepilot.api.app import create_app


@pytest.fixture
def api(roles, tmp_path, monkeypatch):
    # isolated config dir → schema defaults (memory storage, text logs)
    monkeypatch.setenv("SP_CONFIG_DIR", str(tmp_path))
    store = InMemorySettingsStore()
    registry = ModuleRegistry(
        store,
        tokens=TokenSigner("api-secret"),
        default_enabled=["client-role", "seo"],
    )
    registry.register(client_role_module(roles, branding_name="Acme"))
    registry.register(
        ModuleDefinition(
            "seo",
            "SEO",
            priority=20,
            fields=lambda: [
                Field(key="site_url", type=FieldType.URL, default="https://example.com"),
                Field(key="noindex", type=FieldType.CHECKBOX),
            ],
        )
    )
    client = TestClient(create_app(registry))
    return client, registry, roles, store


def test_api_health_ok(api):
    client, *_ = api
    r = client.get("/health")
    assert r.status_code == 200
    assert r.json()["status"] == "ok"


def test_nav_items_sorted_by_priority(api):
    client, *_ = api
    items = client.get("/settings/nav").json()["items"]
    assert [i["id"] for i in items] == ["seo", "client-role"]
    assert items[1] == {
        "id": "client-role",
        "title": "Client Role",
        "show": True,
        "priority": 50,
    }


def test_read_module_settings(api):
    client, *_ = api
    data = client.get("/settings/seo").json()
    assert [f["key"] for f in data["fields"]] == ["site_url", "noindex"]
    assert data["fields"][0]["type"] == "url"
    assert data["checkbox_count"] == 1
    assert data["settings"] == {}
    assert data["enabled"] == []
    assert data["token"]


def test_unknown_module_404(api):
    client, *_ = api
    assert client.get("/settings/nope").status_code == 404
    assert client.post("/settings/nope", json={}).status_code == 404


def test_save_client_role_projects_role(api):
    client, _registry, roles, _store = api
    token = client.get("/settings/client-role").json()["token"]
    r = client.post(
        "/settings/client-role",
        json={"token": token, "enabled": ["all", "edit_posts", "manage_options"]},
    )
    assert r.status_code == 200
    assert r.json() == {"saved": True, "enabled": ["edit_posts", "manage_options"]}
    role = roles.get_role("sitepilot_user")
    assert role.display_name == "Acme Client"
    assert dict(role.capabilities) == {"edit_posts": True, "manage_options": True}


def test_save_with_bad_token_forbidden(api):
    client, _registry, roles, store = api
    r = client.post(
        "/settings/client-role",
        json={"token": "1.deadbeef", "enabled": ["edit_posts"]},
    )
    assert r.status_code == 403
    assert store.get("client-role_enabled_settings") is None
    assert roles.get_role("sitepilot_user") is None


def test_whole_form_save(api):
    client, registry, _roles, store = api
    form = {
        "seo": {"site_url": "https://acme.test"},
        "seo-enabled": ["noindex"],
        "seo-token": registry.tokens.issue("seo"),
    }
    r = client.post("/settings", json=form)
    assert r.json() == {"saved": ["seo"]}
    assert registry.get("seo").get_setting("site_url") == "https://acme.test"
    assert registry.get("seo").is_setting_enabled("noindex")


def test_modules_list_and_update(api):
    client, registry, *_ = api
    data = client.get("/modules").json()
    assert data["registered"] == ["client-role", "seo"]
    assert data["loaded"] == ["seo", "client-role"]
    assert client.put("/modules", json={"token": "x", "enabled": []}).status_code == 403
    r = client.put(
        "/modules", json={"token": data["token"], "enabled": ["seo"]}
    )
    assert r.json() == {"enabled": ["seo"]}
    assert [m.id for m in registry.loaded_modules()] == ["seo"]


def test_metrics_endpoint(api):
    client, *_ = api
    client.get("/health")
    counters = client.get("/metrics").json()["counters"]
    assert any(k.startswith("api_request_total") for k in counters)


def test_save_refused_for_disabled_module(api):
    client, registry, _roles, store = api
    registry.set_enabled_modules(["client-role"])
    r = client.post(
        "/settings/seo",
        json={"token": registry.tokens.issue("seo"), "enabled": ["noindex"]},
    )
    assert r.status_code == 404
    assert store.get("seo_enabled_settings") is None
