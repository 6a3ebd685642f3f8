import pytest

from core.filters import ENABLED_SETTINGS, SETTINGS, enabled_setting_point, setting_point
from core.modules import Field, FieldType, ModuleDefinition, is_empty


def _module(registry):
    return registry.register(
        ModuleDefinition(
            "m",
            "M",
            fields=lambda: [
                Field(key="title", default="Schema"),
                Field(key="color"),
                Field(key="a", type=FieldType.CHECKBOX),
            ],
        )
    )


def test_get_settings_defaults_to_empty(registry):
    module = _module(registry)
    assert module.get_settings() == {}


def test_get_settings_ignores_non_mapping(registry, store):
    store.set("m_settings", ["garbage"])
    assert _module(registry).get_settings() == {}


def test_default_chain(registry, store):
    module = _module(registry)
    # nothing stored, no caller default → schema default
    assert module.get_setting("title") == "Schema"
    # caller default wins over schema default
    assert module.get_setting("title", "Caller") == "Caller"
    # no schema default → empty string
    assert module.get_setting("color") == ""
    # unknown key falls back the same way
    assert module.get_setting("missing") == ""
    assert module.get_setting("missing", 5) == 5
    store.set("m_settings", {"title": "Stored"})
    assert module.get_setting("title", "Caller") == "Stored"


@pytest.mark.parametrize("stored", ["", "0", 0, False, None, [], {}])
def test_empty_stored_values_fall_through(registry, store, stored):
    module = _module(registry)
    store.set("m_settings", {"title": stored})
    assert module.get_setting("title") == "Schema"


@pytest.mark.parametrize(
    "value,expected",
    [("", True), ("0", True), (0, True), (0.0, True), (False, True),
     (None, True), ((), True), ("00", False), (True, False), (1, False),
     (" ", False)],
)
def test_is_empty(value, expected):
    assert is_empty(value) is expected


def test_setting_filters(registry, store):
    module = _module(registry)
    store.set("m_settings", {"title": "Stored"})
    registry.filters.add(setting_point("title"), str.upper, scope="m")
    registry.filters.add(
        SETTINGS, lambda s: {**s, "injected": "yes"}, scope="m"
    )
    assert module.get_setting("title") == "STORED"
    assert module.get_settings()["injected"] == "yes"


def test_enabled_settings_strip_all_marker(registry, store):
    module = _module(registry)
    store.set("m_enabled_settings", ["all", "a", "all", "b", "a"])
    assert module.get_enabled_settings() == ["a", "b"]
    assert "all" not in module.get_enabled_settings()


def test_enabled_settings_filter_cannot_leak_marker(registry, store):
    module = _module(registry)
    store.set("m_enabled_settings", ["a"])
    registry.filters.add(ENABLED_SETTINGS, lambda e: e + ["all"], scope="m")
    assert module.get_enabled_settings() == ["a"]


def test_is_setting_enabled_and_override(registry, store):
    module = _module(registry)
    store.set("m_enabled_settings", ["a"])
    assert module.is_setting_enabled("a") is True
    assert module.is_setting_enabled("b") is False
    registry.filters.add(
        enabled_setting_point("a"), lambda _v: False, scope="m"
    )
    assert module.is_setting_enabled("a") is False
