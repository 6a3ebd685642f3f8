import logging

import core.config.loader as loader


def test_migration_adds_schema_version_and_modules(tmp_path, monkeypatch, caplog):
    legacy_yaml = (
        "client_role: {role: legacy_user}\n"
        "branding: {name: Legacy}\n"
    )
    (tmp_path / "base.yaml").write_text(legacy_yaml, encoding="utf-8")
    monkeypatch.setenv("SP_CONFIG_DIR", str(tmp_path))
    loader.clear_config_cache()
    with caplog.at_level(logging.WARNING, logger="core.config.loader"):
        cfg = loader.get_config()
    assert cfg.schema_version == 1
    assert cfg.modules.enabled == ["client-role"]
    assert "schema_version missing" in caplog.text


def test_migration_without_legacy_sections(tmp_path, monkeypatch):
    (tmp_path / "base.yaml").write_text("branding: {name: X}\n", encoding="utf-8")
    monkeypatch.setenv("SP_CONFIG_DIR", str(tmp_path))
    loader.clear_config_cache()
    cfg = loader.get_config()
    assert cfg.modules.enabled == []


def test_empty_config_dir_uses_defaults(tmp_path, monkeypatch):
    monkeypatch.setenv("SP_CONFIG_DIR", str(tmp_path))
    loader.clear_config_cache()
    cfg = loader.get_config()
    assert cfg.storage.backend == "memory"
    assert cfg.branding.name == "Sitepilot"
