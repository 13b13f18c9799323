"""Tests for config loading and path resolution behavior."""

from pathlib import Path

import pytest
from pydantic import ValidationError

from app.config import (
    DB_PATH_ENV,
    SETTINGS_ENV,
    AppConfig,
    PresenceSettings,
    get_config,
    load_config,
    reset_config,
)


def test_defaults_when_settings_file_missing(tmp_path):
    """A missing settings file yields the default timings."""
    cfg = load_config(settings_path=tmp_path / "missing.yaml")
    assert cfg.server.port == 5000
    assert cfg.presence.inactivity_threshold_ms == 10_000
    assert cfg.presence.sweep_interval_ms == 15_000
    assert cfg.presence.broadcast_target == "Todos"


def test_db_path_relative_to_settings_dir(tmp_path):
    """Relative db_path resolves from the settings file directory."""
    settings_file = tmp_path / "bate_papo.settings.yaml"
    settings_file.write_text(
        "storage:\n"
        "  db_path: data/chat.duckdb\n",
        encoding="utf-8",
    )

    cfg = load_config(settings_path=settings_file)
    assert Path(cfg.storage.db_path) == tmp_path / "data" / "chat.duckdb"


def test_db_path_absolute_remains_unchanged(tmp_path):
    """Absolute db_path is preserved exactly as configured."""
    absolute_path = tmp_path / "absolute" / "chat.duckdb"
    settings_file = tmp_path / "bate_papo.settings.yaml"
    settings_file.write_text(
        "storage:\n"
        f"  db_path: {absolute_path}\n",
        encoding="utf-8",
    )

    cfg = load_config(settings_path=settings_file)
    assert Path(cfg.storage.db_path) == absolute_path


def test_memory_db_path_is_kept(tmp_path):
    settings_file = tmp_path / "bate_papo.settings.yaml"
    settings_file.write_text("storage:\n  db_path: ':memory:'\n", encoding="utf-8")

    cfg = load_config(settings_path=settings_file)
    assert cfg.storage.db_path == ":memory:"


def test_env_var_overrides_db_path(tmp_path, monkeypatch):
    monkeypatch.setenv(DB_PATH_ENV, ":memory:")
    settings_file = tmp_path / "bate_papo.settings.yaml"
    settings_file.write_text("storage:\n  db_path: other.duckdb\n", encoding="utf-8")

    cfg = load_config(settings_path=settings_file)
    assert cfg.storage.db_path == ":memory:"


def test_presence_timings_from_yaml(tmp_path):
    settings_file = tmp_path / "bate_papo.settings.yaml"
    settings_file.write_text(
        "presence:\n"
        "  inactivity_threshold_ms: 5000\n"
        "  sweep_interval_ms: 2000\n",
        encoding="utf-8",
    )

    cfg = load_config(settings_path=settings_file)
    assert cfg.presence.inactivity_threshold_ms == 5000
    assert cfg.presence.sweep_interval_ms == 2000


@pytest.mark.parametrize("field", ["inactivity_threshold_ms", "sweep_interval_ms"])
def test_non_positive_timings_rejected(field):
    with pytest.raises(ValidationError):
        PresenceSettings(**{field: 0})


def test_app_config_composition():
    cfg = AppConfig()
    assert cfg.server.allowed_origins == ["*"]
    assert cfg.logging.level == "info"


def test_get_config_is_cached_and_resettable(tmp_path, monkeypatch):
    settings_file = tmp_path / "bate_papo.settings.yaml"
    settings_file.write_text("server:\n  port: 6000\n", encoding="utf-8")
    monkeypatch.setenv(SETTINGS_ENV, str(settings_file))

    reset_config()
    try:
        first = get_config()
        assert first.server.port == 6000
        assert get_config() is first

        reset_config()
        assert get_config() is not first
    finally:
        reset_config()
