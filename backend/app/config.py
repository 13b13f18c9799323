"""Bate-papo application configuration.

Loads settings from a single YAML file:
  * bate_papo.settings.yaml: server, storage, presence and logging settings

The settings path can be overridden with the ``BATE_PAPO_SETTINGS``
environment variable, and the DuckDB path with ``BATE_PAPO_DB_PATH``.
"""
from __future__ import annotations

import logging
import os
from pathlib import Path
from typing import Any, Dict, List, Optional

import yaml
from pydantic import BaseModel, Field, field_validator

logger = logging.getLogger(__name__)

# ---------------------------------------------------------------------------
# Helpers
# ---------------------------------------------------------------------------

SETTINGS_FILE = Path("bate_papo.settings.yaml")
SETTINGS_ENV  = "BATE_PAPO_SETTINGS"
DB_PATH_ENV   = "BATE_PAPO_DB_PATH"


def _load_yaml(path: Path) -> Dict[str, Any]:
    if not path.exists():
        logger.warning("Config file not found: %s", path)
        return {}
    with path.open(encoding="utf-8") as fh:
        return yaml.safe_load(fh) or {}


# ---------------------------------------------------------------------------
# Settings models
# ---------------------------------------------------------------------------


class ServerSettings(BaseModel):
    host:            str       = "0.0.0.0"
    port:            int       = 5000
    allowed_origins: List[str] = Field(default_factory=lambda: ["*"])


class StorageSettings(BaseModel):
    """Where the participants/messages collections live."""
    db_path: str = "bate_papo.duckdb"


class PresenceSettings(BaseModel):
    """Inactivity eviction timing.

    A participant whose last heartbeat is older than
    ``inactivity_threshold_ms`` is evicted on the next sweep, so it may stay
    listed for up to ``inactivity_threshold_ms + sweep_interval_ms``.
    """
    inactivity_threshold_ms: int = 10_000
    sweep_interval_ms:       int = 15_000
    broadcast_target:        str = "Todos"

    @field_validator("inactivity_threshold_ms", "sweep_interval_ms")
    @classmethod
    def _positive(cls, value: int) -> int:
        if value <= 0:
            raise ValueError("must be a positive number of milliseconds")
        return value


class LoggingSettings(BaseModel):
    level: str = "info"


class AppConfig(BaseModel):
    server:   ServerSettings   = Field(default_factory=ServerSettings)
    storage:  StorageSettings  = Field(default_factory=StorageSettings)
    presence: PresenceSettings = Field(default_factory=PresenceSettings)
    logging:  LoggingSettings  = Field(default_factory=LoggingSettings)


# ---------------------------------------------------------------------------
# Public loader
# ---------------------------------------------------------------------------


def _resolve_db_path(db_path: str, settings_dir: Path) -> str:
    if db_path == ":memory:":
        return db_path
    path = Path(db_path)
    if path.is_absolute():
        return str(path)
    return str(settings_dir / path)


def load_config(settings_path: Optional[Path] = None) -> AppConfig:
    """Load settings from YAML and apply environment overrides."""
    if settings_path is None:
        settings_path = Path(os.environ.get(SETTINGS_ENV, SETTINGS_FILE))
    settings_path = Path(settings_path)

    data = _load_yaml(settings_path)
    config = AppConfig(**data)

    env_db_path = os.environ.get(DB_PATH_ENV)
    if env_db_path:
        config.storage.db_path = env_db_path
    config.storage.db_path = _resolve_db_path(
        config.storage.db_path, settings_path.resolve().parent
    )

    logger.info(
        "Settings loaded (server=%s:%s, db=%s, threshold=%sms, sweep=%sms)",
        config.server.host,
        config.server.port,
        config.storage.db_path,
        config.presence.inactivity_threshold_ms,
        config.presence.sweep_interval_ms,
    )
    return config


_config: Optional[AppConfig] = None


def get_config() -> AppConfig:
    """Return the process-wide config, loading it on first use."""
    global _config
    if _config is None:
        _config = load_config()
    return _config


def reset_config() -> None:
    """Forget the cached config (used by tests)."""
    global _config
    _config = None
