"""Pydantic settings loaded from YAML configuration, with environment overrides."""

from __future__ import annotations

import os
from pathlib import Path
from typing import Any

import yaml
from dotenv import load_dotenv
from pydantic import BaseModel, ConfigDict, SecretStr

_settings: Settings | None = None

_DEFAULT_CONFIG_PATH = Path("config/settings.yaml")

# Environment variable → (section, field). Later entries win for the same field.
_ENV_OVERRIDES: list[tuple[str, tuple[str, ...]]] = [
    ("ZBX_API_URL", ("zabbix", "api_url")),
    ("ZBX_USER", ("zabbix", "user")),
    ("ZBX_PASSWORD", ("zabbix", "password")),
    ("ZBX_USER_ALIAS", ("zabbix", "user_alias")),
    ("ZBX_CHAT_ID", ("zabbix", "chat_id")),
    ("ZBX_ACTION_NAME", ("zabbix", "action_name")),
    ("ZBX_MEDIA_TYPE_NAME", ("zabbix", "media_type_name")),
    ("ZBX_BOT_TOKEN", ("telegram", "bot_token")),
    ("TELEGRAM_BOT_TOKEN", ("telegram", "bot_token")),
    ("ALLOWED_USERS_PATH", ("telegram", "allowed_users_path")),
    ("TELEGRAM_POLL_TIMEOUT_SECS", ("telegram", "poll_timeout_secs")),
    ("RUN_MODE", ("run_mode",)),
    ("LOG_LEVEL", ("logging", "level")),
    ("LOG_FORMAT", ("logging", "format")),
]


class ZabbixConfig(BaseModel):
    """Zabbix JSON-RPC API and reconciliation targets."""

    model_config = ConfigDict(frozen=True)

    api_url: str = ""
    user: str = "Admin"
    password: SecretStr = SecretStr("")
    user_alias: str = "Admin"
    chat_id: str = ""
    action_name: str = "Send Telegram alerts"
    media_type_name: str = "Telegram"


class TelegramConfig(BaseModel):
    """Telegram bot credentials and access control."""

    model_config = ConfigDict(frozen=True)

    bot_token: SecretStr = SecretStr("")
    allowed_users_path: str = "/bot/allowed_users.txt"
    api_base: str = "https://api.telegram.org"
    poll_timeout_secs: int = 30


class LoggingConfig(BaseModel):
    """Logging configuration."""

    model_config = ConfigDict(frozen=True)

    level: str = "INFO"
    format: str = "json"


class Settings(BaseModel):
    """Root settings container."""

    model_config = ConfigDict(frozen=True)

    zabbix: ZabbixConfig = ZabbixConfig()
    telegram: TelegramConfig = TelegramConfig()
    logging: LoggingConfig = LoggingConfig()
    run_mode: str = "bot"


def _apply_env_overrides(data: dict[str, Any], environ: dict[str, str]) -> dict[str, Any]:
    """Overlay non-empty environment variables onto the raw YAML mapping."""
    for var, path in _ENV_OVERRIDES:
        value = environ.get(var)
        if not value:
            continue
        target = data
        for key in path[:-1]:
            section = target.get(key)
            if not isinstance(section, dict):
                section = {}
                target[key] = section
            target = section
        target[path[-1]] = value
    return data


def load_settings(
    path: str | Path | None = None,
    environ: dict[str, str] | None = None,
) -> Settings:
    """Load settings from a YAML file, apply env overrides and cache globally.

    Args:
        path: Path to YAML config. Defaults to config/settings.yaml.
        environ: Environment mapping. Defaults to ``os.environ`` after
            loading a ``.env`` file from the working directory, if any.

    Returns:
        Parsed Settings instance.
    """
    global _settings  # noqa: PLW0603

    config_path = Path(path) if path else _DEFAULT_CONFIG_PATH

    data: dict[str, Any] = {}
    if config_path.exists():
        with open(config_path) as f:
            raw = yaml.safe_load(f)
            if isinstance(raw, dict):
                data = raw

    if environ is None:
        load_dotenv()
        environ = dict(os.environ)

    _settings = Settings(**_apply_env_overrides(data, environ))
    return _settings


def get_settings() -> Settings:
    """Return the cached settings, loading defaults if not yet loaded."""
    global _settings  # noqa: PLW0603
    if _settings is None:
        _settings = load_settings()
    return _settings


def reset_settings() -> None:
    """Reset the cached settings (useful for testing)."""
    global _settings  # noqa: PLW0603
    _settings = None
