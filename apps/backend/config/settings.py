# apps/backend/config/settings.py

from __future__ import annotations

import os
from dataclasses import dataclass
from typing import Optional

from dotenv import load_dotenv

from apps.backend.services.events.errors import ConfigError

DEFAULT_BASE_URL = "https://a.klaviyo.com/api"
DEFAULT_REVISION = "2024-10-15"
DEFAULT_TIMEOUT_SECONDS = 20.0


def is_enabled(flag: str, default: bool = False) -> bool:
    return os.getenv(flag, str(default)).lower() == "true"


def _float_env(name: str, default: float) -> float:
    raw = os.getenv(name)
    if raw is None or not raw.strip():
        return default
    try:
        return float(raw)
    except ValueError:
        raise ConfigError(f"{name} must be a number, got {raw!r}")


@dataclass(frozen=True)
class Settings:
    """
    Runtime configuration, read once from the environment (and .env if present).

    KLAVIYO_API_KEY needs write access to events. Everything else has a default.
    """
    klaviyo_api_key: Optional[str]
    klaviyo_base_url: str = DEFAULT_BASE_URL
    klaviyo_revision: str = DEFAULT_REVISION
    timeout_seconds: float = DEFAULT_TIMEOUT_SECONDS
    log_level: str = "INFO"
    app_env: str = "development"
    dry_run: bool = False

    def require_api_key(self) -> str:
        key = (self.klaviyo_api_key or "").strip()
        if not key:
            raise ConfigError("Please set the KLAVIYO_API_KEY environment variable.")
        return key


def load_settings(*, use_dotenv: bool = True) -> Settings:
    if use_dotenv:
        load_dotenv()

    return Settings(
        klaviyo_api_key=os.getenv("KLAVIYO_API_KEY"),
        klaviyo_base_url=(os.getenv("KLAVIYO_BASE_URL") or DEFAULT_BASE_URL).rstrip("/"),
        klaviyo_revision=os.getenv("KLAVIYO_API_REVISION") or DEFAULT_REVISION,
        timeout_seconds=_float_env("KLAVIYO_TIMEOUT_SECONDS", DEFAULT_TIMEOUT_SECONDS),
        log_level=(os.getenv("LOG_LEVEL") or "INFO").upper(),
        app_env=os.getenv("APP_ENV", "development"),
        dry_run=is_enabled("KLAVIYO_DRY_RUN"),
    )
