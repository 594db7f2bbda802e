from __future__ import annotations

import pytest

from apps.backend.config.settings import DEFAULT_BASE_URL, DEFAULT_REVISION, load_settings
from apps.backend.services.events.errors import ConfigError


def test_defaults(monkeypatch: pytest.MonkeyPatch) -> None:
    monkeypatch.setenv("KLAVIYO_API_KEY", "pk_test")
    settings = load_settings(use_dotenv=False)

    assert settings.require_api_key() == "pk_test"
    assert settings.klaviyo_base_url == DEFAULT_BASE_URL
    assert settings.klaviyo_revision == DEFAULT_REVISION
    assert settings.timeout_seconds == 20.0
    assert settings.dry_run is False


def test_overrides(monkeypatch: pytest.MonkeyPatch) -> None:
    monkeypatch.setenv("KLAVIYO_API_KEY", "  pk_test  ")
    monkeypatch.setenv("KLAVIYO_BASE_URL", "https://example.test/api/")
    monkeypatch.setenv("KLAVIYO_API_REVISION", "2025-01-15")
    monkeypatch.setenv("KLAVIYO_TIMEOUT_SECONDS", "3.5")
    monkeypatch.setenv("KLAVIYO_DRY_RUN", "TRUE")
    monkeypatch.setenv("LOG_LEVEL", "debug")
    settings = load_settings(use_dotenv=False)

    assert settings.require_api_key() == "pk_test"
    assert settings.klaviyo_base_url == "https://example.test/api"
    assert settings.klaviyo_revision == "2025-01-15"
    assert settings.timeout_seconds == 3.5
    assert settings.dry_run is True
    assert settings.log_level == "DEBUG"


@pytest.mark.parametrize("value", [None, "", "   "])
def test_missing_api_key_is_fatal(monkeypatch: pytest.MonkeyPatch, value) -> None:
    if value is not None:
        monkeypatch.setenv("KLAVIYO_API_KEY", value)
    settings = load_settings(use_dotenv=False)

    with pytest.raises(ConfigError) as exc:
        settings.require_api_key()
    assert "KLAVIYO_API_KEY" in exc.value.message


def test_bad_timeout_is_a_config_error(monkeypatch: pytest.MonkeyPatch) -> None:
    monkeypatch.setenv("KLAVIYO_TIMEOUT_SECONDS", "soon")
    with pytest.raises(ConfigError):
        load_settings(use_dotenv=False)
