"""Unit tests for environment-driven settings."""

from __future__ import annotations

from pathlib import Path

import pytest

from taskdeck.service.settings import ClientSettings, TaskdeckSettings, get_settings


@pytest.fixture(autouse=True)
def _clean_env(monkeypatch: pytest.MonkeyPatch, tmp_path: Path):
    # Keep a developer's .env out of the way.
    monkeypatch.chdir(tmp_path)
    for key in ("TASKDECK_AUTH_TOKEN", "TASKDECK_DATABASE_URL", "TASKDECK_LOG_LEVEL", "TASKDECK_CLIENT_API_URL"):
        monkeypatch.delenv(key, raising=False)
    get_settings.cache_clear()
    yield
    get_settings.cache_clear()


def test_defaults() -> None:
    settings = TaskdeckSettings()

    assert settings.log_level == "INFO"
    assert settings.database_url is None
    assert settings.redis_url is None
    assert settings.event_ledger_ttl == 7 * 24 * 3600


def test_env_prefix(monkeypatch: pytest.MonkeyPatch) -> None:
    monkeypatch.setenv("TASKDECK_LOG_LEVEL", "DEBUG")
    monkeypatch.setenv("TASKDECK_DATABASE_URL", "postgresql://u:p@db/taskdeck")

    settings = TaskdeckSettings()

    assert settings.log_level == "DEBUG"
    assert settings.database_url == "postgresql://u:p@db/taskdeck"


def test_get_settings_is_cached(monkeypatch: pytest.MonkeyPatch) -> None:
    first = get_settings()
    monkeypatch.setenv("TASKDECK_LOG_LEVEL", "WARNING")

    assert get_settings() is first

    get_settings.cache_clear()
    assert get_settings().log_level == "WARNING"


def test_configured_auth_token_is_used(monkeypatch: pytest.MonkeyPatch) -> None:
    monkeypatch.setenv("TASKDECK_AUTH_TOKEN", "s3cret")
    assert TaskdeckSettings().resolve_auth_token() == "s3cret"


def test_missing_auth_token_is_generated() -> None:
    settings = TaskdeckSettings()

    token = settings.resolve_auth_token()

    assert len(token) >= 32
    assert token != settings.resolve_auth_token()


def test_dotenv_file_is_read(tmp_path: Path) -> None:
    (tmp_path / ".env").write_text("TASKDECK_PORT=9100\n", encoding="utf-8")
    assert TaskdeckSettings().port == 9100


def test_client_settings_prefix(monkeypatch: pytest.MonkeyPatch) -> None:
    monkeypatch.setenv("TASKDECK_CLIENT_API_URL", "http://deck.internal:8000")
    monkeypatch.setenv("TASKDECK_LOG_LEVEL", "DEBUG")

    client = ClientSettings()

    assert client.api_url == "http://deck.internal:8000"
    assert client.api_token is None
    assert not hasattr(client, "log_level")
