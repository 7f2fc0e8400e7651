"""Configuration loaded from TASKDECK_* environment variables."""

from __future__ import annotations

import secrets
from functools import lru_cache
from pathlib import Path

from pydantic_settings import BaseSettings, SettingsConfigDict


class TaskdeckSettings(BaseSettings):
    """Taskdeck service settings.

    All fields are read from environment variables with the ``TASKDECK_``
    prefix.  For example, ``TASKDECK_LOG_LEVEL=DEBUG`` maps to ``log_level``.
    """

    model_config = SettingsConfigDict(
        env_prefix="TASKDECK_",
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=False,
        extra="ignore",
    )

    # -- Logging ---------------------------------------------------------------
    log_level: str = "INFO"
    log_json: bool = False
    """Emit logs as JSON lines instead of the coloured console format."""

    # -- Infrastructure --------------------------------------------------------
    database_url: str | None = None
    """PostgreSQL connection string (psycopg3).  Required for full operation."""

    redis_url: str | None = None
    """Redis connection string.  When set, webhook de-duplication is shared via Redis."""

    # -- Identity sync ---------------------------------------------------------
    event_ledger_ttl: int = 7 * 24 * 3600
    """Seconds a processed event id is remembered for de-duplication (Redis ledger)."""

    event_ledger_size: int = 10_000
    """Number of processed event ids kept by the in-memory ledger."""

    # -- Auth ------------------------------------------------------------------
    auth_token: str | None = None
    """Bearer token for API and webhook access.  Auto-generated at startup if empty."""

    # -- Server ----------------------------------------------------------------
    host: str = "0.0.0.0"  # noqa: S104
    port: int = 8000

    def resolve_auth_token(self) -> str:
        """Return the configured token or generate a random one."""
        if self.auth_token:
            return self.auth_token
        return secrets.token_urlsafe(32)


class ClientSettings(BaseSettings):
    """Settings for the command-line workspace client (``TASKDECK_CLIENT_*``)."""

    model_config = SettingsConfigDict(
        env_prefix="TASKDECK_CLIENT_",
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=False,
        extra="ignore",
    )

    api_url: str = "http://localhost:8000"
    api_token: str | None = None
    state_file: Path = Path("~/.taskdeck/selection.json").expanduser()
    """Where the active workspace selection survives restarts."""

    timeout: float = 10.0


@lru_cache(maxsize=1)
def get_settings() -> TaskdeckSettings:
    """Return a cached settings instance.

    Reads from environment variables and ``.env`` on first call.  Call
    ``get_settings.cache_clear()`` in tests after overriding env vars.
    """
    return TaskdeckSettings()
