"""Async SQLAlchemy engine and session factory (psycopg3, ``postgresql+psycopg://``)."""

from __future__ import annotations

from sqlalchemy.ext.asyncio import AsyncEngine, AsyncSession, async_sessionmaker, create_async_engine


def create_engine(database_url: str, **kwargs: object) -> AsyncEngine:
    """Create an async engine.

    Webhook bursts are short, so the pool stays small: 5 connections plus 10
    overflow, pre-ping on checkout, recycled hourly.  Override via *kwargs*.
    """
    options = {
        "echo": False,
        "pool_size": 5,
        "max_overflow": 10,
        "pool_pre_ping": True,
        "pool_recycle": 3600,
    }
    options.update(kwargs)  # type: ignore[arg-type]
    return create_async_engine(_async_url(database_url), **options)


def create_session_factory(engine: AsyncEngine) -> async_sessionmaker[AsyncSession]:
    """Session factory with ``expire_on_commit=False`` (no implicit IO after commit)."""
    return async_sessionmaker(engine, expire_on_commit=False)


def _async_url(url: str) -> str:
    """Accept plain ``postgresql://`` URLs and pin them to psycopg3."""
    if url.startswith("postgresql://"):
        return "postgresql+psycopg://" + url.removeprefix("postgresql://")
    return url
