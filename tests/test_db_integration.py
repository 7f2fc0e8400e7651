"""Integration smoke tests for database and Redis fixtures.

Verifies the testcontainers + Alembic migration + savepoint rollback
pipeline works end-to-end.
"""

from __future__ import annotations

import pytest
from sqlalchemy import select, text
from sqlalchemy.ext.asyncio import AsyncSession

from taskdeck.service.db.tables import User

pytestmark = pytest.mark.integration


async def test_alembic_migrations_applied(db_session: AsyncSession):
    """All tables from the initial migration should exist."""
    result = await db_session.execute(
        text("SELECT table_name FROM information_schema.tables WHERE table_schema = 'public' ORDER BY table_name")
    )
    tables = sorted(row[0] for row in result)
    for name in ("users", "workspaces", "workspace_members", "projects", "tasks"):
        assert name in tables


async def test_savepoint_rollback_isolation(db_session: AsyncSession):
    """Rows inserted in a test should not persist to the next test."""
    db_session.add(User(id="smoke-user", email="smoke@example.com"))
    await db_session.commit()  # commits savepoint, not the real txn

    result = await db_session.execute(select(User).where(User.id == "smoke-user"))
    assert result.scalar_one().email == "smoke@example.com"


async def test_savepoint_rollback_clean_state(db_session: AsyncSession):
    """Previous test's data should have been rolled back."""
    result = await db_session.execute(select(User).where(User.id == "smoke-user"))
    assert result.scalar_one_or_none() is None, "Savepoint rollback did not clean up previous test's data"


async def test_redis_connection(redis_client):
    """Redis client should be functional."""
    await redis_client.set("test_key", "test_value")
    assert await redis_client.get("test_key") == b"test_value"
