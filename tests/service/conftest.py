"""Fixtures for service tests.

``FakeIdentityStore`` mirrors the NotFound / duplicate behaviour of the SQL
managers in memory, so pipeline and webhook logic run without Docker.
"""

from __future__ import annotations

from collections.abc import AsyncIterator
from typing import Any

import pytest
from httpx import ASGITransport, AsyncClient

from taskdeck.models import MemberRole, User
from taskdeck.service.app import app
from taskdeck.service.identity.ledger import MemoryEventLedger
from taskdeck.service.identity.pipeline import IdentitySyncPipeline
from taskdeck.service.managers.users import DuplicateUserError, UserNotFoundError
from taskdeck.service.managers.workspaces import DuplicateWorkspaceError, WorkspaceNotFoundError

AUTH_TOKEN = "test-token"


class FakeIdentityStore:
    def __init__(self) -> None:
        self.users: dict[str, User] = {}
        self.workspaces: dict[str, dict[str, Any]] = {}
        self.members: dict[tuple[str, str], MemberRole] = {}
        self.calls: list[str] = []

    async def create_user(self, user: User) -> None:
        self.calls.append("create_user")
        if user.id in self.users:
            raise DuplicateUserError(user.id)
        self.users[user.id] = user

    async def update_user(self, user_id: str, fields: dict[str, Any]) -> None:
        self.calls.append("update_user")
        if user_id not in self.users:
            raise UserNotFoundError(user_id)
        self.users[user_id] = self.users[user_id].model_copy(update=fields)

    async def delete_user(self, user_id: str) -> None:
        self.calls.append("delete_user")
        if user_id not in self.users:
            raise UserNotFoundError(user_id)
        del self.users[user_id]

    async def create_workspace(
        self,
        workspace_id: str,
        *,
        name: str,
        slug: str | None,
        owner_id: str | None,
        image_url: str | None,
    ) -> None:
        self.calls.append("create_workspace")
        if workspace_id in self.workspaces:
            raise DuplicateWorkspaceError(workspace_id)
        if owner_id is not None and owner_id not in self.users:
            raise UserNotFoundError(owner_id)
        self.workspaces[workspace_id] = {"name": name, "slug": slug, "owner_id": owner_id, "image_url": image_url}
        if owner_id is not None:
            self.members[(workspace_id, owner_id)] = MemberRole.ADMIN

    async def update_workspace(self, workspace_id: str, fields: dict[str, Any]) -> None:
        self.calls.append("update_workspace")
        if workspace_id not in self.workspaces:
            raise WorkspaceNotFoundError(workspace_id)
        self.workspaces[workspace_id].update(fields)

    async def delete_workspace(self, workspace_id: str) -> None:
        self.calls.append("delete_workspace")
        if workspace_id not in self.workspaces:
            raise WorkspaceNotFoundError(workspace_id)
        del self.workspaces[workspace_id]

    async def add_member(self, workspace_id: str, user_id: str, role: MemberRole) -> None:
        self.calls.append("add_member")
        if workspace_id not in self.workspaces:
            raise WorkspaceNotFoundError(workspace_id)
        if user_id not in self.users:
            raise UserNotFoundError(user_id)
        self.members[(workspace_id, user_id)] = role


@pytest.fixture
def store() -> FakeIdentityStore:
    return FakeIdentityStore()


@pytest.fixture
def ledger() -> MemoryEventLedger:
    return MemoryEventLedger(max_size=100)


@pytest.fixture
def pipeline(store: FakeIdentityStore, ledger: MemoryEventLedger) -> IdentitySyncPipeline:
    return IdentitySyncPipeline(store, ledger)


@pytest.fixture
async def api(pipeline: IdentitySyncPipeline) -> AsyncIterator[AsyncClient]:
    """HTTP client against the app with the in-memory pipeline and no database.

    The lifespan does not run under ``ASGITransport``, so state is pre-set.
    """
    app.state.auth_token = AUTH_TOKEN
    app.state.db_engine = None
    app.state.db_session_factory = None
    app.state.redis = None
    app.state.identity_pipeline = pipeline

    transport = ASGITransport(app=app)
    async with AsyncClient(
        transport=transport,
        base_url="http://test",
        headers={"Authorization": f"Bearer {AUTH_TOKEN}"},
    ) as ac:
        yield ac
