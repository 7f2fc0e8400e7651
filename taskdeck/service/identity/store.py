"""Write surface the identity pipeline applies events to.

``SqlIdentityStore`` opens one session per call and delegates to the
managers, so NotFound conditions surface as the managers' ``LookupError``
subclasses.
"""

from __future__ import annotations

from typing import Any, Protocol, runtime_checkable

from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker

from taskdeck.models import MemberRole, User
from taskdeck.service.managers import users, workspaces


@runtime_checkable
class IdentityStore(Protocol):
    async def create_user(self, user: User) -> None: ...

    async def update_user(self, user_id: str, fields: dict[str, Any]) -> None:
        """Raises ``UserNotFoundError`` if the user does not exist."""
        ...

    async def delete_user(self, user_id: str) -> None:
        """Raises ``UserNotFoundError`` if the user does not exist."""
        ...

    async def create_workspace(
        self,
        workspace_id: str,
        *,
        name: str,
        slug: str | None,
        owner_id: str | None,
        image_url: str | None,
    ) -> None: ...

    async def update_workspace(self, workspace_id: str, fields: dict[str, Any]) -> None:
        """Raises ``WorkspaceNotFoundError`` if the workspace does not exist."""
        ...

    async def delete_workspace(self, workspace_id: str) -> None:
        """Raises ``WorkspaceNotFoundError`` if the workspace does not exist."""
        ...

    async def add_member(self, workspace_id: str, user_id: str, role: MemberRole) -> None: ...


class SqlIdentityStore:
    """PostgreSQL-backed identity store."""

    def __init__(self, session_factory: async_sessionmaker[AsyncSession]) -> None:
        self._session_factory = session_factory

    async def create_user(self, user: User) -> None:
        async with self._session_factory() as db:
            await users.create_user(
                db,
                user.id,
                email=user.email,
                display_name=user.display_name,
                avatar_url=user.avatar_url,
            )

    async def update_user(self, user_id: str, fields: dict[str, Any]) -> None:
        async with self._session_factory() as db:
            await users.update_user(db, user_id, fields)

    async def delete_user(self, user_id: str) -> None:
        async with self._session_factory() as db:
            await users.delete_user(db, user_id)

    async def create_workspace(
        self,
        workspace_id: str,
        *,
        name: str,
        slug: str | None,
        owner_id: str | None,
        image_url: str | None,
    ) -> None:
        async with self._session_factory() as db:
            await workspaces.create_workspace(
                db, workspace_id, name=name, slug=slug, owner_id=owner_id, image_url=image_url
            )

    async def update_workspace(self, workspace_id: str, fields: dict[str, Any]) -> None:
        async with self._session_factory() as db:
            await workspaces.update_workspace(db, workspace_id, fields)

    async def delete_workspace(self, workspace_id: str) -> None:
        async with self._session_factory() as db:
            await workspaces.delete_workspace(db, workspace_id)

    async def add_member(self, workspace_id: str, user_id: str, role: MemberRole) -> None:
        async with self._session_factory() as db:
            await workspaces.add_member(db, workspace_id, user_id, role)
