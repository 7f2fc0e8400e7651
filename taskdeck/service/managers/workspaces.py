"""Workspace operations.

Reads return full trees (workspace -> projects -> tasks) as the client cache
consumes them.  Writes come from the identity provider's organization events
and keep the membership table in step.
"""

from __future__ import annotations

from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy.orm import selectinload

from taskdeck.models import MemberRole
from taskdeck.service.db.tables import Project, User, Workspace, WorkspaceMember
from taskdeck.service.managers.users import UserNotFoundError


class DuplicateWorkspaceError(ValueError):
    """Raised when a workspace with the given ID already exists."""


class WorkspaceNotFoundError(LookupError):
    """Raised when a workspace is not found."""


class DuplicateMemberError(ValueError):
    """Raised when the user is already a member of the workspace."""


async def list_workspace_trees(
    db: AsyncSession,
    *,
    member_id: str | None = None,
    limit: int = 100,
    offset: int = 0,
) -> list[Workspace]:
    """List workspaces with projects and tasks loaded, oldest first.

    With *member_id*, only workspaces that user belongs to are returned.
    """
    stmt = (
        select(Workspace)
        .options(selectinload(Workspace.projects).selectinload(Project.tasks))
        .order_by(Workspace.created_at, Workspace.id)
    )
    if member_id is not None:
        stmt = stmt.join(WorkspaceMember, WorkspaceMember.workspace_id == Workspace.id).where(
            WorkspaceMember.user_id == member_id
        )
    stmt = stmt.limit(limit).offset(offset)
    result = await db.execute(stmt)
    return list(result.scalars().all())


async def get_workspace(db: AsyncSession, workspace_id: str) -> Workspace:
    """Get a workspace by ID.  Raises ``WorkspaceNotFoundError`` if missing."""
    workspace = await db.get(Workspace, workspace_id)
    if workspace is None:
        raise WorkspaceNotFoundError(workspace_id)
    return workspace


async def create_workspace(
    db: AsyncSession,
    workspace_id: str,
    *,
    name: str = "",
    slug: str | None = None,
    owner_id: str | None = None,
    image_url: str | None = None,
) -> Workspace:
    """Create a workspace; the owner (if any) becomes its first ADMIN member.

    Raises ``DuplicateWorkspaceError`` if the ID exists and
    ``UserNotFoundError`` if the owner has not been synced yet.
    """
    existing = await db.get(Workspace, workspace_id)
    if existing is not None:
        raise DuplicateWorkspaceError(workspace_id)
    if owner_id is not None and await db.get(User, owner_id) is None:
        raise UserNotFoundError(owner_id)

    workspace = Workspace(id=workspace_id, name=name, slug=slug, owner_id=owner_id, image_url=image_url)
    db.add(workspace)
    if owner_id is not None:
        db.add(WorkspaceMember(workspace_id=workspace_id, user_id=owner_id, role=MemberRole.ADMIN))
    await db.commit()
    await db.refresh(workspace)
    return workspace


async def update_workspace(db: AsyncSession, workspace_id: str, changes: dict) -> Workspace:
    """Apply *changes*.  Raises ``WorkspaceNotFoundError`` if missing."""
    workspace = await db.get(Workspace, workspace_id)
    if workspace is None:
        raise WorkspaceNotFoundError(workspace_id)
    if not changes:
        return workspace

    for key, value in changes.items():
        setattr(workspace, key, value)

    await db.commit()
    await db.refresh(workspace)
    return workspace


async def delete_workspace(db: AsyncSession, workspace_id: str) -> None:
    """Delete a workspace and everything under it.  Raises ``WorkspaceNotFoundError`` if missing."""
    workspace = await db.get(Workspace, workspace_id)
    if workspace is None:
        raise WorkspaceNotFoundError(workspace_id)
    await db.delete(workspace)
    await db.commit()


async def add_member(
    db: AsyncSession,
    workspace_id: str,
    user_id: str,
    role: MemberRole = MemberRole.MEMBER,
) -> WorkspaceMember:
    """Add *user_id* to a workspace.

    Raises ``WorkspaceNotFoundError`` / ``UserNotFoundError`` when either side
    is missing and ``DuplicateMemberError`` if the membership exists.
    """
    if await db.get(Workspace, workspace_id) is None:
        raise WorkspaceNotFoundError(workspace_id)
    if await db.get(User, user_id) is None:
        raise UserNotFoundError(user_id)
    if await db.get(WorkspaceMember, (workspace_id, user_id)) is not None:
        raise DuplicateMemberError(f"{user_id} in {workspace_id}")

    member = WorkspaceMember(workspace_id=workspace_id, user_id=user_id, role=role)
    db.add(member)
    await db.commit()
    return member
