"""Workspace read endpoints (RPC-style) consumed by the client cache."""

from __future__ import annotations

from fastapi import APIRouter, Query

from taskdeck.models import Workspace, WorkspaceList
from taskdeck.service.deps import Authenticated, DbSession
from taskdeck.service.managers import workspaces as workspace_manager

router = APIRouter(prefix="/workspaces", tags=["workspaces"], dependencies=[Authenticated])


@router.get("/list", response_model=WorkspaceList)
async def list_workspaces(
    db: DbSession,
    member_id: str | None = Query(None, description="Only workspaces this user is a member of."),
    limit: int = Query(100, ge=1, le=500),
    offset: int = Query(0, ge=0),
) -> WorkspaceList:
    """List workspace trees (projects and tasks included), oldest first."""
    rows = await workspace_manager.list_workspace_trees(db, member_id=member_id, limit=limit, offset=offset)
    return WorkspaceList(workspaces=[Workspace.model_validate(row) for row in rows])
