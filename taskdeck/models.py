"""Workspace tree models shared by the client cache and the service.

A workspace contains projects, a project contains tasks.  All models are
frozen: changing anything means building a new object at every nesting level
touched (``model_copy(update=...)``), which is what the client cache relies on
to keep its views consistent.

The same models are the wire format of ``GET /api/workspaces/list``.
"""

from __future__ import annotations

from datetime import datetime
from enum import StrEnum

from pydantic import BaseModel, ConfigDict, Field


class TaskStatus(StrEnum):
    TODO = "todo"
    IN_PROGRESS = "in_progress"
    DONE = "done"


class TaskPriority(StrEnum):
    LOW = "low"
    MEDIUM = "medium"
    HIGH = "high"


class MemberRole(StrEnum):
    ADMIN = "ADMIN"
    MEMBER = "MEMBER"


class User(BaseModel):
    """Local mirror of an identity-provider user."""

    model_config = ConfigDict(frozen=True, from_attributes=True)

    id: str
    email: str | None = None
    display_name: str = ""
    avatar_url: str | None = None


class Task(BaseModel):
    """Leaf unit of work.  Extra server-side fields are kept as-is."""

    model_config = ConfigDict(frozen=True, extra="allow", from_attributes=True)

    id: str
    project_id: str
    title: str = ""
    description: str | None = None
    status: TaskStatus = TaskStatus.TODO
    priority: TaskPriority = TaskPriority.MEDIUM
    assignee_id: str | None = None
    due_date: datetime | None = None


class Project(BaseModel):
    model_config = ConfigDict(frozen=True, from_attributes=True)

    id: str
    workspace_id: str | None = Field(default=None, description="Implied by containment; stamped on insert.")
    name: str = ""
    description: str | None = None
    tasks: tuple[Task, ...] = ()


class Workspace(BaseModel):
    model_config = ConfigDict(frozen=True, from_attributes=True)

    id: str
    name: str = ""
    owner_id: str | None = None
    slug: str | None = None
    image_url: str | None = None
    projects: tuple[Project, ...] = ()


class WorkspaceList(BaseModel):
    """Envelope returned by the workspace list endpoint."""

    workspaces: list[Workspace] = Field(default_factory=list)
