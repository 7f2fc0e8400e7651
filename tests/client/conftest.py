"""Fixtures for the client cache tests: a scriptable remote and a sample tree."""

from __future__ import annotations

import asyncio
from collections.abc import Awaitable, Callable

import pytest

from taskdeck.client.container import WorkspaceStateContainer
from taskdeck.client.remote import RemoteDataError
from taskdeck.client.selection import MemorySelectionStore
from taskdeck.models import Project, Workspace


class FakeRemote:
    """RemoteDataSource double.

    Returns ``workspaces`` (or raises ``error``).  When ``gate`` is set, each
    fetch waits on it, which keeps a hydrate pending until the test releases it.
    """

    def __init__(self, workspaces: list[Workspace]) -> None:
        self.workspaces = workspaces
        self.error: str | None = None
        self.gate: asyncio.Event | None = None
        self.tokens: list[str] = []

    async def fetch_workspaces(self, bearer_token: str) -> list[Workspace]:
        self.tokens.append(bearer_token)
        if self.gate is not None:
            await self.gate.wait()
        if self.error is not None:
            raise RemoteDataError(self.error, status_code=401)
        return list(self.workspaces)


def _workspace(workspace_id: str, *project_ids: str) -> Workspace:
    projects = tuple(Project(id=pid, workspace_id=workspace_id, name=pid.upper()) for pid in project_ids)
    return Workspace(id=workspace_id, name=workspace_id.upper(), projects=projects)


@pytest.fixture
def remote() -> FakeRemote:
    return FakeRemote([_workspace("w1", "p1", "p2"), _workspace("w2", "p3"), _workspace("w3")])


@pytest.fixture
def selection() -> MemorySelectionStore:
    return MemorySelectionStore()


@pytest.fixture
def get_token() -> Callable[[], Awaitable[str]]:
    async def _get_token() -> str:
        return "tok-123"

    return _get_token


@pytest.fixture
def container(remote: FakeRemote, selection: MemorySelectionStore) -> WorkspaceStateContainer:
    return WorkspaceStateContainer(remote, selection)


@pytest.fixture
async def hydrated(container: WorkspaceStateContainer, get_token) -> WorkspaceStateContainer:
    """Container hydrated from ``remote``; w1 is active."""
    await container.hydrate(get_token)
    return container
