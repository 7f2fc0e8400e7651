"""Client-side workspace cache and its collaborators."""

from taskdeck.client.container import HydrateStatus, MutationResult, WorkspaceStateContainer
from taskdeck.client.remote import HttpRemoteDataSource, RemoteDataError, RemoteDataSource
from taskdeck.client.selection import (
    CURRENT_WORKSPACE_KEY,
    FileSelectionStore,
    MemorySelectionStore,
    PersistedSelection,
)

__all__ = [
    "CURRENT_WORKSPACE_KEY",
    "FileSelectionStore",
    "HttpRemoteDataSource",
    "HydrateStatus",
    "MemorySelectionStore",
    "MutationResult",
    "PersistedSelection",
    "RemoteDataError",
    "RemoteDataSource",
    "WorkspaceStateContainer",
]
