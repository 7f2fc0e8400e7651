"""In-memory workspace cache with an active-workspace view.

The container keeps one normalized store: an insertion-ordered mapping of
workspace id to ``Workspace``, plus the id of the workspace in focus.  The
"current workspace" is looked up from the store on every access, so the list
view and the active view can never diverge: every nested mutation writes a
single new ``Workspace`` value (rebuilt at each nesting level it touches) and
both views see it.

Mutations are synchronous and applied one at a time.  Only ``hydrate``
suspends; a mutation dispatched while a hydrate is pending is overwritten when
the hydrate settles with a wholesale replace.  When two hydrates overlap only
the most recently started one is allowed to apply its result.

Mutators never raise on a missing or duplicate id.  They return a
``MutationResult`` and log a warning instead, leaving the cache untouched.
"""

from __future__ import annotations

import asyncio
from collections.abc import Awaitable, Callable, Iterable
from enum import StrEnum
from typing import TypeVar

from loguru import logger

from taskdeck.client.remote import RemoteDataError, RemoteDataSource
from taskdeck.client.selection import CURRENT_WORKSPACE_KEY, PersistedSelection
from taskdeck.models import Project, Task, Workspace

CredentialProvider = Callable[[], Awaitable[str]]
"""Async callable returning a bearer token for the remote source."""

Listener = Callable[["WorkspaceStateContainer"], None]

_T = TypeVar("_T", Project, Task)


class HydrateStatus(StrEnum):
    IDLE = "idle"
    PENDING = "pending"
    FULFILLED = "fulfilled"
    REJECTED = "rejected"


class MutationResult(StrEnum):
    """Outcome of a cache mutation.  Anything but APPLIED left the cached workspaces unchanged."""

    APPLIED = "applied"
    NOT_FOUND = "not_found"
    DUPLICATE = "duplicate"
    NO_ACTIVE_WORKSPACE = "no_active_workspace"


class WorkspaceStateContainer:
    """Client-side cache of workspaces, projects and tasks."""

    def __init__(
        self,
        remote: RemoteDataSource,
        selection: PersistedSelection,
        *,
        workspaces: Iterable[Workspace] = (),
    ) -> None:
        self._remote = remote
        self._selection = selection
        self._store: dict[str, Workspace] = {w.id: w for w in workspaces}
        self._active_id: str | None = None
        self._status = HydrateStatus.IDLE
        self._hydrate_seq = 0
        self._listeners: list[Listener] = []

    # -- Views -----------------------------------------------------------------

    @property
    def workspaces(self) -> list[Workspace]:
        """Snapshot of all cached workspaces, in insertion order."""
        return list(self._store.values())

    @property
    def current_workspace(self) -> Workspace | None:
        if self._active_id is None:
            return None
        return self._store.get(self._active_id)

    @property
    def active_id(self) -> str | None:
        return self._active_id

    @property
    def status(self) -> HydrateStatus:
        return self._status

    @property
    def loading(self) -> bool:
        return self._status is HydrateStatus.PENDING

    def get_workspace(self, workspace_id: str) -> Workspace | None:
        return self._store.get(workspace_id)

    # -- Observers -------------------------------------------------------------

    def subscribe(self, listener: Listener) -> Callable[[], None]:
        """Call *listener* after every applied change.  Returns an unsubscribe callable."""
        self._listeners.append(listener)

        def unsubscribe() -> None:
            if listener in self._listeners:
                self._listeners.remove(listener)

        return unsubscribe

    def _notify(self) -> None:
        for listener in list(self._listeners):
            try:
                listener(self)
            except Exception:
                logger.exception("Workspace cache: listener {!r} failed", listener)

    # -- Hydrate ---------------------------------------------------------------

    async def hydrate(self, credential_provider: CredentialProvider) -> list[Workspace]:
        """Load the full workspace list from the remote source.

        Always settles: a failure is logged, leaves the cache unchanged and
        yields an empty list.  Returns the fetched workspaces otherwise.
        """
        self._hydrate_seq += 1
        seq = self._hydrate_seq
        self._status = HydrateStatus.PENDING
        self._notify()

        try:
            try:
                token = await credential_provider()
            except Exception as exc:
                # Token retrieval is opaque; any failure there is an auth failure.
                raise RemoteDataError(f"Credential provider failed: {exc}") from exc
            fetched = await self._remote.fetch_workspaces(token)
        except RemoteDataError as exc:
            logger.warning("Workspace hydrate failed: {}", exc.message)
            self._reject(seq)
            return []
        except Exception:
            logger.exception("Workspace hydrate failed: unexpected error from remote source")
            self._reject(seq)
            return []
        except asyncio.CancelledError:
            if seq == self._hydrate_seq:
                self._status = HydrateStatus.IDLE
            raise

        if seq != self._hydrate_seq:
            logger.debug("Workspace hydrate #{} superseded by #{}; result dropped", seq, self._hydrate_seq)
            return fetched

        self._load(fetched)
        self._status = HydrateStatus.FULFILLED
        logger.info(
            "Workspace hydrate: {} workspaces loaded (active={})",
            len(self._store),
            self._active_id,
        )
        self._notify()
        return fetched

    def _reject(self, seq: int) -> None:
        if seq == self._hydrate_seq:
            self._status = HydrateStatus.REJECTED
            self._notify()

    def _load(self, fetched: list[Workspace]) -> None:
        self._store = _index(fetched)
        if not self._store:
            # An empty refresh never resets the selection.
            return
        persisted = self._selection.get(CURRENT_WORKSPACE_KEY)
        if persisted is not None and persisted in self._store:
            self._active_id = persisted
        else:
            self._active_id = next(iter(self._store))

    # -- Workspace-level mutations --------------------------------------------

    def select_workspace(self, workspace_id: str) -> MutationResult:
        """Focus a workspace and persist the choice.

        An unknown id clears the focus and persists nothing.
        """
        if workspace_id not in self._store:
            self._active_id = None
            self._notify()
            return _skipped("select_workspace", MutationResult.NOT_FOUND, f"workspace {workspace_id!r}")
        self._active_id = workspace_id
        self._selection.set(CURRENT_WORKSPACE_KEY, workspace_id)
        self._notify()
        return MutationResult.APPLIED

    def replace_list(self, workspaces: Iterable[Workspace]) -> MutationResult:
        """Overwrite the whole list (bulk refresh outside ``hydrate``).

        The focus is kept if the active workspace survived the refresh,
        otherwise it falls back to the first workspace (or none).
        """
        self._store = _index(workspaces)
        if self._active_id not in self._store:
            self._active_id = next(iter(self._store), None)
        self._notify()
        return MutationResult.APPLIED

    def add_workspace(self, workspace: Workspace) -> MutationResult:
        """Append a workspace and focus it."""
        if workspace.id in self._store:
            return _skipped("add_workspace", MutationResult.DUPLICATE, f"workspace {workspace.id!r}")
        self._store[workspace.id] = workspace
        self._active_id = workspace.id
        self._selection.set(CURRENT_WORKSPACE_KEY, workspace.id)
        self._notify()
        return MutationResult.APPLIED

    def update_workspace(self, workspace: Workspace) -> MutationResult:
        """Replace the workspace with the same id by *workspace*, wholesale."""
        if workspace.id not in self._store:
            return _skipped("update_workspace", MutationResult.NOT_FOUND, f"workspace {workspace.id!r}")
        self._store[workspace.id] = workspace
        self._notify()
        return MutationResult.APPLIED

    def delete_workspace(self, workspace_id: str) -> MutationResult:
        """Remove a workspace.

        Deleting the active workspace moves the focus to the first remaining
        workspace (persisted), or clears it when none is left.
        """
        if workspace_id not in self._store:
            return _skipped("delete_workspace", MutationResult.NOT_FOUND, f"workspace {workspace_id!r}")
        del self._store[workspace_id]
        if self._active_id == workspace_id:
            self._active_id = next(iter(self._store), None)
            if self._active_id is not None:
                self._selection.set(CURRENT_WORKSPACE_KEY, self._active_id)
            logger.info("Workspace cache: active workspace {} deleted, focus -> {}", workspace_id, self._active_id)
        self._notify()
        return MutationResult.APPLIED

    # -- Nested mutations (active workspace only) ------------------------------

    def add_project(self, project: Project) -> MutationResult:
        workspace = self.current_workspace
        if workspace is None:
            return _skipped("add_project", MutationResult.NO_ACTIVE_WORKSPACE, f"project {project.id!r}")
        if _find(workspace.projects, project.id) is not None:
            return _skipped("add_project", MutationResult.DUPLICATE, f"project {project.id!r}")
        project = project.model_copy(update={"workspace_id": workspace.id})
        return self._put(workspace.model_copy(update={"projects": (*workspace.projects, project)}))

    def add_task(self, task: Task) -> MutationResult:
        workspace, project, result = self._locate_project("add_task", task.project_id)
        if result is not None:
            return result
        if _find(project.tasks, task.id) is not None:
            return _skipped("add_task", MutationResult.DUPLICATE, f"task {task.id!r}")
        return self._put(_with_project(workspace, project, (*project.tasks, task)))

    def update_task(self, task: Task) -> MutationResult:
        workspace, project, result = self._locate_project("update_task", task.project_id)
        if result is not None:
            return result
        if _find(project.tasks, task.id) is None:
            return _skipped("update_task", MutationResult.NOT_FOUND, f"task {task.id!r}")
        tasks = tuple(task if t.id == task.id else t for t in project.tasks)
        return self._put(_with_project(workspace, project, tasks))

    def delete_task(self, project_id: str, task_ids: Iterable[str]) -> MutationResult:
        """Remove the listed tasks from one project of the active workspace."""
        workspace, project, result = self._locate_project("delete_task", project_id)
        if result is not None:
            return result
        doomed = frozenset(task_ids)
        tasks = tuple(t for t in project.tasks if t.id not in doomed)
        if len(tasks) == len(project.tasks):
            detail = f"tasks {sorted(doomed)} in project {project_id!r}"
            return _skipped("delete_task", MutationResult.NOT_FOUND, detail)
        return self._put(_with_project(workspace, project, tasks))

    # -- Helpers ---------------------------------------------------------------

    def _locate_project(
        self, op: str, project_id: str
    ) -> tuple[Workspace, Project, None] | tuple[None, None, MutationResult]:
        workspace = self.current_workspace
        if workspace is None:
            return None, None, _skipped(op, MutationResult.NO_ACTIVE_WORKSPACE, f"project {project_id!r}")
        project = _find(workspace.projects, project_id)
        if project is None:
            detail = f"project {project_id!r} in workspace {workspace.id!r}"
            return None, None, _skipped(op, MutationResult.NOT_FOUND, detail)
        return workspace, project, None

    def _put(self, workspace: Workspace) -> MutationResult:
        self._store[workspace.id] = workspace
        self._notify()
        return MutationResult.APPLIED


def _index(workspaces: Iterable[Workspace]) -> dict[str, Workspace]:
    store: dict[str, Workspace] = {}
    for workspace in workspaces:
        if workspace.id in store:
            logger.warning("Workspace cache: duplicate workspace id {} in refresh; last one wins", workspace.id)
        store[workspace.id] = workspace
    return store


def _find(items: Iterable[_T], item_id: str) -> _T | None:
    return next((item for item in items if item.id == item_id), None)


def _with_project(workspace: Workspace, project: Project, tasks: tuple[Task, ...]) -> Workspace:
    """Rebuild *workspace* with *project*'s task list replaced; siblings kept as-is."""
    updated = project.model_copy(update={"tasks": tasks})
    projects = tuple(updated if p.id == project.id else p for p in workspace.projects)
    return workspace.model_copy(update={"projects": projects})


def _skipped(op: str, result: MutationResult, detail: str) -> MutationResult:
    logger.warning("Workspace cache: {} skipped ({}): {}", op, result, detail)
    return result
