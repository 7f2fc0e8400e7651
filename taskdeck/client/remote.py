"""Remote source of workspace trees.

The container only needs one capability: given a bearer token, return the
full list of workspaces (with nested projects and tasks) or fail with a
human-readable message.
"""

from __future__ import annotations

from typing import Protocol, runtime_checkable

import httpx
from pydantic import ValidationError

from taskdeck.models import Workspace, WorkspaceList


class RemoteDataError(Exception):
    """Raised when workspaces cannot be fetched (network, auth, bad payload)."""

    def __init__(self, message: str, *, status_code: int | None = None) -> None:
        super().__init__(message)
        self.message = message
        self.status_code = status_code


@runtime_checkable
class RemoteDataSource(Protocol):
    async def fetch_workspaces(self, bearer_token: str) -> list[Workspace]:
        """Return all workspaces visible to the token holder.

        Raises ``RemoteDataError`` on any failure.
        """
        ...


class HttpRemoteDataSource:
    """Fetch workspaces from the Taskdeck service over HTTP.

    The list endpoint is paged, so pages are requested until a short one
    comes back.  A failure on any page fails the whole fetch.

    Pass *client* to share a connection pool (or to inject a mock transport in
    tests); otherwise a short-lived client is created per call.
    """

    path = "/api/workspaces/list"
    page_size = 500

    def __init__(
        self,
        base_url: str,
        *,
        client: httpx.AsyncClient | None = None,
        timeout: float = 10.0,
    ) -> None:
        self._base_url = base_url.rstrip("/")
        self._client = client
        self._timeout = timeout

    async def fetch_workspaces(self, bearer_token: str) -> list[Workspace]:
        headers = {"Authorization": f"Bearer {bearer_token}"}
        if self._client is not None:
            return await self._fetch_all(self._client, headers)
        async with httpx.AsyncClient(timeout=self._timeout) as client:
            return await self._fetch_all(client, headers)

    async def _fetch_all(self, client: httpx.AsyncClient, headers: dict[str, str]) -> list[Workspace]:
        workspaces: list[Workspace] = []
        while True:
            page = await self._fetch_page(client, headers, offset=len(workspaces))
            workspaces.extend(page)
            if len(page) < self.page_size:
                return workspaces

    async def _fetch_page(
        self, client: httpx.AsyncClient, headers: dict[str, str], *, offset: int
    ) -> list[Workspace]:
        params = {"limit": self.page_size, "offset": offset}
        try:
            response = await client.get(f"{self._base_url}{self.path}", headers=headers, params=params)
        except httpx.HTTPError as exc:
            raise RemoteDataError(str(exc) or type(exc).__name__) from exc

        if response.is_error:
            raise RemoteDataError(_error_message(response), status_code=response.status_code)

        try:
            payload = WorkspaceList.model_validate_json(response.content)
        except ValidationError as exc:
            msg = f"Malformed workspace payload: {exc.error_count()} validation error(s)"
            raise RemoteDataError(msg, status_code=response.status_code) from exc
        return payload.workspaces


def _error_message(response: httpx.Response) -> str:
    """Prefer the server's own message, fall back to the status line."""
    try:
        body = response.json()
    except ValueError:
        body = None
    if isinstance(body, dict):
        for key in ("message", "detail"):
            if isinstance(body.get(key), str):
                return body[key]
    return f"HTTP {response.status_code} {response.reason_phrase}".strip()
