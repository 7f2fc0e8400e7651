"""FastAPI dependencies: DB sessions, the identity pipeline and bearer auth.

Usage in route handlers::

    @router.get("/things", dependencies=[Authenticated])
    async def list_things(db: DbSession) -> list[Thing]:
        ...

Dependencies raise HTTP 503 if the backing service was not configured
(TASKDECK_DATABASE_URL unset).
"""

from __future__ import annotations

import secrets
from collections.abc import AsyncIterator
from typing import Annotated

from fastapi import Depends, HTTPException, Request, status
from fastapi.security import HTTPAuthorizationCredentials, HTTPBearer
from sqlalchemy.ext.asyncio import AsyncSession

from taskdeck.service.identity.pipeline import IdentitySyncPipeline

_bearer = HTTPBearer(auto_error=False)


async def get_db(request: Request) -> AsyncIterator[AsyncSession]:
    """Yield an async SQLAlchemy session, closing it after the request.

    The handler (or the manager it calls) commits on success.  If the handler
    raises, the session is closed and the implicit transaction rolled back.
    """
    session_factory = request.app.state.db_session_factory
    if session_factory is None:
        raise HTTPException(
            status_code=status.HTTP_503_SERVICE_UNAVAILABLE,
            detail="Database not configured (TASKDECK_DATABASE_URL is unset).",
        )
    session: AsyncSession = session_factory()
    try:
        yield session
    finally:
        await session.close()


def get_pipeline(request: Request) -> IdentitySyncPipeline:
    pipeline: IdentitySyncPipeline | None = request.app.state.identity_pipeline
    if pipeline is None:
        raise HTTPException(
            status_code=status.HTTP_503_SERVICE_UNAVAILABLE,
            detail="Identity sync unavailable (TASKDECK_DATABASE_URL is unset).",
        )
    return pipeline


async def require_token(
    request: Request,
    credentials: Annotated[HTTPAuthorizationCredentials | None, Depends(_bearer)],
) -> None:
    """Reject requests that do not carry the service bearer token."""
    expected: str = request.app.state.auth_token
    if credentials is None or not secrets.compare_digest(credentials.credentials.encode(), expected.encode()):
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="Invalid or missing bearer token.",
            headers={"WWW-Authenticate": "Bearer"},
        )


# -- Annotated aliases for concise route signatures --------------------------

DbSession = Annotated[AsyncSession, Depends(get_db)]
"""Async SQLAlchemy session (auto-closed after the request)."""

Pipeline = Annotated[IdentitySyncPipeline, Depends(get_pipeline)]

Authenticated = Depends(require_token)
"""Route-level dependency: ``dependencies=[Authenticated]``."""
