"""Apply identity lifecycle events to the persistent store.

Each event maps to exactly one store mutation.  The pipeline does not batch,
retry or reorder: failures (``UserNotFoundError`` and friends) propagate to
whoever invoked ``handle`` so the delivery system can retry or alert.

Events carrying an ``event_id`` are de-duplicated through an ``EventLedger``.
Events without one are always applied.
"""

from __future__ import annotations

from collections.abc import Awaitable, Callable
from enum import StrEnum
from typing import Any

from loguru import logger

from taskdeck.models import MemberRole, User
from taskdeck.service.identity.events import (
    DeletedPayload,
    IdentityEvent,
    IdentityEventType,
    MembershipPayload,
    UserPayload,
    WorkspacePayload,
    user_fields,
)
from taskdeck.service.identity.ledger import EventLedger
from taskdeck.service.identity.store import IdentityStore

Handler = Callable[[dict[str, Any]], Awaitable[None]]


class SyncOutcome(StrEnum):
    APPLIED = "applied"
    DUPLICATE = "duplicate"


class IdentitySyncPipeline:
    def __init__(self, store: IdentityStore, ledger: EventLedger | None = None) -> None:
        self._store = store
        self._ledger = ledger
        self._handlers: dict[IdentityEventType, Handler] = {
            IdentityEventType.USER_CREATED: self._user_created,
            IdentityEventType.USER_UPDATED: self._user_updated,
            IdentityEventType.USER_DELETED: self._user_deleted,
            IdentityEventType.WORKSPACE_CREATED: self._workspace_created,
            IdentityEventType.WORKSPACE_UPDATED: self._workspace_updated,
            IdentityEventType.WORKSPACE_DELETED: self._workspace_deleted,
            IdentityEventType.MEMBERSHIP_CREATED: self._membership_created,
        }

    async def handle(self, event: IdentityEvent) -> SyncOutcome:
        """Apply one event.

        Returns ``DUPLICATE`` without touching the store when the event id was
        already claimed.  Payload validation errors and store errors propagate.
        """
        handler = self._handlers[event.type]

        ledger = self._ledger if event.event_id is not None else None
        if ledger is not None and not await ledger.claim(event.event_id):
            logger.info("Identity sync: skipping duplicate {} (event_id={})", event.type, event.event_id)
            return SyncOutcome.DUPLICATE

        try:
            await handler(event.data)
        except BaseException:
            if ledger is not None:
                await ledger.release(event.event_id)
            raise

        logger.info(
            "Identity sync: applied {} (event_id={}, emitted_at={})",
            event.type,
            event.event_id,
            event.timestamp.isoformat(),
        )
        return SyncOutcome.APPLIED

    # -- Users -----------------------------------------------------------------

    async def _user_created(self, data: dict[str, Any]) -> None:
        payload = UserPayload.model_validate(data)
        await self._store.create_user(User(id=payload.id, **user_fields(payload)))

    async def _user_updated(self, data: dict[str, Any]) -> None:
        payload = UserPayload.model_validate(data)
        await self._store.update_user(payload.id, user_fields(payload))

    async def _user_deleted(self, data: dict[str, Any]) -> None:
        payload = DeletedPayload.model_validate(data)
        await self._store.delete_user(payload.id)

    # -- Workspaces ------------------------------------------------------------

    async def _workspace_created(self, data: dict[str, Any]) -> None:
        payload = WorkspacePayload.model_validate(data)
        await self._store.create_workspace(
            payload.id,
            name=payload.name,
            slug=payload.slug,
            owner_id=payload.created_by,
            image_url=payload.image_url,
        )

    async def _workspace_updated(self, data: dict[str, Any]) -> None:
        payload = WorkspacePayload.model_validate(data)
        # Absent keys leave the stored column alone.
        fields = payload.model_dump(include={"name", "slug", "image_url"}, exclude_unset=True)
        await self._store.update_workspace(payload.id, fields)

    async def _workspace_deleted(self, data: dict[str, Any]) -> None:
        payload = DeletedPayload.model_validate(data)
        await self._store.delete_workspace(payload.id)

    async def _membership_created(self, data: dict[str, Any]) -> None:
        payload = MembershipPayload.model_validate(data)
        await self._store.add_member(payload.workspace_id, payload.user_id, parse_role(payload.role_name))


def parse_role(role_name: str) -> MemberRole:
    """Normalise provider role names (``admin``, ``org:admin``) to ``MemberRole``."""
    name = role_name.upper().removeprefix("ORG:")
    try:
        return MemberRole(name)
    except ValueError:
        logger.warning("Identity sync: unknown role {!r}, defaulting to MEMBER", role_name)
        return MemberRole.MEMBER
