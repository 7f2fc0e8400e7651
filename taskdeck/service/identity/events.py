"""Identity event envelope and payload schemas.

Payload shapes follow the identity provider's webhook bodies.  Unknown keys
are ignored so provider-side additions never break ingestion.
"""

from __future__ import annotations

from datetime import UTC, datetime
from enum import StrEnum
from typing import Any

from pydantic import BaseModel, ConfigDict, Field


class IdentityEventType(StrEnum):
    USER_CREATED = "identity.created"
    USER_UPDATED = "identity.updated"
    USER_DELETED = "identity.deleted"

    WORKSPACE_CREATED = "workspace.created"
    WORKSPACE_UPDATED = "workspace.updated"
    WORKSPACE_DELETED = "workspace.deleted"
    MEMBERSHIP_CREATED = "membership.created"


class IdentityEvent(BaseModel):
    """Envelope delivered by the event source (at least once, unordered)."""

    event_id: str | None = Field(default=None, description="Delivery id used for de-duplication.")
    type: IdentityEventType
    data: dict[str, Any] = Field(default_factory=dict)
    timestamp: datetime = Field(
        default_factory=lambda: datetime.now(UTC),
        description="When the provider emitted the event; receipt time if the body omits it.",
    )


class _Payload(BaseModel):
    model_config = ConfigDict(extra="ignore")


class EmailAddress(_Payload):
    email_address: str


class UserPayload(_Payload):
    """``identity.created`` / ``identity.updated`` body."""

    id: str
    email_addresses: list[EmailAddress] = Field(default_factory=list)
    first_name: str | None = None
    last_name: str | None = None
    image_url: str | None = None


class DeletedPayload(_Payload):
    """``*.deleted`` body."""

    id: str


class WorkspacePayload(_Payload):
    """``workspace.created`` / ``workspace.updated`` body."""

    id: str
    name: str = ""
    slug: str | None = None
    created_by: str | None = None
    image_url: str | None = None


class MembershipPayload(_Payload):
    user_id: str
    workspace_id: str
    role_name: str = "member"


def user_fields(payload: UserPayload) -> dict[str, Any]:
    """Map a user payload to stored columns.

    The primary email is the first listed address.  The display name is
    first and last name joined by a space, with missing parts left empty.
    """
    email = payload.email_addresses[0].email_address if payload.email_addresses else None
    return {
        "email": email,
        "display_name": f"{payload.first_name or ''} {payload.last_name or ''}",
        "avatar_url": payload.image_url,
    }
