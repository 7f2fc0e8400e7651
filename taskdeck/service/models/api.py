"""API response schemas.

Workspace trees reuse the shared ``taskdeck.models`` types directly; only the
service-specific envelopes live here.
"""

from __future__ import annotations

from pydantic import BaseModel

from taskdeck.service.identity.events import IdentityEventType
from taskdeck.service.identity.pipeline import SyncOutcome


class WebhookAck(BaseModel):
    """Returned once an identity event has been applied (or skipped as a duplicate)."""

    event_id: str | None = None
    type: IdentityEventType
    outcome: SyncOutcome
