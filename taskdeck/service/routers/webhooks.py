"""Identity webhook endpoint.

The event source retries on any non-2xx answer, so NotFound is reported as
404 (not swallowed) and the delivery system decides whether to retry or alert.
"""

from __future__ import annotations

from fastapi import APIRouter, Header, HTTPException, status
from pydantic import ValidationError

from taskdeck.service.deps import Authenticated, Pipeline
from taskdeck.service.identity.events import IdentityEvent
from taskdeck.service.models.api import WebhookAck

router = APIRouter(prefix="/webhooks", tags=["webhooks"], dependencies=[Authenticated])


@router.post("/identity", response_model=WebhookAck, status_code=status.HTTP_202_ACCEPTED)
async def receive_identity_event(
    event: IdentityEvent,
    pipeline: Pipeline,
    webhook_id: str | None = Header(None, description="Delivery id; used when the body has no event_id."),
) -> WebhookAck:
    """Apply one identity lifecycle event."""
    if event.event_id is None and webhook_id:
        event = event.model_copy(update={"event_id": webhook_id})

    try:
        outcome = await pipeline.handle(event)
    except ValidationError as exc:
        raise HTTPException(
            status.HTTP_422_UNPROCESSABLE_ENTITY,
            detail=f"Invalid {event.type} payload: {exc.error_count()} validation error(s)",
        ) from None
    except LookupError as exc:
        raise HTTPException(status.HTTP_404_NOT_FOUND, detail=f"{event.type}: '{exc}' not found.") from None
    except ValueError as exc:
        raise HTTPException(status.HTTP_409_CONFLICT, detail=f"{event.type}: '{exc}' already exists.") from None

    return WebhookAck(event_id=event.event_id, type=event.type, outcome=outcome)
