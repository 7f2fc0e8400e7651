"""HTTP schemas for the Taskdeck service."""

from taskdeck.service.models.api import WebhookAck

__all__ = ["WebhookAck"]
