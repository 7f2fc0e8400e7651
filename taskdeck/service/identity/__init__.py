"""Identity sync: mirror identity-provider lifecycle events into the store."""

from taskdeck.service.identity.events import IdentityEvent, IdentityEventType
from taskdeck.service.identity.ledger import EventLedger, MemoryEventLedger, RedisEventLedger
from taskdeck.service.identity.pipeline import IdentitySyncPipeline, SyncOutcome
from taskdeck.service.identity.store import IdentityStore, SqlIdentityStore

__all__ = [
    "EventLedger",
    "IdentityEvent",
    "IdentityEventType",
    "IdentityStore",
    "IdentitySyncPipeline",
    "MemoryEventLedger",
    "RedisEventLedger",
    "SqlIdentityStore",
    "SyncOutcome",
]
