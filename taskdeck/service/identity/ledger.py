"""Processed-event ledgers for webhook de-duplication.

Delivery is at-least-once, so the pipeline claims an event id before applying
it.  A claim that fails means the event was (or is being) applied already.
If applying fails, the claim is released so a redelivery can try again.
"""

from __future__ import annotations

from collections import OrderedDict
from typing import Protocol, runtime_checkable

import redis.asyncio as aioredis


@runtime_checkable
class EventLedger(Protocol):
    async def claim(self, event_id: str) -> bool:
        """Mark *event_id* as processed.  ``False`` if it was already claimed."""
        ...

    async def release(self, event_id: str) -> None:
        """Forget a claim whose event failed to apply."""
        ...


class MemoryEventLedger:
    """Bounded in-process ledger; the oldest ids are evicted first.

    Only de-duplicates within one process.  Use ``RedisEventLedger`` when
    several workers receive webhooks.
    """

    def __init__(self, max_size: int = 10_000) -> None:
        self._max_size = max_size
        self._seen: OrderedDict[str, None] = OrderedDict()

    def __len__(self) -> int:
        return len(self._seen)

    async def claim(self, event_id: str) -> bool:
        if event_id in self._seen:
            return False
        self._seen[event_id] = None
        while len(self._seen) > self._max_size:
            self._seen.popitem(last=False)
        return True

    async def release(self, event_id: str) -> None:
        self._seen.pop(event_id, None)


class RedisEventLedger:
    """Ledger shared across workers: one ``SET NX EX`` key per event id."""

    def __init__(self, client: aioredis.Redis, *, ttl: int, prefix: str = "taskdeck:events:") -> None:
        self._client = client
        self._ttl = ttl
        self._prefix = prefix

    def _key(self, event_id: str) -> str:
        return f"{self._prefix}{event_id}"

    async def claim(self, event_id: str) -> bool:
        return bool(await self._client.set(self._key(event_id), b"1", nx=True, ex=self._ttl))

    async def release(self, event_id: str) -> None:
        await self._client.delete(self._key(event_id))
