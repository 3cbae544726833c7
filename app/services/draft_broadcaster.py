"""In-process fan-out of committed draft states.

Every subscriber gets its own bounded queue.  ``publish`` never blocks: when a
subscriber falls behind, its oldest queued state is dropped, so whatever it
reads next is never older than what it missed.
"""

import asyncio
import logging
from collections import defaultdict
from contextlib import asynccontextmanager
from typing import AsyncIterator

from app.services.draft_engine import DraftState

logger = logging.getLogger(__name__)


class Subscription:
    def __init__(self, draft_id: str, maxsize: int):
        self.draft_id = draft_id
        self._queue: asyncio.Queue[DraftState] = asyncio.Queue(maxsize=maxsize)

    def _offer(self, state: DraftState) -> None:
        if self._queue.full():
            self._queue.get_nowait()
        self._queue.put_nowait(state)

    async def get(self) -> DraftState:
        return await self._queue.get()

    def pending(self) -> int:
        return self._queue.qsize()

    def __aiter__(self) -> "Subscription":
        return self

    async def __anext__(self) -> DraftState:
        return await self.get()


class DraftBroadcaster:
    def __init__(self, queue_size: int = 16):
        self._queue_size = queue_size
        self._subscriptions: dict[str, set[Subscription]] = defaultdict(set)

    @asynccontextmanager
    async def subscribe(self, draft_id: str) -> AsyncIterator[Subscription]:
        subscription = Subscription(draft_id, self._queue_size)
        self._subscriptions[draft_id].add(subscription)
        logger.debug("Subscriber added to draft %s (%d total)", draft_id, self.subscriber_count(draft_id))
        try:
            yield subscription
        finally:
            subscribers = self._subscriptions.get(draft_id)
            if subscribers is not None:
                subscribers.discard(subscription)
                if not subscribers:
                    del self._subscriptions[draft_id]
            logger.debug("Subscriber removed from draft %s", draft_id)

    def publish(self, state: DraftState) -> int:
        """Push ``state`` to every subscriber of its draft; returns how many got it."""
        subscribers = list(self._subscriptions.get(state.id, ()))
        for subscription in subscribers:
            subscription._offer(state)
        return len(subscribers)

    def subscriber_count(self, draft_id: str) -> int:
        return len(self._subscriptions.get(draft_id, ()))


broadcaster = DraftBroadcaster()
