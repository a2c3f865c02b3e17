"""
BugBroadcaster: in-memory pub/sub for bug change notifications.

One broadcaster is created per application and stored on `app.state`.
Each subscriber gets its own bounded queue; a queue that is full drops
the event instead of blocking the publisher.
"""

import asyncio
import logging
from typing import Any

from fastapi import Request

from ..core.errors import BugTrackerError

logger = logging.getLogger(__name__)

DEFAULT_QUEUE_SIZE = 100
DEFAULT_MAX_SUBSCRIBERS = 100


class BugBroadcaster:
    """
    Fan-out of bug change events to SSE subscribers.

    Usage:
        queue = await broadcaster.subscribe()
        try:
            while True:
                event = await queue.get()
                yield event
        finally:
            await broadcaster.unsubscribe(queue)

        await broadcaster.broadcast({"type": "bug_created", ...})
    """

    def __init__(
        self,
        max_queue_size: int = DEFAULT_QUEUE_SIZE,
        max_subscribers: int = DEFAULT_MAX_SUBSCRIBERS,
    ):
        self.max_queue_size = max_queue_size
        self.max_subscribers = max_subscribers
        self._subscribers: set[asyncio.Queue] = set()
        self._lock = asyncio.Lock()

    def ensure_capacity(self) -> None:
        """Raise a 503 if no further subscriber would be accepted."""
        if len(self._subscribers) >= self.max_subscribers:
            raise BugTrackerError("Too many update subscribers", status_code=503)

    async def subscribe(self) -> asyncio.Queue:
        """Register a new subscriber and return its queue."""
        queue: asyncio.Queue = asyncio.Queue(maxsize=self.max_queue_size)
        async with self._lock:
            self.ensure_capacity()
            self._subscribers.add(queue)
            subscriber_count = len(self._subscribers)

        logger.info(f"[Broadcast] New subscriber, total: {subscriber_count}")
        return queue

    async def unsubscribe(self, queue: asyncio.Queue) -> None:
        async with self._lock:
            self._subscribers.discard(queue)
            subscriber_count = len(self._subscribers)

        logger.info(f"[Broadcast] Subscriber left, remaining: {subscriber_count}")

    async def broadcast(self, event: dict[str, Any]) -> int:
        """
        Send an event to every subscriber.
        Returns the number of subscribers that received it.
        """
        async with self._lock:
            subscribers = list(self._subscribers)

        if not subscribers:
            logger.debug(f"[Broadcast] No subscribers for '{event.get('type')}'")
            return 0

        delivered = 0
        for queue in subscribers:
            try:
                queue.put_nowait(event)
                delivered += 1
            except asyncio.QueueFull:
                logger.warning("[Broadcast] Queue full, dropping event")

        logger.info(f"[Broadcast] Sent event '{event.get('type')}' to {delivered} subscribers")
        return delivered

    @property
    def subscriber_count(self) -> int:
        return len(self._subscribers)


def get_broadcaster(request: Request) -> BugBroadcaster:
    """FastAPI dependency returning the app-owned broadcaster."""
    return request.app.state.broadcaster
