"""
Bug updates SSE endpoint.

Streams a notification whenever a bug is created, updated or deleted,
so open bug lists can refresh without polling.
"""

import asyncio
import json
import logging
from typing import AsyncGenerator

from fastapi import APIRouter, Depends, Request
from fastapi.responses import StreamingResponse

from ..core.errors import BugTrackerError
from ..services import BugBroadcaster, get_broadcaster

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/bugs", tags=["updates"])

PING_INTERVAL = 30


def format_sse(event: dict) -> str:
    return f"data: {json.dumps(event)}\n\n"


@router.get("/updates/stream")
async def stream_updates(
    request: Request,
    broadcaster: BugBroadcaster = Depends(get_broadcaster),
):
    """
    SSE stream of bug changes.

    Events:
    - connected: initial confirmation {type, subscriber_count}
    - bug_created / bug_updated: {type, bug, timestamp}
    - bug_deleted: {type, id, timestamp}
    - ping: keep-alive (every 30s)
    """
    # A full broadcaster fails the request itself, before any body is sent
    broadcaster.ensure_capacity()

    async def event_generator() -> AsyncGenerator[str, None]:
        queue = None
        try:
            queue = await broadcaster.subscribe()
            yield format_sse({
                "type": "connected",
                "subscriber_count": broadcaster.subscriber_count,
            })

            loop = asyncio.get_running_loop()
            last_ping = loop.time()

            while True:
                if await request.is_disconnected():
                    logger.info("[Updates] Client disconnected")
                    break

                try:
                    event = await asyncio.wait_for(queue.get(), timeout=5.0)
                    yield format_sse(event)
                except asyncio.TimeoutError:
                    pass

                now = loop.time()
                if now - last_ping > PING_INTERVAL:
                    yield format_sse({"type": "ping"})
                    last_ping = now
        except BugTrackerError as e:
            logger.warning(f"[Updates] Subscription refused: {e.message}")
            yield format_sse({"type": "error", "message": e.message})
        finally:
            if queue is not None:
                await broadcaster.unsubscribe(queue)

    return StreamingResponse(
        event_generator(),
        media_type="text/event-stream",
        headers={
            "Cache-Control": "no-cache",
            "Connection": "keep-alive",
            "X-Accel-Buffering": "no",
        },
    )
