"""Live draft stream — Server-Sent Events relay over Redis pub/sub.

Learn: Each browser on the live draft board opens
GET /api/draft-stream/{session_id}. The handler:
1. Rejects an empty session id with 400 before opening anything
2. Subscribes to the session's Redis channel (draft-updates-{id})
3. A pump task moves every `new_pick` payload into a bounded queue
4. The response generator drains the queue, one `data: ...` frame per pick
5. On client disconnect, unsubscribes and closes the pub/sub connection

The queue is the backpressure point: when the client reads slower than
picks arrive, the pump blocks on put() instead of buffering without limit.

There is no reconnect logic here. If the connection drops, the browser
opens a new one (EventSource does this on its own).
"""

import asyncio
import json
from typing import Any, AsyncIterator, Awaitable, Callable, Optional

import redis.asyncio as aioredis
import structlog
from fastapi import APIRouter, Request
from fastapi.responses import PlainTextResponse, StreamingResponse

from dynasty_cube.config import settings
from dynasty_cube.realtime.pubsub import (
    NEW_PICK,
    decode_broadcast,
    draft_channel,
    get_redis,
)

logger = structlog.get_logger()
router = APIRouter()

SSE_HEADERS = {
    "Cache-Control": "no-cache, no-transform",
    "Connection": "keep-alive",
    "X-Accel-Buffering": "no",
}


def format_sse(payload: Any) -> str:
    """One SSE frame per payload — never batched."""
    data = json.dumps(payload, separators=(",", ":"), ensure_ascii=False)
    return f"data: {data}\n\n"


class DraftStreamRelay:
    """Relay one draft session's broadcast channel to one SSE client."""

    def __init__(
        self,
        redis: Optional[aioredis.Redis],
        session_id: str,
        *,
        queue_size: int = settings.draft_stream_queue_size,
        subscribe_timeout: float = settings.draft_stream_subscribe_timeout_seconds,
        poll_interval: float = settings.draft_stream_poll_interval_seconds,
    ):
        self.session_id = session_id
        self.channel = draft_channel(session_id)
        self.subscribe_timeout = subscribe_timeout
        self.poll_interval = poll_interval
        self._redis = redis
        self._pubsub = None
        self._queue: asyncio.Queue = asyncio.Queue(maxsize=queue_size)
        self._subscribed = asyncio.Event()
        self._tasks: list[asyncio.Task] = []

    async def _subscribe(self) -> bool:
        if self._redis is None:
            logger.warning(
                "draft_stream.subscribe_failed",
                channel=self.channel,
                error="redis unavailable",
            )
            return False
        try:
            self._pubsub = self._redis.pubsub()
            await self._pubsub.subscribe(self.channel)
        except Exception as e:
            logger.warning(
                "draft_stream.subscribe_failed", channel=self.channel, error=str(e)
            )
            self._pubsub = None
            return False
        return True

    async def _pump(self) -> None:
        """Forward channel messages into the queue, in arrival order."""
        try:
            async for message in self._pubsub.listen():
                if message["type"] == "subscribe":
                    self._subscribed.set()
                    continue
                if message["type"] != "message":
                    continue

                decoded = decode_broadcast(message["data"])
                if decoded is None:
                    logger.warning("draft_stream.malformed_message", channel=self.channel)
                    continue
                event, payload = decoded
                if event != NEW_PICK:
                    continue

                logger.info(
                    "draft_stream.new_pick",
                    session_id=self.session_id,
                    pick_id=payload.get("id") if isinstance(payload, dict) else None,
                )
                await self._queue.put(payload)
        except aioredis.RedisError as e:
            logger.warning("draft_stream.channel_lost", channel=self.channel, error=str(e))

    async def _watch_subscription(self) -> None:
        try:
            await asyncio.wait_for(self._subscribed.wait(), self.subscribe_timeout)
        except asyncio.TimeoutError:
            # TODO: decide whether an unconfirmed subscription should end the stream with an error frame
            logger.warning(
                "draft_stream.subscribe_unconfirmed",
                channel=self.channel,
                timeout=self.subscribe_timeout,
            )

    async def stream(
        self, is_disconnected: Callable[[], Awaitable[bool]]
    ) -> AsyncIterator[str]:
        """Yield SSE frames until the client goes away."""
        logger.info("draft_stream.connected", channel=self.channel)
        if await self._subscribe():
            self._tasks = [
                asyncio.create_task(self._pump()),
                asyncio.create_task(self._watch_subscription()),
            ]

        try:
            while True:
                if await is_disconnected():
                    break
                try:
                    payload = await asyncio.wait_for(
                        self._queue.get(), timeout=self.poll_interval
                    )
                except asyncio.TimeoutError:
                    continue
                if await is_disconnected():
                    break
                yield format_sse(payload)
        except (asyncio.CancelledError, GeneratorExit):
            logger.info("draft_stream.cancelled", session_id=self.session_id)
            raise
        finally:
            logger.info("draft_stream.disconnected", session_id=self.session_id)
            # Cleanup must finish even if the response task is being cancelled
            await asyncio.shield(self.close())

    async def close(self) -> None:
        """Release the channel subscription. Safe to call twice."""
        for task in self._tasks:
            task.cancel()
        for task in self._tasks:
            try:
                await task
            except asyncio.CancelledError:
                pass
        self._tasks = []

        if self._pubsub is None:
            return
        pubsub, self._pubsub = self._pubsub, None
        try:
            await pubsub.unsubscribe(self.channel)
            await pubsub.aclose()
        except aioredis.RedisError as e:
            logger.warning("draft_stream.cleanup_failed", channel=self.channel, error=str(e))


@router.get("/draft-stream/{session_id}")
@router.get("/draft-stream/", include_in_schema=False)
async def draft_stream(request: Request, session_id: str = ""):
    """Stream `new_pick` events for a draft session as text/event-stream."""
    if not session_id.strip():
        return PlainTextResponse("Missing session ID", status_code=400)

    try:
        redis = get_redis()
    except RuntimeError:
        redis = None

    relay = DraftStreamRelay(redis, session_id)
    return StreamingResponse(
        relay.stream(request.is_disconnected),
        media_type="text/event-stream",
        headers=SSE_HEADERS,
    )
