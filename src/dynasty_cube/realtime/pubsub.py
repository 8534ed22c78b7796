"""Redis pub/sub — the broadcast channel for live draft events.

Learn: Redis pub/sub is fire-and-forget. If no one is listening, the message
is lost. That's fine for the live draft board (the page can always query
the picks API to catch up), and delivery is at-most-once per subscriber
in the happy path but duplicates are possible across reconnects — clients
deduplicate picks by id.

Channel naming: draft-updates-{session_id}
Envelope: {"type": "broadcast", "event": "new_pick", "payload": {...}}
"""

import json
from typing import Any, Optional

import redis.asyncio as aioredis

from dynasty_cube.config import settings

NEW_PICK = "new_pick"

# Global Redis connection pool (initialized in lifespan)
_redis: Optional[aioredis.Redis] = None


async def init_redis() -> aioredis.Redis:
    """Initialize the Redis connection pool."""
    global _redis
    _redis = aioredis.from_url(
        settings.redis_url,
        encoding="utf-8",
        decode_responses=True,
    )
    # Verify connection
    await _redis.ping()
    return _redis


async def close_redis() -> None:
    """Close the Redis connection pool."""
    global _redis
    if _redis:
        await _redis.aclose()
        _redis = None


def get_redis() -> aioredis.Redis:
    """Get the Redis connection (must be initialized first)."""
    if _redis is None:
        raise RuntimeError("Redis not initialized. Call init_redis() first.")
    return _redis


def draft_channel(session_id: str) -> str:
    return f"draft-updates-{session_id}"


def encode_broadcast(event: str, payload: dict[str, Any]) -> str:
    return json.dumps({"type": "broadcast", "event": event, "payload": payload})


def decode_broadcast(raw: Any) -> Optional[tuple[str, Any]]:
    """Parse an envelope into (event, payload); None if it isn't one."""
    if isinstance(raw, bytes):
        raw = raw.decode("utf-8")
    try:
        message = json.loads(raw)
    except (TypeError, ValueError):
        return None
    if not isinstance(message, dict) or message.get("type") != "broadcast":
        return None
    event = message.get("event")
    if not isinstance(event, str):
        return None
    return event, message.get("payload")


async def publish_draft_event(
    session_id: str,
    event: str,
    payload: dict[str, Any],
    redis: Optional[aioredis.Redis] = None,
) -> int:
    """Publish an event on a draft session's channel.

    Returns the number of subscribers that received it.
    """
    r = redis if redis is not None else get_redis()
    return await r.publish(draft_channel(session_id), encode_broadcast(event, payload))
