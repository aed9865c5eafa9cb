"""Redis pub/sub broadcaster for navigation state updates."""

import asyncio
import logging

import orjson
import redis.asyncio as aioredis

from geoshare.config import settings

logger = logging.getLogger(__name__)

CHANNEL_PREFIX = "nav:session:"
STATE_KEY_PREFIX = "nav:state:"


class Broadcaster:
    """Publishes session state to Redis and manages WebSocket subscribers.

    Works without Redis (``connect()`` never called): updates are then only
    fanned out to in-process subscribers.
    """

    def __init__(self) -> None:
        self._redis: aioredis.Redis | None = None
        # session_id -> subscriber queues
        self._subscribers: dict[str, set[asyncio.Queue]] = {}

    async def connect(self) -> None:
        self._redis = aioredis.from_url(settings.redis_url, decode_responses=False)

    async def close(self) -> None:
        if self._redis:
            await self._redis.aclose()

    async def publish(self, session_id: str, state: dict) -> None:
        """Publish a state update to Redis and fan out to WebSocket subscribers."""
        payload = orjson.dumps({"type": "update", "session_id": session_id, "state": state})

        if self._redis:
            try:
                # Store current state for new connections
                await self._redis.set(STATE_KEY_PREFIX + session_id, payload)
                await self._redis.publish(CHANNEL_PREFIX + session_id, payload)
            except Exception:
                logger.exception("Failed to publish session %s to Redis", session_id)

        self._fan_out(session_id, payload)

    async def forget(self, session_id: str) -> None:
        """Tell subscribers the session is gone and drop its stored state."""
        payload = orjson.dumps({"type": "closed", "session_id": session_id})
        if self._redis:
            try:
                await self._redis.delete(STATE_KEY_PREFIX + session_id)
                await self._redis.publish(CHANNEL_PREFIX + session_id, payload)
            except Exception:
                logger.exception("Failed to clear session %s in Redis", session_id)
        self._fan_out(session_id, payload)

    def subscribe(self, session_id: str) -> asyncio.Queue:
        """Create a new subscriber queue for WebSocket fan-out."""
        q: asyncio.Queue = asyncio.Queue(maxsize=10)
        self._subscribers.setdefault(session_id, set()).add(q)
        return q

    def is_subscribed(self, session_id: str, q: asyncio.Queue) -> bool:
        return q in self._subscribers.get(session_id, ())

    def unsubscribe(self, session_id: str, q: asyncio.Queue) -> None:
        subs = self._subscribers.get(session_id)
        if subs is None:
            return
        subs.discard(q)
        if not subs:
            del self._subscribers[session_id]

    def _fan_out(self, session_id: str, payload: bytes) -> None:
        subs = self._subscribers.get(session_id)
        if not subs:
            return
        dead = set()
        for q in subs:
            try:
                q.put_nowait(payload)
            except asyncio.QueueFull:
                dead.add(q)
        if dead:
            logger.warning("Dropping %d slow subscribers of session %s", len(dead), session_id)
            subs -= dead
            if not subs:
                del self._subscribers[session_id]
