"""Redis relay of committed match changes.

Each instance publishes the projection of every play it commits on
``match_events:{match_id}``. Every instance also listens on the whole
``match_events:*`` pattern and hands changes committed elsewhere to one
callback, which pushes them to its own WebSocket subscribers.
"""

import asyncio
import contextlib
import json
import logging
import time
import uuid
from collections.abc import Awaitable, Callable
from typing import Any

import redis.asyncio as redis
from redis.exceptions import RedisError

from trickmatch.config import settings
from trickmatch.constants import REDIS_PUBLISH_TIMEOUT, REDIS_RECONNECT_DELAY
from trickmatch.models.enums import Command
from trickmatch.services.notifier import ChangeNotifier
from trickmatch.services.projection import MatchProjection

logger = logging.getLogger(__name__)

# Receives (command, match_id, projection as JSON) for changes from other instances
RemoteChangeCallback = Callable[[Command, str, dict[str, Any]], Awaitable[None]]

MATCH_EVENTS_PATTERN = "match_events:*"


def match_channel(match_id: str) -> str:
    """Channel carrying the changes of one match."""
    return f"match_events:{match_id}"


class PublisherService(ChangeNotifier):
    """Publishes committed changes and relays those of other instances."""

    def __init__(self) -> None:
        """Initialize without a connection."""
        self.redis_client: redis.Redis | None = None
        self.pubsub: redis.client.PubSub | None = None
        self.origin = uuid.uuid4().hex
        self._on_remote_change: RemoteChangeCallback | None = None
        self._relay_task: asyncio.Task[None] | None = None
        self._running = False

    @property
    def is_connected(self) -> bool:
        """Check if Redis is connected."""
        return self.redis_client is not None

    async def connect(self) -> None:
        """Connect to Redis, leaving the service disconnected if it is unreachable."""
        client = redis.from_url(
            settings.redis_url,
            encoding="utf-8",
            decode_responses=True,
            socket_connect_timeout=2,
            socket_timeout=2,
        )
        try:
            await client.ping()
        except (RedisError, TimeoutError, OSError):
            logger.warning("Redis not available, running without pub/sub")
            with contextlib.suppress(RedisError, OSError):
                await client.aclose()
            return
        self.redis_client = client
        logger.info("Connected to Redis (origin %s)", self.origin)

    async def notify(self, command: Command, match_id: str, projection: MatchProjection) -> None:
        """Publish a committed change on the match channel."""
        if not self.redis_client:
            return

        envelope = {
            "command": command.value,
            "match_id": match_id,
            "projection": projection.model_dump(mode="json"),
            "origin": self.origin,
            "published_at": time.time(),
        }
        try:
            await asyncio.wait_for(
                self.redis_client.publish(match_channel(match_id), json.dumps(envelope)),
                timeout=REDIS_PUBLISH_TIMEOUT,
            )
        except (RedisError, TimeoutError):
            logger.exception("Could not publish %s for match %s", command.value, match_id)

    async def start_relay(self, on_remote_change: RemoteChangeCallback) -> None:
        """Listen for changes committed by other instances.

        Args:
            on_remote_change: Awaited with (command, match_id, projection JSON)
        """
        if not self.redis_client or self._running:
            return

        self._on_remote_change = on_remote_change
        self.pubsub = self.redis_client.pubsub()
        await self.pubsub.psubscribe(MATCH_EVENTS_PATTERN)
        self._running = True
        self._relay_task = asyncio.create_task(self._relay_loop())
        logger.info("Relaying match events from %s", MATCH_EVENTS_PATTERN)

    async def _relay_loop(self) -> None:
        while self._running:
            if self.pubsub is None:
                await self._reconnect()
                continue
            try:
                message = await self.pubsub.get_message(ignore_subscribe_messages=True, timeout=1.0)
            except asyncio.CancelledError:
                break
            except (RedisError, ConnectionError):
                logger.warning("Redis connection lost, reconnecting")
                await self._reconnect()
                continue

            if message and message["type"] == "pmessage":
                await self._relay(message["data"])

    async def _reconnect(self) -> None:
        """Drop the current connection and subscribe again on a new one."""
        await self._close_connections()
        await asyncio.sleep(REDIS_RECONNECT_DELAY)
        await self.connect()
        if not self.redis_client:
            return

        self.pubsub = self.redis_client.pubsub()
        try:
            await self.pubsub.psubscribe(MATCH_EVENTS_PATTERN)
        except RedisError:
            logger.warning("Could not resubscribe to %s", MATCH_EVENTS_PATTERN)
            await self._close_connections()

    async def _relay(self, raw: str) -> None:
        """Hand one change from another instance to the callback."""
        try:
            envelope = json.loads(raw)
            if envelope.get("origin") == self.origin:
                return
            command = Command(envelope["command"])
            match_id = envelope["match_id"]
            projection = envelope["projection"]
        except (json.JSONDecodeError, KeyError, ValueError, AttributeError):
            logger.warning("Dropping malformed match event: %.200s", raw)
            return

        if self._on_remote_change is None:
            return
        try:
            await self._on_remote_change(command, match_id, projection)
        except Exception:
            logger.exception("Relaying %s for match %s failed", command.value, match_id)

    async def _close_connections(self) -> None:
        if self.pubsub:
            with contextlib.suppress(RedisError, OSError):
                await self.pubsub.aclose()
            self.pubsub = None
        if self.redis_client:
            with contextlib.suppress(RedisError, OSError):
                await self.redis_client.aclose()
            self.redis_client = None

    async def close(self) -> None:
        """Stop relaying and close the connection."""
        self._running = False
        if self._relay_task:
            self._relay_task.cancel()
            with contextlib.suppress(asyncio.CancelledError):
                await self._relay_task
            self._relay_task = None

        await self._close_connections()
        logger.info("Redis connection closed")
