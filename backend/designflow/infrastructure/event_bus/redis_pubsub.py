"""Redis pub/sub backed change feed."""

from __future__ import annotations

import asyncio
import contextlib
import json
import logging
from dataclasses import dataclass
from typing import Any

import redis.asyncio as aioredis
from redis.exceptions import RedisError

from designflow.config import settings
from designflow.domain.errors import StoreError
from designflow.domain.events.base import ChangeEvent
from designflow.domain.providers.interfaces import ChangeCallback, ChangeFeed

logger = logging.getLogger(__name__)


@dataclass
class RedisSubscription:
    collection: str
    channel: str
    pubsub: Any
    reader: "asyncio.Task[None]"


@dataclass
class RedisChangeFeed(ChangeFeed):
    """JSON change events published on one channel per collection."""

    client: "aioredis.Redis"
    channel_prefix: str = "changes"
    poll_timeout: float = 1.0

    async def subscribe(self, collection: str, on_change: ChangeCallback) -> RedisSubscription:
        channel = self._channel(collection)
        pubsub = self.client.pubsub()
        try:
            await pubsub.subscribe(channel)
        except RedisError as exc:
            await pubsub.aclose()
            raise StoreError(f"Unable to subscribe to {channel}: {exc}") from exc
        reader = asyncio.get_running_loop().create_task(
            self._read(pubsub, collection, on_change)
        )
        return RedisSubscription(
            collection=collection, channel=channel, pubsub=pubsub, reader=reader
        )

    async def unsubscribe(self, handle: RedisSubscription) -> None:  # type: ignore[override]
        handle.reader.cancel()
        with contextlib.suppress(asyncio.CancelledError):
            await handle.reader
        try:
            await handle.pubsub.unsubscribe(handle.channel)
        except RedisError:
            logger.warning(
                "Failed to unsubscribe cleanly", extra={"channel": handle.channel}
            )
        finally:
            await handle.pubsub.aclose()

    async def publish(self, collection: str, event: ChangeEvent) -> None:
        payload = json.dumps(event.as_dict(), default=str)
        try:
            await self.client.publish(self._channel(collection), payload)
        except RedisError:  # pragma: no cover - network errors
            logger.exception("Failed to publish change event", extra={"collection": collection})

    async def _read(self, pubsub: Any, collection: str, on_change: ChangeCallback) -> None:
        while True:
            try:
                message = await pubsub.get_message(
                    ignore_subscribe_messages=True, timeout=self.poll_timeout
                )
            except RedisError:  # pragma: no cover - network errors
                logger.exception("Failed to read change feed", extra={"collection": collection})
                await asyncio.sleep(self.poll_timeout)
                continue

            if message is None:
                continue

            data = message.get("data")
            try:
                event = ChangeEvent.from_dict(json.loads(data))
            except (AttributeError, TypeError, ValueError):
                logger.warning("Skipping undecodable change event", extra={"collection": collection})
                continue

            try:
                on_change(event)
            except Exception:
                logger.exception("Change subscriber failed", extra={"collection": collection})

    def _channel(self, collection: str) -> str:
        return f"{self.channel_prefix}:{collection}"


def from_env() -> RedisChangeFeed:
    client: "aioredis.Redis" = aioredis.from_url(settings.REDIS_URL, decode_responses=True)
    return RedisChangeFeed(
        client=client,
        channel_prefix=settings.CHANGE_FEED_CHANNEL_PREFIX,
        poll_timeout=settings.CHANGE_FEED_POLL_SECONDS,
    )
