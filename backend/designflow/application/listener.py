"""Realtime subscription lifecycle for active pipeline views."""

from __future__ import annotations

import asyncio
import logging
from collections.abc import AsyncIterator, Awaitable, Callable
from contextlib import asynccontextmanager
from typing import TYPE_CHECKING, Optional

from designflow.domain.errors import AuthenticationRequired
from designflow.domain.events.base import ChangeEvent

if TYPE_CHECKING:
    from designflow.application.pipeline import PipelineController
    from designflow.domain.providers.interfaces import (
        ChangeFeed,
        SessionProvider,
        SubscriptionHandle,
    )

logger = logging.getLogger(__name__)


class SubscriptionListener:
    """Holds one change subscription and re-syncs on every event.

    Use as an async context manager so the subscription is always released.
    Bursts are not coalesced: each event schedules its own refresh.
    """

    def __init__(
        self,
        feed: "ChangeFeed",
        collection: str,
        on_change: Callable[[], Awaitable[object]],
    ) -> None:
        self.feed = feed
        self.collection = collection
        self.on_change = on_change
        self._handle: Optional["SubscriptionHandle"] = None
        self._tasks: set[asyncio.Task[object]] = set()

    @property
    def is_open(self) -> bool:
        return self._handle is not None

    async def open(self) -> None:
        if self._handle is not None:
            return
        self._handle = await self.feed.subscribe(self.collection, self._handle_event)
        logger.debug("Subscribed to collection changes", extra={"collection": self.collection})

    async def close(self) -> None:
        handle, self._handle = self._handle, None
        tasks = list(self._tasks)
        for task in tasks:
            task.cancel()
        if tasks:
            await asyncio.gather(*tasks, return_exceptions=True)
        self._tasks.clear()
        if handle is not None:
            await self.feed.unsubscribe(handle)
            logger.debug(
                "Unsubscribed from collection changes", extra={"collection": self.collection}
            )

    async def __aenter__(self) -> "SubscriptionListener":
        await self.open()
        return self

    async def __aexit__(self, *exc_info: object) -> None:
        await self.close()

    def _handle_event(self, event: ChangeEvent) -> None:
        if self._handle is None:
            return
        logger.debug(
            "Realtime change received",
            extra={"collection": event.collection, "kind": event.kind.value},
        )
        task = asyncio.get_running_loop().create_task(self.on_change())
        self._tasks.add(task)
        task.add_done_callback(self._tasks.discard)


@asynccontextmanager
async def live_view(
    controller: "PipelineController",
    feed: "ChangeFeed",
    *,
    sessions: Optional["SessionProvider"] = None,
) -> AsyncIterator["PipelineController"]:
    """Activate ``controller`` with a realtime listener for the duration of the block."""
    if sessions is not None and await sessions.current_session() is None:
        raise AuthenticationRequired("A signed-in session is required to open this view")

    listener = SubscriptionListener(feed, controller.store.collection, controller.refresh)
    async with listener:
        try:
            await controller.activate()
            yield controller
        finally:
            controller.deactivate()
