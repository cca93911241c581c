"""In-memory change feed used for local development and unit tests."""

from __future__ import annotations

import itertools
import logging
from dataclasses import dataclass, field
from typing import Dict

from designflow.domain.events.base import ChangeEvent
from designflow.domain.providers.interfaces import ChangeCallback, ChangeFeed

logger = logging.getLogger(__name__)


@dataclass(slots=True, frozen=True)
class MemorySubscription:
    collection: str
    subscription_id: int


@dataclass
class InMemoryChangeFeed(ChangeFeed):
    """Fan-out of change events to every subscriber of a collection."""

    _subscribers: Dict[str, Dict[int, ChangeCallback]] = field(default_factory=dict, init=False)
    _ids: "itertools.count[int]" = field(default_factory=itertools.count, init=False)

    async def subscribe(self, collection: str, on_change: ChangeCallback) -> MemorySubscription:
        handle = MemorySubscription(collection=collection, subscription_id=next(self._ids))
        self._subscribers.setdefault(collection, {})[handle.subscription_id] = on_change
        return handle

    async def unsubscribe(self, handle: MemorySubscription) -> None:  # type: ignore[override]
        callbacks = self._subscribers.get(handle.collection, {})
        callbacks.pop(handle.subscription_id, None)

    async def publish(self, collection: str, event: ChangeEvent) -> None:
        for callback in list(self._subscribers.get(collection, {}).values()):
            try:
                callback(event)
            except Exception:
                logger.exception(
                    "Change subscriber failed", extra={"collection": collection}
                )

    def subscriber_count(self, collection: str) -> int:
        return len(self._subscribers.get(collection, {}))


def from_env() -> InMemoryChangeFeed:
    return InMemoryChangeFeed()
