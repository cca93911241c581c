from __future__ import annotations

import pytest

from designflow.infrastructure.event_bus.memory import InMemoryChangeFeed
from designflow.infrastructure.storage.memory import InMemoryObjectStorage
from designflow.tests.factories import FlakyRecordStore


@pytest.fixture
def change_feed() -> InMemoryChangeFeed:
    return InMemoryChangeFeed()


@pytest.fixture
def store() -> FlakyRecordStore:
    return FlakyRecordStore()


@pytest.fixture
def live_store(change_feed: InMemoryChangeFeed) -> FlakyRecordStore:
    return FlakyRecordStore(change_feed=change_feed)


@pytest.fixture
def storage() -> InMemoryObjectStorage:
    return InMemoryObjectStorage()
