"""Application bootstrap utilities: dependency container, logging and view wiring."""

from __future__ import annotations

import logging.config
from typing import Optional

from designflow.application.messages import MessageCatalog
from designflow.application.pipeline import PipelineController
from designflow.config import settings
from designflow.domain.models.view import get_view
from designflow.infrastructure.auth import sessions
from designflow.infrastructure.event_bus import memory as memory_feed, redis_pubsub
from designflow.infrastructure.repositories import memory as memory_store, rest as rest_store
from designflow.infrastructure.storage import (
    memory as memory_storage,
    rest as rest_storage,
    s3 as s3_storage,
)
from designflow.interfaces.providers.registry import Container

container = Container()
container.change_feeds.register("memory", memory_feed.from_env)
container.change_feeds.register("redis", redis_pubsub.from_env)
container.record_stores.register(
    "memory",
    lambda: memory_store.from_env(container.resolve_change_feed()),
)
container.record_stores.register("rest", rest_store.from_env)
container.object_storages.register("memory", memory_storage.from_env)
container.object_storages.register("rest", rest_storage.from_env)
container.object_storages.register("s3", s3_storage.from_env)
container.session_providers.register("static", sessions.from_env)
container.session_providers.register("rest", sessions.rest_from_env)


def configure_logging() -> None:
    logging.config.dictConfig(settings.LOGGING)


def build_controller(
    view_key: str,
    *,
    record_store: Optional[str] = None,
    object_storage: Optional[str] = None,
) -> PipelineController:
    """Construct a controller for one of the named views using configured backends."""
    return PipelineController(
        container.resolve_record_store(record_store),
        container.resolve_object_storage(object_storage),
        get_view(view_key),
        bucket=settings.DELIVERABLE_BUCKET,
        messages=MessageCatalog(settings.MESSAGE_LOCALE),
        search_delay=settings.SEARCH_DEBOUNCE_SECONDS,
    )
