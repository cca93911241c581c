"""Domain provider interfaces that the pipeline controller is wired against."""

from __future__ import annotations

from typing import Any, Callable, Mapping, Optional, Protocol

from designflow.domain.events.base import ChangeEvent
from designflow.domain.models.design_request import DesignRequest
from designflow.domain.models.session import Session
from designflow.domain.models.view import RecordQuery

ChangeCallback = Callable[[ChangeEvent], None]


class RecordStore(Protocol):
    """Remote design request collection supporting filtered reads and point writes."""

    collection: str

    async def query(self, query: RecordQuery) -> list[DesignRequest]:  # pragma: no cover
        ...

    async def get(self, request_id: str) -> DesignRequest:  # pragma: no cover
        ...

    async def update(
        self, request_id: str, fields: Mapping[str, Any]
    ) -> None:  # pragma: no cover
        ...


class ObjectStorage(Protocol):
    """Bucketed blob storage exposing public references."""

    async def upload_object(
        self,
        bucket: str,
        key: str,
        payload: bytes,
        *,
        content_type: Optional[str] = None,
    ) -> None:  # pragma: no cover
        ...

    async def delete_object(self, bucket: str, key: str) -> None:  # pragma: no cover
        ...

    def resolve_public_uri(self, bucket: str, key: str) -> str:  # pragma: no cover
        ...

    def object_key(self, bucket: str, uri: str) -> str:  # pragma: no cover
        ...


class SubscriptionHandle(Protocol):
    collection: str


class ChangeFeed(Protocol):
    """Realtime insert/update/delete notifications for a collection."""

    async def subscribe(
        self, collection: str, on_change: ChangeCallback
    ) -> SubscriptionHandle:  # pragma: no cover
        ...

    async def unsubscribe(self, handle: SubscriptionHandle) -> None:  # pragma: no cover
        ...

    async def publish(self, collection: str, event: ChangeEvent) -> None:  # pragma: no cover
        ...


class SessionProvider(Protocol):
    """Auth collaborator; only consulted to gate access to views."""

    async def current_session(self) -> Optional[Session]:  # pragma: no cover
        ...
