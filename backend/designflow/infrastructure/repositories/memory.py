"""In-memory record store useful for development and unit tests."""

from __future__ import annotations

import copy
from dataclasses import fields as dataclass_fields, replace
from typing import Any, Dict, Mapping, Optional

from designflow.config import settings
from designflow.domain.errors import FetchFailure, MutationFailure
from designflow.domain.events.base import ChangeEvent, ChangeKind
from designflow.domain.models.design_request import DesignRequest, PipelineStatus
from designflow.domain.models.view import RecordQuery
from designflow.domain.providers.interfaces import ChangeFeed, RecordStore

_WRITABLE_FIELDS = {
    field.name for field in dataclass_fields(DesignRequest) if field.name != "id"
}


class InMemoryRecordStore(RecordStore):
    def __init__(
        self,
        collection: str = "desains",
        change_feed: Optional[ChangeFeed] = None,
    ) -> None:
        self.collection = collection
        self.change_feed = change_feed
        self._store: Dict[str, DesignRequest] = {}

    async def insert(self, request: DesignRequest) -> DesignRequest:
        self._store[request.id] = copy.deepcopy(request)
        await self._notify(ChangeKind.INSERT, request.id)
        return copy.deepcopy(request)

    async def delete(self, request_id: str) -> None:
        self._store.pop(request_id, None)
        await self._notify(ChangeKind.DELETE, request_id)

    async def query(self, query: RecordQuery) -> list[DesignRequest]:
        term = (query.client_name_like or "").casefold()
        matches = [
            record
            for record in self._store.values()
            if record.status in query.statuses
            and (not term or term in record.client_name.casefold())
        ]
        matches.sort(key=lambda record: record.created_at, reverse=not query.ascending)
        return [copy.deepcopy(record) for record in matches]

    async def get(self, request_id: str) -> DesignRequest:
        try:
            return copy.deepcopy(self._store[request_id])
        except KeyError as exc:
            raise FetchFailure(f"Design request {request_id} not found") from exc

    async def update(self, request_id: str, fields: Mapping[str, Any]) -> None:
        record = self._store.get(request_id)
        if record is None:
            raise MutationFailure(f"Design request {request_id} not found")
        unknown = set(fields) - _WRITABLE_FIELDS
        if unknown:
            raise MutationFailure(f"Unknown or immutable fields: {sorted(unknown)}")
        changes = dict(fields)
        if "status" in changes:
            changes["status"] = PipelineStatus(changes["status"])
        for name in ("reference_files", "deliverable_files"):
            if name in changes:
                changes[name] = list(changes[name])
        self._store[request_id] = replace(record, **changes)
        await self._notify(ChangeKind.UPDATE, request_id)

    async def _notify(self, kind: ChangeKind, request_id: str) -> None:
        if self.change_feed is None:
            return
        event = ChangeEvent(kind=kind, collection=self.collection, payload={"id": request_id})
        await self.change_feed.publish(self.collection, event)


def from_env(change_feed: Optional[ChangeFeed] = None) -> InMemoryRecordStore:
    collection = settings.RECORD_COLLECTION
    return InMemoryRecordStore(collection=collection, change_feed=change_feed)
