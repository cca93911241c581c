from __future__ import annotations

from datetime import datetime, timedelta, timezone
from typing import Any, Mapping

from designflow.domain.errors import FetchFailure, MutationFailure
from designflow.domain.models.design_request import DesignRequest, PipelineStatus
from designflow.domain.models.view import RecordQuery
from designflow.infrastructure.repositories.memory import InMemoryRecordStore

BASE_TIME = datetime(2024, 5, 1, 9, 0, tzinfo=timezone.utc)


def build_request(request_id: str, **overrides: Any) -> DesignRequest:
    offset = overrides.pop("offset_minutes", int(request_id) if request_id.isdigit() else 0)
    created = BASE_TIME + timedelta(minutes=offset)
    defaults: dict[str, Any] = {
        "id": request_id,
        "client_name": f"Client {request_id}",
        "briefing_date": created,
        "status": PipelineStatus.QUEUED,
        "briefing_text": "Logo for a coffee shop",
        "briefing_seen": False,
        "created_at": created,
    }
    defaults.update(overrides)
    return DesignRequest(**defaults)


class FlakyRecordStore(InMemoryRecordStore):
    """In-memory store whose next calls can be told to fail."""

    def __init__(self, *args: Any, **kwargs: Any) -> None:
        super().__init__(*args, **kwargs)
        self.fail_queries = 0
        self.fail_gets = 0
        self.fail_updates = 0
        self.queries: list[RecordQuery] = []
        self.updates: list[tuple[str, dict[str, Any]]] = []

    async def query(self, query: RecordQuery) -> list[DesignRequest]:
        self.queries.append(query)
        if self.fail_queries:
            self.fail_queries -= 1
            raise FetchFailure("query unavailable")
        return await super().query(query)

    async def get(self, request_id: str) -> DesignRequest:
        if self.fail_gets:
            self.fail_gets -= 1
            raise FetchFailure("read unavailable")
        return await super().get(request_id)

    async def update(self, request_id: str, fields: Mapping[str, Any]) -> None:
        self.updates.append((request_id, dict(fields)))
        if self.fail_updates:
            self.fail_updates -= 1
            raise MutationFailure("write rejected")
        await super().update(request_id, fields)

    def peek(self, request_id: str) -> DesignRequest:
        return self._store[request_id]
