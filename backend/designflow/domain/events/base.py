"""Change notifications emitted for the design request collection."""

from __future__ import annotations

from dataclasses import dataclass, field
from datetime import datetime, timezone
from enum import Enum
from typing import Any, Mapping


class ChangeKind(str, Enum):
    INSERT = "INSERT"
    UPDATE = "UPDATE"
    DELETE = "DELETE"


@dataclass(slots=True, frozen=True)
class ChangeEvent:
    kind: ChangeKind
    collection: str
    payload: Mapping[str, Any] = field(default_factory=dict)
    timestamp: datetime = field(default_factory=lambda: datetime.now(timezone.utc))

    def as_dict(self) -> dict[str, Any]:
        return {
            "kind": self.kind.value,
            "collection": self.collection,
            "payload": dict(self.payload),
            "timestamp": self.timestamp.isoformat(),
        }

    @classmethod
    def from_dict(cls, data: Mapping[str, Any]) -> "ChangeEvent":
        raw_timestamp = data.get("timestamp")
        timestamp = (
            datetime.fromisoformat(str(raw_timestamp))
            if raw_timestamp
            else datetime.now(timezone.utc)
        )
        return cls(
            kind=ChangeKind(str(data.get("kind", "")).upper()),
            collection=str(data.get("collection", "")),
            payload=dict(data.get("payload") or {}),
            timestamp=timestamp,
        )
