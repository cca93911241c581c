"""Domain objects for client design requests moving through the status pipeline."""

from __future__ import annotations

from dataclasses import dataclass, field, replace
from datetime import datetime, timezone
from enum import Enum
from typing import Dict, List


def _utcnow() -> datetime:
    return datetime.now(timezone.utc)


class PipelineStatus(str, Enum):
    QUEUED = "queued"
    IN_PROGRESS = "in_progress"
    REVISION = "revision"
    COMPLETED = "completed"


class InvalidTransition(ValueError):
    """Raised when a status change does not follow the pipeline table."""

    def __init__(self, current: PipelineStatus, target: PipelineStatus) -> None:
        super().__init__(f"Invalid transition {current.value} -> {target.value}")
        self.current = current
        self.target = target


_ALLOWED_TRANSITIONS: Dict[PipelineStatus, List[PipelineStatus]] = {
    PipelineStatus.QUEUED: [PipelineStatus.IN_PROGRESS, PipelineStatus.REVISION],
    PipelineStatus.IN_PROGRESS: [PipelineStatus.QUEUED, PipelineStatus.REVISION],
    PipelineStatus.REVISION: [PipelineStatus.IN_PROGRESS, PipelineStatus.COMPLETED],
    PipelineStatus.COMPLETED: [],
}


def allowed_transitions(status: PipelineStatus) -> list[PipelineStatus]:
    return list(_ALLOWED_TRANSITIONS[status])


def is_terminal(status: PipelineStatus) -> bool:
    return not _ALLOWED_TRANSITIONS[status]


@dataclass(slots=True)
class DesignRequest:
    id: str
    client_name: str
    briefing_date: datetime
    status: PipelineStatus = PipelineStatus.QUEUED
    briefing_text: str = ""
    briefing_seen: bool = False
    reference_files: List[str] = field(default_factory=list)
    deliverable_files: List[str] = field(default_factory=list)
    deliverable_updated_flag: bool = True
    created_at: datetime = field(default_factory=_utcnow)

    def check_transition(self, target: PipelineStatus) -> bool:
        """Validate a move to ``target``.

        Returns ``False`` when ``target`` is the current status (nothing to do)
        and raises :class:`InvalidTransition` for edges outside the table.
        """
        if target == self.status:
            return False
        if target not in _ALLOWED_TRANSITIONS[self.status]:
            raise InvalidTransition(self.status, target)
        return True

    def with_status(self, target: PipelineStatus) -> "DesignRequest":
        self.check_transition(target)
        return replace(self, status=target)

    def with_briefing(self, text: str) -> "DesignRequest":
        return replace(self, briefing_text=text, briefing_seen=False)

    def with_briefing_seen(self) -> "DesignRequest":
        return replace(self, briefing_seen=True)

    def with_deliverables(self, files: List[str]) -> "DesignRequest":
        return replace(
            self, deliverable_files=list(files), deliverable_updated_flag=False
        )


def append_deliverable(files: List[str], uri: str) -> List[str]:
    """Return ``files`` with ``uri`` appended, keeping entries unique."""
    if uri in files:
        return list(files)
    return [*files, uri]


def remove_deliverable(files: List[str], uri: str) -> List[str]:
    """Return ``files`` without the exact ``uri``; raise ``KeyError`` if absent."""
    if uri not in files:
        raise KeyError(uri)
    remaining = list(files)
    remaining.remove(uri)
    return remaining
