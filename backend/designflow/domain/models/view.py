"""Status-filtered views over the design request collection."""

from __future__ import annotations

from dataclasses import dataclass
from typing import Dict, Optional, Tuple

from designflow.domain.models.design_request import PipelineStatus


@dataclass(slots=True, frozen=True)
class ViewPolicy:
    """Which statuses a view shows and in which creation-time order."""

    key: str
    statuses: Tuple[PipelineStatus, ...]
    ascending: bool
    read_only: bool = False

    def includes(self, status: PipelineStatus) -> bool:
        return status in self.statuses


@dataclass(slots=True, frozen=True)
class RecordQuery:
    statuses: Tuple[PipelineStatus, ...]
    ascending: bool
    client_name_like: Optional[str] = None

    @classmethod
    def for_view(cls, view: ViewPolicy, search: str = "") -> "RecordQuery":
        term = search.strip()
        return cls(
            statuses=view.statuses,
            ascending=view.ascending,
            client_name_like=term or None,
        )


NEW_DESIGNS = ViewPolicy(
    key="new",
    statuses=(PipelineStatus.QUEUED, PipelineStatus.IN_PROGRESS),
    ascending=True,
)
REVISION_DESIGNS = ViewPolicy(
    key="revision",
    statuses=(PipelineStatus.REVISION,),
    ascending=False,
)
COMPLETED_DESIGNS = ViewPolicy(
    key="completed",
    statuses=(PipelineStatus.COMPLETED,),
    ascending=False,
    read_only=True,
)

VIEWS: Dict[str, ViewPolicy] = {
    view.key: view for view in (NEW_DESIGNS, REVISION_DESIGNS, COMPLETED_DESIGNS)
}


def get_view(key: str) -> ViewPolicy:
    try:
        return VIEWS[key]
    except KeyError as exc:
        raise KeyError(f"Unknown view '{key}'") from exc


@dataclass(slots=True)
class BriefingEditSession:
    """Unsaved briefing text for one request, owned by whoever opened it."""

    request_id: str
    original_text: str
    text: str
    closed: bool = False

    @property
    def dirty(self) -> bool:
        return self.text != self.original_text

    def close(self) -> None:
        self.closed = True
