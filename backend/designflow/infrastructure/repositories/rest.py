"""Record store backed by the hosted backend's PostgREST-style HTTP API."""

from __future__ import annotations

import logging
from datetime import datetime, timezone
from typing import Any, Dict, List, Mapping, Optional

import httpx
from pydantic import BaseModel, ConfigDict, Field, field_validator

from designflow.config import settings
from designflow.domain.errors import FetchFailure, MutationFailure
from designflow.domain.models.design_request import DesignRequest, PipelineStatus
from designflow.domain.models.view import RecordQuery
from designflow.domain.providers.interfaces import RecordStore
from designflow.infrastructure import hosted

logger = logging.getLogger(__name__)

STATUS_LABELS: Dict[PipelineStatus, str] = {
    PipelineStatus.QUEUED: "dalam antrian",
    PipelineStatus.IN_PROGRESS: "proses",
    PipelineStatus.REVISION: "revisi",
    PipelineStatus.COMPLETED: "selesai",
}
_STATUS_BY_LABEL = {label: status for status, label in STATUS_LABELS.items()}


class DesignRequestRow(BaseModel):
    """Wire shape of one row in the design request table."""

    model_config = ConfigDict(populate_by_name=True, extra="ignore")

    id: str
    client_name: str = Field(default="", alias="nama_client")
    briefing_date: Optional[datetime] = Field(default=None, alias="tanggal_briefing")
    briefing_text: str = Field(default="", alias="briefing")
    briefing_seen: bool = Field(default=False, alias="briefing_dilihat")
    reference_files: List[str] = Field(default_factory=list, alias="files")
    deliverable_files: List[str] = Field(default_factory=list, alias="hasil_desain")
    deliverable_updated_flag: bool = Field(default=True, alias="hasil_desain_dilihat")
    status: PipelineStatus
    created_at: Optional[datetime] = None

    @field_validator("id", mode="before")
    @classmethod
    def _coerce_id(cls, value: Any) -> str:
        return str(value)

    @field_validator("client_name", "briefing_text", mode="before")
    @classmethod
    def _null_text(cls, value: Any) -> Any:
        return "" if value is None else value

    @field_validator("reference_files", "deliverable_files", mode="before")
    @classmethod
    def _null_list(cls, value: Any) -> Any:
        return [] if value is None else value

    @field_validator("briefing_seen", mode="before")
    @classmethod
    def _null_seen(cls, value: Any) -> Any:
        return False if value is None else value

    @field_validator("deliverable_updated_flag", mode="before")
    @classmethod
    def _null_updated(cls, value: Any) -> Any:
        return True if value is None else value

    @field_validator("status", mode="before")
    @classmethod
    def _decode_status(cls, value: Any) -> Any:
        if isinstance(value, PipelineStatus):
            return value
        return _STATUS_BY_LABEL.get(str(value), value)

    def to_domain(self) -> DesignRequest:
        created_at = self.created_at or self.briefing_date or datetime.now(timezone.utc)
        return DesignRequest(
            id=self.id,
            client_name=self.client_name,
            briefing_date=self.briefing_date or created_at,
            status=self.status,
            briefing_text=self.briefing_text,
            briefing_seen=self.briefing_seen,
            reference_files=list(self.reference_files),
            deliverable_files=list(self.deliverable_files),
            deliverable_updated_flag=self.deliverable_updated_flag,
            created_at=created_at,
        )


def column_for(field_name: str) -> str:
    info = DesignRequestRow.model_fields.get(field_name)
    if info is None:
        raise KeyError(field_name)
    return info.alias or field_name


def encode_fields(fields: Mapping[str, Any]) -> Dict[str, Any]:
    """Translate domain field names and values into a row patch."""
    payload: Dict[str, Any] = {}
    for name, value in fields.items():
        if name == "id":
            raise MutationFailure("The id field is immutable")
        try:
            column = column_for(name)
        except KeyError as exc:
            raise MutationFailure(f"Unknown field: {name}") from exc
        if name == "status":
            value = STATUS_LABELS[PipelineStatus(value)]
        elif isinstance(value, datetime):
            value = value.isoformat()
        elif isinstance(value, (list, tuple)):
            value = list(value)
        payload[column] = value
    return payload


def _escape_like(term: str) -> str:
    return term.replace("\\", "\\\\").replace("%", "\\%").replace("_", "\\_").replace("*", "")


class RestRecordStore(RecordStore):
    def __init__(self, client: httpx.AsyncClient, collection: str = "desains") -> None:
        self.client = client
        self.collection = collection

    @property
    def path(self) -> str:
        return f"/rest/v1/{self.collection}"

    async def query(self, query: RecordQuery) -> list[DesignRequest]:
        statuses = ",".join(f'"{STATUS_LABELS[status]}"' for status in query.statuses)
        params: Dict[str, str] = {
            "select": "*",
            "status": f"in.({statuses})",
            "order": f"created_at.{'asc' if query.ascending else 'desc'}",
        }
        if query.client_name_like:
            params[column_for("client_name")] = f"ilike.*{_escape_like(query.client_name_like)}*"
        return await self._fetch(params)

    async def get(self, request_id: str) -> DesignRequest:
        records = await self._fetch({"select": "*", "id": f"eq.{request_id}"})
        if not records:
            raise FetchFailure(f"Design request {request_id} not found")
        return records[0]

    async def update(self, request_id: str, fields: Mapping[str, Any]) -> None:
        payload = encode_fields(fields)
        try:
            response = await self.client.patch(
                self.path,
                params={"id": f"eq.{request_id}"},
                json=payload,
                headers={"Prefer": "return=representation"},
            )
        except httpx.HTTPError as exc:
            raise MutationFailure(f"Update of {request_id} failed: {exc}") from exc
        if response.status_code >= 400:
            detail = hosted.error_detail(response)
            logger.error(
                "Record update rejected",
                extra={"request_id": request_id, "status_code": response.status_code},
            )
            raise MutationFailure(detail)
        try:
            rows = response.json()
        except ValueError:
            rows = None
        if isinstance(rows, list) and not rows:
            raise MutationFailure(f"Design request {request_id} not found")

    async def aclose(self) -> None:
        await self.client.aclose()

    async def _fetch(self, params: Mapping[str, str]) -> list[DesignRequest]:
        try:
            response = await self.client.get(self.path, params=params)
        except httpx.HTTPError as exc:
            raise FetchFailure(f"Query on {self.collection} failed: {exc}") from exc
        if response.status_code >= 400:
            detail = hosted.error_detail(response)
            logger.error(
                "Record query rejected",
                extra={"collection": self.collection, "status_code": response.status_code},
            )
            raise FetchFailure(detail)
        try:
            return [DesignRequestRow.model_validate(item).to_domain() for item in response.json()]
        except (TypeError, ValueError) as exc:
            raise FetchFailure(f"Malformed {self.collection} payload") from exc


def from_env() -> RestRecordStore:
    backend = hosted.from_env()
    collection = settings.RECORD_COLLECTION
    return RestRecordStore(client=backend.client(), collection=collection)
