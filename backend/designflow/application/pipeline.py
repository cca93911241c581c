"""Pipeline controller: working set, optimistic edits and reconciliation for one view."""

from __future__ import annotations

import asyncio
import logging
import time
from collections import defaultdict
from collections.abc import AsyncIterator, Callable
from contextlib import asynccontextmanager
from typing import TYPE_CHECKING, Any, Dict, List, Optional, Tuple

from designflow.application.debounce import Debouncer
from designflow.application.messages import MessageCatalog
from designflow.domain.errors import (
    FetchFailure,
    MutationFailure,
    ReferenceResolutionFailure,
    StorageFailure,
    UploadFailure,
)
from designflow.domain.models.design_request import (
    DesignRequest,
    PipelineStatus,
    allowed_transitions,
    append_deliverable,
    remove_deliverable,
)
from designflow.domain.models.files import file_label
from designflow.domain.models.view import BriefingEditSession, RecordQuery, ViewPolicy

if TYPE_CHECKING:
    from designflow.domain.providers.interfaces import ObjectStorage, RecordStore

logger = logging.getLogger(__name__)

DEFAULT_SEARCH_DELAY = 0.5


class ReadOnlyView(PermissionError):
    """Raised when a write is attempted through a read-only view."""


class PipelineController:
    """Cached projection of one status-filtered slice of the design request collection.

    The working set in :attr:`requests` is never authoritative: every
    successful fetch replaces it wholesale, and any failed write triggers a
    fresh fetch instead of undoing the optimistic edit. Results of
    asynchronous calls are only applied while the view is active and the
    search term they were issued for is still current.
    """

    def __init__(
        self,
        store: "RecordStore",
        storage: "ObjectStorage",
        view: ViewPolicy,
        *,
        bucket: str,
        messages: Optional[MessageCatalog] = None,
        search_delay: float = DEFAULT_SEARCH_DELAY,
        clock: Callable[[], float] = time.time,
    ) -> None:
        self.store = store
        self.storage = storage
        self.view = view
        self.bucket = bucket
        self.messages = messages or MessageCatalog()
        self.requests: List[DesignRequest] = []
        self.error: Optional[str] = None
        self.loading = False
        self.search = ""
        self._clock = clock
        self._active = False
        self._generation = 0
        self._seen_in_flight: set[str] = set()
        self._record_locks: Dict[str, asyncio.Lock] = {}
        self._lock_users: Dict[str, int] = defaultdict(int)
        self._search_debouncer = Debouncer(search_delay, self.refresh)

    # lifecycle ---------------------------------------------------------

    @property
    def active(self) -> bool:
        return self._active

    async def activate(self) -> bool:
        self._active = True
        self._generation += 1
        logger.debug("Pipeline view activated", extra={"view": self.view.key})
        return await self.refresh()

    def deactivate(self) -> None:
        self._active = False
        self._generation += 1
        self._search_debouncer.cancel()
        logger.debug("Pipeline view deactivated", extra={"view": self.view.key})

    # reads -------------------------------------------------------------

    def find(self, request_id: str) -> Optional[DesignRequest]:
        for record in self.requests:
            if record.id == request_id:
                return record
        return None

    def transitions_for(self, request_id: str) -> list[PipelineStatus]:
        """Target states offered for a request shown in this view."""
        if self.view.read_only:
            return []
        record = self._require(request_id)
        return allowed_transitions(record.status)

    async def refresh(self) -> bool:
        """Replace the working set with a fresh authoritative query."""
        if not self._active:
            return False
        token = self._token()
        query = RecordQuery.for_view(self.view, self.search)
        self.loading = True
        try:
            records = await self.store.query(query)
        except FetchFailure as exc:
            logger.warning(
                "Failed to fetch design requests",
                extra={"view": self.view.key, "error": str(exc)},
            )
            if self._is_current(token):
                self.loading = False
                self.error = self.messages.get("fetch_failed")
            return False
        if not self._is_current(token):
            logger.debug("Discarding stale fetch result", extra={"view": self.view.key})
            return False
        self.loading = False
        self.requests = list(records)
        self.error = None
        return True

    def set_search(self, text: str) -> None:
        """Update the client-name filter; the query fires after the quiescence delay."""
        if text == self.search:
            return
        self.search = text
        if self._active:
            self._search_debouncer.trigger()

    @property
    def search_pending(self) -> bool:
        return self._search_debouncer.pending

    # status ------------------------------------------------------------

    async def change_status(self, request_id: str, target: PipelineStatus) -> bool:
        self._ensure_writable()
        record = self._require(request_id)
        if not record.check_transition(target):
            return False

        if self.view.includes(target):
            self._replace(record.with_status(target))
        else:
            self.requests = [item for item in self.requests if item.id != request_id]

        logger.info(
            "Updating design request status",
            extra={"request_id": request_id, "from": record.status.value, "to": target.value},
        )
        try:
            await self.store.update(request_id, {"status": target})
        except MutationFailure as exc:
            await self._reconcile_after("status_failed", request_id, exc)
            return False
        return True

    # briefing ----------------------------------------------------------

    def open_editor(self, request_id: str) -> BriefingEditSession:
        self._ensure_writable()
        record = self._require(request_id)
        return BriefingEditSession(
            request_id=request_id,
            original_text=record.briefing_text,
            text=record.briefing_text,
        )

    def discard(self, session: BriefingEditSession) -> None:
        session.close()

    async def save_briefing(self, session: BriefingEditSession) -> bool:
        """Write the edited text and reset ``briefing_seen`` in one mutation.

        On failure the session stays open with its text so the designer can
        retry; nothing is rolled back.
        """
        self._ensure_writable()
        if session.closed:
            raise ValueError(f"Edit session for {session.request_id} is closed")
        fields = {"briefing_text": session.text, "briefing_seen": False}
        try:
            await self.store.update(session.request_id, fields)
        except MutationFailure as exc:
            logger.warning(
                "Failed to update briefing",
                extra={"request_id": session.request_id, "error": str(exc)},
            )
            self.error = self.messages.get("briefing_failed")
            return False

        record = self.find(session.request_id)
        if self._active and record is not None:
            self._replace(record.with_briefing(session.text))
        session.close()
        return True

    async def mark_seen(self, request_id: str) -> bool:
        """Acknowledge an unseen briefing; repeated triggers are ignored."""
        if self.view.read_only:
            return False
        record = self.find(request_id)
        if record is None or record.briefing_seen or request_id in self._seen_in_flight:
            return False

        self._seen_in_flight.add(request_id)
        self._replace(record.with_briefing_seen())
        try:
            await self.store.update(request_id, {"briefing_seen": True})
        except MutationFailure as exc:
            await self._reconcile_after("seen_failed", request_id, exc)
            return False
        finally:
            self._seen_in_flight.discard(request_id)
        return True

    # deliverables ------------------------------------------------------

    async def upload_deliverable(
        self,
        request_id: str,
        filename: str,
        payload: bytes,
        *,
        content_type: Optional[str] = None,
    ) -> Optional[str]:
        """Store ``payload`` and link its public reference to the request.

        Returns the new reference, or ``None`` when any step failed. The
        read-modify-write of the deliverable list is serialized per record
        within this controller only; writers in other processes can still
        race and drop an appended reference.
        """
        self._ensure_writable()
        key = self._deliverable_key(request_id, filename)
        try:
            await self.storage.upload_object(
                self.bucket, key, payload, content_type=content_type
            )
        except UploadFailure as exc:
            logger.warning(
                "Failed to upload deliverable",
                extra={"request_id": request_id, "object_key": key, "error": str(exc)},
            )
            self.error = self.messages.get("upload_failed")
            return None

        uri = self.storage.resolve_public_uri(self.bucket, key)
        async with self._record_lock(request_id):
            try:
                current = await self.store.get(request_id)
            except FetchFailure as exc:
                self._report_orphan(request_id, key, exc)
                self.error = self.messages.get("current_read_failed")
                return None

            files = append_deliverable(current.deliverable_files, uri)
            try:
                await self.store.update(
                    request_id,
                    {"deliverable_files": files, "deliverable_updated_flag": False},
                )
            except MutationFailure as exc:
                self._report_orphan(request_id, key, exc)
                failure: Optional[MutationFailure] = exc
            else:
                failure = None

        if failure is not None:
            await self._reconcile_after("deliverable_link_failed", request_id, failure)
            return None
        if self._active:
            self._replace(current.with_deliverables(files), only_existing=True)
        return uri

    async def delete_deliverable(self, request_id: str, uri: str) -> bool:
        """Delete a stored deliverable, then unlink exactly that reference."""
        self._ensure_writable()
        record = self._require(request_id)
        remaining = remove_deliverable(record.deliverable_files, uri)

        try:
            key = self.storage.object_key(self.bucket, uri)
        except ReferenceResolutionFailure as exc:
            logger.warning(
                "Cannot resolve deliverable reference",
                extra={"request_id": request_id, "uri": uri, "error": str(exc)},
            )
            self.error = self.messages.get("reference_unresolved")
            return False

        try:
            await self.storage.delete_object(self.bucket, key)
        except StorageFailure as exc:
            logger.warning(
                "Failed to delete deliverable object",
                extra={"request_id": request_id, "object_key": key, "error": str(exc)},
            )
            self.error = self.messages.get("deliverable_delete_failed")
            return False

        async with self._record_lock(request_id):
            try:
                await self.store.update(
                    request_id,
                    {"deliverable_files": remaining, "deliverable_updated_flag": False},
                )
            except MutationFailure as exc:
                failure: Optional[MutationFailure] = exc
            else:
                failure = None

        if failure is not None:
            await self._reconcile_after("deliverable_delete_failed", request_id, failure)
            return False
        current = self.find(request_id)
        if self._active and current is not None:
            self._replace(current.with_deliverables(remaining))
        return True

    # helpers -----------------------------------------------------------

    def _token(self) -> Tuple[int, str]:
        return self._generation, self.search

    def _is_current(self, token: Tuple[int, str]) -> bool:
        return self._active and token == self._token()

    def _require(self, request_id: str) -> DesignRequest:
        record = self.find(request_id)
        if record is None:
            raise KeyError(request_id)
        return record

    def _replace(self, record: DesignRequest, *, only_existing: bool = False) -> None:
        updated = [record if item.id == record.id else item for item in self.requests]
        if not only_existing and all(item.id != record.id for item in self.requests):
            updated.append(record)
        self.requests = updated

    @asynccontextmanager
    async def _record_lock(self, request_id: str) -> AsyncIterator[None]:
        """Single writer per record; the lock is dropped once nobody holds or awaits it."""
        lock = self._record_locks.setdefault(request_id, asyncio.Lock())
        self._lock_users[request_id] += 1
        try:
            async with lock:
                yield
        finally:
            self._lock_users[request_id] -= 1
            if not self._lock_users[request_id]:
                del self._lock_users[request_id]
                del self._record_locks[request_id]

    def _ensure_writable(self) -> None:
        if self.view.read_only:
            raise ReadOnlyView(f"View '{self.view.key}' is read-only")

    def _deliverable_key(self, request_id: str, filename: str) -> str:
        name = filename.replace("\\", "/").rsplit("/", 1)[-1] or "file"
        millis = int(self._clock() * 1000)
        return f"{request_id}/{millis}-{name}"

    def _report_orphan(self, request_id: str, key: str, exc: Exception) -> None:
        logger.warning(
            "Deliverable stored but not linked to its request",
            extra={
                "request_id": request_id,
                "bucket": self.bucket,
                "object_key": key,
                "error": str(exc),
            },
        )

    async def _reconcile_after(
        self, message_key: str, request_id: str, exc: Exception
    ) -> None:
        logger.warning(
            "Mutation failed, re-fetching authoritative state",
            extra={"view": self.view.key, "request_id": request_id, "error": str(exc)},
        )
        await self.refresh()
        self.error = self.messages.get(message_key)


def describe(controller: PipelineController) -> Dict[str, Any]:
    """Plain snapshot of a controller's view state."""
    return {
        "view": controller.view.key,
        "title": controller.messages.title(controller.view.key),
        "loading": controller.loading,
        "error": controller.error,
        "search": controller.search,
        "empty_state": (
            controller.messages.empty_state(controller.view.key)
            if not controller.requests
            else None
        ),
        "requests": [
            {
                "id": record.id,
                "client_name": record.client_name,
                "status": record.status.value,
                "briefing_text": record.briefing_text,
                "briefing_seen": record.briefing_seen,
                "reference_files": _file_entries(record.reference_files),
                "deliverable_files": _file_entries(record.deliverable_files),
                "transitions": [
                    status.value for status in controller.transitions_for(record.id)
                ],
            }
            for record in controller.requests
        ],
    }


def _file_entries(uris: List[str]) -> List[Dict[str, str]]:
    return [{"uri": uri, "label": file_label(uri)} for uri in uris]
