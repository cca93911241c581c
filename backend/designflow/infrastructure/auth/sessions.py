"""Session providers consulted before a pipeline view is opened."""

from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import Optional

import httpx

from designflow.domain.models.session import Session
from designflow.domain.providers.interfaces import SessionProvider
from designflow.infrastructure import hosted

logger = logging.getLogger(__name__)


@dataclass
class StaticSessionProvider(SessionProvider):
    """Returns a fixed session (or none); for local development and tests."""

    session: Optional[Session] = None

    async def current_session(self) -> Optional[Session]:
        return self.session


class RestSessionProvider(SessionProvider):
    """Resolves the signed-in user from the hosted backend's auth API."""

    def __init__(self, client: httpx.AsyncClient) -> None:
        self.client = client

    async def current_session(self) -> Optional[Session]:
        try:
            response = await self.client.get("/auth/v1/user")
        except httpx.HTTPError as exc:
            logger.warning("Session lookup failed", extra={"error": str(exc)})
            return None
        if response.status_code in (401, 403):
            return None
        if response.status_code >= 400:
            logger.warning(
                "Session lookup rejected",
                extra={"status_code": response.status_code, "detail": hosted.error_detail(response)},
            )
            return None
        try:
            data = response.json()
            user_id = str(data["id"])
        except (KeyError, TypeError, ValueError):
            logger.warning("Unexpected session payload")
            return None
        return Session(
            user_id=user_id,
            email=str(data.get("email") or ""),
            metadata=dict(data.get("user_metadata") or {}),
        )


def from_env() -> StaticSessionProvider:
    return StaticSessionProvider(session=Session(user_id="local-designer"))


def rest_from_env() -> RestSessionProvider:
    return RestSessionProvider(client=hosted.from_env().client())
