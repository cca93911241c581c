"""Connection settings shared by the hosted backend adapters."""

from __future__ import annotations

from dataclasses import dataclass
from typing import Dict, Optional

import httpx

from designflow.config import settings


@dataclass(frozen=True)
class HostedBackend:
    """Base URL and credentials of the hosted data/storage/auth backend."""

    base_url: str
    api_key: str = ""
    access_token: str = ""
    timeout: Optional[float] = 30.0

    def __post_init__(self) -> None:
        if not self.base_url:
            raise ValueError("base_url is required")
        object.__setattr__(self, "base_url", self.base_url.rstrip("/"))

    def headers(self) -> Dict[str, str]:
        headers: Dict[str, str] = {}
        if self.api_key:
            headers["apikey"] = self.api_key
        bearer = self.access_token or self.api_key
        if bearer:
            headers["Authorization"] = f"Bearer {bearer}"
        return headers

    def client(self, transport: Optional[httpx.AsyncBaseTransport] = None) -> httpx.AsyncClient:
        return httpx.AsyncClient(
            base_url=self.base_url,
            headers=self.headers(),
            timeout=httpx.Timeout(self.timeout),
            transport=transport,
        )


def error_detail(response: httpx.Response) -> str:
    try:
        data = response.json()
    except ValueError:
        return response.text or response.reason_phrase
    if isinstance(data, dict):
        for key in ("message", "msg", "error_description", "error"):
            if data.get(key):
                return str(data[key])
    return response.text or response.reason_phrase


def from_env() -> HostedBackend:
    return HostedBackend(
        base_url=settings.BACKEND_URL,
        api_key=settings.BACKEND_API_KEY,
        access_token=settings.BACKEND_ACCESS_TOKEN,
        timeout=settings.BACKEND_TIMEOUT_SECONDS,
    )
