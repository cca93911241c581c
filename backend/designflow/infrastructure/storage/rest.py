"""Object storage backed by the hosted backend's storage HTTP API."""

from __future__ import annotations

import logging
from typing import Optional
from urllib.parse import quote

import httpx

from designflow.domain.errors import ReferenceResolutionFailure, StorageFailure, UploadFailure
from designflow.domain.models.files import key_from_public_uri
from designflow.domain.providers.interfaces import ObjectStorage
from designflow.infrastructure import hosted

logger = logging.getLogger(__name__)


class RestObjectStorage(ObjectStorage):
    """Uploads and deletes objects under ``/storage/v1/object``.

    Public references point at ``/storage/v1/object/public/<bucket>/<key>``,
    so buckets used here must be configured as public on the backend.
    """

    def __init__(self, client: httpx.AsyncClient, public_base_url: str) -> None:
        self.client = client
        self.public_base_url = public_base_url.rstrip("/")

    async def upload_object(
        self,
        bucket: str,
        key: str,
        payload: bytes,
        *,
        content_type: Optional[str] = None,
    ) -> None:
        headers = {
            "Content-Type": content_type or "application/octet-stream",
            "x-upsert": "false",
        }
        try:
            response = await self.client.post(
                self._object_path(bucket, key), content=payload, headers=headers
            )
        except httpx.HTTPError as exc:
            raise UploadFailure(f"Upload of {bucket}/{key} failed: {exc}") from exc
        if response.status_code >= 400:
            logger.error(
                "Object upload rejected",
                extra={"bucket": bucket, "object_key": key, "status_code": response.status_code},
            )
            raise UploadFailure(hosted.error_detail(response))

    async def delete_object(self, bucket: str, key: str) -> None:
        try:
            response = await self.client.delete(self._object_path(bucket, key))
        except httpx.HTTPError as exc:
            raise StorageFailure(f"Delete of {bucket}/{key} failed: {exc}") from exc
        if response.status_code >= 400:
            logger.error(
                "Object delete rejected",
                extra={"bucket": bucket, "object_key": key, "status_code": response.status_code},
            )
            raise StorageFailure(hosted.error_detail(response))

    def resolve_public_uri(self, bucket: str, key: str) -> str:
        return f"{self._public_prefix(bucket)}{quote(key)}"

    def object_key(self, bucket: str, uri: str) -> str:
        key = key_from_public_uri(uri, self._public_prefix(bucket))
        if key is None:
            raise ReferenceResolutionFailure(f"{uri} is not a public object of {bucket}")
        return key

    async def aclose(self) -> None:
        await self.client.aclose()

    def _object_path(self, bucket: str, key: str) -> str:
        return f"/storage/v1/object/{quote(bucket)}/{quote(key)}"

    def _public_prefix(self, bucket: str) -> str:
        return f"{self.public_base_url}/storage/v1/object/public/{quote(bucket)}/"


def from_env() -> RestObjectStorage:
    backend = hosted.from_env()
    return RestObjectStorage(client=backend.client(), public_base_url=backend.base_url)
