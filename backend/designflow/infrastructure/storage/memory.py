"""In-memory object storage used for local development and unit tests."""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Dict, Optional, Tuple
from urllib.parse import quote

from designflow.domain.errors import ReferenceResolutionFailure, StorageFailure, UploadFailure
from designflow.domain.models.files import key_from_public_uri
from designflow.domain.providers.interfaces import ObjectStorage


@dataclass
class StoredObject:
    payload: bytes
    content_type: str


@dataclass
class InMemoryObjectStorage(ObjectStorage):
    scheme: str = "memory"
    _objects: Dict[Tuple[str, str], StoredObject] = field(default_factory=dict, init=False)

    async def upload_object(
        self,
        bucket: str,
        key: str,
        payload: bytes,
        *,
        content_type: Optional[str] = None,
    ) -> None:
        if (bucket, key) in self._objects:
            raise UploadFailure(f"Object {bucket}/{key} already exists")
        self._objects[(bucket, key)] = StoredObject(
            payload=bytes(payload),
            content_type=content_type or "application/octet-stream",
        )

    async def delete_object(self, bucket: str, key: str) -> None:
        if self._objects.pop((bucket, key), None) is None:
            raise StorageFailure(f"Object {bucket}/{key} not found")

    def resolve_public_uri(self, bucket: str, key: str) -> str:
        return f"{self.scheme}://{bucket}/{quote(key)}"

    def object_key(self, bucket: str, uri: str) -> str:
        key = key_from_public_uri(uri, f"{self.scheme}://{bucket}/")
        if key is None:
            raise ReferenceResolutionFailure(f"{uri} is not stored in {bucket}")
        return key

    def get(self, bucket: str, key: str) -> Optional[StoredObject]:
        return self._objects.get((bucket, key))

    def keys(self, bucket: str) -> list[str]:
        return sorted(key for stored_bucket, key in self._objects if stored_bucket == bucket)


def from_env() -> InMemoryObjectStorage:
    return InMemoryObjectStorage()
