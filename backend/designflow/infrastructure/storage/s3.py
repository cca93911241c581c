"""S3-compatible object storage (AWS, MinIO) for deliverables."""

from __future__ import annotations

import logging
from typing import Any, Optional
from urllib.parse import quote

import anyio
import boto3
from botocore.config import Config
from botocore.exceptions import BotoCoreError, ClientError

from designflow.config import settings
from designflow.domain.errors import ReferenceResolutionFailure, StorageFailure, UploadFailure
from designflow.domain.models.files import key_from_public_uri
from designflow.domain.providers.interfaces import ObjectStorage

logger = logging.getLogger(__name__)


class S3ObjectStorage(ObjectStorage):
    """Blocking boto3 calls are run on a worker thread so the event loop stays free."""

    def __init__(
        self,
        client: Any,
        *,
        public_base_url: str = "",
        region: str = "us-east-1",
    ) -> None:
        self.client = client
        self.public_base_url = public_base_url.rstrip("/")
        self.region = region

    async def upload_object(
        self,
        bucket: str,
        key: str,
        payload: bytes,
        *,
        content_type: Optional[str] = None,
    ) -> None:
        def do_upload() -> None:
            self.client.put_object(
                Bucket=bucket,
                Key=key,
                Body=payload,
                ContentType=content_type or "application/octet-stream",
            )

        try:
            await anyio.to_thread.run_sync(do_upload)
        except (BotoCoreError, ClientError) as exc:
            raise UploadFailure(f"Upload of s3://{bucket}/{key} failed: {exc}") from exc
        logger.debug("Stored object in s3", extra={"bucket": bucket, "object_key": key})

    async def delete_object(self, bucket: str, key: str) -> None:
        def do_delete() -> None:
            self.client.delete_object(Bucket=bucket, Key=key)

        try:
            await anyio.to_thread.run_sync(do_delete)
        except (BotoCoreError, ClientError) as exc:
            raise StorageFailure(f"Delete of s3://{bucket}/{key} failed: {exc}") from exc
        logger.debug("Deleted object from s3", extra={"bucket": bucket, "object_key": key})

    def resolve_public_uri(self, bucket: str, key: str) -> str:
        return f"{self._public_prefix(bucket)}{quote(key)}"

    def object_key(self, bucket: str, uri: str) -> str:
        key = key_from_public_uri(uri, self._public_prefix(bucket))
        if key is None:
            raise ReferenceResolutionFailure(f"{uri} is not an object of s3://{bucket}")
        return key

    def _public_prefix(self, bucket: str) -> str:
        if self.public_base_url:
            return f"{self.public_base_url}/{bucket}/"
        return f"https://{bucket}.s3.{self.region}.amazonaws.com/"


def from_env() -> S3ObjectStorage:
    endpoint = settings.S3_ENDPOINT_URL
    region = settings.S3_REGION
    use_ssl = settings.S3_USE_SSL
    public_base_url = settings.S3_PUBLIC_BASE_URL
    if not public_base_url and endpoint:
        public_base_url = endpoint
    session = boto3.session.Session()
    client = session.client(
        "s3",
        endpoint_url=endpoint,
        region_name=region,
        use_ssl=use_ssl,
        config=Config(s3={"addressing_style": "path"}),
    )
    return S3ObjectStorage(client, public_base_url=public_base_url, region=region)
