from __future__ import annotations

import asyncio

import boto3
import pytest
from botocore.stub import Stubber

from designflow.domain.errors import ReferenceResolutionFailure, StorageFailure, UploadFailure
from designflow.infrastructure.storage.s3 import S3ObjectStorage

BUCKET = "hasil_desain"


def _client():
    return boto3.client(
        "s3",
        endpoint_url="http://minio:9000",
        aws_access_key_id="key",
        aws_secret_access_key="secret",
        region_name="us-east-1",
        use_ssl=False,
    )


def test_upload_puts_object_with_content_type():
    client = _client()
    stubber = Stubber(client)
    stubber.add_response(
        "put_object",
        {},
        {
            "Bucket": BUCKET,
            "Key": "7/1714550400500-logo.png",
            "Body": b"png-bytes",
            "ContentType": "image/png",
        },
    )
    stubber.activate()
    storage = S3ObjectStorage(client, public_base_url="http://minio:9000")

    asyncio.run(
        storage.upload_object(
            BUCKET, "7/1714550400500-logo.png", b"png-bytes", content_type="image/png"
        )
    )

    stubber.assert_no_pending_responses()


def test_upload_error_raises_upload_failure():
    client = _client()
    stubber = Stubber(client)
    stubber.add_client_error("put_object", service_error_code="AccessDenied", http_status_code=403)
    stubber.activate()
    storage = S3ObjectStorage(client)

    with pytest.raises(UploadFailure):
        asyncio.run(storage.upload_object(BUCKET, "7/x.png", b"data"))


def test_delete_removes_object_and_reports_errors():
    client = _client()
    stubber = Stubber(client)
    stubber.add_response("delete_object", {}, {"Bucket": BUCKET, "Key": "7/x.png"})
    stubber.add_client_error("delete_object", service_error_code="InternalError", http_status_code=500)
    stubber.activate()
    storage = S3ObjectStorage(client)

    asyncio.run(storage.delete_object(BUCKET, "7/x.png"))
    with pytest.raises(StorageFailure):
        asyncio.run(storage.delete_object(BUCKET, "7/y.png"))

    stubber.assert_no_pending_responses()


def test_public_uri_round_trips_to_object_key():
    storage = S3ObjectStorage(object(), public_base_url="http://minio:9000/")

    uri = storage.resolve_public_uri(BUCKET, "7/1714-logo final.png")

    assert uri == "http://minio:9000/hasil_desain/7/1714-logo%20final.png"
    assert storage.object_key(BUCKET, uri) == "7/1714-logo final.png"


def test_default_public_uri_uses_virtual_host():
    storage = S3ObjectStorage(object(), region="eu-west-3")

    assert (
        storage.resolve_public_uri(BUCKET, "7/a.png")
        == "https://hasil_desain.s3.eu-west-3.amazonaws.com/7/a.png"
    )
    with pytest.raises(ReferenceResolutionFailure):
        storage.object_key(BUCKET, "https://elsewhere.example.com/7/a.png")
