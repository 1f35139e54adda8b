"""
Pytest configuration and fixtures for image storage tests.
Provides AWS mocking, S3 fixtures with proper cleanup and generated images.
"""

import asyncio
import io
import os
from collections.abc import Callable
from typing import Any

import boto3
import pytest
from botocore.exceptions import ClientError
from moto import mock_aws
from PIL import Image

from core.config import ImageStorageConfig
from core.models.errors import (
    ImageDeletionFailedError,
    ImageDownloadFailedError,
    ImageUploadFailedError,
    NotFoundError,
)
from core.repositories.storage_repository import ImageStorageRepository, ObjectInfo

os.environ["AWS_REGION"] = "us-east-1"
os.environ["AWS_DEFAULT_REGION"] = "us-east-1"
os.environ["AWS_ACCESS_KEY_ID"] = "testing"
os.environ["AWS_SECRET_ACCESS_KEY"] = "testing"
os.environ["IMAGE_S3_BUCKET_NAME"] = "test-image-bucket"
os.environ["POWERTOOLS_TRACE_DISABLED"] = "1"
os.environ["POWERTOOLS_METRICS_NAMESPACE"] = "ImageStorageTests"
os.environ["POWERTOOLS_SERVICE_NAME"] = "image-storage"

for _name in (
    "AWS_ENDPOINT_URL",
    "IMAGE_S3_REGION",
    "IMAGE_FOLDER_PATH",
    "IMAGE_KEY_LAYOUT",
    "IMAGE_URL_EXPIRATION_SECONDS",
    "IMAGE_DEFAULT_PAGE_SIZE",
    "IMAGE_MAX_FILE_SIZE_BYTES",
):
    os.environ.pop(_name, None)


@pytest.fixture(scope="function")
def aws_mock():
    with mock_aws():
        yield


@pytest.fixture(scope="function")
def s3_client(aws_mock):
    """S3 client for bucket operations."""
    return boto3.client("s3", region_name=os.getenv("AWS_REGION"))


def _cleanup_s3_objects(s3_client, bucket_name):
    """Helper to delete all objects from S3 bucket efficiently."""
    try:
        paginator = s3_client.get_paginator("list_objects_v2")
        for page in paginator.paginate(Bucket=bucket_name):
            objects = page.get("Contents", [])
            if objects:
                delete_keys = [{"Key": obj["Key"]} for obj in objects]
                s3_client.delete_objects(
                    Bucket=bucket_name, Delete={"Objects": delete_keys}
                )
    except ClientError as e:
        if e.response["Error"]["Code"] != "NoSuchBucket":
            raise


@pytest.fixture(scope="function")
def s3_bucket(s3_client):
    """
    Create and manage S3 bucket for testing.

    Cleanup Strategy:
    - Objects are deleted after each test (teardown)
    - Bucket is NOT deleted (moto cleans up on context exit)
    """
    bucket_name = os.getenv("IMAGE_S3_BUCKET_NAME")

    try:
        s3_client.head_bucket(Bucket=bucket_name)
    except ClientError:
        s3_client.create_bucket(Bucket=bucket_name)

    yield s3_client

    _cleanup_s3_objects(s3_client, bucket_name)


@pytest.fixture
def s3_put_object(s3_client) -> Callable[..., dict[str, Any]]:
    """
    Helper to upload an object to S3.

    Usage:
        response = s3_put_object("abc/original/abc.png", image_bytes, "image/png")
    """

    def _put(key: str, body: bytes, content_type: str = "application/octet-stream"):
        bucket_name = os.getenv("IMAGE_S3_BUCKET_NAME")
        return s3_client.put_object(
            Bucket=bucket_name, Key=key, Body=body, ContentType=content_type
        )

    return _put


@pytest.fixture
def s3_get_object(s3_client) -> Callable[[str], bytes]:
    """
    Helper to get an object from S3.

    Usage:
        content = s3_get_object("abc/original/abc.png")
    """

    def _get(key: str) -> bytes:
        bucket_name = os.getenv("IMAGE_S3_BUCKET_NAME")
        response: dict[str, Any] = s3_client.get_object(Bucket=bucket_name, Key=key)
        data: bytes = response["Body"].read()
        return data

    return _get


@pytest.fixture
def s3_list_keys(s3_client) -> Callable[[str], list[str]]:
    """
    Helper to list every key under a prefix, sorted.

    Usage:
        keys = s3_list_keys("abc/")
    """

    def _list(prefix: str = "") -> list[str]:
        bucket_name = os.getenv("IMAGE_S3_BUCKET_NAME")
        paginator = s3_client.get_paginator("list_objects_v2")
        keys: list[str] = []
        for page in paginator.paginate(Bucket=bucket_name, Prefix=prefix):
            keys.extend(obj["Key"] for obj in page.get("Contents", []))
        return sorted(keys)

    return _list


@pytest.fixture
def make_image() -> Callable[..., bytes]:
    """
    Factory for real encoded images.

    Usage:
        png = make_image("PNG", (50, 50))
    """

    def _make(
        fmt: str = "PNG",
        size: tuple[int, int] = (50, 50),
        mode: str = "RGB",
        color: Any = (200, 30, 30),
    ) -> bytes:
        img = Image.new(mode, size, color=color)
        buf = io.BytesIO()
        img.save(buf, format=fmt)
        return buf.getvalue()

    return _make


@pytest.fixture
def sample_png(make_image) -> bytes:
    """50x50 RGB PNG."""
    return make_image("PNG", (50, 50))


@pytest.fixture
def sample_large_jpeg(make_image) -> bytes:
    """1600x1200 RGB JPEG, larger than every default variant box."""
    return make_image("JPEG", (1600, 1200))


class InMemoryImageStorage(ImageStorageRepository):
    """Dict-backed storage double that records every call.

    ``fail_put``/``fail_head``/``fail_delete`` take a key predicate; a
    matching key raises the same domain error the S3 implementation would.
    """

    def __init__(self) -> None:
        self.objects: dict[str, tuple[bytes, str]] = {}
        self.calls: list[tuple[str, str]] = []
        self.fail_put: Callable[[str], bool] | None = None
        self.fail_head: Callable[[str], bool] | None = None
        self.fail_delete: Callable[[str], bool] | None = None
        self.delete_delay: float = 0.0

    def seed(self, key: str, data: bytes = b"data", content_type: str = "image/png") -> None:
        self.objects[key] = (data, content_type)

    def call_kinds(self) -> set[str]:
        return {kind for kind, _ in self.calls}

    async def put_object(self, *, key, data, content_type, metadata=None) -> None:
        self.calls.append(("put", key))
        if self.fail_put and self.fail_put(key):
            raise ImageUploadFailedError(message="Failed to upload image", details={"key": key})
        self.objects[key] = (data, content_type)

    async def get_object(self, *, key) -> bytes:
        self.calls.append(("get", key))
        if key not in self.objects:
            raise NotFoundError(message="Image not found", details={"key": key})
        return self.objects[key][0]

    async def head_object(self, *, key) -> ObjectInfo:
        self.calls.append(("head", key))
        if self.fail_head and self.fail_head(key):
            raise ImageDownloadFailedError(message="Failed to retrieve image", details={"key": key})
        if key not in self.objects:
            raise NotFoundError(message="Image not found", details={"key": key})
        data, content_type = self.objects[key]
        return ObjectInfo(
            key=key,
            content_type=content_type,
            content_length=len(data),
            last_modified="2024-01-01T00:00:00+00:00",
        )

    async def object_exists(self, *, key) -> bool:
        try:
            await self.head_object(key=key)
        except NotFoundError:
            return False
        return True

    async def list_keys(self, *, prefix) -> list[str]:
        self.calls.append(("list", prefix))
        return sorted(key for key in self.objects if key.startswith(prefix))

    async def list_prefixes(self, *, prefix) -> list[str]:
        self.calls.append(("list_prefixes", prefix))
        prefixes: list[str] = []
        for key in sorted(self.objects):
            if not key.startswith(prefix):
                continue
            remainder = key[len(prefix):]
            if "/" not in remainder:
                continue
            grouping = f"{prefix}{remainder.split('/', 1)[0]}/"
            if grouping not in prefixes:
                prefixes.append(grouping)
        return prefixes

    async def delete_keys(self, *, keys) -> list[str]:
        self.calls.append(("delete", ",".join(keys)))
        if self.delete_delay:
            await asyncio.sleep(self.delete_delay)
        if self.fail_delete and any(self.fail_delete(key) for key in keys):
            raise ImageDeletionFailedError(message="Failed to delete image", details={"keys": list(keys)})
        for key in keys:
            self.objects.pop(key, None)
        return list(keys)

    async def generate_presigned_get_url(self, *, key, expires_in) -> str:
        self.calls.append(("sign", key))
        return f"https://signed.example.com/{key}?expires={expires_in}"


@pytest.fixture
def memory_storage() -> InMemoryImageStorage:
    return InMemoryImageStorage()


@pytest.fixture
def make_config() -> Callable[..., ImageStorageConfig]:
    """
    Factory for a valid service configuration.

    Usage:
        config = make_config(layout="flat", folder_path="uploads")
    """

    def _make(**overrides: Any) -> ImageStorageConfig:
        values: dict[str, Any] = {
            "region": os.environ["AWS_REGION"],
            "bucket_name": os.environ["IMAGE_S3_BUCKET_NAME"],
            "access_key_id": "testing",
            "secret_access_key": "testing",
        }
        values.update(overrides)
        return ImageStorageConfig(**values)

    return _make
