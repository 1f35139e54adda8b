"""Unit tests for S3ImageStorage."""

from datetime import datetime, timezone
from typing import Any

import pytest
from botocore.exceptions import ClientError, EndpointConnectionError

from core.infrastructure.aws.s3_image_storage import S3ImageStorage
from core.models.errors import (
    ImageDeletionFailedError,
    ImageDownloadFailedError,
    ImageListFailedError,
    ImageUploadFailedError,
    NotFoundError,
    PresignedUrlError,
)


def client_error(code: str, operation: str = "Operation") -> ClientError:
    return ClientError({"Error": {"Code": code, "Message": code}}, operation)


class DummyBody:
    """Dummy streaming body returned by S3 get_object."""

    def __init__(self, data: bytes) -> None:
        self._data = data

    def read(self) -> bytes:
        return self._data


class DummyS3Adapter:
    """Configurable S3 adapter test double."""

    def __init__(
        self,
        *,
        put_exc: Exception | None = None,
        get_exc: Exception | None = None,
        head_exc: Exception | None = None,
        list_exc: Exception | None = None,
        delete_exc: Exception | None = None,
        presign_exc: Exception | None = None,
        objects: dict[str, bytes] | None = None,
        pages: list[dict[str, Any]] | None = None,
        delete_errors: list[dict[str, str]] | None = None,
    ) -> None:
        self._put_exc = put_exc
        self._get_exc = get_exc
        self._head_exc = head_exc
        self._list_exc = list_exc
        self._delete_exc = delete_exc
        self._presign_exc = presign_exc
        self._objects = objects or {}
        self._pages = pages or []
        self._delete_errors = delete_errors or []
        self.put_calls: list[dict[str, Any]] = []
        self.delete_batches: list[list[str]] = []
        self.list_calls: list[tuple[str, str | None]] = []

    def put_object(self, **kwargs: Any) -> None:
        if self._put_exc:
            raise self._put_exc
        self.put_calls.append(kwargs)

    def get_object(self, *, key: str) -> dict[str, Any]:
        if self._get_exc:
            raise self._get_exc
        return {"Body": DummyBody(self._objects[key])}

    def head_object(self, *, key: str) -> dict[str, Any]:
        if self._head_exc:
            raise self._head_exc
        return {
            "ContentType": "image/png",
            "ContentLength": len(self._objects[key]),
            "LastModified": datetime(2024, 1, 1, tzinfo=timezone.utc),
        }

    def delete_objects(self, *, keys: list[str]) -> dict[str, Any]:
        if self._delete_exc:
            raise self._delete_exc
        self.delete_batches.append(list(keys))
        failed = {err["Key"] for err in self._delete_errors}
        return {
            "Deleted": [{"Key": key} for key in keys if key not in failed],
            "Errors": [err for err in self._delete_errors if err["Key"] in keys],
        }

    def iter_list_pages(self, *, prefix: str, delimiter: str | None = None):
        self.list_calls.append((prefix, delimiter))
        if self._list_exc:
            raise self._list_exc
        yield from self._pages

    def generate_presigned_url(self, *, method: str, params: dict[str, Any], expires_in: int) -> str:
        if self._presign_exc:
            raise self._presign_exc
        return f"https://example.com/{params['Key']}?method={method}&expires={expires_in}"


class TestPutObject:
    @pytest.mark.asyncio
    async def test_success(self) -> None:
        adapter = DummyS3Adapter()

        await S3ImageStorage(adapter).put_object(key="a/original/a.png", data=b"x", content_type="image/png")

        assert adapter.put_calls == [
            {"key": "a/original/a.png", "body": b"x", "content_type": "image/png", "metadata": {}}
        ]

    @pytest.mark.asyncio
    @pytest.mark.parametrize(
        "exc",
        [client_error("AccessDenied", "PutObject"), EndpointConnectionError(endpoint_url="http://s3")],
    )
    async def test_failure_is_translated(self, exc) -> None:
        storage = S3ImageStorage(DummyS3Adapter(put_exc=exc))

        with pytest.raises(ImageUploadFailedError) as err:
            await storage.put_object(key="a", data=b"x", content_type="image/png")

        assert err.value.__cause__ is exc


class TestGetAndHead:
    @pytest.mark.asyncio
    async def test_get_object(self) -> None:
        storage = S3ImageStorage(DummyS3Adapter(objects={"k": b"bytes"}))

        assert await storage.get_object(key="k") == b"bytes"

    @pytest.mark.asyncio
    @pytest.mark.parametrize("code", ["NoSuchKey", "404", "NotFound"])
    async def test_missing_key_is_not_found(self, code) -> None:
        storage = S3ImageStorage(DummyS3Adapter(get_exc=client_error(code), head_exc=client_error(code)))

        with pytest.raises(NotFoundError):
            await storage.get_object(key="k")
        with pytest.raises(NotFoundError):
            await storage.head_object(key="k")

    @pytest.mark.asyncio
    async def test_other_errors_are_download_failures(self) -> None:
        storage = S3ImageStorage(
            DummyS3Adapter(get_exc=client_error("AccessDenied"), head_exc=client_error("403"))
        )

        with pytest.raises(ImageDownloadFailedError):
            await storage.get_object(key="k")
        with pytest.raises(ImageDownloadFailedError):
            await storage.head_object(key="k")

    @pytest.mark.asyncio
    async def test_head_object_info(self) -> None:
        storage = S3ImageStorage(DummyS3Adapter(objects={"k": b"12345"}))

        info = await storage.head_object(key="k")

        assert info.content_type == "image/png"
        assert info.content_length == 5
        assert info.last_modified == "2024-01-01T00:00:00+00:00"

    @pytest.mark.asyncio
    async def test_object_exists(self) -> None:
        assert await S3ImageStorage(DummyS3Adapter(objects={"k": b"1"})).object_exists(key="k") is True
        assert (
            await S3ImageStorage(DummyS3Adapter(head_exc=client_error("404"))).object_exists(key="k")
            is False
        )

    @pytest.mark.asyncio
    async def test_object_exists_propagates_real_failures(self) -> None:
        storage = S3ImageStorage(DummyS3Adapter(head_exc=client_error("AccessDenied")))

        with pytest.raises(ImageDownloadFailedError):
            await storage.object_exists(key="k")


class TestListing:
    @pytest.mark.asyncio
    async def test_list_keys_follows_every_page(self) -> None:
        adapter = DummyS3Adapter(
            pages=[
                {"Contents": [{"Key": "a/1"}, {"Key": "a/2"}]},
                {"Contents": [{"Key": "a/3"}]},
                {},
            ]
        )

        keys = await S3ImageStorage(adapter).list_keys(prefix="a/")

        assert keys == ["a/1", "a/2", "a/3"]
        assert adapter.list_calls == [("a/", None)]

    @pytest.mark.asyncio
    async def test_list_prefixes_uses_delimiter(self) -> None:
        adapter = DummyS3Adapter(
            pages=[
                {"CommonPrefixes": [{"Prefix": "x/"}, {"Prefix": "y/"}]},
                {"CommonPrefixes": [{"Prefix": "z/"}]},
            ]
        )

        prefixes = await S3ImageStorage(adapter).list_prefixes(prefix="")

        assert prefixes == ["x/", "y/", "z/"]
        assert adapter.list_calls == [("", "/")]

    @pytest.mark.asyncio
    async def test_list_failure(self) -> None:
        storage = S3ImageStorage(DummyS3Adapter(list_exc=client_error("AccessDenied", "ListObjectsV2")))

        with pytest.raises(ImageListFailedError):
            await storage.list_keys(prefix="a/")
        with pytest.raises(ImageListFailedError):
            await storage.list_prefixes(prefix="")


class TestDeleteKeys:
    @pytest.mark.asyncio
    async def test_batches_of_one_thousand(self) -> None:
        adapter = DummyS3Adapter()
        keys = [f"img/{i}" for i in range(2500)]

        deleted = await S3ImageStorage(adapter).delete_keys(keys=keys)

        assert [len(batch) for batch in adapter.delete_batches] == [1000, 1000, 500]
        assert deleted == keys

    @pytest.mark.asyncio
    async def test_empty_key_list_makes_no_request(self) -> None:
        adapter = DummyS3Adapter()

        assert await S3ImageStorage(adapter).delete_keys(keys=[]) == []
        assert adapter.delete_batches == []

    @pytest.mark.asyncio
    async def test_per_key_errors_raise(self) -> None:
        adapter = DummyS3Adapter(delete_errors=[{"Key": "img/2", "Code": "AccessDenied"}])

        with pytest.raises(ImageDeletionFailedError) as exc:
            await S3ImageStorage(adapter).delete_keys(keys=["img/1", "img/2"])

        assert exc.value.details == {"failed": [{"key": "img/2", "code": "AccessDenied"}]}

    @pytest.mark.asyncio
    async def test_request_failure(self) -> None:
        storage = S3ImageStorage(DummyS3Adapter(delete_exc=client_error("InternalError", "DeleteObjects")))

        with pytest.raises(ImageDeletionFailedError):
            await storage.delete_keys(keys=["img/1"])


class TestPresignedUrl:
    @pytest.mark.asyncio
    async def test_success(self) -> None:
        url = await S3ImageStorage(DummyS3Adapter()).generate_presigned_get_url(key="a/thumb/a.png", expires_in=30)

        assert url == "https://example.com/a/thumb/a.png?method=get_object&expires=30"

    @pytest.mark.asyncio
    async def test_failure(self) -> None:
        storage = S3ImageStorage(DummyS3Adapter(presign_exc=client_error("InvalidRequest")))

        with pytest.raises(PresignedUrlError):
            await storage.generate_presigned_get_url(key="a", expires_in=30)
