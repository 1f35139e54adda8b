import pytest
from botocore.exceptions import ClientError

from core.infrastructure.adapters.s3_adapter import S3Adapter


@pytest.fixture
def adapter(s3_bucket, make_config) -> S3Adapter:
    return S3Adapter(make_config())


class TestS3Adapter:
    def test_put_and_get_object_success(self, adapter, s3_get_object) -> None:
        adapter.put_object(
            key="abc/original/abc.jpg",
            body=b"image-bytes",
            content_type="image/jpeg",
            metadata={"image-id": "abc"},
        )

        assert s3_get_object("abc/original/abc.jpg") == b"image-bytes"
        assert adapter.get_object(key="abc/original/abc.jpg")["Body"].read() == b"image-bytes"

    def test_head_object(self, adapter, s3_put_object) -> None:
        s3_put_object("abc/original/abc.png", b"12345", "image/png")

        response = adapter.head_object(key="abc/original/abc.png")

        assert response["ContentType"] == "image/png"
        assert response["ContentLength"] == 5

    def test_get_object_missing_key_raises_client_error(self, adapter) -> None:
        with pytest.raises(ClientError) as exc:
            adapter.get_object(key="missing.jpg")

        assert exc.value.response["Error"]["Code"] == "NoSuchKey"

    def test_head_object_missing_key_raises_client_error(self, adapter) -> None:
        with pytest.raises(ClientError) as exc:
            adapter.head_object(key="missing.jpg")

        assert exc.value.response["Error"]["Code"] in ("404", "NoSuchKey")

    def test_delete_objects(self, adapter, s3_put_object, s3_list_keys) -> None:
        s3_put_object("abc/original/abc.png", b"1")
        s3_put_object("abc/thumb/abc.png", b"2")
        s3_put_object("other/original/other.png", b"3")

        response = adapter.delete_objects(keys=["abc/original/abc.png", "abc/thumb/abc.png"])

        assert sorted(item["Key"] for item in response["Deleted"]) == [
            "abc/original/abc.png",
            "abc/thumb/abc.png",
        ]
        assert s3_list_keys() == ["other/original/other.png"]

    def test_iter_list_pages_with_delimiter(self, adapter, s3_put_object) -> None:
        s3_put_object("uploads/a/original/a.png", b"1")
        s3_put_object("uploads/a/thumb/a.png", b"1")
        s3_put_object("uploads/b/original/b.png", b"1")

        prefixes = [
            item["Prefix"]
            for page in adapter.iter_list_pages(prefix="uploads/", delimiter="/")
            for item in page.get("CommonPrefixes", [])
        ]

        assert prefixes == ["uploads/a/", "uploads/b/"]

    def test_iter_list_pages_without_delimiter(self, adapter, s3_put_object) -> None:
        s3_put_object("a/original/a.png", b"1")
        s3_put_object("a/thumb/a.png", b"1")

        keys = [item["Key"] for page in adapter.iter_list_pages(prefix="a/") for item in page.get("Contents", [])]

        assert keys == ["a/original/a.png", "a/thumb/a.png"]

    def test_generate_presigned_url(self, adapter) -> None:
        url = adapter.generate_presigned_url(
            method="get_object",
            params={"Key": "abc/thumb/abc.png"},
            expires_in=60,
        )

        assert "test-image-bucket" in url
        assert "abc/thumb/abc.png" in url

    def test_put_object_bubbles_client_error(self, monkeypatch, adapter) -> None:
        def raise_error(**_):
            raise ClientError({"Error": {"Code": "InternalError"}}, "PutObject")

        monkeypatch.setattr(adapter._client, "put_object", raise_error)

        with pytest.raises(ClientError):
            adapter.put_object(key="x.jpg", body=b"data", content_type="image/jpeg", metadata={})

    def test_bucket_property(self, adapter) -> None:
        assert adapter.bucket == "test-image-bucket"
