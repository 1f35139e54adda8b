"""Thin adapter for interacting with Amazon S3 (or any S3-compatible store)."""

from collections.abc import Iterator, Mapping, Sequence
from typing import Any, Protocol

import boto3

from core.config import ImageStorageConfig


class _Boto3S3Client(Protocol):
    """Internal typing for boto3 S3 client (AWS-facing only)."""

    def put_object(
        self,
        *,
        Bucket: str,
        Key: str,
        Body: bytes,
        ContentType: str,
        Metadata: Mapping[str, str],
    ) -> Any: ...

    def get_object(self, *, Bucket: str, Key: str) -> Mapping[str, Any]: ...

    def head_object(self, *, Bucket: str, Key: str) -> Mapping[str, Any]: ...

    def delete_objects(self, *, Bucket: str, Delete: Mapping[str, Any]) -> Mapping[str, Any]: ...

    def get_paginator(self, operation_name: str) -> Any: ...

    def generate_presigned_url(
        self,
        ClientMethod: str,
        Params: Mapping[str, Any],
        ExpiresIn: int,
    ) -> str: ...


class S3AdapterProtocol(Protocol):
    """Minimal S3 adapter protocol (repository-facing)."""

    def put_object(
        self,
        *,
        key: str,
        body: bytes,
        content_type: str,
        metadata: dict[str, str],
    ) -> None: ...

    def get_object(self, *, key: str) -> Mapping[str, Any]: ...

    def head_object(self, *, key: str) -> Mapping[str, Any]: ...

    def delete_objects(self, *, keys: Sequence[str]) -> Mapping[str, Any]: ...

    def iter_list_pages(self, *, prefix: str, delimiter: str | None = None) -> Iterator[Mapping[str, Any]]: ...

    def generate_presigned_url(
        self,
        *,
        method: str,
        params: dict[str, Any],
        expires_in: int,
    ) -> str: ...


class S3Adapter:
    """Low-level S3 operations (mechanical, no error handling).

    This adapter:
    - Wraps boto3 S3 client bound to one bucket
    - Does NOT handle errors (lets them bubble up)
    - Domain implementations catch and translate errors
    """

    def __init__(self, config: ImageStorageConfig, client: Any | None = None) -> None:
        """Create S3 client from the service configuration."""
        self._bucket = config.bucket_name
        self._client: _Boto3S3Client = client or boto3.client(
            "s3",
            region_name=config.region,
            endpoint_url=config.endpoint_url,
            aws_access_key_id=config.access_key_id,
            aws_secret_access_key=config.secret_access_key,
        )

    @property
    def bucket(self) -> str:
        return self._bucket

    def put_object(
        self,
        *,
        key: str,
        body: bytes,
        content_type: str,
        metadata: dict[str, str],
    ) -> None:
        """Store object in S3.
        Raises boto3 exceptions - caught by domain implementation.
        """
        self._client.put_object(
            Bucket=self._bucket,
            Key=key,
            Body=body,
            ContentType=content_type,
            Metadata=metadata,
        )

    def get_object(self, *, key: str) -> Mapping[str, Any]:
        """Fetch object from S3.
        Raises boto3 exceptions - caught by domain implementation.
        """
        return self._client.get_object(Bucket=self._bucket, Key=key)

    def head_object(self, *, key: str) -> Mapping[str, Any]:
        """Fetch object headers (content type, length) without the body."""
        return self._client.head_object(Bucket=self._bucket, Key=key)

    def delete_objects(self, *, keys: Sequence[str]) -> Mapping[str, Any]:
        """Delete up to 1000 keys in one request.

        The response's ``Errors`` entry lists keys S3 refused to delete;
        interpreting it is left to the caller.
        """
        return self._client.delete_objects(
            Bucket=self._bucket,
            Delete={
                "Objects": [{"Key": key} for key in keys],
                "Quiet": False,
            },
        )

    def iter_list_pages(
        self,
        *,
        prefix: str,
        delimiter: str | None = None,
    ) -> Iterator[Mapping[str, Any]]:
        """Yield every ``list_objects_v2`` page under ``prefix``.

        With a delimiter, first-level groupings arrive in ``CommonPrefixes``.
        """
        params: dict[str, Any] = {"Bucket": self._bucket, "Prefix": prefix}
        if delimiter:
            params["Delimiter"] = delimiter

        paginator = self._client.get_paginator("list_objects_v2")
        yield from paginator.paginate(**params)

    def generate_presigned_url(
        self,
        *,
        method: str,
        params: dict[str, Any],
        expires_in: int,
    ) -> str:
        """Generate a pre-signed S3 URL."""
        return self._client.generate_presigned_url(
            ClientMethod=method,
            Params={**params, "Bucket": self._bucket},
            ExpiresIn=expires_in,
        )
