"""S3-backed implementation of ImageStorageRepository."""

from collections.abc import Sequence
from typing import Any

from aws_lambda_powertools import Logger
from botocore.exceptions import BotoCoreError, ClientError
from starlette.concurrency import run_in_threadpool

from core.infrastructure.adapters.s3_adapter import S3AdapterProtocol
from core.models.errors import (
    ImageDeletionFailedError,
    ImageDownloadFailedError,
    ImageListFailedError,
    ImageUploadFailedError,
    NotFoundError,
    PresignedUrlError,
)
from core.repositories.storage_repository import ImageStorageRepository, ObjectInfo
from core.utils.constants import DEFAULT_CONTENT_TYPE_FALLBACK, MAX_DELETE_BATCH

logger = Logger(utc=True)

_MISSING_KEY_CODES = frozenset({"NoSuchKey", "404", "NotFound"})


def _is_missing_key(exc: ClientError) -> bool:
    return exc.response.get("Error", {}).get("Code") in _MISSING_KEY_CODES


class S3ImageStorage(ImageStorageRepository):
    """Object storage implementation backed by Amazon S3.

    boto3 is synchronous, so each call is pushed to the thread pool and
    awaited. Failures are translated into domain errors with the boto
    exception chained as the cause.
    """

    def __init__(self, adapter: S3AdapterProtocol) -> None:
        """Create storage using the provided S3 adapter."""
        self._s3 = adapter

    async def put_object(
        self,
        *,
        key: str,
        data: bytes,
        content_type: str,
        metadata: dict[str, str] | None = None,
    ) -> None:
        """Upload bytes to S3 under ``key``."""
        logger.debug(
            "Uploading object",
            extra={"key": key, "size": len(data), "content_type": content_type},
        )

        try:
            await run_in_threadpool(
                self._s3.put_object,
                key=key,
                body=data,
                content_type=content_type,
                metadata=metadata or {},
            )
        except (ClientError, BotoCoreError) as exc:
            logger.error("S3 upload failed", extra={"key": key, "error": str(exc)})
            raise ImageUploadFailedError(
                message="Failed to upload image",
                details={"key": key},
            ) from exc

        logger.info("Object uploaded successfully", extra={"key": key})

    async def get_object(self, *, key: str) -> bytes:
        """Download an object body."""
        logger.debug("Downloading object", extra={"key": key})

        def _read() -> bytes:
            response = self._s3.get_object(key=key)
            body: bytes = response["Body"].read()
            return body

        try:
            return await run_in_threadpool(_read)
        except ClientError as exc:
            if _is_missing_key(exc):
                raise NotFoundError(
                    message="Image not found",
                    details={"key": key},
                ) from exc

            logger.error("S3 download failed", extra={"key": key})
            raise ImageDownloadFailedError(
                message="Failed to retrieve image",
                details={"key": key},
            ) from exc
        except BotoCoreError as exc:
            logger.error("S3 download failed", extra={"key": key})
            raise ImageDownloadFailedError(
                message="Failed to retrieve image",
                details={"key": key},
            ) from exc

    async def head_object(self, *, key: str) -> ObjectInfo:
        """Fetch content type and length of an object."""
        try:
            response = await run_in_threadpool(self._s3.head_object, key=key)
        except ClientError as exc:
            if _is_missing_key(exc):
                raise NotFoundError(
                    message="Image not found",
                    details={"key": key},
                ) from exc

            logger.error("S3 head request failed", extra={"key": key})
            raise ImageDownloadFailedError(
                message="Failed to retrieve image",
                details={"key": key},
            ) from exc
        except BotoCoreError as exc:
            logger.error("S3 head request failed", extra={"key": key})
            raise ImageDownloadFailedError(
                message="Failed to retrieve image",
                details={"key": key},
            ) from exc

        last_modified = response.get("LastModified")
        return ObjectInfo(
            key=key,
            content_type=response.get("ContentType") or DEFAULT_CONTENT_TYPE_FALLBACK,
            content_length=int(response.get("ContentLength") or 0),
            last_modified=last_modified.isoformat() if last_modified else None,
        )

    async def object_exists(self, *, key: str) -> bool:
        try:
            await self.head_object(key=key)
        except NotFoundError:
            return False
        return True

    async def list_keys(self, *, prefix: str) -> list[str]:
        """List every key under ``prefix``, following continuation tokens."""

        def _collect() -> list[str]:
            keys: list[str] = []
            for page in self._s3.iter_list_pages(prefix=prefix):
                keys.extend(item["Key"] for item in page.get("Contents", []))
            return keys

        try:
            keys = await run_in_threadpool(_collect)
        except (ClientError, BotoCoreError) as exc:
            logger.error("S3 listing failed", extra={"prefix": prefix})
            raise ImageListFailedError(
                message="Failed to list images",
                details={"prefix": prefix},
            ) from exc

        logger.debug("Listed keys", extra={"prefix": prefix, "count": len(keys)})
        return keys

    async def list_prefixes(self, *, prefix: str) -> list[str]:
        """List first-level groupings under ``prefix`` using the '/' delimiter."""

        def _collect() -> list[str]:
            prefixes: list[str] = []
            for page in self._s3.iter_list_pages(prefix=prefix, delimiter="/"):
                prefixes.extend(item["Prefix"] for item in page.get("CommonPrefixes", []))
            return prefixes

        try:
            prefixes = await run_in_threadpool(_collect)
        except (ClientError, BotoCoreError) as exc:
            logger.error("S3 listing failed", extra={"prefix": prefix})
            raise ImageListFailedError(
                message="Failed to list images",
                details={"prefix": prefix},
            ) from exc

        logger.debug("Listed groupings", extra={"prefix": prefix, "count": len(prefixes)})
        return prefixes

    async def delete_keys(self, *, keys: Sequence[str]) -> list[str]:
        """Delete keys in batches of at most 1000 (the DeleteObjects limit)."""
        deleted: list[str] = []

        for start in range(0, len(keys), MAX_DELETE_BATCH):
            batch = list(keys[start : start + MAX_DELETE_BATCH])

            try:
                response: Any = await run_in_threadpool(self._s3.delete_objects, keys=batch)
            except (ClientError, BotoCoreError) as exc:
                logger.error(
                    "S3 deletion failed",
                    extra={"batch_size": len(batch), "deleted_so_far": len(deleted)},
                )
                raise ImageDeletionFailedError(
                    message="Failed to delete image",
                    details={"keys": batch},
                ) from exc

            errors = response.get("Errors") or []
            deleted.extend(item["Key"] for item in response.get("Deleted", []))

            if errors:
                logger.error(
                    "S3 refused to delete some objects",
                    extra={"failed_keys": [err.get("Key") for err in errors]},
                )
                raise ImageDeletionFailedError(
                    message="Failed to delete image",
                    details={
                        "failed": [
                            {"key": err.get("Key"), "code": err.get("Code")} for err in errors
                        ],
                    },
                )

        logger.info("Objects deleted successfully", extra={"count": len(deleted)})
        return deleted

    async def generate_presigned_get_url(self, *, key: str, expires_in: int) -> str:
        """Generate a pre-signed S3 URL for reading an object."""
        try:
            url: str = await run_in_threadpool(
                self._s3.generate_presigned_url,
                method="get_object",
                params={"Key": key},
                expires_in=expires_in,
            )
        except (ClientError, BotoCoreError) as exc:
            logger.error("Failed to generate pre-signed URL", extra={"key": key})
            raise PresignedUrlError(
                message="Unable to generate image access URL",
                details={"key": key},
            ) from exc

        return url
