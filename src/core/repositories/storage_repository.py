"""Abstract contract for key-level object storage."""

from abc import ABC, abstractmethod
from collections.abc import Sequence
from dataclasses import dataclass


@dataclass(frozen=True)
class ObjectInfo:
    """Headers of a stored object."""

    key: str
    content_type: str
    content_length: int
    last_modified: str | None = None


class ImageStorageRepository(ABC):
    """Contract for storing, inspecting and listing objects by key.

    Implementations could be S3, MinIO, GCS interop, etc.
    The service depends on this interface, not the implementation.
    Every method is a coroutine; blocking clients run off the event loop.
    """

    @abstractmethod
    async def put_object(
        self,
        *,
        key: str,
        data: bytes,
        content_type: str,
        metadata: dict[str, str] | None = None,
    ) -> None:
        """Write ``data`` under ``key``.

        Raises:
            ImageUploadFailedError: If the write fails
        """

    @abstractmethod
    async def get_object(self, *, key: str) -> bytes:
        """Read the full body stored under ``key``.

        Raises:
            NotFoundError: If the key does not exist
            ImageDownloadFailedError: If the read fails
        """

    @abstractmethod
    async def head_object(self, *, key: str) -> ObjectInfo:
        """Return the headers stored for ``key``.

        Raises:
            NotFoundError: If the key does not exist
            ImageDownloadFailedError: If the request fails
        """

    @abstractmethod
    async def object_exists(self, *, key: str) -> bool:
        """Return True if ``key`` exists.

        Raises:
            ImageDownloadFailedError: If existence cannot be determined
        """

    @abstractmethod
    async def list_keys(self, *, prefix: str) -> list[str]:
        """Return every key under ``prefix`` (all pages).

        Raises:
            ImageListFailedError: If listing fails
        """

    @abstractmethod
    async def list_prefixes(self, *, prefix: str) -> list[str]:
        """Return first-level groupings under ``prefix`` in listing order.

        Raises:
            ImageListFailedError: If listing fails
        """

    @abstractmethod
    async def delete_keys(self, *, keys: Sequence[str]) -> list[str]:
        """Delete ``keys`` and return the keys removed.

        Raises:
            ImageDeletionFailedError: If any key could not be deleted
        """

    @abstractmethod
    async def generate_presigned_get_url(self, *, key: str, expires_in: int) -> str:
        """Return a time-limited GET URL for ``key``.

        Raises:
            PresignedUrlError: If signing fails
        """
