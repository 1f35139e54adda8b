"""Abstract contract for image metadata persistence."""

from abc import ABC, abstractmethod

from core.models.image import ImageMetadata


class ImageMetadataRepository(ABC):
    """Contract for storing and retrieving per-image metadata records.

    The bundled implementation keeps a JSON document beside the variants.
    Records are written once and never updated.
    """

    @abstractmethod
    async def save_metadata(self, *, metadata: ImageMetadata) -> None:
        """Persist the metadata record for an image.

        Args:
            metadata: Complete record built at upload time

        Raises:
            ImageUploadFailedError: If the record cannot be written
        """

    @abstractmethod
    async def fetch_metadata(self, *, image_id: str) -> ImageMetadata | None:
        """Fetch the metadata record for a single image.

        Args:
            image_id: Unique image identifier

        Returns:
            The record, or None if it is missing or unreadable

        Raises:
            ImageDownloadFailedError: If the store cannot be reached
        """
