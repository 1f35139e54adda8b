"""Metadata records stored as ``metadata.json`` beside an image's variants."""

import json

from aws_lambda_powertools import Logger
from pydantic import ValidationError as PydanticValidationError

from core.layouts.base import KeyLayout
from core.models.errors import NotFoundError
from core.models.image import ImageMetadata
from core.repositories.metadata_repository import ImageMetadataRepository
from core.repositories.storage_repository import ImageStorageRepository
from core.utils.constants import METADATA_CONTENT_TYPE

logger = Logger(utc=True)


class S3MetadataRepository(ImageMetadataRepository):
    """Keeps one JSON document per image under the image's base prefix.

    Because the record shares the prefix, deleting the image removes it
    together with the variants.
    """

    def __init__(self, storage: ImageStorageRepository, layout: KeyLayout) -> None:
        self._storage = storage
        self._layout = layout

    async def save_metadata(self, *, metadata: ImageMetadata) -> None:
        key = self._layout.metadata_key(metadata.id)
        logger.debug("Writing metadata record", extra={"image_id": metadata.id, "key": key})

        await self._storage.put_object(
            key=key,
            data=metadata.model_dump_json().encode("utf-8"),
            content_type=METADATA_CONTENT_TYPE,
        )

    async def fetch_metadata(self, *, image_id: str) -> ImageMetadata | None:
        key = self._layout.metadata_key(image_id)
        try:
            raw = await self._storage.get_object(key=key)
        except NotFoundError:
            logger.debug("Metadata record not found", extra={"image_id": image_id})
            return None

        try:
            return ImageMetadata.model_validate(json.loads(raw))
        except (json.JSONDecodeError, UnicodeDecodeError, PydanticValidationError):
            logger.warning(
                "Ignoring unreadable metadata record",
                extra={"image_id": image_id, "key": key},
            )
            return None
