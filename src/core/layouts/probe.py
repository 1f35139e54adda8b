"""Extension discovery for images whose original extension is not recorded."""

from collections.abc import Sequence

from aws_lambda_powertools import Logger

from core.layouts.base import KeyLayout
from core.models.errors import NotFoundError
from core.models.image import ImageVariant
from core.repositories.storage_repository import ImageStorageRepository
from core.utils.constants import PROBE_EXTENSIONS

logger = Logger(utc=True)


class ExtensionProbe:
    """Find the stored extension of an image by probing its original key.

    Extensions are tried strictly in order and the first existing key wins,
    so the result is deterministic even if several candidates exist. Costs
    one HEAD request per candidate tried.
    """

    def __init__(
        self,
        storage: ImageStorageRepository,
        layout: KeyLayout,
        extensions: Sequence[str] = PROBE_EXTENSIONS,
    ) -> None:
        self._storage = storage
        self._layout = layout
        self._extensions = tuple(extensions)

    async def find_extension(self, image_id: str) -> str | None:
        for ext in self._extensions:
            key = self._layout.derive_key(image_id, ImageVariant.ORIGINAL, ext)
            if await self._storage.object_exists(key=key):
                return ext
        return None

    async def resolve(self, image_id: str) -> str:
        """Return the extension or raise ``NotFoundError`` if nothing matches."""
        ext = await self.find_extension(image_id)
        if ext is None:
            logger.info(
                "No original found for image",
                extra={"image_id": image_id, "tried": len(self._extensions)},
            )
            raise NotFoundError(
                message="Image not found",
                details={"image_id": image_id},
            )
        return ext
