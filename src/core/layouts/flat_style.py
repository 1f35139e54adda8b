"""Flat-style layout: ``[folder/]images/id/<variant>.webp`` plus ``metadata.json``."""

from core.layouts.base import KeyLayout, normalize_extension, validate_image_id
from core.models.image import ImageVariant
from core.utils.constants import (
    FLAT_LAYOUT_OUTPUT_FORMAT,
    FLAT_LAYOUT_ROOT,
    LAYOUT_FLAT,
    METADATA_FILENAME,
)


class FlatStyleLayout(KeyLayout):
    """All renditions of an image side by side, described by a metadata record.

    Resized variants are always WEBP; the original keeps its own
    extension, which the metadata record stores so readers never probe.
    """

    name = LAYOUT_FLAT

    def root_prefix(self) -> str:
        return f"{self._join(FLAT_LAYOUT_ROOT)}/"

    def derive_key(self, image_id: str, variant: ImageVariant, ext: str) -> str:
        validate_image_id(image_id)
        variant = ImageVariant(variant)
        if variant is ImageVariant.ORIGINAL:
            suffix = normalize_extension(ext)
        else:
            suffix = FLAT_LAYOUT_OUTPUT_FORMAT.lower()
        return self._join(FLAT_LAYOUT_ROOT, image_id, f"{variant.value}.{suffix}")

    def output_format(self, ext: str) -> str:
        return FLAT_LAYOUT_OUTPUT_FORMAT

    def metadata_key(self, image_id: str) -> str:
        validate_image_id(image_id)
        return self._join(FLAT_LAYOUT_ROOT, image_id, METADATA_FILENAME)

    @property
    def keeps_metadata(self) -> bool:
        return True
