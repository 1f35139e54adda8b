"""Path-style layout: ``[folder/]id/<variant>/id.<ext>``."""

from core.layouts.base import KeyLayout, normalize_extension, validate_image_id
from core.models.image import ImageVariant
from core.utils.constants import LAYOUT_PATH
from core.utils.mime import output_format_for


class PathStyleLayout(KeyLayout):
    """One folder per variant, every variant keeps the original's extension.

    No metadata record is written; the extension of an existing image is
    recovered by probing the ``original`` folder.
    """

    name = LAYOUT_PATH

    def root_prefix(self) -> str:
        return f"{self.folder_path}/" if self.folder_path else ""

    def derive_key(self, image_id: str, variant: ImageVariant, ext: str) -> str:
        validate_image_id(image_id)
        variant = ImageVariant(variant)
        return self._join(image_id, variant.value, f"{image_id}.{normalize_extension(ext)}")

    def output_format(self, ext: str) -> str:
        return output_format_for(ext)
