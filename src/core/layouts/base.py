"""Abstract contract for deriving object keys from image identities."""

from abc import ABC, abstractmethod

from core.models.errors import ValidationError
from core.models.image import ImageVariant
from core.utils.constants import ERROR_CODE_INVALID_IMAGE_ID

_FORBIDDEN_ID_FRAGMENTS = ("/", "\\", "..")


def normalize_extension(ext: str) -> str:
    """Lowercase an extension and drop any leading dot: ``.PNG`` -> ``png``."""
    return ext.strip().lstrip(".").lower()


def validate_image_id(image_id: str) -> str:
    """Reject identifiers that could escape their key namespace.

    Raises:
        ValidationError: If the id is blank or contains a path separator
    """
    if not isinstance(image_id, str) or not image_id.strip():
        raise ValidationError(
            message="Image ID must not be blank",
            error_code=ERROR_CODE_INVALID_IMAGE_ID,
        )

    if any(fragment in image_id for fragment in _FORBIDDEN_ID_FRAGMENTS):
        raise ValidationError(
            message="Image ID must not contain path separators",
            error_code=ERROR_CODE_INVALID_IMAGE_ID,
            details={"image_id": image_id},
        )

    return image_id


class KeyLayout(ABC):
    """Key-scheme strategy shared by upload, retrieval, delete and listing.

    Every key derived for one image starts with ``derive_base_prefix``;
    prefix listing and bulk delete rely on that. All methods are pure and
    never touch the object store.
    """

    name: str

    def __init__(self, folder_path: str = "") -> None:
        self.folder_path = folder_path.strip("/")

    def _join(self, *parts: str) -> str:
        return "/".join(part for part in (self.folder_path, *parts) if part)

    @abstractmethod
    def root_prefix(self) -> str:
        """Prefix under which every image grouping lives ('' for bucket root)."""

    def derive_base_prefix(self, image_id: str) -> str:
        """Return the prefix common to all keys of ``image_id`` (ends with '/')."""
        validate_image_id(image_id)
        return f"{self.root_prefix()}{image_id}/"

    @abstractmethod
    def derive_key(self, image_id: str, variant: ImageVariant, ext: str) -> str:
        """Return the object key for one variant.

        Args:
            image_id: Image identity
            variant: Size variant
            ext: Extension of the uploaded original (with or without dot)
        """

    @abstractmethod
    def output_format(self, ext: str) -> str:
        """Pillow format used to encode resized variants of an ``ext`` original."""

    def image_id_from_prefix(self, prefix: str) -> str:
        """Inverse of ``derive_base_prefix`` for a delimiter-listed grouping."""
        root = self.root_prefix()
        remainder = prefix[len(root):] if prefix.startswith(root) else prefix
        segments = [segment for segment in remainder.split("/") if segment]
        if not segments:
            raise ValueError(f"Prefix does not name an image grouping: {prefix!r}")
        return segments[0]

    def metadata_key(self, image_id: str) -> str | None:
        """Key of the persisted metadata record, or None if the layout keeps none."""
        return None

    @property
    def keeps_metadata(self) -> bool:
        return False
