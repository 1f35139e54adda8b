"""Pillow-backed resize/encode engine."""

from io import BytesIO
from typing import Protocol

from PIL import Image, ImageOps

# Formats that cannot carry an alpha channel or palette as-is.
_RGB_ONLY_FORMATS = frozenset({"JPEG"})


class ResizeEngine(Protocol):
    """Black-box contract the variant producer drives."""

    def resize(self, data: bytes, *, width: int, height: int, quality: int, fmt: str) -> bytes: ...


class PillowResizeEngine:
    """Fit-inside resize without enlargement, re-encoded in a target format."""

    def __init__(self, resample: Image.Resampling = Image.Resampling.LANCZOS) -> None:
        self._resample = resample

    def resize(self, data: bytes, *, width: int, height: int, quality: int, fmt: str) -> bytes:
        """Resize ``data`` to fit inside ``width`` x ``height``.

        Aspect ratio is preserved and images smaller than the box are left
        at their own resolution. EXIF orientation is applied first so the
        box is measured against the image as displayed.

        Raises:
            PIL.UnidentifiedImageError: If the bytes are not a decodable image
            OSError: If encoding fails
        """
        fmt = fmt.upper()

        with Image.open(BytesIO(data)) as source:
            img = ImageOps.exif_transpose(source) or source
            img.thumbnail((width, height), self._resample)

            if fmt in _RGB_ONLY_FORMATS and img.mode not in ("RGB", "L"):
                img = img.convert("RGB")

            buffer = BytesIO()
            img.save(buffer, format=fmt, quality=quality)
            return buffer.getvalue()
