from collections.abc import Mapping
from pathlib import PurePosixPath

from core.utils.constants import (
    DEFAULT_OUTPUT_FORMAT,
    EXTENSION_FORMAT_MAP,
    MIME_TYPE_EXTENSION_MAP,
    PROBE_EXTENSIONS,
)

FORMAT_CONTENT_TYPES: Mapping[str, str] = {
    "JPEG": "image/jpeg",
    "PNG": "image/png",
    "WEBP": "image/webp",
    "GIF": "image/gif",
}


def output_format_for(ext: str) -> str:
    """Pick the encoder format for resized variants of an ``ext`` original.

    Unrecognised extensions fall back to JPEG.
    """
    return EXTENSION_FORMAT_MAP.get(ext.lstrip(".").lower(), DEFAULT_OUTPUT_FORMAT)


def content_type_for_format(fmt: str) -> str:
    return FORMAT_CONTENT_TYPES.get(fmt.upper(), f"image/{fmt.lower()}")


def extension_for_upload(filename: str, mime_type: str) -> str:
    """Return the extension an uploaded original is stored under.

    The filename's own suffix wins when it is one of the probe-able
    extensions; otherwise the first extension registered for the MIME type
    is used so the stored key can always be rediscovered.
    """
    suffix = PurePosixPath(filename).suffix.lstrip(".").lower()
    if suffix in PROBE_EXTENSIONS:
        return suffix

    candidates = MIME_TYPE_EXTENSION_MAP.get(mime_type.lower())
    if candidates:
        return candidates[0]

    return "bin"
