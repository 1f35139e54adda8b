"""Global constants used throughout the application.

This module centralizes the error codes, default limits, key layout names
and environment variable names shared across modules. Anything a deployment
may want to change (limits, variant table, MIME types) is only a *default*
here; the live values travel on ``ImageStorageConfig``.
"""

from typing import Final

# ============================================================================
# Error Codes
# ============================================================================

# Configuration Errors
ERROR_CODE_CONFIGURATION = "CONFIGURATION_ERROR"

# Validation Errors
ERROR_CODE_VALIDATION_FAILED = "VALIDATION_FAILED"
ERROR_CODE_INVALID_FILTER = "INVALID_FILTER"
ERROR_CODE_INVALID_IMAGE_ID = "INVALID_IMAGE_ID"
ERROR_CODE_INVALID_IMAGE_SIZE = "INVALID_IMAGE_SIZE"
ERROR_CODE_UNSUPPORTED_MIME_TYPE = "UNSUPPORTED_MIME_TYPE"
ERROR_CODE_FILE_SIZE_EXCEEDED = "FILE_SIZE_EXCEEDED"
ERROR_CODE_EMPTY_FILE = "EMPTY_FILE"

# Processing Errors
ERROR_CODE_PROCESSING_FAILED = "IMAGE_PROCESSING_FAILED"

# Not Found Errors
ERROR_CODE_RESOURCE_NOT_FOUND = "NOT_FOUND"

# Storage Errors
ERROR_CODE_S3 = "S3_ERROR"
ERROR_CODE_IMAGE_UPLOAD_FAILED = "IMAGE_UPLOAD_FAILED"
ERROR_CODE_IMAGE_DOWNLOAD_FAILED = "IMAGE_DOWNLOAD_FAILED"
ERROR_CODE_IMAGE_DELETE_FAILED = "IMAGE_DELETE_FAILED"
ERROR_CODE_IMAGE_LIST_FAILED = "IMAGE_LIST_FAILED"
ERROR_CODE_IMAGE_PRESIGNED_URL_FAILED = "PRESIGNED_URL_FAILED"

# Internal / Unexpected
ERROR_CODE_INTERNAL_ERROR = "INTERNAL_ERROR"


# ============================================================================
# File Upload Constraints
# ============================================================================

MAX_FILE_SIZE = 10 * 1024 * 1024  # 10MB in bytes

MIME_TYPE_EXTENSION_MAP: Final[dict[str, tuple[str, ...]]] = {
    "image/jpeg": ("jpg", "jpeg"),
    "image/jpg": ("jpg", "jpeg"),
    "image/png": ("png",),
    "image/gif": ("gif",),
    "image/webp": ("webp",),
    "image/svg+xml": ("svg",),
    "image/bmp": ("bmp",),
    "image/tiff": ("tiff",),
}

ALLOWED_MIME_TYPES: Final[frozenset[str]] = frozenset(MIME_TYPE_EXTENSION_MAP.keys())

# Probe order used when an image's extension has to be discovered.
PROBE_EXTENSIONS: Final[tuple[str, ...]] = (
    "jpg",
    "jpeg",
    "png",
    "gif",
    "webp",
    "svg",
    "bmp",
    "tiff",
)

DEFAULT_CONTENT_TYPE_FALLBACK = "application/octet-stream"


# ============================================================================
# Image Variants
# ============================================================================

# label -> (width, height, quality)
DEFAULT_VARIANT_TABLE: Final[dict[str, tuple[int, int, int]]] = {
    "thumb": (100, 100, 80),
    "sm": (300, 300, 80),
    "md": (600, 600, 85),
    "lg": (900, 900, 85),
    "xl": (1200, 1200, 90),
}

DEFAULT_OUTPUT_FORMAT = "JPEG"
FLAT_LAYOUT_OUTPUT_FORMAT = "WEBP"

EXTENSION_FORMAT_MAP: Final[dict[str, str]] = {
    "jpg": "JPEG",
    "jpeg": "JPEG",
    "png": "PNG",
    "webp": "WEBP",
    "gif": "GIF",
}


# ============================================================================
# Key Layouts
# ============================================================================

LAYOUT_PATH = "path"
LAYOUT_FLAT = "flat"

FLAT_LAYOUT_ROOT = "images"
METADATA_FILENAME = "metadata.json"
METADATA_CONTENT_TYPE = "application/json"


# ============================================================================
# Storage Defaults
# ============================================================================

DEFAULT_URL_EXPIRATION_SECONDS = 3600 * 24 * 7  # one week
MAX_DELETE_BATCH = 1000  # S3 DeleteObjects hard limit
DEFAULT_MAX_CONCURRENT_UPLOADS = 5


# ============================================================================
# Pagination Constraints
# ============================================================================

DEFAULT_PAGE = 1
DEFAULT_PAGE_SIZE = 10
MIN_LIMIT = 1
MAX_LIMIT = 1000


# ============================================================================
# API Gateway Configuration
# ============================================================================

CORS_ORIGIN = "*"
CORS_METHODS = "GET,POST,DELETE,OPTIONS"
CORS_HEADERS = "Content-Type,Authorization,X-Api-Key"
EXPOSE_HEADERS = "Content-Type,Content-Length,X-Request-Id"
DEFAULT_CONTENT_TYPE = "application/json"


# ============================================================================
# Environment Variable Names
# ============================================================================

ENV_AWS_REGION = "AWS_REGION"
ENV_IMAGE_S3_REGION = "IMAGE_S3_REGION"
ENV_IMAGE_S3_BUCKET_NAME = "IMAGE_S3_BUCKET_NAME"
ENV_AWS_ACCESS_KEY_ID = "AWS_ACCESS_KEY_ID"
ENV_AWS_SECRET_ACCESS_KEY = "AWS_SECRET_ACCESS_KEY"
ENV_AWS_ENDPOINT_URL = "AWS_ENDPOINT_URL"
ENV_IMAGE_FOLDER_PATH = "IMAGE_FOLDER_PATH"
ENV_IMAGE_KEY_LAYOUT = "IMAGE_KEY_LAYOUT"
ENV_IMAGE_URL_EXPIRATION_SECONDS = "IMAGE_URL_EXPIRATION_SECONDS"
ENV_IMAGE_DEFAULT_PAGE_SIZE = "IMAGE_DEFAULT_PAGE_SIZE"
ENV_IMAGE_MAX_FILE_SIZE_BYTES = "IMAGE_MAX_FILE_SIZE_BYTES"


# ============================================================================
# Helper Functions
# ============================================================================


def format_file_size(size_bytes: int) -> str:
    """Format file size in human-readable format.

    Args:
        size_bytes: Size in bytes

    Returns:
        Formatted file size string
    """
    size: float = float(size_bytes)

    for unit in ("B", "KB", "MB", "GB"):
        if size < 1024.0:
            return f"{size:.1f} {unit}"
        size /= 1024.0

    return f"{size:.1f} TB"
