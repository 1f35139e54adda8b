"""Custom exception classes for the image service."""

from typing import Any

from core.utils.constants import (
    ERROR_CODE_CONFIGURATION,
    ERROR_CODE_FILE_SIZE_EXCEEDED,
    ERROR_CODE_IMAGE_DELETE_FAILED,
    ERROR_CODE_IMAGE_DOWNLOAD_FAILED,
    ERROR_CODE_IMAGE_LIST_FAILED,
    ERROR_CODE_IMAGE_PRESIGNED_URL_FAILED,
    ERROR_CODE_IMAGE_UPLOAD_FAILED,
    ERROR_CODE_INTERNAL_ERROR,
    ERROR_CODE_INVALID_FILTER,
    ERROR_CODE_PROCESSING_FAILED,
    ERROR_CODE_RESOURCE_NOT_FOUND,
    ERROR_CODE_S3,
    ERROR_CODE_UNSUPPORTED_MIME_TYPE,
    ERROR_CODE_VALIDATION_FAILED,
)


class ImageServiceError(Exception):
    """
    Base exception for all image service errors.

    All custom errors must inherit from this class.
    Callers must explicitly provide a message and error code.
    Optional contextual information can be supplied via `details`.
    """

    message: str
    error_code: str
    details: dict[str, Any]

    def __init__(
        self,
        *,
        message: str,
        error_code: str,
        details: dict[str, Any] | None = None,
    ) -> None:
        self.message = message
        self.error_code = error_code
        self.details = details or {}

        super().__init__(self.message)


class _CodedError(ImageServiceError):
    """Service error whose error code defaults per subclass."""

    default_error_code: str = ERROR_CODE_INTERNAL_ERROR

    def __init__(
        self,
        *,
        message: str,
        error_code: str | None = None,
        details: dict[str, Any] | None = None,
    ) -> None:
        super().__init__(
            message=message,
            error_code=error_code or self.default_error_code,
            details=details,
        )


class ConfigurationError(_CodedError):
    """Raised when the service is constructed with missing or invalid settings."""

    default_error_code = ERROR_CODE_CONFIGURATION


class ValidationError(_CodedError):
    """Raised when request validation fails, before any I/O happens."""

    default_error_code = ERROR_CODE_VALIDATION_FAILED


class MIMETypeError(ValidationError):
    """Raised when an unsupported MIME type is provided."""

    default_error_code = ERROR_CODE_UNSUPPORTED_MIME_TYPE


class FileSizeError(ValidationError):
    """Raised when file size exceeds the allowed limit."""

    default_error_code = ERROR_CODE_FILE_SIZE_EXCEEDED


class FilterError(ValidationError):
    """Raised when listing / pagination parameters are invalid."""

    default_error_code = ERROR_CODE_INVALID_FILTER


class ProcessingError(_CodedError):
    """Raised when resizing or re-encoding a variant fails."""

    default_error_code = ERROR_CODE_PROCESSING_FAILED


class NotFoundError(_CodedError):
    """Raised when a requested image has no discoverable objects."""

    default_error_code = ERROR_CODE_RESOURCE_NOT_FOUND


class S3Error(_CodedError):
    """Raised when an object store operation fails."""

    default_error_code = ERROR_CODE_S3


class ImageUploadFailedError(S3Error):
    """Raised when writing an object to the store fails."""

    default_error_code = ERROR_CODE_IMAGE_UPLOAD_FAILED


class ImageDownloadFailedError(S3Error):
    """Raised when reading or inspecting an object fails."""

    default_error_code = ERROR_CODE_IMAGE_DOWNLOAD_FAILED


class ImageDeletionFailedError(S3Error):
    """Raised when deleting objects fails."""

    default_error_code = ERROR_CODE_IMAGE_DELETE_FAILED


class ImageListFailedError(S3Error):
    """Raised when listing the bucket namespace fails."""

    default_error_code = ERROR_CODE_IMAGE_LIST_FAILED


class PresignedUrlError(S3Error):
    """Raised when a signed retrieval URL cannot be generated."""

    default_error_code = ERROR_CODE_IMAGE_PRESIGNED_URL_FAILED
