"""Upload validation gate, enforced before any resize work or store write."""

from aws_lambda_powertools import Logger

from core.config import ImageStorageConfig
from core.models.errors import FileSizeError, MIMETypeError, ValidationError
from core.models.image import UploadFile
from core.utils.constants import ERROR_CODE_EMPTY_FILE, format_file_size

logger = Logger(utc=True)


def validate_upload(file: UploadFile, config: ImageStorageConfig) -> None:
    """Check an upload against the configured type and size limits.

    Raises:
        MIMETypeError: If the declared MIME type is not allowed
        FileSizeError: If the byte length exceeds the configured maximum
        ValidationError: If the payload is empty or its length disagrees
            with the declared size
    """
    mime_type = file.mime_type.lower()
    if mime_type not in config.allowed_mime_types:
        logger.warning("Unsupported MIME type", extra={"mime_type": file.mime_type})
        raise MIMETypeError(
            message=f"Unsupported image type: {file.mime_type}",
            details={"mime_type": file.mime_type},
        )

    actual_size = len(file.data)
    if file.size != actual_size:
        raise ValidationError(
            message="Declared file size does not match the uploaded content",
            details={"declared": file.size, "actual": actual_size},
        )

    if actual_size == 0:
        raise ValidationError(
            message="File must not be empty",
            error_code=ERROR_CODE_EMPTY_FILE,
        )

    if actual_size > config.max_file_size_bytes:
        logger.warning(
            "File size limit exceeded",
            extra={"size": actual_size, "limit": config.max_file_size_bytes},
        )
        raise FileSizeError(
            message=(
                f"File size exceeds limit of {format_file_size(config.max_file_size_bytes)}"
            ),
            details={"size": actual_size, "limit": config.max_file_size_bytes},
        )
