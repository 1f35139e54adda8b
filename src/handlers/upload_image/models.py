"""Pydantic models for image upload request/response."""

import base64
import binascii

from aws_lambda_powertools import Logger
from pydantic import BaseModel, ConfigDict, Field, StrictStr, field_validator

from core.models.image import UploadFile, UploadResult

logger = Logger(utc=True)


class ImageUploadRequest(BaseModel):
    """Validation model for image upload request.

    Type and size limits are enforced by the service so that they follow
    the runtime configuration; this model only checks the envelope.
    """

    model_config = ConfigDict(str_strip_whitespace=True)

    file: StrictStr = Field(..., description="Base64 encoded image file")
    filename: StrictStr = Field(
        ..., min_length=1, max_length=255, description="Original file name"
    )
    mime_type: StrictStr = Field(
        ..., min_length=1, max_length=100, description="Declared MIME type"
    )

    @field_validator("file")
    @classmethod
    def validate_file(cls, value: str) -> str:
        if not value:
            raise ValueError("file must not be empty")

        try:
            base64.b64decode(value, validate=True)
        except (binascii.Error, ValueError) as e:
            logger.error(f"File validation error: Invalid base64 - {e}")
            raise ValueError("Invalid base64 encoded file") from e

        return value

    @field_validator("mime_type")
    @classmethod
    def normalize_mime_type(cls, value: str) -> str:
        return value.lower()

    def to_upload_file(self) -> UploadFile:
        return UploadFile.from_bytes(
            base64.b64decode(self.file),
            filename=self.filename,
            mime_type=self.mime_type,
        )


class ImageUploadResponse(UploadResult):
    """Response model for successful image upload."""

    message: str = Field(..., description="Success message")
