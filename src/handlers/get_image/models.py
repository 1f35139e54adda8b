from pydantic import (
    BaseModel,
    ConfigDict,
    Field,
    StrictBool,
    StrictStr,
    field_validator,
)

from core.models.image import ImageMetadata, ImageUrls


class GetImageRequest(BaseModel):
    """Validation model for get image request."""

    model_config = ConfigDict(str_strip_whitespace=True)

    image_id: StrictStr = Field(
        ...,
        min_length=1,
        description="Image ID to retrieve",
    )

    variant: StrictStr | None = Field(
        default=None,
        description="Single variant label (original, thumb, sm, md, lg, xl); all when omitted",
    )

    metadata: StrictBool = Field(
        default=False,
        description="Include the image metadata in the response",
    )

    @field_validator("variant")
    @classmethod
    def normalize_variant(cls, value: str | None) -> str | None:
        if value is None or not value.strip():
            return None
        return value.lower()


class GetImageResponse(BaseModel):
    """Freshly signed URL(s) for an image."""

    image_id: str = Field(..., description="Image ID")
    variant: str | None = Field(None, description="Requested variant, if any")
    url: str | None = Field(None, description="Signed URL of the requested variant")
    urls: ImageUrls | None = Field(None, description="Signed URL per variant label")
    metadata: ImageMetadata | None = Field(None, description="Image metadata, when requested")
