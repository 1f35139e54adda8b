"""Shared image models: variants, metadata records and upload results."""

from enum import Enum

from pydantic import BaseModel, ConfigDict, Field, StrictInt, StrictStr

# variant label -> signed URL
ImageUrls = dict[str, str]


class ImageVariant(str, Enum):
    """Closed set of renditions stored for every image."""

    ORIGINAL = "original"
    THUMB = "thumb"
    SM = "sm"
    MD = "md"
    LG = "lg"
    XL = "xl"


class VariantSpec(BaseModel):
    """Target box and encode quality for one resized variant."""

    model_config = ConfigDict(frozen=True)

    width: StrictInt = Field(..., gt=0, description="Maximum output width in pixels")
    height: StrictInt = Field(..., gt=0, description="Maximum output height in pixels")
    quality: StrictInt = Field(..., ge=1, le=100, description="Encoder quality (1-100)")


class UploadFile(BaseModel):
    """Upload as handed over by the transport layer."""

    data: bytes = Field(..., repr=False, description="Raw file content")
    filename: StrictStr = Field(..., description="Original client-side file name")
    mime_type: StrictStr = Field(..., description="Declared MIME type")
    size: StrictInt = Field(..., ge=0, description="Declared byte length")

    @classmethod
    def from_bytes(cls, data: bytes, *, filename: str, mime_type: str) -> "UploadFile":
        return cls(data=data, filename=filename, mime_type=mime_type, size=len(data))


class ImageMetadata(BaseModel):
    """Persisted summary of one stored image.

    Written once at upload time (flat layout) and never mutated. The
    ``urls`` map records what was handed out at upload; readers always
    mint fresh URLs instead of trusting it.
    """

    model_config = ConfigDict(frozen=True)

    id: StrictStr = Field(..., description="Unique image identifier")
    original_filename: StrictStr = Field(..., description="Original image file name")
    mime_type: StrictStr = Field(..., description="MIME type of the original (e.g. image/png)")
    extension: StrictStr = Field(..., description="Extension of the stored original, without dot")
    sizes: dict[str, StrictInt] = Field(
        default_factory=dict,
        description="Byte size per variant label",
    )
    created_at: StrictStr = Field(..., description="ISO-8601 creation timestamp (UTC)")
    urls: ImageUrls = Field(
        default_factory=dict,
        description="Signed URLs issued at upload time",
    )


class UploadResult(BaseModel):
    """Outcome of an upload, also used as a listing item."""

    id: StrictStr = Field(..., description="Unique image identifier")
    key: StrictStr = Field(..., description="Base prefix shared by all variant keys")
    original_filename: StrictStr = Field(..., description="Original image file name")
    mime_type: StrictStr = Field(..., description="MIME type of the original")
    size: StrictInt = Field(..., description="Size of the original in bytes")
    urls: ImageUrls = Field(..., description="Signed URL per variant label")
    created_at: StrictStr | None = Field(None, description="ISO-8601 creation timestamp (UTC)")
    metadata: ImageMetadata | None = Field(
        None,
        description="Persisted metadata record, when the layout keeps one",
    )


class DeleteResult(BaseModel):
    """Confirmation of a prefix-level delete."""

    image_id: StrictStr = Field(..., description="Deleted image ID")
    deleted_keys: list[StrictStr] = Field(..., description="Object keys that were removed")
    deleted_at: StrictStr = Field(..., description="Deletion timestamp")
