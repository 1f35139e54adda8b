"""Construction-time configuration for the image storage service."""

import os
from typing import Any, Literal

from pydantic import BaseModel, ConfigDict, Field, StrictStr, field_validator, model_validator
from pydantic import ValidationError as PydanticValidationError

from core.models.errors import ConfigurationError
from core.models.image import ImageVariant, VariantSpec
from core.utils.constants import (
    ALLOWED_MIME_TYPES,
    DEFAULT_MAX_CONCURRENT_UPLOADS,
    DEFAULT_PAGE_SIZE,
    DEFAULT_URL_EXPIRATION_SECONDS,
    DEFAULT_VARIANT_TABLE,
    ENV_AWS_ACCESS_KEY_ID,
    ENV_AWS_ENDPOINT_URL,
    ENV_AWS_REGION,
    ENV_AWS_SECRET_ACCESS_KEY,
    ENV_IMAGE_DEFAULT_PAGE_SIZE,
    ENV_IMAGE_FOLDER_PATH,
    ENV_IMAGE_KEY_LAYOUT,
    ENV_IMAGE_MAX_FILE_SIZE_BYTES,
    ENV_IMAGE_S3_BUCKET_NAME,
    ENV_IMAGE_S3_REGION,
    ENV_IMAGE_URL_EXPIRATION_SECONDS,
    LAYOUT_PATH,
    MAX_FILE_SIZE,
    MAX_LIMIT,
    MIME_TYPE_EXTENSION_MAP,
    PROBE_EXTENSIONS,
)

_REQUIRED_FIELDS: tuple[tuple[str, str], ...] = (
    ("region", "S3 region is required"),
    ("bucket_name", "S3 bucket name is required"),
    ("access_key_id", "AWS access key ID is required"),
    ("secret_access_key", "AWS secret access key is required"),
)


def default_variants() -> dict[ImageVariant, VariantSpec]:
    """Return a fresh copy of the built-in variant table."""
    return {
        ImageVariant(label): VariantSpec(width=width, height=height, quality=quality)
        for label, (width, height, quality) in DEFAULT_VARIANT_TABLE.items()
    }


class ImageStorageConfig(BaseModel):
    """Settings injected into ``ImageStorageService``.

    Required connection settings are checked eagerly: a missing region,
    bucket or credential raises ``ConfigurationError`` as soon as the
    object is built, so a misconfigured service never gets instantiated.
    """

    model_config = ConfigDict(frozen=True, str_strip_whitespace=True)

    region: StrictStr = ""
    bucket_name: StrictStr = ""
    access_key_id: StrictStr = Field("", repr=False)
    secret_access_key: StrictStr = Field("", repr=False)
    endpoint_url: StrictStr | None = None

    folder_path: StrictStr = ""
    layout: Literal["path", "flat"] = LAYOUT_PATH

    url_expiration_seconds: int = Field(DEFAULT_URL_EXPIRATION_SECONDS, gt=0)
    default_page_size: int = Field(DEFAULT_PAGE_SIZE, ge=1)
    max_page_size: int = Field(MAX_LIMIT, ge=1)
    max_file_size_bytes: int = Field(MAX_FILE_SIZE, gt=0)
    allowed_mime_types: frozenset[str] = ALLOWED_MIME_TYPES
    variants: dict[ImageVariant, VariantSpec] = Field(default_factory=default_variants)

    max_concurrent_uploads: int = Field(DEFAULT_MAX_CONCURRENT_UPLOADS, ge=1)
    batch_delete_fail_fast: bool = False

    @field_validator("folder_path")
    @classmethod
    def normalize_folder_path(cls, value: str) -> str:
        """Strip leading and trailing slashes: ``/uploads/`` -> ``uploads``."""
        return value.strip("/")

    @field_validator("variants")
    @classmethod
    def validate_variants(
        cls, value: dict[ImageVariant, VariantSpec]
    ) -> dict[ImageVariant, VariantSpec]:
        if ImageVariant.ORIGINAL in value:
            raise ValueError("The original variant is stored unmodified and takes no size spec")
        if not value:
            raise ValueError("At least one resized variant must be configured")
        return value

    @model_validator(mode="after")
    def validate_required(self) -> "ImageStorageConfig":
        for field_name, message in _REQUIRED_FIELDS:
            if not getattr(self, field_name):
                raise ConfigurationError(message=message, details={"field": field_name})

        if self.default_page_size > self.max_page_size:
            raise ValueError("default_page_size must not exceed max_page_size")

        if self.layout == LAYOUT_PATH:
            self._check_probeable_mime_types()

        return self

    def _check_probeable_mime_types(self) -> None:
        # The path layout finds originals again only by probing extensions.
        unreachable = sorted(
            mime_type
            for mime_type in self.allowed_mime_types
            if not set(MIME_TYPE_EXTENSION_MAP.get(mime_type.lower(), ())) & set(PROBE_EXTENSIONS)
        )
        if unreachable:
            raise ConfigurationError(
                message="Allowed MIME types have no discoverable extension in the path layout",
                details={"mime_types": unreachable},
            )

    @property
    def configured_variants(self) -> tuple[ImageVariant, ...]:
        """Original first, then every resized variant in table order."""
        return (ImageVariant.ORIGINAL, *self.variants.keys())

    @classmethod
    def from_env(cls, **overrides: Any) -> "ImageStorageConfig":
        """Build configuration from environment variables.

        Keyword overrides win over the environment. Invalid values are
        reported as ``ConfigurationError`` rather than pydantic errors.
        """
        values: dict[str, Any] = {
            "region": os.getenv(ENV_IMAGE_S3_REGION) or os.getenv(ENV_AWS_REGION) or "",
            "bucket_name": os.getenv(ENV_IMAGE_S3_BUCKET_NAME, ""),
            "access_key_id": os.getenv(ENV_AWS_ACCESS_KEY_ID, ""),
            "secret_access_key": os.getenv(ENV_AWS_SECRET_ACCESS_KEY, ""),
            "endpoint_url": os.getenv(ENV_AWS_ENDPOINT_URL) or None,
            "folder_path": os.getenv(ENV_IMAGE_FOLDER_PATH, ""),
            "layout": os.getenv(ENV_IMAGE_KEY_LAYOUT, LAYOUT_PATH),
        }

        optional_ints = {
            "url_expiration_seconds": ENV_IMAGE_URL_EXPIRATION_SECONDS,
            "default_page_size": ENV_IMAGE_DEFAULT_PAGE_SIZE,
            "max_file_size_bytes": ENV_IMAGE_MAX_FILE_SIZE_BYTES,
        }
        for field_name, env_name in optional_ints.items():
            raw = os.getenv(env_name)
            if raw:
                values[field_name] = raw

        values.update(overrides)

        try:
            return cls.model_validate(values)
        except PydanticValidationError as exc:
            raise ConfigurationError(
                message="Invalid image storage configuration",
                details={"errors": [str(err.get("msg")) for err in exc.errors()]},
            ) from exc
