"""
Pydantic models for list images request.
"""

from pydantic import BaseModel, ConfigDict, Field

from core.utils.constants import DEFAULT_PAGE, MAX_LIMIT, MIN_LIMIT


class ListImagesRequest(BaseModel):
    """
    Validation model for list images API.

    Query string values arrive as strings and are coerced to integers.
    A missing limit falls back to the service's configured page size.
    """

    model_config = ConfigDict(str_strip_whitespace=True)

    page: int = Field(
        default=DEFAULT_PAGE,
        ge=DEFAULT_PAGE,
        description="Page number, starting at 1",
    )
    limit: int | None = Field(
        default=None,
        ge=MIN_LIMIT,
        le=MAX_LIMIT,
        description=f"Results per page ({MIN_LIMIT}-{MAX_LIMIT})",
    )
