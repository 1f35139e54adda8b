"""Pagination model."""

from pydantic import BaseModel, Field, StrictInt

from core.models.image import UploadResult


class ImageListPage(BaseModel):
    """One 1-indexed page of discovered images."""

    items: list[UploadResult] = Field(..., description="Images on this page, in discovery order")
    total: StrictInt = Field(..., description="Number of images discovered by the listing")
    page: StrictInt = Field(..., description="Requested page (1-indexed)")
    limit: StrictInt = Field(..., description="Maximum number of items per page")
    total_pages: StrictInt = Field(..., description="Number of non-empty pages")
