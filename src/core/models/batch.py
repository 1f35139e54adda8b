"""Aggregate result for batch upload and delete operations."""

from typing import Generic, TypeVar

from pydantic import BaseModel, Field, StrictStr

ItemT = TypeVar("ItemT")


class BatchFailure(BaseModel):
    """One item of a batch that did not complete."""

    id: StrictStr = Field(..., description="Image id, or original filename for uploads")
    error_code: StrictStr = Field(..., description="Error code of the raised service error")
    message: StrictStr = Field(..., description="Human-readable failure message")


class BatchResult(BaseModel, Generic[ItemT]):
    """Per-item outcome of a batch, so partial success is observable."""

    succeeded: list[ItemT] = Field(default_factory=list)
    failed: list[BatchFailure] = Field(default_factory=list)

    @property
    def all_succeeded(self) -> bool:
        return not self.failed
