"""Common Pydantic schemas."""
from typing import Optional

from pydantic import BaseModel, Field


class BaseSchema(BaseModel):
    """Base schema with common configuration."""

    model_config = {
        "from_attributes": True,
        "populate_by_name": True,
        "arbitrary_types_allowed": True,
    }


class SuccessResponse(BaseSchema):
    """Generic success response."""

    success: bool = Field(True, description="Success status")
    message: str = Field(..., description="Success message")


class ErrorResponse(BaseSchema):
    """Error envelope returned for every failure."""

    success: bool = Field(False, description="Always false")
    message: str = Field(..., description="Error message")
    error_code: Optional[str] = Field(None, description="Error code")


class PaginationMeta(BaseSchema):
    """Pagination block returned with listings."""

    current_page: int = Field(..., alias="currentPage")
    total_pages: int = Field(..., alias="totalPages")
    items_per_page: int = Field(..., alias="itemsPerPage")
    total_items: int = Field(..., alias="totalItems")
    items_on_page: int = Field(..., alias="itemsOnPage")

    @classmethod
    def create(cls, page: int, size: int, total: int, on_page: int) -> "PaginationMeta":
        """Create pagination metadata."""
        pages = (total + size - 1) // size if size > 0 else 0
        return cls(
            current_page=page,
            total_pages=pages,
            items_per_page=size,
            total_items=total,
            items_on_page=on_page,
        )
