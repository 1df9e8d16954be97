"""Product and review schemas."""
import uuid
from datetime import datetime
from typing import List, Optional

from pydantic import Field, field_validator

from ..models.product import PRODUCT_CATEGORIES
from .common import BaseSchema, PaginationMeta


def _check_category(value: Optional[str]) -> Optional[str]:
    if value is not None and value not in PRODUCT_CATEGORIES:
        raise ValueError(f"{value} is not a supported category.")
    return value


class ProductImage(BaseSchema):
    public_id: str = Field(..., min_length=1)
    url: str = Field(..., min_length=1)


class ProductCreate(BaseSchema):
    """Product creation schema."""

    name: str = Field(..., min_length=1, max_length=255)
    description: str = Field(
        ..., min_length=10, description="At least 10 characters"
    )
    price: float = Field(..., ge=0)
    category: str
    stock: int = Field(1, ge=0)
    images: List[ProductImage] = Field(..., min_length=1)

    @field_validator("name")
    @classmethod
    def strip_name(cls, v: str) -> str:
        v = v.strip()
        if not v:
            raise ValueError("Product name is required.")
        return v

    @field_validator("category")
    @classmethod
    def check_category(cls, v: Optional[str]) -> Optional[str]:
        return _check_category(v)


class ProductUpdate(BaseSchema):
    """Partial product update."""

    name: Optional[str] = Field(None, min_length=1, max_length=255)
    description: Optional[str] = Field(None, min_length=10)
    price: Optional[float] = Field(None, ge=0)
    category: Optional[str] = None
    stock: Optional[int] = Field(None, ge=0)
    images: Optional[List[ProductImage]] = Field(None, min_length=1)

    @field_validator("category")
    @classmethod
    def check_category(cls, v: Optional[str]) -> Optional[str]:
        return _check_category(v)


class ReviewRequest(BaseSchema):
    rating: float = Field(..., ge=1, le=5, description="Rating between 1 and 5")
    comment: Optional[str] = Field(None, description="Optional review text")


class ReviewResponse(BaseSchema):
    id: uuid.UUID
    user_id: uuid.UUID
    name: str
    rating: float
    comment: str
    created_at: datetime


class ProductResponse(BaseSchema):
    """Product response schema."""

    id: uuid.UUID
    name: str
    description: str
    price: float
    rating: float
    images: List[ProductImage]
    category: str
    stock: int
    number_of_reviews: int
    created_by: Optional[uuid.UUID] = None
    reviews: List[ReviewResponse] = Field(default_factory=list)
    created_at: datetime
    updated_at: datetime


class ProductEnvelope(BaseSchema):
    success: bool = True
    product: ProductResponse


class ProductMessageEnvelope(ProductEnvelope):
    message: str


class ProductListData(BaseSchema):
    products: List[ProductResponse]
    pagination: PaginationMeta


class ProductListEnvelope(BaseSchema):
    success: bool = True
    message: str = "Products retrieved successfully"
    data: ProductListData


class ReviewsEnvelope(BaseSchema):
    success: bool = True
    reviews: List[ReviewResponse]


class ProductFilters(BaseSchema):
    """Listing query: search, filters, paging and sort."""

    keyword: Optional[str] = None
    category: Optional[str] = None
    price_gte: Optional[float] = None
    price_lte: Optional[float] = None
    rating_gte: Optional[float] = None
    page: int = 1
    limit: int = 10
    sort_by: Optional[str] = None
    order: str = "asc"
