"""Product catalogue and review routes."""
import uuid
from typing import Optional

from fastapi import APIRouter, Depends, Query, status
from sqlalchemy.ext.asyncio import AsyncSession

from ...core.security import admin_required, get_current_user
from ...database import get_db
from ...schemas.common import PaginationMeta
from ...schemas.product import (
    ProductCreate,
    ProductEnvelope,
    ProductFilters,
    ProductListData,
    ProductListEnvelope,
    ProductMessageEnvelope,
    ProductResponse,
    ProductUpdate,
    ReviewRequest,
    ReviewResponse,
    ReviewsEnvelope,
)
from ...schemas.user import PublicUser
from ...services.product import product_service

router = APIRouter(prefix="/product", tags=["Product"])


@router.get("/products", response_model=ProductListEnvelope)
async def get_all_products(
    keyword: Optional[str] = Query(None),
    category: Optional[str] = Query(None),
    page: int = Query(1),
    limit: int = Query(10),
    price_gte: Optional[float] = Query(None, alias="price[gte]"),
    price_lte: Optional[float] = Query(None, alias="price[lte]"),
    rating_gte: Optional[float] = Query(None, alias="rating[gte]"),
    sort_by: Optional[str] = Query(None, alias="sortBy"),
    order: str = Query("asc"),
    db: AsyncSession = Depends(get_db)
):
    """List products with search, filters, sorting and pagination."""
    filters = ProductFilters(
        keyword=keyword,
        category=category,
        price_gte=price_gte,
        price_lte=price_lte,
        rating_gte=rating_gte,
        page=page if page > 0 else 1,
        limit=limit if limit > 0 else 10,
        sort_by=sort_by,
        order=order,
    )
    products, total = await product_service.list_products(db, filters)

    return ProductListEnvelope(
        data=ProductListData(
            products=[ProductResponse.model_validate(p) for p in products],
            pagination=PaginationMeta.create(
                page=filters.page,
                size=filters.limit,
                total=total,
                on_page=len(products),
            ),
        )
    )


@router.get("/details/{product_id}", response_model=ProductEnvelope)
async def get_product_details(product_id: uuid.UUID, db: AsyncSession = Depends(get_db)):
    """Get product by ID."""
    product = await product_service.get_product(db, product_id)
    return ProductEnvelope(product=ProductResponse.model_validate(product))


@router.get("/reviews/{product_id}", response_model=ReviewsEnvelope)
async def get_product_reviews(product_id: uuid.UUID, db: AsyncSession = Depends(get_db)):
    """Get all reviews of a product."""
    reviews = await product_service.list_reviews(db, product_id)
    return ReviewsEnvelope(reviews=[ReviewResponse.model_validate(r) for r in reviews])


@router.post(
    "/add",
    response_model=ProductEnvelope,
    status_code=status.HTTP_201_CREATED,
    dependencies=[Depends(get_current_user), Depends(admin_required)]
)
async def add_new_product(
    product_create: ProductCreate,
    current_user: PublicUser = Depends(get_current_user),
    db: AsyncSession = Depends(get_db)
):
    """Create a product (admin only)."""
    product = await product_service.create_product(db, product_create, current_user)
    return ProductEnvelope(product=ProductResponse.model_validate(product))


@router.put(
    "/update/{product_id}",
    response_model=ProductEnvelope,
    dependencies=[Depends(get_current_user), Depends(admin_required)]
)
async def update_product(
    product_id: uuid.UUID,
    product_update: ProductUpdate,
    current_user: PublicUser = Depends(get_current_user),
    db: AsyncSession = Depends(get_db)
):
    """Update a product (admin only)."""
    product = await product_service.update_product(db, product_id, product_update, current_user)
    return ProductEnvelope(product=ProductResponse.model_validate(product))


@router.delete(
    "/delete/{product_id}",
    response_model=ProductMessageEnvelope,
    dependencies=[Depends(get_current_user), Depends(admin_required)]
)
async def delete_product(
    product_id: uuid.UUID,
    current_user: PublicUser = Depends(get_current_user),
    db: AsyncSession = Depends(get_db)
):
    """Delete a product and its reviews (admin only)."""
    product = await product_service.delete_product(db, product_id, current_user)
    return ProductMessageEnvelope(
        product=ProductResponse.model_validate(product),
        message="Product deleted successfully.",
    )


@router.put("/rate/{product_id}", response_model=ProductMessageEnvelope)
async def rate_product(
    product_id: uuid.UUID,
    review_request: ReviewRequest,
    current_user: PublicUser = Depends(get_current_user),
    db: AsyncSession = Depends(get_db)
):
    """Rate a product; rating again replaces the caller's earlier review."""
    product = await product_service.rate_product(
        db,
        product_id,
        current_user,
        rating=review_request.rating,
        comment=review_request.comment,
    )
    return ProductMessageEnvelope(
        product=ProductResponse.model_validate(product),
        message="Review submitted successfully.",
    )


@router.delete("/review/delete", response_model=ProductMessageEnvelope)
async def delete_review(
    product_id: uuid.UUID = Query(..., alias="productId"),
    review_id: uuid.UUID = Query(..., alias="reviewId"),
    current_user: PublicUser = Depends(get_current_user),
    db: AsyncSession = Depends(get_db)
):
    """Delete one of the caller's own reviews."""
    product = await product_service.delete_review(db, product_id, review_id, current_user)
    return ProductMessageEnvelope(
        product=ProductResponse.model_validate(product),
        message="Review deleted successfully.",
    )
