"""Product catalogue and review service."""
import uuid
from typing import Any, Dict, List, Optional, Tuple

from sqlalchemy import func, select
from sqlalchemy.ext.asyncio import AsyncSession

from ..core.exceptions import ForbiddenError, NotFoundError, ValidationError
from ..core.logging import BusinessLogger
from ..models.product import Product, ProductReview
from ..schemas.product import ProductCreate, ProductFilters, ProductUpdate
from ..schemas.user import PublicUser

logger = BusinessLogger()

SORTABLE_FIELDS = {
    "name": Product.name,
    "price": Product.price,
    "rating": Product.rating,
    "createdAt": Product.created_at,
    "updatedAt": Product.updated_at,
}


class ProductService:
    """Catalogue reads for everyone, writes for admins, reviews for users."""

    async def _get(self, db: AsyncSession, product_id: uuid.UUID) -> Product:
        stmt = (
            select(Product)
            .where(Product.id == product_id)
            .execution_options(populate_existing=True)
        )
        result = await db.execute(stmt)
        product = result.scalar_one_or_none()
        if product is None:
            raise NotFoundError("Product not found.")
        return product

    async def get_product(self, db: AsyncSession, product_id: uuid.UUID) -> Product:
        return await self._get(db, product_id)

    async def list_products(
        self,
        db: AsyncSession,
        filters: ProductFilters
    ) -> Tuple[List[Product], int]:
        """Filtered, sorted page of products plus the total match count."""
        stmt = select(Product)

        if filters.keyword:
            stmt = stmt.where(Product.name.ilike(f"%{filters.keyword}%"))
        if filters.category:
            stmt = stmt.where(Product.category == filters.category)
        if filters.price_gte is not None:
            stmt = stmt.where(Product.price >= filters.price_gte)
        if filters.price_lte is not None:
            stmt = stmt.where(Product.price <= filters.price_lte)
        if filters.rating_gte is not None:
            stmt = stmt.where(Product.rating >= filters.rating_gte)

        # Get total count
        count_stmt = select(func.count()).select_from(stmt.subquery())
        total = (await db.execute(count_stmt)).scalar_one()

        column = SORTABLE_FIELDS.get(filters.sort_by)
        if column is None:
            stmt = stmt.order_by(Product.created_at.desc())
        elif filters.order == "desc":
            stmt = stmt.order_by(column.desc())
        else:
            stmt = stmt.order_by(column.asc())

        # Apply pagination
        stmt = stmt.offset((filters.page - 1) * filters.limit).limit(filters.limit)

        result = await db.execute(stmt)
        return list(result.scalars().all()), total

    async def create_product(
        self,
        db: AsyncSession,
        product_create: ProductCreate,
        user: PublicUser
    ) -> Product:
        data = product_create.model_dump(mode="json")
        product = Product(**data, created_by=user.id)

        db.add(product)
        await db.commit()

        logger.log_product_changed(str(product.id), action="created", user_id=str(user.id))
        return await self._get(db, product.id)

    async def update_product(
        self,
        db: AsyncSession,
        product_id: uuid.UUID,
        product_update: ProductUpdate,
        user: PublicUser
    ) -> Product:
        """Apply the fields present in the body; an empty body is rejected."""
        changes: Dict[str, Any] = product_update.model_dump(mode="json", exclude_unset=True)
        if not changes:
            raise ValidationError("No data provided for update.")

        product = await self._get(db, product_id)
        for field, value in changes.items():
            if value is None:
                raise ValidationError(f"Field '{field}' cannot be null.")
            setattr(product, field, value)

        await db.commit()

        logger.log_product_changed(str(product_id), action="updated", user_id=str(user.id))
        return await self._get(db, product_id)

    async def delete_product(
        self,
        db: AsyncSession,
        product_id: uuid.UUID,
        user: PublicUser
    ) -> Product:
        product = await self._get(db, product_id)

        await db.delete(product)
        await db.commit()

        logger.log_product_changed(str(product_id), action="deleted", user_id=str(user.id))
        return product

    async def rate_product(
        self,
        db: AsyncSession,
        product_id: uuid.UUID,
        user: PublicUser,
        rating: float,
        comment: Optional[str] = None
    ) -> Product:
        """Add the caller's review, replacing any earlier one by the same user."""
        product = await self._get(db, product_id)

        review = next((r for r in product.reviews if r.user_id == user.id), None)
        if review is None:
            product.reviews.append(
                ProductReview(
                    user_id=user.id,
                    name=user.name,
                    rating=rating,
                    comment=comment or "",
                )
            )
        else:
            review.name = user.name
            review.rating = rating
            review.comment = comment or ""

        product.recompute_rating()
        await db.commit()

        logger.log_product_changed(str(product_id), action="rated", user_id=str(user.id))
        return await self._get(db, product_id)

    async def list_reviews(self, db: AsyncSession, product_id: uuid.UUID) -> List[ProductReview]:
        product = await self._get(db, product_id)
        return list(product.reviews)

    async def delete_review(
        self,
        db: AsyncSession,
        product_id: uuid.UUID,
        review_id: uuid.UUID,
        user: PublicUser
    ) -> Product:
        """Remove one of the caller's own reviews and refresh the rating."""
        product = await self._get(db, product_id)

        review = next((r for r in product.reviews if r.id == review_id), None)
        if review is None:
            raise NotFoundError("Review not found on this product.")
        if review.user_id != user.id:
            raise ForbiddenError("Forbidden: You are not authorized to delete this review.")

        product.reviews.remove(review)
        product.recompute_rating()
        await db.commit()

        logger.log_product_changed(str(product_id), action="review_deleted", user_id=str(user.id))
        return await self._get(db, product_id)


# Global product service instance
product_service = ProductService()
