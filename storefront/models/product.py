"""Product catalogue models."""
import uuid
from typing import Any, Dict, List, Optional

from sqlalchemy import String, Integer, Float, Text, ForeignKey, JSON, Uuid
from sqlalchemy.orm import Mapped, mapped_column, relationship

from .base import Base

PRODUCT_CATEGORIES = (
    "Mobile", "Electronics", "Clothing", "Home & Garden", "Automotive",
    "Health & Beauty", "Sports & Outdoors", "Toys & Games", "Books & Media",
    "Jewelry", "Food & Grocery", "Furniture", "Shoes", "Pet Supplies",
    "Office Supplies", "Baby & Kids", "Art & Collectibles", "Travel & Luggage",
    "Music Instruments", "Electrical Appliances", "Handmade Crafts",
)


class Product(Base):
    """Product listed in the storefront."""

    __tablename__ = "products"

    name: Mapped[str] = mapped_column(String(255), nullable=False, index=True)
    description: Mapped[str] = mapped_column(Text, nullable=False)
    price: Mapped[float] = mapped_column(Float, nullable=False)
    rating: Mapped[float] = mapped_column(Float, default=0.0, nullable=False)
    images: Mapped[List[Dict[str, Any]]] = mapped_column(JSON, default=list, nullable=False)
    category: Mapped[str] = mapped_column(String(50), nullable=False, index=True)
    stock: Mapped[int] = mapped_column(Integer, default=1, nullable=False)
    number_of_reviews: Mapped[int] = mapped_column(Integer, default=0, nullable=False)

    created_by: Mapped[Optional[uuid.UUID]] = mapped_column(
        Uuid,
        ForeignKey("users.id", ondelete="SET NULL"),
    )

    reviews: Mapped[List["ProductReview"]] = relationship(
        "ProductReview",
        back_populates="product",
        cascade="all, delete-orphan",
        lazy="selectin",
        order_by="ProductReview.created_at",
    )

    def recompute_rating(self) -> None:
        """Refresh the mean rating and review count from the attached reviews."""
        if self.reviews:
            self.rating = sum(review.rating for review in self.reviews) / len(self.reviews)
        else:
            self.rating = 0.0
        self.number_of_reviews = len(self.reviews)

    def __repr__(self) -> str:
        return f"<Product(name={self.name}, category={self.category})>"


class ProductReview(Base):
    """A user's rating of a product. One per user per product."""

    __tablename__ = "product_reviews"

    product_id: Mapped[uuid.UUID] = mapped_column(
        Uuid,
        ForeignKey("products.id", ondelete="CASCADE"),
        nullable=False,
        index=True
    )
    user_id: Mapped[uuid.UUID] = mapped_column(
        Uuid,
        ForeignKey("users.id", ondelete="CASCADE"),
        nullable=False,
    )
    name: Mapped[str] = mapped_column(String(255), nullable=False)
    rating: Mapped[float] = mapped_column(Float, nullable=False)
    comment: Mapped[str] = mapped_column(Text, default="", nullable=False)
    product: Mapped["Product"] = relationship("Product", back_populates="reviews")

    def __repr__(self) -> str:
        return f"<ProductReview(product_id={self.product_id}, rating={self.rating})>"
