"""Database models module."""
from .base import Base
from .user import User
from .product import Product, ProductReview
from .order import Order

__all__ = [
    "Base",
    "User",
    "Product",
    "ProductReview",
    "Order",
]
