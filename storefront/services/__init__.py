"""Services module."""
from .email import email_service
from .product import product_service
from .order import order_service

__all__ = [
    "email_service",
    "product_service",
    "order_service",
]
