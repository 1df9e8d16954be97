"""Order model."""
import uuid
from datetime import datetime
from typing import Any, Dict, List, Optional

from sqlalchemy import String, Integer, BigInteger, Float, Boolean, Text, ForeignKey, JSON, DateTime, Uuid
from sqlalchemy.orm import Mapped, mapped_column

from .base import Base

ORDER_STATUSES = ("Processing", "Shipped", "Delivered", "Cancelled", "Payment Pending")


class Order(Base):
    """Order placed by a user after payment."""

    __tablename__ = "orders"

    # Shipping info
    shipping_address: Mapped[str] = mapped_column(Text, nullable=False)
    shipping_state: Mapped[str] = mapped_column(String(100), nullable=False)
    shipping_country: Mapped[str] = mapped_column(String(100), default="IN", nullable=False)
    shipping_pincode: Mapped[int] = mapped_column(Integer, nullable=False)
    shipping_phone_number: Mapped[int] = mapped_column(BigInteger, nullable=False)

    # Snapshot of the cart at checkout: name, price, quantity, image, product
    ordered_items: Mapped[List[Dict[str, Any]]] = mapped_column(JSON, nullable=False)

    user_id: Mapped[uuid.UUID] = mapped_column(
        Uuid,
        ForeignKey("users.id", ondelete="CASCADE"),
        nullable=False,
        index=True
    )

    payment_id: Mapped[str] = mapped_column(String(255), nullable=False)
    payment_status: Mapped[bool] = mapped_column(Boolean, default=False, nullable=False)
    paid_at: Mapped[datetime] = mapped_column(DateTime(timezone=True), nullable=False)

    items_price: Mapped[float] = mapped_column(Float, default=0.0, nullable=False)
    tax_price: Mapped[float] = mapped_column(Float, default=0.0, nullable=False)
    shipping_price: Mapped[float] = mapped_column(Float, default=0.0, nullable=False)
    total_price: Mapped[float] = mapped_column(Float, default=0.0, nullable=False)

    order_status: Mapped[str] = mapped_column(String(50), default="Processing", nullable=False)
    delivered_at: Mapped[Optional[datetime]] = mapped_column(DateTime(timezone=True))

    def __repr__(self) -> str:
        return f"<Order(user_id={self.user_id}, status={self.order_status})>"
