"""Order schemas."""
import uuid
from datetime import datetime
from typing import List, Optional

from pydantic import Field

from .common import BaseSchema


class ShippingInfo(BaseSchema):
    address: str = Field(..., min_length=1)
    state: str = Field(..., min_length=1)
    country: str = "IN"
    pincode: int
    phone_number: int = Field(..., alias="phoneNumber")


class OrderedItem(BaseSchema):
    name: str = Field(..., min_length=1)
    price: float = Field(..., ge=0)
    quantity: int = Field(..., ge=1)
    image: str = Field(..., min_length=1)
    product: uuid.UUID


class PaymentInfo(BaseSchema):
    id: str = Field(..., min_length=1, description="Payment gateway transaction id")


class OrderCreate(BaseSchema):
    """New order body. Prices come from the client cart."""

    shipping_info: ShippingInfo = Field(..., alias="shippingInfo")
    ordered_items: List[OrderedItem] = Field(..., alias="orderedItems", min_length=1)
    payment_info: PaymentInfo = Field(..., alias="paymentInfo")
    items_price: float = Field(..., alias="itemsPrice", ge=0)
    tax_price: float = Field(..., alias="taxPrice", ge=0)
    shipping_price: float = Field(..., alias="shippingPrice", ge=0)
    total_price: float = Field(..., alias="totalPrice", ge=0)


class OrderResponse(BaseSchema):
    """Order response schema."""

    id: uuid.UUID
    user_id: uuid.UUID
    shipping_info: ShippingInfo
    ordered_items: List[OrderedItem]
    payment_id: str
    payment_status: bool
    paid_at: datetime
    items_price: float
    tax_price: float
    shipping_price: float
    total_price: float
    order_status: str
    delivered_at: Optional[datetime] = None
    created_at: datetime

    @classmethod
    def from_order(cls, order) -> "OrderResponse":
        return cls(
            id=order.id,
            user_id=order.user_id,
            shipping_info=ShippingInfo(
                address=order.shipping_address,
                state=order.shipping_state,
                country=order.shipping_country,
                pincode=order.shipping_pincode,
                phone_number=order.shipping_phone_number,
            ),
            ordered_items=[OrderedItem.model_validate(item) for item in order.ordered_items],
            payment_id=order.payment_id,
            payment_status=order.payment_status,
            paid_at=order.paid_at,
            items_price=order.items_price,
            tax_price=order.tax_price,
            shipping_price=order.shipping_price,
            total_price=order.total_price,
            order_status=order.order_status,
            delivered_at=order.delivered_at,
            created_at=order.created_at,
        )


class OrderEnvelope(BaseSchema):
    success: bool = True
    message: str = "Order placed successfully!"
    order: OrderResponse
