"""Order placement service."""
from datetime import datetime, timezone
from typing import Optional

from sqlalchemy.ext.asyncio import AsyncSession

from ..core.exceptions import ValidationError
from ..core.logging import BusinessLogger
from ..models.order import Order
from ..schemas.order import OrderCreate
from ..schemas.user import PublicUser

logger = BusinessLogger()

# Allowed drift between the client total and items + tax + shipping
PRICE_TOLERANCE = 0.01


class OrderService:
    """Records orders placed after the client has taken payment.

    Prices arrive from the client cart; only their sum is checked here.
    """

    async def create_order(
        self,
        db: AsyncSession,
        user: PublicUser,
        order_create: OrderCreate,
        now: Optional[datetime] = None
    ) -> Order:
        computed_total = (
            order_create.items_price + order_create.tax_price + order_create.shipping_price
        )
        if abs(computed_total - order_create.total_price) > PRICE_TOLERANCE:
            logger.log_order_price_mismatch(
                user_id=str(user.id),
                client_total=order_create.total_price,
                computed_total=computed_total,
            )
            raise ValidationError(
                "Total price mismatch. Please verify cart calculation before placing the order."
            )

        shipping = order_create.shipping_info
        order = Order(
            shipping_address=shipping.address,
            shipping_state=shipping.state,
            shipping_country=shipping.country,
            shipping_pincode=shipping.pincode,
            shipping_phone_number=shipping.phone_number,
            ordered_items=[item.model_dump(mode="json") for item in order_create.ordered_items],
            user_id=user.id,
            payment_id=order_create.payment_info.id,
            payment_status=True,
            paid_at=now or datetime.now(timezone.utc),
            items_price=order_create.items_price,
            tax_price=order_create.tax_price,
            shipping_price=order_create.shipping_price,
            total_price=order_create.total_price,
            order_status="Processing",
        )

        db.add(order)
        await db.commit()
        await db.refresh(order)

        logger.log_order_placed(
            order_id=str(order.id),
            user_id=str(user.id),
            total_price=order.total_price,
            items_count=len(order.ordered_items),
        )
        return order


# Global order service instance
order_service = OrderService()
