"""Order routes."""
from fastapi import APIRouter, Depends, status
from sqlalchemy.ext.asyncio import AsyncSession

from ...core.security import get_current_user
from ...database import get_db
from ...schemas.order import OrderCreate, OrderEnvelope, OrderResponse
from ...schemas.user import PublicUser
from ...services.order import order_service

router = APIRouter(prefix="/order", tags=["Order"])


@router.post("/new", response_model=OrderEnvelope, status_code=status.HTTP_201_CREATED)
async def create_new_order(
    order_create: OrderCreate,
    current_user: PublicUser = Depends(get_current_user),
    db: AsyncSession = Depends(get_db)
):
    """Place an order for a cart that has already been paid for."""
    order = await order_service.create_order(db, current_user, order_create)
    return OrderEnvelope(order=OrderResponse.from_order(order))
