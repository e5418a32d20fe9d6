"""Order persistence service."""
from datetime import datetime
from typing import Optional, List

from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy import select
from sqlalchemy.orm import selectinload

from app.db.models import Order, OrderItem
from app.services.ordering.models import (
    EnrichedLineItem,
    FulfillmentStatus,
    PaymentMethod,
    PaymentStatus,
)


class OrderPersistenceService:
    """Service for persisting order data."""

    def __init__(self, db: AsyncSession):
        self.db = db

    async def create_order(
        self,
        user_id: int,
        items: List[EnrichedLineItem],
        total_price: float,
        payment_method: PaymentMethod,
        delivery_date: datetime,
    ) -> Order:
        """Create a new order with its line items in one commit."""
        order = Order(
            user_id=user_id,
            total_price=total_price,
            payment_method=payment_method.value,
            payment_status=PaymentStatus.COMPLETED.value,
            delivery_date=delivery_date,
            status=FulfillmentStatus.ORDERED.value,
            items=[
                OrderItem(
                    menu_item_id=item.item_id,
                    quantity=item.quantity,
                    extras=list(item.extras),
                )
                for item in items
            ],
        )
        self.db.add(order)
        await self.db.commit()
        return await self.get_order_by_id(order.id)

    async def get_order_by_id(self, order_id: int) -> Optional[Order]:
        """Get order by ID with items."""
        result = await self.db.execute(
            select(Order)
            .where(Order.id == order_id)
            .options(selectinload(Order.items).selectinload(OrderItem.menu_item))
            .execution_options(populate_existing=True)
        )
        return result.scalar_one_or_none()

    async def get_orders_for_user(self, user_id: int) -> List[Order]:
        """Get all orders placed by a user, oldest first."""
        result = await self.db.execute(
            select(Order)
            .where(Order.user_id == user_id)
            .options(selectinload(Order.items).selectinload(OrderItem.menu_item))
            .order_by(Order.created_at, Order.id)
        )
        return list(result.scalars().all())
