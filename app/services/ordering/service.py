"""Order creation service."""
import logging
from typing import List

from pydantic import BaseModel
from sqlalchemy.ext.asyncio import AsyncSession

from app.core.dates import parse_date_input
from app.core.errors import NotFoundError, ValidationError
from app.db.models import Order
from app.services.notifications.base import ConfirmationLine, Notifier, OrderConfirmation
from app.services.ordering.models import CreateOrderRequest, EnrichedLineItem, PaymentMethod
from app.services.persistence.catalog import CatalogPersistenceService
from app.services.persistence.orders import OrderPersistenceService

logger = logging.getLogger(__name__)


class CreatedOrder(BaseModel):
    """A persisted order together with its enriched line items."""

    order: Order
    items: List[EnrichedLineItem]
    total_price: float

    class Config:
        arbitrary_types_allowed = True


class OrderService:
    """Validates, prices and persists orders, then confirms them to the user."""

    def __init__(self, db: AsyncSession, notifier: Notifier):
        self.catalog = CatalogPersistenceService(db)
        self.orders = OrderPersistenceService(db)
        self.notifier = notifier

    def _payment_method(self, value: str) -> PaymentMethod:
        try:
            return PaymentMethod(value.strip().lower())
        except ValueError as e:
            raise ValidationError("Invalid payment method") from e

    async def create_order(self, request: CreateOrderRequest) -> CreatedOrder:
        """
        Create an order from a request.

        Every line is resolved against the catalog before anything is written,
        so a missing menu item or user leaves no order behind. The confirmation
        is sent after the commit; if it fails the order stays persisted.

        Raises:
            ValidationError: missing fields, bad date or payment method
            NotFoundError: unknown menu item or user
        """
        if (
            not request.user_id
            or not request.items
            or not request.payment_method
            or not request.delivery_date
        ):
            raise ValidationError("All fields are required")

        delivery_date = parse_date_input(request.delivery_date)
        payment_method = self._payment_method(request.payment_method)

        total_price = 0.0
        enriched_items: List[EnrichedLineItem] = []
        for line in request.items:
            menu_item = await self.catalog.get_menu_item(line.item_id)
            if menu_item is None:
                raise NotFoundError(f"Menu item with ID {line.item_id} not found.")

            enriched_items.append(
                EnrichedLineItem(
                    item_id=menu_item.id,
                    item_name=menu_item.item_name,
                    quantity=line.quantity,
                    extras=line.extras,
                )
            )
            total_price += menu_item.price * line.quantity

        user = await self.catalog.get_user(request.user_id)
        if user is None:
            raise NotFoundError("User not found.")

        order = await self.orders.create_order(
            user_id=user.id,
            items=enriched_items,
            total_price=total_price,
            payment_method=payment_method,
            delivery_date=delivery_date,
        )
        logger.info(
            f"Order {order.id} created for user {user.id} - "
            f"{len(enriched_items)} lines, total {total_price:.2f}"
        )

        await self.notifier.send_order_confirmation(
            OrderConfirmation(
                order_id=order.id,
                recipient=user.email,
                full_name=user.full_name or user.name,
                total_price=total_price,
                delivery_date=delivery_date,
                items=[
                    ConfirmationLine(item_name=item.item_name, quantity=item.quantity)
                    for item in enriched_items
                ],
            )
        )

        return CreatedOrder(order=order, items=enriched_items, total_price=total_price)
