"""Unit tests for order creation."""
import pytest
from datetime import datetime
from sqlalchemy import select, func

from app.core.errors import NotFoundError, ValidationError
from app.db.models import Order, OrderItem
from app.services.ordering.models import CreateOrderRequest, OrderLineRequest
from app.services.ordering.service import OrderService


@pytest.fixture
def order_service(fresh_db, notifier):
    """Order service bound to a request-like session."""
    return OrderService(db=fresh_db, notifier=notifier)


def _request(user_id, lines, payment_method="card", delivery_date="2026-10-20"):
    return CreateOrderRequest(
        user_id=user_id,
        items=[
            OrderLineRequest(item_id=item_id, quantity=quantity, extras=extras)
            for item_id, quantity, extras in lines
        ],
        payment_method=payment_method,
        delivery_date=delivery_date,
    )


async def _order_count(db) -> int:
    return await db.scalar(select(func.count(Order.id)))


class TestCreateOrder:
    """Test order creation."""

    async def test_total_is_catalog_price_times_quantity(self, order_service, seed):
        """Total is the sum of catalog price times quantity."""
        created = await order_service.create_order(
            _request(seed.alice.id, [(seed.burger.id, 2, []), (seed.fries.id, 1, ["salt"])])
        )

        # 2 x 10.00 + 1 x 3.50
        assert created.total_price == 23.50
        assert created.order.total_price == 23.50

    async def test_order_defaults(self, order_service, seed):
        """New orders are paid and ordered, with the parsed delivery date."""
        created = await order_service.create_order(
            _request(seed.alice.id, [(seed.soda.id, 1, [])], payment_method="Cash")
        )

        order = created.order
        assert order.id is not None
        assert order.user_id == seed.alice.id
        assert order.payment_status == "completed"
        assert order.status == "ordered"
        assert order.payment_method == "cash"
        assert order.delivery_date == datetime(2026, 10, 20)
        assert order.created_at is not None

    async def test_line_items_persisted_and_enriched(self, order_service, seed, test_db):
        """Line items are stored with extras and returned with catalog names."""
        created = await order_service.create_order(
            _request(seed.bob.id, [(seed.burger.id, 1, ["no onions", "extra cheese"])])
        )

        assert [(i.item_id, i.item_name, i.quantity, i.extras) for i in created.items] == [
            (seed.burger.id, "burger", 1, ["no onions", "extra cheese"])
        ]
        result = await test_db.execute(select(OrderItem).where(OrderItem.order_id == created.order.id))
        stored = result.scalars().all()
        assert len(stored) == 1
        assert stored[0].menu_item_id == seed.burger.id
        assert stored[0].extras == ["no onions", "extra cheese"]

    async def test_confirmation_sent(self, order_service, seed, notifier):
        """A confirmation is sent to the user with the itemized order."""
        created = await order_service.create_order(
            _request(seed.alice.id, [(seed.burger.id, 2, []), (seed.soda.id, 3, [])])
        )

        assert len(notifier.sent) == 1
        confirmation = notifier.sent[0]
        assert confirmation.order_id == created.order.id
        assert confirmation.recipient == "alice@acme.test"
        assert confirmation.full_name == "Alice Adams"
        assert confirmation.total_price == 26.00
        assert [(line.quantity, line.item_name) for line in confirmation.items] == [
            (2, "burger"),
            (3, "soda"),
        ]

    async def test_unknown_menu_item_persists_nothing(self, order_service, seed, test_db, notifier):
        """A missing menu item fails the whole request and writes no order."""
        with pytest.raises(NotFoundError) as exc_info:
            await order_service.create_order(
                _request(seed.alice.id, [(seed.burger.id, 1, []), (9999, 1, [])])
            )

        assert exc_info.value.message == "Menu item with ID 9999 not found."
        assert await _order_count(test_db) == 0
        assert notifier.sent == []

    async def test_unknown_user(self, order_service, seed, test_db):
        """A missing user is reported and no order is written."""
        with pytest.raises(NotFoundError) as exc_info:
            await order_service.create_order(_request(4242, [(seed.burger.id, 1, [])]))

        assert exc_info.value.message == "User not found."
        assert await _order_count(test_db) == 0

    @pytest.mark.parametrize(
        "field",
        ["user_id", "items", "payment_method", "delivery_date"],
    )
    async def test_missing_field(self, order_service, seed, field):
        """Every field is required."""
        request = _request(seed.alice.id, [(seed.burger.id, 1, [])])
        setattr(request, field, None)

        with pytest.raises(ValidationError) as exc_info:
            await order_service.create_order(request)
        assert exc_info.value.message == "All fields are required"

    async def test_empty_items(self, order_service, seed):
        """An empty item list counts as missing."""
        with pytest.raises(ValidationError):
            await order_service.create_order(_request(seed.alice.id, []))

    async def test_invalid_delivery_date(self, order_service, seed, test_db):
        """An unparsable delivery date is rejected before any lookup."""
        with pytest.raises(ValidationError) as exc_info:
            await order_service.create_order(
                _request(seed.alice.id, [(seed.burger.id, 1, [])], delivery_date="someday")
            )
        assert exc_info.value.message == "Invalid delivery date format"
        assert await _order_count(test_db) == 0

    async def test_invalid_payment_method(self, order_service, seed):
        """Unknown payment methods are rejected."""
        with pytest.raises(ValidationError) as exc_info:
            await order_service.create_order(
                _request(seed.alice.id, [(seed.burger.id, 1, [])], payment_method="barter")
            )
        assert exc_info.value.message == "Invalid payment method"

    async def test_notification_failure_keeps_order(self, order_service, seed, notifier, test_db):
        """The order stays persisted when the confirmation cannot be sent."""
        notifier.fail = True

        with pytest.raises(ConnectionError):
            await order_service.create_order(_request(seed.alice.id, [(seed.burger.id, 1, [])]))

        assert await _order_count(test_db) == 1
