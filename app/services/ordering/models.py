"""Order models."""
from enum import Enum
from typing import List, Optional

from pydantic import Field

from app.core.schemas import CamelModel


class PaymentMethod(str, Enum):
    """Accepted payment methods."""

    CASH = "cash"
    CARD = "card"
    ONLINE = "online"


class PaymentStatus(str, Enum):
    """Payment status. Orders are created already paid."""

    COMPLETED = "completed"


class FulfillmentStatus(str, Enum):
    """Order fulfillment status. Only ORDERED is set by this service."""

    ORDERED = "ordered"
    PREPARING = "preparing"
    OUT_FOR_DELIVERY = "out_for_delivery"
    DELIVERED = "delivered"
    CANCELLED = "cancelled"


class OrderLineRequest(CamelModel):
    """Requested line item."""

    item_id: int
    quantity: int = Field(gt=0)
    extras: List[str] = []


class CreateOrderRequest(CamelModel):
    """Create-order request body. Presence is checked by the service."""

    user_id: Optional[int] = None
    items: Optional[List[OrderLineRequest]] = None
    payment_method: Optional[str] = None
    delivery_date: Optional[str] = None


class EnrichedLineItem(CamelModel):
    """Line item annotated with catalog data."""

    item_id: int
    item_name: str
    quantity: int
    extras: List[str] = []
