"""Notifier interface."""
from abc import ABC, abstractmethod
from datetime import datetime
from typing import List

from pydantic import BaseModel


class ConfirmationLine(BaseModel):
    """One line of the itemized confirmation."""

    item_name: str
    quantity: int


class OrderConfirmation(BaseModel):
    """Everything needed to tell a user their order was placed."""

    order_id: int
    recipient: str
    full_name: str
    total_price: float
    delivery_date: datetime
    items: List[ConfirmationLine]


class Notifier(ABC):
    """Abstract base class for outbound notifications."""

    @abstractmethod
    async def send_order_confirmation(self, confirmation: OrderConfirmation) -> None:
        """Deliver an order confirmation. Raises on delivery failure."""
        pass
