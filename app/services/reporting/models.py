"""Reporting result models."""
from datetime import datetime
from typing import List, Optional

from pydantic import BaseModel

from app.core.schemas import CamelModel
from app.db.models import Company, Order


class DailyRevenue(CamelModel):
    """Revenue for one day of the current week."""

    day: str
    total_revenue: float = 0.0


class RecentOrder(CamelModel):
    """Requester details for a recently placed order."""

    employee_name: str
    email_address: str
    phone_number: str
    company_name: str
    created_at: datetime


class OrderInsight(CamelModel):
    """Dashboard snapshot."""

    number_of_orders_today: int
    number_of_orders_this_week: int
    number_of_orders_this_month: int
    total_revenue: float
    total_companies: int
    total_employees: int
    recent_orders: List[RecentOrder]
    average_review: float
    review_count: int
    weekly_revenue_breakdown: List[DailyRevenue]


class CompanyOrderCount(CamelModel):
    """Orders for one delivery date attributed to one company."""

    company_id: Optional[int] = None
    company_name: str
    order_count: int = 0


class ExportRow(CamelModel):
    """One spreadsheet row: a single line item of an order."""

    order_id: str
    user_id: str
    delivery_date: str
    status: str
    item_name: str
    quantity: int
    extras: str
    total_price: float


class CompanyOrders(BaseModel):
    """All orders placed by a company's users."""

    company_name: str
    orders: List[Order]

    @property
    def order_count(self) -> int:
        return len(self.orders)

    class Config:
        arbitrary_types_allowed = True


class CompanyOrderExport(BaseModel):
    """Rows to export for a company and delivery date."""

    company: Company
    requested_date: str
    rows: List[ExportRow]

    class Config:
        arbitrary_types_allowed = True
