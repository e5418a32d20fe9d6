"""Read-only reporting over orders."""
import logging
from collections import defaultdict
from datetime import datetime
from typing import Callable, Dict, List, Optional

from sqlalchemy import func, select
from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy.orm import selectinload

from app.core.dates import day_window, month_window, parse_date_input, sunday_index, week_window
from app.core.errors import NotFoundError, ValidationError
from app.db.models import Company, Feedback, Order, OrderItem, User
from app.services.reporting.models import (
    CompanyOrderCount,
    CompanyOrderExport,
    CompanyOrders,
    DailyRevenue,
    ExportRow,
    OrderInsight,
    RecentOrder,
)

logger = logging.getLogger(__name__)

# Label for orders whose menu item, user or company no longer resolves
UNRESOLVED_LABEL = "Unknown"
NOT_AVAILABLE = "N/A"
DAY_NAMES = ["Sunday", "Monday", "Tuesday", "Wednesday", "Thursday", "Friday", "Saturday"]
RECENT_ORDER_LIMIT = 5


def _with_items():
    return selectinload(Order.items).selectinload(OrderItem.menu_item)


def _with_requester():
    return selectinload(Order.user).selectinload(User.company)


class ReportingService:
    """Aggregations for the dashboard, company views and exports."""

    def __init__(self, db: AsyncSession, clock: Callable[[], datetime] = datetime.now):
        self.db = db
        self.clock = clock

    async def list_orders(self) -> List[Order]:
        """
        All orders with their requester and line items loaded.

        Orders whose user no longer exists are left out of the result.

        Raises:
            NotFoundError: if there are no orders at all
        """
        result = await self.db.execute(
            select(Order)
            .options(_with_requester(), _with_items())
            .order_by(Order.created_at, Order.id)
        )
        orders = list(result.scalars().all())
        if not orders:
            raise NotFoundError("No orders found.")

        resolved = [order for order in orders if order.user is not None]
        dropped = len(orders) - len(resolved)
        if dropped:
            logger.warning(f"Dropped {dropped} orders with unresolved users from order list")
        return resolved

    async def orders_for_user(self, user_id: Optional[int]) -> List[Order]:
        """All orders placed by one user."""
        if not user_id:
            raise ValidationError("User ID is required")

        result = await self.db.execute(
            select(Order)
            .where(Order.user_id == user_id)
            .options(_with_items())
            .order_by(Order.created_at, Order.id)
        )
        orders = list(result.scalars().all())
        if not orders:
            raise NotFoundError("No orders found for this user.")
        return orders

    async def _count_orders(self, start: datetime, end: datetime) -> int:
        return await self.db.scalar(
            select(func.count(Order.id)).where(Order.created_at >= start, Order.created_at < end)
        )

    async def _weekly_revenue(self, start: datetime, end: datetime) -> List[DailyRevenue]:
        result = await self.db.execute(
            select(Order.created_at, Order.total_price).where(
                Order.created_at >= start, Order.created_at < end
            )
        )
        buckets = [0.0] * 7
        for created_at, total_price in result.all():
            buckets[sunday_index(created_at)] += total_price
        return [
            DailyRevenue(day=name, total_revenue=buckets[index])
            for index, name in enumerate(DAY_NAMES)
        ]

    async def _recent_orders(self) -> List[RecentOrder]:
        result = await self.db.execute(
            select(Order)
            .options(_with_requester())
            .order_by(Order.created_at.desc(), Order.id.desc())
            .limit(RECENT_ORDER_LIMIT)
        )
        recent = []
        for order in result.scalars().all():
            user = order.user
            company = user.company if user else None
            recent.append(
                RecentOrder(
                    employee_name=(user.full_name if user else None) or NOT_AVAILABLE,
                    email_address=(user.email if user else None) or NOT_AVAILABLE,
                    phone_number=(user.phone_number if user else None) or NOT_AVAILABLE,
                    company_name=(company.name if company else None) or NOT_AVAILABLE,
                    created_at=order.created_at,
                )
            )
        return recent

    async def order_insight(self) -> OrderInsight:
        """Dashboard snapshot computed as of the current clock reading."""
        now = self.clock()
        today_start, today_end = day_window(now)
        week_start, week_end = week_window(now)
        month_start, month_end = month_window(now)

        weekly_revenue = await self._weekly_revenue(week_start, week_end)
        total_revenue = await self.db.scalar(select(func.sum(Order.total_price)))
        total_companies = await self.db.scalar(select(func.count(Company.id)))
        total_employees = await self.db.scalar(
            select(func.count(User.id)).where(User.company_id.is_not(None))
        )
        average_rating, review_count = (
            await self.db.execute(select(func.avg(Feedback.rating), func.count(Feedback.id)))
        ).one()

        return OrderInsight(
            number_of_orders_today=await self._count_orders(today_start, today_end),
            number_of_orders_this_week=await self._count_orders(week_start, week_end),
            number_of_orders_this_month=await self._count_orders(month_start, month_end),
            total_revenue=total_revenue or 0.0,
            total_companies=total_companies,
            total_employees=total_employees,
            recent_orders=await self._recent_orders(),
            average_review=average_rating or 0.0,
            review_count=review_count,
            weekly_revenue_breakdown=weekly_revenue,
        )

    async def companies_with_orders(self) -> List[CompanyOrders]:
        """
        Every company with the orders placed by its users.

        Users and orders are fetched in two batched queries rather than per
        company.

        Raises:
            NotFoundError: if there are no companies
        """
        result = await self.db.execute(
            select(Company).options(selectinload(Company.users)).order_by(Company.id)
        )
        companies = list(result.scalars().all())
        if not companies:
            raise NotFoundError("No companies found")

        user_ids = [user.id for company in companies for user in company.users]
        orders_by_user: Dict[int, List[Order]] = defaultdict(list)
        if user_ids:
            result = await self.db.execute(
                select(Order)
                .where(Order.user_id.in_(user_ids))
                .options(_with_items())
                .order_by(Order.created_at, Order.id)
            )
            for order in result.scalars().all():
                orders_by_user[order.user_id].append(order)

        grouped = []
        for company in companies:
            orders = [order for user in company.users for order in orders_by_user[user.id]]
            orders.sort(key=lambda order: (order.created_at, order.id))
            grouped.append(CompanyOrders(company_name=company.name, orders=orders))
        return grouped

    async def company_orders_for_date(
        self, company_id: Optional[int], delivery_date: Optional[str]
    ) -> CompanyOrderExport:
        """
        Export rows for one company's orders delivered on a date.

        One row is produced per line item.

        Raises:
            ValidationError: missing company id, missing or bad date
            NotFoundError: unknown company, company without users, no orders
        """
        if not company_id:
            raise ValidationError("Company ID is required")
        if not delivery_date:
            raise ValidationError("Delivery date is required")
        start, end = day_window(parse_date_input(delivery_date))

        company = await self.db.get(Company, company_id)
        if company is None:
            raise NotFoundError(f"No company found with ID {company_id}")

        result = await self.db.execute(select(User.id).where(User.company_id == company_id))
        user_ids = list(result.scalars().all())
        if not user_ids:
            raise NotFoundError(f"No users found for company with ID {company_id}")

        result = await self.db.execute(
            select(Order)
            .where(
                Order.user_id.in_(user_ids),
                Order.delivery_date >= start,
                Order.delivery_date < end,
            )
            .options(_with_items())
            .order_by(Order.created_at, Order.id)
        )
        orders = list(result.scalars().all())
        if not orders:
            raise NotFoundError(
                f"No orders found for company with ID {company_id} on {delivery_date}"
            )

        rows = [
            ExportRow(
                order_id=str(order.id),
                user_id=str(order.user_id),
                delivery_date=order.delivery_date.date().isoformat(),
                status=order.status,
                item_name=item.menu_item.item_name if item.menu_item else UNRESOLVED_LABEL,
                quantity=item.quantity,
                extras=", ".join(item.extras or []),
                total_price=order.total_price,
            )
            for order in orders
            for item in order.items
        ]
        logger.info(
            f"Prepared {len(rows)} export rows from {len(orders)} orders "
            f"for company {company_id} on {delivery_date}"
        )
        return CompanyOrderExport(company=company, requested_date=delivery_date, rows=rows)

    async def order_counts_by_delivery_date(
        self, delivery_date: Optional[str]
    ) -> List[CompanyOrderCount]:
        """
        Count orders delivered on a date, grouped by the requester's company.

        Orders whose user or company cannot be resolved share a single
        "Unknown" bucket with no company id.

        Raises:
            ValidationError: missing or bad date
            NotFoundError: no orders for the date
        """
        if not delivery_date:
            raise ValidationError("Delivery date is required.")
        start, end = day_window(parse_date_input(delivery_date, "Invalid delivery date format."))

        result = await self.db.execute(
            select(Order)
            .where(Order.delivery_date >= start, Order.delivery_date < end)
            .options(_with_requester())
            .order_by(Order.created_at, Order.id)
        )
        orders = list(result.scalars().all())
        if not orders:
            raise NotFoundError("No orders found for the specified delivery date.")

        counts: Dict[object, CompanyOrderCount] = {}
        for order in orders:
            company = order.user.company if order.user else None
            key = company.id if company else UNRESOLVED_LABEL
            if key not in counts:
                counts[key] = CompanyOrderCount(
                    company_id=company.id if company else None,
                    company_name=company.name if company else UNRESOLVED_LABEL,
                )
            counts[key].order_count += 1
        return list(counts.values())
