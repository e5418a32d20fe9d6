"""FastAPI dependencies."""
from fastapi import Depends
from sqlalchemy.ext.asyncio import AsyncSession

from app.core.config import settings
from app.db.database import get_db
from app.services.notifications.base import Notifier
from app.services.notifications.mailer import LoggingNotifier, SmtpNotifier
from app.services.ordering.service import OrderService
from app.services.reporting.export import OrderSummaryExporter
from app.services.reporting.service import ReportingService


def get_notifier() -> Notifier:
    """Get the notifier for order confirmations."""
    if not settings.mail_configured:
        return LoggingNotifier(business_name=settings.business_name)
    return SmtpNotifier(
        host=settings.smtp_host,
        port=settings.smtp_port,
        username=settings.email_username,
        password=settings.email_password,
        business_name=settings.business_name,
    )


def get_order_service(
    db: AsyncSession = Depends(get_db),
    notifier: Notifier = Depends(get_notifier),
) -> OrderService:
    """Get order service instance."""
    return OrderService(db=db, notifier=notifier)


def get_reporting_service(db: AsyncSession = Depends(get_db)) -> ReportingService:
    """Get reporting service instance."""
    return ReportingService(db=db)


def get_exporter() -> OrderSummaryExporter:
    """Get spreadsheet exporter instance."""
    return OrderSummaryExporter()
