"""Reporting API endpoints: dashboard, company groupings and exports."""
import logging
from typing import List, Optional

from fastapi import APIRouter, Depends, Query, Request
from fastapi.responses import Response

from app.api.orders import OrderResponse, order_response
from app.core.dependencies import get_exporter, get_reporting_service
from app.core.errors import InternalError, OrderingError
from app.core.schemas import CamelModel
from app.services.reporting.export import (
    XLSX_MEDIA_TYPE,
    OrderSummaryExporter,
    content_disposition,
    export_filename,
)
from app.services.reporting.models import CompanyOrderCount, OrderInsight
from app.services.reporting.service import ReportingService


router = APIRouter()
logger = logging.getLogger(__name__)


class CompanyOrdersResponse(CamelModel):
    """A company's orders with their count."""
    company_name: str
    order_count: int
    orders: List[OrderResponse]


class OrderCountsResponse(CamelModel):
    """Per-company order counts for a delivery date."""
    message: str
    delivery_date: str
    counts: List[CompanyOrderCount]


def _client(request: Request) -> str:
    return request.client.host if request.client else "unknown"


@router.get("/api/orders/insight", response_model=OrderInsight)
async def order_insight(
    request: Request,
    reporting: ReportingService = Depends(get_reporting_service),
):
    """Get the business overview dashboard."""
    logger.info(f"[ORDERS INSIGHT] Request received - Client: {_client(request)}")

    try:
        insight = await reporting.order_insight()
    except OrderingError:
        raise
    except Exception as e:
        logger.error(
            f"[ORDERS INSIGHT] Error fetching order insights - Error: {type(e).__name__}: {str(e)}",
            exc_info=True
        )
        raise InternalError("An error occurred while fetching order insights.", str(e))

    logger.debug(
        f"[ORDERS INSIGHT] today: {insight.number_of_orders_today}, "
        f"week: {insight.number_of_orders_this_week}, month: {insight.number_of_orders_this_month}"
    )
    return insight


@router.get("/api/orders/companies", response_model=List[CompanyOrdersResponse])
async def companies_with_order_counts(
    request: Request,
    reporting: ReportingService = Depends(get_reporting_service),
):
    """Get every company with its orders and order count."""
    logger.info(f"[ORDERS COMPANIES] Request received - Client: {_client(request)}")

    try:
        grouped = await reporting.companies_with_orders()
    except OrderingError as e:
        logger.info(f"[ORDERS COMPANIES] {e.message}")
        raise
    except Exception as e:
        logger.error(
            f"[ORDERS COMPANIES] Error grouping orders - Error: {type(e).__name__}: {str(e)}",
            exc_info=True
        )
        raise InternalError("Internal server error", str(e))

    return [
        CompanyOrdersResponse(
            company_name=group.company_name,
            order_count=group.order_count,
            orders=[order_response(order) for order in group.orders],
        )
        for group in grouped
    ]


@router.get("/api/orders/export")
async def export_company_orders(
    request: Request,
    company_id: Optional[int] = Query(None, alias="companyId"),
    delivery_date: Optional[str] = Query(None, alias="deliveryDate"),
    reporting: ReportingService = Depends(get_reporting_service),
    exporter: OrderSummaryExporter = Depends(get_exporter),
):
    """Download a company's orders for a delivery date as a spreadsheet."""
    logger.info(
        f"[ORDERS EXPORT] Request received - company: {company_id}, "
        f"date: {delivery_date}, Client: {_client(request)}"
    )

    try:
        export = await reporting.company_orders_for_date(company_id, delivery_date)
        content = exporter.write(export.rows)
        filename = export_filename(export.company.name, export.requested_date)
        response = Response(
            content=content,
            media_type=XLSX_MEDIA_TYPE,
            headers={"Content-Disposition": content_disposition(filename)},
        )
    except OrderingError as e:
        logger.info(f"[ORDERS EXPORT] company: {company_id}, {e.message}")
        raise
    except Exception as e:
        logger.error(
            f"[ORDERS EXPORT] Error exporting orders - company: {company_id}, "
            f"date: {delivery_date}, Error: {type(e).__name__}: {str(e)}",
            exc_info=True
        )
        raise InternalError("Error exporting orders", str(e))

    logger.info(f"[ORDERS EXPORT] Sending {filename} - {len(export.rows)} rows")
    return response


@router.get("/api/orders/count-by-delivery-date", response_model=OrderCountsResponse)
async def order_count_by_delivery_date(
    request: Request,
    delivery_date: Optional[str] = Query(None, alias="deliveryDate"),
    reporting: ReportingService = Depends(get_reporting_service),
):
    """Count orders for a delivery date, grouped by company."""
    logger.info(
        f"[ORDERS COUNTS] Request received - date: {delivery_date}, Client: {_client(request)}"
    )

    try:
        counts = await reporting.order_counts_by_delivery_date(delivery_date)
    except OrderingError as e:
        logger.info(f"[ORDERS COUNTS] date: {delivery_date}, {e.message}")
        raise
    except Exception as e:
        logger.error(
            f"[ORDERS COUNTS] Error fetching order counts - "
            f"date: {delivery_date}, Error: {type(e).__name__}: {str(e)}",
            exc_info=True
        )
        raise InternalError("Error fetching order counts.", str(e))

    return OrderCountsResponse(
        message="Order counts retrieved successfully.",
        delivery_date=delivery_date.split("T")[0],
        counts=counts,
    )
