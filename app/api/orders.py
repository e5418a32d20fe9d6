"""Order API endpoints."""
import logging
from datetime import datetime
from typing import List, Optional

from fastapi import APIRouter, Depends, Query, Request

from app.core.dependencies import get_order_service, get_reporting_service
from app.core.errors import InternalError, OrderingError
from app.core.schemas import CamelModel
from app.db.models import Company, Order, User
from app.services.ordering.models import CreateOrderRequest, EnrichedLineItem
from app.services.ordering.service import OrderService
from app.services.reporting.service import ReportingService


router = APIRouter()
logger = logging.getLogger(__name__)


class LineItemResponse(CamelModel):
    """Order line item response model."""
    item_id: Optional[int] = None
    item_name: Optional[str] = None
    quantity: int
    extras: List[str] = []


class OrderResponse(CamelModel):
    """Order response model."""
    id: int
    user_id: Optional[int] = None
    items: List[LineItemResponse] = []
    total_price: float
    payment_method: str
    payment_status: str
    delivery_date: datetime
    status: str
    created_at: datetime
    updated_at: datetime


class CreateOrderResponse(CamelModel):
    """Create-order response model."""
    message: str
    order: OrderResponse
    total_price: float


class UserOrdersResponse(CamelModel):
    """Orders for one user."""
    message: str
    orders: List[OrderResponse]


class CompanyResponse(CamelModel):
    """Company details embedded in an order view."""
    id: int
    name: str
    address: Optional[str] = None
    contact_number: Optional[str] = None


class RequesterResponse(CamelModel):
    """User who placed an order."""
    id: int
    name: str
    full_name: Optional[str] = None
    email: str
    phone_number: Optional[str] = None
    company: Optional[CompanyResponse] = None


class OrderViewItemResponse(CamelModel):
    """Line item with catalog name and price inlined."""
    item_id: Optional[int] = None
    name: Optional[str] = None
    price: Optional[float] = None
    quantity: int
    extras: List[str] = []


class OrderViewResponse(CamelModel):
    """Order joined to its requester and catalog items."""
    order_id: int
    user: RequesterResponse
    items: List[OrderViewItemResponse]
    total_price: float
    payment_method: str
    payment_status: str
    delivery_date: datetime
    status: str
    created_at: datetime
    updated_at: datetime


class OrderListResponse(CamelModel):
    """Order list response model."""
    message: str
    orders: List[OrderViewResponse]


def _client(request: Request) -> str:
    return request.client.host if request.client else "unknown"


def order_response(order: Order, items: Optional[List[EnrichedLineItem]] = None) -> OrderResponse:
    """Build an order response, using enriched items when given."""
    if items is not None:
        item_responses = [LineItemResponse(**item.model_dump()) for item in items]
    else:
        item_responses = [
            LineItemResponse(
                item_id=item.menu_item_id,
                item_name=item.menu_item.item_name if item.menu_item else None,
                quantity=item.quantity,
                extras=item.extras or [],
            )
            for item in order.items
        ]
    return OrderResponse(
        id=order.id,
        user_id=order.user_id,
        items=item_responses,
        total_price=order.total_price,
        payment_method=order.payment_method,
        payment_status=order.payment_status,
        delivery_date=order.delivery_date,
        status=order.status,
        created_at=order.created_at,
        updated_at=order.updated_at,
    )


def _company_response(company: Optional[Company]) -> Optional[CompanyResponse]:
    if company is None:
        return None
    return CompanyResponse(
        id=company.id,
        name=company.name,
        address=company.address,
        contact_number=company.contact_number,
    )


def _requester_response(user: User) -> RequesterResponse:
    return RequesterResponse(
        id=user.id,
        name=user.name,
        full_name=user.full_name,
        email=user.email,
        phone_number=user.phone_number,
        company=_company_response(user.company),
    )


def order_view_response(order: Order) -> OrderViewResponse:
    """Build the flattened order view. The order's user must be resolved."""
    return OrderViewResponse(
        order_id=order.id,
        user=_requester_response(order.user),
        items=[
            OrderViewItemResponse(
                item_id=item.menu_item.id if item.menu_item else None,
                name=item.menu_item.item_name if item.menu_item else None,
                price=item.menu_item.price if item.menu_item else None,
                quantity=item.quantity,
                extras=item.extras or [],
            )
            for item in order.items
        ],
        total_price=order.total_price,
        payment_method=order.payment_method,
        payment_status=order.payment_status,
        delivery_date=order.delivery_date,
        status=order.status,
        created_at=order.created_at,
        updated_at=order.updated_at,
    )


@router.post("/api/orders", response_model=CreateOrderResponse, status_code=201)
async def create_order(
    request: Request,
    payload: CreateOrderRequest,
    order_service: OrderService = Depends(get_order_service),
):
    """Create an order and send the confirmation email."""
    logger.info(
        f"[ORDERS CREATE] Request received - user: {payload.user_id}, "
        f"lines: {len(payload.items or [])}, Client: {_client(request)}"
    )

    try:
        created = await order_service.create_order(payload)
    except OrderingError as e:
        logger.warning(f"[ORDERS CREATE] Rejected - user: {payload.user_id}, {e.message}")
        raise
    except Exception as e:
        logger.error(
            f"[ORDERS CREATE] Error creating order - "
            f"user: {payload.user_id}, Error: {type(e).__name__}: {str(e)}",
            exc_info=True
        )
        raise InternalError("An error occurred while creating the order.", str(e))

    logger.info(
        f"[ORDERS CREATE] Order {created.order.id} created - total: {created.total_price:.2f}"
    )
    return CreateOrderResponse(
        message="Order created successfully and email sent",
        order=order_response(created.order, created.items),
        total_price=created.total_price,
    )


@router.get("/api/orders", response_model=OrderListResponse)
async def list_orders(
    request: Request,
    reporting: ReportingService = Depends(get_reporting_service),
):
    """Get all orders with requester and item details."""
    logger.info(f"[ORDERS LIST] Request received - Client: {_client(request)}")

    try:
        orders = await reporting.list_orders()
    except OrderingError as e:
        logger.info(f"[ORDERS LIST] {e.message}")
        raise
    except Exception as e:
        logger.error(
            f"[ORDERS LIST] Error fetching order list - Error: {type(e).__name__}: {str(e)}",
            exc_info=True
        )
        raise InternalError("An error occurred while fetching the order list.", str(e))

    logger.info(f"[ORDERS LIST] Returning {len(orders)} orders")
    return OrderListResponse(
        message="Orders fetched successfully",
        orders=[order_view_response(order) for order in orders],
    )


@router.get("/api/orders/my", response_model=UserOrdersResponse)
async def my_orders(
    request: Request,
    user_id: Optional[int] = Query(None, alias="userId"),
    reporting: ReportingService = Depends(get_reporting_service),
):
    """Get all orders placed by a user."""
    logger.info(f"[ORDERS MY] Request received - user: {user_id}, Client: {_client(request)}")

    try:
        orders = await reporting.orders_for_user(user_id)
    except OrderingError as e:
        logger.info(f"[ORDERS MY] user: {user_id}, {e.message}")
        raise
    except Exception as e:
        logger.error(
            f"[ORDERS MY] Error fetching orders - "
            f"user: {user_id}, Error: {type(e).__name__}: {str(e)}",
            exc_info=True
        )
        raise InternalError("An error occurred while fetching orders.", str(e))

    return UserOrdersResponse(
        message="Orders fetched successfully.",
        orders=[order_response(order) for order in orders],
    )
