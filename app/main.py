"""Main FastAPI application."""
import logging
from contextlib import asynccontextmanager

from fastapi import FastAPI, Request
from fastapi.encoders import jsonable_encoder
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse

from app.core.errors import OrderingError
from app.core.logging import setup_logging
from app.db.database import init_db
from app.api import health, orders, reports

logger = logging.getLogger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI):
    """Application lifespan events."""
    # Startup
    setup_logging()
    await init_db()
    yield
    # Shutdown
    pass


app = FastAPI(
    title="Food Ordering API",
    description="Order creation and reporting for a food-ordering backend",
    version="0.1.0",
    lifespan=lifespan,
)


@app.exception_handler(OrderingError)
async def ordering_error_handler(request: Request, exc: OrderingError):
    """Render service errors as {message} with their status code."""
    return JSONResponse(status_code=exc.status_code, content=exc.to_body())


@app.exception_handler(RequestValidationError)
async def request_validation_error_handler(request: Request, exc: RequestValidationError):
    """Malformed bodies and query parameters are client errors."""
    logger.info(f"Invalid request to {request.url.path}: {exc.errors()}")
    return JSONResponse(
        status_code=400,
        content={"message": "Invalid request", "errors": jsonable_encoder(exc.errors())},
    )


app.include_router(health.router, tags=["health"])
app.include_router(reports.router, tags=["reports"])
app.include_router(orders.router, tags=["orders"])
