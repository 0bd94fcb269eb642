"""
FastAPI Application Entry Point

Orderflow Orders Service - the durable side of the order-placement pipeline.
Stores orders, serves date-scoped menu availability and enforces the order
status lifecycle.

Endpoints:
    - GET   /health: System health check
    - POST  /api/orders: Create an order (client-generated orderId)
    - GET   /api/orders/customer: A customer's orders
    - GET   /api/orders/caterer: A seller's orders, filterable
    - GET   /api/orders/{orderId}: One order
    - PATCH /api/orders/{orderId}/status: Advance an order's status
    - GET   /api/menus/by-date: Items purchasable from a seller on a date
    - GET   /api/sellers/{id}: Seller profile
    - GET   /api/tables, /api/tables/{id}: Restaurant tables

Run locally: python -m orderflow.main
"""

import logging
from contextlib import asynccontextmanager
from datetime import datetime, timezone
from typing import Any, Optional

from fastapi import Depends, FastAPI, Query, Request
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from sqlalchemy import select, text
from sqlalchemy.exc import IntegrityError
from sqlalchemy.ext.asyncio import AsyncSession

from orderflow.core import dates
from orderflow.core.config import get_settings, setup_logging
from orderflow.core.exceptions import (
    DuplicateOrderError,
    OrderflowError,
    OrderNotFoundError,
)
from orderflow.database import engine, get_db, init_db
from orderflow.models import MenuItem, Order, RestaurantTable, Seller
from orderflow.schemas import (
    ErrorResponse,
    HealthResponse,
    MenuItemResponse,
    OrderCreate,
    OrderResponse,
    OrderStatus,
    SellerResponse,
    StatusUpdate,
    TableResponse,
)
from orderflow.services.status_machine import ensure_transition

# Initialize configuration and logging
settings = get_settings()
setup_logging()
logger = logging.getLogger(__name__)


# =============================================================================
# APPLICATION LIFECYCLE
# =============================================================================

@asynccontextmanager
async def lifespan(app: FastAPI):
    """
    Manage application startup and shutdown events.
    """
    logger.info("=" * 60)
    logger.info(f"Starting {settings.app_name}")
    logger.info(f"   Version: {settings.app_version}")
    logger.info(f"   Environment: {settings.env_mode.value}")
    logger.info(f"   Business time zone: {settings.business_timezone}")
    logger.info(f"   Debug: {settings.debug}")
    logger.info("=" * 60)

    await init_db()
    logger.info("Database initialized")

    yield

    logger.info("Shutting down...")
    await engine.dispose()
    logger.info("Cleanup complete")


# =============================================================================
# APPLICATION INSTANCE
# =============================================================================

app = FastAPI(
    title=settings.app_name,
    description=(
        "Order store for caterers and restaurants: order submission, "
        "date-scoped menu availability and seller-driven status updates."
    ),
    version=settings.app_version,
    lifespan=lifespan,
    docs_url="/docs",
    redoc_url="/redoc",
)

app.add_middleware(
    CORSMiddleware,
    allow_origins=["*"],
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)


# =============================================================================
# HELPER FUNCTIONS
# =============================================================================

async def load_order(db: AsyncSession, order_id: str) -> Order:
    """Fetch an order row by its public id, or raise OrderNotFoundError."""
    result = await db.execute(select(Order).where(Order.order_id == order_id))
    order = result.scalar_one_or_none()
    if order is None:
        raise OrderNotFoundError(order_id)
    return order


def newest_first(query):
    return query.order_by(Order.created_at.desc(), Order.id.desc())


# =============================================================================
# ROOT & HEALTH ENDPOINTS
# =============================================================================

@app.get("/", tags=["Root"])
async def root() -> dict[str, str]:
    """API root with navigation links."""
    return {
        "message": f"Welcome to {settings.app_name}",
        "version": settings.app_version,
        "environment": settings.env_mode.value,
        "documentation": "/docs",
        "health": "/health",
    }


@app.get(
    "/health",
    response_model=HealthResponse,
    tags=["Health"],
    summary="System Health Check",
)
@app.get("/api/health", response_model=HealthResponse, include_in_schema=False)
async def health_check(
    db: AsyncSession = Depends(get_db)
) -> HealthResponse:
    """Verify the database is reachable."""
    db_status = "healthy"
    try:
        await db.execute(text("SELECT 1"))
    except Exception as e:
        db_status = f"unhealthy: {str(e)}"
        logger.error(f"Database health check failed: {e}")

    return HealthResponse(
        status="operational" if db_status == "healthy" else "degraded",
        database=db_status,
        timestamp=datetime.now(timezone.utc),
    )


# =============================================================================
# ORDER API ENDPOINTS
# =============================================================================

@app.post(
    "/api/orders",
    response_model=OrderResponse,
    status_code=201,
    responses={409: {"model": ErrorResponse}, 422: {"model": ErrorResponse}},
    tags=["Orders"],
    summary="Create Order",
)
async def create_order(
    order_data: OrderCreate,
    db: AsyncSession = Depends(get_db),
) -> OrderResponse:
    """
    Store a new order.

    The order id is generated by the client; a second submission with the
    same id is rejected with 409 and the first order is left untouched.
    """
    logger.info(
        f"Creating order {order_data.order_id} for customer {order_data.customer_id} "
        f"(seller {order_data.caterer_id}, {order_data.fulfillment_type.value})"
    )

    new_order = Order(
        order_id=order_data.order_id,
        customer_id=order_data.customer_id,
        caterer_id=order_data.caterer_id,
        items=[line.model_dump(by_alias=True, mode="json") for line in order_data.items],
        total_amount=order_data.total_amount,
        item_count=order_data.item_count,
        payment_method=order_data.payment_method,
        transaction_id=order_data.transaction_id,
        proof_reference=order_data.proof_reference,
        delivery_address=order_data.delivery_address,
        table_number=order_data.table_number,
        order_date=order_data.order_date,
        delivery_date=order_data.delivery_date,
        status=order_data.status,
    )

    db.add(new_order)
    try:
        await db.commit()
    except IntegrityError:
        await db.rollback()
        logger.warning(f"Duplicate order id {order_data.order_id} rejected")
        raise DuplicateOrderError(order_data.order_id) from None
    await db.refresh(new_order)

    logger.info(f"Order {new_order.order_id} created (#{new_order.id})")
    return OrderResponse.model_validate(new_order)


@app.get(
    "/api/orders/customer",
    response_model=list[OrderResponse],
    tags=["Orders"],
    summary="List a Customer's Orders",
)
async def list_customer_orders(
    customer_id: int = Query(..., alias="customerId", ge=1),
    db: AsyncSession = Depends(get_db),
) -> list[OrderResponse]:
    """Orders placed by one customer, newest first."""
    result = await db.execute(newest_first(select(Order).where(Order.customer_id == customer_id)))
    return [OrderResponse.model_validate(o) for o in result.scalars().all()]


@app.get(
    "/api/orders/caterer",
    response_model=list[OrderResponse],
    tags=["Orders"],
    summary="List a Seller's Orders",
)
async def list_seller_orders(
    caterer_id: int = Query(..., alias="catererId", ge=1),
    status: Optional[OrderStatus] = Query(None),
    delivery_date: Optional[str] = Query(None, alias="deliveryDate"),
    db: AsyncSession = Depends(get_db),
) -> list[OrderResponse]:
    """Orders received by one seller, newest first, optionally filtered."""
    query = select(Order).where(Order.caterer_id == caterer_id)
    if status is not None:
        query = query.where(Order.status == status)
    if delivery_date:
        query = query.where(Order.delivery_date == dates.to_iso_date(delivery_date))

    result = await db.execute(newest_first(query))
    return [OrderResponse.model_validate(o) for o in result.scalars().all()]


@app.get(
    "/api/orders/{order_id}",
    response_model=OrderResponse,
    responses={404: {"model": ErrorResponse}},
    tags=["Orders"],
)
async def get_order(
    order_id: str,
    db: AsyncSession = Depends(get_db),
) -> OrderResponse:
    """Get a specific order by its public id."""
    return OrderResponse.model_validate(await load_order(db, order_id))


@app.patch(
    "/api/orders/{order_id}/status",
    response_model=OrderResponse,
    responses={400: {"model": ErrorResponse}, 404: {"model": ErrorResponse}},
    tags=["Orders"],
    summary="Advance Order Status",
)
async def update_order_status(
    order_id: str,
    update: StatusUpdate,
    db: AsyncSession = Depends(get_db),
) -> OrderResponse:
    """
    Move an order to its next status.

    Only moves in the allowed-transition table for the order's fulfilment
    type are accepted; anything else is a 400 ``invalid_status_transition``.
    """
    order = await load_order(db, order_id)
    previous = order.status
    order.status = ensure_transition(previous, update.status, order.fulfillment_type)

    await db.commit()
    await db.refresh(order)

    logger.info(f"Order {order_id}: {previous.value} -> {order.status.value}")
    return OrderResponse.model_validate(order)


# =============================================================================
# MENU, SELLER & TABLE ENDPOINTS
# =============================================================================

@app.get(
    "/api/menus/by-date",
    response_model=list[MenuItemResponse],
    tags=["Menus"],
    summary="Items Purchasable on a Date",
)
async def menu_by_date(
    caterer_id: int = Query(..., alias="catererId", ge=1),
    day: str = Query(..., alias="date", examples=["2026-02-04"]),
    db: AsyncSession = Depends(get_db),
) -> list[MenuItemResponse]:
    """Menu items scheduled for ``date`` and currently in stock."""
    try:
        day = dates.to_iso_date(day)
    except ValueError:
        return JSONResponse(
            status_code=422,
            content=ErrorResponse(error="invalid_date", detail=f"Invalid date '{day}'").model_dump(),
        )

    result = await db.execute(
        select(MenuItem).where(MenuItem.seller_id == caterer_id).order_by(MenuItem.id)
    )
    items = [item for item in result.scalars().all() if item.is_available_on(day)]
    return [MenuItemResponse.model_validate(item) for item in items]


@app.get(
    "/api/sellers/{seller_id}",
    response_model=SellerResponse,
    responses={404: {"model": ErrorResponse}},
    tags=["Sellers"],
)
async def get_seller(
    seller_id: int,
    db: AsyncSession = Depends(get_db),
) -> Any:
    seller = await db.get(Seller, seller_id)
    if seller is None:
        return JSONResponse(
            status_code=404,
            content=ErrorResponse(error="seller_not_found", detail=f"Seller {seller_id} not found").model_dump(),
        )
    return SellerResponse.model_validate(seller)


@app.get(
    "/api/tables",
    response_model=list[TableResponse],
    tags=["Tables"],
)
async def list_tables(
    caterer_id: int = Query(..., alias="catererId", ge=1),
    db: AsyncSession = Depends(get_db),
) -> list[TableResponse]:
    result = await db.execute(
        select(RestaurantTable)
        .where(RestaurantTable.seller_id == caterer_id)
        .order_by(RestaurantTable.id)
    )
    return [TableResponse.model_validate(t) for t in result.scalars().all()]


@app.get(
    "/api/tables/{table_id}",
    response_model=TableResponse,
    responses={404: {"model": ErrorResponse}},
    tags=["Tables"],
)
async def get_table(
    table_id: int,
    db: AsyncSession = Depends(get_db),
) -> Any:
    table = await db.get(RestaurantTable, table_id)
    if table is None:
        return JSONResponse(
            status_code=404,
            content=ErrorResponse(error="table_not_found", detail=f"Table {table_id} not found").model_dump(),
        )
    return TableResponse.model_validate(table)


# =============================================================================
# ERROR HANDLERS
# =============================================================================

@app.exception_handler(OrderflowError)
async def orderflow_exception_handler(request: Request, exc: OrderflowError) -> JSONResponse:
    """Typed pipeline errors keep their own status code and error code."""
    return JSONResponse(status_code=exc.status_code, content=exc.to_dict())


@app.exception_handler(Exception)
async def global_exception_handler(request: Request, exc: Exception) -> JSONResponse:
    """Catch-all exception handler."""
    logger.exception(f"Unhandled exception: {exc}")

    return JSONResponse(
        status_code=500,
        content={
            "success": False,
            "error": "Internal Server Error",
            "detail": str(exc) if settings.debug else "An unexpected error occurred",
        },
    )


if __name__ == "__main__":
    import uvicorn

    uvicorn.run("orderflow.main:app", host="0.0.0.0", port=8001, reload=settings.is_development)
