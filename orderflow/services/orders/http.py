"""
HTTP Order Gateway

Production gateway talking to the orders service REST API.

Endpoints used:
    POST  /orders
    GET   /orders/{orderId}
    GET   /orders/customer?customerId=
    GET   /orders/caterer?catererId=&status=&deliveryDate=
    PATCH /orders/{orderId}/status
    GET   /sellers/{id}
    GET   /tables?catererId=

There is deliberately no retry here: a failed write surfaces to the caller,
who retries explicitly with a fresh order id.
"""

import logging
from typing import Optional

from orderflow.core.exceptions import (
    InvalidStatusTransitionError,
    OrderGatewayError,
    OrderNotFoundError,
)
from orderflow.schemas import (
    OrderCreate,
    OrderResponse,
    OrderStatus,
    SellerResponse,
    TableResponse,
)
from orderflow.services.http import OrdersApiClient
from orderflow.services.orders.base import BaseOrderGateway

logger = logging.getLogger(__name__)


class HttpOrderGateway(BaseOrderGateway):
    """Order gateway backed by the orders service."""

    def __init__(self, api: Optional[OrdersApiClient] = None):
        self.api = api or OrdersApiClient()

    @property
    def provider_name(self) -> str:
        return "http"

    async def create_order(self, order: OrderCreate) -> OrderResponse:
        logger.info(f"HTTP: Submitting order {order.order_id}")
        response = await self.api.request("POST", "/orders", json=order.to_payload())
        return OrderResponse.model_validate(response.json())

    async def get_order(self, order_id: str) -> OrderResponse:
        try:
            data = await self.api.get_json(f"/orders/{order_id}")
        except OrderGatewayError as e:
            if e.status_code == 404:
                raise OrderNotFoundError(order_id) from e
            raise
        return OrderResponse.model_validate(data)

    async def list_customer_orders(self, customer_id: int) -> list[OrderResponse]:
        data = await self.api.get_json("/orders/customer", params={"customerId": customer_id})
        return [OrderResponse.model_validate(o) for o in data]

    async def list_seller_orders(
        self,
        seller_id: int,
        status: Optional[OrderStatus] = None,
        delivery_date: Optional[str] = None,
    ) -> list[OrderResponse]:
        params: dict = {"catererId": seller_id}
        if status is not None:
            params["status"] = OrderStatus(status).value
        if delivery_date is not None:
            params["deliveryDate"] = delivery_date
        data = await self.api.get_json("/orders/caterer", params=params)
        return [OrderResponse.model_validate(o) for o in data]

    async def update_status(self, order_id: str, status: OrderStatus) -> OrderResponse:
        target = OrderStatus(status)
        try:
            response = await self.api.request(
                "PATCH",
                f"/orders/{order_id}/status",
                json={"status": target.value},
            )
        except OrderGatewayError as e:
            if e.status_code == 404:
                raise OrderNotFoundError(order_id) from e
            payload = e.payload or {}
            if payload.get("error") == InvalidStatusTransitionError.code:
                body = payload.get("body") or {}
                raise InvalidStatusTransitionError(
                    current=body.get("current", "unknown"),
                    requested=target.value,
                    allowed=body.get("allowed"),
                ) from e
            raise
        return OrderResponse.model_validate(response.json())

    async def get_seller(self, seller_id: int) -> Optional[SellerResponse]:
        try:
            data = await self.api.get_json(f"/sellers/{seller_id}")
        except OrderGatewayError as e:
            if e.status_code == 404:
                return None
            raise
        return SellerResponse.model_validate(data)

    async def list_tables(self, seller_id: int) -> list[TableResponse]:
        data = await self.api.get_json("/tables", params={"catererId": seller_id})
        return [TableResponse.model_validate(t) for t in data]

    async def health_check(self) -> bool:
        try:
            await self.api.request("GET", "/health")
        except OrderGatewayError as e:
            logger.warning(f"Order gateway health check failed: {e}")
            return False
        return True
