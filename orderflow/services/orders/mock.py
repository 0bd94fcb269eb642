"""
In-Memory Order Gateway

Simulates the orders service without a network or database. Used in
development mode and by the test-suite.

Behavior:
    - Optional simulated latency
    - Optional random failure rate on writes (simulates an unreachable store)
    - ``queue_failure()`` forces the next write to fail deterministically
    - Enforces the same duplicate-id and status-transition rules as the service
"""

import asyncio
import logging
import random
from datetime import datetime, timezone
from typing import Optional

from orderflow.core.exceptions import OrderGatewayError, OrderNotFoundError
from orderflow.schemas import (
    OrderCreate,
    OrderResponse,
    OrderStatus,
    SellerResponse,
    TableResponse,
)
from orderflow.services.orders.base import BaseOrderGateway
from orderflow.services.status_machine import ensure_transition

logger = logging.getLogger(__name__)


class InMemoryOrderGateway(BaseOrderGateway):
    """
    Mock implementation of the order gateway.

    Attributes:
        failure_rate: Probability of a simulated write failure (0.0-1.0)
        min_latency: Minimum simulated response time in seconds
        max_latency: Maximum simulated response time in seconds
        create_calls: Number of create_order calls received
    """

    def __init__(
        self,
        failure_rate: float = 0.0,
        min_latency: float = 0.0,
        max_latency: float = 0.0,
    ):
        self.failure_rate = failure_rate
        self.min_latency = min_latency
        self.max_latency = max_latency
        self.create_calls = 0

        self._orders: dict[str, OrderResponse] = {}
        self._sellers: dict[int, SellerResponse] = {}
        self._tables: dict[int, list[TableResponse]] = {}
        self._queued_failures: list[Optional[str]] = []
        self._next_id = 1
        self._offline = False

        logger.info(
            f"InMemoryOrderGateway initialized "
            f"(failure_rate={failure_rate:.0%}, "
            f"latency={min_latency}-{max_latency}s)"
        )

    @property
    def provider_name(self) -> str:
        return "memory"

    # =========================================================================
    # TEST / DEMO HOOKS
    # =========================================================================

    def add_seller(self, seller: SellerResponse) -> None:
        self._sellers[seller.id] = seller

    def add_table(self, table: TableResponse) -> None:
        self._tables.setdefault(table.seller_id, []).append(table)

    def add_order(self, order: OrderResponse) -> None:
        """Insert a historical order as-is."""
        self._orders[order.order_id] = order

    def queue_failure(self, message: Optional[str] = None) -> None:
        """Make the next create_order fail, with ``message`` as the remote message."""
        self._queued_failures.append(message)

    def set_offline(self, offline: bool = True) -> None:
        """Make every call fail as if the service were unreachable."""
        self._offline = offline

    # =========================================================================
    # INTERNALS
    # =========================================================================

    async def _simulate_latency(self) -> None:
        if self.max_latency > 0:
            await asyncio.sleep(random.uniform(self.min_latency, self.max_latency))

    def _check_online(self) -> None:
        if self._offline:
            raise OrderGatewayError("Could not reach the orders service")

    def _should_fail(self) -> bool:
        return random.random() < self.failure_rate

    def _get(self, order_id: str) -> OrderResponse:
        try:
            return self._orders[order_id]
        except KeyError:
            raise OrderNotFoundError(order_id) from None

    @staticmethod
    def _newest_first(orders: list[OrderResponse]) -> list[OrderResponse]:
        return sorted(
            orders,
            key=lambda o: ((o.created_at or o.order_date).timestamp(), o.id or 0),
            reverse=True,
        )

    # =========================================================================
    # GATEWAY
    # =========================================================================

    async def create_order(self, order: OrderCreate) -> OrderResponse:
        self.create_calls += 1
        await self._simulate_latency()
        self._check_online()

        if self._queued_failures:
            message = self._queued_failures.pop(0)
            logger.debug(f"Memory: Forced failure for {order.order_id}")
            raise OrderGatewayError(message or "Simulated write failure", 503, remote_message=message)

        if self._should_fail():
            logger.debug(f"Memory: Simulated failure for {order.order_id}")
            raise OrderGatewayError("Simulated write failure", 503)

        if order.order_id in self._orders:
            message = f"Order {order.order_id} already exists"
            raise OrderGatewayError(message, 409, remote_message=message)

        now = datetime.now(timezone.utc)
        stored = OrderResponse(
            id=self._next_id,
            **order.model_dump(),
            created_at=now,
        )
        self._next_id += 1
        self._orders[stored.order_id] = stored

        logger.info(f"Memory: Order {stored.order_id} stored - {stored.total_amount:.2f}")
        return stored

    async def get_order(self, order_id: str) -> OrderResponse:
        await self._simulate_latency()
        self._check_online()
        return self._get(order_id)

    async def list_customer_orders(self, customer_id: int) -> list[OrderResponse]:
        await self._simulate_latency()
        self._check_online()
        return self._newest_first(
            [o for o in self._orders.values() if o.customer_id == customer_id]
        )

    async def list_seller_orders(
        self,
        seller_id: int,
        status: Optional[OrderStatus] = None,
        delivery_date: Optional[str] = None,
    ) -> list[OrderResponse]:
        await self._simulate_latency()
        self._check_online()
        orders = [
            o for o in self._orders.values()
            if o.caterer_id == seller_id
            and (status is None or o.status == status)
            and (delivery_date is None or o.delivery_date == delivery_date)
        ]
        return self._newest_first(orders)

    async def update_status(self, order_id: str, status: OrderStatus) -> OrderResponse:
        await self._simulate_latency()
        self._check_online()
        current = self._get(order_id)
        target = ensure_transition(current.status, status, current.fulfillment_type)
        updated = current.model_copy(
            update={"status": target, "updated_at": datetime.now(timezone.utc)}
        )
        self._orders[order_id] = updated
        logger.info(f"Memory: Order {order_id} -> {target.value}")
        return updated

    async def get_seller(self, seller_id: int) -> Optional[SellerResponse]:
        await self._simulate_latency()
        self._check_online()
        return self._sellers.get(seller_id)

    async def list_tables(self, seller_id: int) -> list[TableResponse]:
        await self._simulate_latency()
        self._check_online()
        return list(self._tables.get(seller_id, []))

    async def health_check(self) -> bool:
        return not self._offline
