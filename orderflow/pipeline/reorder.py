"""
Reorder Flow

Rebuilds a basket from a historical order. The order is looked up in the
remote store and the local history cache, validated against today's
availability, and whatever survives replaces the current basket.
"""

import logging
from dataclasses import dataclass
from enum import Enum
from typing import Iterable, Optional

from orderflow.core import dates
from orderflow.core.exceptions import OrderGatewayError, OrderNotFoundError
from orderflow.pipeline.session import CheckoutSession
from orderflow.pipeline.validator import CartValidator
from orderflow.schemas import CartLine, OrderResponse
from orderflow.services.order_cache import OrderCache
from orderflow.services.orders.base import BaseOrderGateway

logger = logging.getLogger(__name__)


class ReorderOutcome(str, Enum):
    RESTORED = "restored"
    PARTIALLY_RESTORED = "partially_restored"
    NOTHING_AVAILABLE = "nothing_available"
    SUPERSEDED = "superseded"


@dataclass(frozen=True)
class ReorderResult:
    outcome: ReorderOutcome
    order_id: str
    restored: tuple[CartLine, ...] = ()
    dropped: tuple[CartLine, ...] = ()

    @property
    def dropped_count(self) -> int:
        return len(self.dropped)

    @property
    def message(self) -> Optional[str]:
        """User-facing notice, or None when everything was restored."""
        if self.outcome == ReorderOutcome.NOTHING_AVAILABLE:
            return (
                "None of the items from your previous order are available today. "
                "Please browse the current menu."
            )
        if self.outcome == ReorderOutcome.PARTIALLY_RESTORED:
            return (
                f"{self.dropped_count} item(s) from your previous order are not "
                "available today and were not added to cart."
            )
        return None


def merge_order_histories(
    remote: Iterable[OrderResponse],
    local: Iterable[OrderResponse],
) -> list[OrderResponse]:
    """
    Union of two order lists keyed by order id. Remote entries win on
    conflicting ids; local-only entries are appended in their own order.
    """
    merged: dict[str, OrderResponse] = {}
    for order in remote:
        merged.setdefault(order.order_id, order)
    for order in local:
        merged.setdefault(order.order_id, order)
    return list(merged.values())


class ReorderFlow:

    def __init__(
        self,
        session: CheckoutSession,
        gateway: BaseOrderGateway,
        cache: Optional[OrderCache],
        validator: CartValidator,
    ):
        self.session = session
        self.gateway = gateway
        self.cache = cache
        self.validator = validator

    async def find_order(self, order_id: str, customer_id: Optional[int] = None) -> OrderResponse:
        """
        Locate a historical order in remote and local history.

        Raises:
            OrderNotFoundError: If neither source knows the id
        """
        customer_id = customer_id or self.session.buyer_id
        remote: list[OrderResponse] = []
        if customer_id:
            try:
                remote = await self.gateway.list_customer_orders(customer_id)
            except OrderGatewayError as e:
                logger.warning(f"Remote order history unavailable, using local cache: {e.message}")

        local = self.cache.get_all() if self.cache is not None else []

        for order in merge_order_histories(remote, local):
            if order.order_id == order_id:
                return order
        raise OrderNotFoundError(order_id)

    async def reorder(self, order_id: str, customer_id: Optional[int] = None) -> ReorderResult:
        """
        Replace the basket with the still-available lines of a past order.

        Raises:
            OrderNotFoundError: If the order cannot be found
        """
        order = await self.find_order(order_id, customer_id)
        session = self.session
        day = dates.today()

        ticket = session.issue_ticket()
        result = await self.validator.validate(order.items, order.caterer_id, day)
        if not session.is_current(ticket):
            logger.info(f"Reorder of {order_id} superseded; basket untouched")
            return ReorderResult(ReorderOutcome.SUPERSEDED, order_id, result.kept, result.dropped)

        if not result.kept:
            session.selection.clear()
            logger.info(f"Reorder of {order_id}: nothing available on {day}")
            return ReorderResult(ReorderOutcome.NOTHING_AVAILABLE, order_id, (), result.dropped)

        session.selection.replace(result.kept)
        session.select_seller(order.caterer_id)
        session.selected_delivery_date = day

        outcome = ReorderOutcome.PARTIALLY_RESTORED if result.dropped else ReorderOutcome.RESTORED
        logger.info(
            f"Reorder of {order_id}: restored {len(result.kept)} line(s), "
            f"dropped {len(result.dropped)}"
        )
        return ReorderResult(outcome, order_id, result.kept, result.dropped)
