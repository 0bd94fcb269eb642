"""
Order Submitter

Sends a finished order snapshot to the durable store, then mirrors the
stored order into the local history cache. The remote write is the only
step that can fail a submission; the cache mirror is best effort.
"""

import logging
from typing import Optional

from orderflow.core.exceptions import OrderGatewayError, OrderSubmissionError
from orderflow.schemas import OrderCreate, OrderResponse
from orderflow.services.order_cache import OrderCache
from orderflow.services.orders.base import BaseOrderGateway

logger = logging.getLogger(__name__)


class OrderSubmitter:

    def __init__(self, gateway: BaseOrderGateway, cache: Optional[OrderCache] = None):
        self.gateway = gateway
        self.cache = cache

    async def submit(self, order: OrderCreate) -> OrderResponse:
        """
        Persist ``order`` exactly once. Nothing is retried here; a retry is
        a new user action with a new order id.

        Raises:
            OrderSubmissionError: If the store rejected or never received the
                write. Carries the store's own message when it sent one.
        """
        try:
            stored = await self.gateway.create_order(order)
        except OrderGatewayError as e:
            logger.error(f"Order {order.order_id} submission failed: {e.message}")
            raise OrderSubmissionError(e.remote_message, e.status_code) from e

        logger.info(
            f"Order {stored.order_id} placed: {stored.item_count} item(s), "
            f"{stored.total_amount:.2f} via {stored.payment_method.value}"
        )

        if self.cache is not None:
            try:
                self.cache.save(stored)
            except Exception:
                logger.exception(f"Could not mirror order {stored.order_id} to local history")

        return stored
