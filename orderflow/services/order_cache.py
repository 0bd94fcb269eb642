"""
Local Order History Cache

Best-effort mirror of submitted orders in a JSON file, newest first. Used
as a fallback source when looking up historical orders for a reorder.
"""

import logging
from pathlib import Path
from typing import Optional, Union

from filelock import Timeout

from orderflow.core.config import get_settings
from orderflow.schemas import OrderResponse
from orderflow.services.json_file import LockedJsonFile

logger = logging.getLogger(__name__)


class OrderCache(LockedJsonFile):
    """File-locked JSON order history."""

    def __init__(self, path: Optional[Union[str, Path]] = None, lock_timeout: Optional[int] = None):
        settings = get_settings()
        super().__init__(
            path or settings.order_cache_path,
            lock_timeout if lock_timeout is not None else settings.cache_lock_timeout,
        )

    def save(self, order: OrderResponse) -> None:
        """
        Prepend an order to the history, replacing any entry with the same id.

        Raises:
            filelock.Timeout: If the lock cannot be acquired in time
            OSError: If the file cannot be written
        """
        self._ensure_data_dir()
        record = order.model_dump(by_alias=True, mode="json")

        with self._lock():
            records = [
                r for r in self._read_raw([])
                if r.get("orderId") != order.order_id
            ]
            self._write_raw([record, *records])

        logger.debug(f"Order {order.order_id} mirrored to {self.path}")

    def get_all(self) -> list[OrderResponse]:
        """All cached orders, newest first. Unreadable entries are skipped."""
        self._ensure_data_dir()
        try:
            with self._lock():
                records = self._read_raw([])
        except Timeout:
            logger.error(f"Lock timeout ({self.lock_timeout}s) reading {self.path}")
            return []

        orders = []
        for record in records:
            try:
                orders.append(OrderResponse.model_validate(record))
            except ValueError as e:
                logger.warning(f"Skipping malformed cached order: {e}")
        return orders

    def find(self, order_id: str) -> Optional[OrderResponse]:
        for order in self.get_all():
            if order.order_id == order_id:
                return order
        return None

    def clear(self) -> None:
        """Delete the history file."""
        self._delete()
        logger.info("Order history cleared")
