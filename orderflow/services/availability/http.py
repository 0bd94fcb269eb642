"""
HTTP Availability Index

Queries ``GET /menus/by-date`` on the orders service. The endpoint already
filters by date membership and the on-hand flag; this client only reduces
the response to the set of item ids.
"""

import logging
from typing import Optional

from orderflow.services.availability.base import BaseAvailabilityIndex
from orderflow.services.http import OrdersApiClient

logger = logging.getLogger(__name__)


class HttpAvailabilityIndex(BaseAvailabilityIndex):
    """Availability index backed by the orders service."""

    def __init__(self, api: Optional[OrdersApiClient] = None):
        self.api = api or OrdersApiClient()

    @property
    def provider_name(self) -> str:
        return "http"

    async def available_items(self, seller_id: int, day: str) -> set[int]:
        items = await self.api.get_json(
            "/menus/by-date",
            params={"catererId": seller_id, "date": day},
        )
        available = {int(item["id"]) for item in items if item.get("inStock", True)}
        logger.debug(f"HTTP: {len(available)} item(s) available for seller {seller_id} on {day}")
        return available

    async def health_check(self) -> bool:
        try:
            await self.api.request("GET", "/health")
        except Exception as e:
            logger.warning(f"Availability health check failed: {e}")
            return False
        return True
