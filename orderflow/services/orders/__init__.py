"""
Order Gateway Factory

Usage:
    from orderflow.services.orders import get_order_gateway

    gateway = get_order_gateway()
    stored = await gateway.create_order(order)

Environment Switching:
    - ENV_MODE=development → InMemoryOrderGateway
    - ENV_MODE=staging / production → HttpOrderGateway
"""

import logging
from functools import lru_cache

from orderflow.core.config import get_settings
from orderflow.services.orders.base import BaseOrderGateway
from orderflow.services.orders.http import HttpOrderGateway
from orderflow.services.orders.mock import InMemoryOrderGateway

logger = logging.getLogger(__name__)


@lru_cache()
def get_order_gateway() -> BaseOrderGateway:
    """
    Get the configured order gateway instance.

    Cached so that every flow in a session talks to the same store.
    """
    settings = get_settings()

    if settings.is_development:
        logger.info("Order Gateway: Using InMemoryOrderGateway (development mode)")
        return InMemoryOrderGateway()

    logger.info(
        f"Order Gateway: Using HttpOrderGateway "
        f"({settings.env_mode.value} mode)"
    )
    return HttpOrderGateway()


def reset_order_gateway() -> None:
    """Clear the cached order gateway instance."""
    get_order_gateway.cache_clear()
    logger.debug("Order gateway cache cleared")


__all__ = [
    "get_order_gateway",
    "reset_order_gateway",
    "BaseOrderGateway",
    "InMemoryOrderGateway",
    "HttpOrderGateway",
]
