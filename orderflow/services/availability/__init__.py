"""
Availability Index Factory

Usage:
    from orderflow.services.availability import get_availability_index

    index = get_availability_index()
    item_ids = await index.available_items(7, "2026-02-04")

Environment Switching:
    - ENV_MODE=development → InMemoryAvailabilityIndex
    - ENV_MODE=staging / production → HttpAvailabilityIndex
"""

import logging
from functools import lru_cache

from orderflow.core.config import get_settings
from orderflow.services.availability.base import AvailabilityEntry, BaseAvailabilityIndex
from orderflow.services.availability.http import HttpAvailabilityIndex
from orderflow.services.availability.mock import InMemoryAvailabilityIndex

logger = logging.getLogger(__name__)


@lru_cache()
def get_availability_index() -> BaseAvailabilityIndex:
    """
    Get the configured availability index instance.

    The instance is cached so every pipeline component shares it.
    """
    settings = get_settings()

    if settings.is_development:
        logger.info("Availability Index: Using InMemoryAvailabilityIndex (development mode)")
        return InMemoryAvailabilityIndex()

    logger.info(
        f"Availability Index: Using HttpAvailabilityIndex "
        f"({settings.env_mode.value} mode)"
    )
    return HttpAvailabilityIndex()


def reset_availability_index() -> None:
    """Clear the cached availability index instance."""
    get_availability_index.cache_clear()
    logger.debug("Availability index cache cleared")


__all__ = [
    "get_availability_index",
    "reset_availability_index",
    "AvailabilityEntry",
    "BaseAvailabilityIndex",
    "InMemoryAvailabilityIndex",
    "HttpAvailabilityIndex",
]
