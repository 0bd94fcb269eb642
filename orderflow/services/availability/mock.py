"""
In-Memory Availability Index

Holds availability entries in a dict. Used in development mode and by the
test-suite, where menu state is seeded directly and mutated between calls
to mimic a seller toggling stock.
"""

import asyncio
import logging
import random
from typing import Iterable, Optional

from orderflow.services.availability.base import AvailabilityEntry, BaseAvailabilityIndex

logger = logging.getLogger(__name__)


class InMemoryAvailabilityIndex(BaseAvailabilityIndex):
    """
    Mock availability index.

    Attributes:
        min_latency: Minimum simulated response time in seconds
        max_latency: Maximum simulated response time in seconds
        calls: Every (seller_id, day) queried, in order

    Example:
        >>> index = InMemoryAvailabilityIndex()
        >>> index.add(AvailabilityEntry(item_id=1, seller_id=7, dates={"2026-02-04"}))
        >>> await index.available_items(7, "2026-02-04")
        {1}
    """

    def __init__(
        self,
        entries: Optional[Iterable[AvailabilityEntry]] = None,
        min_latency: float = 0.0,
        max_latency: float = 0.0,
    ):
        self._entries: dict[int, AvailabilityEntry] = {}
        self.min_latency = min_latency
        self.max_latency = max_latency
        self.calls: list[tuple[int, str]] = []
        for entry in entries or ():
            self.add(entry)

    @property
    def provider_name(self) -> str:
        return "memory"

    def add(self, entry: AvailabilityEntry) -> None:
        self._entries[entry.item_id] = entry

    def set_on_hand(self, item_id: int, on_hand: bool) -> None:
        self._entries[item_id].on_hand = on_hand

    def set_dates(self, item_id: int, dates: Iterable[str]) -> None:
        self._entries[item_id].dates = set(dates)

    async def _simulate_latency(self) -> None:
        if self.max_latency > 0:
            await asyncio.sleep(random.uniform(self.min_latency, self.max_latency))

    async def available_items(self, seller_id: int, day: str) -> set[int]:
        self.calls.append((seller_id, day))
        await self._simulate_latency()
        available = {
            entry.item_id
            for entry in self._entries.values()
            if entry.seller_id == seller_id and entry.is_purchasable_on(day)
        }
        logger.debug(f"Memory: {len(available)} item(s) available for seller {seller_id} on {day}")
        return available

    async def health_check(self) -> bool:
        return True
