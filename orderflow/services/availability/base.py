"""
Availability Index Abstract Base Class

Defines the interface contract for the per-seller, per-date lookup of
purchasable menu items. The checkout pipeline only ever reads from it.

Contract:
    available_items(seller_id, date) -> set of item ids purchasable that day,
    already filtered by the on-hand flag.

No staleness guarantee: on-hand status can change between screens, so
callers re-query instead of caching results.
"""

from abc import ABC, abstractmethod
from dataclasses import dataclass, field


@dataclass
class AvailabilityEntry:
    """
    Availability of one menu item.

    Attributes:
        item_id: Menu item identifier
        seller_id: Owning seller
        dates: ISO dates (YYYY-MM-DD) the item is orderable on
        on_hand: Manual in-stock switch
        name: Display name (informational)
        price: Unit price (informational)
    """
    item_id: int
    seller_id: int
    dates: set[str] = field(default_factory=set)
    on_hand: bool = True
    name: str = ""
    price: float = 0.0

    def is_purchasable_on(self, day: str) -> bool:
        return self.on_hand and day in self.dates


class BaseAvailabilityIndex(ABC):
    """Abstract base class for availability index implementations."""

    @property
    @abstractmethod
    def provider_name(self) -> str:
        """Return the implementation name (e.g. "memory", "http")."""
        pass

    @abstractmethod
    async def available_items(self, seller_id: int, day: str) -> set[int]:
        """
        Item ids purchasable from ``seller_id`` on ``day``.

        Args:
            seller_id: Seller to query
            day: Calendar date, YYYY-MM-DD

        Returns:
            set[int]: Item identifiers in stock and scheduled for that day

        Raises:
            OrderGatewayError: If the remote index cannot be reached
        """
        pass

    @abstractmethod
    async def health_check(self) -> bool:
        pass
