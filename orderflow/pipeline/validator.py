"""
Cart Validator

Reconciles basket lines with a seller's availability for one calendar date.

``CartValidator.validate`` is a pure partition: it queries the availability
index and splits the lines into kept and dropped, without touching any
basket. ``BasketReconciler`` applies such a result to a session's basket,
but only if no newer validation was issued while the query was in flight.
"""

import logging
from dataclasses import dataclass
from typing import Optional, Sequence

from orderflow.core import dates
from orderflow.schemas import CartLine
from orderflow.services.availability.base import BaseAvailabilityIndex

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class DropNotice:
    """What to tell the user when lines were removed."""
    item_names: tuple[str, ...]
    date: str
    date_label: str

    @property
    def count(self) -> int:
        return len(self.item_names)

    @property
    def message(self) -> str:
        return (
            f"{self.count} item(s) in your cart are not available for "
            f"{self.date_label} and have been removed: {', '.join(self.item_names)}"
        )


@dataclass(frozen=True)
class ValidationResult:
    kept: tuple[CartLine, ...]
    dropped: tuple[CartLine, ...]
    date: str

    @property
    def has_drops(self) -> bool:
        return bool(self.dropped)

    @property
    def date_label(self) -> str:
        return dates.date_label(self.date)

    @property
    def dropped_ids(self) -> set[int]:
        return {line.item_id for line in self.dropped}

    @property
    def notice(self) -> Optional[DropNotice]:
        if not self.dropped:
            return None
        return DropNotice(
            item_names=tuple(line.name for line in self.dropped),
            date=self.date,
            date_label=self.date_label,
        )


class CartValidator:
    """Partition basket lines by availability on a date."""

    def __init__(self, availability: BaseAvailabilityIndex):
        self.availability = availability

    async def validate(
        self,
        lines: Sequence[CartLine],
        seller_id: int,
        day: str,
    ) -> ValidationResult:
        """
        Split ``lines`` into those purchasable from ``seller_id`` on ``day``
        and those that are not. Line order is preserved in both partitions.
        """
        day = dates.to_iso_date(day)
        snapshot = tuple(lines)
        if not snapshot:
            return ValidationResult(kept=(), dropped=(), date=day)

        available = await self.availability.available_items(seller_id, day)
        kept = tuple(line for line in snapshot if line.item_id in available)
        dropped = tuple(line for line in snapshot if line.item_id not in available)

        if dropped:
            logger.info(
                f"{len(dropped)} of {len(snapshot)} line(s) unavailable "
                f"for seller {seller_id} on {day}"
            )
        return ValidationResult(kept=kept, dropped=dropped, date=day)


@dataclass(frozen=True)
class ReconcileOutcome:
    """
    Result of a store-mutating validation.

    ``applied`` is False when a newer validation was issued before this one's
    response arrived; the result was then discarded untouched.
    """
    result: ValidationResult
    applied: bool

    @property
    def notice(self) -> Optional[DropNotice]:
        return self.result.notice if self.applied else None


class BasketReconciler:
    """
    Applies validation results to a session's basket, last-issued wins.

    Every call takes a ticket from the session before it suspends on the
    availability query. A response whose ticket is no longer the newest is
    dropped, so a slow response for an old date can never overwrite the
    result for the date the user picked afterwards.
    """

    def __init__(self, session, validator: CartValidator):
        self.session = session
        self.validator = validator

    async def refresh(self) -> ReconcileOutcome:
        """Validate for the session's current delivery date (basket screen load)."""
        return await self.reconcile(self.session.effective_delivery_date())

    async def change_date(self, day: str) -> ReconcileOutcome:
        """Select a new delivery date and validate the basket for it."""
        day = dates.to_iso_date(day)
        self.session.selected_delivery_date = day
        return await self.reconcile(day)

    async def reconcile(self, day: str) -> ReconcileOutcome:
        ticket = self.session.issue_ticket()
        day = dates.to_iso_date(day)
        lines = self.session.selection.lines
        resolved = self.session.resolve_seller()

        if not lines or resolved is None:
            return ReconcileOutcome(ValidationResult(kept=lines, dropped=(), date=day), applied=True)

        result = await self.validator.validate(lines, resolved.seller_id, day)

        if not self.session.is_current(ticket):
            logger.debug(f"Discarding superseded validation for {day} (ticket {ticket})")
            return ReconcileOutcome(result, applied=False)

        if result.dropped:
            self.session.selection.remove_many(result.dropped_ids)
        return ReconcileOutcome(result, applied=True)
