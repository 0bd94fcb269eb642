"""
Checkout Orchestrator

Turns the session's basket into a submitted order:

    1. Preconditions: basket, buyer, seller, captured payment
    2. Effective delivery date (explicit → session → today)
    3. Re-validate the basket for that date; any drop aborts
    4. Fresh order id + immutable order snapshot
    5. Submit; take the submitted lines out of the basket only on success

Nothing touches the network before step 3 passes its preconditions, and
nothing is submitted unless step 3 kept every line.
"""

import logging
import time
import uuid
from dataclasses import dataclass
from enum import Enum
from typing import Callable, Optional

from orderflow.core import dates
from orderflow.core.config import get_settings
from orderflow.core.exceptions import (
    BuyerRequiredError,
    EmptyBasketError,
    SellerMismatchError,
)
from orderflow.pipeline.resolver import require_seller
from orderflow.pipeline.session import CheckoutSession
from orderflow.pipeline.submission import OrderSubmitter
from orderflow.pipeline.validator import CartValidator, DropNotice
from orderflow.schemas import OrderCreate, OrderResponse, basket_item_count, basket_total
from orderflow.services.payment.base import CapturedPayment
from orderflow.services.tables import TableContext

logger = logging.getLogger(__name__)


class CheckoutOutcome(str, Enum):
    PLACED = "placed"
    ITEMS_REMOVED = "items_removed"
    SUPERSEDED = "superseded"


@dataclass(frozen=True)
class CheckoutResult:
    """
    What happened to a checkout attempt.

    ``order`` is set only for PLACED; ``notice`` only for ITEMS_REMOVED.
    SUPERSEDED means the basket was re-validated by a newer action while
    this attempt waited on availability, and nothing was submitted.
    """
    outcome: CheckoutOutcome
    order: Optional[OrderResponse] = None
    notice: Optional[DropNotice] = None

    @property
    def placed(self) -> bool:
        return self.outcome == CheckoutOutcome.PLACED


def generate_order_id(prefix: Optional[str] = None) -> str:
    """Unique per call: epoch milliseconds plus a random suffix."""
    if prefix is None:
        prefix = get_settings().order_id_prefix
    return f"{prefix}{int(time.time() * 1000)}-{uuid.uuid4().hex[:6].upper()}"


class CheckoutOrchestrator:

    def __init__(
        self,
        session: CheckoutSession,
        validator: CartValidator,
        submitter: OrderSubmitter,
        order_id_factory: Callable[[], str] = generate_order_id,
    ):
        self.session = session
        self.validator = validator
        self.submitter = submitter
        self.order_id_factory = order_id_factory

    async def checkout(
        self,
        payment: CapturedPayment,
        *,
        delivery_date: Optional[dates.DateLike] = None,
        delivery_address: Optional[str] = None,
        table: Optional[TableContext] = None,
    ) -> CheckoutResult:
        """
        Validate and submit the basket.

        Args:
            payment: Result of payment capture for the chosen method
            delivery_date: Explicit delivery date, overriding the session's
            delivery_address: Address for delivery orders
            table: Table context for on-premise orders; its address line
                replaces ``delivery_address``

        Raises:
            EmptyBasketError: Nothing to order
            BuyerRequiredError: No logged-in buyer
            SellerResolutionError: No seller could be resolved
            SellerMismatchError: The table or the captured payment belongs
                to another seller
            OrderSubmissionError: The store rejected or never got the order
        """
        session = self.session
        if session.selection.is_empty:
            raise EmptyBasketError()
        if not session.buyer_id:
            raise BuyerRequiredError()

        seller = require_seller(
            session.selection.lines,
            session.selected_seller_id,
            session.displayed_seller_id,
        )
        if table is not None and table.seller_id != seller.seller_id:
            raise SellerMismatchError(seller.seller_id, table.seller_id)
        if payment.seller_id is not None and payment.seller_id != seller.seller_id:
            raise SellerMismatchError(seller.seller_id, payment.seller_id)

        day = session.effective_delivery_date(delivery_date)

        ticket = session.issue_ticket()
        result = await self.validator.validate(session.selection.lines, seller.seller_id, day)
        if not session.is_current(ticket):
            logger.info("Checkout superseded by a newer validation; not submitting")
            return CheckoutResult(CheckoutOutcome.SUPERSEDED)

        if result.has_drops:
            session.selection.remove_many(result.dropped_ids)
            logger.info(f"Checkout aborted: {len(result.dropped)} line(s) unavailable on {day}")
            return CheckoutResult(CheckoutOutcome.ITEMS_REMOVED, notice=result.notice)

        lines = result.kept
        order = OrderCreate(
            order_id=self.order_id_factory(),
            customer_id=session.buyer_id,
            caterer_id=seller.seller_id,
            items=lines,
            total_amount=basket_total(lines),
            payment_method=payment.method,
            transaction_id=payment.reference,
            proof_reference=payment.proof_reference,
            delivery_address=table.delivery_address if table else delivery_address,
            table_number=table.table_number if table else None,
            item_count=basket_item_count(lines),
            order_date=dates.now(),
            delivery_date=day,
        )

        stored = await self.submitter.submit(order)
        # Lines added while this attempt was in flight stay in the basket
        session.selection.subtract(lines)
        return CheckoutResult(CheckoutOutcome.PLACED, order=stored)
