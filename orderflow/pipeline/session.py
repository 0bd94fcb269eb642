"""
Checkout Session

Per-user pipeline state: the basket, the selected seller and delivery date,
the seller profile on screen, and the validation ticket counter. One
session belongs to one user interaction context and is never shared.
"""

import logging
from typing import Optional

from orderflow.core import dates
from orderflow.pipeline.resolver import ResolvedSeller, resolve_seller
from orderflow.pipeline.selection import SelectionStore
from orderflow.schemas import SellerResponse
from orderflow.services.payment.base import PaymentContext

logger = logging.getLogger(__name__)


class CheckoutSession:
    """
    Mutable state shared by the validator, checkout and reorder flows.

    Attributes:
        buyer_id: Authenticated customer, or None when logged out
        selection: The basket
        selected_seller_id: Seller chosen in this session
        selected_delivery_date: Delivery date chosen in this session
        displayed_seller: Seller profile currently shown to the user
    """

    def __init__(
        self,
        buyer_id: Optional[int] = None,
        selection: Optional[SelectionStore] = None,
    ):
        self.buyer_id = buyer_id
        self.selection = selection if selection is not None else SelectionStore()
        self.selected_seller_id: Optional[int] = None
        self.selected_delivery_date: Optional[str] = None
        self.displayed_seller: Optional[SellerResponse] = None
        self._ticket = 0

    @property
    def displayed_seller_id(self) -> Optional[int]:
        return self.displayed_seller.id if self.displayed_seller else None

    # -------------------------------------------------------------------------
    # Validation tickets
    # -------------------------------------------------------------------------

    def issue_ticket(self) -> int:
        """Start a new validation; every earlier ticket becomes stale."""
        self._ticket += 1
        return self._ticket

    def is_current(self, ticket: int) -> bool:
        return ticket == self._ticket

    # -------------------------------------------------------------------------
    # Seller and date
    # -------------------------------------------------------------------------

    def resolve_seller(self) -> Optional[ResolvedSeller]:
        return resolve_seller(
            self.selection.lines,
            self.selected_seller_id,
            self.displayed_seller_id,
        )

    def select_seller(self, seller_id: int) -> None:
        self.selected_seller_id = seller_id

    def effective_delivery_date(self, explicit: Optional[dates.DateLike] = None) -> str:
        """Explicit date, else the session's date, else today."""
        if explicit is not None:
            return dates.to_iso_date(explicit)
        if self.selected_delivery_date:
            return dates.to_iso_date(self.selected_delivery_date)
        return dates.today()

    async def load_seller_profile(self, gateway, seller_id: int) -> Optional[SellerResponse]:
        """Fetch a seller profile and make it the displayed one."""
        profile = await gateway.get_seller(seller_id)
        self.displayed_seller = profile
        if profile is None:
            logger.info(f"Seller {seller_id} has no profile")
        return profile

    def payment_context(
        self,
        transaction_reference: Optional[str] = None,
        proof_reference: Optional[str] = None,
        on_premise: bool = False,
    ) -> PaymentContext:
        """
        Payment context for the seller the basket resolves to.

        The displayed profile supplies the payment address only when it is
        that seller's profile; otherwise UPI is unavailable.
        """
        resolved = self.resolve_seller()
        seller_id = resolved.seller_id if resolved else None
        profile = self.displayed_seller
        if profile is not None and profile.id != seller_id:
            profile = None
        return PaymentContext(
            seller_id=seller_id,
            seller_payment_address=profile.payment_address if profile else None,
            seller_name=(profile.service_name or profile.name) if profile else None,
            transaction_reference=transaction_reference,
            proof_reference=proof_reference,
            amount=self.selection.total_amount,
            on_premise=on_premise,
        )

    def reset(self) -> None:
        """Forget everything but the buyer."""
        self.selection.clear()
        self.selected_seller_id = None
        self.selected_delivery_date = None
        self.displayed_seller = None
        self.issue_ticket()
