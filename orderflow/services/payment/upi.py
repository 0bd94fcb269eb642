"""
Direct Transfer (UPI) Payment Handler

The customer pays the seller's UPI address from their own app, then enters
the transaction reference they received. Checkout is blocked until that
reference is non-blank. A proof-of-payment reference (e.g. an uploaded
screenshot URL) may be attached but is never required.

Sellers without a configured payment address cannot take UPI at all.
"""

import logging
from typing import Optional
from urllib.parse import urlencode

from orderflow.core.config import get_settings
from orderflow.core.exceptions import (
    PaymentMethodUnavailableError,
    TransactionReferenceRequiredError,
)
from orderflow.schemas import PaymentMethod
from orderflow.services.payment.base import BasePaymentHandler, CapturedPayment, PaymentContext

logger = logging.getLogger(__name__)


class UpiPaymentHandler(BasePaymentHandler):

    @property
    def method(self) -> PaymentMethod:
        return PaymentMethod.UPI

    def is_available(self, context: PaymentContext) -> bool:
        return bool(context.seller_payment_address and context.seller_payment_address.strip())

    def capture(self, context: PaymentContext) -> CapturedPayment:
        if not self.is_available(context):
            logger.info(f"UPI rejected: seller {context.seller_id} has no payment address")
            raise PaymentMethodUnavailableError(PaymentMethod.UPI.value, context.seller_id)

        reference = (context.transaction_reference or "").strip()
        if not reference:
            raise TransactionReferenceRequiredError()

        proof = (context.proof_reference or "").strip() or None

        logger.info(f"UPI payment captured for seller {context.seller_id} (txn {reference})")
        return CapturedPayment(
            method=PaymentMethod.UPI,
            reference=reference,
            proof_reference=proof,
            seller_id=context.seller_id,
        )

    def build_payment_link(
        self,
        context: PaymentContext,
        note: Optional[str] = None,
    ) -> str:
        """
        Build a ``upi://pay`` deep link the customer's UPI app can open.

        Raises:
            PaymentMethodUnavailableError: If the seller has no payment address
        """
        if not self.is_available(context):
            raise PaymentMethodUnavailableError(PaymentMethod.UPI.value, context.seller_id)

        params = {
            "pa": context.seller_payment_address.strip(),
            "pn": context.seller_name or "Seller",
            "am": f"{context.amount:.2f}",
            "cu": get_settings().upi_currency,
        }
        if note:
            params["tn"] = note
        return "upi://pay?" + urlencode(params)
