"""
Cash-on-Completion Payment Handler

Always available and needs nothing from the customer. The stored
transaction id is a configured sentinel: ``N/A`` for delivery orders,
``WALK-IN`` for orders placed at a table.
"""

import logging

from orderflow.core.config import get_settings
from orderflow.schemas import PaymentMethod
from orderflow.services.payment.base import BasePaymentHandler, CapturedPayment, PaymentContext

logger = logging.getLogger(__name__)


class CashPaymentHandler(BasePaymentHandler):

    @property
    def method(self) -> PaymentMethod:
        return PaymentMethod.COD

    def is_available(self, context: PaymentContext) -> bool:
        return True

    def sentinel(self, context: PaymentContext) -> str:
        settings = get_settings()
        if context.on_premise:
            return settings.walk_in_transaction_sentinel
        return settings.cod_transaction_sentinel

    def capture(self, context: PaymentContext) -> CapturedPayment:
        logger.debug(f"Cash payment captured for seller {context.seller_id}")
        return CapturedPayment(
            method=PaymentMethod.COD,
            reference=self.sentinel(context),
            proof_reference=None,
            seller_id=context.seller_id,
        )
