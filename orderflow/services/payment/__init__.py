"""
Payment Capture Factory

Usage:
    from orderflow.services.payment import capture_payment, PaymentContext

    captured = capture_payment(
        PaymentMethod.UPI,
        PaymentContext(seller_payment_address="seller@upi", transaction_reference="T123"),
    )

Handlers:
    - PaymentMethod.COD → CashPaymentHandler (sentinel reference)
    - PaymentMethod.UPI → UpiPaymentHandler (requires seller address + reference)
"""

import logging
from typing import Union

from orderflow.schemas import PaymentMethod
from orderflow.services.payment.base import (
    BasePaymentHandler,
    CapturedPayment,
    PaymentContext,
)
from orderflow.services.payment.cash import CashPaymentHandler
from orderflow.services.payment.upi import UpiPaymentHandler

logger = logging.getLogger(__name__)

_HANDLERS: dict[PaymentMethod, BasePaymentHandler] = {
    PaymentMethod.COD: CashPaymentHandler(),
    PaymentMethod.UPI: UpiPaymentHandler(),
}


def get_payment_handler(method: Union[PaymentMethod, str]) -> BasePaymentHandler:
    """
    Get the handler for a payment method.

    Raises:
        ValueError: If the method is not one of the supported variants
    """
    return _HANDLERS[PaymentMethod(method)]


def capture_payment(method: Union[PaymentMethod, str], context: PaymentContext) -> CapturedPayment:
    """Capture payment details with the handler for ``method``."""
    return get_payment_handler(method).capture(context)


def available_methods(context: PaymentContext) -> list[PaymentMethod]:
    """Payment methods the seller in ``context`` can accept."""
    return [m for m, handler in _HANDLERS.items() if handler.is_available(context)]


__all__ = [
    "get_payment_handler",
    "capture_payment",
    "available_methods",
    "BasePaymentHandler",
    "CapturedPayment",
    "PaymentContext",
    "CashPaymentHandler",
    "UpiPaymentHandler",
]
