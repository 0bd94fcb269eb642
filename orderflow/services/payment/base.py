"""
Payment Capture Abstract Base Class

Defines the interface contract for collecting proof of payment before
checkout. Each payment method has one handler; the checkout pipeline only
sees the ``CapturedPayment`` it returns.

Design Pattern: Strategy Pattern
    - One handler per payment method, selected at runtime
    - Handlers never touch the network; capture is a local decision

Capture never "charges" anything: direct transfer happens outside this
system and the customer hands back a transaction reference.
"""

from abc import ABC, abstractmethod
from dataclasses import dataclass
from typing import Optional

from orderflow.schemas import PaymentMethod


@dataclass
class PaymentContext:
    """
    Everything a handler may need to decide whether checkout can proceed.

    Attributes:
        seller_id: Seller being paid
        seller_payment_address: Seller's UPI id / payment QR reference
        seller_name: Payee display name (used in payment links)
        transaction_reference: Reference the customer entered after paying
        proof_reference: Optional screenshot / receipt reference
        amount: Basket total
        on_premise: True for table orders
    """
    seller_id: Optional[int] = None
    seller_payment_address: Optional[str] = None
    seller_name: Optional[str] = None
    transaction_reference: Optional[str] = None
    proof_reference: Optional[str] = None
    amount: float = 0.0
    on_premise: bool = False


@dataclass(frozen=True)
class CapturedPayment:
    """
    Standardized capture result.

    Attributes:
        method: Payment method used
        seller_id: Seller the payment was captured for
        reference: Transaction id (a sentinel for cash)
        proof_reference: Optional proof-of-payment reference
    """
    method: PaymentMethod
    reference: str
    proof_reference: Optional[str] = None
    seller_id: Optional[int] = None

    def to_dict(self) -> dict:
        return {
            "method": self.method.value,
            "seller_id": self.seller_id,
            "reference": self.reference,
            "proof_reference": self.proof_reference,
        }


class BasePaymentHandler(ABC):
    """Abstract base class for payment capture handlers."""

    @property
    @abstractmethod
    def method(self) -> PaymentMethod:
        pass

    @abstractmethod
    def is_available(self, context: PaymentContext) -> bool:
        """Whether this method can be offered for the seller in ``context``."""
        pass

    @abstractmethod
    def capture(self, context: PaymentContext) -> CapturedPayment:
        """
        Capture payment details.

        Raises:
            PaymentMethodUnavailableError: Method not supported by the seller
            TransactionReferenceRequiredError: Reference missing where required
        """
        pass
