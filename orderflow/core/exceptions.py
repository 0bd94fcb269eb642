"""Typed errors raised by the order pipeline and the orders service."""

from typing import Any, Optional


class OrderflowError(Exception):
    """Base exception for all pipeline errors."""

    code = "orderflow_error"

    def __init__(self, message="An internal error occurred", status_code=500, payload=None):
        super().__init__(message)
        self.message = message
        self.status_code = status_code
        self.payload = payload

    def to_dict(self) -> dict[str, Any]:
        rv = dict(self.payload or ())
        rv["success"] = False
        rv["error"] = self.code
        rv["detail"] = self.message
        return rv


class SellerResolutionError(OrderflowError):
    """No seller could be resolved for the basket; reselect a seller."""

    code = "seller_unresolved"

    def __init__(self, message="Please select a caterer before checking out"):
        super().__init__(message, 400)


class SellerMismatchError(OrderflowError):
    """An item or table belongs to a different seller than the basket."""

    code = "seller_mismatch"

    def __init__(self, basket_seller_id: int, other_seller_id: int):
        super().__init__(
            "Your cart has items from another caterer. Clear the cart to order from here.",
            409,
            {"basket_seller_id": basket_seller_id, "other_seller_id": other_seller_id},
        )
        self.basket_seller_id = basket_seller_id
        self.other_seller_id = other_seller_id


class EmptyBasketError(OrderflowError):
    code = "empty_basket"

    def __init__(self, message="Your cart is empty"):
        super().__init__(message, 400)


class BuyerRequiredError(OrderflowError):
    code = "buyer_required"

    def __init__(self, message="Please login to place an order"):
        super().__init__(message, 401)


class PaymentMethodUnavailableError(OrderflowError):
    """Direct transfer chosen but the seller has no payment address."""

    code = "payment_method_unavailable"

    def __init__(self, method: str, seller_id: Optional[int] = None):
        super().__init__(
            f"{method.upper()} payments are not available for this seller. "
            "Please use cash instead.",
            400,
            {"method": method, "seller_id": seller_id},
        )
        self.method = method
        self.seller_id = seller_id


class TransactionReferenceRequiredError(OrderflowError):
    code = "transaction_reference_required"

    def __init__(self, message="Please complete the UPI payment and enter the transaction ID"):
        super().__init__(message, 400)


class OrderSubmissionError(OrderflowError):
    """
    The remote order write failed.

    The message is the remote's own message when it supplied one, otherwise a
    generic retry hint. The basket is never cleared when this is raised.
    """

    code = "submission_failed"
    GENERIC_MESSAGE = "Failed to place order. Please try again."

    def __init__(self, remote_message: Optional[str] = None, status_code: Optional[int] = None):
        super().__init__(remote_message or self.GENERIC_MESSAGE, status_code or 502)
        self.remote_message = remote_message
        self.retryable = True


class InvalidStatusTransitionError(OrderflowError):
    code = "invalid_status_transition"

    def __init__(self, current: str, requested: str, allowed: Optional[list[str]] = None):
        super().__init__(
            f"Cannot move order from '{current}' to '{requested}'",
            400,
            {"current": current, "requested": requested, "allowed": sorted(allowed or [])},
        )
        self.current = current
        self.requested = requested
        self.allowed = sorted(allowed or [])


class OrderNotFoundError(OrderflowError):
    code = "order_not_found"

    def __init__(self, order_id: str):
        super().__init__(f"Order {order_id} not found", 404, {"order_id": order_id})
        self.order_id = order_id


class DuplicateOrderError(OrderflowError):
    code = "duplicate_order"

    def __init__(self, order_id: str):
        super().__init__(f"Order {order_id} already exists", 409, {"order_id": order_id})
        self.order_id = order_id


class InvalidTableCodeError(OrderflowError):
    """A scanned table code is malformed, unknown or inactive."""

    code = "invalid_table_code"

    def __init__(self, message="Invalid table code. Please scan the QR code again."):
        super().__init__(message, 400)


class OrderGatewayError(OrderflowError):
    """A remote collaborator call failed (network error or non-2xx response)."""

    code = "gateway_error"

    def __init__(self, message: str, status_code: int = 502, remote_message: Optional[str] = None):
        super().__init__(message, status_code)
        self.remote_message = remote_message
