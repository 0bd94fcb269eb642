"""
Order Status Machine

The allowed-transition table is plain data keyed by fulfilment type, so it
can be enumerated by tests and by the seller UI alike. Delivery orders walk
the full chain; table orders skip the out-for-delivery leg. ``cancelled`` is
reachable from every non-terminal status; ``delivered`` and ``cancelled`` are
terminal.

    delivery: pending -> confirmed -> preparing -> out_for_delivery -> delivered
    table:    pending -> confirmed -> preparing -> delivered
"""

import logging
from typing import Optional, Union

from orderflow.core.exceptions import InvalidStatusTransitionError
from orderflow.schemas import FulfillmentType, OrderResponse, OrderStatus

logger = logging.getLogger(__name__)

S = OrderStatus

TERMINAL_STATUSES = frozenset({S.DELIVERED, S.CANCELLED})

FORWARD_CHAINS: dict[FulfillmentType, tuple[OrderStatus, ...]] = {
    FulfillmentType.DELIVERY: (S.PENDING, S.CONFIRMED, S.PREPARING, S.OUT_FOR_DELIVERY, S.DELIVERED),
    FulfillmentType.TABLE: (S.PENDING, S.CONFIRMED, S.PREPARING, S.DELIVERED),
}

ALLOWED_TRANSITIONS: dict[FulfillmentType, dict[OrderStatus, frozenset[OrderStatus]]] = {
    FulfillmentType.DELIVERY: {
        S.PENDING: frozenset({S.CONFIRMED, S.CANCELLED}),
        S.CONFIRMED: frozenset({S.PREPARING, S.CANCELLED}),
        S.PREPARING: frozenset({S.OUT_FOR_DELIVERY, S.CANCELLED}),
        S.OUT_FOR_DELIVERY: frozenset({S.DELIVERED, S.CANCELLED}),
        S.DELIVERED: frozenset(),
        S.CANCELLED: frozenset(),
    },
    FulfillmentType.TABLE: {
        S.PENDING: frozenset({S.CONFIRMED, S.CANCELLED}),
        S.CONFIRMED: frozenset({S.PREPARING, S.CANCELLED}),
        S.PREPARING: frozenset({S.DELIVERED, S.CANCELLED}),
        S.DELIVERED: frozenset(),
        S.CANCELLED: frozenset(),
    },
}

StatusLike = Union[OrderStatus, str]


def _coerce(status: StatusLike) -> Optional[OrderStatus]:
    try:
        return OrderStatus(status)
    except ValueError:
        return None


def allowed_next_statuses(
    current: StatusLike,
    fulfillment: FulfillmentType = FulfillmentType.DELIVERY,
) -> frozenset[OrderStatus]:
    """Legal next statuses from ``current``; empty for terminal or unknown states."""
    status = _coerce(current)
    if status is None:
        return frozenset()
    return ALLOWED_TRANSITIONS[fulfillment].get(status, frozenset())


def is_transition_allowed(
    current: StatusLike,
    requested: StatusLike,
    fulfillment: FulfillmentType = FulfillmentType.DELIVERY,
) -> bool:
    target = _coerce(requested)
    return target is not None and target in allowed_next_statuses(current, fulfillment)


def ensure_transition(
    current: StatusLike,
    requested: StatusLike,
    fulfillment: FulfillmentType = FulfillmentType.DELIVERY,
) -> OrderStatus:
    """
    Validate a transition against the allow-list.

    Returns:
        The requested status as an ``OrderStatus``

    Raises:
        InvalidStatusTransitionError: If the move is not in the table
    """
    if not is_transition_allowed(current, requested, fulfillment):
        raise InvalidStatusTransitionError(
            current=getattr(current, "value", str(current)),
            requested=getattr(requested, "value", str(requested)),
            allowed=[s.value for s in allowed_next_statuses(current, fulfillment)],
        )
    return OrderStatus(requested)


def next_forward_status(
    current: StatusLike,
    fulfillment: FulfillmentType = FulfillmentType.DELIVERY,
) -> Optional[OrderStatus]:
    """The single "next action" a seller would take, or None at the end of the chain."""
    status = _coerce(current)
    chain = FORWARD_CHAINS[fulfillment]
    if status is None or status in TERMINAL_STATUSES or status not in chain:
        return None
    return chain[chain.index(status) + 1]


def is_terminal(status: StatusLike) -> bool:
    return _coerce(status) in TERMINAL_STATUSES


class OrderStatusService:
    """
    Seller-side status advancement through an order gateway.

    The gateway (and the orders service behind it) enforce the same table;
    checking here first keeps an illegal move from ever reaching the network.
    """

    def __init__(self, gateway):
        self.gateway = gateway

    async def advance(self, order_id: str, next_status: StatusLike) -> OrderResponse:
        order = await self.gateway.get_order(order_id)
        ensure_transition(order.status, next_status, order.fulfillment_type)
        logger.info(f"Advancing order {order_id}: {order.status.value} -> {OrderStatus(next_status).value}")
        return await self.gateway.update_status(order_id, OrderStatus(next_status))
