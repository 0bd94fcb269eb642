"""
Unit tests for the order status machine.
"""

import itertools

import pytest

from orderflow.core.exceptions import InvalidStatusTransitionError
from orderflow.schemas import FulfillmentType, OrderStatus
from orderflow.services.status_machine import (
    ALLOWED_TRANSITIONS,
    FORWARD_CHAINS,
    OrderStatusService,
    allowed_next_statuses,
    ensure_transition,
    is_terminal,
    is_transition_allowed,
    next_forward_status,
)

S = OrderStatus
ALL_PAIRS = list(itertools.product(OrderStatus, OrderStatus))


class TestTransitionTable:
    """The allow-list is data; every pair is checked against it."""

    @pytest.mark.parametrize("fulfillment", list(FulfillmentType))
    @pytest.mark.parametrize("current,requested", ALL_PAIRS)
    def test_ensure_matches_table(self, fulfillment, current, requested):
        allowed = requested in ALLOWED_TRANSITIONS[fulfillment].get(current, frozenset())
        assert is_transition_allowed(current, requested, fulfillment) is allowed
        if allowed:
            assert ensure_transition(current, requested, fulfillment) == requested
        else:
            with pytest.raises(InvalidStatusTransitionError):
                ensure_transition(current, requested, fulfillment)

    def test_skipping_states_is_rejected(self):
        with pytest.raises(InvalidStatusTransitionError) as exc_info:
            ensure_transition(S.PENDING, S.OUT_FOR_DELIVERY)
        err = exc_info.value
        assert err.status_code == 400
        assert err.to_dict()["error"] == "invalid_status_transition"
        assert err.allowed == ["cancelled", "confirmed"]

    @pytest.mark.parametrize("fulfillment", list(FulfillmentType))
    def test_cancel_from_every_non_terminal_state(self, fulfillment):
        for status in FORWARD_CHAINS[fulfillment]:
            if is_terminal(status):
                continue
            assert is_transition_allowed(status, S.CANCELLED, fulfillment)

    @pytest.mark.parametrize("fulfillment", list(FulfillmentType))
    def test_terminal_states_have_no_exits(self, fulfillment):
        assert allowed_next_statuses(S.DELIVERED, fulfillment) == frozenset()
        assert allowed_next_statuses(S.CANCELLED, fulfillment) == frozenset()

    def test_table_chain_has_no_delivery_leg(self):
        table = FulfillmentType.TABLE
        assert S.OUT_FOR_DELIVERY not in ALLOWED_TRANSITIONS[table]
        assert is_transition_allowed(S.PREPARING, S.DELIVERED, table)
        assert not is_transition_allowed(S.PREPARING, S.OUT_FOR_DELIVERY, table)

    def test_unknown_status_strings(self):
        assert allowed_next_statuses("shipped") == frozenset()
        assert not is_transition_allowed("pending", "shipped")


class TestNextForwardStatus:

    def test_walks_delivery_chain(self):
        chain = []
        status = S.PENDING
        while status is not None:
            chain.append(status)
            status = next_forward_status(status)
        assert tuple(chain) == FORWARD_CHAINS[FulfillmentType.DELIVERY]

    def test_table_chain(self):
        assert next_forward_status(S.PREPARING, FulfillmentType.TABLE) == S.DELIVERED

    def test_terminal(self):
        assert next_forward_status(S.DELIVERED) is None
        assert next_forward_status(S.CANCELLED) is None


class TestOrderStatusService:

    async def test_advance(self, gateway, make_stored_order):
        gateway.add_order(make_stored_order("ORD-1"))
        service = OrderStatusService(gateway)

        updated = await service.advance("ORD-1", S.CONFIRMED)

        assert updated.status == S.CONFIRMED
        assert (await gateway.get_order("ORD-1")).status == S.CONFIRMED

    async def test_illegal_advance_leaves_order_untouched(self, gateway, make_stored_order):
        gateway.add_order(make_stored_order("ORD-1"))
        service = OrderStatusService(gateway)

        with pytest.raises(InvalidStatusTransitionError):
            await service.advance("ORD-1", S.OUT_FOR_DELIVERY)

        assert (await gateway.get_order("ORD-1")).status == S.PENDING

    async def test_table_order_uses_table_chain(self, gateway, make_stored_order):
        gateway.add_order(make_stored_order("ORD-T", status=S.PREPARING, table_number=5))
        service = OrderStatusService(gateway)

        with pytest.raises(InvalidStatusTransitionError):
            await service.advance("ORD-T", S.OUT_FOR_DELIVERY)
        assert (await service.advance("ORD-T", S.DELIVERED)).status == S.DELIVERED
