"""
Unit tests for cart validation and the last-issued-wins reconciler.
"""

import asyncio

from orderflow.core import dates
from orderflow.services.availability.base import AvailabilityEntry

DAY = "2026-02-04"


class TestCartValidator:

    async def test_scenario_a_one_item_unavailable(self, validator, stock, make_line):
        stock(1, days=[DAY])
        lines = [make_line(1), make_line(2)]

        result = await validator.validate(lines, 7, DAY)

        assert len(result.kept) == 1
        assert len(result.dropped) == 1
        assert result.dropped[0].item_id == 2

    async def test_partition_is_complete_and_disjoint(self, validator, stock, availability, make_line):
        stock(1, 3, days=[DAY])
        stock(4, days=["2026-02-05"])
        availability.add(AvailabilityEntry(item_id=5, seller_id=7, dates={DAY}, on_hand=False))
        lines = [make_line(i) for i in (1, 2, 3, 4, 5)]

        result = await validator.validate(lines, 7, DAY)

        kept_ids = [line.item_id for line in result.kept]
        dropped_ids = [line.item_id for line in result.dropped]
        assert kept_ids == [1, 3]
        assert dropped_ids == [2, 4, 5]
        assert sorted(kept_ids + dropped_ids) == [1, 2, 3, 4, 5]
        assert not set(kept_ids) & set(dropped_ids)

    async def test_idempotent(self, validator, stock, make_line):
        stock(1, days=[DAY])
        lines = [make_line(1), make_line(2)]

        first = await validator.validate(lines, 7, DAY)
        second = await validator.validate(lines, 7, DAY)

        assert first == second

    async def test_other_sellers_items_never_count(self, validator, stock, make_line):
        stock(1, days=[DAY], seller_id=8)

        result = await validator.validate([make_line(1)], 7, DAY)

        assert result.kept == ()

    async def test_empty_basket_skips_query(self, validator, availability):
        result = await validator.validate([], 7, DAY)

        assert result.kept == () and result.dropped == ()
        assert availability.calls == []

    async def test_drop_notice(self, validator, stock, make_line):
        stock(1, days=[DAY])
        lines = [make_line(1), make_line(2, name="Masala Dosa")]

        notice = (await validator.validate(lines, 7, DAY)).notice

        assert notice.item_names == ("Masala Dosa",)
        assert notice.message == (
            "1 item(s) in your cart are not available for Feb 4, 2026 "
            "and have been removed: Masala Dosa"
        )

    async def test_tomorrow_label(self, validator, make_line):
        result = await validator.validate([make_line(1)], 7, dates.tomorrow())
        assert result.notice.date_label == "Tomorrow"


class TestBasketReconciler:

    async def test_change_date_removes_dropped_lines(self, session, reconciler, stock, make_line):
        stock(1, days=[DAY])
        session.selection.replace([make_line(1), make_line(2)])

        outcome = await reconciler.change_date(DAY)

        assert outcome.applied
        assert outcome.notice.item_names == ("Item 2",)
        assert [line.item_id for line in session.selection] == [1]
        assert session.selected_delivery_date == DAY

    async def test_refresh_uses_session_date(self, session, reconciler, availability, stock, make_line):
        stock(1, days=[DAY])
        session.selection.add(make_line(1))
        session.selected_delivery_date = DAY

        await reconciler.refresh()

        assert availability.calls == [(7, DAY)]

    async def test_scenario_e_later_issued_result_wins(self, session, reconciler, availability, stock, make_line):
        first_day, second_day = "2026-02-04", "2026-02-05"
        stock(1, days=[first_day, second_day])
        stock(2, days=[second_day])
        index = availability
        session.selection.replace([make_line(1), make_line(2)])

        index.gates[first_day] = asyncio.Event()
        slow = asyncio.create_task(reconciler.change_date(first_day))
        await asyncio.sleep(0)

        fast = await reconciler.change_date(second_day)
        index.gates[first_day].set()
        stale = await slow

        assert fast.applied and not fast.result.has_drops
        assert not stale.applied
        assert stale.result.has_drops
        assert stale.notice is None
        assert [line.item_id for line in session.selection] == [1, 2]
        assert session.selected_delivery_date == second_day

    async def test_in_order_responses_both_apply(self, session, reconciler, stock, make_line):
        stock(1, days=["2026-02-04", "2026-02-05"])
        stock(2, days=["2026-02-05"])
        session.selection.replace([make_line(1), make_line(2)])

        await reconciler.change_date("2026-02-05")
        outcome = await reconciler.change_date("2026-02-04")

        assert outcome.applied
        assert [line.item_id for line in session.selection] == [1]
