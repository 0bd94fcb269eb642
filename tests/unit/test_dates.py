"""
Unit tests for the business date service.
"""

from datetime import date, datetime, timezone

import pytest

from orderflow.core import dates

# 20:00 UTC on Feb 3 is 01:30 on Feb 4 in Asia/Kolkata
LATE_UTC = datetime(2026, 2, 3, 20, 0, tzinfo=timezone.utc)


class TestBusinessDay:

    def test_today_uses_business_zone_not_utc(self):
        assert dates.today(LATE_UTC) == "2026-02-04"

    def test_tomorrow(self):
        assert dates.tomorrow(LATE_UTC) == "2026-02-05"

    def test_naive_reference_is_utc(self):
        assert dates.today(datetime(2026, 2, 3, 20, 0)) == "2026-02-04"

    def test_days_from_today_crosses_month(self):
        assert dates.days_from_today(26, LATE_UTC) == "2026-03-02"


class TestNormalization:

    @pytest.mark.parametrize("value", [
        "2026-02-04",
        " 2026-02-04 ",
        "2026-02-04T10:30:00+05:30",
        date(2026, 2, 4),
    ])
    def test_to_iso_date(self, value):
        assert dates.to_iso_date(value) == "2026-02-04"

    def test_datetime_converted_to_business_zone(self):
        assert dates.to_iso_date(LATE_UTC) == "2026-02-04"

    @pytest.mark.parametrize("value", ["", "04/02/2026", "2026-13-01", "tomorrow"])
    def test_rejects_garbage(self, value):
        with pytest.raises(ValueError):
            dates.to_iso_date(value)


class TestLabels:

    def test_format_date(self):
        assert dates.format_date("2026-02-04") == "Feb 4, 2026"

    def test_date_label(self):
        assert dates.date_label("2026-02-04", LATE_UTC) == "Today"
        assert dates.date_label("2026-02-05", LATE_UTC) == "Tomorrow"
        assert dates.date_label("2026-02-10", LATE_UTC) == "Feb 10, 2026"

    def test_missing_date_is_today(self):
        assert dates.date_label(None) == "Today"
