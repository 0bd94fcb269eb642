"""
Business Date Service

Single source for "now", "today" and "tomorrow". Every calendar date that
crosses the pipeline boundary is a ``YYYY-MM-DD`` string computed in the
configured business time zone, never in the host's local time, so the
availability lookup and the order's delivery date always agree.
"""

from datetime import date, datetime, timedelta, timezone
from functools import lru_cache
from typing import Optional, Union
from zoneinfo import ZoneInfo

from orderflow.core.config import get_settings

ISO_DATE_FORMAT = "%Y-%m-%d"

DateLike = Union[str, date, datetime]


@lru_cache()
def business_zone(name: Optional[str] = None) -> ZoneInfo:
    """Return the configured business time zone."""
    return ZoneInfo(name or get_settings().business_timezone)


def now(reference: Optional[datetime] = None) -> datetime:
    """
    Current instant in the business time zone.

    Args:
        reference: Optional instant to convert instead of the wall clock.
            Naive values are treated as UTC.
    """
    instant = reference or datetime.now(timezone.utc)
    if instant.tzinfo is None:
        instant = instant.replace(tzinfo=timezone.utc)
    return instant.astimezone(business_zone())


def today(reference: Optional[datetime] = None) -> str:
    """Today's date (``YYYY-MM-DD``) in the business time zone."""
    return days_from_today(0, reference)


def tomorrow(reference: Optional[datetime] = None) -> str:
    """Tomorrow's date (``YYYY-MM-DD``) in the business time zone."""
    return days_from_today(1, reference)


def days_from_today(days: int, reference: Optional[datetime] = None) -> str:
    """Date ``days`` calendar days after today, in the business time zone."""
    return (now(reference).date() + timedelta(days=days)).strftime(ISO_DATE_FORMAT)


def timestamp(reference: Optional[datetime] = None) -> str:
    """ISO-8601 instant with the business zone offset."""
    return now(reference).isoformat()


def to_iso_date(value: DateLike) -> str:
    """
    Normalize a date-ish value to ``YYYY-MM-DD``.

    Strings are validated and truncated at a ``T`` separator, so both
    ``2026-02-04`` and ``2026-02-04T10:30:00+05:30`` become ``2026-02-04``.

    Raises:
        ValueError: If the value is not a recognizable calendar date
    """
    if isinstance(value, datetime):
        return now(value).strftime(ISO_DATE_FORMAT)
    if isinstance(value, date):
        return value.strftime(ISO_DATE_FORMAT)
    head = value.strip().split("T", 1)[0]
    return datetime.strptime(head, ISO_DATE_FORMAT).date().strftime(ISO_DATE_FORMAT)


def parse_iso_date(value: str) -> date:
    """Parse a ``YYYY-MM-DD`` string into a ``date``."""
    return datetime.strptime(to_iso_date(value), ISO_DATE_FORMAT).date()


def is_today(value: DateLike, reference: Optional[datetime] = None) -> bool:
    return to_iso_date(value) == today(reference)


def is_tomorrow(value: DateLike, reference: Optional[datetime] = None) -> bool:
    return to_iso_date(value) == tomorrow(reference)


def format_date(value: DateLike) -> str:
    """Format a calendar date as e.g. ``Feb 4, 2026``."""
    d = parse_iso_date(to_iso_date(value))
    return f"{d.strftime('%b')} {d.day}, {d.year}"


def date_label(value: Optional[DateLike], reference: Optional[datetime] = None) -> str:
    """
    Human label for a delivery date.

    Returns "Today" for a missing date or today's date, "Tomorrow" for the
    next day and ``format_date`` otherwise.
    """
    if value is None:
        return "Today"
    if is_today(value, reference):
        return "Today"
    if is_tomorrow(value, reference):
        return "Tomorrow"
    return format_date(value)
