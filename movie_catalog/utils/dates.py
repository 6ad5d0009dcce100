"""Date arithmetic for release-date windows.

All helpers take the reference day explicitly so callers can inject a clock.
Dates are formatted as ISO `YYYY-MM-DD`, the format the catalog API expects.
"""
from __future__ import annotations

from datetime import date, timedelta

from dateutil.relativedelta import relativedelta


def days_from(today: date, days: int) -> date:
    """Return the date `days` after `today` (negative goes back)."""
    return today + timedelta(days=days)


def add_months(today: date, months: int) -> date:
    """Return the same day `months` later, clamped to the end of the month.

    Examples:
        >>> add_months(date(2024, 12, 31), 2)
        datetime.date(2025, 2, 28)
    """
    return today + relativedelta(months=months)


def parse_release_date(value: str | None) -> date | None:
    """Parse an ISO release date; empty or malformed values give None.

    Only full `YYYY-MM-DD` dates are accepted, so a partial date such as
    "2011-07" counts as undated.
    """
    if not value:
        return None
    try:
        return date.fromisoformat(value)
    except ValueError:
        return None
