from __future__ import annotations

import calendar
from datetime import date, datetime, timedelta

from ..core.exceptions import ValidationError


def parse_iso_date(value: str) -> date:
    """Parse YYYY-MM-DD string into date."""
    try:
        return datetime.strptime((value or "").strip(), "%Y-%m-%d").date()
    except ValueError:
        raise ValidationError(f"Invalid date: {value!r} (expected YYYY-MM-DD)")


def now_local() -> datetime:
    """Current local time.

    Note: Wrapped so tests can patch/mocked easier.
    """
    return datetime.now()


def today_local() -> date:
    return now_local().date()


def week_number(d: date) -> int:
    """ISO week number: weeks start on Monday and week 1 holds the year's first Thursday."""
    return d.isocalendar()[1]


def week_range(d: date) -> tuple[date, date]:
    """Monday..Sunday of the ISO week containing ``d``."""
    start = d - timedelta(days=d.isoweekday() - 1)
    return start, start + timedelta(days=6)


def month_range(year: int, month: int) -> tuple[date, date]:
    last_day = calendar.monthrange(year, month)[1]
    return date(year, month, 1), date(year, month, last_day)


def quarter_range(year: int, quarter: int) -> tuple[date, date]:
    first_month = (quarter - 1) * 3 + 1
    start, _ = month_range(year, first_month)
    _, end = month_range(year, first_month + 2)
    return start, end


def quarter_of(d: date) -> int:
    return (d.month - 1) // 3 + 1


def short_label(d: date) -> str:
    """e.g. 'Jan 4'."""
    return f"{d.strftime('%b')} {d.day}"


def month_label(year_month: str) -> str:
    """'2024-03' -> 'March 2024'."""
    year, month = year_month.split("-")
    return f"{calendar.month_name[int(month)]} {int(year)}"
