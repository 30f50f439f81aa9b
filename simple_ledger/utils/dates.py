from __future__ import annotations

from datetime import date as date_cls
from typing import Any, Optional

from dateutil.relativedelta import relativedelta


def parse_iso_date(value: Any) -> Optional[date_cls]:
    """Parse an ISO-8601 date (YYYY-MM-DD) into a datetime.date."""
    if value in (None, ""):
        return None
    if isinstance(value, date_cls):
        return value
    if isinstance(value, str):
        try:
            return date_cls.fromisoformat(value.strip())
        except ValueError:
            return None
    return None


def parse_month(value: Any) -> Optional[date_cls]:
    """Parse a YYYY-MM month into the first day of that month."""
    if not isinstance(value, str):
        return None
    try:
        year, month = value.strip().split("-")
        return date_cls(int(year), int(month), 1)
    except ValueError:
        return None


def month_bounds(day: date_cls) -> tuple[date_cls, date_cls]:
    """First and last day of the calendar month containing ``day``."""
    start = day.replace(day=1)
    end = start + relativedelta(months=1) - relativedelta(days=1)
    return start, end
