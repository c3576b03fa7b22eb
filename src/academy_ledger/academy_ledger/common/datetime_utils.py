from __future__ import annotations

import calendar
from datetime import date, datetime
from typing import Any, Optional, Tuple

from ..core.exceptions import ValidationError


def parse_iso_date(value: Any) -> date:
    """Parse an ISO-8601 date string into a date.

    A time component (``2024-03-01T09:00:00`` or ``2024-03-01 09:00``) is
    accepted and dropped. Anything else after the date is rejected.
    """
    if isinstance(value, datetime):
        return value.date()
    if isinstance(value, date):
        return value
    if value is None:
        raise ValidationError("Date is required")
    if not isinstance(value, str):
        raise ValidationError(f"Invalid date: {value!r} (expected YYYY-MM-DD)")
    text = value.strip()
    if not text:
        raise ValidationError("Date is required")
    try:
        parsed = datetime.strptime(text[:10], "%Y-%m-%d").date()
        if len(text) > 10:
            if text[10] not in ("T", " "):
                raise ValueError(text)
            # fromisoformat only understands a trailing Z from 3.11 on
            datetime.fromisoformat(text.replace("Z", "+00:00"))
    except ValueError:
        raise ValidationError(f"Invalid date: {value!r} (expected YYYY-MM-DD)")
    return parsed


def parse_optional_date(value: Optional[str]) -> Optional[date]:
    if value is None or (isinstance(value, str) and not value.strip()):
        return None
    return parse_iso_date(value)


def month_bounds(year: int, month: int) -> Tuple[date, date]:
    """First and last calendar day of the month (both inclusive)."""
    last_day = calendar.monthrange(year, month)[1]
    return date(year, month, 1), date(year, month, last_day)


def format_date(value: Optional[date]) -> Optional[str]:
    return value.strftime("%Y-%m-%d") if value else None


def now_local() -> datetime:
    """Current local time.

    Wrapped so tests can patch it.
    """
    return datetime.now()
