"""ISO date parsing shared by schema checks and date validation."""

from __future__ import annotations

from datetime import date, datetime
from typing import Any, Optional


def parse_datetime(value: Any) -> Optional[datetime]:
    """Parse an ISO date/datetime string (or pass through date objects).

    A trailing ``Z`` is accepted as UTC.  Returns None when unparseable.
    Timezone information is dropped so naive and aware inputs compare.
    """
    if isinstance(value, datetime):
        return value.replace(tzinfo=None)
    if isinstance(value, date):
        return datetime(value.year, value.month, value.day)
    if not isinstance(value, str) or not value.strip():
        return None

    text = value.strip()
    if text.endswith("Z"):
        text = text[:-1] + "+00:00"
    try:
        return datetime.fromisoformat(text).replace(tzinfo=None)
    except ValueError:
        pass
    try:
        return datetime.combine(date.fromisoformat(text), datetime.min.time())
    except ValueError:
        return None


def parse_date(value: Any) -> Optional[date]:
    """Calendar-date view of :func:`parse_datetime`."""
    parsed = parse_datetime(value)
    return parsed.date() if parsed is not None else None
