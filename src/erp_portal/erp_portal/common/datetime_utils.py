from __future__ import annotations

import calendar
from datetime import date, datetime, time, timezone
from typing import Optional

from ..core.exceptions import ValidationError


def parse_iso_date(value: str) -> date:
    """Parse YYYY-MM-DD string into date."""
    return datetime.strptime(value, "%Y-%m-%d").date()


def parse_date_param(value: Optional[str], field_name: str) -> date:
    """Like `parse_iso_date` but raises ValidationError for the API layer."""
    if not value:
        raise ValidationError(f"{field_name} is required (YYYY-MM-DD format)")
    try:
        return parse_iso_date(str(value).strip())
    except ValueError:
        raise ValidationError(f"{field_name} must be a date in YYYY-MM-DD format")


def parse_month(value: Optional[str]) -> date:
    """Parse YYYY-MM (or YYYY-MM-DD) into the first day of that month."""
    if not value:
        raise ValidationError("month is required (YYYY-MM format)")
    try:
        return datetime.strptime(str(value).strip()[:7], "%Y-%m").date()
    except ValueError:
        raise ValidationError("month must be in YYYY-MM format")


_DATETIME_FORMATS = (
    "%Y-%m-%d %H:%M:%S",
    "%Y-%m-%d %H:%M",
    "%Y-%m-%d %H:%M:%S.%f",
    "%Y-%m-%d %H:%M:%S%z",
    "%Y-%m-%d %H:%M%z",
    "%Y-%m-%d %H:%M:%S.%f%z",
)


def parse_datetime(value: str) -> datetime:
    """Accept 'YYYY-MM-DD HH:MM[:SS]' or ISO 'YYYY-MM-DDTHH:MM[:SS]'.

    Values with an offset (`Z`, `+05:30`) are converted to UTC, then returned
    naive like the rest.
    """
    text = str(value).strip().replace("T", " ")
    if text.endswith("Z"):
        text = text[:-1] + "+00:00"
    for fmt in _DATETIME_FORMATS:
        try:
            parsed = datetime.strptime(text, fmt)
        except ValueError:
            continue
        if parsed.tzinfo is not None:
            parsed = parsed.astimezone(timezone.utc).replace(tzinfo=None)
        return parsed
    raise ValidationError(f"Invalid datetime: {value!r}")


def parse_hhmm(value: str) -> time:
    return datetime.strptime(value.strip(), "%H:%M").time()


def format_minutes(minutes: int) -> str:
    """Format a minute count as HH:MM."""
    minutes = max(int(minutes), 0)
    return f"{minutes // 60:02d}:{minutes % 60:02d}"


def month_end(month_start: date) -> date:
    last_day = calendar.monthrange(month_start.year, month_start.month)[1]
    return month_start.replace(day=last_day)


def now_local() -> datetime:
    """Current local time.

    Note: Wrapped so tests can patch/mocked easier.
    """
    return datetime.now()
