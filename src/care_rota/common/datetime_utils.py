from __future__ import annotations

from datetime import date, datetime, timezone
from typing import Any, Optional

from dateutil.parser import isoparse
from dateutil.relativedelta import relativedelta


def parse_iso_date(value: str) -> date:
    """Parse YYYY-MM-DD string into date."""
    return datetime.strptime(value, "%Y-%m-%d").date()


def now_utc() -> datetime:
    """Current time as an aware UTC instant.

    Note: Wrapped so tests can inject a fixed clock instead.
    """
    return datetime.now(timezone.utc)


def as_aware(value: datetime) -> datetime:
    """Treat naive datetimes as UTC so comparisons never mix the two kinds."""
    if value.tzinfo is None:
        return value.replace(tzinfo=timezone.utc)
    return value


def parse_timestamp(value: Any) -> Optional[datetime]:
    """Total timestamp parser: anything unusable becomes None."""
    if value is None or value == "":
        return None
    if isinstance(value, datetime):
        return as_aware(value)
    if not isinstance(value, str):
        return None
    try:
        return as_aware(isoparse(value.strip()))
    except (ValueError, OverflowError):
        return None


def parse_day(value: Any) -> Optional[date]:
    """Total date parser accepting dates, datetimes and ISO strings.

    Only the calendar part of a timestamp string is kept ("2026-02-10T00:00:00Z"
    is the 10th whatever the offset says).
    """
    if value is None or value == "":
        return None
    if isinstance(value, datetime):
        return value.date()
    if isinstance(value, date):
        return value
    if not isinstance(value, str):
        return None
    try:
        return parse_iso_date(value.strip()[:10])
    except ValueError:
        return None


def whole_minutes_between(start: datetime, end: datetime) -> int:
    """Floor of (end - start) in minutes; negative when end is before start."""
    return int((end - start).total_seconds() // 60)


def format_time_ago(then: Optional[datetime], now: datetime, *, never: str = "Never") -> str:
    """Human readable distance from `then` to `now`, e.g. "5 minutes ago"."""
    if then is None:
        return never

    then = as_aware(then)
    now = as_aware(now)
    seconds = (now - then).total_seconds()
    distance = _distance_words(abs(seconds), min(then, now), max(then, now))
    return f"{distance} ago" if seconds >= 0 else f"in {distance}"


def _plural(count: int, unit: str) -> str:
    return f"{count} {unit}" if count == 1 else f"{count} {unit}s"


def _distance_words(seconds: float, earlier: datetime, later: datetime) -> str:
    minutes = round(seconds / 60)

    if minutes < 1:
        return "less than a minute"
    if minutes < 45:
        return _plural(minutes, "minute")
    if minutes < 90:
        return "about 1 hour"
    if minutes < 1440:
        return f"about {round(minutes / 60)} hours"
    if minutes < 2520:
        return "1 day"
    if minutes < 43200:
        return _plural(round(minutes / 1440), "day")
    if minutes < 86400:
        return f"about {_plural(round(minutes / 43200), 'month')}"

    delta = relativedelta(later, earlier)
    months = delta.years * 12 + delta.months
    if months < 12:
        return _plural(max(months, 2), "month")

    years, remainder = divmod(months, 12)
    if remainder < 3:
        return f"about {_plural(years, 'year')}"
    if remainder < 9:
        return f"over {_plural(years, 'year')}"
    return f"almost {_plural(years + 1, 'year')}"
