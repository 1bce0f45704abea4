# File: utils/dt_utils.py
"""Date and time utilities for Habit Tracker.

Pure Python date/time functions with ZERO Home Assistant dependencies.
All functions here can be unit tested without Home Assistant mocking.

Every civil-day computation is done in ONE fixed reference zone
(DEFAULT_TIME_ZONE), never in the zone of the device or the Home Assistant
instance. Date keys are "YYYY-MM-DD" strings of that zone's calendar.

Functions:
    - dt_now_utc / as_local / dt_today_local: current moment and civil "today"
    - today_key / date_key / parse_date_key: stable date keys
    - dt_parse_date: lenient date parsing for stored data
    - days_between: whole civil days between two moments
    - last_n_days / iter_date_range / month_bounds: ranges
    - is_in_year / is_anchor_day: calendar predicates
"""

from __future__ import annotations

from collections.abc import Iterator
from datetime import UTC, date, datetime, timedelta
import logging
from zoneinfo import ZoneInfo

# Third-party date utilities (no HA dependency)
from dateutil.relativedelta import relativedelta

# Module-level logger (no HA dependency)
_LOGGER = logging.getLogger(__name__)

# ==============================================================================
# Constants (local copies to avoid circular imports)
# These mirror const.py values but are defined locally for purity.
# ==============================================================================

# Reference civil zone - overridden once during integration setup
DEFAULT_TIME_ZONE: ZoneInfo = ZoneInfo("Asia/Kolkata")

# date.weekday() of the weekly anchor day (Sunday)
ANCHOR_WEEKDAY = 6

# ==============================================================================
# Timezone Configuration
# ==============================================================================


def set_default_timezone(tz: ZoneInfo) -> None:
    """Set the reference timezone for all dt_utils functions.

    Call this during integration setup with the configured reference zone.

    Args:
        tz: ZoneInfo object representing the reference timezone
    """
    global DEFAULT_TIME_ZONE  # noqa: PLW0603
    DEFAULT_TIME_ZONE = tz


def get_default_timezone() -> ZoneInfo:
    """Get the current reference timezone."""
    return DEFAULT_TIME_ZONE


# ==============================================================================
# Current Date/Time Functions
# ==============================================================================


def dt_now_utc() -> datetime:
    """Return the current datetime in UTC (timezone-aware).

    Returns:
        Current UTC datetime.
    """
    return datetime.now(UTC)


def as_local(dt_obj: datetime, tz: ZoneInfo | None = None) -> datetime:
    """Convert a datetime to the reference timezone.

    Args:
        dt_obj: Datetime object. Naive values are treated as UTC.
        tz: Optional timezone override. Uses DEFAULT_TIME_ZONE if not provided.

    Returns:
        Datetime in the reference timezone
    """
    tz_info = tz or DEFAULT_TIME_ZONE
    if dt_obj.tzinfo is None:
        # Assume it's in UTC if naive
        dt_obj = dt_obj.replace(tzinfo=UTC)
    return dt_obj.astimezone(tz_info)


def to_civil_date(value: date | datetime | str, tz: ZoneInfo | None = None) -> date:
    """Truncate a moment, date or date key to a civil day of the reference zone.

    Args:
        value: An instant (datetime), a civil date, or a date key string.
        tz: Optional timezone override.

    Returns:
        The civil date. Plain dates and date keys are taken as already civil.

    Raises:
        ValueError: If a string value is not a valid date key.
    """
    if isinstance(value, datetime):
        return as_local(value, tz).date()
    if isinstance(value, date):
        return value
    return parse_date_key(value)


def dt_today_local(now: datetime | None = None, tz: ZoneInfo | None = None) -> date:
    """Return today's date in the reference timezone as a `datetime.date`.

    Args:
        now: Optional injected current moment (defaults to the real clock).
        tz: Optional timezone override. Uses DEFAULT_TIME_ZONE if not provided.

    Example:
        datetime.date(2026, 4, 7)
    """
    return as_local(now or dt_now_utc(), tz).date()


def today_key(now: datetime | None = None, tz: ZoneInfo | None = None) -> str:
    """Return today's date key (YYYY-MM-DD) in the reference timezone.

    Example:
        "2026-04-07"
    """
    return dt_today_local(now, tz).isoformat()


# ==============================================================================
# Date Keys
# ==============================================================================


def date_key(value: date | datetime, tz: ZoneInfo | None = None) -> str:
    """Return the deterministic date key for a moment or civil date.

    A datetime is first converted to the reference zone, so the same instant
    yields the same key on every device.

    Args:
        value: Instant (datetime) or civil date.
        tz: Optional timezone override.

    Returns:
        Date key string "YYYY-MM-DD".
    """
    return to_civil_date(value, tz).isoformat()


def parse_date_key(key: str) -> date:
    """Reconstruct the civil date for a date key.

    The key is read as a calendar date, never as a UTC instant, so no
    off-by-one shift can occur.

    Raises:
        ValueError: If the key is not a valid "YYYY-MM-DD" string.
    """
    if not isinstance(key, str) or len(key) != 10:
        raise ValueError(f"Invalid date key: {key!r}")
    parsed = date.fromisoformat(key)
    # fromisoformat also accepts week dates ("2026-W02-3") and basic forms
    if parsed.isoformat() != key:
        raise ValueError(f"Invalid date key: {key!r}")
    return parsed


def dt_parse_date(date_str: str | None) -> date | None:
    """Safely parse a date string into a `datetime.date`.

    Accepts a date key ("2026-04-07") or a full ISO datetime string, which is
    truncated to its civil day in the reference zone.

    Args:
        date_str: Date string to parse, or None

    Returns:
        datetime.date or None if parsing fails.
    """
    if not date_str or not isinstance(date_str, str):
        return None

    try:
        return parse_date_key(date_str)
    except ValueError:
        pass

    try:
        return to_civil_date(datetime.fromisoformat(date_str))
    except ValueError:
        _LOGGER.debug("Unparseable date string: %s", date_str)
        return None


def is_date_key(value: object) -> bool:
    """Return True if value is a valid date key string."""
    if not isinstance(value, str):
        return False
    try:
        parse_date_key(value)
    except ValueError:
        return False
    return True


# ==============================================================================
# Day Arithmetic
# ==============================================================================


def days_between(
    start: date | datetime | str,
    end: date | datetime | str,
    tz: ZoneInfo | None = None,
) -> int:
    """Return the number of whole civil days from start to end.

    Both values are truncated to their civil day first; raw time deltas are
    never divided, so offset changes cannot introduce drift.

    Returns:
        Signed day count (negative if end is before start).
    """
    return (to_civil_date(end, tz) - to_civil_date(start, tz)).days


def iter_date_range(start: date, end: date) -> Iterator[date]:
    """Yield every civil date from start to end inclusive (nothing if end < start)."""
    current = start
    while current <= end:
        yield current
        current += timedelta(days=1)


def last_n_days(n: int, today: date | None = None) -> list[str]:
    """Return the most recent n date keys ending at today, oldest first.

    Args:
        n: Number of days (0 or negative yields an empty list).
        today: Optional injected civil today.
    """
    end = today or dt_today_local()
    return [(end - timedelta(days=offset)).isoformat() for offset in range(n - 1, -1, -1)]


def month_bounds(year: int, month: int) -> tuple[date, date]:
    """Return the first and last civil day of a month."""
    first = date(year, month, 1)
    last = first + relativedelta(months=1, days=-1)
    return first, last


def shift_months(day: date, months: int) -> date:
    """Return the first day of the month `months` away from day's month."""
    return day.replace(day=1) + relativedelta(months=months)


# ==============================================================================
# Calendar Predicates
# ==============================================================================


def is_in_year(key: str, year: int) -> bool:
    """Return True if the date key belongs to the given year."""
    return key.startswith(f"{year}-")


def is_anchor_day(day: date) -> bool:
    """Return True if day is the weekly anchor weekday (Sunday)."""
    return day.weekday() == ANCHOR_WEEKDAY

