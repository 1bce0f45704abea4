"""Unit tests for dt_utils - reference-zone calendar helpers.

These tests run without Home Assistant. Functions that read the wall clock
are pinned with freezegun; everything else receives explicit dates.
"""

from __future__ import annotations

from datetime import UTC, date, datetime, timedelta
from zoneinfo import ZoneInfo

from freezegun import freeze_time
import pytest

from custom_components.habit_tracker import const
from custom_components.habit_tracker.utils import dt_utils
from custom_components.habit_tracker.utils.dt_utils import (
    date_key,
    days_between,
    dt_parse_date,
    dt_today_local,
    is_anchor_day,
    is_date_key,
    is_in_year,
    iter_date_range,
    last_n_days,
    month_bounds,
    parse_date_key,
    shift_months,
    today_key,
)

# =============================================================================
# Test: today / date keys in the reference zone
# =============================================================================


class TestReferenceToday:
    """The civil day follows Asia/Kolkata (UTC+05:30), not UTC."""

    @freeze_time("2026-01-14 18:29:00", tz_offset=0)
    def test_before_reference_midnight(self) -> None:
        """18:29 UTC is 23:59 in the reference zone: still the same day."""
        assert today_key() == "2026-01-14"

    @freeze_time("2026-01-14 18:30:00", tz_offset=0)
    def test_after_reference_midnight(self) -> None:
        """18:30 UTC is midnight in the reference zone: the next day."""
        assert today_key() == "2026-01-15"
        assert dt_today_local() == date(2026, 1, 15)

    def test_injected_now(self) -> None:
        """An injected moment replaces the real clock."""
        now = datetime(2026, 3, 1, 20, 0, tzinfo=UTC)
        assert dt_today_local(now) == date(2026, 3, 2)

    def test_configured_zone_is_used(self) -> None:
        """set_default_timezone changes every later computation."""
        dt_utils.set_default_timezone(ZoneInfo("UTC"))
        assert dt_utils.get_default_timezone() == ZoneInfo("UTC")
        now = datetime(2026, 3, 1, 20, 0, tzinfo=UTC)
        assert dt_today_local(now) == date(2026, 3, 1)

    def test_naive_datetime_is_utc(self) -> None:
        """Naive datetimes are interpreted as UTC."""
        assert date_key(datetime(2026, 1, 14, 19, 0)) == "2026-01-15"


class TestDateKeys:
    """Date key creation and parsing."""

    def test_date_key_of_civil_date(self) -> None:
        """Plain dates are already civil."""
        assert date_key(date(2026, 2, 3)) == "2026-02-03"

    def test_parse_is_calendar_date(self) -> None:
        """Parsing never shifts the day (no UTC-instant interpretation)."""
        assert parse_date_key("2026-01-01") == date(2026, 1, 1)

    @pytest.mark.parametrize(
        "moment",
        [
            datetime(2026, 1, 1, 0, 0, tzinfo=UTC),
            datetime(2026, 6, 30, 18, 29, 59, tzinfo=UTC),
            datetime(2026, 6, 30, 18, 30, tzinfo=UTC),
            datetime(2025, 12, 31, 23, 59, tzinfo=ZoneInfo("America/New_York")),
        ],
    )
    def test_round_trip(self, moment: datetime) -> None:
        """parse_date_key(date_key(x)) is the civil day of x."""
        expected = moment.astimezone(ZoneInfo("Asia/Kolkata")).date()
        assert parse_date_key(date_key(moment)) == expected

    @pytest.mark.parametrize(
        "bad", ["2026-1-1", "2026-13-01", "", "yesterday", "2026-W02-3", "2026-007T0"]
    )
    def test_parse_rejects_invalid(self, bad: str) -> None:
        """Invalid keys raise ValueError."""
        with pytest.raises(ValueError):
            parse_date_key(bad)
        assert not is_date_key(bad)

    def test_is_date_key_non_string(self) -> None:
        """Non-strings are never date keys."""
        assert not is_date_key(20260101)

    def test_lenient_parse(self) -> None:
        """dt_parse_date accepts keys and ISO datetimes, returns None otherwise."""
        assert dt_parse_date("2026-01-05") == date(2026, 1, 5)
        assert dt_parse_date("2026-01-05T20:00:00+00:00") == date(2026, 1, 6)
        assert dt_parse_date("not a date") is None
        assert dt_parse_date(None) is None


# =============================================================================
# Test: day arithmetic and ranges
# =============================================================================


class TestDayArithmetic:
    """Whole civil days between moments."""

    def test_days_between_dates(self) -> None:
        """Signed difference of civil days."""
        assert days_between(date(2026, 1, 1), date(2026, 1, 22)) == 21
        assert days_between("2026-01-22", "2026-01-01") == -21

    def test_days_between_truncates_instants(self) -> None:
        """Instants five minutes apart across reference midnight are one day apart."""
        before = datetime(2026, 1, 14, 18, 28, tzinfo=UTC)
        after = before + timedelta(minutes=5)
        assert days_between(before, after) == 1

    def test_days_between_across_dst_transitions(self) -> None:
        """Civil days are counted in the given zone, not from elapsed hours."""
        berlin = ZoneInfo("Europe/Berlin")
        # 23:30 CET on 2026-03-28 to 23:30 CEST on 2026-03-29 is only 23 hours
        spring_start = datetime(2026, 3, 28, 22, 30, tzinfo=UTC)
        spring_end = spring_start + timedelta(hours=23)
        assert days_between(spring_start, spring_end, tz=berlin) == 1
        # 00:00 to 23:59 on 2026-10-25 spans almost 25 hours on one civil day
        fall_start = datetime(2026, 10, 25, 0, 0, tzinfo=berlin)
        fall_end = datetime(2026, 10, 25, 23, 59, tzinfo=berlin)
        elapsed = fall_end.astimezone(UTC) - fall_start.astimezone(UTC)
        assert elapsed > timedelta(hours=24)
        assert days_between(fall_start, fall_end, tz=berlin) == 0
        assert days_between(fall_start, fall_end + timedelta(minutes=1), tz=berlin) == 1

    def test_iter_date_range_inclusive(self) -> None:
        """Both ends are included; an inverted range is empty."""
        days = list(iter_date_range(date(2026, 1, 30), date(2026, 2, 2)))
        assert [day.isoformat() for day in days] == [
            "2026-01-30",
            "2026-01-31",
            "2026-02-01",
            "2026-02-02",
        ]
        assert list(iter_date_range(date(2026, 2, 2), date(2026, 2, 1))) == []

    def test_last_n_days_oldest_first(self) -> None:
        """Most recent n keys ending today."""
        assert last_n_days(3, date(2026, 3, 1)) == [
            "2026-02-27",
            "2026-02-28",
            "2026-03-01",
        ]
        assert last_n_days(0, date(2026, 3, 1)) == []

    @freeze_time("2026-01-14 12:00:00", tz_offset=0)
    def test_last_n_days_defaults_to_today(self) -> None:
        """Without an injected today the reference zone's today is used."""
        assert last_n_days(1) == ["2026-01-14"]

    def test_month_bounds(self) -> None:
        """First and last civil day, leap years included."""
        assert month_bounds(2028, 2) == (date(2028, 2, 1), date(2028, 2, 29))
        assert month_bounds(2026, 12) == (date(2026, 12, 1), date(2026, 12, 31))

    def test_shift_months(self) -> None:
        """Shifting lands on the first day of the target month."""
        assert shift_months(date(2026, 3, 31), -1) == date(2026, 2, 1)
        assert shift_months(date(2026, 1, 15), -5) == date(2025, 8, 1)


class TestCalendarPredicates:
    """Year membership and the weekly anchor day."""

    def test_is_in_year(self) -> None:
        """Year prefix check."""
        assert is_in_year("2026-05-01", 2026)
        assert not is_in_year("2025-12-31", 2026)

    def test_anchor_day_is_sunday(self) -> None:
        """Only Sundays are anchor days."""
        assert is_anchor_day(date(2026, 1, 18))
        assert not is_anchor_day(date(2026, 1, 17))

    def test_local_constants_mirror_const(self) -> None:
        """dt_utils keeps local copies of the calendar constants."""
        assert dt_utils.ANCHOR_WEEKDAY == const.ANCHOR_WEEKDAY
        assert (
            dt_utils.get_default_timezone().key == const.DEFAULT_REFERENCE_TIME_ZONE
        )
