"""Consistency Engine - Completion rates of expected vs actual occurrences.

Two counting rules exist and are kept deliberately separate:

- Elapsed-time rule (completion_rate, period_completion_rate):
  daily habits expect one completion per elapsed day, weekly habits one per
  started week (ceil(days / 7)), not tied to a weekday.
- Calendar-grid rule (calendar_tally):
  every day of a window is visited; daily habits count every day, weekly
  habits count only on the anchor day (Sunday). Trend windows and monthly
  breakdowns use this rule.

Percentages are whole numbers clamped to [0, 100]; nothing here raises on
empty or inconsistent data.

ARCHITECTURE: This is a pure logic engine with NO Home Assistant dependencies.
All methods are static methods that operate on passed-in data.
"""

from __future__ import annotations

from datetime import date
import math
from typing import TYPE_CHECKING

from .. import const
from ..utils.dt_utils import (
    days_between,
    dt_today_local,
    is_anchor_day,
    iter_date_range,
    parse_date_key,
)
from ..utils.math_utils import calculate_percentage
from .completion_engine import count_completed, is_completed

if TYPE_CHECKING:
    from collections.abc import Iterator, Mapping

    from ..type_defs import HabitData
    from .completion_engine import Completion


class ConsistencyEngine:
    """Pure logic engine for completion-rate calculations."""

    @staticmethod
    def expected_occurrences(
        created_at: date | str, frequency: str, as_of: date
    ) -> int:
        """Expected completions from created_at to as_of inclusive.

        Returns:
            0 when created_at is after as_of, otherwise at least 1.
        """
        elapsed = days_between(created_at, as_of)
        if elapsed < 0:
            return 0
        if frequency == const.FREQUENCY_WEEKLY:
            return max(1, math.ceil(elapsed / 7))
        return max(1, elapsed + 1)

    @staticmethod
    def completion_rate(
        completions: Mapping[str, Completion],
        created_at: date | str,
        frequency: str,
        target: int = const.DEFAULT_TARGET,
        as_of: date | None = None,
    ) -> int:
        """Lifetime completion rate as an integer percent in [0, 100].

        Every stored completed entry counts, whatever its date; entries
        logged before created_at (e.g. after a migration) are absorbed by
        the clamp.
        """
        expected = ConsistencyEngine.expected_occurrences(
            created_at, frequency, as_of or dt_today_local()
        )
        if expected <= 0:
            return 0
        actual = count_completed(completions, target)
        return calculate_percentage(actual, expected)

    @staticmethod
    def habit_completion_rate(habit: HabitData, as_of: date | None = None) -> int:
        """completion_rate() for a normalized habit record."""
        return ConsistencyEngine.completion_rate(
            habit["completions"],
            habit["created_at"],
            habit["frequency"],
            habit["target"],
            as_of,
        )

    @staticmethod
    def period_completion_rate(habit: HabitData, start: date, end: date) -> int | None:
        """Completion rate restricted to the window [start, end].

        Expected occurrences are counted from max(created_at, start) to end
        with the elapsed-time rule; only completed entries inside that span
        count as actual occurrences.

        Returns:
            The percentage, or None when the habit expected nothing in the
            window (created after end, or an empty window).
        """
        first = max(parse_date_key(habit["created_at"]), start)
        if first > end:
            return None
        expected = ConsistencyEngine.expected_occurrences(first, habit["frequency"], end)
        first_key, end_key = first.isoformat(), end.isoformat()
        actual = sum(
            1
            for key, value in habit["completions"].items()
            if first_key <= key <= end_key and is_completed(value, habit["target"])
        )
        return calculate_percentage(actual, expected)

    @staticmethod
    def calendar_grid(habit: HabitData, start: date, end: date) -> Iterator[str]:
        """Yield the date keys in [start, end] on which the habit is expected.

        Days before created_at never count. Weekly habits are expected only
        on the anchor day.
        """
        created = parse_date_key(habit["created_at"])
        for day in iter_date_range(max(start, created), end):
            if habit["frequency"] == const.FREQUENCY_WEEKLY and not is_anchor_day(day):
                continue
            yield day.isoformat()

    @staticmethod
    def calendar_tally(habit: HabitData, start: date, end: date) -> tuple[int, int]:
        """Count (completed, possible) for one habit on the daily calendar grid.

        A weekly habit counts as completed only if the anchor day itself is
        completed.
        """
        completed = 0
        possible = 0
        for key in ConsistencyEngine.calendar_grid(habit, start, end):
            possible += 1
            if is_completed(habit["completions"].get(key), habit["target"]):
                completed += 1
        return completed, possible

    @staticmethod
    def calendar_completed_days(
        habits: list[HabitData], start: date, end: date
    ) -> set[str]:
        """Date keys on the calendar grid where at least one habit was completed."""
        return {
            key
            for habit in habits
            for key in ConsistencyEngine.calendar_grid(habit, start, end)
            if is_completed(habit["completions"].get(key), habit["target"])
        }

    @staticmethod
    def calendar_tally_all(
        habits: list[HabitData], start: date, end: date
    ) -> tuple[int, int]:
        """Sum calendar_tally() across habits."""
        completed = 0
        possible = 0
        for habit in habits:
            habit_completed, habit_possible = ConsistencyEngine.calendar_tally(
                habit, start, end
            )
            completed += habit_completed
            possible += habit_possible
        return completed, possible

    @staticmethod
    def active_days(
        habits: list[HabitData], start: date | None = None, end: date | None = None
    ) -> set[str]:
        """Date keys on which at least one habit was completed.

        Args:
            habits: Normalized habit records.
            start: Optional inclusive lower bound.
            end: Optional inclusive upper bound.
        """
        start_key = start.isoformat() if start else None
        end_key = end.isoformat() if end else None
        days: set[str] = set()
        for habit in habits:
            for key, value in habit["completions"].items():
                if start_key and key < start_key:
                    continue
                if end_key and key > end_key:
                    continue
                if is_completed(value, habit["target"]):
                    days.add(key)
        return days
