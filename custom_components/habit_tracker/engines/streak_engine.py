"""Streak Engine - Consecutive-day streaks for daily habits.

This engine provides stateless functions for:
- Current streak: consecutive completed days ending today (inclusive)
- Best streak: running high-water mark updated on every completion write
- Longest run: longest streak inside a date window (period reports)

A streak requires completion through and including today; there is no grace
period. Weekly habits have no streak at all ("not applicable", not zero).

ARCHITECTURE: This is a pure logic engine with NO Home Assistant dependencies.
All methods are static methods that operate on passed-in data.
"""

from __future__ import annotations

from datetime import date, timedelta
from typing import TYPE_CHECKING

from .. import const
from ..utils.dt_utils import dt_today_local, iter_date_range
from .completion_engine import is_completed

if TYPE_CHECKING:
    from collections.abc import Mapping

    from ..type_defs import HabitData
    from .completion_engine import Completion


class StreakEngine:
    """Pure logic engine for streak calculations."""

    @staticmethod
    def current_streak(
        completions: Mapping[str, Completion],
        target: int = const.DEFAULT_TARGET,
        today: date | None = None,
    ) -> int:
        """Count consecutive completed days ending today inclusive.

        Args:
            completions: Date key → tagged completion value.
            target: Progress target for numeric values.
            today: Civil today in the reference zone (defaults to the real clock).

        Returns:
            0 when today is not completed, otherwise the run length.
        """
        day = today or dt_today_local()
        streak = 0
        # A run can never be longer than the number of logged days.
        for _ in range(len(completions)):
            if not is_completed(completions.get(day.isoformat()), target):
                break
            streak += 1
            day -= timedelta(days=1)
        return streak

    @staticmethod
    def update_best_streak(previous_best: int, new_current_streak: int) -> int:
        """Return the new best streak (never decreases)."""
        return max(previous_best, new_current_streak)

    @staticmethod
    def habit_current_streak(habit: HabitData, today: date | None = None) -> int | None:
        """Current streak for a habit, or None for weekly habits."""
        if habit["frequency"] != const.FREQUENCY_DAILY:
            return None
        return StreakEngine.current_streak(habit["completions"], habit["target"], today)

    @staticmethod
    def longest_run(
        completions: Mapping[str, Completion],
        target: int,
        start: date,
        end: date,
    ) -> int:
        """Longest run of consecutive completed days within [start, end].

        Runs are cut at the window edges.
        """
        longest = 0
        run = 0
        for day in iter_date_range(start, end):
            if is_completed(completions.get(day.isoformat()), target):
                run += 1
                longest = max(longest, run)
            else:
                run = 0
        return longest

    @staticmethod
    def longest_run_for_habits(
        habits: list[HabitData], start: date, end: date
    ) -> int:
        """Longest in-window run across all daily habits."""
        return max(
            (
                StreakEngine.longest_run(habit["completions"], habit["target"], start, end)
                for habit in habits
                if habit["frequency"] == const.FREQUENCY_DAILY
            ),
            default=0,
        )
