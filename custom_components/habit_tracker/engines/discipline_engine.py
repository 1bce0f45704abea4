"""Discipline Engine - Composite 0-100 discipline score.

Two weightings of the same sub-scores are provided:

Yearly variant (year review):
    completion 40% + streak strength 30% + recovery 30%
Overview variant (lifetime stats):
    completion 40% + streak strength 30% + consistency 20% + recovery 10%

Sub-scores are each bounded to [0, 100], so the weighted sum is bounded by
construction. The recovery heuristic thresholds live in const.py.

ARCHITECTURE: This is a pure logic engine with NO Home Assistant dependencies.
All methods are static methods that operate on passed-in data.
"""

from __future__ import annotations

from collections.abc import Sequence
from datetime import date
from typing import TYPE_CHECKING

from .. import const
from ..utils.dt_utils import (
    days_between,
    dt_today_local,
    iter_date_range,
    parse_date_key,
)
from ..utils.math_utils import calculate_percentage, clamp, round_half_up
from .consistency_engine import ConsistencyEngine
from .streak_engine import StreakEngine
from .trend_engine import TrendEngine

if TYPE_CHECKING:
    from ..type_defs import DisciplineBreakdown, HabitData


class DisciplineEngine:
    """Pure logic engine for the composite discipline score."""

    # ────────────────────────────────────────────────────────────────
    # Sub-scores
    # ────────────────────────────────────────────────────────────────

    @staticmethod
    def completion_subscore(rates: Sequence[int]) -> float:
        """Mean of per-habit completion rates (0 when there are none)."""
        if not rates:
            return 0.0
        return sum(rates) / len(rates)

    @staticmethod
    def streak_subscore(longest_streak: int, days_tracked: int, horizon: int) -> float:
        """Longest streak relative to min(days tracked, horizon), capped at 100.

        Bounding by days tracked keeps a short history from inflating the score.
        """
        if days_tracked <= 0:
            return 0.0
        return min(100.0, longest_streak / min(days_tracked, horizon) * 100)

    @staticmethod
    def recovery_subscore(window_percentages: Sequence[int], showing_up: int) -> float:
        """Comeback behaviour across consecutive monthly windows.

        A recovery is a window below the eligibility threshold followed by a
        higher window; a slump is a window below the slump threshold.

        Returns:
            recoveries / slumps * 100 (capped) when slumps exist; a flat
            no-slump score when showing-up is high enough; otherwise neutral
            (also when fewer than two windows exist).
        """
        if len(window_percentages) < const.RECOVERY_MIN_WINDOWS:
            return float(const.RECOVERY_SCORE_NEUTRAL)

        recoveries = 0
        slumps = 0
        for previous, current in zip(window_percentages, window_percentages[1:]):
            if previous < const.RECOVERY_ELIGIBLE_BELOW and current > previous:
                recoveries += 1
            if previous < const.RECOVERY_SLUMP_BELOW:
                slumps += 1

        if slumps > 0:
            return min(100.0, recoveries / slumps * 100)
        if showing_up > const.RECOVERY_NO_SLUMP_MIN_SHOWING_UP:
            return float(const.RECOVERY_SCORE_NO_SLUMP)
        return float(const.RECOVERY_SCORE_NEUTRAL)

    @staticmethod
    def comeback_subscore(active_days: set[str], start: date, end: date) -> float:
        """Share of activity gaps that were followed by a comeback.

        A gap is a run of inactive days that follows an active day. A gap
        made only of `end` itself is not judged, since that day can still
        be logged; a longer gap still open at `end` counts as not recovered.
        """
        if not active_days:
            return float(const.RECOVERY_SCORE_NEUTRAL)

        gaps = 0
        comebacks = 0
        seen_active = False
        gap_start: date | None = None
        for day in iter_date_range(start, end):
            if day.isoformat() in active_days:
                if gap_start is not None:
                    gaps += 1
                    comebacks += 1
                    gap_start = None
                seen_active = True
            elif seen_active and gap_start is None:
                gap_start = day

        if gap_start is not None and gap_start < end:
            gaps += 1

        if gaps == 0:
            return 100.0
        return min(100.0, comebacks / gaps * 100)

    # ────────────────────────────────────────────────────────────────
    # Composition
    # ────────────────────────────────────────────────────────────────

    @staticmethod
    def weighted_score(components: Sequence[tuple[float, float]]) -> int:
        """Round the weighted sum of (sub-score, weight) pairs to [0, 100]."""
        total = sum(value * weight for value, weight in components)
        return int(clamp(round_half_up(total), const.PERCENT_MIN, const.PERCENT_MAX))

    @staticmethod
    def discipline_label(score: int) -> str:
        """Threshold band for a score (>= 80 elite ... < 20 reset)."""
        for threshold, label in const.DISCIPLINE_LABEL_BANDS:
            if score >= threshold:
                return label
        return const.DISCIPLINE_LABEL_RESET

    @staticmethod
    def showing_up_band(percent: int) -> str:
        """Narrative band for an average showing-up percentage."""
        for threshold, band in const.SHOWING_UP_BANDS:
            if percent >= threshold:
                return band
        return const.SHOWING_UP_BAND_ROUGH

    # ────────────────────────────────────────────────────────────────
    # Variants
    # ────────────────────────────────────────────────────────────────

    @staticmethod
    def yearly(
        habits: list[HabitData], year: int, today: date | None = None
    ) -> DisciplineBreakdown:
        """Discipline score for one calendar year (up to today)."""
        today = today or dt_today_local()
        start = date(year, 1, 1)
        end = min(date(year, 12, 31), today)

        rates = [
            rate
            for habit in habits
            if (rate := ConsistencyEngine.period_completion_rate(habit, start, end))
            is not None
        ]
        completion = DisciplineEngine.completion_subscore(rates)

        days_tracked = len(ConsistencyEngine.active_days(habits, start, end))
        longest = StreakEngine.longest_run_for_habits(habits, start, end)
        streak = DisciplineEngine.streak_subscore(
            longest, days_tracked, const.YEARLY_STREAK_HORIZON_DAYS
        )

        months = [
            month
            for month in TrendEngine.months_of_year(habits, year, today)
            if month["possible"] > 0
        ]
        showing_up = calculate_percentage(
            sum(month["completed"] for month in months),
            sum(month["possible"] for month in months),
        )
        recovery = DisciplineEngine.recovery_subscore(
            [month["productivity"] for month in months], showing_up
        )

        score = DisciplineEngine.weighted_score(
            [
                (completion, const.YEARLY_WEIGHT_COMPLETION),
                (streak, const.YEARLY_WEIGHT_STREAK),
                (recovery, const.YEARLY_WEIGHT_RECOVERY),
            ]
        )
        return {
            "score": score,
            "label": DisciplineEngine.discipline_label(score),
            "completion": round_half_up(completion),
            "streak": round_half_up(streak),
            "recovery": round_half_up(recovery),
        }

    @staticmethod
    def overview(
        habits: list[HabitData], today: date | None = None
    ) -> DisciplineBreakdown:
        """Lifetime four-factor discipline score across all habits."""
        today = today or dt_today_local()

        completion = DisciplineEngine.completion_subscore(
            [ConsistencyEngine.habit_completion_rate(habit, today) for habit in habits]
        )

        current_best = max(
            (
                streak
                for habit in habits
                if (streak := StreakEngine.habit_current_streak(habit, today)) is not None
            ),
            default=0,
        )
        horizon = const.OVERVIEW_STREAK_HORIZON_DAYS
        streak = min(current_best, horizon) / horizon * 100

        consistency = 0
        recovery = float(const.RECOVERY_SCORE_NEUTRAL)
        if habits:
            first_created = min(habit["created_at"] for habit in habits)
            tracked_days = days_between(first_created, today) + 1
            active = ConsistencyEngine.active_days(habits, end=today)
            consistency = calculate_percentage(len(active), tracked_days)
            recovery = DisciplineEngine.comeback_subscore(
                active, min(parse_date_key(first_created), today), today
            )

        score = DisciplineEngine.weighted_score(
            [
                (completion, const.OVERVIEW_WEIGHT_COMPLETION),
                (streak, const.OVERVIEW_WEIGHT_STREAK),
                (consistency, const.OVERVIEW_WEIGHT_CONSISTENCY),
                (recovery, const.OVERVIEW_WEIGHT_RECOVERY),
            ]
        )
        return {
            "score": score,
            "label": DisciplineEngine.discipline_label(score),
            "completion": round_half_up(completion),
            "streak": round_half_up(streak),
            "consistency": consistency,
            "recovery": round_half_up(recovery),
        }
