"""Reporting helper functions for Habit Tracker services.

This module provides read-only data shaping for the statistics services.
Service handlers delegate composition to these functions and remain thin;
all counting rules live in the engines.
"""

from __future__ import annotations

from datetime import date
from typing import TYPE_CHECKING

from .. import const
from ..engines.completion_engine import completion_state, count_completed, is_completed
from ..engines.consistency_engine import ConsistencyEngine
from ..engines.discipline_engine import DisciplineEngine
from ..engines.streak_engine import StreakEngine
from ..engines.trend_engine import TrendEngine
from ..utils.dt_utils import days_between, dt_today_local, is_in_year, month_bounds
from ..utils.math_utils import calculate_percentage, clamp_percentage

if TYPE_CHECKING:
    from ..type_defs import (
        HabitData,
        HabitPeriodStats,
        HabitRate,
        HabitStats,
        MonthlySummary,
        MonthWindow,
        OverviewReport,
        YearReview,
    )


def build_habit_stats(
    habits: list[HabitData], today: date | None = None
) -> list[HabitStats]:
    """Per-habit statistics in habit order.

    current_streak is None for weekly habits, which have no day streak.
    """
    today = today or dt_today_local()
    today_key = today.isoformat()
    stats: list[HabitStats] = []
    for habit in habits:
        today_value = habit["completions"].get(today_key)
        stats.append(
            {
                "id": habit["id"],
                "name": habit["name"],
                "type": habit["type"],
                "type_label": const.HABIT_TYPE_LABELS.get(habit["type"], habit["type"]),
                "frequency": habit["frequency"],
                "target": habit["target"],
                "current_streak": StreakEngine.habit_current_streak(habit, today),
                "best_streak": habit["best_streak"],
                "completion_rate": ConsistencyEngine.habit_completion_rate(habit, today),
                "completed_today": is_completed(today_value, habit["target"]),
                "today_state": completion_state(today_value, habit["target"]),
            }
        )
    return stats


def build_overview(habits: list[HabitData], today: date | None = None) -> OverviewReport:
    """Lifetime totals across all habits.

    Returns:
        total_days_tracked: distinct days with at least one completion
        total_completions: completed entries over all habits
        average_consistency: mean of completed days / days since creation
        longest_streak: highest stored best streak
        discipline: overview discipline breakdown
    """
    today = today or dt_today_local()
    if not habits:
        return {
            "total_days_tracked": 0,
            "total_completions": 0,
            "average_consistency": 0,
            "longest_streak": 0,
            "discipline": DisciplineEngine.overview(habits, today),
        }

    total_consistency = 0.0
    for habit in habits:
        days_since_creation = days_between(habit["created_at"], today) + 1
        if days_since_creation > 0:
            completed = count_completed(habit["completions"], habit["target"])
            total_consistency += completed / days_since_creation * 100

    return {
        "total_days_tracked": len(ConsistencyEngine.active_days(habits)),
        "total_completions": sum(
            count_completed(habit["completions"], habit["target"]) for habit in habits
        ),
        "average_consistency": clamp_percentage(total_consistency / len(habits)),
        "longest_streak": max(habit["best_streak"] for habit in habits),
        "discipline": DisciplineEngine.overview(habits, today),
    }


def build_monthly_summary(
    habits: list[HabitData], today: date | None = None
) -> MonthlySummary | None:
    """Current calendar month so far, on the calendar grid.

    Best habit is the first habit with the highest rate; worst habit is the
    last habit with the lowest rate and is only reported when there is more
    than one habit.

    Returns:
        None when there are no habits.
    """
    if not habits:
        return None
    today = today or dt_today_local()
    month_start, month_end = month_bounds(today.year, today.month)
    end = min(month_end, today)

    habit_stats: list[HabitPeriodStats] = []
    total_completed = 0
    total_possible = 0
    for habit in habits:
        completed, possible = ConsistencyEngine.calendar_tally(habit, month_start, end)
        total_completed += completed
        total_possible += possible
        habit_stats.append(
            {
                "name": habit["name"],
                "completed": completed,
                "possible": possible,
                "rate": calculate_percentage(completed, possible),
            }
        )

    ranked = sorted(habit_stats, key=lambda stats: stats["rate"], reverse=True)
    best: HabitRate = {"name": ranked[0]["name"], "rate": ranked[0]["rate"]}
    worst: HabitRate | None = None
    if len(ranked) > 1:
        worst = {"name": ranked[-1]["name"], "rate": ranked[-1]["rate"]}

    return {
        "month": const.MONTH_NAMES[today.month - 1],
        "completion_rate": calculate_percentage(total_completed, total_possible),
        "days_showed_up": len(
            ConsistencyEngine.calendar_completed_days(habits, month_start, end)
        ),
        "total_days_in_month": end.day,
        "best_habit": best,
        "worst_habit": worst,
        "habits": habit_stats,
    }


def _first_extreme(
    items: list[MonthWindow], key: str, *, highest: bool
) -> MonthWindow | None:
    """First item holding the maximum (or minimum) of key."""
    chosen: MonthWindow | None = None
    for item in items:
        if chosen is None:
            chosen = item
        elif (highest and item[key] > chosen[key]) or (
            not highest and item[key] < chosen[key]
        ):
            chosen = item
    return chosen


def build_year_review(
    habits: list[HabitData], year: int, today: date | None = None
) -> YearReview:
    """Yearly review across all habits for one calendar year up to today."""
    today = today or dt_today_local()
    start = date(year, 1, 1)
    end = min(date(year, 12, 31), today)

    end_key = end.isoformat()
    total_completions = sum(
        1
        for habit in habits
        for key, value in habit["completions"].items()
        if is_in_year(key, year)
        and key <= end_key
        and is_completed(value, habit["target"])
    )
    days_tracked = len(ConsistencyEngine.active_days(habits, start, end))

    months = TrendEngine.months_of_year(habits, year, today)
    months_with_data = [month for month in months if month["possible"] > 0]
    avg_showing_up = calculate_percentage(
        sum(month["completed"] for month in months_with_data),
        sum(month["possible"] for month in months_with_data),
    )

    habit_rates: list[HabitRate] = [
        {"name": habit["name"], "rate": rate}
        for habit in habits
        if (rate := ConsistencyEngine.period_completion_rate(habit, start, end))
        is not None
    ]
    most_consistent: HabitRate | None = None
    most_struggled: HabitRate | None = None
    for habit_rate in habit_rates:
        if most_consistent is None or habit_rate["rate"] > most_consistent["rate"]:
            most_consistent = habit_rate
        if most_struggled is None or habit_rate["rate"] < most_struggled["rate"]:
            most_struggled = habit_rate

    return {
        "year": year,
        "days_tracked": days_tracked,
        "total_completions": total_completions,
        "avg_showing_up": avg_showing_up,
        "longest_streak": StreakEngine.longest_run_for_habits(habits, start, end),
        "months": months,
        "best_month": _first_extreme(months_with_data, "productivity", highest=True),
        "worst_month": _first_extreme(months_with_data, "productivity", highest=False),
        "most_consistent": most_consistent,
        "most_struggled": most_struggled,
        "discipline": DisciplineEngine.yearly(habits, year, today),
        "summary_band": DisciplineEngine.showing_up_band(avg_showing_up),
        "has_data": bool(habits) and total_completions > 0,
    }
