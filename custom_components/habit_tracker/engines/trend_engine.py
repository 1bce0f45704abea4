"""Trend Engine - Productivity windows across all habits.

Buckets the combined completion history of every habit into trailing
windows (8 weeks or 6 calendar months) and reports completed / possible /
percentage per window, using the calendar-grid rule of ConsistencyEngine
(daily habits every day, weekly habits on the Sunday anchor only).

Also provides the last-two-windows trend insight (with a dead-band around
small changes) and the per-day activity heatmap.

ARCHITECTURE: This is a pure logic engine with NO Home Assistant dependencies.
All methods are static methods that operate on passed-in data.
"""

from __future__ import annotations

from datetime import date, timedelta
from typing import TYPE_CHECKING

from .. import const
from ..utils.dt_utils import dt_today_local, last_n_days, month_bounds, shift_months
from ..utils.math_utils import calculate_percentage, clamp
from .completion_engine import is_completed
from .consistency_engine import ConsistencyEngine

if TYPE_CHECKING:
    from ..type_defs import (
        ActivityHeatmap,
        HabitData,
        MonthWindow,
        TrendInsight,
        TrendPoint,
    )


class TrendEngine:
    """Pure logic engine for trend series and activity aggregates."""

    @staticmethod
    def _build_point(
        habits: list[HabitData], label: str, start: date, end: date, today: date
    ) -> TrendPoint:
        """Aggregate one window; days after today never count."""
        completed, possible = ConsistencyEngine.calendar_tally_all(
            habits, start, min(end, today)
        )
        return {
            "label": label,
            "completed": completed,
            "possible": possible,
            "percentage": calculate_percentage(completed, possible),
            "start": start.isoformat(),
            "end": end.isoformat(),
        }

    @staticmethod
    def weekly_windows(
        habits: list[HabitData],
        today: date | None = None,
        count: int = const.TREND_WEEKLY_WINDOWS,
    ) -> list[TrendPoint]:
        """Trailing 7-day windows ending today, oldest first (labels W1..Wn)."""
        today = today or dt_today_local()
        points: list[TrendPoint] = []
        for offset in range(count - 1, -1, -1):
            week_end = today - timedelta(days=offset * 7)
            week_start = week_end - timedelta(days=6)
            label = f"{const.TREND_WEEK_LABEL_PREFIX}{count - offset}"
            points.append(
                TrendEngine._build_point(habits, label, week_start, week_end, today)
            )
        return points

    @staticmethod
    def monthly_windows(
        habits: list[HabitData],
        today: date | None = None,
        count: int = const.TREND_MONTHLY_WINDOWS,
    ) -> list[TrendPoint]:
        """Trailing calendar months ending with the current one, oldest first."""
        today = today or dt_today_local()
        points: list[TrendPoint] = []
        for offset in range(count - 1, -1, -1):
            month_start = shift_months(today, -offset)
            _, month_end = month_bounds(month_start.year, month_start.month)
            label = const.MONTH_ABBREVIATIONS[month_start.month - 1]
            points.append(
                TrendEngine._build_point(habits, label, month_start, month_end, today)
            )
        return points

    @staticmethod
    def build_trend(
        habits: list[HabitData],
        mode: str = const.TREND_MODE_WEEKLY,
        today: date | None = None,
    ) -> list[TrendPoint]:
        """Trend series for the requested mode (weekly or monthly).

        An empty habit list yields an empty series.
        """
        if not habits:
            return []
        if mode == const.TREND_MODE_MONTHLY:
            return TrendEngine.monthly_windows(habits, today)
        return TrendEngine.weekly_windows(habits, today)

    @staticmethod
    def classify_change(change: int) -> str:
        """Classify a percentage-point change, ignoring ±dead-band noise."""
        if change > const.TREND_DEAD_BAND:
            return const.TREND_UP
        if change < -const.TREND_DEAD_BAND:
            return const.TREND_DOWN
        return const.TREND_STABLE

    @staticmethod
    def trend_insight(points: list[TrendPoint]) -> TrendInsight | None:
        """Compare the last two windows and locate the best window.

        The best window is the first one reaching the maximum percentage.

        Returns:
            None when fewer than two windows exist.
        """
        if len(points) < 2:
            return None

        current = points[-1]
        previous = points[-2]
        change = current["percentage"] - previous["percentage"]

        best_index = 0
        for index, point in enumerate(points):
            if point["percentage"] > points[best_index]["percentage"]:
                best_index = index

        return {
            "trend": TrendEngine.classify_change(change),
            "change": int(clamp(change, -const.PERCENT_MAX, const.PERCENT_MAX)),
            "current": current["percentage"],
            "best": {
                "index": best_index + 1,
                "label": points[best_index]["label"],
                "percentage": points[best_index]["percentage"],
            },
        }

    @staticmethod
    def months_of_year(
        habits: list[HabitData], year: int, today: date | None = None
    ) -> list[MonthWindow]:
        """Calendar-grid aggregate for each month of a year up to today.

        Months starting after today are omitted.
        """
        today = today or dt_today_local()
        months: list[MonthWindow] = []
        for month in range(1, 13):
            month_start, month_end = month_bounds(year, month)
            if month_start > today:
                break
            completed, possible = ConsistencyEngine.calendar_tally_all(
                habits, month_start, min(month_end, today)
            )
            months.append(
                {
                    "month": const.MONTH_ABBREVIATIONS[month - 1],
                    "completed": completed,
                    "possible": possible,
                    "productivity": calculate_percentage(completed, possible),
                }
            )
        return months

    @staticmethod
    def activity_heatmap(
        habits: list[HabitData],
        today: date | None = None,
        days: int = const.HEATMAP_DAYS,
    ) -> ActivityHeatmap:
        """Number of habits completed per day over the trailing window."""
        heatmap_days = []
        max_count = 0
        for key in last_n_days(days, today):
            count = sum(
                1
                for habit in habits
                if is_completed(habit["completions"].get(key), habit["target"])
            )
            max_count = max(max_count, count)
            heatmap_days.append({"date": key, "count": count})
        return {"days": heatmap_days, "max_count": max_count}
