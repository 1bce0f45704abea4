"""Type definitions for Habit Tracker data structures.

TypedDict is used for every structure with keys known at design time:
the canonical habit record and the result shapes returned by the engines
and report helpers. Results are plain dicts so they can be returned from
service calls without conversion.

IMPORTANT: This file must NOT import from managers, services or storage
to avoid circular dependencies. The completion value types live in
engines/completion_engine.py and are only imported for type checking.

NOTE: TypedDict is STATIC ANALYSIS ONLY. Records read from storage are
sanitized once by data_builders.normalize_habit() before any engine sees them.
"""

from __future__ import annotations

from typing import TYPE_CHECKING, NotRequired, TypedDict

if TYPE_CHECKING:
    from .engines.completion_engine import Completion

# =============================================================================
# Type Aliases (for readability)
# =============================================================================

HabitId = str  # UUID string
DateKey = str  # Civil date in the reference zone "2026-01-18"


# =============================================================================
# Habit Record
# =============================================================================


class HabitData(TypedDict):
    """Canonical, normalized habit record.

    completions maps a date key to a tagged completion value; a missing key
    means "not logged", which is distinct from a logged Done(False) or
    Progress(0).
    """

    id: HabitId
    name: str
    type: str  # binary | counter | timer
    frequency: str  # daily | weekly
    target: int  # >= 1; always 1 for binary habits
    created_at: DateKey
    completions: dict[DateKey, Completion]
    best_streak: int


# =============================================================================
# Trend Aggregation
# =============================================================================


class TrendPoint(TypedDict):
    """One trailing window of the productivity trend."""

    label: str
    completed: int
    possible: int
    percentage: int
    start: DateKey
    end: DateKey


class BestWindow(TypedDict):
    """Window with the highest percentage (1-based index)."""

    index: int
    label: str
    percentage: int


class TrendInsight(TypedDict):
    """Comparison of the last two trend windows."""

    trend: str  # up | down | stable
    change: int
    current: int
    best: BestWindow


class HeatmapDay(TypedDict):
    """Number of habits completed on one day."""

    date: DateKey
    count: int


class ActivityHeatmap(TypedDict):
    """Per-day completion counts for the trailing heatmap window."""

    days: list[HeatmapDay]
    max_count: int


# =============================================================================
# Discipline Score
# =============================================================================


class DisciplineBreakdown(TypedDict):
    """Composite discipline score with its sub-scores (all 0-100)."""

    score: int
    label: str
    completion: int
    streak: int
    recovery: int
    consistency: NotRequired[int]  # Overview variant only


class MonthWindow(TypedDict):
    """Calendar month aggregate used by year review and recovery scoring."""

    month: str
    completed: int
    possible: int
    productivity: int


# =============================================================================
# Reports
# =============================================================================


class HabitStats(TypedDict):
    """Per-habit statistics for the stats list."""

    id: HabitId
    name: str
    type: str
    type_label: str
    frequency: str
    target: int
    current_streak: int | None  # None = not applicable (weekly)
    best_streak: int
    completion_rate: int
    completed_today: bool
    today_state: str


class HabitRate(TypedDict):
    """Name and rate pair used for best/worst highlights."""

    name: str
    rate: int


class HabitPeriodStats(TypedDict):
    """Per-habit aggregate inside a month or year."""

    name: str
    completed: int
    possible: int
    rate: int


class OverviewReport(TypedDict):
    """Lifetime overview across all habits."""

    total_days_tracked: int
    total_completions: int
    average_consistency: int
    longest_streak: int
    discipline: DisciplineBreakdown


class MonthlySummary(TypedDict):
    """Current month so far."""

    month: str
    completion_rate: int
    days_showed_up: int
    total_days_in_month: int
    best_habit: HabitRate | None
    worst_habit: HabitRate | None
    habits: list[HabitPeriodStats]


class YearReview(TypedDict):
    """Yearly review of all habits."""

    year: int
    days_tracked: int
    total_completions: int
    avg_showing_up: int
    longest_streak: int
    months: list[MonthWindow]
    best_month: MonthWindow | None
    worst_month: MonthWindow | None
    most_consistent: HabitRate | None
    most_struggled: HabitRate | None
    discipline: DisciplineBreakdown
    summary_band: str
    has_data: bool
