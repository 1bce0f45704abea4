"""Engine modules for Habit Tracker integration.

Contains pure computation engines (no Home Assistant imports):
- completion_engine: Tagged completion values and the completion predicate
- streak_engine: Current / best / longest-in-window streaks
- consistency_engine: Expected vs actual occurrence rates
- trend_engine: Weekly and monthly productivity windows, heatmap
- discipline_engine: Composite discipline score
"""

# Use relative imports within package to avoid mypy module resolution issues
from .completion_engine import (
    Completion,
    Done,
    Progress,
    completion_state,
    from_completion,
    is_completed,
    to_completion,
)
from .consistency_engine import ConsistencyEngine
from .discipline_engine import DisciplineEngine
from .streak_engine import StreakEngine
from .trend_engine import TrendEngine

__all__ = [
    "Completion",
    "ConsistencyEngine",
    "DisciplineEngine",
    "Done",
    "Progress",
    "StreakEngine",
    "TrendEngine",
    "completion_state",
    "from_completion",
    "is_completed",
    "to_completion",
]
