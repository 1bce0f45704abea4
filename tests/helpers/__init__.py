"""Test helpers for Habit Tracker tests.

    from tests.helpers import make_habit, days_ago, DOMAIN

- make_habit: canonical HabitData factory with tagged completion values
- days_ago / key_days_ago: date arithmetic relative to a fixed test "today"
"""

from tests.helpers.factories import (
    DOMAIN,
    TODAY,
    days_ago,
    key_days_ago,
    make_habit,
)

__all__ = [
    "DOMAIN",
    "TODAY",
    "days_ago",
    "key_days_ago",
    "make_habit",
]
