"""Manager modules for Habit Tracker integration.

Managers orchestrate workflows and coordinate between engines and storage.
They are stateful and are the only code paths that write habit data.
"""

from .habit_manager import HabitManager, HabitNotFoundError

__all__ = [
    "HabitManager",
    "HabitNotFoundError",
]
