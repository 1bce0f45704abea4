"""Habit Manager - Habit lifecycle and completion logging.

This manager handles every write to habit data:
- Creating habits (validated through data_builders)
- Logging a completion for one date key (best streak kept up to date)
- Deleting habits
- Resolving service arguments (name or id) to a habit id

ARCHITECTURE:
- HabitManager = STATEFUL workflow, owns the write lock
- data_builders / StreakEngine = pure record and streak logic (STATELESS)
- HabitStorageManager = persistence (single writer of the storage document)

Every write sends SIGNAL_HABITS_UPDATED on the dispatcher so listeners can
refresh derived state.
"""

from __future__ import annotations

import asyncio
from datetime import date
from typing import TYPE_CHECKING, Any

from homeassistant.helpers.dispatcher import async_dispatcher_send

from .. import const, data_builders as db
from ..utils.dt_utils import dt_today_local, is_date_key

if TYPE_CHECKING:
    from homeassistant.core import HomeAssistant

    from ..storage_manager import HabitStorageManager
    from ..type_defs import HabitData


__all__ = ["HabitManager", "HabitNotFoundError"]


class HabitNotFoundError(Exception):
    """Raised when a habit reference matches no stored habit.

    Attributes:
        reference: The id or name that was looked up
    """

    def __init__(self, reference: str) -> None:
        """Initialize HabitNotFoundError.

        Args:
            reference: The id or name that was looked up
        """
        self.reference = reference
        super().__init__(const.ERROR_HABIT_NOT_FOUND_FMT.format(reference))


class HabitManager:
    """Manager for the habit lifecycle.

    Responsibilities:
    - Create, log and delete habits
    - Keep best_streak as a running maximum for daily habits
    - Serialize writes so concurrent service calls never interleave

    NOT responsible for:
    - Statistics and reports (handled by the engines via report_helpers)
    - Legacy record normalization (handled by the storage manager on load)
    """

    def __init__(
        self, hass: HomeAssistant, storage_manager: HabitStorageManager
    ) -> None:
        """Initialize the HabitManager.

        Args:
            hass: Home Assistant instance
            storage_manager: Loaded storage manager holding the habit records
        """
        self.hass = hass
        self._storage = storage_manager
        self._lock = asyncio.Lock()

    @property
    def habits(self) -> list[HabitData]:
        """All habits in creation order."""
        return self._storage.get_habit_list()

    def get_habit(self, habit_id: str) -> HabitData:
        """Return one habit by id.

        Raises:
            HabitNotFoundError: If no habit has that id.
        """
        habit = self._storage.get_habit(habit_id)
        if habit is None:
            raise HabitNotFoundError(habit_id)
        return habit

    def find_habit_id(self, reference: str) -> str:
        """Resolve a habit id or (case-insensitive) name to a habit id.

        An exact id match wins over a name match.

        Raises:
            HabitNotFoundError: If nothing matches.
        """
        habits = self._storage.get_habits()
        if reference in habits:
            return reference
        wanted = reference.strip().casefold()
        for habit_id, habit in habits.items():
            if habit["name"].casefold() == wanted:
                return habit_id
        raise HabitNotFoundError(reference)

    def _notify(self, habit_id: str) -> None:
        async_dispatcher_send(self.hass, const.SIGNAL_HABITS_UPDATED, habit_id)

    async def async_create_habit(
        self, user_input: dict[str, Any], today: date | None = None
    ) -> HabitData:
        """Validate, build and persist a new habit.

        Raises:
            HabitValidationError: If the input breaks a validation rule.
        """
        async with self._lock:
            habit = db.build_habit(user_input, self._storage.get_habits(), today)
            await self._storage.async_upsert_habit(habit)
        const.LOGGER.info(
            "INFO: Created habit '%s' (%s, %s)",
            habit["name"],
            habit["type"],
            habit["frequency"],
        )
        self._notify(habit["id"])
        return habit

    async def async_log_completion(
        self,
        habit_id: str,
        value: Any = None,
        day_key: str | None = None,
        today: date | None = None,
    ) -> HabitData:
        """Record one completion value and update the best streak.

        Args:
            habit_id: Id of the habit to log against
            value: bool for binary habits (None means done), numeric progress
                for counter/timer habits
            day_key: Date key to write (defaults to today)
            today: Civil today (defaults to the reference zone's today)

        Returns:
            The updated habit record.

        Raises:
            HabitNotFoundError: If the habit does not exist.
            HabitValidationError: If the value does not fit the habit type.
            ValueError: If day_key is not a valid date key.
        """
        today = today or dt_today_local()
        if day_key is not None and not is_date_key(day_key):
            raise ValueError(const.ERROR_INVALID_DATE_FMT.format(day_key))

        async with self._lock:
            habit = self.get_habit(habit_id)
            completion = db.coerce_completion_value(habit, value)
            updated = db.apply_completion(habit, completion, day_key, today)
            await self._storage.async_upsert_habit(updated)

        const.LOGGER.debug(
            "DEBUG: Logged %s for habit '%s' on %s (best streak %s)",
            completion,
            updated["name"],
            day_key or today.isoformat(),
            updated["best_streak"],
        )
        self._notify(habit_id)
        return updated

    async def async_delete_habit(self, habit_id: str) -> None:
        """Delete a habit with its whole history.

        Raises:
            HabitNotFoundError: If the habit does not exist.
        """
        async with self._lock:
            habit = self.get_habit(habit_id)
            await self._storage.async_delete_habit(habit_id)
        const.LOGGER.info("INFO: Deleted habit '%s'", habit["name"])
        self._notify(habit_id)
