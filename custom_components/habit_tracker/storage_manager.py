# File: storage_manager.py
"""Handles persistent data storage for the Habit Tracker integration.

Uses Home Assistant's Storage helper to save and load habit records, ensuring
the history is preserved across restarts. Records are normalized once on
load; in memory every record is a canonical HabitData with tagged
completion values, and they are serialized back to plain JSON on save.
"""

from __future__ import annotations

from typing import Any

from homeassistant.core import HomeAssistant
from homeassistant.helpers.storage import Store

from . import const, data_builders as db
from .type_defs import HabitData
from .utils.dt_utils import dt_today_local


class HabitStorageManager:
    """Manages loading, saving, and accessing habit data from storage.

    Habit id is the primary key for every record. This class is the single
    writer of the storage document.
    """

    def __init__(
        self, hass: HomeAssistant, storage_key: str = const.STORAGE_KEY
    ) -> None:
        """Initialize the storage manager.

        Args:
            hass: Home Assistant core object.
            storage_key: Key to identify storage location (default: const.STORAGE_KEY).

        """
        self.hass = hass
        self._storage_key = storage_key
        self._store: Store = Store(hass, const.STORAGE_VERSION, storage_key)
        self._data: dict[str, Any] = self._get_default_structure()

    def _get_default_structure(self) -> dict[str, Any]:
        """Get the default empty data structure."""
        return {
            const.DATA_META: {const.DATA_META_SCHEMA_VERSION: const.SCHEMA_VERSION},
            const.DATA_HABITS: {},
        }

    def _normalize_document(self, existing_data: Any) -> tuple[dict[str, Any], bool]:
        """Normalize a loaded document.

        Accepts the current {meta, habits} shape and a legacy bare list of
        habit records.

        Returns:
            (normalized data, changed) where changed means the stored
            document differs from what would be saved now.
        """
        today = dt_today_local()
        if isinstance(existing_data, list):
            const.LOGGER.info(
                "INFO: Migrating legacy habit list (%s records)", len(existing_data)
            )
            raw_records: list[Any] = existing_data
            changed = True
        elif isinstance(existing_data, dict) and isinstance(
            existing_data.get(const.DATA_HABITS, {}), (dict, list)
        ):
            raw_habits = existing_data.get(const.DATA_HABITS, {})
            raw_records = (
                list(raw_habits.values()) if isinstance(raw_habits, dict) else raw_habits
            )
            meta = existing_data.get(const.DATA_META)
            changed = (
                not isinstance(meta, dict)
                or meta.get(const.DATA_META_SCHEMA_VERSION) != const.SCHEMA_VERSION
                or not isinstance(raw_habits, dict)
            )
        else:
            const.LOGGER.error(
                "ERROR: Unreadable habit storage document (%s). Starting empty",
                type(existing_data).__name__,
            )
            return self._get_default_structure(), True

        data = self._get_default_structure()
        habits: dict[str, HabitData] = data[const.DATA_HABITS]
        for raw in raw_records:
            habit = db.normalize_habit(raw, today)
            if habit is None:
                changed = True
                continue
            if habit["id"] in habits:
                const.LOGGER.warning(
                    "WARNING: Duplicate habit id '%s' in storage, keeping the first",
                    habit["id"],
                )
                changed = True
                continue
            habits[habit["id"]] = habit
            if not changed and db.serialize_habit(habit) != raw:
                changed = True
        return data, changed

    async def async_initialize(self) -> None:
        """Load data from storage during startup.

        If no data exists, initializes with an empty structure.
        """
        const.LOGGER.debug("DEBUG: HabitStorageManager: Loading data from storage")
        existing_data = await self._store.async_load()

        if existing_data is None:
            const.LOGGER.info("INFO: No existing storage found. Initializing new data")
            self._data = self._get_default_structure()
            return

        self._data, changed = self._normalize_document(existing_data)
        const.LOGGER.debug(
            "DEBUG: Loaded %s habits from storage", len(self._data[const.DATA_HABITS])
        )
        if changed:
            await self.async_save()

    @property
    def data(self) -> dict[str, Any]:
        """Retrieve the in-memory data cache."""
        return self._data

    def get_habits(self) -> dict[str, HabitData]:
        """Retrieve the habits keyed by id."""
        return self._data.get(const.DATA_HABITS, {})

    def get_habit_list(self) -> list[HabitData]:
        """Retrieve the habits in insertion order."""
        return list(self.get_habits().values())

    def get_habit(self, habit_id: str) -> HabitData | None:
        """Retrieve a single habit by id."""
        return self.get_habits().get(habit_id)

    def _serialize(self) -> dict[str, Any]:
        """Build the JSON document written to disk."""
        return {
            const.DATA_META: dict(self._data[const.DATA_META]),
            const.DATA_HABITS: {
                habit_id: db.serialize_habit(habit)
                for habit_id, habit in self.get_habits().items()
            },
        }

    async def async_save(self) -> None:
        """Save the current data structure to storage asynchronously.

        Raises:
            No exceptions raised - errors are logged but do not stop execution.
            OSError: Logged when file system issues prevent saving.
            TypeError: Logged when data contains non-serializable types.
            ValueError: Logged when data is invalid for JSON serialization.
        """
        try:
            await self._store.async_save(self._serialize())
            const.LOGGER.debug("DEBUG: Data saved successfully to storage")
        except OSError as err:
            const.LOGGER.error(
                "ERROR: Failed to save storage due to file system error: %s. "
                "Check disk space and file permissions for %s",
                err,
                self._store.path,
            )
        except TypeError as err:
            const.LOGGER.error(
                "ERROR: Failed to save storage due to non-serializable data: %s. "
                "Data contains types that cannot be converted to JSON",
                err,
            )
        except ValueError as err:
            const.LOGGER.error(
                "ERROR: Failed to save storage due to invalid data format: %s. "
                "Data structure may be corrupted",
                err,
            )

    async def async_upsert_habit(self, habit: HabitData) -> None:
        """Insert or replace one habit record and persist."""
        self.get_habits()[habit["id"]] = habit
        await self.async_save()

    async def async_delete_habit(self, habit_id: str) -> bool:
        """Remove one habit record and persist.

        Returns:
            True if the habit existed.
        """
        if self.get_habits().pop(habit_id, None) is None:
            const.LOGGER.warning(
                "WARNING: Attempted to delete unknown habit id '%s'", habit_id
            )
            return False
        await self.async_save()
        return True
