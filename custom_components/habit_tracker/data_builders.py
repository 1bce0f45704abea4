"""Habit record lifecycle helpers.

This module is the SINGLE SOURCE OF TRUTH for:
- Habit field defaults
- Business logic validation
- Complete habit structure building on create
- Legacy record normalization at the storage boundary
- Completion writes (returning a new record with an updated best streak)

### Build Functions
`build_habit()` takes user input with DATA_* keys, generates the id for new
habits, applies defaults and returns a complete HabitData ready for storage.

### Validation Functions
`validate_habit_data()` returns a dict of errors (empty if valid);
`build_habit()` raises HabitValidationError on the first failure.

### Normalization
`normalize_habit()` runs exactly once per stored record when storage is
loaded. Engines never special-case missing fields because of it.

Consumers:
- storage_manager.py (normalize / serialize)
- managers/habit_manager.py (build / apply_completion)
- services.py (validation errors surface as HomeAssistantError)
"""

from __future__ import annotations

from datetime import date
import math
from typing import Any
import uuid

from . import const
from .engines.completion_engine import (
    Completion,
    Done,
    Progress,
    from_completion,
    to_completion,
)
from .engines.streak_engine import StreakEngine
from .type_defs import HabitData
from .utils.dt_utils import dt_parse_date, dt_today_local, is_date_key


# ==============================================================================
# EXCEPTIONS
# ==============================================================================


class HabitValidationError(Exception):
    """Validation error with field-specific information.

    Attributes:
        field: The DATA_* constant identifying the field that failed
        translation_key: The TRANS_KEY_* constant for the error message
        placeholders: Optional dict for message placeholders

    Example:
        raise HabitValidationError(
            field=const.DATA_HABIT_TARGET,
            translation_key=const.TRANS_KEY_INVALID_HABIT_TARGET,
            placeholders={"value": str(target)},
        )
    """

    def __init__(
        self,
        field: str,
        translation_key: str,
        placeholders: dict[str, str] | None = None,
    ) -> None:
        """Initialize HabitValidationError.

        Args:
            field: The DATA_* constant for the field that failed validation
            translation_key: The TRANS_KEY_* constant for error message
            placeholders: Optional dict for translation placeholders
        """
        self.field = field
        self.translation_key = translation_key
        self.placeholders = placeholders or {}
        super().__init__(translation_key)


# ==============================================================================
# HELPER FUNCTIONS FOR FIELD NORMALIZATION
# ==============================================================================


def _coerce_target(value: Any) -> int | None:
    """Return value as a positive int, or None if it is not one."""
    if isinstance(value, bool):
        return None
    try:
        target = int(value)
    except (TypeError, ValueError):
        return None
    if target != value and not isinstance(value, str):
        # Reject 2.5 but accept 2.0
        if not (isinstance(value, float) and value.is_integer()):
            return None
    return target if target >= 1 else None


def _normalize_completions(
    raw: Any, seconds_to_minutes: bool = False
) -> dict[str, Completion]:
    """Convert a stored completion mapping into tagged values.

    Keys that are not date keys and values of unknown shape are dropped.
    With seconds_to_minutes, Progress amounts are rescaled from elapsed
    seconds to minutes.
    """
    if not isinstance(raw, dict):
        return {}
    completions: dict[str, Completion] = {}
    for key, value in raw.items():
        if not is_date_key(key):
            continue
        completion = to_completion(value)
        if seconds_to_minutes and isinstance(completion, Progress):
            completion = Progress(completion.amount / const.SECONDS_PER_MINUTE)
        if completion is not None:
            completions[key] = completion
    return completions


# ==============================================================================
# VALIDATION
# ==============================================================================


def validate_habit_data(
    data: dict[str, Any],
    existing_habits: dict[str, HabitData] | None = None,
) -> dict[str, str]:
    """Validate habit business rules.

    Args:
        data: Habit data dict with DATA_* keys
        existing_habits: All existing habits for duplicate checking (optional)

    Returns:
        Dict of errors: {field: translation_key}. Empty dict means valid.

    Validation Rules:
        1. Name not empty
        2. Name not duplicate (case-insensitive)
        3. Type and frequency are known values
        4. Counter/timer habits have a positive integer target
    """
    errors: dict[str, str] = {}

    # === 1. Name ===
    name = data.get(const.DATA_HABIT_NAME, "")
    name = name.strip() if isinstance(name, str) else ""
    if not name:
        errors[const.DATA_HABIT_NAME] = const.TRANS_KEY_INVALID_HABIT_NAME
        return errors

    # === 2. Duplicate name ===
    if existing_habits:
        for habit in existing_habits.values():
            if habit[const.DATA_HABIT_NAME].casefold() == name.casefold():
                errors[const.DATA_HABIT_NAME] = const.TRANS_KEY_DUPLICATE_HABIT
                return errors

    # === 3. Type / frequency ===
    habit_type = data.get(const.DATA_HABIT_TYPE, const.HABIT_TYPE_BINARY)
    if habit_type not in const.HABIT_TYPES:
        errors[const.DATA_HABIT_TYPE] = const.TRANS_KEY_INVALID_HABIT_TYPE
        return errors

    frequency = data.get(const.DATA_HABIT_FREQUENCY, const.FREQUENCY_DAILY)
    if frequency not in const.FREQUENCIES:
        errors[const.DATA_HABIT_FREQUENCY] = const.TRANS_KEY_INVALID_HABIT_FREQUENCY
        return errors

    # === 4. Target ===
    if habit_type in const.NUMERIC_HABIT_TYPES:
        if _coerce_target(data.get(const.DATA_HABIT_TARGET)) is None:
            errors[const.DATA_HABIT_TARGET] = const.TRANS_KEY_INVALID_HABIT_TARGET

    return errors


# ==============================================================================
# BUILD
# ==============================================================================


def build_habit(
    user_input: dict[str, Any],
    existing_habits: dict[str, HabitData] | None = None,
    today: date | None = None,
) -> HabitData:
    """Build a new habit record from user input.

    Completions start empty and the best streak at zero; both only change
    through apply_completion().

    Args:
        user_input: Data with DATA_* keys (may have missing optional fields)
        existing_habits: Current habits, for the duplicate-name check
        today: Civil today, used as created_at

    Returns:
        Complete HabitData ready for storage

    Raises:
        HabitValidationError: On the first failing validation rule

    Example:
        habit = build_habit({DATA_HABIT_NAME: "Read", DATA_HABIT_TYPE: "binary"})
    """
    errors = validate_habit_data(user_input, existing_habits)
    if errors:
        field, translation_key = next(iter(errors.items()))
        raise HabitValidationError(
            field=field,
            translation_key=translation_key,
            placeholders={"value": str(user_input.get(field))},
        )

    habit_type = user_input.get(const.DATA_HABIT_TYPE, const.HABIT_TYPE_BINARY)
    target = const.DEFAULT_TARGET
    if habit_type in const.NUMERIC_HABIT_TYPES:
        target = _coerce_target(user_input[const.DATA_HABIT_TARGET]) or const.DEFAULT_TARGET

    return HabitData(
        id=str(uuid.uuid4()),
        name=user_input[const.DATA_HABIT_NAME].strip(),
        type=habit_type,
        frequency=user_input.get(const.DATA_HABIT_FREQUENCY, const.FREQUENCY_DAILY),
        target=target,
        created_at=(today or dt_today_local()).isoformat(),
        completions={},
        best_streak=const.DEFAULT_BEST_STREAK,
    )


# ==============================================================================
# STORAGE BOUNDARY
# ==============================================================================


def normalize_habit(raw: Any, today: date | None = None) -> HabitData | None:
    """Sanitize one stored (possibly legacy) record into a canonical HabitData.

    Defaults: created_at → today, best_streak → 0, target → 1. Legacy
    camelCase keys and the "yes-no" type label are accepted. Records without
    created_at are legacy; their timer progress is elapsed seconds and is
    converted to minutes here, once.

    Returns:
        The normalized record, or None when the record has no usable name.
    """
    if not isinstance(raw, dict):
        const.LOGGER.warning("WARNING: Dropping non-object habit record: %r", raw)
        return None

    name = raw.get(const.DATA_HABIT_NAME)
    if not isinstance(name, str) or not name.strip():
        const.LOGGER.warning(
            "WARNING: Dropping habit record without a name (id=%s)",
            raw.get(const.DATA_HABIT_ID),
        )
        return None

    habit_type = raw.get(const.DATA_HABIT_TYPE)
    if habit_type == const.LEGACY_HABIT_TYPE_YES_NO or habit_type not in const.HABIT_TYPES:
        habit_type = const.HABIT_TYPE_BINARY

    frequency = raw.get(const.DATA_HABIT_FREQUENCY)
    if frequency not in const.FREQUENCIES:
        frequency = const.FREQUENCY_DAILY

    target = const.DEFAULT_TARGET
    if habit_type in const.NUMERIC_HABIT_TYPES:
        target = _coerce_target(raw.get(const.DATA_HABIT_TARGET)) or const.DEFAULT_TARGET

    created_raw = raw.get(const.DATA_HABIT_CREATED_AT, raw.get(const.LEGACY_HABIT_CREATED_AT))
    created = dt_parse_date(created_raw) or today or dt_today_local()

    best_raw = raw.get(const.DATA_HABIT_BEST_STREAK, raw.get(const.LEGACY_HABIT_BEST_STREAK))
    best_streak = (
        best_raw
        if isinstance(best_raw, int) and not isinstance(best_raw, bool) and best_raw > 0
        else const.DEFAULT_BEST_STREAK
    )

    habit_id = raw.get(const.DATA_HABIT_ID)
    if habit_id is None or habit_id == "":
        habit_id = str(uuid.uuid4())

    # Stored records always carry created_at; browser records never do
    legacy = const.DATA_HABIT_CREATED_AT not in raw
    seconds_to_minutes = legacy and habit_type == const.HABIT_TYPE_TIMER
    if seconds_to_minutes:
        const.LOGGER.info(
            "INFO: Converting legacy timer progress from seconds to minutes (id=%s)",
            habit_id,
        )

    return HabitData(
        id=str(habit_id),
        name=name.strip(),
        type=habit_type,
        frequency=frequency,
        target=target,
        created_at=created.isoformat(),
        completions=_normalize_completions(
            raw.get(const.DATA_HABIT_COMPLETIONS), seconds_to_minutes
        ),
        best_streak=best_streak,
    )


def serialize_habit(habit: HabitData) -> dict[str, Any]:
    """Convert a HabitData into a JSON-serializable dict for storage."""
    return {
        const.DATA_HABIT_ID: habit["id"],
        const.DATA_HABIT_NAME: habit["name"],
        const.DATA_HABIT_TYPE: habit["type"],
        const.DATA_HABIT_FREQUENCY: habit["frequency"],
        const.DATA_HABIT_TARGET: habit["target"],
        const.DATA_HABIT_CREATED_AT: habit["created_at"],
        const.DATA_HABIT_COMPLETIONS: {
            key: from_completion(value)
            for key, value in sorted(habit["completions"].items())
        },
        const.DATA_HABIT_BEST_STREAK: habit["best_streak"],
    }


# ==============================================================================
# COMPLETION WRITES
# ==============================================================================


def coerce_completion_value(habit: HabitData, value: Any) -> Completion:
    """Validate a logged value against the habit type and tag it.

    Binary habits take a boolean (None means "done"); counter and timer
    habits take non-negative numeric progress (timer progress in minutes).

    Raises:
        HabitValidationError: If the value does not fit the habit type.
    """
    if habit["type"] == const.HABIT_TYPE_BINARY:
        if value is None:
            return Done(True)
        if isinstance(value, bool):
            return Done(value)
    elif (
        isinstance(value, (int, float))
        and not isinstance(value, bool)
        and math.isfinite(value)
        and value >= 0
    ):
        return Progress(float(value))

    raise HabitValidationError(
        field=const.DATA_HABIT_COMPLETIONS,
        translation_key=const.TRANS_KEY_INVALID_COMPLETION_VALUE,
        placeholders={"value": str(value), "type": habit["type"]},
    )


def apply_completion(
    habit: HabitData,
    value: Completion,
    day_key: str | None = None,
    today: date | None = None,
) -> HabitData:
    """Return a new record with one date key set and the best streak updated.

    The input record is not modified. For daily habits the best streak
    becomes max(best_streak, current streak after the write); weekly habits
    have no streak and keep their stored value.
    """
    today = today or dt_today_local()
    completions = dict(habit["completions"])
    completions[day_key or today.isoformat()] = value

    best_streak = habit["best_streak"]
    if habit["frequency"] == const.FREQUENCY_DAILY:
        best_streak = StreakEngine.update_best_streak(
            best_streak,
            StreakEngine.current_streak(completions, habit["target"], today),
        )

    updated = HabitData(**habit)
    updated["completions"] = completions
    updated["best_streak"] = best_streak
    return updated
