"""Tests for data_builders - validation, building and normalization.

Test Categories:
- validate_habit_data error dicts
- build_habit defaults and HabitValidationError
- normalize_habit legacy handling at the storage boundary
- apply_completion / coerce_completion_value
"""

from __future__ import annotations

from datetime import date
from typing import Any

import pytest

from custom_components.habit_tracker import const, data_builders as db
from custom_components.habit_tracker.engines.completion_engine import (
    Done,
    Progress,
    is_completed,
)
from tests.helpers import TODAY, key_days_ago, make_habit

# =============================================================================
# Test: validation
# =============================================================================


class TestValidateHabitData:
    """Business rules return {field: translation_key}."""

    def test_valid_binary(self) -> None:
        """Defaults make a name-only habit valid."""
        assert db.validate_habit_data({const.DATA_HABIT_NAME: "Read"}) == {}

    @pytest.mark.parametrize("name", ["", "   ", None])
    def test_blank_name(self, name: Any) -> None:
        """Missing or blank names are rejected."""
        errors = db.validate_habit_data({const.DATA_HABIT_NAME: name})
        assert errors == {const.DATA_HABIT_NAME: const.TRANS_KEY_INVALID_HABIT_NAME}

    def test_duplicate_name_case_insensitive(self) -> None:
        """Names must be unique ignoring case."""
        existing = {"id-read": make_habit("Read")}
        errors = db.validate_habit_data({const.DATA_HABIT_NAME: " read "}, existing)
        assert errors == {const.DATA_HABIT_NAME: const.TRANS_KEY_DUPLICATE_HABIT}

    def test_unknown_type_and_frequency(self) -> None:
        """Only known enum values are accepted."""
        assert db.validate_habit_data(
            {const.DATA_HABIT_NAME: "Read", const.DATA_HABIT_TYPE: "yes-no"}
        ) == {const.DATA_HABIT_TYPE: const.TRANS_KEY_INVALID_HABIT_TYPE}
        assert db.validate_habit_data(
            {const.DATA_HABIT_NAME: "Read", const.DATA_HABIT_FREQUENCY: "monthly"}
        ) == {const.DATA_HABIT_FREQUENCY: const.TRANS_KEY_INVALID_HABIT_FREQUENCY}

    @pytest.mark.parametrize("target", [None, 0, -1, 2.5, "abc", True])
    def test_numeric_habit_needs_positive_target(self, target: Any) -> None:
        """Counter and timer habits need a positive integer target."""
        data = {
            const.DATA_HABIT_NAME: "Pushups",
            const.DATA_HABIT_TYPE: const.HABIT_TYPE_COUNTER,
            const.DATA_HABIT_TARGET: target,
        }
        assert db.validate_habit_data(data) == {
            const.DATA_HABIT_TARGET: const.TRANS_KEY_INVALID_HABIT_TARGET
        }


# =============================================================================
# Test: build
# =============================================================================


class TestBuildHabit:
    """New habit records."""

    def test_defaults(self) -> None:
        """Empty history, zero best streak, created today."""
        habit = db.build_habit({const.DATA_HABIT_NAME: "  Read  "}, today=TODAY)
        assert habit["name"] == "Read"
        assert habit["type"] == const.HABIT_TYPE_BINARY
        assert habit["frequency"] == const.FREQUENCY_DAILY
        assert habit["target"] == 1
        assert habit["created_at"] == TODAY.isoformat()
        assert habit["completions"] == {}
        assert habit["best_streak"] == 0
        assert habit["id"]

    def test_timer_keeps_target(self) -> None:
        """Numeric habits keep their target (timer targets are minutes)."""
        habit = db.build_habit(
            {
                const.DATA_HABIT_NAME: "Meditate",
                const.DATA_HABIT_TYPE: const.HABIT_TYPE_TIMER,
                const.DATA_HABIT_FREQUENCY: const.FREQUENCY_WEEKLY,
                const.DATA_HABIT_TARGET: "30",
            },
            today=TODAY,
        )
        assert habit["target"] == 30
        assert habit["frequency"] == const.FREQUENCY_WEEKLY

    def test_binary_target_is_one(self) -> None:
        """Binary habits ignore a supplied target."""
        habit = db.build_habit(
            {const.DATA_HABIT_NAME: "Read", const.DATA_HABIT_TARGET: 5}, today=TODAY
        )
        assert habit["target"] == 1

    def test_unique_ids(self) -> None:
        """Every build generates a new id."""
        first = db.build_habit({const.DATA_HABIT_NAME: "A"}, today=TODAY)
        second = db.build_habit({const.DATA_HABIT_NAME: "B"}, today=TODAY)
        assert first["id"] != second["id"]

    def test_raises_validation_error(self) -> None:
        """The first failing rule is raised with field information."""
        with pytest.raises(db.HabitValidationError) as exc_info:
            db.build_habit(
                {
                    const.DATA_HABIT_NAME: "Pushups",
                    const.DATA_HABIT_TYPE: const.HABIT_TYPE_COUNTER,
                },
                today=TODAY,
            )
        assert exc_info.value.field == const.DATA_HABIT_TARGET
        assert exc_info.value.translation_key == const.TRANS_KEY_INVALID_HABIT_TARGET
        assert exc_info.value.placeholders == {"value": "None"}


# =============================================================================
# Test: normalization
# =============================================================================


class TestNormalizeHabit:
    """Legacy records become canonical records exactly once."""

    def test_legacy_record(self) -> None:
        """camelCase keys and the yes-no type are accepted."""
        raw = {
            "id": 1712345678901,
            "name": "Read",
            "type": "yes-no",
            "frequency": "daily",
            "createdAt": "2026-01-01",
            "bestStreak": 4,
            "completions": {"2026-01-02": True, "2026-01-03": False},
        }
        habit = db.normalize_habit(raw, TODAY)
        assert habit is not None
        assert habit["id"] == "1712345678901"
        assert habit["type"] == const.HABIT_TYPE_BINARY
        assert habit["created_at"] == "2026-01-01"
        assert habit["best_streak"] == 4
        assert habit["target"] == 1
        assert habit["completions"] == {
            "2026-01-02": Done(True),
            "2026-01-03": Done(False),
        }

    def test_missing_fields_defaulted(self) -> None:
        """createdAt → today, bestStreak → 0, target → 1, id generated."""
        habit = db.normalize_habit(
            {"name": "Pushups", "type": "counter", "frequency": "daily"}, TODAY
        )
        assert habit is not None
        assert habit["created_at"] == TODAY.isoformat()
        assert habit["best_streak"] == 0
        assert habit["target"] == 1
        assert habit["completions"] == {}
        assert habit["id"]

    def test_invalid_values_defaulted(self) -> None:
        """Unknown type/frequency and bad numbers fall back to defaults."""
        habit = db.normalize_habit(
            {
                "id": "x",
                "name": "Odd",
                "type": "slider",
                "frequency": "hourly",
                "created_at": "soon",
                "best_streak": -3,
                "target": 0,
            },
            TODAY,
        )
        assert habit is not None
        assert habit["type"] == const.HABIT_TYPE_BINARY
        assert habit["frequency"] == const.FREQUENCY_DAILY
        assert habit["created_at"] == TODAY.isoformat()
        assert habit["best_streak"] == 0

    def test_bad_completion_entries_dropped(self) -> None:
        """Non-date keys, week dates and unknown value shapes are dropped."""
        habit = db.normalize_habit(
            {
                "name": "Run",
                "type": "timer",
                "target": 30,
                "created_at": "2026-01-01",
                "completions": {
                    "2026-01-02": 45,
                    "tomorrow": True,
                    "2026-W01-5": True,
                    "2026-01-03": "x",
                    "2026-01-04": float("inf"),
                },
            },
            TODAY,
        )
        assert habit is not None
        assert habit["completions"] == {"2026-01-02": Progress(45.0)}
        assert habit["target"] == 30

    def test_legacy_timer_seconds_converted(self) -> None:
        """Legacy timer progress is elapsed seconds and becomes minutes."""
        habit = db.normalize_habit(
            {
                "id": 1712345678903,
                "name": "Meditate",
                "type": "timer",
                "target": 30,
                "createdAt": "2026-01-01",
                "completions": {"2026-01-13": 1800, "2026-01-14": 45},
            },
            TODAY,
        )
        assert habit is not None
        assert habit["completions"] == {
            "2026-01-13": Progress(30.0),
            "2026-01-14": Progress(0.75),
        }
        assert is_completed(habit["completions"]["2026-01-13"], habit["target"])
        assert not is_completed(habit["completions"]["2026-01-14"], habit["target"])

    def test_legacy_counter_not_rescaled(self) -> None:
        """Only timer progress is rescaled."""
        habit = db.normalize_habit(
            {
                "name": "Pushups",
                "type": "counter",
                "target": 20,
                "createdAt": "2026-01-01",
                "completions": {"2026-01-13": 25},
            },
            TODAY,
        )
        assert habit is not None
        assert habit["completions"] == {"2026-01-13": Progress(25.0)}

    @pytest.mark.parametrize("raw", [{"name": ""}, {"id": "a"}, "Read", None, 42])
    def test_unusable_records_dropped(self, raw: Any) -> None:
        """Records without a usable name are dropped."""
        assert db.normalize_habit(raw, TODAY) is None

    def test_serialize_round_trip(self) -> None:
        """Serialized records normalize back to the same record."""
        habit = make_habit(
            "Run",
            habit_type=const.HABIT_TYPE_TIMER,
            target=30,
            created_at=date(2026, 1, 1),
            completions={"2026-01-03": 12.5, "2026-01-02": 45},
            best_streak=2,
        )
        raw = db.serialize_habit(habit)
        assert raw["completions"] == {"2026-01-02": 45, "2026-01-03": 12.5}
        assert db.normalize_habit(raw, TODAY) == habit


# =============================================================================
# Test: completion writes
# =============================================================================


class TestApplyCompletion:
    """Writes return new records and keep the best streak current."""

    def test_coerce_binary(self) -> None:
        """Binary habits take booleans; None means done."""
        habit = make_habit()
        assert db.coerce_completion_value(habit, None) == Done(True)
        assert db.coerce_completion_value(habit, False) == Done(False)
        with pytest.raises(db.HabitValidationError):
            db.coerce_completion_value(habit, 3)

    def test_coerce_numeric(self) -> None:
        """Counter and timer habits take finite non-negative numbers."""
        habit = make_habit(habit_type=const.HABIT_TYPE_COUNTER, target=10)
        assert db.coerce_completion_value(habit, 7) == Progress(7.0)
        for bad in (True, -1, None, "7", float("inf"), float("nan")):
            with pytest.raises(db.HabitValidationError) as exc_info:
                db.coerce_completion_value(habit, bad)
            assert (
                exc_info.value.translation_key
                == const.TRANS_KEY_INVALID_COMPLETION_VALUE
            )

    def test_updates_best_streak(self) -> None:
        """Completing today extends the streak and raises the best streak."""
        habit = make_habit(
            completions={key_days_ago(1): True, key_days_ago(2): True}, best_streak=2
        )
        updated = db.apply_completion(habit, Done(True), today=TODAY)
        assert updated["completions"][TODAY.isoformat()] == Done(True)
        assert updated["best_streak"] == 3
        # Input left untouched
        assert TODAY.isoformat() not in habit["completions"]
        assert habit["best_streak"] == 2

    def test_best_streak_never_decreases(self) -> None:
        """Un-completing today lowers the current streak, not the best."""
        habit = make_habit(completions={key_days_ago(0): True}, best_streak=9)
        updated = db.apply_completion(habit, Done(False), TODAY.isoformat(), TODAY)
        assert updated["best_streak"] == 9

    def test_partial_progress_keeps_best(self) -> None:
        """Progress below target does not count toward the streak."""
        habit = make_habit(habit_type=const.HABIT_TYPE_COUNTER, target=10)
        updated = db.apply_completion(habit, Progress(7), today=TODAY)
        assert updated["best_streak"] == 0
        updated = db.apply_completion(updated, Progress(10), today=TODAY)
        assert updated["best_streak"] == 1

    def test_weekly_best_streak_unchanged(self) -> None:
        """Weekly habits have no streak to record."""
        habit = make_habit(frequency=const.FREQUENCY_WEEKLY)
        updated = db.apply_completion(habit, Done(True), today=TODAY)
        assert updated["best_streak"] == 0

    def test_past_day(self) -> None:
        """Back-filling yesterday can join a streak that ends today."""
        habit = make_habit(completions={key_days_ago(0): True, key_days_ago(2): True})
        updated = db.apply_completion(habit, Done(True), key_days_ago(1), TODAY)
        assert updated["best_streak"] == 3
