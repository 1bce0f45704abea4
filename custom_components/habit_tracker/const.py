# File: const.py
"""Constants for the Habit Tracker integration.

This file centralizes configuration keys, defaults, storage keys, service names
and the tunable thresholds used by the analytics engines so they stay
consistent across the integration.
"""

import logging
from typing import Final

# ------------------------------------------------------------------------------------------------
# General / Integration Information
# ------------------------------------------------------------------------------------------------
# Integration Domain
DOMAIN = "habit_tracker"

# Logger
LOGGER = logging.getLogger(__package__)

# Storage and Versioning
STORAGE_MANAGER = "storage_manager"
HABIT_MANAGER = "habit_manager"
STORAGE_KEY = "habit_tracker_data"
STORAGE_VERSION = 1
SCHEMA_VERSION = 1

# Dispatcher signal sent after any habit write
SIGNAL_HABITS_UPDATED = f"{DOMAIN}_habits_updated"

# ------------------------------------------------------------------------------------------------
# Configuration Keys
# ------------------------------------------------------------------------------------------------
CONF_TIME_ZONE = "time_zone"

# Reference civil time zone for day boundaries (no DST).
DEFAULT_REFERENCE_TIME_ZONE = "Asia/Kolkata"

# ------------------------------------------------------------------------------------------------
# Storage Data Keys
# ------------------------------------------------------------------------------------------------
DATA_META = "meta"
DATA_META_SCHEMA_VERSION = "schema_version"
DATA_HABITS = "habits"

DATA_HABIT_ID = "id"
DATA_HABIT_NAME = "name"
DATA_HABIT_TYPE = "type"
DATA_HABIT_FREQUENCY = "frequency"
DATA_HABIT_TARGET = "target"
DATA_HABIT_CREATED_AT = "created_at"
DATA_HABIT_COMPLETIONS = "completions"
DATA_HABIT_BEST_STREAK = "best_streak"

# Legacy (browser storage) record keys, accepted only during normalization
LEGACY_HABIT_CREATED_AT = "createdAt"
LEGACY_HABIT_BEST_STREAK = "bestStreak"
LEGACY_HABIT_TYPE_YES_NO = "yes-no"
# Legacy timer completions hold elapsed seconds; timer targets are minutes
SECONDS_PER_MINUTE = 60

# ------------------------------------------------------------------------------------------------
# Habit Types / Frequencies
# ------------------------------------------------------------------------------------------------
HABIT_TYPE_BINARY = "binary"
HABIT_TYPE_COUNTER = "counter"
HABIT_TYPE_TIMER = "timer"
HABIT_TYPES = [HABIT_TYPE_BINARY, HABIT_TYPE_COUNTER, HABIT_TYPE_TIMER]
NUMERIC_HABIT_TYPES = [HABIT_TYPE_COUNTER, HABIT_TYPE_TIMER]

HABIT_TYPE_LABELS = {
    HABIT_TYPE_BINARY: "Done / Not Done",
    HABIT_TYPE_COUNTER: "Count-based",
    HABIT_TYPE_TIMER: "Time-based",
}

FREQUENCY_DAILY = "daily"
FREQUENCY_WEEKLY = "weekly"
FREQUENCIES = [FREQUENCY_DAILY, FREQUENCY_WEEKLY]

# Field defaults (also used when normalizing legacy records)
DEFAULT_TARGET = 1
DEFAULT_BEST_STREAK = 0

# ------------------------------------------------------------------------------------------------
# Completion States
# ------------------------------------------------------------------------------------------------
COMPLETION_STATE_COMPLETED = "completed"
COMPLETION_STATE_IN_PROGRESS = "in_progress"
COMPLETION_STATE_NOT_COMPLETED = "not_completed"
COMPLETION_STATE_NOT_LOGGED = "not_logged"

# ------------------------------------------------------------------------------------------------
# Calendar
# ------------------------------------------------------------------------------------------------
# Weekly habits are sampled on this weekday (date.weekday(): Monday=0 .. Sunday=6)
ANCHOR_WEEKDAY = 6

MONTH_ABBREVIATIONS = [
    "Jan",
    "Feb",
    "Mar",
    "Apr",
    "May",
    "Jun",
    "Jul",
    "Aug",
    "Sep",
    "Oct",
    "Nov",
    "Dec",
]
MONTH_NAMES = [
    "January",
    "February",
    "March",
    "April",
    "May",
    "June",
    "July",
    "August",
    "September",
    "October",
    "November",
    "December",
]

# ------------------------------------------------------------------------------------------------
# Trend Aggregation
# ------------------------------------------------------------------------------------------------
TREND_MODE_WEEKLY = "weekly"
TREND_MODE_MONTHLY = "monthly"
TREND_MODES = [TREND_MODE_WEEKLY, TREND_MODE_MONTHLY]

TREND_WEEKLY_WINDOWS: Final = 8
TREND_MONTHLY_WINDOWS: Final = 6
TREND_WEEK_LABEL_PREFIX = "W"

TREND_UP = "up"
TREND_DOWN = "down"
TREND_STABLE = "stable"
TREND_DEAD_BAND: Final = 2

HEATMAP_DAYS: Final = 90

# ------------------------------------------------------------------------------------------------
# Discipline Score
# ------------------------------------------------------------------------------------------------
PERCENT_MIN = 0
PERCENT_MAX = 100

# Yearly variant: completion 40%, streak 30%, recovery 30%
YEARLY_WEIGHT_COMPLETION: Final = 0.40
YEARLY_WEIGHT_STREAK: Final = 0.30
YEARLY_WEIGHT_RECOVERY: Final = 0.30

# Overview variant: completion 40%, streak 30%, consistency 20%, recovery 10%
OVERVIEW_WEIGHT_COMPLETION: Final = 0.40
OVERVIEW_WEIGHT_STREAK: Final = 0.30
OVERVIEW_WEIGHT_CONSISTENCY: Final = 0.20
OVERVIEW_WEIGHT_RECOVERY: Final = 0.10

# Streak horizons (habit formation thresholds)
YEARLY_STREAK_HORIZON_DAYS: Final = 30
OVERVIEW_STREAK_HORIZON_DAYS: Final = 21

# Recovery heuristic
RECOVERY_ELIGIBLE_BELOW: Final = 50
RECOVERY_SLUMP_BELOW: Final = 40
RECOVERY_NO_SLUMP_MIN_SHOWING_UP: Final = 60
RECOVERY_SCORE_NO_SLUMP: Final = 80
RECOVERY_SCORE_NEUTRAL: Final = 50
RECOVERY_MIN_WINDOWS: Final = 2

# Discipline label bands (score >= threshold)
DISCIPLINE_LABEL_ELITE = "elite"
DISCIPLINE_LABEL_SOLID = "solid"
DISCIPLINE_LABEL_MID = "mid"
DISCIPLINE_LABEL_STRUGGLING = "struggling"
DISCIPLINE_LABEL_RESET = "reset"
DISCIPLINE_LABEL_BANDS: Final = [
    (80, DISCIPLINE_LABEL_ELITE),
    (60, DISCIPLINE_LABEL_SOLID),
    (40, DISCIPLINE_LABEL_MID),
    (20, DISCIPLINE_LABEL_STRUGGLING),
]

# Year review narrative bands on average showing-up percentage
SHOWING_UP_BAND_STRONG = "strong"
SHOWING_UP_BAND_GROWING = "growing"
SHOWING_UP_BAND_BUILDING = "building"
SHOWING_UP_BAND_ROUGH = "rough"
SHOWING_UP_BANDS: Final = [
    (70, SHOWING_UP_BAND_STRONG),
    (50, SHOWING_UP_BAND_GROWING),
    (30, SHOWING_UP_BAND_BUILDING),
]

# ------------------------------------------------------------------------------------------------
# Services
# ------------------------------------------------------------------------------------------------
SERVICE_ADD_HABIT = "add_habit"
SERVICE_LOG_COMPLETION = "log_completion"
SERVICE_DELETE_HABIT = "delete_habit"
SERVICE_GET_HABIT_STATS = "get_habit_stats"
SERVICE_GET_TREND = "get_trend"
SERVICE_GET_MONTHLY_SUMMARY = "get_monthly_summary"
SERVICE_GET_YEAR_REVIEW = "get_year_review"

FIELD_HABIT = "habit"
FIELD_NAME = "name"
FIELD_TYPE = "type"
FIELD_FREQUENCY = "frequency"
FIELD_TARGET = "target"
FIELD_VALUE = "value"
FIELD_DATE = "date"
FIELD_MODE = "mode"
FIELD_YEAR = "year"

# ------------------------------------------------------------------------------------------------
# Validation / Error Messages
# ------------------------------------------------------------------------------------------------
TRANS_KEY_INVALID_HABIT_NAME = "invalid_habit_name"
TRANS_KEY_DUPLICATE_HABIT = "duplicate_habit"
TRANS_KEY_INVALID_HABIT_TYPE = "invalid_habit_type"
TRANS_KEY_INVALID_HABIT_FREQUENCY = "invalid_habit_frequency"
TRANS_KEY_INVALID_HABIT_TARGET = "invalid_habit_target"
TRANS_KEY_INVALID_COMPLETION_VALUE = "invalid_completion_value"

ERROR_HABIT_NOT_FOUND_FMT = "Habit '{}' not found"
ERROR_INVALID_HABIT_FMT = "Invalid habit data ({}): {}"
ERROR_INVALID_DATE_FMT = "Invalid date '{}', expected YYYY-MM-DD"
MSG_NOT_SET_UP = "Habit Tracker is not set up"
