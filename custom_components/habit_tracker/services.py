# File: services.py
"""Defines custom services for the Habit Tracker integration.

Write services (add / log / delete) go through the HabitManager; the
statistics services are response-only and return the report structures
built by helpers/report_helpers.py.
"""

from __future__ import annotations

import math
from typing import Any

import voluptuous as vol
from homeassistant.core import (
    HomeAssistant,
    ServiceCall,
    ServiceResponse,
    SupportsResponse,
)
from homeassistant.exceptions import HomeAssistantError
from homeassistant.helpers import config_validation as cv

from . import const
from .data_builders import HabitValidationError
from .engines.trend_engine import TrendEngine
from .helpers import report_helpers as rh
from .managers.habit_manager import HabitManager, HabitNotFoundError
from .utils.dt_utils import dt_today_local


def _finite(value: float) -> float:
    """Reject inf and nan, which vol.Range lets through."""
    if not math.isfinite(value):
        raise vol.Invalid(f"value must be a finite number, got {value}")
    return value


# --- Service Schemas ---
ADD_HABIT_SCHEMA = vol.Schema(
    {
        vol.Required(const.FIELD_NAME): cv.string,
        vol.Optional(const.FIELD_TYPE, default=const.HABIT_TYPE_BINARY): vol.In(
            const.HABIT_TYPES
        ),
        vol.Optional(const.FIELD_FREQUENCY, default=const.FREQUENCY_DAILY): vol.In(
            const.FREQUENCIES
        ),
        vol.Optional(const.FIELD_TARGET): vol.All(vol.Coerce(int), vol.Range(min=1)),
    }
)

LOG_COMPLETION_SCHEMA = vol.Schema(
    {
        vol.Required(const.FIELD_HABIT): cv.string,
        vol.Optional(const.FIELD_VALUE): vol.Any(
            bool, vol.All(vol.Coerce(float), vol.Range(min=0), _finite)
        ),
        vol.Optional(const.FIELD_DATE): cv.date,
    }
)

HABIT_REFERENCE_SCHEMA = vol.Schema(
    {
        vol.Required(const.FIELD_HABIT): cv.string,
    }
)

GET_HABIT_STATS_SCHEMA = vol.Schema({})

GET_TREND_SCHEMA = vol.Schema(
    {
        vol.Optional(const.FIELD_MODE, default=const.TREND_MODE_WEEKLY): vol.In(
            const.TREND_MODES
        ),
    }
)

GET_MONTHLY_SUMMARY_SCHEMA = vol.Schema({})

GET_YEAR_REVIEW_SCHEMA = vol.Schema(
    {
        vol.Optional(const.FIELD_YEAR): vol.All(
            vol.Coerce(int), vol.Range(min=1970, max=9999)
        ),
    }
)

def _get_manager(hass: HomeAssistant) -> HabitManager:
    """Return the loaded HabitManager or raise if the integration is not set up."""
    domain_data = hass.data.get(const.DOMAIN)
    if not domain_data or const.HABIT_MANAGER not in domain_data:
        raise HomeAssistantError(const.MSG_NOT_SET_UP)
    return domain_data[const.HABIT_MANAGER]


def _resolve_habit_id(manager: HabitManager, reference: str) -> str:
    try:
        return manager.find_habit_id(reference)
    except HabitNotFoundError as err:
        const.LOGGER.warning("WARNING: %s", err)
        raise HomeAssistantError(str(err)) from err


def _validation_error(err: HabitValidationError) -> HomeAssistantError:
    const.LOGGER.warning(
        "WARNING: Rejected habit data: field=%s error=%s placeholders=%s",
        err.field,
        err.translation_key,
        err.placeholders,
    )
    return HomeAssistantError(
        const.ERROR_INVALID_HABIT_FMT.format(err.field, err.translation_key)
    )


def async_setup_services(hass: HomeAssistant) -> None:
    """Register Habit Tracker services."""

    async def handle_add_habit(call: ServiceCall) -> ServiceResponse:
        """Handle creating a habit."""
        manager = _get_manager(hass)
        user_input: dict[str, Any] = {
            const.DATA_HABIT_NAME: call.data[const.FIELD_NAME],
            const.DATA_HABIT_TYPE: call.data[const.FIELD_TYPE],
            const.DATA_HABIT_FREQUENCY: call.data[const.FIELD_FREQUENCY],
        }
        if const.FIELD_TARGET in call.data:
            user_input[const.DATA_HABIT_TARGET] = call.data[const.FIELD_TARGET]

        try:
            habit = await manager.async_create_habit(user_input, dt_today_local())
        except HabitValidationError as err:
            raise _validation_error(err) from err
        return {const.DATA_HABIT_ID: habit["id"]}

    async def handle_log_completion(call: ServiceCall) -> None:
        """Handle logging a completion value for one day."""
        manager = _get_manager(hass)
        habit_id = _resolve_habit_id(manager, call.data[const.FIELD_HABIT])
        day = call.data.get(const.FIELD_DATE)
        today = dt_today_local()

        try:
            await manager.async_log_completion(
                habit_id,
                call.data.get(const.FIELD_VALUE),
                day.isoformat() if day else None,
                today,
            )
        except HabitValidationError as err:
            raise _validation_error(err) from err
        except ValueError as err:
            raise HomeAssistantError(str(err)) from err

    async def handle_delete_habit(call: ServiceCall) -> None:
        """Handle deleting a habit with its history."""
        manager = _get_manager(hass)
        habit_id = _resolve_habit_id(manager, call.data[const.FIELD_HABIT])
        await manager.async_delete_habit(habit_id)

    async def handle_get_habit_stats(call: ServiceCall) -> ServiceResponse:
        """Return per-habit stats, the lifetime overview and the heatmap."""
        habits = _get_manager(hass).habits
        today = dt_today_local()
        return {
            "habits": rh.build_habit_stats(habits, today),
            "overview": rh.build_overview(habits, today),
            "heatmap": TrendEngine.activity_heatmap(habits, today),
        }

    async def handle_get_trend(call: ServiceCall) -> ServiceResponse:
        """Return the productivity trend for the requested mode."""
        habits = _get_manager(hass).habits
        mode = call.data[const.FIELD_MODE]
        points = TrendEngine.build_trend(habits, mode, dt_today_local())
        return {
            "mode": mode,
            "points": points,
            "insight": TrendEngine.trend_insight(points),
        }

    async def handle_get_monthly_summary(call: ServiceCall) -> ServiceResponse:
        """Return the current month summary."""
        habits = _get_manager(hass).habits
        return {"summary": rh.build_monthly_summary(habits, dt_today_local())}

    async def handle_get_year_review(call: ServiceCall) -> ServiceResponse:
        """Return the review of one calendar year (default: current year)."""
        habits = _get_manager(hass).habits
        today = dt_today_local()
        year = call.data.get(const.FIELD_YEAR, today.year)
        return rh.build_year_review(habits, year, today)

    hass.services.async_register(
        const.DOMAIN,
        const.SERVICE_ADD_HABIT,
        handle_add_habit,
        schema=ADD_HABIT_SCHEMA,
        supports_response=SupportsResponse.OPTIONAL,
    )

    hass.services.async_register(
        const.DOMAIN,
        const.SERVICE_LOG_COMPLETION,
        handle_log_completion,
        schema=LOG_COMPLETION_SCHEMA,
    )

    hass.services.async_register(
        const.DOMAIN,
        const.SERVICE_DELETE_HABIT,
        handle_delete_habit,
        schema=HABIT_REFERENCE_SCHEMA,
    )

    hass.services.async_register(
        const.DOMAIN,
        const.SERVICE_GET_HABIT_STATS,
        handle_get_habit_stats,
        schema=GET_HABIT_STATS_SCHEMA,
        supports_response=SupportsResponse.ONLY,
    )

    hass.services.async_register(
        const.DOMAIN,
        const.SERVICE_GET_TREND,
        handle_get_trend,
        schema=GET_TREND_SCHEMA,
        supports_response=SupportsResponse.ONLY,
    )

    hass.services.async_register(
        const.DOMAIN,
        const.SERVICE_GET_MONTHLY_SUMMARY,
        handle_get_monthly_summary,
        schema=GET_MONTHLY_SUMMARY_SCHEMA,
        supports_response=SupportsResponse.ONLY,
    )

    hass.services.async_register(
        const.DOMAIN,
        const.SERVICE_GET_YEAR_REVIEW,
        handle_get_year_review,
        schema=GET_YEAR_REVIEW_SCHEMA,
        supports_response=SupportsResponse.ONLY,
    )
