# File: __init__.py
"""Initialization file for the Habit Tracker integration.

Handles setting up the integration from the `habit_tracker:` YAML block,
including the reference time zone, habit storage and the services.

Key Features:
- Reference time zone installed once, before any date computation.
- Storage management for persistent habit history.
- Write and statistics services.
"""

from __future__ import annotations

from zoneinfo import ZoneInfo

import voluptuous as vol
from homeassistant.core import HomeAssistant
from homeassistant.helpers import config_validation as cv
from homeassistant.helpers.typing import ConfigType

from . import const
from .managers.habit_manager import HabitManager
from .services import async_setup_services
from .storage_manager import HabitStorageManager
from .utils import dt_utils

CONFIG_SCHEMA = vol.Schema(
    {
        const.DOMAIN: vol.Schema(
            {
                vol.Optional(
                    const.CONF_TIME_ZONE, default=const.DEFAULT_REFERENCE_TIME_ZONE
                ): cv.time_zone,
            }
        )
    },
    extra=vol.ALLOW_EXTRA,
)


async def async_setup(hass: HomeAssistant, config: ConfigType) -> bool:
    """Set up the integration from YAML configuration."""
    conf = config.get(const.DOMAIN) or {}
    time_zone = conf.get(const.CONF_TIME_ZONE, const.DEFAULT_REFERENCE_TIME_ZONE)
    const.LOGGER.info("INFO: Starting Habit Tracker setup (reference zone %s)", time_zone)

    # Must be done before any component computes a civil day
    dt_utils.set_default_timezone(ZoneInfo(time_zone))

    storage_manager = HabitStorageManager(hass, const.STORAGE_KEY)
    await storage_manager.async_initialize()

    hass.data.setdefault(const.DOMAIN, {}).update(
        {
            const.STORAGE_MANAGER: storage_manager,
            const.HABIT_MANAGER: HabitManager(hass, storage_manager),
        }
    )

    async_setup_services(hass)

    const.LOGGER.info(
        "INFO: Habit Tracker setup complete with %s habits",
        len(storage_manager.get_habits()),
    )
    return True
