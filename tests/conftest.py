"""Shared fixtures for Habit Tracker tests."""

from collections.abc import Generator
from typing import Any
from zoneinfo import ZoneInfo

import pytest

from custom_components.habit_tracker.const import DEFAULT_REFERENCE_TIME_ZONE
from custom_components.habit_tracker.utils import dt_utils

# pylint: disable=invalid-name
pytest_plugins = "pytest_homeassistant_custom_component"
# pylint: enable=invalid-name


@pytest.fixture(autouse=True)
def auto_enable_custom_integrations(enable_custom_integrations: Any) -> Any:
    """Enable custom integrations in tests."""
    # pylint: disable=unused-argument
    yield


@pytest.fixture(autouse=True)
def reference_time_zone() -> Generator[ZoneInfo, None, None]:
    """Pin the reference zone and restore it after each test.

    Integration setup installs the configured zone globally, so a test that
    configures another zone must not leak it into the next one.
    """
    tz = ZoneInfo(DEFAULT_REFERENCE_TIME_ZONE)
    dt_utils.set_default_timezone(tz)
    yield tz
    dt_utils.set_default_timezone(tz)
