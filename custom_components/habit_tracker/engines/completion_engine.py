"""Completion Engine - Tagged completion values and the completion predicate.

A logged value is either Done(bool) for binary habits or Progress(amount)
for counter/timer habits. Persisted records hold plain JSON primitives;
to_completion() / from_completion() convert at the storage boundary.

is_completed() is the single point that inspects the tag. Every other
engine decides "was this day completed?" by calling it.

ARCHITECTURE: This is a pure logic engine with NO Home Assistant dependencies.
"""

from __future__ import annotations

from dataclasses import dataclass
import logging
import math
from typing import TYPE_CHECKING

from .. import const

if TYPE_CHECKING:
    from collections.abc import Mapping

_LOGGER = logging.getLogger(__name__)


@dataclass(frozen=True, slots=True)
class Done:
    """Binary completion: the habit was (or was not) done that day."""

    done: bool


@dataclass(frozen=True, slots=True)
class Progress:
    """Numeric progress toward a target (count, or minutes for timers)."""

    amount: float


Completion = Done | Progress


# =============================================================================
# Storage Boundary Conversion
# =============================================================================


def to_completion(raw: object) -> Completion | None:
    """Convert a persisted JSON value into a tagged completion.

    bool is checked before int because bool is an int subclass.

    Returns:
        Done, Progress, or None when the value is absent or has an unknown shape.
    """
    if raw is None:
        return None
    if isinstance(raw, bool):
        return Done(raw)
    if isinstance(raw, (int, float)) and math.isfinite(raw):
        return Progress(float(raw))
    _LOGGER.debug("Ignoring unsupported completion value: %r", raw)
    return None


def from_completion(value: Completion) -> bool | int | float:
    """Convert a tagged completion back into a JSON primitive."""
    match value:
        case Done(done=done):
            return done
        case Progress(amount=amount):
            return int(amount) if float(amount).is_integer() else amount
    raise TypeError(f"Not a completion value: {value!r}")


# =============================================================================
# Completion Predicate
# =============================================================================


def is_completed(value: Completion | None, target: int = const.DEFAULT_TARGET) -> bool:
    """Decide whether a logged value counts as a completed day.

    Args:
        value: Tagged completion, or None when nothing was logged.
        target: Required progress for numeric values (defaults to 1).

    Returns:
        False when absent; the flag for Done; amount >= target for Progress.
    """
    match value:
        case None:
            return False
        case Done(done=done):
            return done is True
        case Progress(amount=amount):
            return amount >= target
    return False


def completion_state(
    value: Completion | None, target: int = const.DEFAULT_TARGET
) -> str:
    """Return the UI-facing state of one logged value.

    Progress above zero but below target is "in progress"; this state never
    counts toward aggregates.
    """
    if value is None:
        return const.COMPLETION_STATE_NOT_LOGGED
    if is_completed(value, target):
        return const.COMPLETION_STATE_COMPLETED
    if isinstance(value, Progress) and value.amount > 0:
        return const.COMPLETION_STATE_IN_PROGRESS
    return const.COMPLETION_STATE_NOT_COMPLETED


def count_completed(
    completions: Mapping[str, Completion], target: int = const.DEFAULT_TARGET
) -> int:
    """Count date keys whose value satisfies the completion predicate."""
    return sum(1 for value in completions.values() if is_completed(value, target))

