"""
Daily reconciliation.

Brings the allowance state up to date with the calendar: every day that has
passed since the last reconciliation grants each activity its daily minutes.
Unused allowance is banked with no upper limit.
"""

import logging
from datetime import datetime
from typing import Tuple

from habit_timer.config import ADD_MINUTES_STEP, TzLike
from habit_timer.days import CalendarDay, days_between
from habit_timer.models import ActivityKind, AllowanceState, Settings

LOGGER = logging.getLogger(__name__)


def reconcile(
    state: AllowanceState,
    settings: Settings,
    now: datetime,
    tz: TzLike = None,
) -> Tuple[AllowanceState, Settings]:
    """
    Returns the reconciled (state, settings); the arguments are left untouched.

    Calling it again on the same calendar day is a no-op. A first run (no last
    update day) grants nothing but stamps today.
    """
    today = CalendarDay.of(now, tz)
    if state.last_update_day == today:
        return state, settings

    new_state = state.copy()
    new_settings = settings.copy()

    last = state.last_update_day if state.last_update_day is not None else today
    elapsed = days_between(last, today)
    if elapsed < 0:
        LOGGER.warning("Clock moved back from %s to %s; no allowance granted", last, today)
        elapsed = 0

    for kind in ActivityKind:
        granted = elapsed * settings.minutes_per_day[kind] * 60
        new_state.remaining[kind] = state.remaining.get(kind, 0) + granted

    if elapsed > 0:
        new_settings.calories_today = 0
        LOGGER.info("Reconciled %d day(s) up to %s", elapsed, today)

    new_state.last_update_day = today
    return new_state, new_settings


# ---------- Manual adjustments ----------
def reset_allowance(state: AllowanceState, settings: Settings, kind: ActivityKind) -> AllowanceState:
    """Set the remaining time for `kind` to exactly one day's allowance."""
    new_state = state.copy()
    new_state.remaining[kind] = settings.minutes_per_day[kind] * 60
    return new_state


def add_allowance(state: AllowanceState, kind: ActivityKind, minutes: int = ADD_MINUTES_STEP) -> AllowanceState:
    new_state = state.copy()
    new_state.remaining[kind] = state.remaining.get(kind, 0) + int(minutes) * 60
    return new_state
