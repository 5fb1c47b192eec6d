"""
Action log operations.

Sessions are keyed by the local calendar day they were recorded on. The log is
append-only: add_action is the only way in, query the only way to look up a day.
"""

import logging
from datetime import datetime
from typing import Optional, Tuple

from habit_timer.config import MIN_RECORD_SECONDS, TzLike, local_now
from habit_timer.days import CalendarDay
from habit_timer.models import ActionLog, ActionLogEntry, ActivityKind

LOGGER = logging.getLogger(__name__)


def add_action(
    log: ActionLog,
    kind: ActivityKind,
    seconds: int,
    now: Optional[datetime] = None,
    tz: TzLike = None,
) -> ActionLog:
    """Append `seconds` of `kind` under today's date and return the log."""
    if now is None:
        now = local_now(tz)
    entry = ActionLogEntry(day=CalendarDay.of(now, tz), kind=kind, seconds=int(seconds))
    log.append(entry)
    LOGGER.info("Recorded %s for %ss on %s", kind.value, entry.seconds, entry.day)
    return log


def query(log: ActionLog, day: CalendarDay) -> Tuple[ActionLogEntry, ...]:
    return log.query(day)


def should_record(elapsed_seconds: int) -> bool:
    """Sessions of MIN_RECORD_SECONDS or less are treated as accidental starts."""
    return elapsed_seconds > MIN_RECORD_SECONDS
