"""
Data models for the habit timer.

- ActivityKind: the activities that carry a daily allowance
- ActionLogEntry: one recorded session
- Settings: user-editable allowance sizes and today's calorie count
- AllowanceState: seconds left per activity and the last reconciled day
- ActionLog: append-only, day-keyed history of ActionLogEntry
- DailyTimeLogPoint: one point of a derived per-day series
- Snapshot: everything that gets persisted
"""

from dataclasses import dataclass, field
from datetime import date
from enum import Enum
from typing import Dict, Iterator, List, Optional, Tuple

from habit_timer.config import DEFAULT_MINUTES_PER_DAY
from habit_timer.days import CalendarDay


class ActivityKind(Enum):
    STRETCH = "stretch"
    PRACTICE = "practice"

    @property
    def label(self) -> str:
        return {
            ActivityKind.STRETCH: "Stretching",
            ActivityKind.PRACTICE: "Skill practice",
        }[self]


@dataclass(frozen=True)
class ActionLogEntry:
    """A completed session: `seconds` spent on `kind` during `day`."""
    day: CalendarDay
    kind: ActivityKind
    seconds: int

    def __post_init__(self):
        if self.seconds < 0:
            raise ValueError(f"Action duration must be non-negative, got {self.seconds}")


def _per_activity(value: int) -> Dict[ActivityKind, int]:
    return {kind: value for kind in ActivityKind}


@dataclass
class Settings:
    minutes_per_day: Dict[ActivityKind, int] = field(
        default_factory=lambda: _per_activity(DEFAULT_MINUTES_PER_DAY)
    )
    calories_today: int = 0

    def set_minutes_per_day(self, kind: ActivityKind, minutes: int) -> None:
        if minutes < 1:
            raise ValueError(f"Minutes per day must be at least 1, got {minutes}")
        self.minutes_per_day[kind] = int(minutes)

    def add_calories(self, calories: int) -> None:
        if calories < 0:
            raise ValueError(f"Calories must be non-negative, got {calories}")
        self.calories_today += int(calories)

    def copy(self) -> "Settings":
        return Settings(dict(self.minutes_per_day), self.calories_today)


@dataclass
class AllowanceState:
    remaining: Dict[ActivityKind, int] = field(default_factory=lambda: _per_activity(0))
    last_update_day: Optional[CalendarDay] = None

    def copy(self) -> "AllowanceState":
        return AllowanceState(dict(self.remaining), self.last_update_day)


@dataclass(frozen=True)
class DailyTimeLogPoint:
    date: date
    minutes: float


class ActionLog:
    """
    Day-keyed multimap of recorded sessions.

    Entries are only ever appended; there is no way to edit or remove one.
    """

    def __init__(self):
        self._by_day: Dict[CalendarDay, List[ActionLogEntry]] = {}

    def append(self, entry: ActionLogEntry) -> ActionLogEntry:
        self._by_day.setdefault(entry.day, []).append(entry)
        return entry

    def query(self, day: CalendarDay) -> Tuple[ActionLogEntry, ...]:
        return tuple(self._by_day.get(day, ()))

    def days(self) -> List[CalendarDay]:
        return sorted(self._by_day)

    def first_day(self) -> Optional[CalendarDay]:
        return min(self._by_day) if self._by_day else None

    def entries(self) -> Iterator[ActionLogEntry]:
        """All entries, oldest day first, in recording order within a day."""
        for day in self.days():
            yield from self._by_day[day]

    def is_empty(self) -> bool:
        return not self._by_day

    def __len__(self) -> int:
        return sum(len(v) for v in self._by_day.values())

    def __eq__(self, other) -> bool:
        if not isinstance(other, ActionLog):
            return NotImplemented
        return self._by_day == other._by_day

    def __repr__(self) -> str:
        return f"ActionLog(days={len(self._by_day)}, entries={len(self)})"


@dataclass
class Snapshot:
    """Settings, allowance state and action history, saved as one document."""
    settings: Settings = field(default_factory=Settings)
    current: AllowanceState = field(default_factory=AllowanceState)
    actions: ActionLog = field(default_factory=ActionLog)
