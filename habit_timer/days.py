"""
Calendar day keys.

A CalendarDay is the local (year, month, day) of a timestamp, stored as the
proleptic Gregorian ordinal so keys hash cheaply, sort naturally and subtract
to a whole number of days.
"""

from dataclasses import dataclass
from datetime import date, datetime
from typing import Tuple

from habit_timer.config import TzLike, get_timezone


@dataclass(frozen=True, order=True)
class CalendarDay:
    ordinal: int

    @classmethod
    def from_date(cls, d: date) -> "CalendarDay":
        if isinstance(d, datetime):
            d = d.date()
        return cls(d.toordinal())

    @classmethod
    def from_triple(cls, year: int, month: int, day: int) -> "CalendarDay":
        return cls.from_date(date(year, month, day))

    @classmethod
    def fromisoformat(cls, s: str) -> "CalendarDay":
        return cls.from_date(date.fromisoformat(s))

    @classmethod
    def of(cls, moment: datetime, tz: TzLike = None) -> "CalendarDay":
        """
        Local calendar day of a timestamp.

        Aware timestamps are converted to `tz` (or the configured/system local
        zone) first, so DST shifts never move a timestamp onto the wrong date.
        Naive timestamps are taken as local wall time.
        """
        if moment.tzinfo is not None:
            zone = get_timezone(tz)
            moment = moment.astimezone(zone) if zone is not None else moment.astimezone()
        return cls.from_date(moment.date())

    @property
    def date(self) -> date:
        return date.fromordinal(self.ordinal)

    @property
    def year(self) -> int:
        return self.date.year

    @property
    def month(self) -> int:
        return self.date.month

    @property
    def day(self) -> int:
        return self.date.day

    def as_triple(self) -> Tuple[int, int, int]:
        d = self.date
        return d.year, d.month, d.day

    def isoformat(self) -> str:
        return self.date.isoformat()

    def __add__(self, days: int) -> "CalendarDay":
        return CalendarDay(self.ordinal + int(days))

    def __str__(self) -> str:
        return self.isoformat()


def days_between(start: CalendarDay, end: CalendarDay) -> int:
    """Whole calendar days from start to end (negative if end is earlier)."""
    return end.ordinal - start.ordinal

