"""
Per-day series for charting.

The action log only has keys for days with activity. aggregate() turns it into
one dense, zero-filled series per activity, running from the first recorded
day through today.
"""

from dataclasses import dataclass
from datetime import datetime
from typing import Dict, List, Optional, Sequence

import pandas as pd

from habit_timer.config import TzLike, local_now
from habit_timer.days import CalendarDay
from habit_timer.models import ActionLog, ActivityKind, DailyTimeLogPoint

# Trailing windows offered on the graph page, in days
WINDOWS: Dict[str, int] = {
    "Week": 7,
    "Month": 30,
    "Year": 365,
}
DEFAULT_WINDOW = "Month"

Series = Dict[ActivityKind, List[DailyTimeLogPoint]]


def aggregate(log: ActionLog, now: Optional[datetime] = None, tz: TzLike = None) -> Series:
    if log.is_empty():
        return {kind: [] for kind in ActivityKind}

    if now is None:
        now = local_now(tz)
    start = log.first_day()
    end = CalendarDay.of(now, tz)
    index = pd.date_range(start.date, end.date, freq="D")

    df = pd.DataFrame(
        [(e.day.date, e.kind.value, e.seconds) for e in log.entries()],
        columns=["entry_date", "kind", "seconds"],
    )
    df["entry_date"] = pd.to_datetime(df["entry_date"])
    totals = (
        df.groupby(["entry_date", "kind"])["seconds"].sum()
        .unstack(fill_value=0)
        .reindex(index=index, columns=[k.value for k in ActivityKind], fill_value=0)
    )

    result: Series = {}
    for kind in ActivityKind:
        minutes = totals[kind.value] / 60.0
        result[kind] = [
            DailyTimeLogPoint(date=ts.date(), minutes=float(m))
            for ts, m in minutes.items()
        ]
    return result


@dataclass(frozen=True)
class WindowSummary:
    days: int
    percent_days_active: int
    avg_minutes: float
    avg_minutes_when_active: float


def summarize(points: Sequence[DailyTimeLogPoint], window: int) -> WindowSummary:
    """
    Statistics over the last `window` points. Both averages divide by at least
    one, so an empty window yields zeros.
    """
    if window < 1:
        raise ValueError(f"Window must be at least 1 day, got {window}")
    minutes = pd.Series([p.minutes for p in points[-window:]], dtype=float)
    active = minutes[minutes > 0]

    total_days = len(minutes)
    active_days = len(active)
    return WindowSummary(
        days=total_days,
        percent_days_active=int(round(100 * active_days / max(total_days, 1))),
        avg_minutes=float(minutes.sum()) / max(total_days, 1),
        avg_minutes_when_active=float(active.sum()) / max(active_days, 1),
    )


def window_days(name: str) -> int:
    try:
        return WINDOWS[name]
    except KeyError:
        raise ValueError(f"Unknown window '{name}'. Use one of: {', '.join(WINDOWS)}")


def to_frame(points: Sequence[DailyTimeLogPoint]) -> pd.DataFrame:
    """Points as a (date, minutes) frame for plotly."""
    df = pd.DataFrame([(p.date, p.minutes) for p in points], columns=["date", "minutes"])
    df["date"] = pd.to_datetime(df["date"])
    return df
