from datetime import date, datetime

import pytest

from habit_timer.actions import add_action
from habit_timer.models import ActionLog, ActivityKind, DailyTimeLogPoint
from habit_timer.series import WINDOWS, aggregate, summarize, to_frame, window_days

STRETCH = ActivityKind.STRETCH
PRACTICE = ActivityKind.PRACTICE


def build_log(*items):
    log = ActionLog()
    for when, kind, seconds in items:
        add_action(log, kind, seconds, now=when)
    return log


def test_empty_log_gives_empty_series():
    assert aggregate(ActionLog(), datetime(2022, 12, 14)) == {STRETCH: [], PRACTICE: []}


def test_single_day_example():
    log = build_log(*[(datetime(2022, 12, 13, 9), STRETCH, 130)] * 3)
    series = aggregate(log, datetime(2022, 12, 14, 18))
    assert series[STRETCH] == [
        DailyTimeLogPoint(date(2022, 12, 13), 6.5),
        DailyTimeLogPoint(date(2022, 12, 14), 0.0),
    ]
    assert [p.minutes for p in series[PRACTICE]] == [0.0, 0.0]


def test_gap_filled_over_whole_range():
    log = build_log(
        (datetime(2022, 12, 13, 8), STRETCH, 130),
        (datetime(2022, 12, 17, 8), STRETCH, 120),
        (datetime(2022, 12, 17, 9), PRACTICE, 30),
        (datetime(2022, 12, 31, 8), STRETCH, 300),
    )
    series = aggregate(log, datetime(2023, 1, 2, 12))
    stretch = series[STRETCH]
    assert len(stretch) == 21
    assert len(series[PRACTICE]) == 21
    assert stretch[0].date == date(2022, 12, 13)
    assert stretch[-1].date == date(2023, 1, 2)
    assert [p.date for p in stretch] == sorted(p.date for p in stretch)
    minutes = {p.date: p.minutes for p in stretch}
    assert minutes[date(2022, 12, 17)] == pytest.approx(2.0)
    assert minutes[date(2022, 12, 31)] == pytest.approx(5.0)
    assert minutes[date(2022, 12, 20)] == 0.0
    assert {p.date: p.minutes for p in series[PRACTICE]}[date(2022, 12, 17)] == pytest.approx(0.5)


def test_now_before_first_entry_gives_empty_series():
    log = build_log((datetime(2022, 12, 20), STRETCH, 60))
    assert aggregate(log, datetime(2022, 12, 18))[STRETCH] == []


def points(*minutes):
    return [DailyTimeLogPoint(date(2022, 1, i + 1), m) for i, m in enumerate(minutes)]


def test_summarize_trailing_window():
    stats = summarize(points(9.0, 0.0, 2.0, 0.0, 4.0), window=4)
    assert stats.days == 4
    assert stats.percent_days_active == 50
    assert stats.avg_minutes == pytest.approx(1.5)
    assert stats.avg_minutes_when_active == pytest.approx(3.0)


def test_summarize_empty_and_inactive_windows():
    empty = summarize([], window=7)
    assert (empty.days, empty.percent_days_active, empty.avg_minutes, empty.avg_minutes_when_active) == (0, 0, 0.0, 0.0)
    idle = summarize(points(0.0, 0.0, 0.0), window=30)
    assert idle.days == 3
    assert idle.percent_days_active == 0
    assert idle.avg_minutes_when_active == 0.0


def test_summarize_rejects_non_positive_window():
    with pytest.raises(ValueError):
        summarize(points(1.0), window=0)


def test_windows_and_frame():
    assert window_days("Week") == 7
    assert WINDOWS["Year"] == 365
    with pytest.raises(ValueError):
        window_days("Decade")
    frame = to_frame(points(1.0, 2.5))
    assert list(frame.columns) == ["date", "minutes"]
    assert frame["minutes"].tolist() == [1.0, 2.5]
