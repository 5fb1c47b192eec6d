from datetime import datetime

import pytest

from habit_timer.actions import add_action, query, should_record
from habit_timer.days import CalendarDay
from habit_timer.models import ActionLog, ActivityKind


def test_add_action_keys_by_local_day():
    log = ActionLog()
    add_action(log, ActivityKind.STRETCH, 130, now=datetime(2022, 12, 13, 8, 0))
    add_action(log, ActivityKind.PRACTICE, 60, now=datetime(2022, 12, 13, 22, 0))
    add_action(log, ActivityKind.STRETCH, 90, now=datetime(2022, 12, 15, 1, 0))

    entries = query(log, CalendarDay.from_triple(2022, 12, 13))
    assert [(e.kind, e.seconds) for e in entries] == [(ActivityKind.STRETCH, 130), (ActivityKind.PRACTICE, 60)]
    assert len(log) == 3
    assert log.first_day() == CalendarDay.from_triple(2022, 12, 13)


def test_query_missing_day_is_empty():
    assert query(ActionLog(), CalendarDay.from_triple(2022, 1, 1)) == ()


def test_query_result_cannot_alter_log():
    log = add_action(ActionLog(), ActivityKind.STRETCH, 10, now=datetime(2022, 12, 13))
    entries = query(log, CalendarDay.from_triple(2022, 12, 13))
    assert isinstance(entries, tuple)
    assert len(log.query(CalendarDay.from_triple(2022, 12, 13))) == 1


def test_negative_duration_rejected():
    with pytest.raises(ValueError):
        add_action(ActionLog(), ActivityKind.STRETCH, -1, now=datetime(2022, 12, 13))


def test_entries_are_chronological():
    log = ActionLog()
    add_action(log, ActivityKind.STRETCH, 3, now=datetime(2022, 12, 20))
    add_action(log, ActivityKind.STRETCH, 1, now=datetime(2022, 12, 1))
    assert [e.seconds for e in log.entries()] == [1, 3]


@pytest.mark.parametrize("elapsed, recorded", [(0, False), (3, False), (5, False), (6, True), (600, True)])
def test_debounce(elapsed, recorded):
    assert should_record(elapsed) is recorded
