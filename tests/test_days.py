from datetime import datetime, timezone

import pytest
import pytz

from habit_timer.days import CalendarDay, days_between


def test_same_local_date_gives_equal_days():
    morning = CalendarDay.of(datetime(2022, 12, 13, 0, 0, 1))
    night = CalendarDay.of(datetime(2022, 12, 13, 23, 59, 59))
    assert morning == night
    assert hash(morning) == hash(night)
    assert morning.as_triple() == (2022, 12, 13)


def test_aware_timestamp_uses_requested_zone():
    moment = datetime(2022, 3, 13, 3, 30, tzinfo=timezone.utc)
    assert CalendarDay.of(moment, "America/New_York").isoformat() == "2022-03-12"
    assert CalendarDay.of(moment, "UTC").isoformat() == "2022-03-13"


def test_pytz_localized_timestamp_across_dst_change():
    tz = pytz.timezone("America/New_York")
    before = tz.localize(datetime(2022, 3, 13, 1, 30))
    after = tz.localize(datetime(2022, 3, 13, 23, 30))
    assert CalendarDay.of(before, tz) == CalendarDay.of(after, tz)


def test_ordering_and_arithmetic():
    a = CalendarDay.from_triple(2022, 12, 31)
    b = CalendarDay.from_triple(2023, 1, 2)
    assert a < b
    assert days_between(a, b) == 2
    assert days_between(b, a) == -2
    assert a + 2 == b


def test_isoformat_round_trip_and_fields():
    d = CalendarDay.fromisoformat("2024-02-29")
    assert (d.year, d.month, d.day) == (2024, 2, 29)
    assert str(d) == "2024-02-29"


def test_unknown_zone_rejected():
    with pytest.raises(ValueError):
        CalendarDay.of(datetime(2022, 1, 1, tzinfo=timezone.utc), "Mars/Olympus_Mons")


def test_local_now_honours_zone():
    from habit_timer.config import get_timezone, local_now

    assert get_timezone("Asia/Kolkata").zone == "Asia/Kolkata"
    assert local_now("UTC").utcoffset().total_seconds() == 0
    assert local_now().tzinfo is not None
