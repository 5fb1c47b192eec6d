"""
Snapshot <-> JSON document.

Document layout:

    {
      "settings": {"stretchingMinutesPerDay": 5, "practiceMinutesPerDay": 5, "caloriesToday": 0},
      "current":  {"stretchingSecondsRemaining": 0, "practiceSecondsRemaining": 0,
                   "lastUpdateDay": {"year": 2022, "month": 12, "day": 13}},
      "actions":  {"2022-12-13": [{"kind": "stretch", "seconds": 130}]}
    }

Decoding fills in a fixed default for every optional field so snapshots
written by older versions still load:

    settings.practiceMinutesPerDay     -> 1
    settings.caloriesToday             -> 0
    current.practiceSecondsRemaining   -> 0

Older files may also store actions as a flat [day, events, day, events, ...]
array and events as {"stretch": {"_0": 130}} or {"stretch": 130}.
"""

import json
from typing import Any, Dict, List, Optional

from habit_timer.config import LEGACY_PRACTICE_MINUTES
from habit_timer.days import CalendarDay
from habit_timer.errors import DecodeError
from habit_timer.models import (
    ActionLog,
    ActionLogEntry,
    ActivityKind,
    AllowanceState,
    Settings,
    Snapshot,
)

MINUTES_KEYS = {
    ActivityKind.STRETCH: "stretchingMinutesPerDay",
    ActivityKind.PRACTICE: "practiceMinutesPerDay",
}
REMAINING_KEYS = {
    ActivityKind.STRETCH: "stretchingSecondsRemaining",
    ActivityKind.PRACTICE: "practiceSecondsRemaining",
}
# Fields older snapshots may lack, with the value they load as
OPTIONAL_DEFAULTS = {
    "practiceMinutesPerDay": LEGACY_PRACTICE_MINUTES,
    "caloriesToday": 0,
    "practiceSecondsRemaining": 0,
}


# ---------- Encoding ----------
def day_to_dict(day: Optional[CalendarDay]) -> Optional[Dict[str, int]]:
    if day is None:
        return None
    return {"year": day.year, "month": day.month, "day": day.day}


def snapshot_to_dict(snapshot: Snapshot) -> Dict[str, Any]:
    settings = {MINUTES_KEYS[k]: snapshot.settings.minutes_per_day[k] for k in ActivityKind}
    settings["caloriesToday"] = snapshot.settings.calories_today

    current: Dict[str, Any] = {REMAINING_KEYS[k]: snapshot.current.remaining[k] for k in ActivityKind}
    current["lastUpdateDay"] = day_to_dict(snapshot.current.last_update_day)

    actions = {
        day.isoformat(): [{"kind": e.kind.value, "seconds": e.seconds} for e in snapshot.actions.query(day)]
        for day in snapshot.actions.days()
    }
    return {"settings": settings, "current": current, "actions": actions}


def encode(snapshot: Snapshot) -> str:
    return json.dumps(snapshot_to_dict(snapshot), ensure_ascii=False)


# ---------- Decoding ----------
def _require(obj: Dict[str, Any], key: str, where: str) -> Any:
    if key not in obj:
        raise DecodeError(f"Snapshot {where}: missing required field '{key}'")
    return obj[key]


def _section(doc: Dict[str, Any], key: str) -> Dict[str, Any]:
    value = _require(doc, key, "document")
    if not isinstance(value, dict):
        raise DecodeError(f"Snapshot '{key}' must be an object, got {type(value).__name__}")
    return value


def _int(value: Any, field_name: str) -> int:
    if isinstance(value, bool) or not isinstance(value, (int, float)):
        raise DecodeError(f"Snapshot field '{field_name}' must be an integer, got {value!r}")
    if isinstance(value, float) and not value.is_integer():
        raise DecodeError(f"Snapshot field '{field_name}' must be an integer, got {value!r}")
    return int(value)


def _optional_int(obj: Dict[str, Any], key: str) -> int:
    if obj.get(key) is None:
        return OPTIONAL_DEFAULTS[key]
    return _int(obj[key], key)


def day_from_value(value: Any) -> Optional[CalendarDay]:
    """A day as {"year","month","day"}, [y, m, d] or "YYYY-MM-DD"; None stays None."""
    if value is None:
        return None
    try:
        if isinstance(value, str):
            return CalendarDay.fromisoformat(value)
        if isinstance(value, dict):
            return CalendarDay.from_triple(int(value["year"]), int(value["month"]), int(value["day"]))
        if isinstance(value, (list, tuple)) and len(value) == 3:
            return CalendarDay.from_triple(*(int(v) for v in value))
    except (KeyError, TypeError, ValueError) as e:
        raise DecodeError(f"Invalid calendar day {value!r}: {e}")
    raise DecodeError(f"Invalid calendar day {value!r}")


def _event(value: Any, day: CalendarDay) -> ActionLogEntry:
    if not isinstance(value, dict):
        raise DecodeError(f"Invalid action on {day}: {value!r}")
    if "kind" in value:
        kind_name, seconds = value["kind"], value.get("seconds")
    elif len(value) == 1:
        kind_name, seconds = next(iter(value.items()))
        if isinstance(seconds, dict):
            seconds = seconds.get("_0")
    else:
        raise DecodeError(f"Invalid action on {day}: {value!r}")
    try:
        kind = ActivityKind(kind_name)
    except ValueError:
        raise DecodeError(f"Unknown activity '{kind_name}' on {day}")
    seconds = _int(seconds, f"{kind_name} seconds")
    if seconds < 0:
        raise DecodeError(f"Negative duration for {kind_name} on {day}: {seconds}")
    return ActionLogEntry(day=day, kind=kind, seconds=seconds)


def _action_pairs(raw: Any) -> List[tuple]:
    if isinstance(raw, dict):
        return list(raw.items())
    if isinstance(raw, list):
        if len(raw) % 2:
            raise DecodeError("Snapshot 'actions' array must alternate day and events")
        return list(zip(raw[0::2], raw[1::2]))
    raise DecodeError(f"Snapshot 'actions' must be an object, got {type(raw).__name__}")


def snapshot_from_dict(doc: Any) -> Snapshot:
    if not isinstance(doc, dict):
        raise DecodeError(f"Snapshot must be a JSON object, got {type(doc).__name__}")

    raw_settings = _section(doc, "settings")
    settings = Settings(
        minutes_per_day={
            ActivityKind.STRETCH: _int(_require(raw_settings, "stretchingMinutesPerDay", "settings"),
                                       "stretchingMinutesPerDay"),
            ActivityKind.PRACTICE: _optional_int(raw_settings, "practiceMinutesPerDay"),
        },
        calories_today=_optional_int(raw_settings, "caloriesToday"),
    )

    raw_current = _section(doc, "current")
    current = AllowanceState(
        remaining={
            ActivityKind.STRETCH: _int(_require(raw_current, "stretchingSecondsRemaining", "current"),
                                       "stretchingSecondsRemaining"),
            ActivityKind.PRACTICE: _optional_int(raw_current, "practiceSecondsRemaining"),
        },
        last_update_day=day_from_value(_require(raw_current, "lastUpdateDay", "current")),
    )

    actions = ActionLog()
    for raw_day, events in _action_pairs(_require(doc, "actions", "document")):
        day = day_from_value(raw_day)
        if day is None or not isinstance(events, list):
            raise DecodeError(f"Invalid actions for day {raw_day!r}")
        for event in events:
            actions.append(_event(event, day))

    return Snapshot(settings=settings, current=current, actions=actions)


def decode(text: str) -> Snapshot:
    try:
        doc = json.loads(text)
    except json.JSONDecodeError as e:
        raise DecodeError(f"Invalid JSON in snapshot: {e}")
    return snapshot_from_dict(doc)
