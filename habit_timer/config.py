# config.py
# Settings for the habit timer. Every constant can be overridden with an
# environment variable so the app and the tests can point at their own files.
#
#   HABIT_TIMER_DB         path of the SQLite snapshot file (default: useful.db)
#   HABIT_TIMER_TZ         IANA zone used for "today" (default: system local zone)
#   HABIT_TIMER_LOG_LEVEL  logging level name (default: INFO)

import logging
import os
from datetime import datetime, tzinfo
from typing import Optional, Union

import pytz

DB_PATH = os.environ.get("HABIT_TIMER_DB", "useful.db")
TZ_NAME: Optional[str] = os.environ.get("HABIT_TIMER_TZ") or None
LOG_LEVEL = os.environ.get("HABIT_TIMER_LOG_LEVEL", "INFO")

# ---------- Timer ----------
TICK_INTERVAL = 0.05  # seconds between countdown ticks
MIN_RECORD_SECONDS = 5  # sessions this short are not logged

# ---------- Allowance ----------
DEFAULT_MINUTES_PER_DAY = 5
LEGACY_PRACTICE_MINUTES = 1  # snapshots saved before practice existed
ADD_MINUTES_STEP = 5

LOG_FORMAT = "%(asctime)s %(levelname)s %(name)s %(message)s"

TzLike = Union[str, tzinfo, None]


def setup_logging(level: Optional[str] = None) -> None:
    level_name = (level or LOG_LEVEL).upper()
    logging.basicConfig(level=getattr(logging, level_name, logging.INFO), format=LOG_FORMAT)


def get_timezone(tz: TzLike = None) -> Optional[tzinfo]:
    """
    Resolve a zone name or tzinfo. None means the system local zone, which
    datetime handles natively, so None is returned unchanged.
    """
    if tz is None:
        tz = TZ_NAME
    if tz is None or isinstance(tz, tzinfo):
        return tz
    try:
        return pytz.timezone(tz)
    except pytz.UnknownTimeZoneError:
        raise ValueError(f"Invalid timezone '{tz}'. Use IANA timezone identifiers.")


def local_now(tz: TzLike = None) -> datetime:
    zone = get_timezone(tz)
    if zone is None:
        return datetime.now().astimezone()
    return datetime.now(zone)
