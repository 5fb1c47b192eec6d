"""
Live countdown for one activity.

Countdown is a small reducer over AllowanceState: start() notes when the run
began, tick() and stop() work out the elapsed time from an injected monotonic
clock and write the consumed seconds back into the state. Ticker is the
periodic callback that drives tick() while a countdown runs.
"""

import logging
import threading
import time
from dataclasses import dataclass
from enum import Enum
from typing import Callable, Optional

from habit_timer.config import TICK_INTERVAL
from habit_timer.models import ActivityKind, AllowanceState

LOGGER = logging.getLogger(__name__)

Clock = Callable[[], float]


class TimerStatus(Enum):
    IDLE = "idle"
    RUNNING = "running"


@dataclass(frozen=True)
class CountdownFinished:
    kind: ActivityKind
    elapsed_seconds: int
    completed: bool  # True when the allowance ran out, False on a manual stop


class Countdown:
    def __init__(self, kind: ActivityKind, clock: Clock = time.monotonic):
        self.kind = kind
        self._clock = clock
        self.status = TimerStatus.IDLE
        self.elapsed_ms = 0
        self._started_at = 0.0

    @property
    def running(self) -> bool:
        return self.status is TimerStatus.RUNNING

    def start(self) -> bool:
        if self.running:
            return False
        self._started_at = self._clock()
        self.elapsed_ms = 0
        self.status = TimerStatus.RUNNING
        LOGGER.debug("Countdown started for %s", self.kind.value)
        return True

    def _measure(self) -> None:
        self.elapsed_ms = max(0, round((self._clock() - self._started_at) * 1000))

    def tick(self, state: AllowanceState) -> Optional[CountdownFinished]:
        """Update the elapsed time; finish the run once the allowance is used up."""
        if not self.running:
            return None
        self._measure()
        remaining = state.remaining[self.kind]
        if remaining * 1000 - self.elapsed_ms > 0:
            return None

        elapsed_seconds = min(self.elapsed_ms // 1000, max(remaining, 0))
        state.remaining[self.kind] = 0
        self.status = TimerStatus.IDLE
        self.elapsed_ms = 0
        LOGGER.info("Countdown for %s ran out after %ss", self.kind.value, elapsed_seconds)
        return CountdownFinished(self.kind, elapsed_seconds, completed=True)

    def stop(self, state: AllowanceState) -> Optional[CountdownFinished]:
        """Stop early. The consumed seconds are subtracted without clamping."""
        if not self.running:
            return None
        self._measure()
        elapsed_seconds = self.elapsed_ms // 1000
        state.remaining[self.kind] -= elapsed_seconds
        self.status = TimerStatus.IDLE
        self.elapsed_ms = 0
        return CountdownFinished(self.kind, elapsed_seconds, completed=False)

    def display_ms(self, state: AllowanceState) -> int:
        remaining_ms = state.remaining[self.kind] * 1000
        if self.running:
            remaining_ms -= self.elapsed_ms
        return remaining_ms


def format_remaining(ms: int) -> str:
    """Milliseconds as MM:SS:CC (minutes, seconds, centiseconds)."""
    sign = "-" if ms < 0 else ""
    ms = abs(int(ms))
    minutes, rest = divmod(ms, 60_000)
    seconds, rest = divmod(rest, 1000)
    return f"{sign}{minutes:02d}:{seconds:02d}:{rest // 10:02d}"


class Ticker:
    """
    Calls `callback` every `interval` seconds on a daemon thread until the
    callback returns False or cancel() is called.
    """

    def __init__(self, callback: Callable[[], bool], interval: float = TICK_INTERVAL):
        self.interval = interval
        self._callback = callback
        self._cancelled = threading.Event()
        self._thread = threading.Thread(target=self._run, name="habit-ticker", daemon=True)

    def start(self) -> "Ticker":
        self._thread.start()
        return self

    def _run(self) -> None:
        while not self._cancelled.wait(self.interval):
            try:
                keep_going = self._callback()
            except Exception:
                LOGGER.exception("Countdown tick failed; stopping ticker")
                break
            if keep_going is False:
                break
        self._cancelled.set()

    @property
    def active(self) -> bool:
        return self._thread.is_alive() and not self._cancelled.is_set()

    def cancel(self, wait: bool = True) -> None:
        self._cancelled.set()
        if wait and self._thread.is_alive() and threading.current_thread() is not self._thread:
            self._thread.join(timeout=max(self.interval * 4, 0.5))
