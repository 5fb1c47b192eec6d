"""
Application session: the single owner of the habit timer state.

The session holds the snapshot, at most one running Countdown and the Ticker
that drives it. Every state-affecting call reconciles first and saves after.
The ticker thread and the caller share the session through one re-entrant lock.
"""

import logging
import threading
import time
from datetime import datetime
from typing import Callable, Dict, List, Optional

from habit_timer import actions, reconcile
from habit_timer.config import ADD_MINUTES_STEP, TICK_INTERVAL, TzLike, local_now
from habit_timer.countdown import Clock, Countdown, CountdownFinished, Ticker, format_remaining
from habit_timer.errors import DecodeError
from habit_timer.models import ActivityKind, DailyTimeLogPoint, Snapshot
from habit_timer.series import WindowSummary, aggregate, summarize
from habit_timer.store import ErrorHandler, SnapshotStore

LOGGER = logging.getLogger(__name__)


class HabitSession:
    def __init__(
        self,
        store: Optional[SnapshotStore] = None,
        now: Optional[Callable[[], datetime]] = None,
        clock: Clock = time.monotonic,
        tz: TzLike = None,
        tick_interval: Optional[float] = TICK_INTERVAL,
        on_save_error: Optional[ErrorHandler] = None,
    ):
        """
        `now` supplies wall-clock time for calendar days, `clock` monotonic
        seconds for the countdown. With `tick_interval=None` no ticker thread is
        started and the caller drives tick() itself.
        """
        self.store = store if store is not None else SnapshotStore()
        self.tz = tz
        self._now = now if now is not None else (lambda: local_now(tz))
        self._clock = clock
        self.tick_interval = tick_interval
        self.on_save_error = on_save_error

        self.data = Snapshot()
        self.load_error: Optional[DecodeError] = None
        self.last_finished: Optional[CountdownFinished] = None
        self._timer: Optional[Countdown] = None
        self._ticker: Optional[Ticker] = None
        self._ticker_generation = 0
        self._lock = threading.RLock()

    # ---------- Persistence ----------
    def load(self) -> Snapshot:
        """
        Load the saved snapshot and reconcile it. An unreadable snapshot leaves
        a default state in memory and sets `load_error`; saving stays off until
        discard_unreadable_data() so the bad file is not overwritten silently.
        """
        try:
            snapshot = self.store.load_async().result()
        except DecodeError as e:
            LOGGER.error("Saved data could not be read: %s", e)
            with self._lock:
                self.load_error = e
                self.data = Snapshot()
            return self.data
        with self._lock:
            self.load_error = None
            self.data = snapshot
            self.update()
        return self.data

    def discard_unreadable_data(self) -> None:
        with self._lock:
            if self.load_error is None:
                return
            LOGGER.warning("Discarding unreadable saved data")
            self.store.discard_async().result()
            self.load_error = None
            self.data = Snapshot()
            self.update()
            self.save()

    def save(self):
        with self._lock:
            if self.load_error is not None:
                LOGGER.warning("Not saving: saved data is unreadable and has not been discarded")
                return None
            return self.store.save_async(self.data, on_error=self._save_failed)

    def _save_failed(self, error: Exception) -> None:
        if self.on_save_error is not None:
            self.on_save_error(error)
        else:
            LOGGER.error("Saving failed: %s", error)

    def suspend(self):
        """App going to the background: bring the day up to date and save."""
        with self._lock:
            self.update()
            return self.save()

    def close(self) -> None:
        old_ticker = self._detach_ticker()
        if old_ticker is not None:
            old_ticker.cancel()
        with self._lock:
            if self._timer is not None and self._timer.running:
                self._finish(self._timer.stop(self.data.current))
            self.save()
        self.store.close()

    # ---------- Reconciliation ----------
    def update(self) -> None:
        with self._lock:
            self.data.current, self.data.settings = reconcile.reconcile(
                self.data.current, self.data.settings, self._now(), self.tz
            )

    def reset_allowance(self, kind: ActivityKind) -> None:
        with self._lock:
            self.update()
            self.data.current = reconcile.reset_allowance(self.data.current, self.data.settings, kind)
            self.save()

    def add_allowance(self, kind: ActivityKind, minutes: int = ADD_MINUTES_STEP) -> None:
        with self._lock:
            self.update()
            self.data.current = reconcile.add_allowance(self.data.current, kind, minutes)
            self.save()

    def set_minutes_per_day(self, kind: ActivityKind, minutes: int) -> None:
        with self._lock:
            self.update()
            self.data.settings.set_minutes_per_day(kind, minutes)
            self.save()

    def add_calories(self, calories: int) -> None:
        with self._lock:
            self.update()
            self.data.settings.add_calories(calories)
            self.save()

    # ---------- Countdown ----------
    def is_running(self, kind: Optional[ActivityKind] = None) -> bool:
        timer = self._timer
        if timer is None or not timer.running:
            return False
        return kind is None or timer.kind is kind

    def start(self, kind: ActivityKind) -> bool:
        """
        Start counting down `kind`. A countdown already running for another
        activity is stopped and recorded first.
        """
        old_ticker = None
        try:
            with self._lock:
                if self.is_running(kind):
                    return False
                old_ticker = self._detach_ticker()
                self.update()
                if self._timer is not None and self._timer.running:
                    self._finish(self._timer.stop(self.data.current))
                self._timer = Countdown(kind, clock=self._clock)
                self._timer.start()
                if self.tick_interval is not None:
                    generation = self._ticker_generation
                    self._ticker = Ticker(lambda: self._scheduled_tick(generation), self.tick_interval).start()
                return True
        finally:
            # The old ticker's callback needs the lock, so join it only after release.
            if old_ticker is not None:
                old_ticker.cancel()

    def tick(self) -> bool:
        """Advance the running countdown. Returns False once nothing is running."""
        with self._lock:
            if self._timer is None or not self._timer.running:
                return False
            event = self._timer.tick(self.data.current)
            if event is not None:
                self._finish(event)
                return False
            return True

    def _scheduled_tick(self, generation: int) -> bool:
        with self._lock:
            if generation != self._ticker_generation:
                return False
            return self.tick()

    def stop(self) -> Optional[CountdownFinished]:
        old_ticker = None
        try:
            with self._lock:
                old_ticker = self._detach_ticker()
                if self._timer is None or not self._timer.running:
                    return None
                self.update()
                event = self._timer.stop(self.data.current)
                self._finish(event)
                return event
        finally:
            if old_ticker is not None:
                old_ticker.cancel()

    def _detach_ticker(self) -> Optional[Ticker]:
        """Signal the current ticker to stop and forget it. Callers join it outside the lock."""
        with self._lock:
            ticker, self._ticker = self._ticker, None
            self._ticker_generation += 1
            if ticker is not None:
                ticker.cancel(wait=False)
            return ticker

    def _finish(self, event: CountdownFinished) -> None:
        self.last_finished = event
        self.record_session(event)
        self.save()

    def record_session(self, event: CountdownFinished) -> bool:
        if not actions.should_record(event.elapsed_seconds):
            LOGGER.info("Skipping %ss %s session", event.elapsed_seconds, event.kind.value)
            return False
        actions.add_action(self.data.actions, event.kind, event.elapsed_seconds, self._now(), self.tz)
        return True

    def display_ms(self, kind: ActivityKind) -> int:
        with self._lock:
            if self.is_running(kind):
                return self._timer.display_ms(self.data.current)
            return self.data.current.remaining[kind] * 1000

    def display(self, kind: ActivityKind) -> str:
        return format_remaining(self.display_ms(kind))

    # ---------- History ----------
    def series(self) -> Dict[ActivityKind, List[DailyTimeLogPoint]]:
        with self._lock:
            return aggregate(self.data.actions, self._now(), self.tz)

    def summary(self, kind: ActivityKind, window: int) -> WindowSummary:
        return summarize(self.series()[kind], window)
