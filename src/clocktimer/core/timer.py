"""Timer core — a drift-free countdown state machine.

The engine never counts down by itself: it stores absolute instants (the due
time and, while paused, the pause anchor) and derives the remaining time from
them whenever asked.  Persistence and alarm delivery are injected
collaborators.
"""

from __future__ import annotations

import logging
import threading
import time
from dataclasses import dataclass, replace
from typing import Callable, Optional

from clocktimer.core import arithmetic
from clocktimer.core.alarm import ALARM_ID, ALARM_LEAD_SECONDS, ALARM_TITLE, AlarmScheduler
from clocktimer.core.record import Paused, Running, Stopped, TimerRecord, TimerStatus
from clocktimer.core.store import TimerStore

logger = logging.getLogger(__name__)


class InvalidStateError(Exception):
    """Raised when an invalid state transition is attempted."""


_STOPPED = frozenset({TimerStatus.STOPPED})
_RUNNING = frozenset({TimerStatus.RUNNING})
_PAUSED = frozenset({TimerStatus.PAUSED})
_ACTIVE = frozenset({TimerStatus.RUNNING, TimerStatus.PAUSED})

EXPIRY_GRACE = -0.5
MIN_START_DURATION = 0.1


@dataclass(frozen=True)
class TimerSnapshot:
    """The record plus the values derived from it at one instant.

    *sequence* grows with every settled change, so a listener fed from
    several threads can tell a late snapshot from a current one.
    """

    record: TimerRecord
    remaining: float
    remaining_fraction: float
    expired: bool = False
    sequence: int = 0

    @property
    def status(self) -> TimerStatus:
        return self.record.status


Listener = Callable[[TimerSnapshot], None]


class TimerEngine:
    """Single-timer state machine: Stopped -> Running <-> Paused -> Stopped.

    The record is loaded from *store* on construction and saved back after
    every change that actually alters it.  All mutations are serialised by
    one lock; listeners are notified after the lock is released.
    """

    def __init__(
        self,
        store: TimerStore,
        alarm: AlarmScheduler,
        *,
        expiry_grace: float = EXPIRY_GRACE,
        min_start_duration: float = MIN_START_DURATION,
        now: Optional[float] = None,
    ) -> None:
        self._store = store
        self._alarm = alarm
        self._expiry_grace = expiry_grace
        self._min_start_duration = min_start_duration
        self._lock = threading.RLock()
        self._listeners: list[Listener] = []
        self._sequence = 0

        record = store.load()
        if record is None:
            record = TimerRecord()
        self._record: TimerRecord = record
        self._saved: TimerRecord = record
        self._remaining: float = 0.0
        self._fraction: float = 1.0
        self._restore(self._now(now))

    # -- observation ---------------------------------------------------------

    @property
    def record(self) -> TimerRecord:
        return self._record

    @property
    def status(self) -> TimerStatus:
        return self._record.status

    @property
    def remaining(self) -> float:
        return self._remaining

    @property
    def remaining_fraction(self) -> float:
        return self._fraction

    def can_start(self) -> bool:
        return self._record.configured_duration >= self._min_start_duration

    def snapshot(self) -> TimerSnapshot:
        with self._lock:
            return TimerSnapshot(
                self._record, self._remaining, self._fraction, sequence=self._sequence
            )

    def subscribe(self, listener: Listener) -> Callable[[], None]:
        """Call *listener* after every settled change.  Returns an unsubscribe function."""
        self._listeners.append(listener)

        def unsubscribe() -> None:
            if listener in self._listeners:
                self._listeners.remove(listener)

        return unsubscribe

    # -- transitions ---------------------------------------------------------

    def start(self, now: Optional[float] = None) -> None:
        """Start counting down the configured duration.

        Valid only from STOPPED.  Does nothing while the configured duration
        is effectively zero.
        """
        with self._lock:
            self._require_state("start", _STOPPED)
            snapshot = self._start_locked(self._now(now))
        self._notify(snapshot)

    def pause(self, now: Optional[float] = None) -> None:
        """Freeze the countdown.  Valid only from RUNNING."""
        with self._lock:
            self._require_state("pause", _RUNNING)
            snapshot = self._pause_locked(self._now(now))
        self._notify(snapshot)

    def resume(self, now: Optional[float] = None) -> None:
        """Continue a paused countdown, pushing the due time back by the pause.

        Valid only from PAUSED.  A paused record missing either instant is
        reset instead.
        """
        with self._lock:
            self._require_state("resume", _PAUSED)
            snapshot = self._resume_locked(self._now(now))
        self._notify(snapshot)

    def reset(self) -> None:
        """Stop the timer.  Valid from RUNNING or PAUSED."""
        with self._lock:
            self._require_state("reset", _ACTIVE)
            snapshot = self._reset_locked()
        self._notify(snapshot)

    def set_configured_duration(self, seconds: float, now: Optional[float] = None) -> None:
        """Set the duration used by the next :meth:`start`."""
        if seconds < 0:
            raise ValueError(f"duration must not be negative, got {seconds}")
        with self._lock:
            self._record = replace(self._record, configured_duration=float(seconds))
            self._recompute(self._now(now))
            snapshot = self._settle()
        self._notify(snapshot)

    def set_sound_id(self, sound_id: Optional[int]) -> None:
        """Choose the alarm sound; applies from the next alarm scheduling."""
        with self._lock:
            self._record = replace(self._record, sound_id=sound_id)
            snapshot = self._settle()
        self._notify(snapshot)

    def press_left(self) -> None:
        """Left button: reset a running or paused timer.

        Ignored when the timer has already stopped, e.g. because it expired
        just before the press.
        """
        with self._lock:
            if self._record.status == TimerStatus.STOPPED:
                logger.debug("Ignoring reset of a stopped timer")
                return
            snapshot = self._reset_locked()
        self._notify(snapshot)

    def press_right(self, now: Optional[float] = None) -> None:
        """Right button: start, pause or resume depending on the status."""
        with self._lock:
            now = self._now(now)
            status = self._record.status
            if status == TimerStatus.STOPPED:
                snapshot = self._start_locked(now)
            elif status == TimerStatus.RUNNING:
                snapshot = self._pause_locked(now)
            else:
                snapshot = self._resume_locked(now)
        self._notify(snapshot)

    def tick_update(self, now: Optional[float] = None, force: bool = False) -> TimerSnapshot:
        """Recompute the derived values at *now*.

        A running timer that has passed the expiry grace is reset, unless
        *force* is set, in which case the raw value is reported.
        """
        with self._lock:
            now = self._now(now)
            left = arithmetic.remaining(now, self._record.due_time, self._record.pause_anchor)
            expired = (
                not force
                and self._record.status != TimerStatus.STOPPED
                and left <= self._expiry_grace
            )
            if expired:
                logger.info("Timer expired")
                self._reset()
            else:
                self._recompute(now)
            snapshot = self._settle(expired)
        self._notify(snapshot)
        return snapshot

    # -- private helpers -----------------------------------------------------

    @staticmethod
    def _now(now: Optional[float]) -> float:
        return time.time() if now is None else now

    def _require_state(self, method: str, valid: frozenset[TimerStatus]) -> None:
        """Raise ``InvalidStateError`` if the current status is not in *valid*."""
        if self._record.status not in valid:
            raise InvalidStateError(f"{method}() is not valid from {self._record.status.value} state")

    def _restore(self, now: float) -> None:
        """Bring a freshly loaded record up to *now*."""
        record = self._record
        left = arithmetic.remaining(now, record.due_time, record.pause_anchor)
        if record.status != TimerStatus.STOPPED and left <= 0.0:
            logger.info("Stored timer already elapsed, resetting")
            self._reset()
        elif isinstance(record.state, Paused):
            due_time = arithmetic.shift_due_time(record.due_time, record.pause_anchor, now)
            self._record = replace(record, state=Paused(due_time=due_time, pause_anchor=now))
        self._recompute(now)
        self._settle()

    def _start_locked(self, now: float) -> Optional[TimerSnapshot]:
        if not self.can_start():
            logger.debug("Ignoring start with a %.2fs duration", self._record.configured_duration)
            return None
        due_time = now + self._record.configured_duration
        self._record = replace(self._record, state=Running(due_time=due_time))
        self._schedule_alarm(now)
        self._recompute(now)
        logger.info("Timer started, due at %.3f", due_time)
        return self._settle()

    def _pause_locked(self, now: float) -> TimerSnapshot:
        due_time = self._record.due_time
        self._record = replace(self._record, state=Paused(due_time=due_time, pause_anchor=now))
        self._alarm.cancel(ALARM_ID)
        self._recompute(now)
        logger.info("Timer paused with %.3fs remaining", self._remaining)
        return self._settle()

    def _resume_locked(self, now: float) -> TimerSnapshot:
        due_time = self._record.due_time
        pause_anchor = self._record.pause_anchor
        if due_time is None or pause_anchor is None:
            logger.warning("Paused timer is missing its anchors, resetting")
            self._reset()
        else:
            due_time = arithmetic.shift_due_time(due_time, pause_anchor, now)
            self._record = replace(self._record, state=Running(due_time=due_time))
            self._schedule_alarm(now)
            self._recompute(now)
        return self._settle()

    def _reset_locked(self) -> TimerSnapshot:
        self._reset()
        logger.info("Timer reset")
        return self._settle()

    def _reset(self) -> None:
        self._record = replace(self._record, state=Stopped())
        self._remaining = 0.0
        self._fraction = 1.0
        self._alarm.cancel(ALARM_ID)

    def _recompute(self, now: float) -> None:
        if self._record.status == TimerStatus.STOPPED:
            self._remaining, self._fraction = 0.0, 1.0
            return
        self._remaining = arithmetic.remaining(
            now, self._record.due_time, self._record.pause_anchor
        )
        self._fraction = arithmetic.remaining_fraction(
            self._remaining, self._record.configured_duration
        )

    def _schedule_alarm(self, now: float) -> None:
        left = arithmetic.remaining(now, self._record.due_time)
        self._alarm.schedule(
            ALARM_ID, left + ALARM_LEAD_SECONDS, ALARM_TITLE, self._record.sound_id
        )

    def _settle(self, expired: bool = False) -> TimerSnapshot:
        """Persist the record if it changed and return the new snapshot."""
        self._sequence += 1
        if self._record != self._saved:
            self._saved = self._record
            try:
                self._store.save(self._record)
            except OSError:
                logger.exception("Failed to save timer record")
        return TimerSnapshot(
            self._record, self._remaining, self._fraction, expired, self._sequence
        )

    def _notify(self, snapshot: Optional[TimerSnapshot]) -> None:
        if snapshot is None:
            return
        for listener in list(self._listeners):
            listener(snapshot)
