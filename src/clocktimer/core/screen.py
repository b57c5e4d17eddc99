"""Timer screen — wires input events, ticking and display updates together."""

from __future__ import annotations

import logging
import threading
from dataclasses import fields
from datetime import tzinfo
from typing import Callable, Optional

from clocktimer.core.display import DisplayState, duration_to_hms, hms_to_duration, project
from clocktimer.core.record import TimerStatus
from clocktimer.core.sounds import SoundCatalog
from clocktimer.core.ticker import FRAMES_PER_SECOND, TickController
from clocktimer.core.timer import TimerEngine, TimerSnapshot

logger = logging.getLogger(__name__)

DisplayListener = Callable[[DisplayState, frozenset], None]
PickerListener = Callable[[tuple[int, int, int]], None]


def _changed_fields(old: Optional[DisplayState], new: DisplayState) -> frozenset:
    """Names of the fields of *new* that differ from *old* (all of them if *old* is None)."""
    names = [f.name for f in fields(DisplayState)]
    if old is None:
        return frozenset(names)
    return frozenset(name for name in names if getattr(old, name) != getattr(new, name))


def _unsubscriber(listeners: list, listener: object) -> Callable[[], None]:
    def unsubscribe() -> None:
        if listener in listeners:
            listeners.remove(listener)

    return unsubscribe


class TimerScreen:
    """View-model for the timer screen.

    Display listeners receive the full :class:`DisplayState` plus the names
    of the fields that changed; a publish with nothing changed is dropped,
    so an unchanged remaining-time label is never sent twice in a row.
    Ticking runs exactly while the engine is RUNNING and the screen is live.
    Snapshots are applied in engine order; a late one from the tick thread
    is dropped.
    """

    def __init__(
        self,
        engine: TimerEngine,
        sounds: Optional[SoundCatalog] = None,
        *,
        fps: float = FRAMES_PER_SECOND,
        tz: Optional[tzinfo] = None,
        time_format: Optional[str] = None,
    ) -> None:
        self._engine = engine
        self._sounds = sounds if sounds is not None else SoundCatalog()
        self._tz = tz
        self._time_format = time_format
        self._lock = threading.RLock()
        self._sequence = -1
        self._ticker = TickController(self._tick, fps)
        self._display: Optional[DisplayState] = None
        self._status = TimerStatus.STOPPED
        self._listeners: list[DisplayListener] = []
        self._picker_listeners: list[PickerListener] = []
        self._unsubscribe = engine.subscribe(self._on_snapshot)
        self._on_snapshot(engine.snapshot())

    @property
    def display(self) -> Optional[DisplayState]:
        return self._display

    @property
    def picker_values(self) -> tuple[int, int, int]:
        return duration_to_hms(self._engine.record.configured_duration)

    @property
    def is_ticking(self) -> bool:
        return self._ticker.is_ticking

    def subscribe(self, listener: DisplayListener) -> Callable[[], None]:
        self._listeners.append(listener)
        return _unsubscriber(self._listeners, listener)

    def subscribe_picker(self, listener: PickerListener) -> Callable[[], None]:
        self._picker_listeners.append(listener)
        return _unsubscriber(self._picker_listeners, listener)

    # -- input events --------------------------------------------------------

    def view_appeared(self) -> None:
        """Resume ticking, or refresh once when the timer is not running."""
        if self._engine.status == TimerStatus.RUNNING:
            self._ticker.start()
        else:
            self._engine.tick_update(force=True)
            self._push_picker()

    def view_disappeared(self) -> None:
        self._ticker.stop()

    def press_left(self) -> None:
        self._engine.press_left()

    def press_right(self) -> None:
        self._engine.press_right()

    def sound_changed(self, sound_id: Optional[int]) -> None:
        self._engine.set_sound_id(sound_id)

    def duration_changed(self, hours: int, minutes: int, seconds: int) -> None:
        self._engine.set_configured_duration(hms_to_duration(hours, minutes, seconds))

    def close(self) -> None:
        """Stop ticking and detach from the engine."""
        self._ticker.stop()
        self._unsubscribe()

    # -- private helpers -----------------------------------------------------

    def _tick(self) -> None:
        self._engine.tick_update()

    def _on_snapshot(self, snapshot: TimerSnapshot) -> None:
        with self._lock:
            # The tick thread may deliver a snapshot after a newer one from an input event.
            if snapshot.sequence <= self._sequence:
                logger.debug("Dropping stale timer snapshot %d", snapshot.sequence)
                return
            self._sequence = snapshot.sequence
            if snapshot.status != self._status:
                self._status = snapshot.status
                if snapshot.status == TimerStatus.RUNNING:
                    self._ticker.start()
                else:
                    self._ticker.stop()
                if snapshot.status == TimerStatus.STOPPED:
                    self._push_picker()
            self._publish(snapshot)

    def _publish(self, snapshot: TimerSnapshot) -> None:
        display = project(snapshot, self._sounds, self._tz, self._time_format)
        changed = _changed_fields(self._display, display)
        self._display = display
        if not changed:
            return
        for listener in list(self._listeners):
            listener(display, changed)

    def _push_picker(self) -> None:
        values = self.picker_values
        for listener in list(self._picker_listeners):
            listener(values)
