"""Timer record — the durable facts a timer is rebuilt from."""

from __future__ import annotations

import logging
from dataclasses import dataclass, field
from enum import Enum
from typing import Any, Optional, Union

logger = logging.getLogger(__name__)

DEFAULT_DURATION = 600.0


class TimerStatus(Enum):
    """Possible states of the timer."""

    STOPPED = "stopped"
    RUNNING = "running"
    PAUSED = "paused"


@dataclass(frozen=True)
class Stopped:
    """No countdown in progress."""

    @property
    def status(self) -> TimerStatus:
        return TimerStatus.STOPPED


@dataclass(frozen=True)
class Running:
    """Counting down towards an absolute *due_time*."""

    due_time: float

    @property
    def status(self) -> TimerStatus:
        return TimerStatus.RUNNING


@dataclass(frozen=True)
class Paused:
    """Countdown frozen since *pause_anchor*; *due_time* has not been moved yet."""

    due_time: float
    pause_anchor: float

    @property
    def status(self) -> TimerStatus:
        return TimerStatus.PAUSED


TimerState = Union[Stopped, Running, Paused]


@dataclass(frozen=True)
class TimerRecord:
    """Everything that is persisted about the timer.

    The status-dependent instants live on *state*, so a stopped record can
    never carry a due time and a running one can never carry a pause anchor.
    """

    state: TimerState = field(default_factory=Stopped)
    configured_duration: float = DEFAULT_DURATION
    sound_id: Optional[int] = None

    @property
    def status(self) -> TimerStatus:
        return self.state.status

    @property
    def due_time(self) -> Optional[float]:
        return getattr(self.state, "due_time", None)

    @property
    def pause_anchor(self) -> Optional[float]:
        return getattr(self.state, "pause_anchor", None)

    # -- codec ---------------------------------------------------------------

    def to_dict(self) -> dict[str, Any]:
        """Return a JSON-serialisable mapping of the record."""
        return {
            "status": self.status.value,
            "due_time": self.due_time,
            "pause_anchor": self.pause_anchor,
            "configured_duration": self.configured_duration,
            "sound_id": self.sound_id,
        }

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> TimerRecord:
        """Build a record from :meth:`to_dict` output.

        Fields that contradict the stored status degrade the record to
        Stopped; the configured duration and sound survive.
        """
        duration = max(float(data.get("configured_duration", DEFAULT_DURATION)), 0.0)
        sound_id = data.get("sound_id")
        if sound_id is not None:
            sound_id = int(sound_id)
        due_time = data.get("due_time")
        pause_anchor = data.get("pause_anchor")

        try:
            status = TimerStatus(data.get("status", TimerStatus.STOPPED.value))
        except ValueError:
            logger.warning("Unknown timer status %r, treating as stopped", data.get("status"))
            status = TimerStatus.STOPPED

        state: TimerState = Stopped()
        if status == TimerStatus.RUNNING and due_time is not None:
            state = Running(due_time=float(due_time))
        elif status == TimerStatus.PAUSED and due_time is not None and pause_anchor is not None:
            state = Paused(due_time=float(due_time), pause_anchor=float(pause_anchor))
        elif status != TimerStatus.STOPPED:
            logger.warning("Inconsistent %s timer record, treating as stopped", status.value)

        return cls(state=state, configured_duration=duration, sound_id=sound_id)
