"""Display projection — turns a timer snapshot into screen-facing values."""

from __future__ import annotations

from dataclasses import dataclass
from datetime import datetime, tzinfo
from enum import Enum
from typing import Optional

from clocktimer.core.record import TimerStatus
from clocktimer.core.sounds import SoundCatalog
from clocktimer.core.timer import MIN_START_DURATION, TimerSnapshot


class Emphasis(Enum):
    """How the right-hand button is tinted."""

    AFFIRMATIVE = "affirmative"
    CRITICAL = "critical"


_RIGHT_BUTTON = {
    TimerStatus.STOPPED: ("Start", Emphasis.AFFIRMATIVE),
    TimerStatus.RUNNING: ("Pause", Emphasis.CRITICAL),
    TimerStatus.PAUSED: ("Resume", Emphasis.AFFIRMATIVE),
}


def format_remaining(seconds: float) -> str:
    """Format *seconds* as ``MM:SS``, or ``H:MM:SS`` from one hour up.

    Negative values (inside the expiry grace) show as zero.
    """
    total = max(int(seconds), 0)
    hours, rest = divmod(total, 3600)
    minutes, secs = divmod(rest, 60)
    if hours:
        return f"{hours}:{minutes:02d}:{secs:02d}"
    return f"{minutes:02d}:{secs:02d}"


def format_due_time(
    timestamp: Optional[float],
    tz: Optional[tzinfo] = None,
    time_format: Optional[str] = None,
) -> str:
    """Format *timestamp* as a short clock time such as ``3:05 PM``.

    Uses local time unless *tz* is given; ``None`` gives an empty label.
    A *time_format* (``strftime`` codes, e.g. ``"%H:%M"``) replaces the
    12-hour default.
    """
    if timestamp is None:
        return ""
    moment = datetime.fromtimestamp(timestamp, tz)
    if time_format is not None:
        return moment.strftime(time_format)
    hour = moment.hour % 12 or 12
    suffix = "AM" if moment.hour < 12 else "PM"
    return f"{hour}:{moment.minute:02d} {suffix}"


def duration_to_hms(seconds: float) -> tuple[int, int, int]:
    """Split *seconds* into picker wheels ``(hours, minutes, seconds)``."""
    total = max(int(seconds), 0)
    return total // 3600, (total // 60) % 60, total % 60


def hms_to_duration(hours: int, minutes: int, seconds: int) -> float:
    return float(hours * 3600 + minutes * 60 + seconds)


@dataclass(frozen=True)
class DisplayState:
    """Everything the timer screen renders."""

    left_enabled: bool
    right_label: str
    right_emphasis: Emphasis
    right_enabled: bool
    due_label: str
    due_paused: bool
    remaining_label: str
    remaining_fraction: float
    sound_label: str
    picker_visible: bool


def project(
    snapshot: TimerSnapshot,
    sounds: SoundCatalog,
    tz: Optional[tzinfo] = None,
    time_format: Optional[str] = None,
) -> DisplayState:
    """Map *snapshot* to the values shown on screen."""
    record = snapshot.record
    status = record.status
    right_label, right_emphasis = _RIGHT_BUTTON[status]
    return DisplayState(
        left_enabled=status != TimerStatus.STOPPED,
        right_label=right_label,
        right_emphasis=right_emphasis,
        right_enabled=record.configured_duration > MIN_START_DURATION,
        due_label=format_due_time(record.due_time, tz, time_format),
        due_paused=status == TimerStatus.PAUSED,
        remaining_label=format_remaining(snapshot.remaining),
        remaining_fraction=snapshot.remaining_fraction,
        sound_label=sounds.label_for(record.sound_id),
        picker_visible=status == TimerStatus.STOPPED,
    )
