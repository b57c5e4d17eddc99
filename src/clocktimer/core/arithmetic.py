"""Time arithmetic — pure functions over absolute anchor times.

All instants are POSIX timestamps in seconds.  Remaining time is always
derived from the due time rather than decremented per tick, so irregular
polling never accumulates error.
"""

from __future__ import annotations


def remaining(now: float, due_time: float | None, pause_anchor: float | None = None) -> float:
    """Return the seconds left until *due_time* as seen at *now*.

    While paused the due time does not move, so the time elapsed since
    *pause_anchor* is added back.  Without a due time the result is 0.
    """
    if due_time is None:
        return 0.0
    if pause_anchor is None:
        return due_time - now
    # due_time + (now - pause_anchor) - now, without the rounding noise of now
    return due_time - pause_anchor


def remaining_fraction(remaining_seconds: float, configured_duration: float) -> float:
    """Return *remaining_seconds* as a fraction of *configured_duration*.

    Not clamped: a negative value signals expiry to the caller.
    """
    if configured_duration <= 0.0:
        return 0.0
    return remaining_seconds / configured_duration


def shift_due_time(due_time: float, pause_anchor: float, now: float) -> float:
    """Move *due_time* forward by exactly the interval paused since *pause_anchor*."""
    return due_time + (now - pause_anchor)
