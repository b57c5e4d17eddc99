"""Alarm bridge — the one-shot notification that fires when the timer ends."""

from __future__ import annotations

import logging
from typing import Optional, Protocol

logger = logging.getLogger(__name__)

ALARM_ID = "ClockTimerNotification"
ALARM_TITLE = "Timer"

# Fire slightly after the due time so the expiry grace window has elapsed.
ALARM_LEAD_SECONDS = 0.5


class AlarmScheduler(Protocol):
    """Delivers a single reminder; calls are idempotent per *alarm_id*."""

    def schedule(
        self, alarm_id: str, fire_in: float, title: str, sound_id: Optional[int]
    ) -> None: ...

    def cancel(self, alarm_id: str) -> None: ...


class LoggingAlarm:
    """Alarm scheduler that only records what would be delivered.

    Used where no notification service exists, e.g. from the command line.
    """

    def schedule(
        self, alarm_id: str, fire_in: float, title: str, sound_id: Optional[int]
    ) -> None:
        logger.info(
            "Alarm %s scheduled in %.1fs (title=%r, sound=%s)", alarm_id, fire_in, title, sound_id
        )

    def cancel(self, alarm_id: str) -> None:
        logger.info("Alarm %s cancelled", alarm_id)
