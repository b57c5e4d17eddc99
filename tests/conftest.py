"""Shared fakes for the timer's collaborators."""

from __future__ import annotations

from typing import Optional

import pytest

from clocktimer.core.store import MemoryTimerStore


class FakeAlarm:
    """Records every schedule/cancel call in order."""

    def __init__(self) -> None:
        self.calls: list[tuple] = []

    def schedule(
        self, alarm_id: str, fire_in: float, title: str, sound_id: Optional[int]
    ) -> None:
        self.calls.append(("schedule", alarm_id, fire_in, title, sound_id))

    def cancel(self, alarm_id: str) -> None:
        self.calls.append(("cancel", alarm_id))

    @property
    def last(self) -> tuple:
        return self.calls[-1]


@pytest.fixture()
def alarm() -> FakeAlarm:
    return FakeAlarm()


@pytest.fixture()
def store() -> MemoryTimerStore:
    return MemoryTimerStore()
