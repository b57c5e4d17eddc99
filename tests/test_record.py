"""Tests for the timer record and its dict codec."""

import pytest

from clocktimer.core.record import (
    DEFAULT_DURATION,
    Paused,
    Running,
    Stopped,
    TimerRecord,
    TimerStatus,
)

# ---------------------------------------------------------------------------
# Field co-presence
# ---------------------------------------------------------------------------


class TestRecordFields:
    def test_default_record(self) -> None:
        record = TimerRecord()
        assert record.status == TimerStatus.STOPPED
        assert record.configured_duration == DEFAULT_DURATION == 600.0
        assert record.sound_id is None

    @pytest.mark.parametrize(
        "state, status, due, anchor",
        [
            (Stopped(), TimerStatus.STOPPED, None, None),
            (Running(due_time=1600.0), TimerStatus.RUNNING, 1600.0, None),
            (Paused(due_time=1600.0, pause_anchor=1010.0), TimerStatus.PAUSED, 1600.0, 1010.0),
        ],
    )
    def test_status_determines_instants(self, state, status, due, anchor) -> None:
        record = TimerRecord(state=state)
        assert record.status == status
        assert record.due_time == due
        assert record.pause_anchor == anchor


# ---------------------------------------------------------------------------
# Codec
# ---------------------------------------------------------------------------


class TestRecordCodec:
    def test_to_dict(self) -> None:
        record = TimerRecord(
            state=Paused(due_time=1600.0, pause_anchor=1010.0),
            configured_duration=600.0,
            sound_id=4,
        )
        assert record.to_dict() == {
            "status": "paused",
            "due_time": 1600.0,
            "pause_anchor": 1010.0,
            "configured_duration": 600.0,
            "sound_id": 4,
        }

    def test_from_dict_running(self) -> None:
        record = TimerRecord.from_dict(
            {"status": "running", "due_time": 1600, "configured_duration": 90, "sound_id": 2}
        )
        assert record == TimerRecord(
            state=Running(due_time=1600.0), configured_duration=90.0, sound_id=2
        )

    def test_from_empty_dict_is_default(self) -> None:
        assert TimerRecord.from_dict({}) == TimerRecord()

    def test_paused_without_anchor_degrades_to_stopped(self) -> None:
        record = TimerRecord.from_dict(
            {"status": "paused", "due_time": 1600.0, "configured_duration": 300.0, "sound_id": 1}
        )
        assert record.status == TimerStatus.STOPPED
        assert record.due_time is None
        assert record.configured_duration == 300.0
        assert record.sound_id == 1

    def test_running_without_due_time_degrades_to_stopped(self) -> None:
        record = TimerRecord.from_dict({"status": "running"})
        assert record.status == TimerStatus.STOPPED

    def test_unknown_status_degrades_to_stopped(self) -> None:
        record = TimerRecord.from_dict({"status": "exploded", "due_time": 1.0})
        assert record.status == TimerStatus.STOPPED

    def test_negative_duration_is_clamped(self) -> None:
        assert TimerRecord.from_dict({"configured_duration": -5}).configured_duration == 0.0
