"""Tests for the display projection."""

from datetime import timezone

import pytest

from clocktimer.core.display import (
    Emphasis,
    duration_to_hms,
    format_due_time,
    format_remaining,
    hms_to_duration,
    project,
)
from clocktimer.core.record import Paused, Running, TimerRecord
from clocktimer.core.sounds import DEFAULT_SOUND_NAME, SoundCatalog
from clocktimer.core.timer import TimerSnapshot

# ---------------------------------------------------------------------------
# Formatting
# ---------------------------------------------------------------------------


class TestFormatting:
    @pytest.mark.parametrize(
        "seconds, expected",
        [
            (590.0, "09:50"),
            (5.9, "00:05"),
            (0.0, "00:00"),
            (-0.4, "00:00"),
            (3600.0, "1:00:00"),
            (3725.0, "1:02:05"),
            (36000.0, "10:00:00"),
        ],
    )
    def test_format_remaining(self, seconds: float, expected: str) -> None:
        assert format_remaining(seconds) == expected

    @pytest.mark.parametrize(
        "timestamp, expected",
        [
            (0.0, "12:00 AM"),
            (13 * 3600 + 5 * 60, "1:05 PM"),
            (11 * 3600 + 59 * 60, "11:59 AM"),
            (12 * 3600, "12:00 PM"),
        ],
    )
    def test_format_due_time(self, timestamp: float, expected: str) -> None:
        assert format_due_time(timestamp, timezone.utc) == expected

    def test_format_due_time_with_custom_format(self) -> None:
        assert format_due_time(13 * 3600 + 5 * 60, timezone.utc, "%H:%M") == "13:05"
        assert format_due_time(None, timezone.utc, "%H:%M") == ""

    def test_format_missing_due_time(self) -> None:
        assert format_due_time(None) == ""

    def test_picker_values(self) -> None:
        assert duration_to_hms(3725.0) == (1, 2, 5)
        assert duration_to_hms(600.0) == (0, 10, 0)
        assert hms_to_duration(1, 2, 5) == 3725.0


# ---------------------------------------------------------------------------
# project()
# ---------------------------------------------------------------------------


class TestProject:
    sounds = SoundCatalog()

    def test_stopped(self) -> None:
        display = project(TimerSnapshot(TimerRecord(), 0.0, 1.0), self.sounds, timezone.utc)
        assert display.left_enabled is False
        assert (display.right_label, display.right_emphasis) == ("Start", Emphasis.AFFIRMATIVE)
        assert display.right_enabled is True
        assert display.due_label == ""
        assert display.due_paused is False
        assert display.remaining_label == "00:00"
        assert display.remaining_fraction == 1.0
        assert display.sound_label == DEFAULT_SOUND_NAME
        assert display.picker_visible is True

    def test_running(self) -> None:
        record = TimerRecord(state=Running(due_time=13 * 3600 + 5 * 60), sound_id=0)
        display = project(TimerSnapshot(record, 590.0, 590.0 / 600.0), self.sounds, timezone.utc)
        assert display.left_enabled is True
        assert (display.right_label, display.right_emphasis) == ("Pause", Emphasis.CRITICAL)
        assert display.due_label == "1:05 PM"
        assert display.due_paused is False
        assert display.remaining_label == "09:50"
        assert display.sound_label == "Radar"
        assert display.picker_visible is False

    def test_running_with_24_hour_due_label(self) -> None:
        record = TimerRecord(state=Running(due_time=13 * 3600 + 5 * 60))
        snapshot = TimerSnapshot(record, 590.0, 590.0 / 600.0)
        display = project(snapshot, self.sounds, timezone.utc, "%H:%M")
        assert display.due_label == "13:05"

    def test_paused(self) -> None:
        record = TimerRecord(state=Paused(due_time=600.0, pause_anchor=10.0))
        display = project(TimerSnapshot(record, 590.0, 590.0 / 600.0), self.sounds, timezone.utc)
        assert (display.right_label, display.right_emphasis) == ("Resume", Emphasis.AFFIRMATIVE)
        assert display.due_paused is True
        assert display.left_enabled is True

    def test_zero_duration_disables_right_button(self) -> None:
        record = TimerRecord(configured_duration=0.0)
        display = project(TimerSnapshot(record, 0.0, 1.0), self.sounds)
        assert display.right_enabled is False


class TestSoundCatalog:
    def test_lookup(self) -> None:
        catalog = SoundCatalog(["Bell", "Gong"])
        assert catalog.name_for(1) == "Gong"
        assert catalog.name_for(None) is None
        assert catalog.name_for(5) is None
        assert catalog.label_for(5) == DEFAULT_SOUND_NAME
        assert catalog.items() == [(0, "Bell"), (1, "Gong")]
