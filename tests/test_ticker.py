"""Tests for the tick controller."""

import threading

import pytest

from clocktimer.core.ticker import FRAMES_PER_SECOND, TickController


def _tick_threads() -> list:
    return [t for t in threading.enumerate() if t.name == "clocktimer-tick"]


class TestTickController:
    def test_default_cadence(self) -> None:
        controller = TickController(lambda: None)
        assert controller.interval == pytest.approx(1.0 / FRAMES_PER_SECOND)

    def test_invalid_fps_raises(self) -> None:
        with pytest.raises(ValueError):
            TickController(lambda: None, fps=0)

    def test_ticks_until_stopped(self) -> None:
        ticked = threading.Event()
        count = []

        def callback() -> None:
            count.append(1)
            if len(count) >= 3:
                ticked.set()

        controller = TickController(callback, fps=200)
        controller.start()
        assert ticked.wait(5)
        controller.stop()
        assert controller.is_ticking is False
        seen = len(count)
        assert not threading.Event().wait(0.05)
        assert len(count) == seen

    def test_restart_keeps_a_single_loop(self) -> None:
        before = set(_tick_threads())
        controller = TickController(lambda: None, fps=200)
        controller.start()
        controller.start()
        controller.start()
        live = [t for t in _tick_threads() if t not in before]
        assert len(live) == 1
        controller.stop()
        assert not live[0].is_alive()

    def test_stop_is_idempotent(self) -> None:
        controller = TickController(lambda: None)
        controller.stop()
        controller.stop()
        assert controller.is_ticking is False

    def test_stop_from_inside_callback(self) -> None:
        stopped = threading.Event()

        def callback() -> None:
            controller.stop()
            stopped.set()

        controller = TickController(callback, fps=200)
        controller.start()
        assert stopped.wait(5)
        assert not threading.Event().wait(0.05)
        assert controller.is_ticking is False

    def test_failing_callback_stops_loop(self) -> None:
        calls = []

        def callback() -> None:
            calls.append(1)
            raise RuntimeError("boom")

        controller = TickController(callback, fps=200)
        controller.start()
        assert not threading.Event().wait(0.1)
        assert len(calls) == 1
        controller.stop()
