"""Tick controller — redraw cadence for a running timer."""

from __future__ import annotations

import logging
import threading
from typing import Callable, Optional

logger = logging.getLogger(__name__)

FRAMES_PER_SECOND = 23.976


class TickController:
    """Calls *callback* at a fixed visual cadence until stopped.

    Precision comes from the anchor-based arithmetic, not from this loop, so
    late or skipped ticks only cost smoothness.  At most one loop is alive:
    :meth:`start` cancels the previous one before installing a new one.
    """

    def __init__(self, callback: Callable[[], object], fps: float = FRAMES_PER_SECOND) -> None:
        if fps <= 0:
            raise ValueError(f"fps must be positive, got {fps}")
        self._callback = callback
        self._interval = 1.0 / fps
        self._lock = threading.Lock()
        self._thread: Optional[threading.Thread] = None
        self._cancel: Optional[threading.Event] = None

    @property
    def interval(self) -> float:
        return self._interval

    @property
    def is_ticking(self) -> bool:
        with self._lock:
            return self._thread is not None and self._thread.is_alive()

    def start(self) -> None:
        """Replace any running loop with a fresh one."""
        with self._lock:
            self._stop_locked()
            cancel = threading.Event()
            thread = threading.Thread(
                target=self._loop, args=(cancel,), daemon=True, name="clocktimer-tick"
            )
            self._cancel, self._thread = cancel, thread
            thread.start()
        logger.debug("Ticking every %.4fs", self._interval)

    def stop(self) -> None:
        """Cancel the live loop, if any.  Safe to call from the loop itself."""
        with self._lock:
            self._stop_locked()

    def _stop_locked(self) -> None:
        thread, cancel = self._thread, self._cancel
        self._thread = self._cancel = None
        if cancel is None:
            return
        cancel.set()
        if thread is not None and thread is not threading.current_thread():
            thread.join(timeout=self._interval * 4)

    def _loop(self, cancel: threading.Event) -> None:
        while not cancel.wait(self._interval):
            try:
                self._callback()
            except Exception:
                logger.exception("Tick callback failed")
                cancel.set()
