"""Persistence bridge — saves and restores the single timer record."""

from __future__ import annotations

import fcntl
import json
import logging
from concurrent.futures import ThreadPoolExecutor
from pathlib import Path
from typing import Optional, Protocol

from clocktimer.core.record import TimerRecord

logger = logging.getLogger(__name__)

_DEFAULT_CONFIG_DIR = Path.home() / ".config" / "clocktimer"
_STATE_FILE = "timer.json"


class TimerStore(Protocol):
    """Overwrite-semantics storage for one :class:`TimerRecord`."""

    def save(self, record: TimerRecord) -> None: ...

    def load(self) -> Optional[TimerRecord]: ...


class JsonTimerStore:
    """Keeps the record in ``<config_dir>/timer.json`` with file locking."""

    def __init__(self, config_dir: Path | None = None) -> None:
        self._config_dir: Path = config_dir if config_dir is not None else _DEFAULT_CONFIG_DIR

    @property
    def path(self) -> Path:
        return self._config_dir / _STATE_FILE

    def save(self, record: TimerRecord) -> None:
        """Write *record* to the JSON file, replacing any previous one."""
        self._config_dir.mkdir(parents=True, exist_ok=True)
        with open(self.path, "w") as f:
            fcntl.flock(f, fcntl.LOCK_EX)
            json.dump(record.to_dict(), f)
        logger.debug("Saved timer record to %s", self.path)

    def load(self) -> Optional[TimerRecord]:
        """Return the stored record, or ``None`` if there is none or it is unreadable."""
        path = self.path
        if not path.exists():
            return None

        with open(path, encoding="utf-8") as f:
            fcntl.flock(f, fcntl.LOCK_SH)
            try:
                data = json.load(f)
            except ValueError:
                logger.warning("Ignoring corrupt timer state file %s", path)
                return None

        if not isinstance(data, dict):
            logger.warning("Ignoring malformed timer state file %s", path)
            return None
        try:
            return TimerRecord.from_dict(data)
        except (ValueError, TypeError):
            logger.warning("Ignoring timer state file %s with invalid fields", path)
            return None


class MemoryTimerStore:
    """In-process store; keeps the last saved record."""

    def __init__(self, record: Optional[TimerRecord] = None) -> None:
        self.record = record
        self.saves = 0

    def save(self, record: TimerRecord) -> None:
        self.record = record
        self.saves += 1

    def load(self) -> Optional[TimerRecord]:
        return self.record


class BackgroundStore:
    """Dispatches saves to a single background worker.

    Saves are fire-and-forget and applied in submission order.  A failing
    save is logged and dropped; the timer never rolls back because of it.
    """

    def __init__(self, store: TimerStore) -> None:
        self._store = store
        self._executor = ThreadPoolExecutor(max_workers=1, thread_name_prefix="clocktimer-save")

    def save(self, record: TimerRecord) -> None:
        self._executor.submit(self._write, record)

    def load(self) -> Optional[TimerRecord]:
        return self._store.load()

    def close(self) -> None:
        """Wait for pending saves to finish and stop the worker."""
        self._executor.shutdown(wait=True)

    def __enter__(self) -> BackgroundStore:
        return self

    def __exit__(self, *exc_info: object) -> None:
        self.close()

    def _write(self, record: TimerRecord) -> None:
        try:
            self._store.save(record)
        except Exception:
            logger.exception("Failed to save timer record")
