"""Cross-session "load this slot on next startup" intent.

The menu screen records which slot the player picked, the game screen picks
it up once on startup. Reading the intent clears it.
"""

import json
import threading
from abc import ABC, abstractmethod
from pathlib import Path

import structlog

from shared.storage import write_atomic

logger = structlog.get_logger()

SHOULD_LOAD_KEY = "ShouldLoadSave"
LOAD_SLOT_KEY = "LoadSlotNumber"


class SessionIntent(ABC):
    """Abstract interface for the pending auto-load signal."""

    @abstractmethod
    def set_pending_load(self, slot: int) -> None: ...

    @abstractmethod
    def take_pending_load(self) -> int | None:
        """Return the pending slot and clear it, or None when nothing is pending."""


class InMemorySessionIntent(SessionIntent):
    """Process-local intent, for tests and hosts that never restart between screens."""

    def __init__(self) -> None:
        self._pending: int | None = None

    def set_pending_load(self, slot: int) -> None:
        self._pending = slot

    def take_pending_load(self) -> int | None:
        slot, self._pending = self._pending, None
        return slot


class FileSessionIntent(SessionIntent):
    """Intent persisted as two keys in a small JSON key/value prefs file.

    Other keys in the same file belong to someone else and are preserved.
    An unreadable or malformed prefs file is treated as "nothing pending";
    losing an auto-load request is preferable to refusing to start.
    """

    def __init__(self, prefs_path: str | Path) -> None:
        self._prefs_path = Path(prefs_path)
        self._lock = threading.Lock()

    def set_pending_load(self, slot: int) -> None:
        with self._lock:
            prefs = self._read_prefs()
            prefs[SHOULD_LOAD_KEY] = 1
            prefs[LOAD_SLOT_KEY] = slot
            self._write_prefs(prefs)
        logger.debug("pending load set", slot=slot)

    def take_pending_load(self) -> int | None:
        with self._lock:
            prefs = self._read_prefs()
            should_load = prefs.pop(SHOULD_LOAD_KEY, 0) == 1
            slot = prefs.pop(LOAD_SLOT_KEY, None)
            if not should_load:
                return None
            self._write_prefs(prefs)

        if isinstance(slot, bool) or not isinstance(slot, int) or slot < 1:
            logger.warning("ignoring pending load with invalid slot", slot=slot)
            return None
        logger.debug("pending load taken", slot=slot)
        return slot

    def _read_prefs(self) -> dict[str, object]:
        if not self._prefs_path.exists():
            return {}
        try:
            data = json.loads(self._prefs_path.read_text(encoding="utf-8"))
        except (json.JSONDecodeError, UnicodeDecodeError, OSError):
            logger.warning("could not read prefs file, starting empty", path=self._prefs_path)
            return {}
        if not isinstance(data, dict):
            logger.warning("prefs file root is not an object, starting empty", path=self._prefs_path)
            return {}
        return data

    def _write_prefs(self, prefs: dict[str, object]) -> None:
        self._prefs_path.parent.mkdir(parents=True, exist_ok=True)
        write_atomic(self._prefs_path, json.dumps(prefs, indent=2).encode("utf-8"), prefix=".prefs_")
