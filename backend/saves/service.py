"""Save slot facade consumed by the menu and game screens."""

from __future__ import annotations

from typing import TYPE_CHECKING

import structlog

from saves.models import DeleteOutcome, SaveRecord

if TYPE_CHECKING:
    from saves.models import SlotDescriptor
    from saves.session_intent import SessionIntent
    from saves.store import SlotStore

logger = structlog.get_logger()

DEFAULT_SLOT_COUNT = 3


class SaveService:
    """Coordinate slot persistence and the pending auto-load intent.

    Constructed once by the composition root and handed to the screens that
    need it; there is no process-wide instance.
    """

    def __init__(
        self,
        store: SlotStore,
        session_intent: SessionIntent,
        *,
        slot_count: int = DEFAULT_SLOT_COUNT,
    ) -> None:
        if slot_count < 1:
            raise ValueError(f"slot_count must be positive, got {slot_count}")
        self._store = store
        self._intent = session_intent
        self._slot_count = slot_count

    @property
    def slot_numbers(self) -> range:
        return range(1, self._slot_count + 1)

    def save_slot(self, slot: int, record: SaveRecord) -> bool:
        return self._store.save(slot, record).ok

    def save_progress(
        self,
        slot: int,
        score: int,
        score_per_click_level: int,
        prestige_level: int,
        base_multiplier: int,
    ) -> bool:
        """Snapshot the live game values into a new record and save it."""
        record = SaveRecord.capture(score, score_per_click_level, prestige_level, base_multiplier)
        return self.save_slot(slot, record)

    def load_slot(self, slot: int) -> SlotDescriptor:
        return self._store.load(slot)

    def slot_exists(self, slot: int) -> bool:
        return self._store.exists(slot)

    def describe_slot(self, slot: int) -> str:
        return self._store.describe(slot)

    def describe_slots(self) -> dict[int, str]:
        return {slot: self._store.describe(slot) for slot in self.slot_numbers}

    def delete_slot(self, slot: int) -> bool:
        """Return True only when a save file was actually removed."""
        return self._store.delete(slot).outcome == DeleteOutcome.DELETED

    def set_pending_load(self, slot: int) -> bool:
        """Ask the next game session to load this slot on startup."""
        self._store.slot_path(slot)  # validates the slot number
        try:
            self._intent.set_pending_load(slot)
        except OSError:
            logger.exception("failed to record pending load", slot=slot)
            return False
        return True

    def take_pending_load(self) -> int | None:
        try:
            return self._intent.take_pending_load()
        except OSError:
            logger.exception("failed to clear pending load")
            return None

    def resume_pending(self) -> SlotDescriptor | None:
        """Consume the pending intent and load that slot, or None if nothing was pending."""
        slot = self.take_pending_load()
        if slot is None:
            return None
        logger.info("auto-loading slot", slot=slot)
        return self._store.load(slot)
