"""Numbered save slots stored as individual files in one directory.

Each slot maps to ``SaveSlot<N>.json`` inside the managed directory, so two
stores pointed at the same directory see the same slots. Files are replaced
atomically via temp-file-then-rename; a reader never observes a half-written
save.

Filesystem failures are reported through result objects and slot
descriptors rather than raised, so a broken disk cannot take the game down
with it. Only an invalid slot number raises (TypeError or ValueError).
"""

from __future__ import annotations

import threading
from pathlib import Path

import structlog

from saves.codec import SAVE_SECRET_KEY, DecodeOutcome, decode, encode
from saves.models import (
    CorruptionReason,
    DeleteOutcome,
    DeleteResult,
    SaveRecord,
    SaveResult,
    SlotDescriptor,
    SlotState,
)
from shared.storage import write_atomic

logger = structlog.get_logger()

SLOT_FILE_PREFIX = "SaveSlot"
SLOT_FILE_SUFFIX = ".json"
SAVE_TEMP_PREFIX = ".save_"

EMPTY_SLOT_TEXT = "Empty Slot"
CORRUPTED_SLOT_TEXT = "Corrupted"
UNREADABLE_SLOT_TEXT = "Error Reading Slot"

# "yyyy-MM-dd HH:mm" -- seconds are dropped in slot summaries.
_SUMMARY_TIMESTAMP_LENGTH = 16


def slot_file_name(slot: int) -> str:
    return f"{SLOT_FILE_PREFIX}{slot}{SLOT_FILE_SUFFIX}"


def _validate_slot(slot: int) -> None:
    if isinstance(slot, bool) or not isinstance(slot, int):
        raise TypeError(f"Slot number must be an int, got {type(slot).__name__}")
    if slot < 1:
        raise ValueError(f"Slot number must be positive, got {slot}")


def describe_descriptor(descriptor: SlotDescriptor) -> str:
    """Render a slot descriptor as the short multi-line summary shown in slot menus."""
    record = descriptor.record
    match descriptor.state:
        case SlotState.SECURE if record is not None:
            return (
                f"Score: {record.score}\n"
                f"Click Lv: {record.score_per_click_level} | Prestige: {record.prestige_level}\n"
                f"{record.saved_at_text[:_SUMMARY_TIMESTAMP_LENGTH]}"
            )
        case SlotState.LEGACY if record is not None:
            return f"Score: {record.score}\nLegacy Save\n{record.saved_at_text[:_SUMMARY_TIMESTAMP_LENGTH]}"
        case SlotState.CORRUPTED if descriptor.reason == CorruptionReason.READ_FAILED:
            return UNREADABLE_SLOT_TEXT
        case SlotState.CORRUPTED:
            return CORRUPTED_SLOT_TEXT
        case _:
            return EMPTY_SLOT_TEXT


class SlotStore:
    """Save, load, delete and describe numbered save slots.

    Operations on the same slot are serialized with a per-slot lock, so a
    single store can be shared between threads. Different slots never block
    each other.
    """

    def __init__(self, save_dir: str | Path, *, secret_key: str = SAVE_SECRET_KEY) -> None:
        if not secret_key:
            raise ValueError("secret_key must not be empty")
        self._save_dir = Path(save_dir)
        self._secret_key = secret_key
        self._locks: dict[int, threading.Lock] = {}
        self._locks_guard = threading.Lock()

    @property
    def save_dir(self) -> Path:
        return self._save_dir

    def slot_path(self, slot: int) -> Path:
        _validate_slot(slot)
        return self._save_dir / slot_file_name(slot)

    def _slot_lock(self, slot: int) -> threading.Lock:
        with self._locks_guard:
            lock = self._locks.get(slot)
            if lock is None:
                lock = self._locks[slot] = threading.Lock()
            return lock

    def ensure_directory(self) -> None:
        """Create the save directory if it does not exist yet. Idempotent."""
        if self._save_dir.is_dir():
            return
        self._save_dir.mkdir(parents=True, exist_ok=True)
        logger.info("created save directory", path=self._save_dir.resolve())

    def exists(self, slot: int) -> bool:
        """True if the slot file is present. Unreachable paths count as absent."""
        path = self.slot_path(slot)
        try:
            return path.is_file()
        except OSError:
            logger.exception("failed to check save slot", slot=slot, path=path)
            return False

    def save(self, slot: int, record: SaveRecord) -> SaveResult:
        """Write record to the slot, replacing any previous save."""
        target = self.slot_path(slot)
        content = encode(record, self._secret_key)

        with self._slot_lock(slot):
            try:
                self.ensure_directory()
                write_atomic(target, content, prefix=SAVE_TEMP_PREFIX)
            except OSError as exc:
                logger.exception("failed to save slot", slot=slot, path=target)
                return SaveResult(slot=slot, path=target, error=f"{type(exc).__name__}: {exc}")

        logger.info(
            "saved slot",
            slot=slot,
            score=record.score,
            click_level=record.score_per_click_level,
            prestige=record.prestige_level,
            base_multiplier=record.base_multiplier,
            path=target,
        )
        return SaveResult(slot=slot, path=target)

    def load(self, slot: int) -> SlotDescriptor:
        """Read and verify a slot. Never raises for missing, unreadable or bad files."""
        path = self.slot_path(slot)

        with self._slot_lock(slot):
            try:
                if not path.exists():
                    logger.debug("no save file for slot", slot=slot)
                    return SlotDescriptor.empty(slot)
                content = path.read_bytes()
            except OSError:
                logger.exception("failed to read save slot", slot=slot, path=path)
                return SlotDescriptor.corrupted(slot, CorruptionReason.READ_FAILED)

        result = decode(content, self._secret_key)
        match result.outcome:
            case DecodeOutcome.SECURE_VALID if result.record is not None:
                logger.info("loaded slot", slot=slot, score=result.record.score, integrity="verified")
                return SlotDescriptor.secure(slot, result.record)
            case DecodeOutcome.LEGACY if result.record is not None:
                logger.warning("loaded legacy save without integrity protection", slot=slot, score=result.record.score)
                return SlotDescriptor.legacy(slot, result.record)
            case DecodeOutcome.SECURE_INVALID:
                logger.warning("save file failed integrity check, it may have been modified externally", slot=slot)
                return SlotDescriptor.corrupted(slot, CorruptionReason.INTEGRITY_MISMATCH)
            case _:
                logger.warning("save file is not a recognized format", slot=slot, detail=result.detail)
                return SlotDescriptor.corrupted(slot, CorruptionReason.MALFORMED)

    def delete(self, slot: int) -> DeleteResult:
        """Remove the slot file. Deleting an empty slot is not an error."""
        path = self.slot_path(slot)

        with self._slot_lock(slot):
            try:
                path.unlink()
            except FileNotFoundError:
                logger.info("save slot does not exist, nothing to delete", slot=slot)
                return DeleteResult(slot=slot, outcome=DeleteOutcome.NOTHING_TO_DELETE)
            except OSError as exc:
                logger.exception("failed to delete save slot", slot=slot, path=path)
                return DeleteResult(slot=slot, outcome=DeleteOutcome.FAILED, error=f"{type(exc).__name__}: {exc}")

        logger.info("deleted save slot", slot=slot)
        return DeleteResult(slot=slot, outcome=DeleteOutcome.DELETED)

    def describe(self, slot: int) -> str:
        return describe_descriptor(self.load(slot))
