"""Tamper-evident save slots for player progress."""

from saves.codec import (
    SAVE_SECRET_KEY,
    DecodeOutcome,
    DecodeResult,
    canonicalize,
    compute_digest,
    decode,
    encode,
    generate_salt,
)
from saves.models import (
    CorruptionReason,
    DeleteOutcome,
    DeleteResult,
    IntegrityEnvelope,
    SaveRecord,
    SaveResult,
    SlotDescriptor,
    SlotState,
)
from saves.service import SaveService
from saves.session_intent import FileSessionIntent, InMemorySessionIntent, SessionIntent
from saves.settings import SaveSettings
from saves.store import SlotStore, describe_descriptor

__all__ = [
    "SAVE_SECRET_KEY",
    "CorruptionReason",
    "DecodeOutcome",
    "DecodeResult",
    "DeleteOutcome",
    "DeleteResult",
    "FileSessionIntent",
    "InMemorySessionIntent",
    "IntegrityEnvelope",
    "SaveRecord",
    "SaveResult",
    "SaveService",
    "SaveSettings",
    "SessionIntent",
    "SlotDescriptor",
    "SlotState",
    "SlotStore",
    "canonicalize",
    "compute_digest",
    "decode",
    "describe_descriptor",
    "encode",
    "generate_salt",
]
