"""Salted SHA-256 integrity envelope for save files.

Encoded format (pretty-printed JSON, UTF-8):

    {"gameData": {...record...}, "dataHash": base64(sha256), "salt": base64(16 random bytes)}

The digest covers ``canonicalize(record) | salt | secret_key`` where ``salt`` is
the stored base64 text. Files without ``dataHash``/``salt`` are the legacy
format: a bare record with no integrity protection.

The secret key ships with the program, so this detects casual edits to a
save file. It is not an anti-cheat boundary.
"""

import base64
import hashlib
import hmac
import json
import secrets
from dataclasses import dataclass
from enum import StrEnum

import structlog
from pydantic import ValidationError

from saves.models import IntegrityEnvelope, LegacySaveRecord, SaveRecord

logger = structlog.get_logger()

SAVE_SECRET_KEY = "MyGameSecretKey2024!@#$"  # noqa: S105

SALT_SIZE_BYTES = 16
FIELD_SEPARATOR = "|"
JSON_INDENT = 4

_ENVELOPE_MARKER_KEYS = frozenset({"dataHash", "salt"})


class DecodeOutcome(StrEnum):
    SECURE_VALID = "secure_valid"
    SECURE_INVALID = "secure_invalid"
    LEGACY = "legacy"
    MALFORMED = "malformed"


@dataclass(frozen=True)
class DecodeResult:
    """Outcome of decoding a save file.

    ``record`` is only populated for SECURE_VALID and LEGACY. A tampered
    envelope never hands its payload back to the caller.
    """

    outcome: DecodeOutcome
    record: SaveRecord | None = None
    detail: str | None = None


def canonicalize(record: SaveRecord) -> str:
    """Deterministic hash input for a record. Never includes the salt or digest."""
    return FIELD_SEPARATOR.join(
        str(part)
        for part in (
            record.score,
            record.saved_at_text,
            record.player_name,
            record.level,
            record.score_per_click_level,
            record.prestige_level,
            record.base_multiplier,
        )
    )


def generate_salt() -> str:
    """Return 16 bytes from the OS CSPRNG, base64-encoded."""
    return base64.b64encode(secrets.token_bytes(SALT_SIZE_BYTES)).decode("ascii")


def compute_digest(record: SaveRecord, salt: str, secret_key: str) -> str:
    combined = FIELD_SEPARATOR.join((canonicalize(record), salt, secret_key))
    return base64.b64encode(hashlib.sha256(combined.encode("utf-8")).digest()).decode("ascii")


def seal(record: SaveRecord, secret_key: str = SAVE_SECRET_KEY) -> IntegrityEnvelope:
    """Wrap a record in an envelope with a fresh salt and its digest."""
    salt = generate_salt()
    return IntegrityEnvelope(
        game_data=record,
        data_hash=compute_digest(record, salt, secret_key),
        salt=salt,
    )


def is_authentic(envelope: IntegrityEnvelope, secret_key: str = SAVE_SECRET_KEY) -> bool:
    expected = compute_digest(envelope.game_data, envelope.salt, secret_key)
    return hmac.compare_digest(envelope.data_hash.encode("utf-8"), expected.encode("utf-8"))


def encode(record: SaveRecord, secret_key: str = SAVE_SECRET_KEY) -> bytes:
    """Serialize a record as a freshly salted and hashed envelope."""
    envelope = seal(record, secret_key)
    return json.dumps(envelope.to_document(), indent=JSON_INDENT, ensure_ascii=False).encode("utf-8")


def decode(data: bytes | str, secret_key: str = SAVE_SECRET_KEY) -> DecodeResult:
    """Decode save file contents, dispatching on document shape.

    Never raises: anything that is neither a well-formed envelope nor a
    well-formed legacy record comes back as MALFORMED.
    """
    try:
        text = data.decode("utf-8") if isinstance(data, bytes) else data
        document = json.loads(text)
    except (UnicodeDecodeError, json.JSONDecodeError, RecursionError) as exc:
        return DecodeResult(DecodeOutcome.MALFORMED, detail=f"not a JSON document: {exc}")

    if not isinstance(document, dict):
        return DecodeResult(DecodeOutcome.MALFORMED, detail="JSON root is not an object")

    if document.keys() & _ENVELOPE_MARKER_KEYS:
        return _decode_envelope(document, secret_key)
    return _decode_legacy(document)


def _decode_envelope(document: dict[str, object], secret_key: str) -> DecodeResult:
    try:
        envelope = IntegrityEnvelope.model_validate(document)
    except ValidationError as exc:
        return DecodeResult(DecodeOutcome.MALFORMED, detail=_summarize(exc))

    if not is_authentic(envelope, secret_key):
        logger.debug("save envelope digest mismatch")
        return DecodeResult(DecodeOutcome.SECURE_INVALID, detail="digest mismatch")

    return DecodeResult(DecodeOutcome.SECURE_VALID, record=envelope.game_data)


def _decode_legacy(document: dict[str, object]) -> DecodeResult:
    try:
        legacy = LegacySaveRecord.model_validate(document)
    except ValidationError as exc:
        return DecodeResult(DecodeOutcome.MALFORMED, detail=_summarize(exc))

    return DecodeResult(DecodeOutcome.LEGACY, record=legacy.normalized())


def _summarize(exc: ValidationError) -> str:
    first = exc.errors()[0]
    location = ".".join(str(part) for part in first["loc"]) or "<root>"
    return f"{exc.error_count()} validation error(s), first at {location}: {first['msg']}"
