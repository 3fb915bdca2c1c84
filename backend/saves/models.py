"""Save record, integrity envelope, and slot result models."""

from __future__ import annotations

from dataclasses import dataclass
from datetime import datetime
from enum import StrEnum
from typing import TYPE_CHECKING, Annotated, Self

from pydantic import BaseModel, ConfigDict, Field, field_serializer, field_validator

if TYPE_CHECKING:
    from pathlib import Path

SAVE_TIMESTAMP_FORMAT = "%Y-%m-%d %H:%M:%S"
DEFAULT_PLAYER_NAME = "Player"
DEFAULT_LEVEL = 1
MIN_BASE_MULTIPLIER = 1
MIN_SAVE_YEAR = 1000

Int64 = Annotated[int, Field(ge=-(2**63), le=2**63 - 1, strict=True)]
Int32 = Annotated[int, Field(ge=-(2**31), le=2**31 - 1, strict=True)]


class SaveRecord(BaseModel):
    """Snapshot of player progress written to a save slot.

    Field names on disk use the camelCase keys of the original save format;
    Python code uses the snake_case attribute names.
    """

    model_config = ConfigDict(frozen=True, extra="forbid", populate_by_name=True)

    score: Int64
    saved_at: datetime = Field(alias="saveDateTime")
    player_name: str = Field(alias="playerName", strict=True)
    level: Int32 = Field(alias="level")
    score_per_click_level: Int32 = Field(alias="scorePerClickLevel")
    prestige_level: Int32 = Field(alias="prestigeLevel")
    base_multiplier: Int32 = Field(alias="baseMultiplier")

    @field_validator("saved_at", mode="before")
    @classmethod
    def _parse_saved_at(cls, value: object) -> datetime:
        if isinstance(value, datetime):
            # %Y only renders four digits from year 1000 on.
            if value.year < MIN_SAVE_YEAR:
                raise ValueError(f"saveDateTime year must be at least {MIN_SAVE_YEAR}")
            return value.replace(microsecond=0, tzinfo=None)
        if not isinstance(value, str):
            raise ValueError("saveDateTime must be a string")  # noqa: TRY004
        parsed = datetime.strptime(value, SAVE_TIMESTAMP_FORMAT)  # noqa: DTZ007
        # strptime accepts unpadded fields; the digest covers the exact text.
        if parsed.strftime(SAVE_TIMESTAMP_FORMAT) != value:
            raise ValueError(f"saveDateTime must use the {SAVE_TIMESTAMP_FORMAT!r} layout")
        return parsed

    @field_serializer("saved_at")
    def _format_saved_at(self, value: datetime) -> str:
        return value.strftime(SAVE_TIMESTAMP_FORMAT)

    @property
    def saved_at_text(self) -> str:
        """Timestamp exactly as it appears on disk and in the canonical string."""
        return self.saved_at.strftime(SAVE_TIMESTAMP_FORMAT)

    @classmethod
    def capture(
        cls,
        score: int,
        score_per_click_level: int,
        prestige_level: int,
        base_multiplier: int,
        *,
        now: datetime | None = None,
    ) -> Self:
        """Build a fresh record from the live game state at save time."""
        return cls(
            score=score,
            saved_at=now or datetime.now(),  # noqa: DTZ005 - local wall-clock time is the on-disk contract
            player_name=DEFAULT_PLAYER_NAME,
            level=DEFAULT_LEVEL,
            score_per_click_level=score_per_click_level,
            prestige_level=prestige_level,
            base_multiplier=base_multiplier,
        )

    @classmethod
    def default(cls, *, now: datetime | None = None) -> Self:
        """Record for a brand-new game."""
        return cls.capture(0, 0, 0, MIN_BASE_MULTIPLIER, now=now)

    def to_document(self) -> dict[str, object]:
        return self.model_dump(by_alias=True)


class LegacySaveRecord(SaveRecord):
    """Bare record from files written before the integrity envelope existed.

    Older builds did not write the upgrade fields at all, so everything
    except the score and timestamp falls back to the new-game defaults.
    """

    player_name: str = Field(default=DEFAULT_PLAYER_NAME, alias="playerName", strict=True)
    level: Int32 = Field(default=DEFAULT_LEVEL, alias="level")
    score_per_click_level: Int32 = Field(default=0, alias="scorePerClickLevel")
    prestige_level: Int32 = Field(default=0, alias="prestigeLevel")
    base_multiplier: Int32 = Field(default=0, alias="baseMultiplier")

    def normalized(self) -> SaveRecord:
        """Return a plain SaveRecord with base_multiplier raised to at least 1."""
        values = self.model_dump()
        if values["base_multiplier"] < MIN_BASE_MULTIPLIER:
            values["base_multiplier"] = MIN_BASE_MULTIPLIER
        return SaveRecord.model_validate(values)


class IntegrityEnvelope(BaseModel):
    """Tamper-evident container stored on disk."""

    model_config = ConfigDict(frozen=True, extra="forbid", populate_by_name=True)

    game_data: SaveRecord = Field(alias="gameData")
    data_hash: str = Field(alias="dataHash", min_length=1, strict=True)
    salt: str = Field(min_length=1, strict=True)

    def to_document(self) -> dict[str, object]:
        return self.model_dump(by_alias=True)


class SlotState(StrEnum):
    EMPTY = "empty"
    LEGACY = "legacy"
    SECURE = "secure"
    CORRUPTED = "corrupted"


class CorruptionReason(StrEnum):
    INTEGRITY_MISMATCH = "integrity_mismatch"
    MALFORMED = "malformed"
    READ_FAILED = "read_failed"


@dataclass(frozen=True)
class SlotDescriptor:
    """What a slot currently holds, without exposing envelope internals."""

    slot: int
    state: SlotState
    record: SaveRecord | None = None
    reason: CorruptionReason | None = None

    @classmethod
    def empty(cls, slot: int) -> Self:
        return cls(slot=slot, state=SlotState.EMPTY)

    @classmethod
    def secure(cls, slot: int, record: SaveRecord) -> Self:
        return cls(slot=slot, state=SlotState.SECURE, record=record)

    @classmethod
    def legacy(cls, slot: int, record: SaveRecord) -> Self:
        return cls(slot=slot, state=SlotState.LEGACY, record=record)

    @classmethod
    def corrupted(cls, slot: int, reason: CorruptionReason) -> Self:
        return cls(slot=slot, state=SlotState.CORRUPTED, reason=reason)

    @property
    def has_record(self) -> bool:
        return self.record is not None


@dataclass(frozen=True)
class SaveResult:
    slot: int
    path: Path
    error: str | None = None

    @property
    def ok(self) -> bool:
        return self.error is None


class DeleteOutcome(StrEnum):
    DELETED = "deleted"
    NOTHING_TO_DELETE = "nothing_to_delete"
    FAILED = "failed"


@dataclass(frozen=True)
class DeleteResult:
    slot: int
    outcome: DeleteOutcome
    error: str | None = None

    @property
    def ok(self) -> bool:
        return self.outcome != DeleteOutcome.FAILED
