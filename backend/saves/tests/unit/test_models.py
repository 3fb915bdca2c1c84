"""Tests for save record and slot descriptor models."""

from datetime import datetime

import pytest
from pydantic import ValidationError

from saves.models import (
    CorruptionReason,
    DeleteOutcome,
    DeleteResult,
    IntegrityEnvelope,
    LegacySaveRecord,
    SaveRecord,
    SlotDescriptor,
    SlotState,
)
from saves.tests.helpers import FIXED_NOW, legacy_document, make_record


class TestSaveRecordCapture:
    def test_capture_fills_fixed_fields(self):
        record = make_record()
        assert record.player_name == "Player"
        assert record.level == 1
        assert record.saved_at == FIXED_NOW

    def test_capture_truncates_microseconds(self):
        record = make_record(now=datetime(2024, 5, 1, 12, 30, 45, 987654))
        assert record.saved_at.microsecond == 0
        assert record.saved_at_text == "2024-05-01 12:30:45"

    def test_capture_without_now_uses_current_time(self):
        before = datetime.now().replace(microsecond=0)
        record = SaveRecord.capture(10, 1, 0, 1)
        after = datetime.now()
        assert before <= record.saved_at <= after

    def test_default_is_new_game(self):
        record = SaveRecord.default(now=FIXED_NOW)
        assert record.score == 0
        assert record.score_per_click_level == 0
        assert record.prestige_level == 0
        assert record.base_multiplier == 1

    def test_record_is_frozen(self):
        record = make_record()
        with pytest.raises(ValidationError):
            record.score = 5  # type: ignore[misc]


class TestSaveRecordSerialization:
    def test_document_uses_on_disk_names(self):
        document = make_record().to_document()
        assert document == {
            "score": 1500,
            "saveDateTime": "2024-05-01 12:30:45",
            "playerName": "Player",
            "level": 1,
            "scorePerClickLevel": 5,
            "prestigeLevel": 1,
            "baseMultiplier": 2,
        }

    def test_validates_from_document(self):
        record = make_record()
        assert SaveRecord.model_validate(record.to_document()) == record

    def test_rejects_string_score(self):
        document = make_record().to_document()
        document["score"] = "1500"
        with pytest.raises(ValidationError):
            SaveRecord.model_validate(document)

    def test_rejects_float_score(self):
        document = make_record().to_document()
        document["score"] = 1500.0
        with pytest.raises(ValidationError):
            SaveRecord.model_validate(document)

    def test_rejects_bool_level(self):
        document = make_record().to_document()
        document["level"] = True
        with pytest.raises(ValidationError):
            SaveRecord.model_validate(document)

    def test_accepts_int64_score(self):
        document = make_record().to_document()
        document["score"] = 2**63 - 1
        assert SaveRecord.model_validate(document).score == 2**63 - 1

    def test_rejects_score_beyond_int64(self):
        document = make_record().to_document()
        document["score"] = 2**63
        with pytest.raises(ValidationError):
            SaveRecord.model_validate(document)

    def test_rejects_int32_overflow_in_levels(self):
        document = make_record().to_document()
        document["prestigeLevel"] = 2**31
        with pytest.raises(ValidationError):
            SaveRecord.model_validate(document)

    def test_rejects_other_timestamp_formats(self):
        document = make_record().to_document()
        document["saveDateTime"] = "2024-05-01T12:30:45"
        with pytest.raises(ValidationError):
            SaveRecord.model_validate(document)

    def test_rejects_unpadded_timestamp(self):
        document = make_record().to_document()
        document["saveDateTime"] = "2024-5-1 12:30:45"
        with pytest.raises(ValidationError, match="saveDateTime"):
            SaveRecord.model_validate(document)

    def test_rejects_datetime_before_year_1000(self):
        with pytest.raises(ValidationError, match="year"):
            make_record(now=datetime(999, 1, 1))

    def test_rejects_unknown_fields(self):
        document = make_record().to_document()
        document["gold"] = 10
        with pytest.raises(ValidationError):
            SaveRecord.model_validate(document)

    def test_requires_every_field(self):
        document = make_record().to_document()
        del document["baseMultiplier"]
        with pytest.raises(ValidationError, match="baseMultiplier"):
            SaveRecord.model_validate(document)


class TestLegacySaveRecord:
    def test_missing_upgrade_fields_take_defaults(self):
        legacy = LegacySaveRecord.model_validate({"score": 42, "saveDateTime": "2023-01-01 00:00:00"})
        assert legacy.player_name == "Player"
        assert legacy.level == 1
        assert legacy.score_per_click_level == 0
        assert legacy.prestige_level == 0

    def test_normalized_clamps_base_multiplier(self):
        record = LegacySaveRecord.model_validate(legacy_document(baseMultiplier=-3)).normalized()
        assert type(record) is SaveRecord
        assert record.base_multiplier == 1

    def test_normalized_keeps_positive_base_multiplier(self):
        record = LegacySaveRecord.model_validate(legacy_document(baseMultiplier=4)).normalized()
        assert record.base_multiplier == 4

    def test_normalized_does_not_clamp_other_fields(self):
        record = LegacySaveRecord.model_validate(legacy_document(score=-5, prestigeLevel=-1)).normalized()
        assert record.score == -5
        assert record.prestige_level == -1

    def test_score_is_still_required(self):
        with pytest.raises(ValidationError, match="score"):
            LegacySaveRecord.model_validate({"saveDateTime": "2023-01-01 00:00:00"})


class TestIntegrityEnvelope:
    def test_document_has_three_top_level_fields(self):
        envelope = IntegrityEnvelope(game_data=make_record(), data_hash="aGFzaA==", salt="c2FsdA==")
        assert list(envelope.to_document()) == ["gameData", "dataHash", "salt"]

    def test_rejects_empty_hash(self):
        with pytest.raises(ValidationError):
            IntegrityEnvelope(game_data=make_record(), data_hash="", salt="c2FsdA==")

    def test_rejects_non_string_salt(self):
        with pytest.raises(ValidationError):
            IntegrityEnvelope.model_validate(
                {"gameData": make_record().to_document(), "dataHash": "aGFzaA==", "salt": 12345},
            )


class TestSlotDescriptor:
    def test_empty_has_no_record_or_reason(self):
        descriptor = SlotDescriptor.empty(2)
        assert descriptor.state == SlotState.EMPTY
        assert descriptor.record is None
        assert descriptor.reason is None
        assert not descriptor.has_record

    def test_secure_carries_record(self):
        record = make_record()
        descriptor = SlotDescriptor.secure(1, record)
        assert descriptor.state == SlotState.SECURE
        assert descriptor.record == record
        assert descriptor.has_record

    def test_corrupted_carries_reason(self):
        descriptor = SlotDescriptor.corrupted(3, CorruptionReason.INTEGRITY_MISMATCH)
        assert descriptor.state == SlotState.CORRUPTED
        assert descriptor.reason == CorruptionReason.INTEGRITY_MISMATCH
        assert descriptor.record is None


class TestDeleteResult:
    @pytest.mark.parametrize(
        ("outcome", "expected"),
        [
            (DeleteOutcome.DELETED, True),
            (DeleteOutcome.NOTHING_TO_DELETE, True),
            (DeleteOutcome.FAILED, False),
        ],
    )
    def test_ok(self, outcome, expected):
        assert DeleteResult(slot=1, outcome=outcome).ok is expected
