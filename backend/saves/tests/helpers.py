"""Record builders shared by save tests."""

from datetime import datetime

from saves.models import SaveRecord

FIXED_NOW = datetime(2024, 5, 1, 12, 30, 45)


def make_record(
    score: int = 1500,
    score_per_click_level: int = 5,
    prestige_level: int = 1,
    base_multiplier: int = 2,
    *,
    now: datetime = FIXED_NOW,
) -> SaveRecord:
    return SaveRecord.capture(score, score_per_click_level, prestige_level, base_multiplier, now=now)


def legacy_document(**overrides: object) -> dict[str, object]:
    """A bare gameData object as written before saves carried a hash."""
    document: dict[str, object] = {
        "score": 800,
        "saveDateTime": "2023-11-02 08:15:00",
        "playerName": "Player",
        "level": 1,
        "scorePerClickLevel": 2,
        "prestigeLevel": 0,
        "baseMultiplier": 0,
    }
    document.update(overrides)
    return document
