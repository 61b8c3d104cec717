"""Tests of decoding stored documents into catalog models."""

from datetime import datetime, timezone

import pytest
from bson.objectid import ObjectId

from cineflix_admin.errors import ValidationFailure
from cineflix_admin.models import AppSettings, CatalogRecord, Episode, parse_positive_int


@pytest.mark.parametrize(
    "value,expected",
    [("3", 3), (" 2 ", 2), ("2x", 2), ("S2", 1), ("", 1), ("0", 1), ("-4", 1), (None, 1), (5, 5), (0, 1), (2.0, 2), (True, 1),
     ("99999999999999999999", 1), (2**63, 1), (2**63 - 1, 2**63 - 1), (1e30, 1)],
)
def test_parse_positive_int(value, expected) -> None:
    assert parse_positive_int(value) == expected


def test_episode_create_requires_title_and_code() -> None:
    with pytest.raises(ValidationFailure):
        Episode.create(season=1, number=1, title="", telegram_code="A")
    with pytest.raises(ValidationFailure):
        Episode.create(season=1, number=1, title="Pilot", telegram_code=" ")

    ep = Episode.create(season="2", number=1, title="Pilot", telegram_code="A")
    assert (ep.season, ep.duration) == (2, "N/A")


def test_record_from_document_fills_defaults() -> None:
    oid = ObjectId()
    record = CatalogRecord.from_document({"_id": oid, "title": "Bare", "rating": "not a number", "episodes": []})

    assert record.id == str(oid)
    assert record.category == "Exclusive"
    assert record.year == "2024"
    assert record.quality == "4K HDR"
    assert record.rating == 0.0
    assert record.views == "0"
    assert record.episodes is None
    assert not record.is_episodic


def test_record_from_document_decodes_episodes_and_timestamps() -> None:
    created = datetime(2024, 5, 1, tzinfo=timezone.utc)
    record = CatalogRecord.from_document(
        {
            "_id": "abc",
            "title": "Series",
            "rating": 8,
            "views": "120",
            "createdAt": created,
            "episodes": [{"season": 1, "number": 1, "title": "Pilot", "telegramCode": "P"}, "garbage"],
        }
    )

    assert record.created_at == created
    assert record.rating == 8.0
    assert len(record.episodes) == 1
    assert record.episodes[0].id
    assert record.episodes[0].duration == "N/A"


def test_record_document_excludes_counters_unless_full() -> None:
    record = CatalogRecord(title="T", thumbnail="x", telegram_code="c", views="42", is_premium=True)

    assert "views" not in record.to_document()
    assert "isPremium" not in record.to_document()
    full = record.to_document(full=True)
    assert (full["views"], full["isPremium"], full["telegramCode"]) == ("42", True, "c")
    assert "_id" not in full and "id" not in full


def test_settings_strip_at_and_fill_defaults() -> None:
    assert AppSettings(bot_username="@my_bot").bot_username == "my_bot"
    assert AppSettings.from_document({}, "Fallback_bot").bot_username == "Fallback_bot"
    assert AppSettings.from_document({"botUsername": "@x_bot", "channelLink": None}).channel_link == ""

    settings = AppSettings(bot_username="Cineflix_Streembot", channel_link="https://t.me/c")
    assert settings.to_document() == {"botUsername": "Cineflix_Streembot", "channelLink": "https://t.me/c"}
    assert settings.deep_link("batch_123") == "https://t.me/Cineflix_Streembot?start=batch_123"
