"""Catalog data models and their decoding from stored documents."""

import math
import re
import uuid
from datetime import datetime
from typing import Any, Dict, Mapping, Optional, Tuple

from pydantic import BaseModel, ConfigDict, Field, field_validator

from .config import DEFAULT_BOT_USERNAME, DEFAULT_CATEGORY, DEFAULT_DURATION, DEFAULT_QUALITY, DEFAULT_YEAR
from .errors import ValidationFailure

_LEADING_DIGITS = re.compile(r"\s*\+?(\d+)")
# Largest integer a BSON document can hold.
_INT64_MAX = 2**63 - 1


def new_episode_id() -> str:
    return uuid.uuid4().hex


def parse_positive_int(value: Any, default: int = 1) -> int:
    """Read the leading digits of ``value``; anything else (< 1 or past int64) gives ``default``."""
    if isinstance(value, bool):
        return default
    if isinstance(value, int):
        return value if 1 <= value <= _INT64_MAX else default
    if isinstance(value, float):
        return int(value) if math.isfinite(value) and 1 <= value <= _INT64_MAX else default
    if not isinstance(value, str):
        return default
    match = _LEADING_DIGITS.match(value)
    if not match:
        return default
    number = int(match.group(1))
    return number if 1 <= number <= _INT64_MAX else default


def _text(value: Any, default: str = "") -> str:
    if value is None:
        return default
    text = str(value)
    return text if text.strip() else default


class Episode(BaseModel):
    """One episode of a series, as kept in a record's ``episodes`` list."""

    model_config = ConfigDict(frozen=True, populate_by_name=True)

    id: str = Field(default_factory=new_episode_id, description="Opaque id, stable for the session")
    season: int = Field(default=1, description="Season number, 1-based")
    number: int = Field(default=1, description="Episode number inside the season")
    title: str = Field(..., description="Display title")
    duration: str = Field(default=DEFAULT_DURATION, description="Free text, e.g. '24m'")
    telegram_code: str = Field(..., alias="telegramCode", description="Delivery bot start parameter")

    @classmethod
    def create(cls, season: int, number: int, title: str, telegram_code: str, duration: str = "") -> "Episode":
        if not title or not title.strip():
            raise ValidationFailure("Episode title is required")
        if not telegram_code or not telegram_code.strip():
            raise ValidationFailure("Episode code is required")
        return cls(
            season=parse_positive_int(season),
            number=number,
            title=title,
            duration=_text(duration, DEFAULT_DURATION),
            telegram_code=telegram_code,
        )

    @classmethod
    def from_document(cls, doc: Mapping[str, Any]) -> "Episode":
        # Stored entries are not trusted: missing fields get defaults and a
        # bad number becomes 0 so EpisodeList.load can repair it.
        number = doc.get("number")
        if isinstance(number, bool) or not isinstance(number, (int, float, str)):
            number = 0
        else:
            number = parse_positive_int(number, default=0)
        return cls(
            id=_text(doc.get("id")) or new_episode_id(),
            season=parse_positive_int(doc.get("season")),
            number=number,
            title=_text(doc.get("title")),
            duration=_text(doc.get("duration"), DEFAULT_DURATION),
            telegram_code=_text(doc.get("telegramCode")),
        )

    def to_document(self) -> Dict[str, Any]:
        return self.model_dump(by_alias=True)


class CatalogRecord(BaseModel):
    """A persisted movie or series.

    ``episodes`` is ``None`` for single-code titles; episodic titles carry a
    non-empty tuple. Storage keeps the camelCase names of the delivery site.
    """

    model_config = ConfigDict(frozen=True, populate_by_name=True)

    id: Optional[str] = None
    title: str
    category: str = DEFAULT_CATEGORY
    thumbnail: str = ""
    telegram_code: str = Field(default="", alias="telegramCode")
    year: str = DEFAULT_YEAR
    rating: float = 0.0
    quality: str = DEFAULT_QUALITY
    description: str = ""
    episodes: Optional[Tuple[Episode, ...]] = None
    views: str = "0"
    is_premium: bool = Field(default=False, alias="isPremium")
    created_at: Optional[datetime] = Field(default=None, alias="createdAt")
    updated_at: Optional[datetime] = Field(default=None, alias="updatedAt")

    @property
    def is_episodic(self) -> bool:
        return self.episodes is not None

    @classmethod
    def from_document(cls, doc: Mapping[str, Any]) -> "CatalogRecord":
        raw_id = doc.get("_id", doc.get("id"))
        try:
            rating = float(doc.get("rating") or 0.0)
        except (TypeError, ValueError):
            rating = 0.0
        if not math.isfinite(rating):
            rating = 0.0

        raw_episodes = doc.get("episodes")
        episodes = None
        if isinstance(raw_episodes, (list, tuple)):
            decoded = tuple(Episode.from_document(ep) for ep in raw_episodes if isinstance(ep, Mapping))
            episodes = decoded or None

        created_at, updated_at = doc.get("createdAt"), doc.get("updatedAt")
        return cls(
            id=str(raw_id) if raw_id is not None else None,
            title=_text(doc.get("title")),
            category=_text(doc.get("category"), DEFAULT_CATEGORY),
            thumbnail=_text(doc.get("thumbnail")),
            telegram_code=_text(doc.get("telegramCode")),
            year=_text(doc.get("year"), DEFAULT_YEAR),
            rating=rating,
            quality=_text(doc.get("quality"), DEFAULT_QUALITY),
            description=_text(doc.get("description")),
            episodes=episodes,
            views=_text(doc.get("views"), "0"),
            is_premium=bool(doc.get("isPremium", False)),
            created_at=created_at if isinstance(created_at, datetime) else None,
            updated_at=updated_at if isinstance(updated_at, datetime) else None,
        )

    def to_document(self, full: bool = False) -> Dict[str, Any]:
        """Storage shape without ``_id`` or timestamps.

        The publish form owns the editable fields only; ``full`` also emits
        the view counter and premium flag, as demo seeding does.
        """
        exclude = {"id", "created_at", "updated_at"}
        if not full:
            exclude |= {"views", "is_premium"}
        doc = self.model_dump(by_alias=True, exclude=exclude)
        doc["episodes"] = [ep.to_document() for ep in self.episodes] if self.episodes else None
        return doc


class AppSettings(BaseModel):
    """Global settings read by the delivery bot."""

    model_config = ConfigDict(frozen=True, populate_by_name=True)

    bot_username: str = Field(default=DEFAULT_BOT_USERNAME, alias="botUsername")
    channel_link: str = Field(default="", alias="channelLink")

    @field_validator("bot_username", mode="before")
    @classmethod
    def _strip_at(cls, value: Any) -> Any:
        # The username is stored without '@'
        if isinstance(value, str):
            return value.replace("@", "").strip()
        return value

    @field_validator("channel_link", mode="before")
    @classmethod
    def _strip_link(cls, value: Any) -> Any:
        return value.strip() if isinstance(value, str) else value

    @classmethod
    def from_document(cls, doc: Mapping[str, Any], default_bot_username: str = DEFAULT_BOT_USERNAME) -> "AppSettings":
        bot_username = _text(doc.get("botUsername")).replace("@", "").strip()
        return cls(
            bot_username=bot_username or default_bot_username,
            channel_link=_text(doc.get("channelLink")),
        )

    def to_document(self) -> Dict[str, Any]:
        return self.model_dump(by_alias=True)

    def deep_link(self, telegram_code: str) -> str:
        """Link that makes the bot deliver the file behind ``telegram_code``."""
        return f"https://t.me/{self.bot_username}?start={telegram_code}"
