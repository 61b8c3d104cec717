"""Assembly of catalog records from the publish form."""

import enum
import logging
import math
from dataclasses import dataclass, fields, replace
from typing import Optional, Sequence

from .config import DEFAULT_CATEGORY, DEFAULT_QUALITY, DEFAULT_RATING, DEFAULT_YEAR
from .errors import ValidationFailure
from .models import CatalogRecord, Episode

logger = logging.getLogger(__name__)


class PublishMode(enum.Enum):
    CREATE = "create"
    UPDATE = "update"


@dataclass(frozen=True)
class RecordFields:
    """Text fields of the upload/edit form."""

    title: str = ""
    category: str = DEFAULT_CATEGORY
    thumbnail: str = ""
    telegram_code: str = ""
    year: str = DEFAULT_YEAR
    rating: str = DEFAULT_RATING
    quality: str = DEFAULT_QUALITY
    description: str = ""

    @classmethod
    def names(cls):
        return [f.name for f in fields(cls)]

    @classmethod
    def from_record(cls, record: CatalogRecord) -> "RecordFields":
        return cls(
            title=record.title,
            category=record.category,
            thumbnail=record.thumbnail,
            telegram_code=record.telegram_code or "",
            year=record.year or DEFAULT_YEAR,
            rating=str(record.rating),
            quality=record.quality or DEFAULT_QUALITY,
            description=record.description or "",
        )

    def with_values(self, **values: str) -> "RecordFields":
        unknown = set(values) - set(self.names())
        if unknown:
            raise ValidationFailure(f"Unknown form fields: {', '.join(sorted(unknown))}")
        return replace(self, **{k: "" if v is None else str(v) for k, v in values.items()})


def _blank(value: Optional[str]) -> bool:
    return not value or not value.strip()


def validate(title: str, thumbnail: str, code: str, episodes: Sequence[Episode]) -> None:
    if _blank(title):
        raise ValidationFailure("Title is required")
    if _blank(thumbnail):
        raise ValidationFailure("Thumbnail is required")
    if _blank(code) and not episodes:
        raise ValidationFailure("At least one link (code or episode) is required")


def parse_rating(text: Optional[str]) -> float:
    """Parse the rating field; blank means 0.0, anything non-numeric is rejected."""
    if _blank(text):
        return 0.0
    try:
        rating = float(text)
    except (TypeError, ValueError):
        raise ValidationFailure(f"Rating must be a number, got '{text}'")
    if not math.isfinite(rating):
        raise ValidationFailure(f"Rating must be a finite number, got '{text}'")
    return rating


def assemble(record_fields: RecordFields, episodes: Sequence[Episode]) -> CatalogRecord:
    validate(record_fields.title, record_fields.thumbnail, record_fields.telegram_code, episodes)
    return CatalogRecord(
        title=record_fields.title.strip(),
        category=record_fields.category,
        thumbnail=record_fields.thumbnail.strip(),
        telegram_code=record_fields.telegram_code.strip(),
        year=record_fields.year,
        rating=parse_rating(record_fields.rating),
        quality=record_fields.quality,
        description=record_fields.description,
        episodes=tuple(episodes) if episodes else None,
    )


def build(record_fields: RecordFields, episodes: Sequence[Episode], mode: PublishMode, store, record_id: Optional[str] = None) -> str:
    """Validate and assemble the record, then hand it to the store.

    Returns the id of the written record. ``GatewayFailure`` from the store
    propagates as-is.
    """
    if mode is PublishMode.UPDATE and not record_id:
        raise ValidationFailure("No record selected for update")

    record = assemble(record_fields, episodes)
    if mode is PublishMode.CREATE:
        record_id = store.create(record)
        logger.info("Created '%s' (%s)", record.title, record_id)
    else:
        store.update(record_id, record)
        logger.info("Updated '%s' (%s)", record.title, record_id)
    return record_id
