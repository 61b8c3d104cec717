"""MongoDB-backed persistence for catalog records and app settings."""

import logging
from datetime import datetime, timezone
from typing import Iterable, List, Optional

from bson.errors import BSONError, InvalidId
from bson.objectid import ObjectId
from pymongo import DESCENDING, MongoClient
from pymongo.errors import BulkWriteError, PyMongoError

from ..config import ADMIN_LIST_LIMIT, DEFAULT_BOT_USERNAME, DEFAULT_DB_NAME
from ..errors import GatewayFailure
from ..models import AppSettings, CatalogRecord

logger = logging.getLogger(__name__)

SETTINGS_DOC_ID = "config"

# Encoding failures (InvalidDocument, integers past int64) surface before the
# driver sends anything and are not PyMongoError.
STORE_ERRORS = (PyMongoError, BSONError, OverflowError)


def _now() -> datetime:
    return datetime.now(timezone.utc)


def _object_id(record_id: str) -> ObjectId:
    try:
        return ObjectId(record_id)
    except (InvalidId, TypeError):
        raise GatewayFailure(f"Invalid record id: {record_id!r}")


class MongoCatalogStore:
    """Persistence gateway over the ``movies`` and ``settings`` collections."""

    def __init__(self, db, default_bot_username: str = DEFAULT_BOT_USERNAME):
        self.db = db
        self.movies = db["movies"]
        self.settings = db["settings"]
        self.default_bot_username = default_bot_username

    @classmethod
    def from_uri(cls, uri: str, db_name: str = DEFAULT_DB_NAME, **kwargs) -> "MongoCatalogStore":
        try:
            client = MongoClient(uri)
        except PyMongoError as e:
            raise GatewayFailure(f"Error connecting to MongoDB: {e}") from e
        logger.info("Connected to MongoDB database '%s'", db_name)
        return cls(client[db_name], **kwargs)

    # --- Catalog records ---

    def list_records(self, limit: int = ADMIN_LIST_LIMIT) -> List[CatalogRecord]:
        try:
            cursor = self.movies.find().sort("createdAt", DESCENDING).limit(limit)
            return [CatalogRecord.from_document(doc) for doc in cursor]
        except STORE_ERRORS as e:
            logger.error("Error fetching movies: %s", e)
            raise GatewayFailure("Error fetching movies") from e

    def get_record(self, record_id: str) -> Optional[CatalogRecord]:
        oid = _object_id(record_id)
        try:
            doc = self.movies.find_one({"_id": oid})
        except STORE_ERRORS as e:
            logger.error("Error fetching movie %s: %s", record_id, e)
            raise GatewayFailure("Error fetching movie") from e
        return CatalogRecord.from_document(doc) if doc else None

    def create(self, record: CatalogRecord) -> str:
        now = _now()
        doc = {**record.to_document(), "views": "0", "createdAt": now, "updatedAt": now}
        try:
            result = self.movies.insert_one(doc)
        except STORE_ERRORS as e:
            logger.error("Error saving document: %s", e)
            raise GatewayFailure("Error saving document") from e
        return str(result.inserted_id)

    def update(self, record_id: str, record: CatalogRecord) -> None:
        oid = _object_id(record_id)
        doc = {**record.to_document(), "updatedAt": _now()}
        try:
            result = self.movies.update_one({"_id": oid}, {"$set": doc})
        except STORE_ERRORS as e:
            logger.error("Error updating document %s: %s", record_id, e)
            raise GatewayFailure("Error saving document") from e
        if result.matched_count == 0:
            raise GatewayFailure(f"Movie {record_id} no longer exists")

    def delete(self, record_id: str) -> None:
        oid = _object_id(record_id)
        try:
            self.movies.delete_one({"_id": oid})
        except STORE_ERRORS as e:
            logger.error("Error deleting movie %s: %s", record_id, e)
            raise GatewayFailure("Error deleting movie") from e

    def batch_create(self, records: Iterable[CatalogRecord]) -> List[str]:
        """Insert every record or none of them."""
        now = _now()
        docs = [{**record.to_document(full=True), "createdAt": now} for record in records]
        if not docs:
            return []
        try:
            result = self.movies.insert_many(docs, ordered=True)
        except BulkWriteError as e:
            inserted = [doc["_id"] for doc in docs[: e.details.get("nInserted", 0)] if "_id" in doc]
            self._rollback(inserted)
            logger.error("Error uploading data, rolled back %d documents: %s", len(inserted), e)
            raise GatewayFailure("Error uploading data") from e
        except STORE_ERRORS as e:
            logger.error("Error uploading data: %s", e)
            raise GatewayFailure("Error uploading data") from e
        return [str(oid) for oid in result.inserted_ids]

    def _rollback(self, ids: List[ObjectId]) -> None:
        if not ids:
            return
        try:
            self.movies.delete_many({"_id": {"$in": ids}})
        except STORE_ERRORS as e:
            logger.error("Rollback of %d seeded documents failed: %s", len(ids), e)
            raise GatewayFailure("Error uploading data") from e

    # --- Settings ---

    def get_settings(self) -> Optional[AppSettings]:
        try:
            doc = self.settings.find_one({"_id": SETTINGS_DOC_ID})
        except STORE_ERRORS as e:
            logger.error("Error fetching settings: %s", e)
            raise GatewayFailure("Error fetching settings") from e
        if not doc:
            return None
        return AppSettings.from_document(doc, self.default_bot_username)

    def put_settings(self, settings: AppSettings) -> None:
        try:
            self.settings.replace_one({"_id": SETTINGS_DOC_ID}, settings.to_document(), upsert=True)
        except STORE_ERRORS as e:
            logger.error("Error saving settings: %s", e)
            raise GatewayFailure("Error saving settings") from e
