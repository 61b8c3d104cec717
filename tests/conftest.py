"""Shared pytest fixtures and in-memory doubles for the gateways."""

import itertools

import bson
import pytest
from bson.objectid import ObjectId
from pymongo.errors import BulkWriteError, PyMongoError

from cineflix_admin.console import AdminConsole
from cineflix_admin.errors import GatewayFailure
from cineflix_admin.gateways.auth import CredentialAuth
from cineflix_admin.models import CatalogRecord, Episode


class FakeStore:
    """In-memory persistence gateway."""

    def __init__(self):
        self.records = {}
        self.settings = None
        self.fail = False
        self.calls = []
        self._ids = itertools.count(1)

    def _check(self, name):
        self.calls.append(name)
        if self.fail:
            raise GatewayFailure(f"{name} failed")

    def list_records(self, limit=100):
        self._check("list_records")
        return list(self.records.values())[::-1][:limit]

    def get_record(self, record_id):
        self._check("get_record")
        return self.records.get(record_id)

    def create(self, record):
        self._check("create")
        record_id = f"rec{next(self._ids)}"
        self.records[record_id] = record.model_copy(update={"id": record_id})
        return record_id

    def update(self, record_id, record):
        self._check("update")
        self.records[record_id] = record.model_copy(update={"id": record_id})

    def delete(self, record_id):
        self._check("delete")
        self.records.pop(record_id, None)

    def batch_create(self, records):
        self._check("batch_create")
        return [self.create(r) for r in records]

    def get_settings(self):
        self._check("get_settings")
        return self.settings

    def put_settings(self, settings):
        self._check("put_settings")
        self.settings = settings


class _Result:
    def __init__(self, **kwargs):
        self.__dict__.update(kwargs)


class FakeCursor:
    def __init__(self, docs):
        self._docs = list(docs)

    def sort(self, key, direction):
        present = [d for d in self._docs if d.get(key) is not None]
        missing = [d for d in self._docs if d.get(key) is None]
        present.sort(key=lambda d: d[key], reverse=direction < 0)
        self._docs = present + missing if direction < 0 else missing + present
        return self

    def limit(self, n):
        self._docs = self._docs[:n]
        return self

    def __iter__(self):
        return iter(self._docs)


class FakeCollection:
    """Just enough of pymongo's Collection for MongoCatalogStore."""

    def __init__(self):
        self.docs = []
        self.fail = False
        self.fail_insert_at = None
        self.encode_documents = False

    def _check(self, *docs):
        if isinstance(self.fail, Exception):
            raise self.fail
        if self.fail:
            raise PyMongoError("connection refused")
        if self.encode_documents:
            for doc in docs:
                bson.encode(doc)

    def _find(self, query):
        for doc in self.docs:
            if all(doc.get(k) == v for k, v in query.items()):
                return doc
        return None

    def find(self, query=None):
        self._check()
        return FakeCursor(dict(d) for d in self.docs)

    def find_one(self, query):
        self._check()
        doc = self._find(query)
        return dict(doc) if doc else None

    def insert_one(self, doc):
        self._check(doc)
        doc.setdefault("_id", ObjectId())
        self.docs.append(dict(doc))
        return _Result(inserted_id=doc["_id"])

    def insert_many(self, docs, ordered=True):
        self._check(*docs)
        ids = []
        for i, doc in enumerate(docs):
            if i == self.fail_insert_at:
                raise BulkWriteError({"nInserted": i, "writeErrors": [{"index": i, "errmsg": "quota exceeded"}]})
            doc.setdefault("_id", ObjectId())
            self.docs.append(dict(doc))
            ids.append(doc["_id"])
        return _Result(inserted_ids=ids)

    def update_one(self, query, update):
        self._check(update)
        doc = self._find(query)
        if doc is None:
            return _Result(matched_count=0)
        doc.update(update["$set"])
        return _Result(matched_count=1)

    def replace_one(self, query, replacement, upsert=False):
        self._check(replacement)
        doc = self._find(query)
        if doc is not None:
            self.docs.remove(doc)
        elif not upsert:
            return _Result(matched_count=0)
        self.docs.append({**query, **replacement})
        return _Result(matched_count=1 if doc else 0)

    def delete_one(self, query):
        self._check()
        doc = self._find(query)
        if doc is not None:
            self.docs.remove(doc)

    def delete_many(self, query):
        self._check()
        ids = set(query["_id"]["$in"])
        self.docs = [d for d in self.docs if d.get("_id") not in ids]


@pytest.fixture
def fake_store():
    return FakeStore()


@pytest.fixture
def fake_db():
    return {"movies": FakeCollection(), "settings": FakeCollection()}


@pytest.fixture
def demo_records():
    return list(DEMO_RECORDS)


@pytest.fixture
def auth():
    return CredentialAuth("admin@cineflix.test", "s3cret")


@pytest.fixture
def console(auth, fake_store):
    console = AdminConsole(auth, fake_store, demo_records=DEMO_RECORDS)
    console.login("admin@cineflix.test", "s3cret")
    return console


DEMO_RECORDS = [
    CatalogRecord(title="Demo Movie", thumbnail="https://img/1.jpg", telegram_code="demo1", rating=7.5),
    CatalogRecord(
        title="Demo Series",
        thumbnail="https://img/2.jpg",
        episodes=(Episode(season=1, number=1, title="Pilot", telegram_code="ds1"),),
    ),
]
