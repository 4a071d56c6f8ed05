import copy
import threading
import sys
from pathlib import Path

import bson
import pytest
from pymongo.errors import PyMongoError

from db_core.settings import current_settings

TESTS_DIR = Path(__file__).resolve().parent
if str(TESTS_DIR) not in sys.path:
    sys.path.append(str(TESTS_DIR))


def _through_bson(document):
    options = current_settings().codec_options()
    return bson.decode(bson.encode(document, codec_options=options), codec_options=options)


class FakeCollection:
    """In-memory stand-in for a pymongo collection that records every call.

    Documents are stored through a BSON encode/decode cycle with the codec
    options the real clients use, so values come back as MongoDB returns them.
    """

    def __init__(self, name="read_models"):
        self.name = name
        self.documents = {}
        self.calls = []
        self.error: PyMongoError | None = None
        self._lock = threading.Lock()

    def seed(self, document):
        """Insert a raw document without recording a call."""
        stored = _through_bson(document)
        self.documents[stored["_id"]] = stored

    def count(self, query):
        return sum(1 for doc in self.documents.values() if self._matches(doc, query))

    @staticmethod
    def _matches(document, query):
        return all(key in document and document[key] == value for key, value in query.items())

    def _record(self, method, *args):
        with self._lock:
            self.calls.append((method, *args))
        if self.error is not None:
            raise self.error

    def replace_one(self, filter, replacement, upsert=False):
        # Encoding fails client side, before any request is sent.
        stored = _through_bson(replacement)
        self._record("replace_one", filter, replacement, upsert)
        with self._lock:
            for key, doc in self.documents.items():
                if self._matches(doc, filter):
                    self.documents[key] = stored
                    return
            if upsert:
                stored.setdefault("_id", filter["_id"])
                self.documents[stored["_id"]] = stored

    def find_one(self, filter):
        self._record("find_one", filter)
        with self._lock:
            for doc in self.documents.values():
                if self._matches(doc, filter):
                    return copy.deepcopy(doc)
        return None

    def find(self, filter):
        self._record("find", filter)
        with self._lock:
            return [copy.deepcopy(doc) for doc in self.documents.values() if self._matches(doc, filter)]

    def delete_one(self, filter):
        self._record("delete_one", filter)
        with self._lock:
            for key, doc in list(self.documents.items()):
                if self._matches(doc, filter):
                    del self.documents[key]
                    return


class _FakeCursor:
    def __init__(self, documents):
        self._documents = documents

    async def to_list(self, length=None):
        return self._documents if length is None else self._documents[:length]


class AsyncFakeCollection:
    """Motor-shaped wrapper around ``FakeCollection``."""

    def __init__(self, name="read_models"):
        self.sync = FakeCollection(name)
        self.name = name

    async def replace_one(self, filter, replacement, upsert=False):
        self.sync.replace_one(filter, replacement, upsert=upsert)

    async def find_one(self, filter):
        return self.sync.find_one(filter)

    def find(self, filter):
        return _FakeCursor(self.sync.find(filter))

    async def delete_one(self, filter):
        self.sync.delete_one(filter)


class FakeDatabase:
    def __init__(self, collection_cls=FakeCollection):
        self._collection_cls = collection_cls
        self.collections = {}

    def __getitem__(self, name):
        if name not in self.collections:
            self.collections[name] = self._collection_cls(name)
        return self.collections[name]


@pytest.fixture()
def collection():
    return FakeCollection("orders")


@pytest.fixture()
def async_collection():
    return AsyncFakeCollection("orders")


@pytest.fixture()
def fake_database():
    return FakeDatabase()


@pytest.fixture()
def async_fake_database():
    return FakeDatabase(AsyncFakeCollection)
