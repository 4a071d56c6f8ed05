import asyncio

import pytest
from bson.binary import UuidRepresentation

import db_core
from db_core import mongo
from db_core.settings import MongoSettings


class StubClient:
    def __init__(self, uri, **kwargs):
        self.uri = uri
        self.kwargs = kwargs
        self.databases = {}

    def __getitem__(self, name):
        return self.databases.setdefault(name, StubDatabase(name))


class StubDatabase:
    def __init__(self, name):
        self.name = name
        self.commands = []

    def __getitem__(self, name):
        return (self.name, name)

    def command(self, name):
        self.commands.append(name)
        return {"ok": 1.0}


class AsyncStubDatabase(StubDatabase):
    async def command(self, name):
        self.commands.append(name)
        return {"ok": 1.0}


class AsyncStubClient(StubClient):
    def __getitem__(self, name):
        return self.databases.setdefault(name, AsyncStubDatabase(name))


@pytest.fixture()
def configured(monkeypatch):
    previous = db_core.current_settings()
    db_core.configure(
        MongoSettings(uri="mongodb://db.test:27017", db_name="projections", tz_aware=True)
    )
    monkeypatch.setattr("db_core.mongo.MongoClient", StubClient)
    monkeypatch.setattr("db_core.mongo.AsyncIOMotorClient", AsyncStubClient)
    mongo.get_mongo_client.cache_clear()
    mongo.get_async_mongo_client.cache_clear()
    yield db_core.current_settings()
    mongo.get_mongo_client.cache_clear()
    mongo.get_async_mongo_client.cache_clear()
    db_core.configure(previous)


def test_settings_read_environment(monkeypatch):
    monkeypatch.setenv("MONGO_URI", "mongodb://env-host:27018")
    monkeypatch.setenv("MONGO_DB_NAME", "env_db")
    monkeypatch.setenv("MONGO_SERVER_SELECTION_TIMEOUT_MS", "1500")
    monkeypatch.setenv("MONGO_TZ_AWARE", "yes")

    cfg = MongoSettings()

    assert cfg.uri == "mongodb://env-host:27018"
    assert cfg.db_name == "env_db"
    assert cfg.server_selection_timeout_ms == 1500
    assert cfg.tz_aware is True


def test_settings_defaults(monkeypatch):
    for name in ("MONGO_URI", "MONGO_DB_NAME", "MONGO_SERVER_SELECTION_TIMEOUT_MS", "MONGO_TZ_AWARE"):
        monkeypatch.delenv(name, raising=False)

    cfg = MongoSettings()

    assert cfg.uri == "mongodb://localhost:27017"
    assert cfg.db_name == "read_models"
    assert cfg.client_kwargs() == {
        "serverSelectionTimeoutMS": 5000,
        "tz_aware": True,
        "uuidRepresentation": "standard",
    }


def test_tz_aware_can_be_disabled(monkeypatch):
    monkeypatch.setenv("MONGO_TZ_AWARE", "false")

    assert MongoSettings().tz_aware is False


def test_codec_options_match_client_kwargs():
    cfg = MongoSettings(tz_aware=True)

    options = cfg.codec_options()

    assert options.tz_aware is cfg.client_kwargs()["tz_aware"]
    assert options.uuid_representation == UuidRepresentation.STANDARD


def test_client_is_cached_and_configured(configured):
    client = mongo.get_mongo_client()

    assert client is mongo.get_mongo_client()
    assert client.uri == "mongodb://db.test:27017"
    assert client.kwargs["tz_aware"] is True


def test_get_collection_uses_configured_database(configured):
    assert mongo.get_collection("orders") == ("projections", "orders")
    assert mongo.get_collection("orders", db_name="other") == ("other", "orders")


def test_ping(configured):
    assert mongo.ping() == {"ok": True}
    assert mongo.get_db().commands == ["ping"]


def test_async_ping(configured):
    assert asyncio.run(mongo.aping()) == {"ok": True}
    assert mongo.get_async_db().commands == ["ping"]
    assert mongo.get_async_mongo_client() is not mongo.get_mongo_client()
