"""MongoDB client helpers built on top of pymongo and Motor.

Only generic utilities live here; read-model repositories receive the
collections these helpers return and never open connections themselves.
Both clients are safe to share between threads (pymongo) or tasks (Motor),
so a single cached instance per process is used."""

from functools import lru_cache
from typing import Any

from loguru import logger
from motor.motor_asyncio import AsyncIOMotorClient, AsyncIOMotorDatabase
from pymongo import MongoClient
from pymongo.collection import Collection
from pymongo.database import Database

from .settings import current_settings as _settings


@lru_cache
def get_mongo_client() -> MongoClient:
    """Return a cached blocking client configured via ``db_core.settings``."""

    cfg = _settings()
    logger.info(f"Connecting pymongo client to {cfg.uri}")
    return MongoClient(cfg.uri, **cfg.client_kwargs())


@lru_cache
def get_async_mongo_client() -> AsyncIOMotorClient:
    """Return a cached Motor client configured via ``db_core.settings``."""

    cfg = _settings()
    logger.info(f"Connecting Motor client to {cfg.uri}")
    return AsyncIOMotorClient(cfg.uri, **cfg.client_kwargs())


def get_db(name: str | None = None) -> Database:
    """Return the application database, ``settings.db_name`` unless ``name`` is given."""

    return get_mongo_client()[name or _settings().db_name]


def get_async_db(name: str | None = None) -> AsyncIOMotorDatabase:
    return get_async_mongo_client()[name or _settings().db_name]


def get_collection(name: str, db_name: str | None = None) -> Collection:
    return get_db(db_name)[name]


def ping() -> dict[str, Any]:
    """Run a simple ``ping`` command against the configured MongoDB server."""

    get_db().command("ping")
    return {"ok": True}


async def aping() -> dict[str, Any]:
    await get_async_db().command("ping")
    return {"ok": True}
