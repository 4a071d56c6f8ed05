"""Minimal MongoDB helpers shared across read-model repositories.

Example usage:

    from db_core import get_collection
    from readmodel_mongo import MongoDBRepository, PydanticSerializer

    repo = MongoDBRepository(get_collection("orders"), PydanticSerializer(), OrderSummary)
    repo.save(OrderSummary(id="order-1", status="shipped"))
"""

from .settings import MongoSettings, configure, current_settings, settings
from .mongo import (
    aping,
    get_async_db,
    get_async_mongo_client,
    get_collection,
    get_db,
    get_mongo_client,
    ping,
)

__all__ = [
    "MongoSettings",
    "settings",
    "configure",
    "current_settings",
    "get_mongo_client",
    "get_async_mongo_client",
    "get_db",
    "get_async_db",
    "get_collection",
    "ping",
    "aping",
]
