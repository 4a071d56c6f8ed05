"""Factories building one repository per named collection of a database."""

from typing import TypeVar

from motor.motor_asyncio import AsyncIOMotorDatabase
from pymongo.database import Database

from .protocols import Serializer
from .repository import AsyncMongoDBRepository, MongoDBRepository

T = TypeVar("T")


class MongoDBRepositoryFactory:
    def __init__(self, database: Database, serializer: Serializer):
        self.database = database
        self.serializer = serializer

    def create(self, name: str, model_class: type[T]) -> MongoDBRepository[T]:
        return MongoDBRepository(self.database[name], self.serializer, model_class)


class AsyncMongoDBRepositoryFactory:
    def __init__(self, database: AsyncIOMotorDatabase, serializer: Serializer):
        self.database = database
        self.serializer = serializer

    def create(self, name: str, model_class: type[T]) -> AsyncMongoDBRepository[T]:
        return AsyncMongoDBRepository(self.database[name], self.serializer, model_class)
