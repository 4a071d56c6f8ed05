"""MongoDB persistence for read models.

Stores objects of one class per collection, keyed by the string form of their
``id`` under MongoDB's ``_id``, using a pluggable serializer.
"""

from .errors import (
    CoercionError,
    ReadModelError,
    SerializationError,
    StoreError,
    TypeMismatchError,
)
from .factory import AsyncMongoDBRepositoryFactory, MongoDBRepositoryFactory
from .models import Envelope
from .protocols import AsyncRepository, Identifiable, Repository, Serializable, Serializer
from .repository import AsyncMongoDBRepository, MongoDBRepository
from .serializer import PydanticSerializer, SimpleInterfaceSerializer

__all__ = [
    "MongoDBRepository",
    "AsyncMongoDBRepository",
    "MongoDBRepositoryFactory",
    "AsyncMongoDBRepositoryFactory",
    "Envelope",
    "Identifiable",
    "Serializable",
    "Serializer",
    "Repository",
    "AsyncRepository",
    "PydanticSerializer",
    "SimpleInterfaceSerializer",
    "ReadModelError",
    "TypeMismatchError",
    "SerializationError",
    "CoercionError",
    "StoreError",
]
