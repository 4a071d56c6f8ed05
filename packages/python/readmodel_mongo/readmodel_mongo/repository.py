"""MongoDB-backed read-model repositories.

A repository stores objects of exactly one class in one collection. Objects
are serialized to an envelope, their ``id`` becomes the document's string
``_id`` and the document is written with a full replace-or-insert. Reads
coerce BSON values to plain data before handing them back to the serializer.

Each operation is a single driver call. Nothing is cached and nothing is
retried; driver errors (``pymongo.errors.PyMongoError``) reach the caller
unchanged. pymongo collections are thread-safe and Motor collections are
task-safe, so one repository may be shared.
"""

from __future__ import annotations

from contextlib import contextmanager
from typing import Any, Generic, Iterator, Mapping, Optional, TypeVar

from bson.errors import InvalidDocument
from loguru import logger
from motor.motor_asyncio import AsyncIOMotorCollection
from pymongo.collection import Collection

from db_core.typing import MongoDocument, MongoFilter

from .coercion import to_plain_document, to_storable
from .errors import SerializationError, TypeMismatchError
from .identity import RESERVED_ID_FIELD, normalize_filter, to_document, to_payload
from .models import Envelope
from .protocols import Identifiable, Serializer

T = TypeVar("T", bound=Identifiable)
C = TypeVar("C")


@contextmanager
def _encoding(document_id: str) -> Iterator[None]:
    """Report values the BSON encoder rejects as serialization failures."""

    try:
        yield
    except (InvalidDocument, OverflowError) as exc:
        raise SerializationError(f"Cannot encode document '{document_id}': {exc}") from exc


class _BaseRepository(Generic[C, T]):
    def __init__(self, collection: C, serializer: Serializer, model_class: type[T]):
        self._collection = collection
        self._serializer = serializer
        self._model_class = model_class
        self._class_name = serializer.class_name(model_class)

    @property
    def collection(self) -> C:
        return self._collection

    @property
    def model_class(self) -> type[T]:
        return self._model_class

    @property
    def _collection_name(self) -> str:
        return getattr(self._collection, "name", "?")

    def _normalize(self, model: T) -> dict[str, Any]:
        if not isinstance(model, self._model_class):
            logger.warning(
                f"[{self._collection_name}] refusing to save {type(model).__qualname__}, "
                f"expected {self._model_class.__qualname__}"
            )
            raise TypeMismatchError(self._model_class, model)
        envelope = self._serializer.serialize(model)
        return to_storable(to_document(envelope.payload))

    def _denormalize(self, document: MongoDocument) -> T:
        payload = to_payload(to_plain_document(document))
        envelope = Envelope(
            id=str(payload[RESERVED_ID_FIELD]),
            class_name=self._class_name,
            payload=payload,
        )
        return self._serializer.deserialize(envelope)

    @staticmethod
    def _id_filter(id: Any) -> MongoFilter:
        return {RESERVED_ID_FIELD: str(id)}


class MongoDBRepository(_BaseRepository[Collection, T]):
    """Blocking repository on a pymongo ``Collection``."""

    def save(self, model: T) -> None:
        document = self._normalize(model)
        logger.debug(f"[{self._collection_name}] upsert {document[RESERVED_ID_FIELD]}")
        with _encoding(document[RESERVED_ID_FIELD]):
            self._collection.replace_one(
                {RESERVED_ID_FIELD: document[RESERVED_ID_FIELD]}, document, upsert=True
            )

    def find(self, id: Any) -> Optional[T]:
        logger.debug(f"[{self._collection_name}] find {id}")
        document = self._collection.find_one(self._id_filter(id))
        return self._denormalize(document) if document is not None else None

    def find_by(self, fields: Mapping[str, Any]) -> list[T]:
        """Return every model matching all ``fields`` exactly.

        An empty filter returns nothing without querying; use ``find_all``.
        """

        if not fields:
            return []
        return self._find_by_query(normalize_filter(fields))

    def find_all(self) -> list[T]:
        return self._find_by_query({})

    def remove(self, id: Any) -> None:
        logger.debug(f"[{self._collection_name}] delete {id}")
        self._collection.delete_one(self._id_filter(id))

    def _find_by_query(self, query: MongoFilter) -> list[T]:
        logger.debug(f"[{self._collection_name}] find {query}")
        return [self._denormalize(document) for document in self._collection.find(query)]


class AsyncMongoDBRepository(_BaseRepository[AsyncIOMotorCollection, T]):
    """Same operations as ``MongoDBRepository`` as coroutines on a Motor collection."""

    async def save(self, model: T) -> None:
        document = self._normalize(model)
        logger.debug(f"[{self._collection_name}] upsert {document[RESERVED_ID_FIELD]}")
        with _encoding(document[RESERVED_ID_FIELD]):
            await self._collection.replace_one(
                {RESERVED_ID_FIELD: document[RESERVED_ID_FIELD]}, document, upsert=True
            )

    async def find(self, id: Any) -> Optional[T]:
        logger.debug(f"[{self._collection_name}] find {id}")
        document = await self._collection.find_one(self._id_filter(id))
        return self._denormalize(document) if document is not None else None

    async def find_by(self, fields: Mapping[str, Any]) -> list[T]:
        if not fields:
            return []
        return await self._find_by_query(normalize_filter(fields))

    async def find_all(self) -> list[T]:
        return await self._find_by_query({})

    async def remove(self, id: Any) -> None:
        logger.debug(f"[{self._collection_name}] delete {id}")
        await self._collection.delete_one(self._id_filter(id))

    async def _find_by_query(self, query: MongoFilter) -> list[T]:
        logger.debug(f"[{self._collection_name}] find {query}")
        documents = await self._collection.find(query).to_list(length=None)
        return [self._denormalize(document) for document in documents]
