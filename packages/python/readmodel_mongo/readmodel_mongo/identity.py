"""Key renaming between a read model's ``id`` and MongoDB's ``_id``.

Pure functions with no state; the repository runs them on every write, read
and filter.
"""

from typing import Any, Mapping

from db_core.typing import MongoDocument, MongoFilter

from .errors import SerializationError

ID_FIELD = "id"
RESERVED_ID_FIELD = "_id"


def to_document(payload: Mapping[str, Any]) -> dict[str, Any]:
    """Build a document from a serialized payload, storing ``id`` as a string ``_id``."""

    if ID_FIELD not in payload:
        raise SerializationError(f"Serialized payload has no '{ID_FIELD}' field")

    document: dict[str, Any] = {}
    for key, value in payload.items():
        if key == ID_FIELD:
            document[RESERVED_ID_FIELD] = str(value)
        else:
            document[key] = value
    return document


def to_payload(document: MongoDocument) -> dict[str, Any]:
    """Build a payload from a stored document.

    ``_id`` is kept as is and its value is also exposed as ``id`` so that
    serializers expecting the object's own field can rehydrate it.
    """

    payload = dict(document)
    payload[ID_FIELD] = document[RESERVED_ID_FIELD]
    return payload


def normalize_filter(fields: Mapping[str, Any]) -> MongoFilter:
    """Translate an equality filter to stored field names.

    Only the identifier is coerced to its string form; other values are
    matched as given.
    """

    query: MongoFilter = {}
    for key, value in fields.items():
        if key in (ID_FIELD, RESERVED_ID_FIELD):
            query[RESERVED_ID_FIELD] = str(value)
        else:
            query[key] = value
    return query
