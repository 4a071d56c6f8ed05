"""Convert values between read-model payloads and MongoDB documents.

Documents coming back from pymongo may hold BSON wrapper types (``ObjectId``,
``Decimal128``, ``Binary`` ...). Serializers only ever see the closed value tree
``dict | list | str | int | float | bool | None``. Every wrapper kind maps to
one lossless plain form; kinds without one raise ``CoercionError`` instead of
being stringified.

On the way in, ``to_storable`` rejects values BSON would silently alter.
BSON dates are UTC instants with millisecond precision, so naive datetimes and
sub-millisecond microseconds are refused, and ``Decimal`` becomes ``Decimal128``.
"""

import base64
import uuid
from collections.abc import Mapping
from datetime import datetime, timezone
from decimal import Decimal
from typing import Any

from bson.binary import BINARY_SUBTYPE, OLD_BINARY_SUBTYPE, UUID_SUBTYPE, Binary
from bson.code import Code
from bson.datetime_ms import DatetimeMS
from bson.dbref import DBRef
from bson.decimal128 import Decimal128
from bson.int64 import Int64
from bson.objectid import ObjectId
from bson.timestamp import Timestamp

from db_core.typing import MongoDocument, PlainDocument, PlainValue

from .errors import CoercionError

_BYTES_SUBTYPES = (BINARY_SUBTYPE, OLD_BINARY_SUBTYPE)


def _join(path: str, key: Any) -> str:
    return f"{path}.{key}" if path else str(key)


def _coerce_binary(value: Binary, path: str) -> str:
    if value.subtype in _BYTES_SUBTYPES:
        return base64.b64encode(bytes(value)).decode("ascii")
    if value.subtype == UUID_SUBTYPE:
        return str(value.as_uuid())
    raise CoercionError(value, path)


def to_plain(value: Any, path: str = "") -> PlainValue:
    """Convert ``value`` and everything nested in it to plain values."""

    # Code and Int64 subclass str/int, so they are matched before the plain kinds.
    if isinstance(value, Code):
        raise CoercionError(value, path)
    if isinstance(value, Int64):
        return int(value)
    if value is None or isinstance(value, (bool, int, float, str)):
        return value

    if isinstance(value, DBRef):
        return to_plain(value.as_doc(), path)
    if isinstance(value, Mapping):
        return {str(key): to_plain(item, _join(path, key)) for key, item in value.items()}
    if isinstance(value, (list, tuple)):
        return [to_plain(item, _join(path, index)) for index, item in enumerate(value)]

    if isinstance(value, datetime):
        # Clients opened without tz_aware hand back naive UTC.
        if value.tzinfo is None:
            value = value.replace(tzinfo=timezone.utc)
        return value.isoformat()
    if isinstance(value, DatetimeMS):
        return int(value)
    if isinstance(value, ObjectId):
        return str(value)
    if isinstance(value, uuid.UUID):
        return str(value)
    if isinstance(value, Binary):
        return _coerce_binary(value, path)
    if isinstance(value, bytes):
        return base64.b64encode(value).decode("ascii")
    if isinstance(value, Decimal128):
        return str(value.to_decimal())
    if isinstance(value, Timestamp):
        return {"t": value.time, "i": value.inc}

    raise CoercionError(value, path)


def to_plain_document(document: MongoDocument) -> PlainDocument:
    """Coerce a whole top-level document."""

    return {str(key): to_plain(value, str(key)) for key, value in document.items()}


def to_storable(value: Any, path: str = "") -> Any:
    """Prepare a serialized value for BSON without losing information.

    Kinds not handled here are left to the driver's encoder.
    """

    if isinstance(value, Mapping):
        return {key: to_storable(item, _join(path, key)) for key, item in value.items()}
    if isinstance(value, (list, tuple)):
        return [to_storable(item, _join(path, index)) for index, item in enumerate(value)]
    if isinstance(value, datetime):
        if value.tzinfo is None or value.utcoffset() is None:
            raise CoercionError(value, path, "naive datetime, BSON dates are UTC instants")
        if value.microsecond % 1000:
            raise CoercionError(value, path, "BSON dates only keep millisecond precision")
        return value
    if isinstance(value, Decimal):
        try:
            return Decimal128(value)
        except (ArithmeticError, ValueError) as exc:
            raise CoercionError(value, path, f"does not fit Decimal128 ({exc!r})") from exc
    return value
