"""Lightweight typing helpers shared by Mongo-backed repositories."""

from typing import Any, Dict, List, Mapping, Union

MongoDocument = Mapping[str, Any]
"""A raw document as returned by the driver, possibly holding BSON wrapper types."""

PlainValue = Union[None, bool, int, float, str, List["PlainValue"], Dict[str, "PlainValue"]]
"""Closed value tree a raw document is reduced to before object reconstruction."""

PlainDocument = Dict[str, PlainValue]

MongoFilter = Dict[str, Any]
"""Exact-match equality filter: field name to expected value."""
