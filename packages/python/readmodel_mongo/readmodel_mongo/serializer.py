"""Serializers converting read models to envelopes and back."""

from __future__ import annotations

import base64
import binascii
import collections.abc
import importlib
import types
from functools import lru_cache
from typing import Annotated, Any, Union, get_args, get_origin

from loguru import logger
from pydantic import BaseModel, ValidationError

from .errors import SerializationError
from .identity import ID_FIELD, RESERVED_ID_FIELD
from .models import Envelope
from .protocols import Serializable


@lru_cache(maxsize=None)
def resolve_class(name: str) -> type:
    """Import the class named by a dotted ``module.QualName`` path.

    The longest importable module prefix wins, so nested classes resolve too.
    """

    parts = name.split(".")
    for split in range(len(parts) - 1, 0, -1):
        module_name = ".".join(parts[:split])
        try:
            target: Any = importlib.import_module(module_name)
        except ImportError:
            continue
        try:
            for attr in parts[split:]:
                target = getattr(target, attr)
        except AttributeError:
            break
        if isinstance(target, type):
            return target
        break
    raise SerializationError(f"Unknown class '{name}'")


_SEQUENCE_ORIGINS = (list, tuple, set, frozenset, collections.abc.Sequence, collections.abc.Set)
_MAPPING_ORIGINS = (dict, collections.abc.Mapping)


def _restore_bytes(annotation: Any, value: Any) -> Any:
    """Turn base64 text read back from the store into ``bytes`` where the model expects them.

    Unions with more than one non-None member are left to pydantic.
    """

    if value is None:
        return value
    origin = get_origin(annotation)
    if origin is Annotated:
        return _restore_bytes(get_args(annotation)[0], value)
    if origin is Union or origin is types.UnionType:
        members = [arg for arg in get_args(annotation) if arg is not type(None)]
        return _restore_bytes(members[0], value) if len(members) == 1 else value
    if origin in _SEQUENCE_ORIGINS and isinstance(value, list):
        args = get_args(annotation)
        if origin is tuple and args and args[-1] is not Ellipsis:
            return [_restore_bytes(arg, item) for arg, item in zip(args, value)] + value[len(args):]
        return [_restore_bytes(args[0] if args else Any, item) for item in value]
    if origin in _MAPPING_ORIGINS and isinstance(value, dict):
        args = get_args(annotation)
        item_type = args[1] if len(args) == 2 else Any
        return {key: _restore_bytes(item_type, item) for key, item in value.items()}
    if annotation is bytes and isinstance(value, str):
        try:
            return base64.b64decode(value, validate=True)
        except binascii.Error as exc:
            raise SerializationError(f"Expected base64 encoded bytes, got {value!r}") from exc
    if origin is None and isinstance(annotation, type) and issubclass(annotation, BaseModel):
        return _restore_model_bytes(annotation, value) if isinstance(value, dict) else value
    return value


def _restore_model_bytes(cls: type[BaseModel], data: dict[str, Any]) -> dict[str, Any]:
    fields = cls.model_fields
    return {
        key: _restore_bytes(fields[key].annotation, item) if key in fields else item
        for key, item in data.items()
    }


class _DottedPathSerializer:
    """Shared class tagging for serializers that address classes by import path."""

    def class_name(self, cls: type) -> str:
        return f"{cls.__module__}.{cls.__qualname__}"

    def _envelope(self, obj: Any, payload: dict[str, Any]) -> Envelope:
        if ID_FIELD not in payload:
            raise SerializationError(
                f"{type(obj).__qualname__} serialized without an '{ID_FIELD}' field"
            )
        return Envelope(
            id=str(payload[ID_FIELD]),
            class_name=self.class_name(type(obj)),
            payload=payload,
        )


class SimpleInterfaceSerializer(_DottedPathSerializer):
    """Serializer for objects implementing ``serialize``/``deserialize`` themselves."""

    def serialize(self, obj: Any) -> Envelope:
        if not isinstance(obj, Serializable):
            raise SerializationError(
                f"{type(obj).__qualname__} does not implement serialize()/deserialize()"
            )
        return self._envelope(obj, dict(obj.serialize()))

    def deserialize(self, envelope: Envelope) -> Any:
        cls = resolve_class(envelope.class_name)
        if not issubclass(cls, Serializable):
            raise SerializationError(f"{envelope.class_name} does not implement deserialize()")
        try:
            return cls.deserialize(envelope.payload)
        except (KeyError, TypeError, ValueError) as exc:
            raise SerializationError(
                f"Cannot deserialize {envelope.class_name} '{envelope.id}': {exc}"
            ) from exc


class PydanticSerializer(_DottedPathSerializer):
    """Serializer for pydantic read models.

    Dumps in python mode so datetimes and bytes reach MongoDB as native dates
    and binary. On the way back ISO strings are parsed by ``model_validate``,
    base64 text is decoded for fields annotated as ``bytes`` and the reserved
    ``_id`` key is dropped so models with ``extra="forbid"`` validate.
    """

    def serialize(self, obj: Any) -> Envelope:
        if not isinstance(obj, BaseModel):
            raise SerializationError(f"{type(obj).__qualname__} is not a pydantic model")
        return self._envelope(obj, obj.model_dump())

    def deserialize(self, envelope: Envelope) -> Any:
        cls = resolve_class(envelope.class_name)
        if not issubclass(cls, BaseModel):
            raise SerializationError(f"{envelope.class_name} is not a pydantic model")
        try:
            payload = {
                key: value for key, value in envelope.payload.items() if key != RESERVED_ID_FIELD
            }
            return cls.model_validate(_restore_model_bytes(cls, payload))
        except ValidationError as exc:
            logger.warning(f"Payload for {envelope.class_name} '{envelope.id}' failed validation")
            raise SerializationError(
                f"Cannot deserialize {envelope.class_name} '{envelope.id}': {exc}"
            ) from exc
