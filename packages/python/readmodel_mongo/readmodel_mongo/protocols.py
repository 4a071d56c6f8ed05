"""Structural contracts for read models, serializers and repositories."""

from __future__ import annotations

from typing import Any, Mapping, Optional, Protocol, runtime_checkable

from .models import Envelope


@runtime_checkable
class Identifiable(Protocol):
    """Anything with a stable ``id`` that can be turned into a string."""

    id: Any


@runtime_checkable
class Serializable(Protocol):
    """Read models that know how to turn themselves into plain data."""

    def serialize(self) -> dict[str, Any]:  # pragma: no cover - structural typing only
        ...

    @classmethod
    def deserialize(cls, data: Mapping[str, Any]) -> Any:  # pragma: no cover
        ...


class Serializer(Protocol):
    def class_name(self, cls: type) -> str:  # pragma: no cover
        ...

    def serialize(self, obj: Any) -> Envelope:  # pragma: no cover
        ...

    def deserialize(self, envelope: Envelope) -> Any:  # pragma: no cover
        ...


class Repository(Protocol):
    def save(self, model: Any) -> None: ...

    def find(self, id: Any) -> Optional[Any]: ...

    def find_by(self, fields: Mapping[str, Any]) -> list[Any]: ...

    def find_all(self) -> list[Any]: ...

    def remove(self, id: Any) -> None: ...


class AsyncRepository(Protocol):
    async def save(self, model: Any) -> None: ...

    async def find(self, id: Any) -> Optional[Any]: ...

    async def find_by(self, fields: Mapping[str, Any]) -> list[Any]: ...

    async def find_all(self) -> list[Any]: ...

    async def remove(self, id: Any) -> None: ...
