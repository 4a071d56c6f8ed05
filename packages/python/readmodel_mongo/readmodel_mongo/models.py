"""Pydantic models exchanged between repositories and serializers."""

from typing import Any, Dict

from pydantic import BaseModel, ConfigDict, Field


class Envelope(BaseModel):
    """Serialized form of a read model: identifier, class tag and payload."""

    model_config = ConfigDict(populate_by_name=True)

    id: str
    class_name: str = Field(alias="class")
    payload: Dict[str, Any] = Field(default_factory=dict)
