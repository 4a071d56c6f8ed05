"""Errors raised by read-model repositories."""

from pymongo.errors import PyMongoError as StoreError


class ReadModelError(Exception):
    """Base class for errors raised by this package."""


class TypeMismatchError(ReadModelError, TypeError):
    """Raised when a repository is handed an object of the wrong class."""

    def __init__(self, expected: type, actual: object):
        self.expected = expected
        self.actual = type(actual)
        super().__init__(
            f"Expected an instance of {expected.__qualname__}, got {self.actual.__qualname__}"
        )


class SerializationError(ReadModelError):
    """Raised when an object cannot be turned into an envelope or back."""


class CoercionError(SerializationError):
    """Raised when a value has no lossless representation on the other side."""

    def __init__(self, value: object, path: str, reason: str | None = None):
        self.value = value
        self.path = path
        self.reason = reason or "no lossless plain representation"
        super().__init__(f"Cannot convert {type(value).__name__} at '{path}': {self.reason}")


__all__ = [
    "ReadModelError",
    "TypeMismatchError",
    "SerializationError",
    "CoercionError",
    "StoreError",
]
