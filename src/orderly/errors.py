"""Exception types raised by orderly collections."""

from __future__ import annotations


class CollectionError(Exception):
    """Base class for all collection errors."""


class ConfigurationError(CollectionError, ValueError):
    """Raised when an operation receives inconsistent parameters.

    Example: ``sort_by(["a", "b"], [SortDirection.ASC])`` supplies one
    direction for two sort keys.
    """


class KeyNotFound(CollectionError, KeyError):
    """Raised on cell access to a key that is not present."""

    def __init__(self, key: object) -> None:
        self.key = key
        super().__init__(key)

    def __str__(self) -> str:
        return f"Key not found in collection: {self.key!r}"


class InvalidSourceState(CollectionError, RuntimeError):
    """Raised when a lazy collection must materialize but has no source."""


class SerializationError(CollectionError, ValueError):
    """Raised when a collection cannot be encoded."""
