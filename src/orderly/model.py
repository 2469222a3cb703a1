"""Model collections backed by a lazy record source.

A ``ModelCollection`` defers loading until its items are first needed, then
calls ``source.fetch_all()`` exactly once and behaves like any other
``Collection``. Bulk operations (fill, update, insert, validate, save, delete)
are delegated to the models themselves.

Example:
    >>> users = collect(CallableSource(lambda: repository.all_users()))
    >>> users.is_loaded
    False
    >>> users.filter(lambda u: u.active).sum("age")  # triggers fetch_all()
    >>> users.fill_all({"notified": True}).save_all()
"""

from __future__ import annotations

import threading
from collections.abc import Callable, Iterable, Mapping, Sequence
from typing import Any, Protocol, TypeVar, runtime_checkable

import structlog

from orderly._internal.keys import Key
from orderly.collection import Collection, _materialize
from orderly.errors import InvalidSourceState
from orderly.fields import FieldAccessor

logger = structlog.get_logger()

MT = TypeVar("MT", bound="ModelCollection")


@runtime_checkable
class LazySource(Protocol):
    """Source that can produce every record in one call."""

    def fetch_all(self) -> Iterable[Any]:
        """Return all records."""
        ...


class CallableSource:
    """Adapt a zero-argument callable to the ``LazySource`` protocol."""

    def __init__(self, fetch: Callable[[], Iterable[Any]]) -> None:
        self._fetch = fetch

    def fetch_all(self) -> Iterable[Any]:
        return self._fetch()

    def __repr__(self) -> str:
        name = getattr(self._fetch, "__qualname__", repr(self._fetch))
        return f"CallableSource({name})"


@runtime_checkable
class EagerLoadingSource(LazySource, Protocol):
    """Source that can also populate relations of already fetched records."""

    def find_with(self, relations: Sequence[str], models: list[Any]) -> None:
        """Load ``relations`` into ``models`` in place."""
        ...


@runtime_checkable
class Model(Protocol):
    """Capabilities a record needs for the bulk operations."""

    scenario: str

    def set_attributes(self, attributes: Mapping[str, Any]) -> None: ...

    def validate(self) -> bool: ...

    def save(self, run_validation: bool = True) -> bool: ...

    def update(
        self, run_validation: bool = True, attribute_names: Sequence[str] | None = None
    ) -> bool: ...

    def insert(
        self, run_validation: bool = True, attribute_names: Sequence[str] | None = None
    ) -> bool: ...

    def delete(self) -> None: ...

    def to_dict(self) -> dict[str, Any]: ...


class ModelCollection(Collection[Any]):
    """Collection of models, optionally loaded on demand from a source.

    Args:
        models: Models to hold directly. When ``None`` the collection is
            loaded from ``source`` on first access.
        source: Lazy source used to materialize the collection.
        field_accessor: Field accessor override.
    """

    def __init__(
        self,
        models: Iterable[Any] | Mapping[Any, Any] | None = None,
        *,
        source: LazySource | None = None,
        field_accessor: FieldAccessor | None = None,
    ) -> None:
        super().__init__(models, field_accessor=field_accessor)
        self.source = source
        self._lock = threading.Lock()
        if models is None:
            self._items = None

    @property
    def is_loaded(self) -> bool:
        """Whether the items have been materialized."""
        return self._items is not None

    def _storage(self) -> dict[Key, Any]:
        items = self._items
        if items is None:
            with self._lock:
                if self._items is None:
                    self._items = self._fetch()
                items = self._items
        return items

    def _fetch(self) -> dict[Key, Any]:
        if self.source is None:
            msg = "This collection was not created from a source and holds no models."
            raise InvalidSourceState(msg)
        items = _materialize(self.source.fetch_all())
        logger.debug("collection.materialized", source=repr(self.source), count=len(items))
        return items

    @property
    def models(self) -> list[Any]:
        """The models contained in this collection."""
        return self.to_list()

    def find_with(self, relations: str | Sequence[str]) -> ModelCollection:
        """Eager-load ``relations`` for every model through the source.

        Raises:
            InvalidSourceState: If there is no source or it cannot load relations.
        """
        if not isinstance(self.source, EagerLoadingSource):
            msg = "This collection's source cannot load relations for its models."
            raise InvalidSourceState(msg)
        names = [relations] if isinstance(relations, str) else list(relations)
        self.source.find_with(names, self.to_list())
        return self

    def scenario(self, name: str) -> ModelCollection:
        """Set the validation scenario of every model."""
        for model in self._storage().values():
            model.scenario = name
        return self

    def fill_all(self, attributes: Mapping[str, Any]) -> ModelCollection:
        """Assign ``attributes`` to every model."""
        for model in self._storage().values():
            model.set_attributes(attributes)
        return self

    def update_all(
        self, attributes: Mapping[str, Any], run_validation: bool = True
    ) -> ModelCollection:
        """Assign ``attributes`` to every model and update only those attributes."""
        names = list(attributes)
        failed = 0
        for model in self._storage().values():
            model.set_attributes(attributes)
            if not model.update(run_validation=run_validation, attribute_names=names):
                failed += 1
        logger.debug("collection.updated", count=self.count(), failed=failed, attributes=names)
        return self

    def insert_all(
        self, attributes: Mapping[str, Any], run_validation: bool = True
    ) -> ModelCollection:
        """Assign ``attributes`` to every model and insert it as a new record."""
        names = list(attributes)
        failed = 0
        for model in self._storage().values():
            model.set_attributes(attributes)
            if not model.insert(run_validation=run_validation, attribute_names=names):
                failed += 1
        logger.debug("collection.inserted", count=self.count(), failed=failed)
        return self

    def validate_all(self) -> bool:
        """Validate every model. True only if all of them pass."""
        success = True
        for model in self._storage().values():
            if not model.validate():
                success = False
        return success

    def save_all(self, run_validation: bool = True) -> ModelCollection:
        failed = 0
        for model in self._storage().values():
            if not model.save(run_validation=run_validation):
                failed += 1
        logger.debug("collection.saved", count=self.count(), failed=failed)
        return self

    def delete_all(self) -> None:
        for model in self._storage().values():
            model.delete()
        logger.debug("collection.deleted", count=self.count())

    def to_array(self, fields: Sequence[str] | None = None) -> Collection[dict[str, Any]]:
        """Project each model to a dict, optionally restricted to ``fields``."""

        def project(model: Any) -> dict[str, Any]:
            data = model.to_dict()
            if fields is None:
                return data
            return {name: data[name] for name in fields if name in data}

        return Collection(self._storage(), field_accessor=self.field_accessor).map(project)

    def to_json(self, *, indent: int | None = None) -> str:
        return self.to_array().to_json(indent=indent)


def collect(
    source: LazySource | Callable[[], Iterable[Any]],
    collection_class: type[MT] = ModelCollection,  # type: ignore[assignment]
) -> MT:
    """Return a lazily-loaded collection bound to ``source``.

    Args:
        source: A ``LazySource`` or a zero-argument callable returning records.
        collection_class: ``ModelCollection`` subclass to instantiate.
    """
    if not isinstance(source, LazySource):
        source = CallableSource(source)
    return collection_class(source=source)
