"""Immutable, chainable ordered key-value collection."""

from __future__ import annotations

import functools
from collections.abc import Callable, Iterable, Iterator, Mapping
from typing import TYPE_CHECKING, Any, Generic, TypeVar

from orderly._internal.introspection import bind_value_key, is_predicate
from orderly._internal.keys import Key, next_index, normalize_key
from orderly.compare import (
    SortDirection,
    SortFlag,
    compare_regular,
    comparator_for,
    sort_key,
    to_bool,
    to_number,
    values_match,
)
from orderly.errors import ConfigurationError, InvalidSourceState, KeyNotFound
from orderly.fields import FieldAccessor, RawFieldSpec, default_accessor, field_spec

if TYPE_CHECKING:
    from orderly.pagination import PageInfo

VT = TypeVar("VT")

_EMPTY = object()


def _materialize(items: object) -> dict[Key, Any]:
    """Copy ``items`` into a fresh dict with normalized keys."""
    if items is None:
        return {}
    if isinstance(items, Collection):
        return dict(items._storage())
    if isinstance(items, Mapping):
        return {normalize_key(k): v for k, v in items.items()}
    if isinstance(items, str | bytes):
        msg = f"Cannot build a collection from {type(items).__name__}; wrap it in a list"
        raise TypeError(msg)
    if isinstance(items, Iterable):
        return dict(enumerate(items))
    msg = f"Collection items must be iterable, got {type(items).__name__}"
    raise TypeError(msg)


def _expand_option(
    value: Any,
    count: int,
    label: str,
    parse: Callable[[Any], Any],
) -> list[Any]:
    if isinstance(value, list | tuple):
        if len(value) != count:
            msg = (
                f"The length of the {label} list ({len(value)}) must match "
                f"the number of sort keys ({count})"
            )
            raise ConfigurationError(msg)
        return [parse(v) for v in value]
    return [parse(value)] * count


def _summand(value: Any) -> Any:
    if value is None or isinstance(value, bool | str):
        return to_number(value)
    return value


class Collection(Generic[VT]):
    """Ordered mapping of ``int``/``str`` keys to values.

    Transformation methods never modify the receiver; they return a new
    collection of the same class. The only in-place operations are the cell
    accessors (``c[k]``, ``c[k] = v``, ``c.append(v)``, ``del c[k]``), which
    are not synchronized: guard shared instances yourself.

    Iterating a collection yields its values in storage order; ``items()``
    yields ``(key, value)`` pairs. ``key in c`` tests for a key.

    Example:
        >>> c = Collection([1, 2, 3])
        >>> c.map(lambda i: i + 1).filter(lambda i: i < 4).sum()
        5
        >>> Collection([1, 2, 3, 4, 5]).slice(3).to_dict()
        {3: 4, 4: 5}
    """

    field_accessor: FieldAccessor = default_accessor

    def __init__(
        self,
        items: Iterable[VT] | Mapping[Any, VT] | None = (),
        *,
        field_accessor: FieldAccessor | None = None,
    ) -> None:
        self._items: dict[Key, VT] | None = _materialize(items)
        if field_accessor is not None:
            self.field_accessor = field_accessor

    def _storage(self) -> dict[Key, VT]:
        """Return the backing dict. Subclasses may load it on first use."""
        if self._items is None:
            msg = f"{type(self).__name__} has no materialized items."
            raise InvalidSourceState(msg)
        return self._items

    def _new(self, items: Mapping[Key, Any]) -> Collection[Any]:
        return type(self)(items, field_accessor=self.field_accessor)

    def _select(self, item: Any, spec: RawFieldSpec | None, default: Any = None) -> Any:
        if spec is None:
            return item
        return self.field_accessor.get(item, spec, default)

    # --------- basic queries ----------

    def count(self) -> int:
        return len(self._storage())

    def is_empty(self) -> bool:
        return not self._storage()

    def to_dict(self) -> dict[Key, VT]:
        """Return a shallow copy of the items (safe to modify)."""
        return dict(self._storage())

    def to_list(self) -> list[VT]:
        """Return the values in storage order."""
        return list(self._storage().values())

    def items(self) -> Iterator[tuple[Key, VT]]:
        """Iterate ``(key, value)`` pairs in storage order."""
        return iter(list(self._storage().items()))

    def jsonable(self) -> Any:
        """Project the items onto JSON-compatible lists and dicts.

        Keys ``0..n-1`` in order become a list, anything else an object.
        """
        from orderly.serialization import to_jsonable  # noqa: PLC0415

        return to_jsonable(self)

    def to_json(self, *, indent: int | None = None) -> str:
        from orderly.serialization import to_json  # noqa: PLC0415

        return to_json(self, indent=indent)

    # --------- cell accessors (in-place) ----------

    def __len__(self) -> int:
        return len(self._storage())

    def __iter__(self) -> Iterator[VT]:
        return iter(list(self._storage().values()))

    def __contains__(self, key: object) -> bool:
        try:
            return normalize_key(key) in self._storage()
        except (TypeError, ValueError):
            return False

    def has(self, key: object) -> bool:
        """Whether ``key`` is present."""
        return key in self

    def __getitem__(self, key: object) -> VT:
        try:
            return self._storage()[normalize_key(key)]
        except KeyError:
            raise KeyNotFound(key) from None

    def get(self, key: object, default: Any = None) -> Any:
        """Return the value at ``key``, or ``default`` when absent."""
        try:
            return self._storage().get(normalize_key(key), default)
        except (TypeError, ValueError):
            return default

    def __setitem__(self, key: object, value: VT) -> None:
        self._storage()[normalize_key(key)] = value

    def append(self, value: VT) -> None:
        """Store ``value`` under the next free integer key."""
        storage = self._storage()
        storage[next_index(storage)] = value

    def __delitem__(self, key: object) -> None:
        self._storage().pop(normalize_key(key), None)

    def __eq__(self, other: object) -> bool:
        if isinstance(other, Collection):
            return self._storage() == other._storage()
        if isinstance(other, Mapping):
            return self._storage() == _materialize(other)
        return NotImplemented

    __hash__ = None  # type: ignore[assignment]

    def __repr__(self) -> str:
        return f"{type(self).__name__}({self._storage()!r})"

    # --------- map / filter / reduce ----------

    def map(self, callback: Callable[[VT], Any]) -> Collection[Any]:
        """Apply ``callback`` to every value, keeping keys and order."""
        return self._new({k: callback(v) for k, v in self._storage().items()})

    def filter(self, predicate: Callable[..., Any] | None = None) -> Collection[VT]:
        """Keep entries for which ``predicate(value, key)`` is truthy.

        A one-argument predicate receives only the value. Without a
        predicate, falsy values (including ``"0"``) are dropped. Keys of the
        surviving entries are preserved.
        """
        if predicate is None:
            return self._new({k: v for k, v in self._storage().items() if to_bool(v)})
        call = bind_value_key(predicate)
        return self._new({k: v for k, v in self._storage().items() if call(v, k)})

    def reduce(self, callback: Callable[[Any, VT], Any], initial: Any = None) -> Any:
        """Left fold ``callback(carry, value)`` seeded with ``initial`` (``None``)."""
        return functools.reduce(callback, self._storage().values(), initial)

    # --------- aggregates ----------

    def sum(self, field: RawFieldSpec | None = None) -> Any:
        """Sum values, or a field of each value (absent fields count as 0).

        Returns 0 for an empty collection.
        """
        total: Any = 0
        for item in self._storage().values():
            total = total + _summand(self._select(item, field, 0))
        return total

    def max(self, field: RawFieldSpec | None = None) -> Any:
        """Largest value (or field) under regular comparison; 0 when empty."""
        result: Any = _EMPTY
        for item in self._storage().values():
            value = self._select(item, field, 0)
            if result is _EMPTY or compare_regular(value, result) > 0:
                result = value
        return 0 if result is _EMPTY else result

    def min(self, field: RawFieldSpec | None = None) -> Any:
        """Smallest value (or field) under regular comparison; 0 when empty."""
        result: Any = _EMPTY
        for item in self._storage().values():
            value = self._select(item, field, 0)
            if result is _EMPTY or compare_regular(value, result) < 0:
                result = value
        return 0 if result is _EMPTY else result

    # --------- sorting ----------

    def sort(
        self,
        direction: SortDirection | str = SortDirection.ASC,
        flag: SortFlag | str = SortFlag.REGULAR,
    ) -> Collection[VT]:
        """Sort by value, keeping each key attached to its value.

        If the values are not scalars, use ``sort_by()`` instead.
        """
        key_of = sort_key(flag)
        descending = SortDirection.parse(direction) is SortDirection.DESC
        ordered = sorted(
            self._storage().items(), key=lambda kv: key_of(kv[1]), reverse=descending
        )
        return self._new(dict(ordered))

    def sort_by_key(
        self,
        direction: SortDirection | str = SortDirection.ASC,
        flag: SortFlag | str = SortFlag.REGULAR,
    ) -> Collection[VT]:
        """Sort by key."""
        key_of = sort_key(flag)
        descending = SortDirection.parse(direction) is SortDirection.DESC
        ordered = sorted(
            self._storage().items(), key=lambda kv: key_of(kv[0]), reverse=descending
        )
        return self._new(dict(ordered))

    def sort_natural(self, case_sensitive: bool = False) -> Collection[VT]:
        """Sort by value in natural order (``"img2"`` before ``"img10"``), keeping keys."""
        flag = SortFlag.NATURAL if case_sensitive else SortFlag.NATURAL_CASE
        return self.sort(SortDirection.ASC, flag)

    def sort_by(
        self,
        key: RawFieldSpec | list[RawFieldSpec] | tuple[RawFieldSpec, ...],
        direction: SortDirection | str | list[SortDirection | str] = SortDirection.ASC,
        flag: SortFlag | str | list[SortFlag | str] = SortFlag.REGULAR,
    ) -> Collection[VT]:
        """Sort by one or more fields of the values.

        Keys are NOT preserved: the result is re-indexed ``0..n-1``.

        Args:
            key: Field selector, or a list of selectors compared in order
                (ties on the first fall through to the next). To select a
                nested path use a dotted string or ``NamedPath``.
            direction: One direction for all keys, or a list with one per key.
            flag: One sort flag for all keys, or a list with one per key.

        Returns:
            A new collection with the sorted values.

        Raises:
            ConfigurationError: If ``direction`` or ``flag`` is a list whose
                length differs from the number of keys.
        """
        keys = list(key) if isinstance(key, list | tuple) else [key]
        specs = [field_spec(k) for k in keys]
        directions = _expand_option(direction, len(specs), "direction", SortDirection.parse)
        flags = _expand_option(flag, len(specs), "sort flag", SortFlag.parse)
        if not specs:
            return self.values()

        comparators = [comparator_for(f) for f in flags]
        descending = [d is SortDirection.DESC for d in directions]
        accessor = self.field_accessor
        rows = [
            (tuple(accessor.get(item, spec) for spec in specs), item)
            for item in self._storage().values()
        ]

        def compare_rows(a: tuple[tuple[Any, ...], Any], b: tuple[tuple[Any, ...], Any]) -> int:
            for index, compare in enumerate(comparators):
                result = compare(a[0][index], b[0][index])
                if result:
                    return -result if descending[index] else result
            return 0

        rows.sort(key=functools.cmp_to_key(compare_rows))
        return self._new(dict(enumerate(item for _, item in rows)))

    # --------- reordering & reshaping ----------

    def reverse(self) -> Collection[VT]:
        """Reverse the order; keys stay attached to their values."""
        return self._new(dict(reversed(self._storage().items())))

    def values(self) -> Collection[VT]:
        """Drop the keys, re-indexing ``0..n-1``."""
        return self._new(dict(enumerate(self._storage().values())))

    def keys(self) -> Collection[Key]:
        """Collection whose values are this collection's keys."""
        return self._new(dict(enumerate(self._storage().keys())))

    def flip(self) -> Collection[Key]:
        """Swap keys and values. Later duplicates win.

        Raises:
            TypeError: If a value is not an ``int`` or ``str``.
        """
        flipped: dict[Key, Key] = {}
        for k, v in self._storage().items():
            if isinstance(v, bool) or not isinstance(v, int | str):
                msg = f"Can only flip str and int values, got {type(v).__name__} at key {k!r}"
                raise TypeError(msg)
            flipped[normalize_key(v)] = k
        return self._new(flipped)

    def merge(self, other: Iterable[Any] | Mapping[Any, Any]) -> Collection[Any]:
        """Append ``other`` to this collection.

        Integer keys from both sides are renumbered in order. A string key
        present on both sides keeps its first position and takes the value
        from ``other``.
        """
        merged: dict[Key, Any] = {}
        index = 0
        for source in (self._storage(), _materialize(other)):
            for k, v in source.items():
                if isinstance(k, int):
                    merged[index] = v
                    index += 1
                else:
                    merged[k] = v
        return self._new(merged)

    def remap(self, from_: RawFieldSpec, to: RawFieldSpec) -> Collection[Any]:
        """Build a new mapping of ``from_(item) -> to(item)``.

        Later items overwrite earlier ones on key collision.

        Example:
            >>> Collection([{"id": 1, "age": 30}]).remap("id", "age").to_dict()
            {1: 30}
        """
        accessor = self.field_accessor
        return self._new(
            {
                normalize_key(accessor.get(item, from_)): accessor.get(item, to)
                for item in self._storage().values()
            }
        )

    def index_by(self, key: RawFieldSpec) -> Collection[VT]:
        """Re-key each item by the selected field."""
        return self.remap(key, lambda item: item)

    def group_by(
        self, field: RawFieldSpec, preserve_keys: bool = True
    ) -> Collection[Collection[VT]]:
        """Partition items into buckets keyed by the selected field.

        Args:
            field: Selector whose value names the bucket.
            preserve_keys: Keep original keys inside each bucket; otherwise
                each bucket is indexed ``0..n-1``.

        Returns:
            A collection of collections, in first-seen bucket order.
        """
        buckets: dict[Key, dict[Key, VT]] = {}
        for k, item in self._storage().items():
            group = normalize_key(self.field_accessor.get(item, field))
            bucket = buckets.setdefault(group, {})
            if preserve_keys:
                bucket[k] = item
            else:
                bucket[len(bucket)] = item
        return self._new({group: self._new(bucket) for group, bucket in buckets.items()})

    # --------- search ----------

    def contains(self, needle: Any, strict: bool = False) -> bool:
        """Whether any value matches ``needle``.

        A callable needle is a predicate and ``strict`` has no effect.
        Otherwise values compare with strict or loose equality.
        """
        values = self._storage().values()
        if is_predicate(needle):
            return any(needle(v) for v in values)
        return any(values_match(v, needle, strict=strict) for v in values)

    def remove(self, needle: Any, strict: bool = False) -> Collection[VT]:
        """Drop values matching ``needle`` (see ``contains``); keys are preserved."""
        storage = self._storage()
        if is_predicate(needle):
            return self._new({k: v for k, v in storage.items() if not needle(v)})
        return self._new(
            {k: v for k, v in storage.items() if not values_match(v, needle, strict=strict)}
        )

    def replace(self, needle: Any, replacement: Any, strict: bool = False) -> Collection[Any]:
        """Substitute ``replacement`` for every value equal to ``needle``."""
        return self.map(
            lambda v: replacement if values_match(v, needle, strict=strict) else v
        )

    # --------- slicing ----------

    def slice(
        self,
        offset: int,
        limit: int | None = None,
        preserve_keys: bool = True,
    ) -> Collection[VT]:
        """Select a run of entries by position.

        Args:
            offset: Start position; negative counts from the end.
            limit: Maximum number of entries; ``None`` runs to the end and a
                negative value stops that many entries before the end.
            preserve_keys: When false, integer keys are re-indexed ``0..n-1``
                (string keys are always kept).
        """
        entries = list(self._storage().items())
        size = len(entries)
        start = offset if offset >= 0 else max(size + offset, 0)
        start = min(start, size)
        if limit is None:
            stop = size
        elif limit < 0:
            stop = size + limit
        else:
            stop = min(start + limit, size)
        selected = entries[start:stop] if stop > start else []

        if preserve_keys:
            return self._new(dict(selected))
        reindexed: dict[Key, VT] = {}
        index = 0
        for k, v in selected:
            if isinstance(k, int):
                reindexed[index] = v
                index += 1
            else:
                reindexed[k] = v
        return self._new(reindexed)

    def paginate(self, page: PageInfo, preserve_keys: bool = False) -> Collection[VT]:
        """Return the window described by ``page`` (``limit <= 0`` = to the end)."""
        limit = page.limit
        return self.slice(page.offset, limit if limit > 0 else None, preserve_keys)
