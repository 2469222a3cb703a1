"""orderly: immutable, chainable ordered collections.

Example:
    >>> from orderly import Collection, SortDirection
    >>>
    >>> people = Collection([
    ...     {"name": "ada", "age": 36},
    ...     {"name": "alan", "age": 41},
    ...     {"name": "grace", "age": 36},
    ... ])
    >>> ordered = people.sort_by(["age", "name"], [SortDirection.ASC, SortDirection.DESC])
    >>> [p["name"] for p in ordered]
    ['grace', 'ada', 'alan']
    >>> people.group_by("age", preserve_keys=False).map(lambda g: g.count()).to_dict()
    {36: 2, 41: 1}
"""

from __future__ import annotations

from orderly.collection import Collection
from orderly.compare import (
    SortDirection,
    SortFlag,
    compare_regular,
    loose_equals,
    natural_compare,
    strict_equals,
)
from orderly.errors import (
    CollectionError,
    ConfigurationError,
    InvalidSourceState,
    KeyNotFound,
    SerializationError,
)
from orderly.fields import Accessor, DefaultFieldAccessor, FieldAccessor, NamedPath, get_value
from orderly.model import (
    CallableSource,
    EagerLoadingSource,
    LazySource,
    Model,
    ModelCollection,
    collect,
)
from orderly.pagination import PageInfo, PageWindow, Pagination
from orderly.serialization import from_json, to_canonical_json, to_json, to_jsonable

__version__ = "0.1.0"

__all__ = [
    "Accessor",
    "CallableSource",
    "Collection",
    "CollectionError",
    "ConfigurationError",
    "DefaultFieldAccessor",
    "EagerLoadingSource",
    "FieldAccessor",
    "InvalidSourceState",
    "KeyNotFound",
    "LazySource",
    "Model",
    "ModelCollection",
    "NamedPath",
    "PageInfo",
    "PageWindow",
    "Pagination",
    "SerializationError",
    "SortDirection",
    "SortFlag",
    "__version__",
    "collect",
    "compare_regular",
    "from_json",
    "get_value",
    "loose_equals",
    "natural_compare",
    "strict_equals",
    "to_canonical_json",
    "to_json",
    "to_jsonable",
]
