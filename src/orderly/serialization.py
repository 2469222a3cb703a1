"""JSON projection and encoding for collections.

A collection whose keys are exactly ``0..n-1`` (in that order) encodes as a
JSON array; any other collection encodes as an object with string keys.
Nested collections, mappings and sequences are projected recursively.

Canonical mode additionally:
- sorts object keys lexicographically by UTF-8 bytes
- removes whitespace
- rejects NaN/Infinity
"""

from __future__ import annotations

import json
import math
from collections.abc import Mapping
from typing import Any

from orderly._internal.keys import is_list_like, normalize_key
from orderly.collection import Collection
from orderly.compare import to_string
from orderly.errors import SerializationError

# Type alias for JSON-serializable values (Any is appropriate here)
JsonValue = dict[str, Any] | list[Any] | str | int | float | bool | None


def _project_mapping(mapping: Mapping[Any, Any]) -> JsonValue:
    keys = [normalize_key(k) for k in mapping]
    values = list(mapping.values())
    if is_list_like(keys):
        return [to_jsonable(v) for v in values]
    return {to_string(k): to_jsonable(v) for k, v in zip(keys, values, strict=True)}


def to_jsonable(value: Any) -> JsonValue:
    """Project ``value`` onto JSON-compatible lists, dicts and scalars.

    Objects exposing ``to_dict()`` (dataclass-like models) are projected via
    that method; dataclass instances via their ``__dict__``.

    Raises:
        SerializationError: If a value has no JSON representation.
    """
    if isinstance(value, Collection):
        return _project_mapping(value.to_dict())
    if isinstance(value, Mapping):
        return _project_mapping(value)
    if value is None or isinstance(value, str | int | float | bool):
        return value
    if isinstance(value, list | tuple):
        return [to_jsonable(v) for v in value]
    to_dict = getattr(value, "to_dict", None)
    if callable(to_dict):
        return to_jsonable(to_dict())
    if hasattr(value, "__dict__"):
        return to_jsonable(vars(value))
    msg = f"Cannot serialize value of type {type(value).__name__}"
    raise SerializationError(msg)


def _reject_non_finite(value: JsonValue) -> None:
    if isinstance(value, float) and not math.isfinite(value):
        msg = f"non-finite float {value!r} is not allowed in canonical JSON"
        raise SerializationError(msg)
    if isinstance(value, dict):
        for v in value.values():
            _reject_non_finite(v)
        return
    if isinstance(value, list):
        for v in value:
            _reject_non_finite(v)


def _sort_keys_utf8(value: JsonValue) -> JsonValue:
    if isinstance(value, dict):
        ordered = sorted(value.items(), key=lambda kv: kv[0].encode("utf-8"))
        return {k: _sort_keys_utf8(v) for k, v in ordered}
    if isinstance(value, list):
        return [_sort_keys_utf8(v) for v in value]
    return value


def to_json(value: Any, *, indent: int | None = None) -> str:
    """Encode ``value`` as JSON, preserving collection order.

    Args:
        value: Collection, mapping or JSON-compatible value.
        indent: Pretty-print indentation; ``None`` or 0 for compact output.
    """
    projected = to_jsonable(value)
    if not indent:
        return json.dumps(projected, separators=(",", ":"), ensure_ascii=False)
    return json.dumps(projected, indent=indent, ensure_ascii=False)


def to_canonical_json(value: Any) -> str:
    """Encode ``value`` as canonical JSON (sorted keys, no whitespace)."""
    projected = to_jsonable(value)
    _reject_non_finite(projected)
    return json.dumps(
        _sort_keys_utf8(projected),
        separators=(",", ":"),
        ensure_ascii=False,
        allow_nan=False,
    )


def from_json(text: str) -> Collection[Any]:
    """Decode a JSON array or object into a collection.

    Raises:
        SerializationError: If the document is not valid JSON or its top
            level is a scalar.
    """
    try:
        data = json.loads(text)
    except json.JSONDecodeError as exc:
        msg = f"Invalid JSON document: {exc}"
        raise SerializationError(msg) from exc
    if not isinstance(data, list | dict):
        msg = f"Expected a JSON array or object, got {type(data).__name__}"
        raise SerializationError(msg)
    return Collection(data)
