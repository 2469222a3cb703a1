"""Field selectors and the field accessor capability.

A field selector picks a scalar out of a collection item for aggregation,
sorting, grouping and re-keying. Selectors come in two shapes:

- ``NamedPath``: a key/attribute name, a dotted path (``"address.city"``) or
  an explicit list of segments (``["address", "city"]``)
- ``Accessor``: a callable ``item -> value``

``field_spec()`` normalizes raw user input into one of these, and a
``FieldAccessor`` resolves it against an item.
"""

from __future__ import annotations

from collections.abc import Callable, Mapping, Sequence
from dataclasses import dataclass
from typing import Any, Protocol, runtime_checkable

Segment = str | int


@dataclass(frozen=True)
class NamedPath:
    """Key or attribute path into an item.

    ``raw`` keeps the original dotted string so a mapping that literally holds
    a ``"a.b"`` key is matched before the path is split.
    """

    segments: tuple[Segment, ...]
    raw: Segment | None = None

    def __str__(self) -> str:
        return ".".join(str(s) for s in self.segments)


@dataclass(frozen=True)
class Accessor:
    """Callable selector."""

    func: Callable[[Any], Any]

    def __str__(self) -> str:
        return getattr(self.func, "__name__", repr(self.func))


FieldSpec = NamedPath | Accessor
RawFieldSpec = FieldSpec | str | int | Sequence[Segment] | Callable[[Any], Any]


def field_spec(spec: RawFieldSpec) -> FieldSpec:
    """Normalize a raw selector into a ``NamedPath`` or ``Accessor``.

    Raises:
        TypeError: If ``spec`` is not a supported selector shape.
    """
    if isinstance(spec, NamedPath | Accessor):
        return spec
    if isinstance(spec, str):
        return NamedPath(segments=tuple(spec.split(".")), raw=spec)
    if isinstance(spec, int) and not isinstance(spec, bool):
        return NamedPath(segments=(spec,), raw=spec)
    if callable(spec):
        return Accessor(func=spec)
    if isinstance(spec, list | tuple):
        segments: list[Segment] = []
        for segment in spec:
            if not isinstance(segment, str | int) or isinstance(segment, bool):
                msg = f"Path segments must be str or int, got {type(segment).__name__}"
                raise TypeError(msg)
            segments.append(segment)
        return NamedPath(segments=tuple(segments))
    msg = f"Unsupported field selector: {spec!r}"
    raise TypeError(msg)


@runtime_checkable
class FieldAccessor(Protocol):
    """Capability that resolves a field selector against an item."""

    def get(self, item: Any, spec: RawFieldSpec, default: Any = None) -> Any:
        """Return the selected value, or ``default`` when it is absent."""
        ...


_MISSING = object()


def _as_index(segment: Segment) -> int | None:
    if isinstance(segment, int):
        return segment
    if segment.isdigit():
        return int(segment)
    return None


def _get_segment(item: Any, segment: Segment) -> Any:
    from orderly.collection import Collection  # noqa: PLC0415

    if isinstance(item, Collection):
        return item.get(segment, _MISSING)
    if isinstance(item, Mapping):
        if segment in item:
            return item[segment]
        index = _as_index(segment)
        if index is not None and index in item:
            return item[index]
        return _MISSING
    if isinstance(item, Sequence) and not isinstance(item, str | bytes):
        index = _as_index(segment)
        if index is None:
            return _MISSING
        try:
            return item[index]
        except IndexError:
            return _MISSING
    if isinstance(segment, str):
        return getattr(item, segment, _MISSING)
    return _MISSING


class DefaultFieldAccessor:
    """Resolve selectors over mappings, sequences, collections and objects.

    Resolution order for each segment: mapping key, collection cell,
    sequence index (int segments), then attribute.

    Example:
        >>> accessor = DefaultFieldAccessor()
        >>> accessor.get({"user": {"age": 42}}, "user.age")
        42
        >>> accessor.get({"user": {}}, "user.age", 0)
        0
    """

    def get(self, item: Any, spec: RawFieldSpec, default: Any = None) -> Any:
        resolved = field_spec(spec)
        if isinstance(resolved, Accessor):
            return resolved.func(item)

        if resolved.raw is not None and len(resolved.segments) > 1:
            direct = _get_segment(item, resolved.raw)
            if direct is not _MISSING:
                return direct

        current = item
        for segment in resolved.segments:
            current = _get_segment(current, segment)
            if current is _MISSING:
                return default
        return current


default_accessor: FieldAccessor = DefaultFieldAccessor()


def get_value(item: Any, spec: RawFieldSpec, default: Any = None) -> Any:
    """Resolve ``spec`` against ``item`` with the default accessor."""
    return default_accessor.get(item, spec, default)
