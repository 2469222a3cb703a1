"""Introspection utilities for user-supplied callbacks."""

from __future__ import annotations

import functools
import inspect
from typing import TYPE_CHECKING

if TYPE_CHECKING:
    from collections.abc import Callable

_POSITIONAL_KINDS = (
    inspect.Parameter.POSITIONAL_ONLY,
    inspect.Parameter.POSITIONAL_OR_KEYWORD,
)


def accepts_key_argument(func: Callable[..., object]) -> bool:
    """Whether ``func`` can be called as ``func(value, key)``.

    Callables without an inspectable signature (some builtins) are assumed to
    take the value only.
    """
    try:
        sig = inspect.signature(func)
    except (TypeError, ValueError):
        return False

    positional = 0
    for param in sig.parameters.values():
        if param.kind == inspect.Parameter.VAR_POSITIONAL:
            return True
        if param.kind in _POSITIONAL_KINDS:
            positional += 1
    return positional >= 2  # noqa: PLR2004


def bind_value_key(func: Callable[..., object]) -> Callable[[object, object], object]:
    """Adapt ``func`` to the ``(value, key)`` calling convention."""
    if accepts_key_argument(func):
        return func

    @functools.wraps(func)
    def value_only(value: object, key: object) -> object:
        del key
        return func(value)

    return value_only


def is_predicate(candidate: object) -> bool:
    """Whether a search needle should be treated as a predicate.

    Functions, methods, lambdas, partials and other callable instances are
    predicates. Classes are callable but are searched for as values.
    """
    return callable(candidate) and not isinstance(candidate, type)
