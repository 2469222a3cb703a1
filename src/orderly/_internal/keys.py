"""Associative-array key rules.

Collection keys are either ``int`` or ``str``:
- bool -> int (True -> 1, False -> 0)
- float -> int (truncated toward zero)
- None -> ""
- canonical decimal integer strings ("7", "-3") -> int
  ("07", "+3", "1.0", " 7" and "-0" stay strings)
"""

from __future__ import annotations

import math
import re
from collections.abc import Iterable

Key = int | str

_CANONICAL_INT_RE = re.compile(r"^(0|-?[1-9][0-9]*)\Z")


def normalize_key(key: object) -> Key:
    """Normalize ``key`` to the int/str form used for collection storage.

    Raises:
        TypeError: If the value cannot be used as a key.
        ValueError: If a float key is NaN or infinite.
    """
    if isinstance(key, bool):
        return int(key)
    if isinstance(key, int):
        return key
    if isinstance(key, str):
        if _CANONICAL_INT_RE.match(key):
            return int(key)
        return key
    if isinstance(key, float):
        if not math.isfinite(key):
            msg = f"Non-finite float cannot be used as a key: {key!r}"
            raise ValueError(msg)
        return int(key)
    if key is None:
        return ""
    msg = f"Illegal key type: {type(key).__name__} (expected int or str)"
    raise TypeError(msg)


def next_index(keys: Iterable[Key]) -> int:
    """Return the integer key that an append would use.

    This is one past the largest non-negative integer key, or 0.
    """
    highest = -1
    for key in keys:
        if isinstance(key, int) and key > highest:
            highest = key
    return highest + 1


def is_list_like(keys: Iterable[Key]) -> bool:
    """Whether ``keys`` is exactly the sequence 0, 1, ..., n-1."""
    for expected, key in enumerate(keys):
        if key != expected or not isinstance(key, int):
            return False
    return True
