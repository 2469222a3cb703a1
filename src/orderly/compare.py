"""Comparison and equality strategies for collection values.

Two equality modes are supported:
- strict: same type and equal value (``strict_equals``)
- loose: coercive equality (``loose_equals``). Numbers and numeric strings
  compare numerically, ``bool`` and ``None`` coerce the other operand,
  everything else compares as text or by native equality.

Ordering follows the same coercive model. ``compare_regular`` is the
three-way comparison used by ``SortFlag.REGULAR`` as well as ``min``/``max``.
Operands of unrelated, unorderable types fall back to ordering by type name,
so every comparison is deterministic.
"""

from __future__ import annotations

import functools
import math
import re
from collections.abc import Callable, Mapping
from enum import Enum

from orderly.errors import ConfigurationError

Comparator = Callable[[object, object], int]

_WS = " \t\n\r\v\f"
_NUMBER_BODY = r"[+-]?(?:[0-9]+(?:\.[0-9]*)?|\.[0-9]+)(?:[eE][+-]?[0-9]+)?"
_NUMERIC_RE = re.compile(rf"^[{_WS}]*{_NUMBER_BODY}[{_WS}]*\Z")
_LEADING_NUMERIC_RE = re.compile(rf"^[{_WS}]*({_NUMBER_BODY})")
_DIGITS = frozenset("0123456789")

# Floats at or beyond this magnitude are rendered in exponent form.
_MAX_PLAIN_FLOAT = 1e15


class SortDirection(str, Enum):
    """Sort direction."""

    ASC = "asc"
    DESC = "desc"

    @classmethod
    def parse(cls, value: SortDirection | str) -> SortDirection:
        """Accept a member or its (case-insensitive) string value."""
        if isinstance(value, cls):
            return value
        try:
            return cls(str(value).lower())
        except ValueError:
            allowed = ", ".join(d.value for d in cls)
            msg = f"Invalid sort direction: {value!r}. Allowed: {allowed}"
            raise ConfigurationError(msg) from None


class SortFlag(str, Enum):
    """Type of comparison applied when sorting."""

    REGULAR = "regular"
    NUMERIC = "numeric"
    STRING = "string"
    STRING_CASE = "string_case"
    NATURAL = "natural"
    NATURAL_CASE = "natural_case"

    @classmethod
    def parse(cls, value: SortFlag | str) -> SortFlag:
        """Accept a member or its (case-insensitive) string value."""
        if isinstance(value, cls):
            return value
        try:
            return cls(str(value).lower())
        except ValueError:
            allowed = ", ".join(f.value for f in cls)
            msg = f"Invalid sort flag: {value!r}. Allowed: {allowed}"
            raise ConfigurationError(msg) from None


def _cmp(a: object, b: object) -> int:
    return (a > b) - (a < b)  # type: ignore[operator]


def _is_number(value: object) -> bool:
    return isinstance(value, int | float) and not isinstance(value, bool)


def is_numeric(value: object) -> bool:
    """Whether ``value`` is a number or a string holding a complete number."""
    if _is_number(value):
        return True
    return isinstance(value, str) and _NUMERIC_RE.match(value) is not None


def _parse_number(text: str) -> int | float:
    text = text.strip(_WS)
    if any(c in text for c in ".eE"):
        return float(text)
    return int(text)


def to_number(value: object) -> int | float:
    """Coerce ``value`` to a number.

    Strings use their leading numeric prefix (``"12abc"`` -> 12) and are 0
    without one. ``None`` is 0, containers are 1 when non-empty.
    """
    if isinstance(value, bool):
        return int(value)
    if _is_number(value):
        return value  # type: ignore[return-value]
    if value is None:
        return 0
    if isinstance(value, str):
        match = _LEADING_NUMERIC_RE.match(value)
        return _parse_number(match.group(1)) if match else 0
    try:
        return 1 if len(value) else 0  # type: ignore[arg-type]
    except TypeError:
        return 1


def _format_float(value: float) -> str:
    if math.isnan(value):
        return "NAN"
    if math.isinf(value):
        return "INF" if value > 0 else "-INF"
    if value.is_integer() and abs(value) < _MAX_PLAIN_FLOAT:
        return str(int(value))
    return repr(value)


def to_string(value: object) -> str:
    """Coerce ``value`` to its textual form (``True`` -> "1", ``None`` -> "")."""
    if isinstance(value, str):
        return value
    if isinstance(value, bool):
        return "1" if value else ""
    if value is None:
        return ""
    if isinstance(value, float):
        return _format_float(value)
    return str(value)


def to_bool(value: object) -> bool:
    """Coerce ``value`` to a boolean (``""`` and ``"0"`` are false)."""
    if isinstance(value, str):
        return value not in ("", "0")
    return bool(value)


def compare_regular(a: object, b: object) -> int:
    """Three-way coercive comparison. Returns -1, 0 or 1."""
    if a is None and b is None:
        return 0
    if isinstance(a, bool) or isinstance(b, bool):
        return _cmp(to_bool(a), to_bool(b))
    if a is None:
        return _cmp("", b) if isinstance(b, str) else _cmp(False, to_bool(b))
    if b is None:
        return _cmp(a, "") if isinstance(a, str) else _cmp(to_bool(a), False)

    if _is_number(a) and _is_number(b):
        return _cmp(a, b)
    if isinstance(a, str) and isinstance(b, str):
        if is_numeric(a) and is_numeric(b):
            return _cmp(_parse_number(a), _parse_number(b))
        return _cmp(a, b)
    if _is_number(a) and isinstance(b, str):
        return _cmp(a, _parse_number(b)) if is_numeric(b) else _cmp(to_string(a), b)
    if isinstance(a, str) and _is_number(b):
        return _cmp(_parse_number(a), b) if is_numeric(a) else _cmp(a, to_string(b))

    try:
        if a == b:
            return 0
        if a < b:  # type: ignore[operator]
            return -1
        if b < a:  # type: ignore[operator]
            return 1
    except TypeError:
        pass
    return _cmp(type(a).__name__, type(b).__name__)


def compare_numeric(a: object, b: object) -> int:
    return _cmp(to_number(a), to_number(b))


def compare_string(a: object, b: object) -> int:
    return _cmp(to_string(a), to_string(b))


def compare_string_case(a: object, b: object) -> int:
    return _cmp(to_string(a).lower(), to_string(b).lower())


def _compare_right(a: str, ai: int, b: str, bi: int) -> tuple[int, int, int]:
    # Right-aligned digit runs: the longest run wins, else the first differing digit.
    bias = 0
    while True:
        a_digit = ai < len(a) and a[ai] in _DIGITS
        b_digit = bi < len(b) and b[bi] in _DIGITS
        if not a_digit and not b_digit:
            return bias, ai, bi
        if not a_digit:
            return -1, ai, bi
        if not b_digit:
            return 1, ai, bi
        if bias == 0:
            bias = _cmp(a[ai], b[bi])
        ai += 1
        bi += 1


def _compare_left(a: str, ai: int, b: str, bi: int) -> tuple[int, int, int]:
    # Left-aligned (fractional) digit runs: the first differing digit wins.
    while True:
        a_digit = ai < len(a) and a[ai] in _DIGITS
        b_digit = bi < len(b) and b[bi] in _DIGITS
        if not a_digit and not b_digit:
            return 0, ai, bi
        if not a_digit:
            return -1, ai, bi
        if not b_digit:
            return 1, ai, bi
        if a[ai] != b[bi]:
            return _cmp(a[ai], b[bi]), ai, bi
        ai += 1
        bi += 1


def _skip_leading_zeros(text: str) -> int:
    # Only zeros at the very start of the string, and never the last digit of the run.
    i = 0
    while i + 1 < len(text) and text[i] == "0" and text[i + 1] in _DIGITS:
        i += 1
    return i


def natural_compare(a: object, b: object, *, case_sensitive: bool = True) -> int:
    """Compare two values in natural order.

    Embedded digit runs compare numerically, so ``"img2" < "img10"`` and
    ``"9" < "010"``. Whitespace is ignored. Leading zeros of the string are
    skipped; later runs that start with ``0`` compare digit by digit as
    fractions. Without ``case_sensitive``, letters compare case-folded.

    Example:
        >>> sorted(["img10", "img2", "img1"], key=functools.cmp_to_key(natural_compare))
        ['img1', 'img2', 'img10']
    """
    sa = to_string(a)
    sb = to_string(b)
    if not case_sensitive:
        sa = sa.upper()
        sb = sb.upper()

    ai = _skip_leading_zeros(sa)
    bi = _skip_leading_zeros(sb)
    while True:
        while ai < len(sa) and sa[ai] in _WS:
            ai += 1
        while bi < len(sb) and sb[bi] in _WS:
            bi += 1

        if ai >= len(sa) or bi >= len(sb):
            return _cmp(len(sa) - ai > 0, len(sb) - bi > 0)

        ca = sa[ai]
        cb = sb[bi]
        if ca in _DIGITS and cb in _DIGITS:
            if ca == "0" or cb == "0":
                result, ai, bi = _compare_left(sa, ai, sb, bi)
            else:
                result, ai, bi = _compare_right(sa, ai, sb, bi)
            if result:
                return result
            continue

        if ca != cb:
            return _cmp(ca, cb)
        ai += 1
        bi += 1


_COMPARATORS: dict[SortFlag, Comparator] = {
    SortFlag.REGULAR: compare_regular,
    SortFlag.NUMERIC: compare_numeric,
    SortFlag.STRING: compare_string,
    SortFlag.STRING_CASE: compare_string_case,
    SortFlag.NATURAL: natural_compare,
    SortFlag.NATURAL_CASE: functools.partial(natural_compare, case_sensitive=False),
}


def comparator_for(flag: SortFlag | str) -> Comparator:
    """Return the three-way comparator selected by ``flag``."""
    return _COMPARATORS[SortFlag.parse(flag)]


def sort_key(
    flag: SortFlag | str = SortFlag.REGULAR,
) -> Callable[[object], object]:
    """Return a ``key=`` function for ``sorted`` using the comparator of ``flag``."""
    return functools.cmp_to_key(comparator_for(flag))


def strict_equals(a: object, b: object) -> bool:
    """Equality without coercion: same type and equal value.

    Lists, tuples and mappings are compared element by element, so
    ``[1]`` does not strictly equal ``[True]``.
    """
    if a is b:
        return True
    if type(a) is not type(b):
        return False
    if isinstance(a, list | tuple) and isinstance(b, list | tuple):
        return len(a) == len(b) and all(strict_equals(x, y) for x, y in zip(a, b, strict=True))
    if isinstance(a, Mapping) and isinstance(b, Mapping):
        return list(a) == list(b) and all(strict_equals(a[k], b[k]) for k in a)
    return bool(a == b)


def loose_equals(a: object, b: object) -> bool:
    """Coercive equality (``1 == "1"``, ``None == ""``, ``"1e1" == "10"``)."""
    if a is None and b is None:
        return True
    if isinstance(a, bool) or isinstance(b, bool):
        return to_bool(a) == to_bool(b)
    if a is None:
        return b == "" if isinstance(b, str) else not to_bool(b)
    if b is None:
        return a == "" if isinstance(a, str) else not to_bool(a)

    if _is_number(a) and _is_number(b):
        return a == b
    if isinstance(a, str) and isinstance(b, str):
        if is_numeric(a) and is_numeric(b):
            return _parse_number(a) == _parse_number(b)
        return a == b
    if _is_number(a) and isinstance(b, str):
        return a == _parse_number(b) if is_numeric(b) else to_string(a) == b
    if isinstance(a, str) and _is_number(b):
        return _parse_number(a) == b if is_numeric(a) else a == to_string(b)

    if isinstance(a, list | tuple) and isinstance(b, list | tuple):
        return len(a) == len(b) and all(loose_equals(x, y) for x, y in zip(a, b, strict=True))
    if isinstance(a, Mapping) and isinstance(b, Mapping):
        return a.keys() == b.keys() and all(loose_equals(a[k], b[k]) for k in a)
    return bool(a == b)


def values_match(value: object, needle: object, *, strict: bool) -> bool:
    """Compare ``value`` against ``needle`` using the selected equality mode."""
    return strict_equals(value, needle) if strict else loose_equals(value, needle)
