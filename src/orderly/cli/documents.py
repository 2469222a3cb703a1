"""Reading and writing the JSON documents the CLI operates on."""

from __future__ import annotations

import json
import sys
from typing import TYPE_CHECKING, Any

from rich.console import Console

from orderly.errors import SerializationError
from orderly.serialization import from_json, to_json

if TYPE_CHECKING:
    from pathlib import Path

    from orderly.collection import Collection

console = Console()
err_console = Console(stderr=True)

STDIN_PATH = "-"


def load_collection(path: Path) -> Collection[Any]:
    """Load a JSON array or object from ``path`` (``-`` for stdin).

    Exits with status 1 when the document cannot be read or decoded.
    """
    try:
        if str(path) == STDIN_PATH:
            text = sys.stdin.read()
        else:
            text = path.read_text(encoding="utf-8")
    except OSError as err:
        err_console.print(f"[red]✗[/red] Cannot read {path}: {err}")
        raise SystemExit(1) from None

    try:
        return from_json(text)
    except SerializationError as err:
        err_console.print(f"[red]✗[/red] {path}: {err}")
        raise SystemExit(1) from None


def emit(value: Any, *, indent: int) -> None:
    """Print ``value`` as JSON on stdout."""
    console.print(
        to_json(value, indent=indent),
        soft_wrap=True,
        markup=False,
        highlight=False,
        emoji=False,
    )


def parse_literal(raw: str) -> Any:
    """Interpret a command-line value as a JSON literal, else as plain text.

    Example:
        >>> parse_literal("3"), parse_literal("true"), parse_literal("abc")
        (3, True, 'abc')
    """
    try:
        return json.loads(raw)
    except json.JSONDecodeError:
        return raw
