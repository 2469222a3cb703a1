"""Read-only commands: show, stats."""

from __future__ import annotations

from typing import TYPE_CHECKING

from rich.table import Table
from rich.text import Text

from orderly.cli.documents import console, err_console, load_collection
from orderly.serialization import to_json

if TYPE_CHECKING:
    from pathlib import Path


def show_collection(*, path: Path, limit: int) -> None:
    """Print the entries of a document as a key/value table.

    Args:
        path: Input document.
        limit: Maximum number of rows to display.
    """
    collection = load_collection(path)
    if collection.is_empty():
        console.print("[yellow]![/yellow] Collection is empty.")
        return

    table = Table(title=f"{path} ({collection.count()} entries)")
    table.add_column("Key", style="cyan")
    table.add_column("Value")

    for key, value in collection.slice(0, limit).items():
        table.add_row(str(key), Text(to_json(value)))

    console.print(table)
    if collection.count() > limit:
        console.print(f"[dim]... {collection.count() - limit} more[/dim]")


def show_stats(*, path: Path, field: str | None) -> None:
    """Print count/sum/min/max of a document's values (or one field of them)."""
    collection = load_collection(path)

    try:
        total = collection.sum(field)
    except TypeError:
        target = f"field {field!r}" if field else "values"
        err_console.print(f"[red]✗[/red] Cannot sum non-numeric {target}.")
        raise SystemExit(1) from None

    table = Table(title=f"Stats for {field}" if field else "Stats")
    table.add_column("Metric", style="cyan")
    table.add_column("Value")

    table.add_row("count", str(collection.count()))
    table.add_row("sum", str(total))
    table.add_row("min", str(collection.min(field)))
    table.add_row("max", str(collection.max(field)))

    console.print(table)
