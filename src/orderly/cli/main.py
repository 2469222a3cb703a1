"""Main CLI entry point using Typer.

This module defines the top-level CLI commands:
- orderly show: Display a JSON document as a table
- orderly stats: Count/sum/min/max of values or a field
- orderly sort: Sort by value, natural order or fields
- orderly group: Group items by a field
- orderly slice: Select entries by position
- orderly page: Select one page of entries
- orderly remove: Drop matching values
"""

from __future__ import annotations

import logging
from pathlib import Path  # noqa: TC003 - Typer requires runtime access
from typing import Annotated

import structlog
import typer
from rich.console import Console

from orderly import __version__
from orderly.cli.config import get_config

app = typer.Typer(
    name="orderly",
    help="orderly - ordered collection transformations for JSON documents",
    no_args_is_help=True,
)
console = Console()

PathArgument = Annotated[
    Path,
    typer.Argument(help="JSON document (array or object); '-' reads stdin."),
]


def version_callback(value: bool) -> None:
    """Print version and exit."""
    if value:
        console.print(f"orderly {__version__}")
        raise typer.Exit()


def configure_logging(level: str) -> None:
    """Route structlog output through a level filter."""
    structlog.configure(
        wrapper_class=structlog.make_filtering_bound_logger(logging.getLevelName(level)),
    )


@app.callback()
def main(
    version: Annotated[  # noqa: ARG001
        bool | None,
        typer.Option(
            "--version",
            "-V",
            callback=version_callback,
            is_eager=True,
            help="Show version and exit.",
        ),
    ] = None,
    verbose: Annotated[
        bool,
        typer.Option("--verbose", "-v", help="Enable verbose output."),
    ] = False,
) -> None:
    """orderly - ordered collection transformations for JSON documents.

    Use 'orderly COMMAND --help' for information on specific commands.
    """
    configure_logging("DEBUG" if verbose else get_config().log_level)


@app.command()
def show(
    path: PathArgument,
    limit: Annotated[
        int,
        typer.Option("--limit", "-n", help="Maximum number of rows to display."),
    ] = 50,
) -> None:
    """Display a document as a key/value table.

    Examples:
        orderly show users.json

        cat users.json | orderly show - --limit 10
    """
    from orderly.cli.commands.inspect import show_collection  # noqa: PLC0415

    show_collection(path=path, limit=limit)


@app.command()
def stats(
    path: PathArgument,
    field: Annotated[
        str | None,
        typer.Option("--field", "-f", help="Field (dotted path) to aggregate."),
    ] = None,
) -> None:
    """Show count, sum, min and max.

    Examples:
        orderly stats prices.json

        orderly stats users.json --field age
    """
    from orderly.cli.commands.inspect import show_stats  # noqa: PLC0415

    show_stats(path=path, field=field)


@app.command()
def sort(
    path: PathArgument,
    by: Annotated[
        list[str] | None,
        typer.Option("--by", "-b", help="Field to sort by (repeatable, in priority order)."),
    ] = None,
    descending: Annotated[
        bool,
        typer.Option("--desc", help="Sort in descending order."),
    ] = False,
    flag: Annotated[
        str | None,
        typer.Option(
            "--flag",
            help="Comparison: regular, numeric, string, string_case, natural, natural_case.",
        ),
    ] = None,
    natural: Annotated[
        bool,
        typer.Option("--natural", help="Natural-order sort by value (case-insensitive)."),
    ] = False,
) -> None:
    """Sort a document.

    Without --by, values are sorted and keep their keys. With --by, items are
    sorted by the given fields and re-indexed.

    Examples:
        orderly sort numbers.json --desc

        orderly sort files.json --natural

        orderly sort users.json --by age --by name --flag string_case
    """
    from orderly.cli.commands.transform import run_sort  # noqa: PLC0415

    run_sort(path=path, by=by or [], descending=descending, flag=flag, natural=natural)


@app.command()
def group(
    path: PathArgument,
    by: Annotated[str, typer.Option("--by", "-b", help="Field to group by.")],
    preserve_keys: Annotated[
        bool,
        typer.Option("--preserve-keys/--no-preserve-keys", help="Keep original keys in groups."),
    ] = True,
) -> None:
    """Group items by a field.

    Examples:
        orderly group users.json --by country --no-preserve-keys
    """
    from orderly.cli.commands.transform import run_group  # noqa: PLC0415

    run_group(path=path, by=by, preserve_keys=preserve_keys)


@app.command(name="slice")
def slice_(
    path: PathArgument,
    offset: Annotated[
        int,
        typer.Option("--offset", "-o", help="Start position (negative counts from the end)."),
    ] = 0,
    limit: Annotated[
        int | None,
        typer.Option("--limit", "-n", help="Maximum number of entries."),
    ] = None,
    preserve_keys: Annotated[
        bool,
        typer.Option("--preserve-keys/--no-preserve-keys", help="Keep original keys."),
    ] = True,
) -> None:
    """Select entries by position.

    Examples:
        orderly slice items.json --offset 3

        orderly slice items.json --offset -2 --no-preserve-keys
    """
    from orderly.cli.commands.transform import run_slice  # noqa: PLC0415

    run_slice(path=path, offset=offset, limit=limit, preserve_keys=preserve_keys)


@app.command()
def page(
    path: PathArgument,
    number: Annotated[
        int,
        typer.Option("--page", "-p", help="Page number (1-based)."),
    ] = 1,
    size: Annotated[
        int | None,
        typer.Option("--size", "-s", help="Page size (0 or less: everything)."),
    ] = None,
) -> None:
    """Select one page of entries (re-indexed).

    Examples:
        orderly page items.json --page 2 --size 25
    """
    from orderly.cli.commands.transform import run_page  # noqa: PLC0415

    run_page(path=path, page=number, size=size)


@app.command()
def remove(
    path: PathArgument,
    value: Annotated[str, typer.Argument(help="Value to remove (JSON literal or text).")],
    strict: Annotated[
        bool | None,
        typer.Option("--strict/--loose", help="Type-exact or coercive comparison."),
    ] = None,
) -> None:
    """Remove values equal to VALUE, keeping the keys of the rest.

    Examples:
        orderly remove numbers.json 3

        orderly remove numbers.json '"3"' --strict
    """
    from orderly.cli.commands.transform import run_remove  # noqa: PLC0415

    run_remove(path=path, value=value, strict=strict)


if __name__ == "__main__":
    app()
