"""Transformation commands: sort, group, slice, page, remove."""

from __future__ import annotations

from typing import TYPE_CHECKING

from orderly.cli.config import get_config
from orderly.cli.documents import emit, err_console, load_collection, parse_literal
from orderly.compare import SortDirection, SortFlag
from orderly.errors import CollectionError
from orderly.pagination import Pagination

if TYPE_CHECKING:
    from pathlib import Path


def run_sort(
    *,
    path: Path,
    by: list[str],
    descending: bool,
    flag: str | None,
    natural: bool,
) -> None:
    """Execute sort command.

    Args:
        path: Input document.
        by: Fields to sort by (empty: sort by value, keeping keys).
        descending: Sort in descending order.
        flag: Sort flag name, defaults to the configured flag.
        natural: Natural-order sort by value (case-insensitive).
    """
    config = get_config()
    collection = load_collection(path)
    direction = SortDirection.DESC if descending else SortDirection.ASC

    try:
        sort_flag = SortFlag.parse(flag) if flag else config.sort_flag
        if by:
            result = collection.sort_by(by, direction, sort_flag)
        elif natural:
            result = collection.sort_natural(case_sensitive=False)
            if descending:
                result = result.reverse()
        else:
            result = collection.sort(direction, sort_flag)
    except CollectionError as err:
        err_console.print(f"[red]✗[/red] {err}")
        raise SystemExit(1) from None

    emit(result, indent=config.json_indent)


def run_group(*, path: Path, by: str, preserve_keys: bool) -> None:
    """Execute group command."""
    config = get_config()
    collection = load_collection(path)
    try:
        result = collection.group_by(by, preserve_keys=preserve_keys)
    except (TypeError, ValueError) as err:
        err_console.print(f"[red]✗[/red] Cannot group by {by!r}: {err}")
        raise SystemExit(1) from None
    emit(result, indent=config.json_indent)


def run_slice(*, path: Path, offset: int, limit: int | None, preserve_keys: bool) -> None:
    """Execute slice command."""
    config = get_config()
    collection = load_collection(path)
    emit(
        collection.slice(offset, limit, preserve_keys=preserve_keys),
        indent=config.json_indent,
    )


def run_page(*, path: Path, page: int, size: int | None) -> None:
    """Execute page command.

    Args:
        path: Input document.
        page: 1-based page number.
        size: Page size, defaults to the configured page size.
    """
    config = get_config()
    if page < 1:
        err_console.print(f"[red]✗[/red] Page number must be >= 1, got {page}")
        raise SystemExit(1)

    collection = load_collection(path)
    pagination = Pagination(
        total_count=collection.count(),
        page_size=size if size is not None else config.page_size,
        page=page - 1,
    )
    emit(collection.paginate(pagination), indent=config.json_indent)


def run_remove(*, path: Path, value: str, strict: bool | None) -> None:
    """Execute remove command.

    ``value`` is parsed as a JSON literal (``3``, ``"3"``, ``null``), falling
    back to plain text.
    """
    config = get_config()
    collection = load_collection(path)
    strict_mode = config.strict if strict is None else strict
    emit(collection.remove(parse_literal(value), strict=strict_mode), indent=config.json_indent)
