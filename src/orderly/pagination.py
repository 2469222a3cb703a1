"""Pagination parameters for ``Collection.paginate``."""

from __future__ import annotations

import dataclasses
from dataclasses import dataclass
from typing import Protocol, runtime_checkable


@runtime_checkable
class PageInfo(Protocol):
    """Precomputed window into a collection.

    ``limit <= 0`` means the window runs to the end of the collection.
    """

    @property
    def offset(self) -> int: ...

    @property
    def limit(self) -> int: ...


@dataclass(frozen=True)
class PageWindow:
    """Explicit offset/limit pair."""

    offset: int = 0
    limit: int = -1


@dataclass(frozen=True)
class Pagination:
    """Zero-based page of ``page_size`` items out of ``total_count``.

    A ``page_size`` below 1 disables paging: a single page holds everything.
    The requested ``page`` is clamped into ``[0, page_count - 1]``.

    Example:
        >>> p = Pagination(total_count=5, page_size=3, page=1)
        >>> (p.offset, p.limit)
        (3, 3)
    """

    total_count: int = 0
    page_size: int = 20
    page: int = 0

    def __post_init__(self) -> None:
        if self.total_count < 0:
            msg = f"total_count must be >= 0, got {self.total_count}"
            raise ValueError(msg)

    @property
    def page_count(self) -> int:
        if self.page_size < 1:
            return 1 if self.total_count > 0 else 0
        return -(-self.total_count // self.page_size)

    @property
    def current_page(self) -> int:
        """The requested page, clamped to the valid range."""
        return max(0, min(self.page, self.page_count - 1))

    @property
    def offset(self) -> int:
        if self.page_size < 1:
            return 0
        return self.current_page * self.page_size

    @property
    def limit(self) -> int:
        return self.page_size if self.page_size >= 1 else -1

    @property
    def has_next(self) -> bool:
        return self.current_page < self.page_count - 1

    def with_page(self, page: int) -> Pagination:
        """Return a copy pointing at ``page``."""
        return dataclasses.replace(self, page=page)
