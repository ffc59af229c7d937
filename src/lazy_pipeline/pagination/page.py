"""
Lookahead pagination over iterables.

``paginate`` skips to the page offset and pulls at most ``page_size + 1``
items; the extra item only tells whether more data exists, so no full
count of the source is ever needed.
"""

from __future__ import annotations

from dataclasses import dataclass, replace
from itertools import islice
from typing import TYPE_CHECKING, Any, Generic, TypeVar

from lazy_pipeline._arith import saturating_add

if TYPE_CHECKING:
    from collections.abc import Callable, Iterable

    from lazy_pipeline.pagination.cursor import Pagination

T = TypeVar("T")
U = TypeVar("U")


@dataclass(frozen=True)
class PaginationSummary:
    """Pagination metadata emitted alongside a page of results.

    Attributes:
        current_cursor: Cursor of this page
        page_size: Items per page
        total_elements: Total across all pages, when separately known
        next_cursor: Cursor of the following page, present iff has_more
        has_more: Whether items exist past this page
    """

    current_cursor: int
    page_size: int
    total_elements: int | None
    next_cursor: int | None
    has_more: bool

    @classmethod
    def from_pagination(
        cls,
        pagination: Pagination,
        has_more: bool,
        total: int | None = None,
    ) -> PaginationSummary:
        """Build the summary of ``pagination`` given the lookahead outcome."""
        return cls(
            current_cursor=pagination.cursor,
            page_size=pagination.page_size,
            total_elements=total,
            next_cursor=pagination.next_cursor(has_more),
            has_more=has_more,
        )

    def to_dict(self) -> dict[str, Any]:
        """Convert to dictionary."""
        return {
            "current_cursor": self.current_cursor,
            "page_size": self.page_size,
            "total_elements": self.total_elements,
            "next_cursor": self.next_cursor,
            "has_more": self.has_more,
        }


@dataclass(frozen=True)
class PaginatedPage(Generic[T]):
    """One page of items plus its pagination metadata.

    Pages are never modified in place; ``map_items`` and ``with_total``
    return new pages.
    """

    items: list[T]
    summary: PaginationSummary

    @classmethod
    def from_items(
        cls,
        items: list[T],
        pagination: Pagination,
        has_more: bool,
        total: int | None = None,
    ) -> PaginatedPage[T]:
        """Wrap already-collected items with their metadata."""
        return cls(
            items=items,
            summary=PaginationSummary.from_pagination(pagination, has_more, total),
        )

    def map_items(self, transform: Callable[[T], U]) -> PaginatedPage[U]:
        """Transform every item, keeping the summary unchanged."""
        return PaginatedPage(
            items=[transform(item) for item in self.items],
            summary=self.summary,
        )

    def with_total(self, total: int | None) -> PaginatedPage[T]:
        """Copy of this page whose summary carries a known total count."""
        return PaginatedPage(
            items=self.items,
            summary=replace(self.summary, total_elements=total),
        )

    def __len__(self) -> int:
        return len(self.items)


def paginate(source: Iterable[T], pagination: Pagination) -> PaginatedPage[T]:
    """Materialize one page of ``source`` using single-item lookahead.

    Consumes ``offset()`` items plus at most ``page_size + 1`` more; works on
    infinite iterables.

    Example:
        >>> page = paginate(range(1, 101), Pagination(1, 10))
        >>> page.items[0], page.summary.has_more, page.summary.next_cursor
        (11, True, 2)
    """
    iterator = iter(source)
    offset = pagination.offset()
    if offset:
        # advance without materializing the skipped items
        next(islice(iterator, offset, offset), None)

    page_size = pagination.page_size
    buffer = list(islice(iterator, saturating_add(page_size, 1)))

    has_more = len(buffer) > page_size
    if has_more:
        del buffer[page_size:]

    return PaginatedPage.from_items(buffer, pagination, has_more)


def paginate_into_iter(iterable: Iterable[T], pagination: Pagination) -> PaginatedPage[T]:
    """Materialize one page of any iterable, such as a list or a generator.

    Calls ``iter()`` on ``iterable`` and pages it exactly like ``paginate``.
    """
    return paginate(iterable, pagination)
