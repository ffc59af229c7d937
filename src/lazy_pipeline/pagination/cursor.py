"""
Cursor-based pagination parameters.

A cursor is a zero-based page index. All arithmetic clamps instead of
failing: page sizes are floored at 1 and offsets saturate at ``MAX_INDEX``.
"""

from __future__ import annotations

from dataclasses import dataclass

from lazy_pipeline._arith import MAX_INDEX, clamp_index, saturating_add, saturating_mul


@dataclass(frozen=True, init=False)
class Pagination:
    """Cursor and page size of one page request.

    Example:
        >>> p = Pagination(2, 10)
        >>> p.offset()
        20
        >>> p.next_cursor(True)
        3
    """

    cursor: int
    page_size: int

    def __init__(self, cursor: int = 0, page_size: int = 1) -> None:
        """Create a pagination.

        Args:
            cursor: Zero-based page index (negative values become 0)
            page_size: Items per page (values below 1 become 1)
        """
        object.__setattr__(self, "cursor", clamp_index(cursor))
        object.__setattr__(self, "page_size", clamp_index(page_size, minimum=1))

    @classmethod
    def new(cls, cursor: int, page_size: int) -> Pagination:
        """Create a pagination with ``page_size`` floored at 1."""
        return cls(cursor, page_size)

    @classmethod
    def from_optional(
        cls,
        cursor: int | None,
        page_size: int | None,
        default_page_size: int,
    ) -> Pagination:
        """Create a pagination from optional request values.

        - missing or negative cursor -> 0
        - missing or zero page size -> ``default_page_size`` (floored at 1)
        - negative page size -> 1

        Example:
            >>> Pagination.from_optional(None, None, 8)
            Pagination(cursor=0, page_size=8)
            >>> Pagination.from_optional(-3, -5, 4)
            Pagination(cursor=0, page_size=1)
        """
        resolved_cursor = 0 if cursor is None else max(cursor, 0)
        if page_size is None or page_size == 0:
            resolved_size = max(default_page_size, 1)
        else:
            resolved_size = max(page_size, 1)
        return cls(resolved_cursor, resolved_size)

    def offset(self) -> int:
        """Index of the first item of this page, saturating at ``MAX_INDEX``."""
        return saturating_mul(self.cursor, self.page_size)

    def next_cursor(self, has_more: bool) -> int | None:
        """Cursor of the following page, or None when there is no more data."""
        if not has_more:
            return None
        return saturating_add(self.cursor, 1)

    def total_pages(self, total_count: int) -> int:
        """Pages needed to hold ``total_count`` items (0 for no items)."""
        return total_pages(total_count, self.page_size)


def total_pages(total_count: int, per_page: int) -> int:
    """Pages needed to hold ``total_count`` items with ``per_page`` per page.

    Returns 0 when either value is not positive.

    Example:
        >>> total_pages(25, 10)
        3
    """
    if total_count <= 0 or per_page <= 0:
        return 0
    return min(-(-total_count // per_page), MAX_INDEX)
