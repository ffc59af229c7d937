"""
Parsing of raw pagination query parameters.

The HTTP layer hands over the query string as a mapping of strings; values
that do not parse as integers are treated as absent rather than rejected.
"""

from __future__ import annotations

from typing import TYPE_CHECKING

from lazy_pipeline.pagination.cursor import Pagination

if TYPE_CHECKING:
    from collections.abc import Mapping

DEFAULT_PAGE_SIZE = 50
MAX_PAGE_SIZE = 500


def _parse_int(value: str | None) -> int | None:
    if value is None:
        return None
    try:
        return int(value.strip())
    except ValueError:
        return None


def _first_present(params: Mapping[str, str], *names: str) -> int | None:
    for name in names:
        parsed = _parse_int(params.get(name))
        if parsed is not None:
            return parsed
    return None


def pagination_from_query(
    params: Mapping[str, str],
    default_page_size: int = DEFAULT_PAGE_SIZE,
    max_page_size: int = MAX_PAGE_SIZE,
) -> Pagination:
    """Build a ``Pagination`` from query parameters.

    The cursor is read from ``cursor``, falling back to ``offset``; the page
    size from ``limit``, falling back to ``page_size``, and capped at
    ``max_page_size``.

    Example:
        >>> pagination_from_query({"offset": "2", "limit": "900"})
        Pagination(cursor=2, page_size=500)
    """
    cursor = _first_present(params, "cursor", "offset")
    page_size = _first_present(params, "limit", "page_size")
    if page_size is not None:
        page_size = min(page_size, max_page_size)
    return Pagination.from_optional(cursor, page_size, default_page_size)
