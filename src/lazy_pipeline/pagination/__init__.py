"""
Pagination layer - cursor arithmetic, lookahead paging and chunking.

- Pagination: cursor/page-size value with saturating offset arithmetic
- paginate: one page of any iterable via single-item lookahead
- chunked: consecutive fixed-size groups
- pagination_from_query: raw query parameters -> Pagination
- Page: JSON response payload
"""

from lazy_pipeline.pagination.chunking import PagedIterator, chunked
from lazy_pipeline.pagination.cursor import Pagination, total_pages
from lazy_pipeline.pagination.page import (
    PaginatedPage,
    PaginationSummary,
    paginate,
    paginate_into_iter,
)
from lazy_pipeline.pagination.query import (
    DEFAULT_PAGE_SIZE,
    MAX_PAGE_SIZE,
    pagination_from_query,
)
from lazy_pipeline.pagination.response import Page

__all__ = [
    "DEFAULT_PAGE_SIZE",
    "MAX_PAGE_SIZE",
    "Page",
    "PagedIterator",
    "PaginatedPage",
    "Pagination",
    "PaginationSummary",
    "chunked",
    "paginate",
    "paginate_into_iter",
    "pagination_from_query",
    "total_pages",
]
