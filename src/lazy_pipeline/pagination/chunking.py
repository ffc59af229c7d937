"""
Fixed-size chunking of iterables.
"""

from __future__ import annotations

from itertools import islice
from typing import TYPE_CHECKING, Generic, TypeVar

from lazy_pipeline._arith import clamp_index

if TYPE_CHECKING:
    from collections.abc import Iterable, Iterator

T = TypeVar("T")


class PagedIterator(Generic[T]):
    """Iterator yielding consecutive lists of up to ``page_size`` items.

    The last list may be shorter. Once the source runs out the iterator
    stays exhausted, even if the source would produce more later.

    Example:
        >>> list(PagedIterator(range(11), 4))
        [[0, 1, 2, 3], [4, 5, 6, 7], [8, 9, 10]]
    """

    def __init__(self, source: Iterable[T], page_size: int) -> None:
        """Initialize the iterator.

        Args:
            source: Items to group
            page_size: Items per group (values below 1 become 1)
        """
        self._source = iter(source)
        self._page_size = clamp_index(page_size, minimum=1)
        self._done = False

    @property
    def page_size(self) -> int:
        """Items per group."""
        return self._page_size

    def __iter__(self) -> Iterator[list[T]]:
        return self

    def __next__(self) -> list[T]:
        if self._done:
            raise StopIteration
        chunk = list(islice(self._source, self._page_size))
        if len(chunk) < self._page_size:
            self._done = True
        if not chunk:
            raise StopIteration
        return chunk

    def next_page(self) -> list[T] | None:
        """Next group, or None when exhausted."""
        return next(self, None)


def chunked(source: Iterable[T], page_size: int) -> PagedIterator[T]:
    """Split ``source`` into consecutive groups of ``page_size`` items."""
    return PagedIterator(source, page_size)
