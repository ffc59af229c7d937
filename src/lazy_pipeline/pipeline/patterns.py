"""
Ready-made pipelines for common request-handling shapes.
"""

from __future__ import annotations

from typing import TYPE_CHECKING, Any, TypeVar

from lazy_pipeline.config import PipelineConfig
from lazy_pipeline.pipeline.base import LazyPipeline

if TYPE_CHECKING:
    from collections.abc import Callable, Iterable

    from lazy_pipeline.pipeline.streaming import StreamingIterator

T = TypeVar("T")


def filter_map_pipeline(
    data: Iterable[T],
    predicate: Callable[[T], bool],
    transform: Callable[[T], Any],
) -> LazyPipeline[Any]:
    """Keep items matching ``predicate``, then apply ``transform``.

    Example:
        >>> filter_map_pipeline(range(1, 11), lambda x: x > 5, lambda x: x * 2).collect()
        [12, 14, 16, 18, 20]
    """
    return LazyPipeline(data).filter(predicate).map(transform)


def paginated_pipeline(data: Iterable[T], page: int, per_page: int) -> LazyPipeline[T]:
    """Pipeline restricted to page ``page`` (zero-based) of ``per_page`` items."""
    return LazyPipeline(data).paginate(page, per_page)


def streaming_pipeline(data: Iterable[T], max_memory_mb: int) -> StreamingIterator[T]:
    """Start streaming ``data`` under a custom memory ceiling.

    Raises:
        MemoryLimitExceededError: If the admission check fails
    """
    config = PipelineConfig.memory_constrained(max_memory_mb)
    return LazyPipeline(data, config=config).stream()
