"""
Chunked consumption of a lazy pipeline.

``StreamingIterator`` pulls source items on demand into one reusable buffer.
The list returned by ``next_chunk`` *is* that buffer: it is cleared and
refilled by the next call, so consume (or copy) it before asking again.
``chunks()`` yields independent copies when that is inconvenient.
"""

from __future__ import annotations

from typing import TYPE_CHECKING, Any, Generic, TypeVar

from lazy_pipeline.pipeline.base import (
    _EXHAUSTED,
    _REJECTED,
    STREAM_OPERATION,
)
from lazy_pipeline.pipeline.operations import extract_bounds
from lazy_pipeline.telemetry import bound_context, get_logger

if TYPE_CHECKING:
    from collections.abc import Iterator

    from lazy_pipeline.pipeline.base import LazyPipeline
    from lazy_pipeline.telemetry import PipelineMetrics

T = TypeVar("T")

logger = get_logger(__name__)


class StreamingIterator(Generic[T]):
    """Pull-based chunk reader over a lazy pipeline.

    Skip/take bounds are read from the chain once, when the handle is
    created, and the remaining counts carry across chunk pulls: a
    ``take(5)`` limits the whole stream to five items, not each chunk.

    Chunks never exceed the configured ``buffer_size``, so memory stays
    bounded regardless of source size.

    Example:
        >>> stream = LazyPipeline(range(1, 11)).stream()
        >>> while (chunk := stream.next_chunk(3)) is not None:
        ...     print(chunk)
        [1, 2, 3]
        [4, 5, 6]
        [7, 8, 9]
        [10]
    """

    def __init__(self, pipeline: LazyPipeline[T]) -> None:
        """Initialize the handle. Use ``LazyPipeline.stream()`` instead."""
        self._pipeline = pipeline
        self._capacity = pipeline.config.buffer_size
        self._buffer: list[Any] = []
        self._exhausted = False

        bounds = extract_bounds(pipeline.operations)
        self._skip_remaining = bounds.skip
        self._take_remaining = bounds.take

    @property
    def metrics(self) -> PipelineMetrics:
        """Metrics of the underlying pipeline."""
        return self._pipeline.metrics

    @property
    def capacity(self) -> int:
        """Largest chunk a single call can return."""
        return self._capacity

    def is_exhausted(self) -> bool:
        """Whether the source or the take bound has been used up."""
        return self._exhausted

    def next_chunk(self, chunk_size: int) -> list[T] | None:
        """Pull up to ``chunk_size`` surviving items.

        Args:
            chunk_size: Requested items; capped at ``buffer_size``

        Returns:
            The refilled buffer, or None once the stream is exhausted.
            Repeated calls after exhaustion keep returning None.

        Raises:
            IteratorError: If the source fails; the handle is then exhausted
        """
        if self._exhausted:
            return None

        self._buffer.clear()
        wanted = min(chunk_size, self._capacity)

        with bound_context(operation=STREAM_OPERATION):
            try:
                source_done = self._fill(wanted)
            except Exception:
                self._exhausted = True
                self._buffer.clear()
                self._pipeline._finish_run(STREAM_OPERATION, error=True)
                raise

            if source_done or self._take_used_up():
                self._mark_exhausted()

        if not self._buffer and self._exhausted:
            return None
        return self._buffer

    def chunks(self, chunk_size: int) -> Iterator[list[T]]:
        """Iterate over the remaining chunks, each as an independent list."""
        while (chunk := self.next_chunk(chunk_size)) is not None:
            yield list(chunk)

    def _take_used_up(self) -> bool:
        return self._take_remaining is not None and self._take_remaining <= 0

    def _fill(self, wanted: int) -> bool:
        """Append up to ``wanted`` items; True once the source has run out."""
        pipeline = self._pipeline
        while len(self._buffer) < wanted and not self._take_used_up():
            item = pipeline._pull()
            if item is _EXHAUSTED:
                return True

            item = pipeline._apply_chain(item)
            if item is _REJECTED:
                continue
            if self._skip_remaining > 0:
                self._skip_remaining -= 1
                continue

            self._buffer.append(item)
            if self._take_remaining is not None:
                self._take_remaining -= 1
            pipeline.metrics.items_processed += 1
        return False

    def _mark_exhausted(self) -> None:
        self._exhausted = True
        metrics = self._pipeline.metrics
        metrics.update_memory(len(self._buffer) * self._pipeline.config.item_size_bytes)
        self._pipeline._finish_run(STREAM_OPERATION)
        logger.debug(
            "stream exhausted",
            items=metrics.items_processed,
            elapsed_ms=metrics.total_time * 1000,
        )
