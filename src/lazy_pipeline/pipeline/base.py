"""
Lazy evaluation pipeline.

A ``LazyPipeline`` records map/filter/take/skip operations on a single-pass
source and runs them only when a terminal call pulls items:

- ``collect()`` materializes the whole result
- ``stream()`` hands out bounded chunks through a ``StreamingIterator``

Example:
    >>> LazyPipeline(range(1, 11)).filter(lambda x: x % 2 == 0).map(lambda x: x * 2).collect()
    [4, 8, 12, 16, 20]
"""

from __future__ import annotations

import operator
import time
from typing import TYPE_CHECKING, Any, Generic, TypeVar

from lazy_pipeline._arith import saturating_mul
from lazy_pipeline.config import PipelineConfig
from lazy_pipeline.errors import (
    IteratorError,
    MemoryLimitExceededError,
    OperationTimeoutError,
)
from lazy_pipeline.pipeline.operations import (
    FilterOp,
    MapOp,
    Operation,
    SkipOp,
    TakeOp,
    extract_bounds,
)
from lazy_pipeline.telemetry import PipelineMetrics, bound_context, get_logger

if TYPE_CHECKING:
    from collections.abc import Callable, Iterable

    from lazy_pipeline.pipeline.streaming import StreamingIterator
    from lazy_pipeline.telemetry import PerformanceCollector

T = TypeVar("T")

logger = get_logger(__name__)

# Estimated bookkeeping bytes per recorded operation
OPERATION_OVERHEAD_BYTES = 128

COLLECT_OPERATION = "lazy_pipeline.collect"
STREAM_OPERATION = "lazy_pipeline.stream"

# Sentinels distinguishing "no item" from a legitimate ``None`` item
_EXHAUSTED = object()
_REJECTED = object()


class LazyPipeline(Generic[T]):
    """Chainable pipeline of deferred operations over a single-pass source.

    Builder calls append to the chain and return the same pipeline. The
    source is consumed by the first terminal call; a second terminal call
    raises ``IteratorError``.

    Skip/Take entries compose in order into one window that applies to items
    surviving every Map/Filter (see ``extract_bounds``).

    Not thread-safe: running the chain updates the embedded metrics.
    """

    def __init__(
        self,
        source: Iterable[T],
        config: PipelineConfig | None = None,
        collector: PerformanceCollector | None = None,
    ) -> None:
        """Initialize the pipeline.

        Args:
            source: Finite or infinite iterable, consumed at most once
            config: Execution configuration (validated here)
            collector: Optional sink receiving one record per terminal outcome
        """
        self._config = (config or PipelineConfig()).validate()
        self._source = iter(source)
        self._operations: list[Operation] = []
        self._metrics = PipelineMetrics()
        self._collector = collector
        self._consumed = False

    @classmethod
    def with_config(
        cls,
        source: Iterable[T],
        config: PipelineConfig,
        collector: PerformanceCollector | None = None,
    ) -> LazyPipeline[T]:
        """Create a pipeline with a custom configuration."""
        return cls(source, config=config, collector=collector)

    @property
    def config(self) -> PipelineConfig:
        """Execution configuration."""
        return self._config

    @property
    def operations(self) -> tuple[Operation, ...]:
        """Recorded operations, in append order."""
        return tuple(self._operations)

    @property
    def metrics(self) -> PipelineMetrics:
        """Metrics of the current run."""
        return self._metrics

    @property
    def is_consumed(self) -> bool:
        """Whether a terminal call has taken the source."""
        return self._consumed

    def reset_metrics(self) -> None:
        """Clear the embedded metrics."""
        self._metrics.reset()

    # Builder

    def map(self, transform: Callable[[Any], Any]) -> LazyPipeline[Any]:
        """Append a map operation."""
        return self._append(MapOp(transform))

    def filter(self, predicate: Callable[[Any], bool]) -> LazyPipeline[T]:
        """Append a filter operation."""
        return self._append(FilterOp(predicate))

    def take(self, count: int) -> LazyPipeline[T]:
        """Append a take operation.

        Raises:
            TypeError: If ``count`` is not an integer
        """
        return self._append(TakeOp(operator.index(count)))

    def skip(self, count: int) -> LazyPipeline[T]:
        """Append a skip operation.

        Raises:
            TypeError: If ``count`` is not an integer
        """
        return self._append(SkipOp(operator.index(count)))

    def paginate(self, cursor: int, page_size: int) -> LazyPipeline[T]:
        """Restrict output to one page: ``skip(cursor * page_size).take(page_size)``.

        Args:
            cursor: Zero-based page index
            page_size: Items per page
        """
        return self.skip(saturating_mul(max(cursor, 0), max(page_size, 0))).take(page_size)

    def _append(self, operation: Operation) -> LazyPipeline[Any]:
        self._ensure_open()
        self._operations.append(operation)
        return self

    def _ensure_open(self) -> None:
        if self._consumed:
            raise IteratorError("pipeline source already consumed").with_hint(
                "build a new LazyPipeline for every run"
            )

    # Execution helpers shared with StreamingIterator

    def estimate_memory_usage(self) -> int:
        """Heuristic bytes needed by a streaming run.

        ``buffer_size * item_size_bytes`` plus a fixed overhead per operation.
        This is an admission gate, not a measurement of live allocations.
        """
        return (
            self._config.buffer_size * self._config.item_size_bytes
            + len(self._operations) * OPERATION_OVERHEAD_BYTES
        )

    def _pull(self) -> Any:
        """Next raw source item, or ``_EXHAUSTED``."""
        try:
            return next(self._source, _EXHAUSTED)
        except Exception as e:
            logger.error("source iterator failed", error_type=type(e).__name__)
            raise IteratorError(f"source raised {type(e).__name__}: {e}", cause=e) from e

    def _apply_chain(self, item: Any) -> Any:
        """Run Map/Filter entries on one item; ``_REJECTED`` if filtered out."""
        timed = self._config.enable_metrics
        for op in self._operations:
            if isinstance(op, MapOp):
                if timed:
                    started = time.perf_counter()
                    item = op.transform(item)
                    self._metrics.record_operation("map", time.perf_counter() - started)
                else:
                    item = op.transform(item)
            elif isinstance(op, FilterOp):
                if not op.predicate(item):
                    return _REJECTED
        return item

    def _finish_run(self, operation_name: str, error: bool = False) -> None:
        self._metrics.finish()
        if self._collector is not None:
            self._collector.record(self._metrics.to_record(operation_name, error=error))

    # Terminal calls

    def collect(self) -> list[T]:
        """Run the chain over the whole source and return the results.

        Returns:
            Surviving items in source order

        Raises:
            OperationTimeoutError: If elapsed time since the first item exceeds
                ``operation_timeout``; partial output is discarded
            IteratorError: If the source fails or was already consumed
        """
        self._ensure_open()
        self._consumed = True
        with bound_context(operation=COLLECT_OPERATION):
            return self._run_collect()

    def _run_collect(self) -> list[T]:
        bounds = extract_bounds(self._operations)
        skip_remaining = bounds.skip
        take_remaining = bounds.take
        timeout = self._config.operation_timeout
        first_item_at: float | None = None
        result: list[Any] = []

        if self._config.enable_metrics:
            self._metrics.start()
        logger.debug(
            "collect started",
            operations=len(self._operations),
            skip=bounds.skip,
            take=bounds.take,
        )

        try:
            while take_remaining is None or take_remaining > 0:
                item = self._pull()
                if item is _EXHAUSTED:
                    break
                if first_item_at is None:
                    first_item_at = time.perf_counter()

                item = self._apply_chain(item)
                if item is _REJECTED:
                    continue
                if skip_remaining > 0:
                    skip_remaining -= 1
                    continue

                result.append(item)
                if take_remaining is not None:
                    take_remaining -= 1
                self._metrics.items_processed += 1

                elapsed = time.perf_counter() - first_item_at
                if elapsed > timeout:
                    logger.warning(
                        "collect timed out",
                        elapsed=elapsed,
                        timeout=timeout,
                        items=len(result),
                    )
                    raise OperationTimeoutError(elapsed, timeout)
        except Exception:
            self._finish_run(COLLECT_OPERATION, error=True)
            raise

        self._metrics.update_memory(len(result) * self._config.item_size_bytes)
        self._finish_run(COLLECT_OPERATION)
        logger.debug(
            "collect finished",
            items=len(result),
            elapsed_ms=self._metrics.total_time * 1000,
        )
        return result

    def stream(self) -> StreamingIterator[T]:
        """Start chunked consumption after an admission check.

        Returns:
            Handle yielding chunks via ``next_chunk``

        Raises:
            MemoryLimitExceededError: If ``estimate_memory_usage()`` exceeds
                ``max_memory_mb``; nothing is pulled from the source
            IteratorError: If the pipeline was already consumed
        """
        from lazy_pipeline.pipeline.streaming import StreamingIterator

        self._ensure_open()

        used = self.estimate_memory_usage()
        limit = self._config.max_memory_bytes
        if used > limit:
            with bound_context(operation=STREAM_OPERATION):
                logger.warning(
                    "stream admission rejected", used_bytes=used, limit_bytes=limit
                )
            self._metrics.update_memory(used)
            self._finish_run(STREAM_OPERATION, error=True)
            raise MemoryLimitExceededError(used, limit)

        self._consumed = True
        self._metrics.update_memory(used)
        if self._config.enable_metrics:
            self._metrics.start()
        return StreamingIterator(self)

    def __repr__(self) -> str:
        ops = ", ".join(_describe(op) for op in self._operations)
        return f"LazyPipeline([{ops}])"


def _describe(op: Operation) -> str:
    if isinstance(op, (TakeOp, SkipOp)):
        return f"{op.kind.value}({op.count})"
    return op.kind.value
