"""lazy-pipeline-python: deferred evaluation and cursor pagination.

Chainable lazy pipelines with whole-result and bounded-memory chunked
execution, plus lookahead pagination that detects further data without
counting the source.
"""
from __future__ import annotations

from lazy_pipeline.config import PipelineConfig
from lazy_pipeline.errors import (
    ConfigError,
    IteratorError,
    LazyPipelineError,
    MemoryLimitExceededError,
    OperationTimeoutError,
)
from lazy_pipeline.pagination import (
    Page,
    PagedIterator,
    PaginatedPage,
    Pagination,
    PaginationSummary,
    chunked,
    paginate,
    pagination_from_query,
    total_pages,
)
from lazy_pipeline.pipeline import LazyPipeline, StreamingIterator
from lazy_pipeline.telemetry import PerformanceCollector, PipelineMetrics

__version__ = "0.3.0"

__all__ = [
    # Errors
    "ConfigError",
    "IteratorError",
    # Pipeline
    "LazyPipeline",
    "LazyPipelineError",
    "MemoryLimitExceededError",
    "OperationTimeoutError",
    # Pagination
    "Page",
    "PagedIterator",
    "PaginatedPage",
    "Pagination",
    "PaginationSummary",
    # Telemetry
    "PerformanceCollector",
    "PipelineConfig",
    "PipelineMetrics",
    "StreamingIterator",
    "__version__",
    "chunked",
    "paginate",
    "pagination_from_query",
    "total_pages",
]
