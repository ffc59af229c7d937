"""
Pipeline layer - deferred evaluation over single-pass sources.

- LazyPipeline: records map/filter/take/skip and runs them on a terminal call
- StreamingIterator: bounded-buffer chunk reader returned by ``stream()``
- Operations: tagged operation values and skip/take bound extraction
- Patterns: ready-made filter-map, paginated and streaming pipelines
"""

from lazy_pipeline.pipeline.base import (
    COLLECT_OPERATION,
    OPERATION_OVERHEAD_BYTES,
    STREAM_OPERATION,
    LazyPipeline,
)
from lazy_pipeline.pipeline.operations import (
    Bounds,
    FilterOp,
    MapOp,
    Operation,
    OperationKind,
    SkipOp,
    TakeOp,
    extract_bounds,
)
from lazy_pipeline.pipeline.patterns import (
    filter_map_pipeline,
    paginated_pipeline,
    streaming_pipeline,
)
from lazy_pipeline.pipeline.streaming import StreamingIterator

__all__ = [
    "COLLECT_OPERATION",
    "OPERATION_OVERHEAD_BYTES",
    "STREAM_OPERATION",
    "Bounds",
    "FilterOp",
    "LazyPipeline",
    "MapOp",
    "Operation",
    "OperationKind",
    "SkipOp",
    "StreamingIterator",
    "TakeOp",
    "extract_bounds",
    "filter_map_pipeline",
    "paginated_pipeline",
    "streaming_pipeline",
]
