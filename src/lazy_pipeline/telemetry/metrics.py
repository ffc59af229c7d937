"""
Metrics for lazy pipeline runs.

``PipelineMetrics`` belongs to a single pipeline. ``PerformanceCollector`` is
an explicitly passed sink that aggregates finished runs; there is no global
instance, so unrelated pipelines and test cases never share counters.
"""

from __future__ import annotations

import threading
import time
from collections import defaultdict
from dataclasses import dataclass, field
from typing import TYPE_CHECKING, Any

from lazy_pipeline.telemetry.logger import get_logger

if TYPE_CHECKING:
    from collections.abc import Callable

logger = get_logger(__name__)


@dataclass
class PipelineMetrics:
    """Per-run counters and timings of a lazy pipeline.

    Attributes:
        operations_count: Number of timed operations recorded
        items_processed: Items that survived the whole chain
        operation_times: Cumulative seconds per operation name
        memory_estimate: Running maximum of reported memory, in bytes
        start_time: ``time.perf_counter()`` value when the run started
        total_time: Seconds taken by the last terminal call
    """

    operations_count: int = 0
    items_processed: int = 0
    operation_times: dict[str, float] = field(default_factory=dict)
    memory_estimate: int = 0
    start_time: float | None = None
    total_time: float = 0.0

    def record_operation(self, name: str, duration: float) -> None:
        """Accumulate ``duration`` seconds under ``name``."""
        self.operations_count += 1
        self.operation_times[name] = self.operation_times.get(name, 0.0) + duration

    def update_memory(self, used_bytes: int) -> None:
        """Track the running maximum memory estimate."""
        self.memory_estimate = max(self.memory_estimate, used_bytes)

    def start(self) -> None:
        """Mark the start of a run."""
        self.start_time = time.perf_counter()

    def finish(self) -> None:
        """Store the elapsed time since ``start()``."""
        if self.start_time is not None:
            self.total_time = time.perf_counter() - self.start_time

    def reset(self) -> None:
        """Clear all counters for reuse across independent runs."""
        self.operations_count = 0
        self.items_processed = 0
        self.operation_times = {}
        self.memory_estimate = 0
        self.start_time = None
        self.total_time = 0.0

    def to_record(self, operation_name: str, error: bool = False) -> PerformanceRecord:
        """Summarize this run as a record for a ``PerformanceCollector``."""
        return PerformanceRecord(
            operation_name=operation_name,
            duration=self.total_time,
            memory_used=self.memory_estimate,
            error=error,
        )


@dataclass(frozen=True)
class PerformanceRecord:
    """One finished operation as seen by a performance sink.

    Attributes:
        operation_name: Logical operation name
        duration: Seconds taken
        memory_used: Estimated bytes used
        error: Whether the operation failed
    """

    operation_name: str
    duration: float
    memory_used: int
    error: bool = False

    def to_dict(self) -> dict[str, Any]:
        """Convert to dictionary."""
        return {
            "operation_name": self.operation_name,
            "duration": self.duration,
            "memory_used": self.memory_used,
            "error": self.error,
        }


@dataclass
class OperationSnapshot:
    """Aggregated view of all records for one operation name."""

    operation_name: str
    count: int = 0
    error_count: int = 0
    total_duration: float = 0.0
    min_duration: float = 0.0
    max_duration: float = 0.0
    peak_memory: int = 0

    @property
    def avg_duration(self) -> float:
        """Average duration in seconds."""
        if self.count == 0:
            return 0.0
        return self.total_duration / self.count

    @property
    def error_rate(self) -> float:
        """Fraction of failed records."""
        if self.count == 0:
            return 0.0
        return self.error_count / self.count


class PerformanceCollector:
    """Thread-safe sink for ``PerformanceRecord`` values.

    Example:
        >>> collector = PerformanceCollector()
        >>> _ = LazyPipeline(range(10), collector=collector).map(str).collect()
        >>> collector.get_snapshot("lazy_pipeline.collect").count
        1
    """

    def __init__(self, max_records: int = 1000) -> None:
        """Initialize collector.

        Args:
            max_records: Raw records kept for inspection (oldest dropped first)
        """
        self._lock = threading.Lock()
        self._max_records = max_records
        self._records: list[PerformanceRecord] = []
        self._snapshots: dict[str, OperationSnapshot] = {}
        self._callbacks: list[Callable[[PerformanceRecord], None]] = []

    def record(self, record: PerformanceRecord) -> None:
        """Store a record and update the per-operation aggregate."""
        with self._lock:
            self._records.append(record)
            if len(self._records) > self._max_records:
                self._records = self._records[-self._max_records :]

            snap = self._snapshots.get(record.operation_name)
            if snap is None:
                snap = OperationSnapshot(
                    operation_name=record.operation_name,
                    min_duration=record.duration,
                )
                self._snapshots[record.operation_name] = snap

            snap.count += 1
            if record.error:
                snap.error_count += 1
            snap.total_duration += record.duration
            snap.min_duration = min(snap.min_duration, record.duration)
            snap.max_duration = max(snap.max_duration, record.duration)
            snap.peak_memory = max(snap.peak_memory, record.memory_used)

            callbacks = list(self._callbacks)

        for callback in callbacks:
            try:
                callback(record)
            except Exception as e:
                # a failing sink never changes the pipeline outcome
                logger.warning(
                    "performance callback failed",
                    operation_name=record.operation_name,
                    error_type=type(e).__name__,
                )

    def get_records(self) -> list[PerformanceRecord]:
        """Return the retained raw records, oldest first."""
        with self._lock:
            return list(self._records)

    def get_snapshot(self, operation_name: str) -> OperationSnapshot:
        """Return a copy of the aggregate for ``operation_name``."""
        with self._lock:
            snap = self._snapshots.get(operation_name)
            if snap is None:
                return OperationSnapshot(operation_name=operation_name)
            return OperationSnapshot(**vars(snap))

    def operation_names(self) -> list[str]:
        """Names that have at least one record."""
        with self._lock:
            return sorted(self._snapshots)

    def add_callback(self, callback: Callable[[PerformanceRecord], None]) -> None:
        """Call ``callback`` with every new record.

        Exceptions raised by a callback are logged and do not reach the
        pipeline that produced the record.
        """
        self._callbacks.append(callback)

    def remove_callback(self, callback: Callable[[PerformanceRecord], None]) -> None:
        """Remove a callback."""
        if callback in self._callbacks:
            self._callbacks.remove(callback)

    def reset(self) -> None:
        """Drop all records and aggregates."""
        with self._lock:
            self._records.clear()
            self._snapshots.clear()

    def to_prometheus(self) -> str:
        """Export aggregates in Prometheus text format."""
        lines: list[str] = []
        counts: dict[str, list[str]] = defaultdict(list)

        with self._lock:
            for name, snap in sorted(self._snapshots.items()):
                label = f'{{operation="{name}"}}'
                counts["total"].append(f"lazy_pipeline_operations_total{label} {snap.count}")
                counts["errors"].append(
                    f"lazy_pipeline_operation_errors_total{label} {snap.error_count}"
                )
                counts["seconds"].append(
                    f"lazy_pipeline_operation_seconds_sum{label} {snap.total_duration}"
                )
                counts["memory"].append(
                    f"lazy_pipeline_peak_memory_bytes{label} {snap.peak_memory}"
                )

        lines.append("# HELP lazy_pipeline_operations_total Finished pipeline runs")
        lines.append("# TYPE lazy_pipeline_operations_total counter")
        lines.extend(counts["total"])
        lines.append("# HELP lazy_pipeline_operation_errors_total Failed pipeline runs")
        lines.append("# TYPE lazy_pipeline_operation_errors_total counter")
        lines.extend(counts["errors"])
        lines.append("# HELP lazy_pipeline_operation_seconds_sum Time spent in runs")
        lines.append("# TYPE lazy_pipeline_operation_seconds_sum counter")
        lines.extend(counts["seconds"])
        lines.append("# HELP lazy_pipeline_peak_memory_bytes Peak estimated memory")
        lines.append("# TYPE lazy_pipeline_peak_memory_bytes gauge")
        lines.extend(counts["memory"])

        return "\n".join(lines)
