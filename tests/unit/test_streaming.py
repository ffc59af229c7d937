"""Tests for streaming execution."""

import pytest

from lazy_pipeline import (
    IteratorError,
    LazyPipeline,
    MemoryLimitExceededError,
    PipelineConfig,
)
from lazy_pipeline.pipeline import STREAM_OPERATION, streaming_pipeline


class TestAdmission:
    """Tests for the admission check in stream()."""

    def test_zero_memory_limit_rejected(self, counting_source) -> None:
        """Test max_memory_mb=0 fails before anything is pulled."""
        source = counting_source(range(10))
        pipeline = LazyPipeline(source, config=PipelineConfig(max_memory_mb=0))
        with pytest.raises(MemoryLimitExceededError) as exc_info:
            pipeline.stream()
        assert source.pulled == 0
        assert exc_info.value.used_bytes == pipeline.estimate_memory_usage()
        assert exc_info.value.limit_bytes == 0

    def test_default_limit_admits(self) -> None:
        """Test default configuration passes admission."""
        stream = LazyPipeline(range(3)).stream()
        assert not stream.is_exhausted()

    def test_rejection_reported_to_collector(self, collector) -> None:
        """Test rejected admissions are recorded as errors."""
        pipeline = LazyPipeline(
            range(3), config=PipelineConfig(max_memory_mb=0), collector=collector
        )
        with pytest.raises(MemoryLimitExceededError):
            pipeline.stream()
        assert collector.get_snapshot(STREAM_OPERATION).error_count == 1

    def test_streaming_pipeline_helper(self) -> None:
        """Test the helper applies its memory limit."""
        with pytest.raises(MemoryLimitExceededError):
            streaming_pipeline(range(10), 0)
        stream = streaming_pipeline(range(10), 5)
        assert stream.next_chunk(4) == [0, 1, 2, 3]


class TestNextChunk:
    """Tests for next_chunk()."""

    def test_chunks_in_order(self) -> None:
        """Test consecutive chunks with a short final chunk."""
        stream = LazyPipeline(range(1, 11)).stream()
        assert stream.next_chunk(3) == [1, 2, 3]
        assert stream.next_chunk(3) == [4, 5, 6]
        assert stream.next_chunk(3) == [7, 8, 9]
        assert stream.next_chunk(3) == [10]
        assert stream.next_chunk(1) is None
        assert stream.is_exhausted()

    def test_exhaustion_is_stable(self) -> None:
        """Test None keeps being returned after exhaustion."""
        stream = LazyPipeline([1]).stream()
        assert stream.next_chunk(5) == [1]
        for _ in range(5):
            assert stream.next_chunk(5) is None

    def test_empty_source(self) -> None:
        """Test an empty source is exhausted on the first pull."""
        stream = LazyPipeline([]).stream()
        assert stream.next_chunk(3) is None
        assert stream.is_exhausted()

    def test_map_and_filter_applied(self) -> None:
        """Test the chain runs per streamed item."""
        stream = (
            LazyPipeline(range(1, 11))
            .filter(lambda x: x % 2 == 0)
            .map(lambda x: x * 10)
            .stream()
        )
        assert list(stream.chunks(2)) == [[20, 40], [60, 80], [100]]

    def test_buffer_is_reused(self) -> None:
        """Test the returned list is refilled by the next call."""
        stream = LazyPipeline(range(6)).stream()
        first = stream.next_chunk(3)
        snapshot = list(first)
        second = stream.next_chunk(3)
        assert first is second
        assert snapshot == [0, 1, 2]
        assert second == [3, 4, 5]

    def test_chunks_yields_copies(self) -> None:
        """Test chunks() yields independent lists."""
        chunks = list(LazyPipeline(range(5)).stream().chunks(2))
        assert chunks == [[0, 1], [2, 3], [4]]

    def test_chunk_capped_at_buffer_size(self, small_buffer_config) -> None:
        """Test a single call never exceeds buffer_size items."""
        stream = LazyPipeline(range(10), config=small_buffer_config).stream()
        assert stream.capacity == 4
        assert stream.next_chunk(100) == [0, 1, 2, 3]
        assert stream.next_chunk(100) == [4, 5, 6, 7]

    def test_pulls_only_what_is_needed(self, counting_source) -> None:
        """Test each call pulls just enough source items."""
        source = counting_source(range(1000))
        stream = LazyPipeline(source).stream()
        stream.next_chunk(10)
        assert source.pulled == 10

    def test_zero_chunk_size(self) -> None:
        """Test requesting zero items returns an empty chunk."""
        stream = LazyPipeline(range(3)).stream()
        assert stream.next_chunk(0) == []
        assert not stream.is_exhausted()


class TestStreamingBounds:
    """Tests for skip/take carried across chunk pulls."""

    def test_take_applies_to_whole_stream(self) -> None:
        """Test take(5) limits the stream, not each chunk."""
        stream = LazyPipeline(range(100)).take(5).stream()
        assert stream.next_chunk(2) == [0, 1]
        assert stream.next_chunk(2) == [2, 3]
        assert stream.next_chunk(2) == [4]
        assert stream.next_chunk(2) is None

    def test_take_reached_exactly(self, counting_source) -> None:
        """Test hitting the bound exactly exhausts without an extra pull."""
        source = counting_source(range(100))
        stream = LazyPipeline(source).take(4).stream()
        assert stream.next_chunk(4) == [0, 1, 2, 3]
        assert stream.is_exhausted()
        assert source.pulled == 4
        assert stream.next_chunk(4) is None

    def test_skip_applies_once(self) -> None:
        """Test skipped items are dropped only at the start of the stream."""
        stream = LazyPipeline(range(10)).skip(3).stream()
        assert list(stream.chunks(3)) == [[3, 4, 5], [6, 7, 8], [9]]

    def test_paginate_stream(self) -> None:
        """Test a paginated pipeline streams exactly one page."""
        stream = LazyPipeline(range(1, 101)).paginate(1, 10).stream()
        assert list(stream.chunks(4)) == [[11, 12, 13, 14], [15, 16, 17, 18], [19, 20]]


class TestStreamingFailures:
    """Tests for errors during streaming."""

    def test_source_failure(self, collector) -> None:
        """Test upstream failures raise IteratorError and exhaust the handle."""

        def broken():
            yield 1
            raise ValueError("bad row")

        stream = LazyPipeline(broken(), collector=collector).stream()
        with pytest.raises(IteratorError):
            stream.next_chunk(5)
        assert stream.is_exhausted()
        assert stream.next_chunk(5) is None
        assert collector.get_snapshot(STREAM_OPERATION).error_count == 1


class TestStreamingMetrics:
    """Tests for metrics gathered while streaming."""

    def test_items_counted(self, collector) -> None:
        """Test items_processed and the final record."""
        stream = LazyPipeline(range(7), collector=collector).map(str).stream()
        list(stream.chunks(3))
        assert stream.metrics.items_processed == 7
        assert stream.metrics.operation_times["map"] >= 0.0
        records = collector.get_records()
        assert len(records) == 1
        assert records[0].operation_name == STREAM_OPERATION
        assert not records[0].error


class TestStreamingCollectorFailures:
    """Tests for streaming when the performance sink misbehaves."""

    def test_failing_callback_reports_once(self, collector) -> None:
        """Test exhaustion is recorded once as a success even if a callback raises."""

        def broken(record) -> None:
            raise RuntimeError("sink down")

        collector.add_callback(broken)
        stream = LazyPipeline(range(3), collector=collector).stream()
        assert stream.next_chunk(5) == [0, 1, 2]
        assert stream.is_exhausted()
        assert stream.next_chunk(5) is None
        snapshot = collector.get_snapshot(STREAM_OPERATION)
        assert snapshot.count == 1
        assert snapshot.error_count == 0

    def test_operation_bound_at_exhaustion(self, collector) -> None:
        """Test the stream run name is in the log context when it reports."""
        from lazy_pipeline.telemetry import get_log_context

        seen = []
        collector.add_callback(lambda record: seen.append(get_log_context().operation))
        list(LazyPipeline(range(4), collector=collector).stream().chunks(3))
        assert seen == [STREAM_OPERATION]
