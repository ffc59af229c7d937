"""Root pytest fixtures for lazy-pipeline-python tests."""

from __future__ import annotations

from collections.abc import Iterator

import pytest

from lazy_pipeline import PerformanceCollector, PipelineConfig


class CountingSource:
    """Iterator that records how many items were pulled from it."""

    def __init__(self, items: list[int] | range) -> None:
        self._items = iter(items)
        self.pulled = 0

    def __iter__(self) -> Iterator[int]:
        return self

    def __next__(self) -> int:
        item = next(self._items)
        self.pulled += 1
        return item


@pytest.fixture
def counting_source() -> type[CountingSource]:
    """Factory for sources that count pulls."""
    return CountingSource


@pytest.fixture
def collector() -> PerformanceCollector:
    """Fresh performance collector per test."""
    return PerformanceCollector()


@pytest.fixture
def small_buffer_config() -> PipelineConfig:
    """Configuration with a four-slot streaming buffer."""
    return PipelineConfig(buffer_size=4)


@pytest.fixture(autouse=True)
def _clear_env(monkeypatch: pytest.MonkeyPatch) -> None:
    """Keep configuration tests independent of the caller's environment."""
    for name in (
        "LAZY_PIPELINE_MAX_MEMORY_MB",
        "LAZY_PIPELINE_BUFFER_SIZE",
        "LAZY_PIPELINE_ENABLE_METRICS",
        "LAZY_PIPELINE_OPERATION_TIMEOUT",
        "LAZY_PIPELINE_ITEM_SIZE_BYTES",
    ):
        monkeypatch.delenv(name, raising=False)
