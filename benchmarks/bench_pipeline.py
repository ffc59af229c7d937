#!/usr/bin/env python3
"""
Pipeline performance benchmarks.

Measures throughput of collect, streaming and lookahead pagination.
"""

import time
from typing import Any

from lazy_pipeline import LazyPipeline, Pagination, PipelineConfig, paginate


def benchmark_collect(items: int = 100_000) -> dict[str, Any]:
    """Benchmark a filter-map chain materialized with collect()."""
    start = time.perf_counter()
    result = (
        LazyPipeline(range(items))
        .filter(lambda x: x % 2 == 0)
        .map(lambda x: x * 2)
        .collect()
    )
    elapsed = time.perf_counter() - start

    return {
        "name": "collect",
        "items": items,
        "results": len(result),
        "elapsed_seconds": elapsed,
        "throughput_ips": items / elapsed,
    }


def benchmark_collect_without_metrics(items: int = 100_000) -> dict[str, Any]:
    """Benchmark the same chain with map timing disabled."""
    config = PipelineConfig(enable_metrics=False)

    start = time.perf_counter()
    result = (
        LazyPipeline(range(items), config=config)
        .filter(lambda x: x % 2 == 0)
        .map(lambda x: x * 2)
        .collect()
    )
    elapsed = time.perf_counter() - start

    return {
        "name": "collect (metrics off)",
        "items": items,
        "results": len(result),
        "elapsed_seconds": elapsed,
        "throughput_ips": items / elapsed,
    }


def benchmark_stream(items: int = 100_000, chunk_size: int = 512) -> dict[str, Any]:
    """Benchmark chunked consumption."""
    stream = LazyPipeline(range(items)).map(lambda x: x + 1).stream()

    start = time.perf_counter()
    chunks = 0
    while stream.next_chunk(chunk_size) is not None:
        chunks += 1
    elapsed = time.perf_counter() - start

    return {
        "name": "stream",
        "items": items,
        "chunks": chunks,
        "elapsed_seconds": elapsed,
        "throughput_ips": items / elapsed,
    }


def benchmark_paginate(pages: int = 1000, page_size: int = 50) -> dict[str, Any]:
    """Benchmark lookahead pagination at increasing offsets."""
    start = time.perf_counter()
    for cursor in range(pages):
        paginate(range(pages * page_size), Pagination(cursor, page_size))
    elapsed = time.perf_counter() - start

    return {
        "name": "paginate",
        "pages": pages,
        "elapsed_seconds": elapsed,
        "latency_us": (elapsed / pages) * 1_000_000,
    }


def main() -> None:
    """Run all benchmarks."""
    print("=" * 60)
    print("lazy-pipeline-python Benchmarks")
    print("=" * 60)

    for bench in (
        benchmark_collect,
        benchmark_collect_without_metrics,
        benchmark_stream,
        benchmark_paginate,
    ):
        result = bench()
        print(f"\n{result['name']}:")
        for key, value in result.items():
            if key == "name":
                continue
            if isinstance(value, float):
                print(f"  {key}: {value:.4f}")
            else:
                print(f"  {key}: {value}")


if __name__ == "__main__":
    main()
