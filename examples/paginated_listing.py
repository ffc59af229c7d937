#!/usr/bin/env python3
"""
Paginated listing example.

This example shows how a list endpoint turns raw query parameters into a
page of results, and how a bulk export streams the same data in bounded
chunks.

Usage:
    python examples/paginated_listing.py
"""

import json
from collections.abc import Iterator

from lazy_pipeline import (
    LazyPipeline,
    Page,
    PerformanceCollector,
    PipelineConfig,
    paginate,
    pagination_from_query,
)


def fetch_contacts() -> Iterator[dict]:
    """Simulate rows arriving from a database cursor."""
    for i in range(1, 238):
        yield {"id": i, "name": f"Contact {i}", "active": i % 4 != 0}


def main() -> None:
    """Run pagination example."""
    collector = PerformanceCollector()

    # Query string of GET /contacts?cursor=2&limit=25
    pagination = pagination_from_query({"cursor": "2", "limit": "25"})

    active = (
        LazyPipeline(fetch_contacts(), collector=collector)
        .filter(lambda row: row["active"])
        .map(lambda row: row["name"])
        .collect()
    )
    page = paginate(active, pagination).with_total(len(active))
    body = Page.from_paginated("ok", page)

    print("Response body:")
    print("-" * 50)
    print(json.dumps(body.model_dump(), indent=2)[:400], "...")

    # Bulk export with a small buffer
    print("\n\nStreaming export:")
    print("-" * 50)

    stream = (
        LazyPipeline(
            fetch_contacts(),
            config=PipelineConfig(buffer_size=64),
            collector=collector,
        )
        .map(lambda row: row["id"])
        .stream()
    )
    for chunk in stream.chunks(50):
        print(f"exported {len(chunk)} ids, first={chunk[0]}")

    print("\n\nCollector:")
    print("-" * 50)
    print(collector.to_prometheus())


if __name__ == "__main__":
    main()
