"""
Deferred operations recorded on a lazy pipeline.

Operations are plain tagged values rather than opaque closures so that the
executors can read skip/take bounds off the chain without calling user code.
"""

from __future__ import annotations

import operator
from dataclasses import dataclass
from enum import Enum
from typing import TYPE_CHECKING, Any, Union

from lazy_pipeline._arith import clamp_index, saturating_add

if TYPE_CHECKING:
    from collections.abc import Callable, Iterable


class OperationKind(str, Enum):
    """Kinds of deferred operations."""

    MAP = "map"
    FILTER = "filter"
    TAKE = "take"
    SKIP = "skip"


@dataclass(frozen=True)
class MapOp:
    """Replace each item with ``transform(item)``."""

    transform: Callable[[Any], Any]
    kind: OperationKind = OperationKind.MAP


@dataclass(frozen=True)
class FilterOp:
    """Keep only items for which ``predicate(item)`` is truthy."""

    predicate: Callable[[Any], bool]
    kind: OperationKind = OperationKind.FILTER


@dataclass(frozen=True)
class TakeOp:
    """Stop after ``count`` surviving items."""

    count: int
    kind: OperationKind = OperationKind.TAKE


@dataclass(frozen=True)
class SkipOp:
    """Drop the first ``count`` surviving items."""

    count: int
    kind: OperationKind = OperationKind.SKIP


Operation = Union[MapOp, FilterOp, TakeOp, SkipOp]


@dataclass(frozen=True)
class Bounds:
    """Effective skip/take window of an operation chain.

    Attributes:
        skip: Surviving items to drop before emitting
        take: Maximum items to emit after skipping (None = unbounded)
    """

    skip: int = 0
    take: int | None = None

    def then_skip(self, count: int) -> Bounds:
        """Compose a later ``skip(count)`` onto this window."""
        count = clamp_index(operator.index(count))
        take = None if self.take is None else max(self.take - count, 0)
        return Bounds(skip=saturating_add(self.skip, count), take=take)

    def then_take(self, count: int) -> Bounds:
        """Compose a later ``take(count)`` onto this window."""
        count = clamp_index(operator.index(count))
        take = count if self.take is None else min(self.take, count)
        return Bounds(skip=self.skip, take=take)


def extract_bounds(operations: Iterable[Operation]) -> Bounds:
    """Fold every Skip/Take of a chain into one window.

    Entries compose in append order, so ``skip(2).skip(3)`` skips five items,
    ``take(10).take(4)`` takes four and ``take(10).skip(4)`` yields items
    4..9. The window applies to items that survived all Map/Filter entries,
    wherever the Skip/Take sits in the chain.
    """
    bounds = Bounds()
    for op in operations:
        if isinstance(op, SkipOp):
            bounds = bounds.then_skip(op.count)
        elif isinstance(op, TakeOp):
            bounds = bounds.then_take(op.count)
    return bounds
