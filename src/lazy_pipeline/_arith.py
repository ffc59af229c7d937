"""Saturating index arithmetic shared by the pipeline and pagination layers.

Python integers never overflow, so "saturating" here means clamping to
``MAX_INDEX`` (``sys.maxsize``), the largest position ``itertools.islice``
and sequence indexing accept.
"""
from __future__ import annotations

import sys

MAX_INDEX: int = sys.maxsize


def clamp_index(value: int, minimum: int = 0) -> int:
    """Clamp ``value`` into ``[minimum, MAX_INDEX]``."""
    return min(max(value, minimum), MAX_INDEX)


def saturating_add(a: int, b: int) -> int:
    """``a + b`` clamped to ``MAX_INDEX``."""
    return min(a + b, MAX_INDEX)


def saturating_mul(a: int, b: int) -> int:
    """``a * b`` clamped to ``MAX_INDEX``."""
    return min(a * b, MAX_INDEX)
