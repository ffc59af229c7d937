"""
Error hierarchy for lazy-pipeline-python.

Every failure of a terminal pipeline call is reported through one of these
types; pagination arithmetic never raises.
"""

from lazy_pipeline.errors.base import (
    ConfigError,
    ErrorContext,
    IteratorError,
    LazyPipelineError,
    MemoryLimitExceededError,
    OperationTimeoutError,
)

__all__ = [
    "ConfigError",
    "ErrorContext",
    "IteratorError",
    "LazyPipelineError",
    "MemoryLimitExceededError",
    "OperationTimeoutError",
]
