"""
Base error classes for lazy-pipeline-python.

Provides a layered error hierarchy:
- LazyPipelineError: Base class for all library errors
- MemoryLimitExceededError: Admission check rejected a streaming run
- OperationTimeoutError: A collect call exceeded its wall-clock budget
- ConfigError: Invalid pipeline configuration
- IteratorError: Upstream source failure or reuse of a consumed pipeline
"""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any


@dataclass
class ErrorContext:
    """Structured error context for diagnostics."""

    field_path: str | None = None
    """Path to the problematic field (e.g., 'config.buffer_size')"""

    details: dict[str, Any] = field(default_factory=dict)
    """Additional details about the error"""

    source: str | None = None
    """Error source (e.g., 'config', 'collect', 'stream')"""

    hint: str | None = None
    """Actionable hint for resolving the error"""

    def __str__(self) -> str:
        parts = []
        if self.source:
            parts.append(f"[{self.source}]")
        if self.field_path:
            parts.append(f"at '{self.field_path}'")
        if self.hint:
            parts.append(f"(hint: {self.hint})")
        return " ".join(parts)


class LazyPipelineError(Exception):
    """Base class for all lazy-pipeline-python errors.

    Attributes:
        message: Human-readable error message
        context: Optional structured error context
    """

    def __init__(
        self,
        message: str,
        context: ErrorContext | None = None,
    ) -> None:
        self.message = message
        self.context = context or ErrorContext()
        super().__init__(self._format_message())

    def _format_message(self) -> str:
        """Format the full error message."""
        ctx_str = str(self.context)
        if ctx_str:
            return f"{self.message} {ctx_str}"
        return self.message

    def with_hint(self, hint: str) -> LazyPipelineError:
        """Add a hint to this error."""
        self.context.hint = hint
        self.args = (self._format_message(),)
        return self


class MemoryLimitExceededError(LazyPipelineError):
    """Estimated memory for a streaming run is above the configured limit.

    Raised by the admission check in ``LazyPipeline.stream()`` before
    anything is pulled from the source.
    """

    def __init__(
        self,
        used_bytes: int,
        limit_bytes: int,
        context: ErrorContext | None = None,
    ) -> None:
        ctx = context or ErrorContext(source="stream")
        ctx.details["used_bytes"] = used_bytes
        ctx.details["limit_bytes"] = limit_bytes
        super().__init__(f"Memory limit exceeded: used {used_bytes} bytes", ctx)
        self.used_bytes = used_bytes
        self.limit_bytes = limit_bytes


class OperationTimeoutError(LazyPipelineError):
    """A collect call ran longer than ``operation_timeout``.

    Partial results are discarded.
    """

    def __init__(
        self,
        elapsed: float,
        timeout: float,
        context: ErrorContext | None = None,
    ) -> None:
        ctx = context or ErrorContext(source="collect")
        ctx.details["elapsed"] = elapsed
        ctx.details["timeout"] = timeout
        super().__init__("Operation timeout exceeded", ctx)
        self.elapsed = elapsed
        self.timeout = timeout


class ConfigError(LazyPipelineError):
    """Invalid pipeline configuration."""

    def __init__(
        self,
        message: str,
        context: ErrorContext | None = None,
        *,
        field: str | None = None,
        value: Any = None,
    ) -> None:
        ctx = context or ErrorContext(source="config")
        if field:
            ctx.field_path = field
        if value is not None:
            ctx.details["value"] = value
        super().__init__(f"Pipeline configuration error: {message}", ctx)
        self.field = field
        self.value = value


class IteratorError(LazyPipelineError):
    """The upstream source failed, or the pipeline was already consumed.

    The original exception, when there is one, is chained as ``__cause__``.
    """

    def __init__(
        self,
        message: str,
        context: ErrorContext | None = None,
        *,
        cause: BaseException | None = None,
    ) -> None:
        ctx = context or ErrorContext(source="iterator")
        if cause is not None:
            ctx.details["cause_type"] = type(cause).__name__
        super().__init__(f"Iterator operation failed: {message}", ctx)
        self.__cause__ = cause
