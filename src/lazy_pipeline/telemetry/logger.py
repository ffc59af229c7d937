"""
Structured logging for lazy-pipeline-python.

Log calls take keyword fields (``logger.debug("collect finished", items=3)``).
Each record is rendered together with the run context bound by the
executors: ``collect()`` and ``stream()`` bind ``operation`` for the
duration of the run, and request handlers can bind ``request_id`` and
``tenant_id`` around them with ``bound_context``. Credentials are masked
before anything is written.
"""

from __future__ import annotations

import json
import logging
import re
import sys
import time
from contextlib import contextmanager
from contextvars import ContextVar
from dataclasses import dataclass, field, replace
from enum import Enum
from typing import TYPE_CHECKING, Any, ClassVar

if TYPE_CHECKING:
    from collections.abc import Iterator

REDACTED = "***REDACTED***"


class LogLevel(str, Enum):
    """Log levels."""

    DEBUG = "DEBUG"
    INFO = "INFO"
    WARNING = "WARNING"
    ERROR = "ERROR"
    CRITICAL = "CRITICAL"

    def to_logging_level(self) -> int:
        """Convert to standard logging level."""
        return getattr(logging, self.value)


@dataclass(frozen=True)
class LogContext:
    """Fields attached to every record emitted while the context is bound.

    Attributes:
        request_id: Identifier of the HTTP request being served
        tenant_id: Tenant whose data the pipeline reads
        operation: Pipeline run name (``lazy_pipeline.collect`` / ``.stream``)
        extra: Any other fields
    """

    request_id: str | None = None
    tenant_id: str | None = None
    operation: str | None = None
    extra: dict[str, Any] = field(default_factory=dict)

    def to_dict(self) -> dict[str, Any]:
        """Non-empty fields as a flat mapping."""
        result = {
            name: value
            for name, value in (
                ("request_id", self.request_id),
                ("tenant_id", self.tenant_id),
                ("operation", self.operation),
            )
            if value
        }
        result.update(self.extra)
        return result

    def merged(self, **fields: Any) -> LogContext:
        """Copy of this context with ``fields`` layered on top."""
        known = {k: fields.pop(k) for k in ("request_id", "tenant_id", "operation") if k in fields}
        return replace(self, **known, extra={**self.extra, **fields})


_EMPTY_CONTEXT = LogContext()
_log_context: ContextVar[LogContext] = ContextVar(
    "lazy_pipeline_log_context", default=_EMPTY_CONTEXT
)


def get_log_context() -> LogContext:
    """Context bound in the current execution context."""
    return _log_context.get()


def set_log_context(context: LogContext) -> None:
    """Replace the current context."""
    _log_context.set(context)


def clear_log_context() -> None:
    """Drop every bound field."""
    _log_context.set(_EMPTY_CONTEXT)


@contextmanager
def bound_context(**fields: Any) -> Iterator[LogContext]:
    """Bind ``fields`` on top of the current context until the block exits.

    Example:
        >>> with bound_context(request_id="req-7", tenant_id="acme"):
        ...     LazyPipeline(rows).take(10).collect()
    """
    token = _log_context.set(_log_context.get().merged(**fields))
    try:
        yield _log_context.get()
    finally:
        _log_context.reset(token)


class SensitiveDataMasker:
    """Redacts credentials from messages and field values.

    Sources are usually database cursors or HTTP clients, so the defaults
    cover connection URLs, bearer tokens, JWTs and ``password=`` pairs.
    """

    DEFAULT_PATTERNS: ClassVar[list[tuple[str, str]]] = [
        (r"(Bearer\s+)(\S+)", r"\1" + REDACTED),
        (r"eyJ[\w-]+\.[\w-]+\.[\w-]+", REDACTED),
        (r"([a-z][a-z0-9+.-]*://[^:/@\s]+:)([^@\s]+)(@)", r"\1***\3"),
        (r"((?:password|secret|token)[\"']?\s*[:=]\s*[\"']?)([^\"'\s&]+)", r"\1" + REDACTED),
    ]
    SENSITIVE_KEYS: ClassVar[tuple[str, ...]] = ("token", "secret", "password", "auth")

    def __init__(self, patterns: list[tuple[str, str]] | None = None) -> None:
        self._patterns = [
            (re.compile(pattern, re.IGNORECASE), replacement)
            for pattern, replacement in (patterns or self.DEFAULT_PATTERNS)
        ]

    def mask(self, text: str) -> str:
        """Mask credentials in text."""
        for pattern, replacement in self._patterns:
            text = pattern.sub(replacement, text)
        return text

    def mask_dict(self, data: dict[str, Any]) -> dict[str, Any]:
        """Mask a mapping; values under credential-like keys are dropped entirely."""
        return {
            key: REDACTED
            if any(s in key.lower() for s in self.SENSITIVE_KEYS)
            else self._mask_value(value)
            for key, value in data.items()
        }

    def _mask_value(self, value: Any) -> Any:
        if isinstance(value, str):
            return self.mask(value)
        if isinstance(value, dict):
            return self.mask_dict(value)
        if isinstance(value, list):
            return [self._mask_value(v) for v in value]
        return value


class _StructuredFormatter(logging.Formatter):
    """Shared field gathering for the JSON and text formatters."""

    def __init__(
        self,
        masker: SensitiveDataMasker | None = None,
        include_context: bool = True,
        **kwargs: Any,
    ) -> None:
        super().__init__(**kwargs)
        self._masker = masker or SensitiveDataMasker()
        self._include_context = include_context

    def _context_fields(self) -> dict[str, Any]:
        if not self._include_context:
            return {}
        return get_log_context().to_dict()

    def _record_fields(self, record: logging.LogRecord) -> dict[str, Any]:
        return self._masker.mask_dict(getattr(record, "extra_fields", {}))


class JsonFormatter(_StructuredFormatter):
    """One JSON object per record; run context nested under ``context``."""

    def __init__(
        self,
        masker: SensitiveDataMasker | None = None,
        include_timestamp: bool = True,
        include_context: bool = True,
    ) -> None:
        super().__init__(masker, include_context)
        self._include_timestamp = include_timestamp

    def format(self, record: logging.LogRecord) -> str:
        """Format log record as JSON."""
        payload: dict[str, Any] = {
            "level": record.levelname,
            "logger": record.name,
            "message": self._masker.mask(record.getMessage()),
        }
        if self._include_timestamp:
            stamp = time.strftime("%Y-%m-%dT%H:%M:%S", time.gmtime(record.created))
            payload["timestamp"] = f"{stamp}.{int(record.msecs):03d}Z"
        if context := self._context_fields():
            payload["context"] = context
        payload.update(self._record_fields(record))
        if record.exc_info:
            payload["exception"] = self.formatException(record.exc_info)
        return json.dumps(payload, default=str)


class TextFormatter(_StructuredFormatter):
    """``time | LEVEL | logger | message | key=value ...``"""

    def __init__(
        self,
        masker: SensitiveDataMasker | None = None,
        include_context: bool = True,
    ) -> None:
        super().__init__(
            masker,
            include_context,
            fmt="%(asctime)s | %(levelname)-8s | %(name)s | %(message)s",
            datefmt="%Y-%m-%d %H:%M:%S",
        )

    def formatMessage(self, record: logging.LogRecord) -> str:  # noqa: N802
        """Render the prefix with a masked message."""
        record.message = self._masker.mask(record.message)
        return super().formatMessage(record)

    def format(self, record: logging.LogRecord) -> str:
        """Format log record as text."""
        line = super().format(record)
        fields = {**self._context_fields(), **self._record_fields(record)}
        if fields:
            line += " | " + " ".join(f"{k}={v}" for k, v in fields.items())
        return line


class PipelineLogger:
    """Logger taking structured keyword fields.

    Example:
        >>> logger = get_logger("lazy_pipeline.pipeline")
        >>> logger.debug("collect finished", items=20, elapsed_ms=1.4)
    """

    _loggers: ClassVar[dict[str, logging.Logger]] = {}
    _level: ClassVar[LogLevel] = LogLevel.WARNING
    _handler: ClassVar[logging.Handler | None] = None

    @classmethod
    def configure(
        cls,
        level: LogLevel = LogLevel.INFO,
        format: str = "json",
        stream: Any = None,
        masker: SensitiveDataMasker | None = None,
    ) -> None:
        """Route every library logger to one handler.

        Args:
            level: Minimum level
            format: 'json' or 'text'
            stream: Output stream (default: stderr)
            masker: Credential masker
        """
        formatter: logging.Formatter
        if format == "json":
            formatter = JsonFormatter(masker=masker)
        else:
            formatter = TextFormatter(masker=masker)
        cls._level = level
        cls._handler = logging.StreamHandler(stream or sys.stderr)
        cls._handler.setFormatter(formatter)
        for logger in cls._loggers.values():
            cls._attach(logger)

    @classmethod
    def _attach(cls, logger: logging.Logger) -> None:
        logger.setLevel(cls._level.to_logging_level())
        logger.propagate = False
        if cls._handler is not None:
            logger.handlers[:] = [cls._handler]
        elif not logger.handlers:
            default = logging.StreamHandler(sys.stderr)
            default.setFormatter(TextFormatter())
            logger.addHandler(default)

    @classmethod
    def get_logger(cls, name: str) -> PipelineLogger:
        """Get or create a logger."""
        if name not in cls._loggers:
            logger = logging.getLogger(name)
            cls._attach(logger)
            cls._loggers[name] = logger
        return cls(cls._loggers[name])

    def __init__(self, logger: logging.Logger) -> None:
        self._logger = logger

    @property
    def name(self) -> str:
        """Underlying logger name."""
        return self._logger.name

    def _log(self, level: int, msg: str, exc_info: bool = False, **fields: Any) -> None:
        if self._logger.isEnabledFor(level):
            self._logger.log(level, msg, exc_info=exc_info, extra={"extra_fields": fields})

    def debug(self, msg: str, **fields: Any) -> None:
        """Log debug message."""
        self._log(logging.DEBUG, msg, **fields)

    def info(self, msg: str, **fields: Any) -> None:
        """Log info message."""
        self._log(logging.INFO, msg, **fields)

    def warning(self, msg: str, **fields: Any) -> None:
        """Log warning message."""
        self._log(logging.WARNING, msg, **fields)

    def error(self, msg: str, exc_info: bool = False, **fields: Any) -> None:
        """Log error message."""
        self._log(logging.ERROR, msg, exc_info=exc_info, **fields)


def get_logger(name: str) -> PipelineLogger:
    """Get a logger instance."""
    return PipelineLogger.get_logger(name)
