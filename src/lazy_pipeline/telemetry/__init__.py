"""
Telemetry module for lazy-pipeline-python.

Provides structured logging, per-pipeline metrics and an explicitly
scoped performance collector.
"""

from lazy_pipeline.telemetry.logger import (
    JsonFormatter,
    LogContext,
    LogLevel,
    PipelineLogger,
    SensitiveDataMasker,
    TextFormatter,
    bound_context,
    clear_log_context,
    get_log_context,
    get_logger,
    set_log_context,
)
from lazy_pipeline.telemetry.metrics import (
    OperationSnapshot,
    PerformanceCollector,
    PerformanceRecord,
    PipelineMetrics,
)

__all__ = [
    "JsonFormatter",
    "LogContext",
    "LogLevel",
    "OperationSnapshot",
    "PerformanceCollector",
    "PerformanceRecord",
    "PipelineLogger",
    "PipelineMetrics",
    "SensitiveDataMasker",
    "TextFormatter",
    "bound_context",
    "clear_log_context",
    "get_log_context",
    "get_logger",
    "set_log_context",
]
