"""
Configuration for lazy pipeline execution.

Defaults mirror what request handlers use when nothing is configured:
100 MB memory ceiling, 1024-slot streaming buffer, metrics on and a
30 second collect budget.
"""

from __future__ import annotations

import json
import os
from dataclasses import dataclass
from pathlib import Path
from typing import Any

import yaml

from lazy_pipeline.errors import ConfigError

_TRUE_VALUES = ("1", "true", "yes", "on")
_FALSE_VALUES = ("0", "false", "no", "off")

_ENV_FIELDS = {
    "LAZY_PIPELINE_MAX_MEMORY_MB": "max_memory_mb",
    "LAZY_PIPELINE_BUFFER_SIZE": "buffer_size",
    "LAZY_PIPELINE_ENABLE_METRICS": "enable_metrics",
    "LAZY_PIPELINE_OPERATION_TIMEOUT": "operation_timeout",
    "LAZY_PIPELINE_ITEM_SIZE_BYTES": "item_size_bytes",
}

_FIELD_TYPES: dict[str, type] = {
    "max_memory_mb": int,
    "buffer_size": int,
    "enable_metrics": bool,
    "operation_timeout": float,
    "item_size_bytes": int,
}


@dataclass
class PipelineConfig:
    """Configuration for lazy pipeline behavior.

    Attributes:
        max_memory_mb: Memory ceiling checked before streaming starts
        buffer_size: Capacity of the reusable streaming buffer
        enable_metrics: Whether map timings and start times are recorded
        operation_timeout: Wall-clock budget for ``collect()`` in seconds
        item_size_bytes: Per-element size used by the memory estimate
    """

    max_memory_mb: int = 100
    buffer_size: int = 1024
    enable_metrics: bool = True
    operation_timeout: float = 30.0
    item_size_bytes: int = 8

    @property
    def max_memory_bytes(self) -> int:
        """Memory ceiling in bytes."""
        return self.max_memory_mb * 1024 * 1024

    def validate(self) -> PipelineConfig:
        """Check the configuration.

        Returns:
            Self, for chaining

        Raises:
            ConfigError: If any field is not a number or is out of range
        """
        for name, kind in _FIELD_TYPES.items():
            value = getattr(self, name)
            if kind is bool:
                continue
            if isinstance(value, bool) or not isinstance(value, (int, float)):
                raise ConfigError(f"{name} must be a number", field=name, value=value)

        if self.buffer_size < 1:
            raise ConfigError(
                "buffer_size must be at least 1",
                field="buffer_size",
                value=self.buffer_size,
            )
        if self.max_memory_mb < 0:
            raise ConfigError(
                "max_memory_mb must not be negative",
                field="max_memory_mb",
                value=self.max_memory_mb,
            )
        if self.operation_timeout < 0:
            raise ConfigError(
                "operation_timeout must not be negative",
                field="operation_timeout",
                value=self.operation_timeout,
            )
        if self.item_size_bytes < 1:
            raise ConfigError(
                "item_size_bytes must be at least 1",
                field="item_size_bytes",
                value=self.item_size_bytes,
            )
        return self

    @classmethod
    def default(cls) -> PipelineConfig:
        """Create default configuration."""
        return cls()

    @classmethod
    def memory_constrained(cls, max_memory_mb: int) -> PipelineConfig:
        """Create configuration with a custom memory ceiling."""
        return cls(max_memory_mb=max_memory_mb)

    @classmethod
    def from_env(cls) -> PipelineConfig:
        """Create configuration from ``LAZY_PIPELINE_*`` environment variables.

        Unset variables keep their defaults.

        Raises:
            ConfigError: If a variable does not parse as its field's type
        """
        data = {
            field_name: os.environ[env_name]
            for env_name, field_name in _ENV_FIELDS.items()
            if env_name in os.environ
        }
        return cls.from_dict(data)

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> PipelineConfig:
        """Create configuration from a mapping, ignoring unknown keys.

        String values, as found in environment variables and hand-written
        YAML, are converted to the field type.

        Raises:
            ConfigError: If a value cannot be converted
        """
        known = {
            name: _coerce(name, value)
            for name, value in data.items()
            if name in cls.__dataclass_fields__
        }
        return cls(**known)

    @classmethod
    def from_file(cls, path: str | Path) -> PipelineConfig:
        """Load configuration from a YAML or JSON file.

        Args:
            path: Path to the file

        Returns:
            Parsed configuration
        """
        path = Path(path)
        content = path.read_text(encoding="utf-8")
        try:
            data = json.loads(content) if path.suffix == ".json" else yaml.safe_load(content)
        except (ValueError, yaml.YAMLError) as e:
            raise ConfigError(f"cannot parse {path.name}: {e}", field=str(path)) from e
        if data is None:
            return cls()
        if not isinstance(data, dict):
            raise ConfigError(
                "configuration file must contain a mapping",
                field=str(path),
            )
        return cls.from_dict(data)


def _coerce(name: str, value: Any) -> Any:
    """Convert ``value`` to the type of field ``name``."""
    kind = _FIELD_TYPES[name]
    try:
        if kind is bool:
            return _parse_bool(value)
        if isinstance(value, bool):
            raise TypeError("booleans are not numbers")
        if kind is int:
            if isinstance(value, float) and not value.is_integer():
                raise ValueError("not a whole number")
            return int(value.strip() if isinstance(value, str) else value)
        return float(value)
    except (TypeError, ValueError) as e:
        raise ConfigError(
            f"{name} must be {kind.__name__}, got {value!r}",
            field=name,
            value=value,
        ) from e


def _parse_bool(value: Any) -> bool:
    if isinstance(value, bool):
        return value
    if isinstance(value, int) and value in (0, 1):
        return bool(value)
    if isinstance(value, str):
        text = value.strip().lower()
        if text in _TRUE_VALUES:
            return True
        if text in _FALSE_VALUES:
            return False
    raise ValueError("not a boolean")
