"""Tests for pipeline configuration."""

import pytest

from lazy_pipeline import ConfigError, PipelineConfig


class TestPipelineConfig:
    """Tests for PipelineConfig."""

    def test_defaults(self) -> None:
        """Test default values."""
        config = PipelineConfig.default()
        assert config.max_memory_mb == 100
        assert config.buffer_size == 1024
        assert config.enable_metrics is True
        assert config.operation_timeout == 30.0
        assert config.item_size_bytes == 8
        assert config.max_memory_bytes == 100 * 1024 * 1024

    def test_memory_constrained(self) -> None:
        """Test custom memory ceiling keeps other defaults."""
        config = PipelineConfig.memory_constrained(5)
        assert config.max_memory_mb == 5
        assert config.buffer_size == 1024

    def test_validate_returns_self(self) -> None:
        """Test validate chains."""
        config = PipelineConfig()
        assert config.validate() is config

    @pytest.mark.parametrize(
        ("field", "value"),
        [
            ("buffer_size", 0),
            ("max_memory_mb", -1),
            ("operation_timeout", -0.5),
            ("item_size_bytes", 0),
        ],
    )
    def test_validate_rejects(self, field: str, value: float) -> None:
        """Test out-of-range fields are rejected."""
        config = PipelineConfig(**{field: value})
        with pytest.raises(ConfigError) as exc_info:
            config.validate()
        assert exc_info.value.field == field

    def test_zero_memory_is_valid(self) -> None:
        """Test a zero memory ceiling is allowed (it rejects every stream)."""
        PipelineConfig(max_memory_mb=0).validate()


class TestFromEnv:
    """Tests for environment loading."""

    def test_no_env_gives_defaults(self) -> None:
        """Test unset variables fall back to defaults."""
        assert PipelineConfig.from_env() == PipelineConfig()

    def test_env_values(self, monkeypatch: pytest.MonkeyPatch) -> None:
        """Test every variable is read."""
        monkeypatch.setenv("LAZY_PIPELINE_MAX_MEMORY_MB", "12")
        monkeypatch.setenv("LAZY_PIPELINE_BUFFER_SIZE", "64")
        monkeypatch.setenv("LAZY_PIPELINE_ENABLE_METRICS", "off")
        monkeypatch.setenv("LAZY_PIPELINE_OPERATION_TIMEOUT", "2.5")
        config = PipelineConfig.from_env()
        assert config.max_memory_mb == 12
        assert config.buffer_size == 64
        assert config.enable_metrics is False
        assert config.operation_timeout == 2.5

    def test_invalid_env_value(self, monkeypatch: pytest.MonkeyPatch) -> None:
        """Test unparsable numbers raise ConfigError."""
        monkeypatch.setenv("LAZY_PIPELINE_BUFFER_SIZE", "lots")
        with pytest.raises(ConfigError):
            PipelineConfig.from_env()


class TestFromFile:
    """Tests for file loading."""

    def test_yaml_file(self, tmp_path) -> None:
        """Test loading YAML, ignoring unknown keys."""
        path = tmp_path / "pipeline.yaml"
        path.write_text("buffer_size: 16\nenable_metrics: false\nunused: 1\n")
        config = PipelineConfig.from_file(path)
        assert config.buffer_size == 16
        assert config.enable_metrics is False
        assert config.max_memory_mb == 100

    def test_json_file(self, tmp_path) -> None:
        """Test loading JSON."""
        path = tmp_path / "pipeline.json"
        path.write_text('{"max_memory_mb": 3, "operation_timeout": 0.5}')
        config = PipelineConfig.from_file(str(path))
        assert config.max_memory_mb == 3
        assert config.operation_timeout == 0.5

    def test_empty_file(self, tmp_path) -> None:
        """Test an empty file gives defaults."""
        path = tmp_path / "empty.yaml"
        path.write_text("")
        assert PipelineConfig.from_file(path) == PipelineConfig()

    def test_non_mapping_rejected(self, tmp_path) -> None:
        """Test a list document is rejected."""
        path = tmp_path / "list.yaml"
        path.write_text("- 1\n- 2\n")
        with pytest.raises(ConfigError):
            PipelineConfig.from_file(path)


class TestValueConversion:
    """Tests for converting loosely typed values to field types."""

    def test_string_numbers_converted(self) -> None:
        """Test numeric strings become numbers."""
        config = PipelineConfig.from_dict(
            {"max_memory_mb": "10", "operation_timeout": "1.5", "enable_metrics": "no"}
        )
        assert config.max_memory_mb == 10
        assert config.operation_timeout == 1.5
        assert config.enable_metrics is False
        assert config.validate() is config

    def test_non_numeric_yaml_value(self, tmp_path) -> None:
        """Test a word where a number belongs is a ConfigError naming the field."""
        path = tmp_path / "pipeline.yaml"
        path.write_text("buffer_size: abc\n")
        with pytest.raises(ConfigError) as exc_info:
            PipelineConfig.from_file(path)
        assert exc_info.value.field == "buffer_size"
        assert exc_info.value.value == "abc"

    def test_fractional_int_rejected(self) -> None:
        """Test whole-number fields refuse fractions."""
        with pytest.raises(ConfigError):
            PipelineConfig.from_dict({"buffer_size": 2.5})

    def test_unknown_boolean_rejected(self) -> None:
        """Test unrecognized boolean words are rejected."""
        with pytest.raises(ConfigError) as exc_info:
            PipelineConfig.from_dict({"enable_metrics": "maybe"})
        assert exc_info.value.field == "enable_metrics"

    def test_item_size_from_env(self, monkeypatch: pytest.MonkeyPatch) -> None:
        """Test the item size variable is read."""
        monkeypatch.setenv("LAZY_PIPELINE_ITEM_SIZE_BYTES", "32")
        assert PipelineConfig.from_env().item_size_bytes == 32

    def test_validate_rejects_non_numbers(self) -> None:
        """Test directly constructed configs with strings fail validation cleanly."""
        with pytest.raises(ConfigError) as exc_info:
            PipelineConfig(max_memory_mb="10").validate()  # type: ignore[arg-type]
        assert exc_info.value.field == "max_memory_mb"

    def test_malformed_yaml(self, tmp_path) -> None:
        """Test unparsable files raise ConfigError."""
        path = tmp_path / "broken.yaml"
        path.write_text("buffer_size: [1, 2\n")
        with pytest.raises(ConfigError):
            PipelineConfig.from_file(path)
