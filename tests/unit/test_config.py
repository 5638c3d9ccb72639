"""
Unit tests for configuration management module.
"""

import json
import os
import tempfile
from pathlib import Path
from unittest.mock import patch

import pytest

from podsecurity.config import EvaluationConfig, load_config_from_env
from podsecurity.errors import ConfigError
from podsecurity.models import SchemaVersion
from podsecurity.policy import Options

ENV_KEYS = [
    "PODSECURITY_CONFIG_FILE",
    "PODSECURITY_VERSION",
    "PODSECURITY_FIELD_ERRORS",
    "PODSECURITY_LOG_LEVEL",
    "PODSECURITY_LOG_FORMAT",
]


def _clean_env():
    return {k: v for k, v in os.environ.items() if k not in ENV_KEYS}


class TestEvaluationConfig:
    """Tests for EvaluationConfig dataclass."""

    def test_defaults(self):
        """Test default configuration values."""
        config = EvaluationConfig()

        assert config.version == "latest"
        assert config.with_field_errors is False
        assert config.log_level == "INFO"
        assert config.log_format == "human"

    def test_schema_version(self):
        """Test the configured version is parsed."""
        config = EvaluationConfig(version="v1.27")
        assert config.schema_version() == SchemaVersion.major_minor(1, 27)
        assert EvaluationConfig().schema_version().latest

    def test_options(self):
        """Test evaluation options follow with_field_errors."""
        assert EvaluationConfig().options() == Options()
        assert EvaluationConfig(with_field_errors=True).options() == Options(with_field_errors=True)

    def test_validate_version(self):
        """Test an invalid version is rejected."""
        with pytest.raises(ConfigError):
            EvaluationConfig(version="1.x").validate()

    def test_validate_log_level(self):
        """Test an unknown log level is rejected."""
        with pytest.raises(ConfigError, match="log level"):
            EvaluationConfig(log_level="LOUD").validate()

    def test_validate_log_format(self):
        """Test an unknown log format is rejected."""
        with pytest.raises(ConfigError, match="log format"):
            EvaluationConfig(log_format="xml").validate()

    def test_to_dict_from_dict(self):
        """Test dictionary round-trip."""
        config = EvaluationConfig(version="v1.25", with_field_errors=True, log_format="json")
        restored = EvaluationConfig.from_dict(config.to_dict())
        assert restored == config

    @pytest.mark.parametrize(
        "value,expected",
        [("false", False), ("no", False), ("true", True), ("on", True), (True, True), (False, False)],
    )
    def test_from_dict_field_errors_strings(self, value, expected):
        """Test string booleans are parsed rather than truth-tested."""
        assert EvaluationConfig.from_dict({"with_field_errors": value}).with_field_errors is expected

    def test_yaml_quoted_false(self):
        """Test a quoted "false" in a YAML file turns field errors off."""
        with tempfile.TemporaryDirectory() as tmpdir:
            path = os.path.join(tmpdir, "config.yaml")
            Path(path).write_text('with_field_errors: "false"\n')
            assert EvaluationConfig.from_file(path).with_field_errors is False

    def test_from_dict_defaults(self):
        """Test missing keys fall back to defaults."""
        assert EvaluationConfig.from_dict({}) == EvaluationConfig()

    def test_from_dict_not_mapping(self):
        """Test non-mapping data is rejected."""
        with pytest.raises(ConfigError):
            EvaluationConfig.from_dict(["v1.25"])

    def test_from_json(self):
        """Test loading from a JSON string."""
        config = EvaluationConfig.from_json('{"version": "v1.30", "with_field_errors": true}')
        assert config.version == "v1.30"
        assert config.with_field_errors is True

    def test_from_json_invalid(self):
        """Test invalid JSON is rejected."""
        with pytest.raises(ConfigError, match="invalid JSON"):
            EvaluationConfig.from_json("{not json")

    def test_to_json(self):
        """Test JSON rendering."""
        data = json.loads(EvaluationConfig(version="v1.29").to_json())
        assert data["version"] == "v1.29"
        assert data["log_level"] == "INFO"


class TestConfigFiles:
    """Tests for loading and saving configuration files."""

    def test_save_and_load_json(self):
        """Test JSON file round-trip."""
        config = EvaluationConfig(version="v1.28", with_field_errors=True)
        with tempfile.TemporaryDirectory() as tmpdir:
            path = os.path.join(tmpdir, "nested", "config.json")
            config.save(path)

            assert Path(path).exists()
            assert EvaluationConfig.from_file(path) == config

    def test_save_and_load_yaml(self):
        """Test YAML file round-trip."""
        config = EvaluationConfig(version="v1.31", log_level="DEBUG", log_format="json")
        with tempfile.TemporaryDirectory() as tmpdir:
            path = os.path.join(tmpdir, "config.yaml")
            config.save(path)

            assert "version: v1.31" in Path(path).read_text()
            assert EvaluationConfig.from_file(path) == config

    def test_empty_yaml(self):
        """Test an empty YAML file gives the defaults."""
        with tempfile.TemporaryDirectory() as tmpdir:
            path = os.path.join(tmpdir, "config.yml")
            Path(path).write_text("")
            assert EvaluationConfig.from_file(path) == EvaluationConfig()

    def test_missing_file(self):
        """Test a missing file raises ConfigError with its path."""
        with pytest.raises(ConfigError) as exc_info:
            EvaluationConfig.from_file("/nonexistent/podsecurity.yaml")
        assert exc_info.value.source_path == "/nonexistent/podsecurity.yaml"

    def test_unparseable_file(self):
        """Test a malformed file raises ConfigError."""
        with tempfile.TemporaryDirectory() as tmpdir:
            path = os.path.join(tmpdir, "config.yaml")
            Path(path).write_text("version: [unclosed")
            with pytest.raises(ConfigError, match="cannot parse"):
                EvaluationConfig.from_file(path)

    def test_invalid_value_in_file(self):
        """Test invalid values keep the file path in the error."""
        with tempfile.TemporaryDirectory() as tmpdir:
            path = os.path.join(tmpdir, "config.json")
            Path(path).write_text('{"version": "next"}')
            with pytest.raises(ConfigError) as exc_info:
                EvaluationConfig.from_file(path)
            assert exc_info.value.source_path == path


class TestLoadConfigFromEnv:
    """Tests for load_config_from_env function."""

    def test_load_from_env_empty(self):
        """Test loading config with no variables set."""
        with patch.dict(os.environ, _clean_env(), clear=True):
            assert load_config_from_env() == EvaluationConfig()

    def test_load_from_env_overrides(self):
        """Test environment variables override defaults."""
        env = _clean_env()
        env.update({
            "PODSECURITY_VERSION": "v1.26",
            "PODSECURITY_FIELD_ERRORS": "yes",
            "PODSECURITY_LOG_LEVEL": "debug",
            "PODSECURITY_LOG_FORMAT": "json",
        })
        with patch.dict(os.environ, env, clear=True):
            config = load_config_from_env()

        assert config.version == "v1.26"
        assert config.with_field_errors is True
        assert config.log_level == "debug"
        assert config.log_format == "json"

    def test_field_errors_false(self):
        """Test unrecognized values turn field errors off."""
        env = _clean_env()
        env["PODSECURITY_FIELD_ERRORS"] = "off"
        with patch.dict(os.environ, env, clear=True):
            assert load_config_from_env().with_field_errors is False

    def test_config_file_then_env(self):
        """Test the environment overrides the configuration file."""
        with tempfile.TemporaryDirectory() as tmpdir:
            path = os.path.join(tmpdir, "config.json")
            EvaluationConfig(version="v1.24", with_field_errors=True).save(path)

            env = _clean_env()
            env["PODSECURITY_CONFIG_FILE"] = path
            env["PODSECURITY_VERSION"] = "v1.30"
            with patch.dict(os.environ, env, clear=True):
                config = load_config_from_env()

        assert config.version == "v1.30"
        assert config.with_field_errors is True

    def test_invalid_env_value(self):
        """Test an invalid environment value is rejected."""
        env = _clean_env()
        env["PODSECURITY_VERSION"] = "v1"
        with patch.dict(os.environ, env, clear=True):
            with pytest.raises(ConfigError):
                load_config_from_env()
