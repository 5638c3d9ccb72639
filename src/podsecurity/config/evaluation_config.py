"""
Evaluation configuration for podsecurity.

Holds the settings an application passes to the evaluator: the target
schema version, whether to build structured field errors, and how the
podsecurity logger is configured.
"""

from __future__ import annotations

import json
import logging
import os
from dataclasses import dataclass
from pathlib import Path
from typing import Any

import yaml

from podsecurity.errors import ConfigError, InvalidVersionError
from podsecurity.models import SchemaVersion
from podsecurity.observability.logging import LOG_FORMATS, configure_logging
from podsecurity.policy.options import Options

logger = logging.getLogger(__name__)

TRUE_VALUES = ("1", "true", "yes", "on")


def _parse_bool(value: Any) -> bool:
    """Read a boolean that may arrive as a string (1/true/yes/on)."""
    if isinstance(value, str):
        return value.strip().lower() in TRUE_VALUES
    return bool(value)


@dataclass
class EvaluationConfig:
    """
    Evaluation settings.

    Attributes:
        version: Target schema version ("latest" or "v1.N")
        with_field_errors: Build structured field errors
        log_level: Level for the podsecurity logger
        log_format: Log output format (human, json)
    """

    version: str = "latest"
    with_field_errors: bool = False
    log_level: str = "INFO"
    log_format: str = "human"

    def validate(self) -> None:
        """
        Validate configuration values.

        Raises:
            ConfigError: If a value is invalid
        """
        try:
            SchemaVersion.parse(self.version)
        except InvalidVersionError as e:
            raise ConfigError(str(e))
        if not isinstance(logging.getLevelName(self.log_level.upper()), int):
            raise ConfigError(f"unknown log level {self.log_level!r}")
        if self.log_format not in LOG_FORMATS:
            raise ConfigError(f"unknown log format {self.log_format!r}")

    def schema_version(self) -> SchemaVersion:
        """Parse the configured version."""
        return SchemaVersion.parse(self.version)

    def options(self) -> Options:
        """Build evaluation options."""
        return Options(with_field_errors=self.with_field_errors)

    def configure_logging(self) -> logging.Logger:
        """Apply log_level and log_format to the podsecurity logger."""
        return configure_logging(level=self.log_level, format=self.log_format)

    def to_dict(self) -> dict[str, Any]:
        """Convert to dictionary."""
        return {
            "version": self.version,
            "with_field_errors": self.with_field_errors,
            "log_level": self.log_level,
            "log_format": self.log_format,
        }

    def to_json(self, indent: int = 2) -> str:
        """Convert to JSON string."""
        return json.dumps(self.to_dict(), indent=indent)

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> EvaluationConfig:
        """
        Create from dictionary.

        Raises:
            ConfigError: If a value is invalid
        """
        if not isinstance(data, dict):
            raise ConfigError(f"expected a mapping, got {type(data).__name__}")
        config = cls(
            version=str(data.get("version", "latest")),
            with_field_errors=_parse_bool(data.get("with_field_errors", False)),
            log_level=str(data.get("log_level", "INFO")),
            log_format=str(data.get("log_format", "human")),
        )
        config.validate()
        return config

    @classmethod
    def from_json(cls, json_str: str) -> EvaluationConfig:
        """Create from JSON string."""
        try:
            data = json.loads(json_str)
        except json.JSONDecodeError as e:
            raise ConfigError(f"invalid JSON: {e}")
        return cls.from_dict(data)

    @classmethod
    def from_file(cls, path: str) -> EvaluationConfig:
        """
        Load configuration from a JSON or YAML file.

        Args:
            path: Path to a .json, .yaml or .yml file

        Raises:
            ConfigError: If the file cannot be read or parsed
        """
        path = os.path.expanduser(path)
        try:
            with open(path, "r", encoding="utf-8") as f:
                if path.endswith(".json"):
                    data = json.load(f)
                else:
                    data = yaml.safe_load(f)
        except OSError as e:
            logger.warning(f"Cannot read configuration {path}: {e}")
            raise ConfigError(f"cannot read file: {e}", path)
        except (json.JSONDecodeError, yaml.YAMLError) as e:
            logger.warning(f"Cannot parse configuration {path}: {e}")
            raise ConfigError(f"cannot parse file: {e}", path)

        try:
            return cls.from_dict(data or {})
        except ConfigError as e:
            logger.warning(f"Invalid configuration {path}: {e.message}")
            raise ConfigError(e.message, path)

    def save(self, path: str) -> None:
        """Save configuration to a JSON or YAML file."""
        path = os.path.expanduser(path)
        Path(path).parent.mkdir(parents=True, exist_ok=True)

        with open(path, "w", encoding="utf-8") as f:
            if path.endswith(".json"):
                json.dump(self.to_dict(), f, indent=2)
            else:
                yaml.safe_dump(self.to_dict(), f, default_flow_style=False)


def load_config_from_env() -> EvaluationConfig:
    """
    Load configuration from environment variables.

    Environment variables:
        PODSECURITY_CONFIG_FILE: Path to configuration file
        PODSECURITY_VERSION: Target schema version
        PODSECURITY_FIELD_ERRORS: Build field errors (1/true/yes/on)
        PODSECURITY_LOG_LEVEL: Log level
        PODSECURITY_LOG_FORMAT: Log format (human, json)

    Returns:
        EvaluationConfig instance

    Raises:
        ConfigError: If a value is invalid
    """
    config_file = os.getenv("PODSECURITY_CONFIG_FILE")
    if config_file and os.path.exists(config_file):
        config = EvaluationConfig.from_file(config_file)
    else:
        config = EvaluationConfig()

    version = os.getenv("PODSECURITY_VERSION")
    if version:
        config.version = version

    field_errors = os.getenv("PODSECURITY_FIELD_ERRORS")
    if field_errors:
        config.with_field_errors = _parse_bool(field_errors)

    log_level = os.getenv("PODSECURITY_LOG_LEVEL")
    if log_level:
        config.log_level = log_level

    log_format = os.getenv("PODSECURITY_LOG_FORMAT")
    if log_format:
        config.log_format = log_format

    config.validate()
    return config
