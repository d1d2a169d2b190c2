"""Logging configuration management.

This module loads the logging configuration for both entry points from
environment variables or an optional JSON/YAML file.
"""

from __future__ import annotations

import json
import os
from pathlib import Path

import yaml
from pydantic import BaseModel
from pydantic import Field


class LoggingConfig(BaseModel):
    """Logging configuration model."""

    level: str = Field(default="INFO", description="Default logging level")
    format_type: str = Field(default="standard", description="Log format type")
    console_enabled: bool = Field(default=True, description="Enable console logging")
    json_format: bool = Field(default=False, description="Use JSON formatting")
    log_file: Path | None = Field(default=None, description="Log file path")
    max_file_size: int = Field(default=10 * 1024 * 1024, description="Max log file size")
    backup_count: int = Field(default=5, description="Number of backup files")
    third_party_level: str = Field(default="WARNING", description="Third-party logger level")

    @classmethod
    def from_environment(cls) -> LoggingConfig:
        """Create config from environment variables."""
        return cls(
            level=os.environ.get("LOG_LEVEL", "INFO"),
            format_type=os.environ.get("LOG_FORMAT", "standard"),
            console_enabled=os.environ.get("LOG_CONSOLE", "true").lower() == "true",
            json_format=os.environ.get("LOG_JSON", "false").lower() == "true",
            log_file=Path(log_file) if (log_file := os.environ.get("LOG_FILE")) else None,
            max_file_size=int(os.environ.get("LOG_MAX_SIZE", "10485760")),
            backup_count=int(os.environ.get("LOG_BACKUP_COUNT", "5")),
            third_party_level=os.environ.get("LOG_THIRD_PARTY_LEVEL", "WARNING"),
        )

    @classmethod
    def from_file(cls, config_path: Path) -> LoggingConfig:
        """Load config from a JSON or YAML file.

        A top-level ``logging`` key is honoured so the section can live in a
        larger configuration file.
        """
        suffix = config_path.suffix.lower()
        with open(config_path, encoding="utf-8") as f:
            if suffix == ".json":
                data = json.load(f)
            elif suffix in (".yml", ".yaml"):
                data = yaml.safe_load(f) or {}
            else:
                raise ValueError(f"Unsupported config file format: {config_path.suffix}")

        return cls(**data.get("logging", data))


_logging_config: LoggingConfig | None = None


def get_logging_config() -> LoggingConfig:
    """Get the current logging configuration.

    Returns:
        Current logging configuration
    """
    global _logging_config

    if _logging_config is None:
        for config_path in (Path("logging.json"), Path("logging.yaml")):
            if config_path.exists():
                _logging_config = LoggingConfig.from_file(config_path)
                break

        if _logging_config is None:
            _logging_config = LoggingConfig.from_environment()

    return _logging_config


def update_logging_config(config: LoggingConfig) -> None:
    """Replace the global logging configuration."""
    global _logging_config
    _logging_config = config


def reset_logging_config() -> None:
    """Reset logging configuration to defaults."""
    global _logging_config
    _logging_config = None
