# -*- coding: utf-8 -*-

# SPDX-License-Identifier: BSL-1.1
# Copyright (c) 2025 Ziggiz Inc.
#
# This file is part of the ziggiz-courier-core-data-processing and is licensed under the
# Business Source License 1.1. You may not use this file except in
# compliance with the License. You may obtain a copy of the License at:
# https://github.com/ziggiz-courier/ziggiz-courier-core-data-processing/blob/main/LICENSE
# Configuration module for loading and parsing configuration files

# Standard library imports
import logging
import socket

from pathlib import Path
from typing import Any, Callable, Dict, List, Optional, Union

# Third-party imports
import yaml

from pydantic import BaseModel, ConfigDict, Field, ValidationError, field_validator

# Local/package imports
from ziggiz_courier_dropoff_syslog.errors import ConfigurationError
from ziggiz_courier_dropoff_syslog.protocol.encoder import (
    MAX_FACILITY,
    MAX_SEVERITY,
    MIN_FACILITY,
    MIN_SEVERITY,
    SYSLOG_LEVELS,
    default_date_provider,
    default_message_provider,
)

# Accepted spellings for the two transports
PROTOCOL_ALIASES = {
    "udp": "udp",
    "u": "udp",
    "datagram": "udp",
    "tcp": "tcp",
    "t": "tcp",
    "stream": "tcp",
}


class LoggerConfig(BaseModel):
    """
    Configuration for individual loggers.

    Attributes:
        name (str): Logger name.
        level (str): Logging level (default: "INFO").
        propagate (bool): Whether to propagate logs to parent (default: True).
    """

    name: str
    level: str = "INFO"
    propagate: bool = True


class Config(BaseModel):
    """
    Main configuration class for the Ziggiz Courier Dropoff Syslog forwarder.

    The configuration is frozen once validated; every log call reads it
    without locking.
    """

    model_config = ConfigDict(frozen=True)

    # Destination configuration
    host: str = "localhost"
    port: int = 514
    protocol: str = "udp"  # "udp" or "tcp"
    timeout_millis: int = 2000  # Connect and write window for TCP only

    # Message configuration
    facility: int = 0
    hostname: str = Field(default_factory=socket.gethostname)
    tag: str = "ziggiz-courier"
    levels: Dict[str, int] = Field(default_factory=lambda: dict(SYSLOG_LEVELS))
    date_provider: Callable[[], str] = Field(
        default=default_date_provider, exclude=True
    )
    message_provider: Callable[[str, Any, Any], str] = Field(
        default=default_message_provider, exclude=True
    )

    # Skip the network entirely and report every message as delivered
    silent: bool = False

    # Logging configuration
    log_level: str = "INFO"
    log_format: str = "%(asctime)s %(levelname)s %(name)s %(message)s"
    log_date_format: str = "%Y-%m-%d %H:%M:%S"
    loggers: List[LoggerConfig] = Field(default_factory=list)

    # Telemetry configuration
    enable_console_tracing: bool = False

    @field_validator("log_level")
    @classmethod
    def validate_log_level(cls, v: str) -> str:
        """Validate that the log level is a valid Python logging level."""
        valid_levels = ["DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"]
        v = v.upper()
        if v not in valid_levels:
            raise ValueError(f"Invalid log level: {v}. Must be one of {valid_levels}")
        return v

    @field_validator("protocol")
    @classmethod
    def validate_protocol(cls, v: str) -> str:
        """Validate that the protocol is UDP or TCP, normalising aliases."""
        normalized = PROTOCOL_ALIASES.get(str(v).lower())
        if normalized is None:
            raise ValueError(f"Invalid protocol: {v}. Must be one of ['udp', 'tcp']")
        return normalized

    @field_validator("facility")
    @classmethod
    def validate_facility(cls, v: int) -> int:
        """Validate that the facility index is within 0..23."""
        if v < MIN_FACILITY or v > MAX_FACILITY:
            raise ValueError(
                f"Facility index {v} is out of range (valid range is "
                f"{MIN_FACILITY}..{MAX_FACILITY})"
            )
        return v

    @field_validator("port")
    @classmethod
    def validate_port(cls, v: int) -> int:
        if v < 1 or v > 65535:
            raise ValueError(f"Invalid port: {v}. Must be between 1 and 65535")
        return v

    @field_validator("timeout_millis")
    @classmethod
    def validate_timeout_millis(cls, v: int) -> int:
        if v <= 0:
            raise ValueError(f"Invalid timeout: {v}. Must be a positive number of ms")
        return v

    @field_validator("levels")
    @classmethod
    def validate_levels(cls, v: Dict[str, int]) -> Dict[str, int]:
        """Validate that every level maps to a syslog severity."""
        for name, severity in v.items():
            if severity < MIN_SEVERITY or severity > MAX_SEVERITY:
                raise ValueError(
                    f"Severity {severity} for level '{name}' is out of range "
                    f"(valid range is {MIN_SEVERITY}..{MAX_SEVERITY})"
                )
        return v

    @property
    def timeout(self) -> float:
        """TCP timeout in seconds."""
        return self.timeout_millis / 1000.0


def build_config(**options: Any) -> Config:
    """
    Build a validated configuration.

    Raises:
        ConfigurationError: If any option is invalid.
    """
    try:
        return Config(**options)
    except ValidationError as e:
        raise ConfigurationError(f"Invalid forwarder configuration: {e}") from e


def load_config(
    config_path: Optional[Union[str, Path]] = None, **overrides: Any
) -> Config:
    """
    Load configuration from a YAML file.

    Args:
        config_path: Path to the configuration file. If None, will look for config.yaml
                   in the current directory and default directories.
        **overrides: Values taking precedence over the file (e.g. from the command line).

    Returns:
        A Config object containing the loaded configuration.

    Raises:
        FileNotFoundError: If the configuration file cannot be found.
        yaml.YAMLError: If the configuration file contains invalid YAML.
        ConfigurationError: If the resulting configuration is invalid.
    """
    # Default search paths
    search_paths = [
        Path.cwd() / "config.yaml",
        Path.cwd() / "config.yml",
        Path("/etc/ziggiz-courier-dropoff-syslog/config.yaml"),
        Path("/etc/ziggiz-courier-dropoff-syslog/config.yml"),
    ]

    # If config path is provided, try that first
    if config_path:
        config_file = Path(config_path)
        if not config_file.exists():
            raise FileNotFoundError(f"Configuration file not found: {config_file}")
    else:
        # Try default paths
        for path in search_paths:
            if path.exists():
                config_file = path
                break
        else:
            # No config file found, return default configuration
            logging.warning("No configuration file found, using default configuration")
            return build_config(**overrides)

    # Load YAML configuration
    with open(config_file, "r") as f:
        try:
            config_data = yaml.safe_load(f) or {}
        except yaml.YAMLError as e:
            logging.error("Error parsing configuration file", extra={"error": e})
            raise

    config_data.update(overrides)
    return build_config(**config_data)


class SafeExtraFormatter(logging.Formatter):
    """
    Custom formatter that substitutes missing extra fields with a blank string.
    """

    def format(self, record: logging.LogRecord) -> str:
        if not hasattr(record, "error"):
            record.error = ""
        return super().format(record)


def configure_logging(config: "Config") -> None:
    """
    Configure logging based on the provided configuration.

    Args:
        config: The loaded configuration object.
    """
    # Reset logging configuration
    for handler in logging.root.handlers[:]:
        logging.root.removeHandler(handler)

    level = getattr(logging, config.log_level, logging.INFO)
    formatter = SafeExtraFormatter(config.log_format, datefmt=config.log_date_format)

    console_handler = logging.StreamHandler()
    console_handler.setFormatter(formatter)
    logging.root.setLevel(level)
    logging.root.addHandler(console_handler)

    # Configure additional loggers from config
    for logger_config in config.loggers:
        logger = logging.getLogger(logger_config.name)
        logger.setLevel(getattr(logging, logger_config.level, logging.INFO))
        logger.propagate = logger_config.propagate
