# -*- coding: utf-8 -*-

# SPDX-License-Identifier: BSL-1.1
# Copyright (c) 2025 Ziggiz Inc.
#
# This file is part of the ziggiz-courier-core-data-processing and is licensed under the
# Business Source License 1.1. You may not use this file except in
# compliance with the License. You may obtain a copy of the License at:
# https://github.com/ziggiz-courier/ziggiz-courier-core-data-processing/blob/main/LICENSE
# Tests for the configuration module

# Standard library imports
import logging
import socket

from unittest.mock import mock_open, patch

# Third-party imports
import pydantic
import pytest
import yaml

# Local/package imports
from ziggiz_courier_dropoff_syslog.config import (
    Config,
    LoggerConfig,
    build_config,
    configure_logging,
    load_config,
)
from ziggiz_courier_dropoff_syslog.errors import ConfigurationError
from ziggiz_courier_dropoff_syslog.protocol.encoder import (
    SYSLOG_LEVELS,
    default_date_provider,
    default_message_provider,
)


class TestConfig:
    """Tests for the configuration module."""

    @pytest.mark.unit
    def test_config_defaults(self):
        """Test default configuration values."""
        config = Config()
        assert config.host == "localhost"
        assert config.port == 514
        assert config.protocol == "udp"
        assert config.facility == 0
        assert config.hostname == socket.gethostname()
        assert config.tag == "ziggiz-courier"
        assert config.timeout_millis == 2000
        assert config.timeout == 2.0
        assert config.silent is False
        assert config.levels == dict(SYSLOG_LEVELS)
        assert config.date_provider is default_date_provider
        assert config.message_provider is default_message_provider
        assert config.log_level == "INFO"
        assert config.loggers == []
        assert config.enable_console_tracing is False

    @pytest.mark.unit
    def test_logger_config(self):
        """Test logger configuration."""
        logger_config = LoggerConfig(name="test.logger", level="DEBUG")
        assert logger_config.name == "test.logger"
        assert logger_config.level == "DEBUG"
        assert logger_config.propagate is True

    @pytest.mark.unit
    def test_config_is_frozen(self):
        """Test that the configuration cannot be changed after construction."""
        config = Config()
        with pytest.raises(pydantic.ValidationError):
            config.port = 1514

    @pytest.mark.unit
    @pytest.mark.parametrize("facility", [0, 1, 16, 23])
    def test_validate_facility_valid(self, facility):
        """Test the facility bounds that are accepted."""
        assert Config(facility=facility).facility == facility

    @pytest.mark.unit
    @pytest.mark.parametrize("facility", [-1, 24, 100])
    def test_validate_facility_invalid(self, facility):
        """Test the facility bounds that are rejected."""
        with pytest.raises(ValueError):
            Config(facility=facility)

    @pytest.mark.unit
    def test_validate_protocol_valid(self):
        """Test validation and normalisation of protocol values."""
        assert Config(protocol="udp").protocol == "udp"
        assert Config(protocol="TCP").protocol == "tcp"
        assert Config(protocol="U").protocol == "udp"
        assert Config(protocol="T").protocol == "tcp"
        assert Config(protocol="datagram").protocol == "udp"
        assert Config(protocol="Stream").protocol == "tcp"

    @pytest.mark.unit
    def test_validate_protocol_invalid(self):
        """Test validation of invalid protocol values."""
        with pytest.raises(ValueError):
            Config(protocol="tls")

        with pytest.raises(ValueError):
            Config(protocol="invalid_protocol")

    @pytest.mark.unit
    def test_validate_log_level(self):
        """Test validation of log levels."""
        assert Config(log_level="debug").log_level == "DEBUG"

        with pytest.raises(ValueError):
            Config(log_level="INVALID_LEVEL")

    @pytest.mark.unit
    def test_validate_port_and_timeout(self):
        """Test validation of port and timeout values."""
        with pytest.raises(ValueError):
            Config(port=0)
        with pytest.raises(ValueError):
            Config(port=70000)
        with pytest.raises(ValueError):
            Config(timeout_millis=0)

        assert Config(timeout_millis=250).timeout == 0.25

    @pytest.mark.unit
    def test_validate_levels(self):
        """Test that custom level tables must map to syslog severities."""
        config = Config(levels={"trace": 7, "fatal": 0})
        assert config.levels == {"trace": 7, "fatal": 0}

        with pytest.raises(ValueError):
            Config(levels={"fatal": 8})

    @pytest.mark.unit
    def test_levels_are_per_instance(self):
        """Test that every configuration owns its level table."""
        first = Config()
        second = Config()
        assert first.levels is not second.levels
        assert first.levels is not SYSLOG_LEVELS

    @pytest.mark.unit
    def test_custom_providers(self):
        """Test that date and message providers can be replaced."""
        config = Config(
            date_provider=lambda: "Jan  1 00:00:00",
            message_provider=lambda level, msg, meta: f"{level}:{msg}",
        )
        assert config.date_provider() == "Jan  1 00:00:00"
        assert config.message_provider("info", "hi", None) == "info:hi"
        assert "date_provider" not in config.model_dump()

    @pytest.mark.unit
    def test_build_config_wraps_validation_errors(self):
        """Test that build_config raises ConfigurationError."""
        assert build_config(port=1514).port == 1514

        with pytest.raises(ConfigurationError):
            build_config(facility=24)

        with pytest.raises(ConfigurationError):
            build_config(protocol="X")

    @pytest.mark.unit
    @patch(
        "builtins.open",
        new_callable=mock_open,
        read_data="""
host: "127.0.0.1"
protocol: "tcp"
port: 1514
facility: 16
tag: "billing"
hostname: "app01"
timeout_millis: 500
log_level: "DEBUG"
levels:
  info: 6
  audit: 5
loggers:
  - name: "test.logger"
    level: "DEBUG"
    propagate: false
""",
    )
    @patch("pathlib.Path.exists")
    def test_load_config(self, mock_exists, mock_file):
        """Test loading configuration from a file."""
        mock_exists.return_value = True

        config = load_config("test_config.yaml")

        assert config.host == "127.0.0.1"
        assert config.protocol == "tcp"
        assert config.port == 1514
        assert config.facility == 16
        assert config.tag == "billing"
        assert config.hostname == "app01"
        assert config.timeout_millis == 500
        assert config.log_level == "DEBUG"
        assert config.levels == {"info": 6, "audit": 5}

        assert len(config.loggers) == 1
        assert config.loggers[0].name == "test.logger"
        assert config.loggers[0].level == "DEBUG"
        assert config.loggers[0].propagate is False

    @pytest.mark.unit
    @patch(
        "builtins.open",
        new_callable=mock_open,
        read_data="""
host: "collector.example.com"
protocol: "udp"
port: 514
""",
    )
    @patch("pathlib.Path.exists")
    def test_load_config_with_overrides(self, mock_exists, mock_file):
        """Test that overrides take precedence over the file."""
        mock_exists.return_value = True

        config = load_config("test_config.yaml", port=1514, protocol="tcp")

        assert config.host == "collector.example.com"
        assert config.port == 1514
        assert config.protocol == "tcp"

    @pytest.mark.unit
    @patch("builtins.open", new_callable=mock_open, read_data="facility: 42\n")
    @patch("pathlib.Path.exists")
    def test_load_config_invalid_values(self, mock_exists, mock_file):
        """Test that invalid file values raise ConfigurationError."""
        mock_exists.return_value = True

        with pytest.raises(ConfigurationError):
            load_config("bad_config.yaml")

    @pytest.mark.unit
    @patch("builtins.open", new_callable=mock_open, read_data="")
    @patch("pathlib.Path.exists")
    def test_load_config_empty_file(self, mock_exists, mock_file):
        """Test that an empty file yields the defaults."""
        mock_exists.return_value = True

        config = load_config("empty.yaml")
        assert config.host == "localhost"

    @pytest.mark.unit
    @patch("builtins.open", side_effect=yaml.YAMLError("Invalid YAML"))
    @patch("pathlib.Path.exists")
    def test_load_config_invalid_yaml(self, mock_exists, mock_open):
        """Test handling of invalid YAML in config file."""
        mock_exists.return_value = True

        with pytest.raises(yaml.YAMLError):
            load_config("invalid_config.yaml")

    @pytest.mark.unit
    @patch("pathlib.Path.exists", return_value=False)
    def test_load_config_not_found(self, mock_exists):
        """Test handling of configuration file not found."""
        # When explicit config path is provided but file doesn't exist
        with pytest.raises(FileNotFoundError):
            load_config("non_existent_config.yaml")

        # When no config path is provided, should return default configuration
        config = load_config()
        assert isinstance(config, Config)
        assert config.host == "localhost"

        # Overrides still apply without a file
        config = load_config(host="10.0.0.5")
        assert config.host == "10.0.0.5"

    @pytest.mark.unit
    def test_configure_logging(self):
        """Test configuring logging from configuration."""
        original_handlers = logging.root.handlers.copy()

        try:
            config = Config(
                log_level="DEBUG",
                loggers=[
                    LoggerConfig(name="test.logger", level="INFO"),
                    LoggerConfig(name="test.debug", level="DEBUG", propagate=False),
                ],
            )

            configure_logging(config)

            assert logging.root.level == logging.DEBUG
            assert len(logging.root.handlers) == 1

            test_logger = logging.getLogger("test.logger")
            assert test_logger.level == logging.INFO
            assert test_logger.propagate is True

            debug_logger = logging.getLogger("test.debug")
            assert debug_logger.level == logging.DEBUG
            assert debug_logger.propagate is False

        finally:
            for handler in logging.root.handlers[:]:
                logging.root.removeHandler(handler)
            for handler in original_handlers:
                logging.root.addHandler(handler)
