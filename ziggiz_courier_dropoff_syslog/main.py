# -*- coding: utf-8 -*-

# SPDX-License-Identifier: BSL-1.1
# Copyright (c) 2025 Ziggiz Inc.
#
# This file is part of the ziggiz-courier-core-data-processing and is licensed under the
# Business Source License 1.1. You may not use this file except in
# compliance with the License. You may obtain a copy of the License at:
# https://github.com/ziggiz-courier/ziggiz-courier-core-data-processing/blob/main/LICENSE
# Main entry point for the syslog forwarder

# Standard library imports
import argparse
import asyncio
import logging
import sys

from typing import Iterable, List, Optional

# Local/package imports
from ziggiz_courier_dropoff_syslog.config import Config, configure_logging, load_config
from ziggiz_courier_dropoff_syslog.errors import TransportError
from ziggiz_courier_dropoff_syslog.forwarder import SyslogForwarder
from ziggiz_courier_dropoff_syslog.telemetry import configure_console_tracing


def setup_logging(log_level: str = "INFO", config: Optional[Config] = None) -> None:
    """
    Configure logging with appropriate formatters and handlers.

    Args:
        log_level: The logging level to set (DEBUG, INFO, WARNING, ERROR, CRITICAL)
        config: Optional configuration object to use for logging setup
    """
    if config:
        configure_logging(config)
    else:
        level = getattr(logging, log_level.upper(), logging.INFO)

        formatter = logging.Formatter(
            "%(asctime)s %(levelname)s %(name)s %(message)s",
            datefmt="%Y-%m-%d %H:%M:%S",
        )

        root_logger = logging.getLogger()
        root_logger.setLevel(level)

        # Diagnostics go to stderr, stdout stays free for piping
        console_handler = logging.StreamHandler(sys.stderr)
        console_handler.setFormatter(formatter)
        root_logger.addHandler(console_handler)

        # Set specific log levels for third-party libraries
        logging.getLogger("opentelemetry").setLevel(logging.WARNING)


async def forward_messages(
    forwarder: SyslogForwarder, messages: Iterable[str], level: str = "info"
) -> int:
    """
    Deliver messages one after another.

    Returns:
        The number of messages that could not be delivered
    """
    logger = logging.getLogger("ziggiz_courier_dropoff_syslog.main")
    failures = 0
    for message in messages:
        try:
            await forwarder.log(level, message)
        except TransportError as e:
            failures += 1
            logger.error(f"Failed to forward message: {e}")
    return failures


def read_messages(args_messages: List[str], stream=None) -> Iterable[str]:
    """Messages from the command line, or one per non-empty line of stdin."""
    if args_messages:
        return list(args_messages)
    stream = stream or sys.stdin
    return (line.rstrip("\r\n") for line in stream if line.strip())


def run_forwarder(
    messages: Iterable[str],
    level: str = "info",
    config: Optional[Config] = None,
) -> int:
    """
    Forward messages to the configured syslog collector.

    Args:
        messages: The messages to send
        level: Syslog level name for every message
        config: Optional configuration object (defaults are used otherwise)

    Returns:
        The process exit status: 0 if everything was delivered, 1 otherwise
    """
    logger = logging.getLogger("ziggiz_courier_dropoff_syslog.main")

    try:
        if not config:
            config = Config()
        forwarder = SyslogForwarder(config)

        logger.info(
            f"Forwarding to {config.host}:{config.port} using "
            f"{config.protocol.upper()} protocol"
        )
        failures = asyncio.run(forward_messages(forwarder, messages, level))
    except KeyboardInterrupt:
        logger.info("Received keyboard interrupt, stopping")
        return 1
    except Exception as e:
        logger.exception(f"Failed to run forwarder: {e}")
        return 1

    if failures:
        logger.error(f"{failures} message(s) could not be forwarded")
        return 1
    return 0


def main() -> None:
    """
    Main entry point for the syslog forwarder.
    Parses command-line arguments, sets up logging, and sends the messages.
    """
    parser = argparse.ArgumentParser(description="Ziggiz Courier Syslog Forwarder")
    parser.add_argument(
        "messages",
        nargs="*",
        help="Messages to send (read from stdin, one per line, when omitted)",
    )
    parser.add_argument(
        "--config",
        type=str,
        help="Path to configuration file",
    )
    parser.add_argument(
        "--level",
        type=str,
        default="info",
        help="Syslog level name for the messages (default: info)",
    )
    parser.add_argument(
        "--log-level",
        type=str,
        choices=["DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"],
        help="Logging level (overrides config file)",
    )
    parser.add_argument(
        "--host",
        type=str,
        help="Syslog collector host (overrides config file)",
    )
    parser.add_argument(
        "--port",
        type=int,
        help="Syslog collector port (overrides config file)",
    )
    parser.add_argument(
        "--protocol",
        type=str,
        choices=["udp", "tcp"],
        help="Protocol to use (udp or tcp, overrides config file)",
    )
    parser.add_argument(
        "--facility",
        type=int,
        help="Syslog facility 0-23 (overrides config file)",
    )
    parser.add_argument(
        "--tag",
        type=str,
        help="Syslog tag (overrides config file)",
    )
    parser.add_argument(
        "--hostname",
        type=str,
        help="Hostname reported in messages (overrides config file)",
    )
    parser.add_argument(
        "--timeout-millis",
        type=int,
        help="TCP connect and write timeout in milliseconds (overrides config file)",
    )

    args = parser.parse_args()

    overrides = {
        key: value
        for key, value in (
            ("log_level", args.log_level),
            ("host", args.host),
            ("port", args.port),
            ("protocol", args.protocol),
            ("facility", args.facility),
            ("tag", args.tag),
            ("hostname", args.hostname),
            ("timeout_millis", args.timeout_millis),
        )
        if value is not None
    }

    try:
        config = load_config(args.config if args.config else None, **overrides)

        setup_logging(config=config)
        logger = logging.getLogger("ziggiz_courier_dropoff_syslog.main")

        if config.enable_console_tracing:
            configure_console_tracing()

        if args.config:
            logger.info(f"Loaded configuration from {args.config}")
        else:
            logger.info("Using default or automatically detected configuration")

        status = run_forwarder(read_messages(args.messages), args.level, config)
    except KeyboardInterrupt:
        logger = logging.getLogger("ziggiz_courier_dropoff_syslog.main")
        logger.info("Forwarding interrupted by user")
        sys.exit(1)
    except Exception as e:
        # Setup basic logging if we couldn't load the configuration
        if not logging.root.handlers:
            setup_logging("ERROR")
        logger = logging.getLogger("ziggiz_courier_dropoff_syslog.main")
        logger.exception(f"Unexpected error: {e}")
        sys.exit(1)

    sys.exit(status)


if __name__ == "__main__":
    main()
