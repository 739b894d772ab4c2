# -*- coding: utf-8 -*-

# SPDX-License-Identifier: BSL-1.1
# Copyright (c) 2025 Ziggiz Inc.
#
# This file is part of the ziggiz-courier-core-data-processing and is licensed under the
# Business Source License 1.1. You may not use this file except in
# compliance with the License. You may obtain a copy of the License at:
# https://github.com/ziggiz-courier/ziggiz-courier-core-data-processing/blob/main/LICENSE
# Exceptions raised by the syslog forwarder

# Standard library imports
from typing import Optional


class ForwarderError(Exception):
    """
    Base class for all errors raised by the syslog forwarder.
    """


class ConfigurationError(ForwarderError, ValueError):
    """
    Exception raised when the forwarder configuration is invalid.

    Raised synchronously while building the configuration, so a forwarder is
    never created from an invalid one.
    """


class TransportError(ForwarderError):
    """
    Exception raised when a message could not be handed to the network.

    Attributes:
        protocol (str): The transport in use ("udp" or "tcp").
        host (str): Destination host.
        port (int): Destination port.
    """

    def __init__(
        self,
        message: str,
        protocol: Optional[str] = None,
        host: Optional[str] = None,
        port: Optional[int] = None,
    ):
        super().__init__(message)
        self.protocol = protocol
        self.host = host
        self.port = port


class DeliveryTimeoutError(TransportError):
    """
    Exception raised when a stream delivery did not finish within its timeout.

    Attributes:
        timeout (float): The timeout that expired, in seconds.
    """

    def __init__(
        self,
        message: str,
        timeout: float,
        protocol: Optional[str] = "tcp",
        host: Optional[str] = None,
        port: Optional[int] = None,
    ):
        super().__init__(message, protocol=protocol, host=host, port=port)
        self.timeout = timeout
