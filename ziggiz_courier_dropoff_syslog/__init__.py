# -*- coding: utf-8 -*-

# SPDX-License-Identifier: BSL-1.1
# Copyright (c) 2025 Ziggiz Inc.
#
# This file is part of the ziggiz-courier-core-data-processing and is licensed under the
# Business Source License 1.1. You may not use this file except in
# compliance with the License. You may obtain a copy of the License at:
# https://github.com/ziggiz-courier/ziggiz-courier-core-data-processing/blob/main/LICENSE
# ziggiz_courier_dropoff_syslog package
#
# This is the package initializer for the Ziggiz Courier Dropoff Syslog forwarder.
# It forwards log events to a remote syslog collector over UDP or TCP.

# Local/package imports
from ziggiz_courier_dropoff_syslog.config import Config, load_config
from ziggiz_courier_dropoff_syslog.errors import (
    ConfigurationError,
    DeliveryTimeoutError,
    ForwarderError,
    TransportError,
)
from ziggiz_courier_dropoff_syslog.forwarder import SyslogForwarder
from ziggiz_courier_dropoff_syslog.handler import SyslogForwardingHandler

__all__ = [
    "Config",
    "ConfigurationError",
    "DeliveryTimeoutError",
    "ForwarderError",
    "SyslogForwarder",
    "SyslogForwardingHandler",
    "TransportError",
    "load_config",
]
