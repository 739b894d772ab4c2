# -*- coding: utf-8 -*-

# SPDX-License-Identifier: BSL-1.1
# Copyright (c) 2025 Ziggiz Inc.
#
# This file is part of the ziggiz-courier-core-data-processing and is licensed under the
# Business Source License 1.1. You may not use this file except in
# compliance with the License. You may obtain a copy of the License at:
# https://github.com/ziggiz-courier/ziggiz-courier-core-data-processing/blob/main/LICENSE
# BSD syslog (RFC 3164 style) message encoding
#
# Builds the "<PRI>TIMESTAMP HOSTNAME TAG BODY" payload sent by both transports.
# Nothing in this module performs I/O; facility and severity are validated by
# the configuration, not here.

# Standard library imports
import os
import pprint

from datetime import datetime, timezone
from typing import Any, Mapping

# Syslog level vocabulary (RFC 5424 section 6.2.1 severities)
SYSLOG_LEVELS: Mapping[str, int] = {
    "emerg": 0,
    "alert": 1,
    "crit": 2,
    "error": 3,
    "warning": 4,
    "notice": 5,
    "info": 6,
    "debug": 7,
}

# Severity used for level names missing from the level table
DEFAULT_SEVERITY = 7

MIN_FACILITY = 0
MAX_FACILITY = 23
MIN_SEVERITY = 0
MAX_SEVERITY = 7

# Keep rendered metadata on one line so stream framing stays newline delimited
RENDER_WIDTH = 1 << 16


def resolve_severity(level: str, levels: Mapping[str, int]) -> int:
    """Return the severity for a level name, falling back to debug (7)."""
    severity = levels.get(level)
    if severity is None:
        return DEFAULT_SEVERITY
    return severity


def compute_priority(facility: int, severity: int) -> int:
    """Compute the PRI value, ``facility * 8 + severity``."""
    return (facility << 3) + severity


def encode_message(
    facility: int,
    severity: int,
    timestamp: str,
    hostname: str,
    tag: str,
    body: str,
) -> bytes:
    """
    Encode a syslog payload.

    Args:
        facility: Syslog facility (0-23)
        severity: Syslog severity (0-7)
        timestamp: Already formatted timestamp
        hostname: Hostname to report
        tag: Application tag
        body: Rendered message body

    Returns:
        The UTF-8 encoded ``<PRI>TIMESTAMP HOSTNAME TAG BODY`` payload.
    """
    pri = compute_priority(facility, severity)
    return f"<{pri}>{timestamp} {hostname} {tag} {body}".encode("utf-8")


def default_date_provider() -> str:
    """Current UTC time in ISO-8601 with millisecond precision, e.g. 2025-01-02T03:04:05.678Z."""
    now = datetime.now(timezone.utc)
    return now.isoformat(timespec="milliseconds").replace("+00:00", "Z")


def default_message_provider(level: str, msg: Any, meta: Any = None) -> str:
    """Render the message body as ``PID - LEVEL - MESSAGE METADATA``."""
    return f"{os.getpid()} - {level} - {msg} {pprint.pformat(meta, width=RENDER_WIDTH)}"
