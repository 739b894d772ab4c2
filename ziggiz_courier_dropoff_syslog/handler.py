# -*- coding: utf-8 -*-

# SPDX-License-Identifier: BSL-1.1
# Copyright (c) 2025 Ziggiz Inc.
#
# This file is part of the ziggiz-courier-core-data-processing and is licensed under the
# Business Source License 1.1. You may not use this file except in
# compliance with the License. You may obtain a copy of the License at:
# https://github.com/ziggiz-courier/ziggiz-courier-core-data-processing/blob/main/LICENSE
# logging.Handler adapter for the syslog forwarder
#
# Lets applications attach the forwarder to the standard logging module the
# same way they would attach logging.handlers.SysLogHandler.

# Standard library imports
import asyncio
import logging

from typing import Any, Dict, Optional, Set

# Local/package imports
from ziggiz_courier_dropoff_syslog.forwarder import SyslogForwarder

# Python logging levels mapped to syslog level names, highest first
PYTHON_TO_SYSLOG_LEVELS = (
    (logging.CRITICAL, "crit"),
    (logging.ERROR, "error"),
    (logging.WARNING, "warning"),
    (logging.INFO, "info"),
    (logging.DEBUG, "debug"),
)

# Attributes present on every LogRecord; anything else came in through extra=
_RESERVED_RECORD_ATTRS = frozenset(
    vars(logging.LogRecord("", logging.NOTSET, "", 0, "", None, None))
) | {"message", "asctime", "taskName"}

PACKAGE_LOGGER_PREFIX = "ziggiz_courier_dropoff_syslog"


def syslog_level_for(levelno: int) -> str:
    """Map a Python logging level to the nearest syslog level at or below it."""
    for python_level, syslog_level in PYTHON_TO_SYSLOG_LEVELS:
        if levelno >= python_level:
            return syslog_level
    return "debug"


def record_metadata(record: logging.LogRecord) -> Optional[Dict[str, Any]]:
    """Collect the attributes passed via ``extra=``, or None when there are none."""
    meta = {
        key: value
        for key, value in vars(record).items()
        if key not in _RESERVED_RECORD_ATTRS
    }
    return meta or None


class SyslogForwardingHandler(logging.Handler):
    """
    Logging handler forwarding records through a :class:`SyslogForwarder`.

    Inside a running event loop the delivery is scheduled as a task and
    failures are reported through :meth:`handleError` when it completes.
    Without a running loop the record is delivered before ``emit`` returns.
    """

    def __init__(
        self,
        forwarder: Optional[SyslogForwarder] = None,
        level: int = logging.NOTSET,
        **options: Any,
    ):
        super().__init__(level)
        self.forwarder = forwarder or SyslogForwarder(**options)
        # Strong references to in-flight deliveries scheduled on a running loop
        self._pending: Set[asyncio.Task] = set()

    def emit(self, record: logging.LogRecord) -> None:
        # The forwarder's own loggers would otherwise feed back into it
        if record.name.startswith(PACKAGE_LOGGER_PREFIX):
            return

        try:
            msg = self.format(record)
            level = syslog_level_for(record.levelno)
            meta = record_metadata(record)

            try:
                asyncio.get_running_loop()
            except RuntimeError:
                asyncio.run(self.forwarder.log(level, msg, meta))
                return

            def on_complete(error: Optional[BaseException], delivered: Any) -> None:
                if error is None:
                    return
                # handleError reports the exception currently being handled
                try:
                    raise error
                except Exception:
                    self.handleError(record)

            task = self.forwarder.log_with_callback(level, msg, meta, on_complete)
            self._pending.add(task)
            task.add_done_callback(self._pending.discard)
        except Exception:
            self.handleError(record)
