# -*- coding: utf-8 -*-

# SPDX-License-Identifier: BSL-1.1
# Copyright (c) 2025 Ziggiz Inc.
#
# This file is part of the ziggiz-courier-core-data-processing and is licensed under the
# Business Source License 1.1. You may not use this file except in
# compliance with the License. You may obtain a copy of the License at:
# https://github.com/ziggiz-courier/ziggiz-courier-core-data-processing/blob/main/LICENSE
# Forwarder dispatching log events to a remote syslog collector

# Standard library imports
import asyncio
import logging

from typing import Any, Callable, List, Optional

# Local/package imports
from ziggiz_courier_dropoff_syslog.config import Config, build_config
from ziggiz_courier_dropoff_syslog.errors import ConfigurationError
from ziggiz_courier_dropoff_syslog.protocol.encoder import (
    encode_message,
    resolve_severity,
)
from ziggiz_courier_dropoff_syslog.protocol.tcp import send_tcp
from ziggiz_courier_dropoff_syslog.protocol.udp import send_udp

CompletionCallback = Callable[[Optional[BaseException], Optional[bool]], Any]
LoggedListener = Callable[["SyslogForwarder", bytes], Any]


class SyslogForwarder:
    """
    Forwards log events to a remote syslog collector over UDP or TCP.

    Every call to :meth:`log` encodes one payload and opens its own socket or
    connection; nothing is pooled or queued, so concurrent calls never share
    state beyond the frozen configuration. Callers issuing messages faster
    than the network completes them accumulate in-flight sockets.

    Successful deliveries are announced on two independent channels: the
    caller's own result (return value or completion callback) and the
    "logged" listeners. Listeners must not assume any ordering relative to
    the completion callback.
    """

    name = "syslog"

    def __init__(self, config: Optional[Config] = None, **options: Any):
        """
        Initialize the forwarder.

        Args:
            config: A validated configuration object
            **options: Configuration options, used when no config is given

        Raises:
            ConfigurationError: If the options do not form a valid configuration,
                or if both a config and options are given
        """
        if config is not None and options:
            raise ConfigurationError(
                f"Pass either a Config or options, not both (got options: "
                f"{sorted(options)})"
            )
        self.logger = logging.getLogger("ziggiz_courier_dropoff_syslog.forwarder")
        self.config = config if config is not None else build_config(**options)
        self._logged_listeners: List[LoggedListener] = []

    @property
    def silent(self) -> bool:
        return self.config.silent

    def add_logged_listener(self, listener: LoggedListener) -> None:
        """Subscribe to successful deliveries."""
        self._logged_listeners.append(listener)

    def remove_logged_listener(self, listener: LoggedListener) -> None:
        """Unsubscribe a listener; unknown listeners are ignored."""
        if listener in self._logged_listeners:
            self._logged_listeners.remove(listener)

    def build_payload(self, level: str, msg: Any, meta: Any = None) -> bytes:
        """
        Encode one log event into a syslog payload.

        Level names missing from the configured level table are sent with
        the debug severity.
        """
        config = self.config
        severity = resolve_severity(level, config.levels)
        return encode_message(
            facility=config.facility,
            severity=severity,
            timestamp=config.date_provider(),
            hostname=config.hostname,
            tag=config.tag,
            body=config.message_provider(level, msg, meta),
        )

    async def log(self, level: str, msg: Any, meta: Any = None) -> bool:
        """
        Deliver one log event.

        Args:
            level: Syslog level name (e.g. "info")
            msg: The message
            meta: Optional metadata rendered into the message body

        Returns:
            True once the message was delivered (or immediately in silent mode)

        Raises:
            TransportError: If the socket or connection fails
            DeliveryTimeoutError: If a TCP delivery does not finish in time
        """
        if self.config.silent:
            return True

        config = self.config
        payload = self.build_payload(level, msg, meta)

        if config.protocol == "tcp":
            await send_tcp(payload, config.host, config.port, config.timeout)
        else:
            await send_udp(payload, config.host, config.port)

        self.logger.debug(
            "Log event forwarded",
            extra={
                "net.transport": f"ip_{config.protocol}",
                "net.peer.name": config.host,
                "net.peer.port": config.port,
                "level": level,
            },
        )
        self._emit_logged(payload)
        return True

    def log_with_callback(
        self,
        level: str,
        msg: Any,
        meta: Any,
        callback: CompletionCallback,
    ) -> "asyncio.Task[Optional[bool]]":
        """
        Deliver one log event and report the outcome through a callback.

        The callback is invoked exactly once, with ``(None, True)`` on
        success or ``(error, None)`` on failure. A callback is mandatory: an
        error nobody asked to be told about must never be dropped.

        Must be called with a running event loop.

        Returns:
            The task driving the delivery

        Raises:
            TypeError: If no callable callback is given
        """
        if not callable(callback):
            raise TypeError("log_with_callback() requires a completion callback")

        async def deliver() -> Optional[bool]:
            try:
                delivered = await self.log(level, msg, meta)
            except Exception as e:
                callback(e, None)
                return None
            callback(None, delivered)
            return delivered

        return asyncio.get_running_loop().create_task(deliver())

    def _emit_logged(self, payload: bytes) -> None:
        for listener in list(self._logged_listeners):
            try:
                listener(self, payload)
            except Exception:
                self.logger.exception("Error in logged listener")
