# -*- coding: utf-8 -*-
# SPDX-License-Identifier: BSL-1.1
# Copyright (c) 2025 Ziggiz Inc.
#
# This file is part of the ziggiz-courier-core-data-processing and is licensed under the
# Business Source License 1.1. You may not use this file except in
# compliance with the License. You may obtain a copy of the License at:
# https://github.com/ziggiz-courier/ziggiz-courier-core-data-processing/blob/main/LICENSE
# TCP delivery of syslog messages with a bounded connect/write window
# Standard library imports
import asyncio
import logging

from typing import Optional

# Local/package imports
from ziggiz_courier_dropoff_syslog.errors import DeliveryTimeoutError, TransportError
from ziggiz_courier_dropoff_syslog.telemetry import get_tracer

LOGGER_NAME = "ziggiz_courier_dropoff_syslog.protocol.tcp"
END_OF_MSG_MARKER = b"\n"


class SyslogTCPSenderProtocol(asyncio.Protocol):
    """
    Stream protocol delivering one newline-terminated syslog message.

    The protocol owns the delivery outcome future. The first terminal event
    (connected and written, connection error, or timeout) resolves it; every
    later event is ignored.
    """

    def __init__(
        self,
        payload: bytes,
        outcome: asyncio.Future,
        host: str = "unknown",
        port: int = 0,
    ):
        self.logger = logging.getLogger(LOGGER_NAME)
        self.transport: Optional[asyncio.Transport] = None
        self.payload = payload
        self.outcome = outcome
        self.host = host
        self.port = port

    @property
    def log_extra(self) -> dict:
        return {
            "net.transport": "ip_tcp",
            "net.peer.name": self.host,
            "net.peer.port": self.port,
        }

    def connection_made(self, transport: asyncio.BaseTransport) -> None:
        self.transport = transport  # type: ignore[assignment]
        if self.outcome.done():
            # The timeout fired while the connection was being established
            transport.abort()  # type: ignore[attr-defined]
            return

        self.transport.write(self.payload + END_OF_MSG_MARKER)
        if self.transport.can_write_eof():
            self.transport.write_eof()
        self.transport.close()
        self.outcome.set_result(True)
        self.logger.debug(
            "TCP message written",
            extra={**self.log_extra, "bytes_sent": len(self.payload) + 1},
        )

    def data_received(self, data: bytes) -> None:
        self.logger.debug(
            "Ignoring data sent by syslog collector",
            extra={**self.log_extra, "bytes_received": len(data)},
        )

    def connection_lost(self, exc: Optional[Exception]) -> None:
        if exc is None:
            self.logger.debug("TCP connection closed", extra=self.log_extra)
            return
        if self.outcome.done():
            self.logger.debug(
                "Ignoring TCP error after delivery outcome",
                extra={**self.log_extra, "error": str(exc)},
            )
            return
        error = TransportError(
            f"TCP connection to {self.host}:{self.port} lost: {exc}",
            protocol="tcp",
            host=self.host,
            port=self.port,
        )
        error.__cause__ = exc
        self.fail(error)

    def connect_done(self, task: asyncio.Task) -> None:
        """Done callback for the connect task; reports connect failures."""
        if task.cancelled():
            return
        exc = task.exception()
        if exc is None:
            return
        error = TransportError(
            f"Failed to connect to {self.host}:{self.port}: {exc}",
            protocol="tcp",
            host=self.host,
            port=self.port,
        )
        error.__cause__ = exc
        self.fail(error)

    def timeout_expired(self, timeout: float) -> None:
        """Timer callback; aborts the delivery unless it already finished."""
        self.fail(
            DeliveryTimeoutError(
                f"TCP delivery to {self.host}:{self.port} timed out after {timeout}s",
                timeout=timeout,
                host=self.host,
                port=self.port,
            )
        )

    def fail(self, error: TransportError) -> None:
        """Resolve the outcome with an error and tear down the connection."""
        if self.outcome.done():
            self.logger.debug(
                "Ignoring TCP failure after delivery outcome",
                extra={**self.log_extra, "error": str(error)},
            )
            return
        self.outcome.set_exception(error)
        self.logger.warning(
            "TCP delivery failed", extra={**self.log_extra, "error": str(error)}
        )
        if self.transport is not None:
            self.transport.abort()


async def send_tcp(
    payload: bytes,
    host: str,
    port: int,
    timeout: float,
    loop: Optional[asyncio.AbstractEventLoop] = None,
) -> bool:
    """
    Deliver a syslog payload over a new TCP connection.

    The payload is written followed by a newline, then the write side is
    half-closed. Connect and write must finish within ``timeout`` seconds,
    counted from the start of the call.

    Args:
        payload: The encoded syslog message
        host: Destination host name or address
        port: Destination port
        timeout: Seconds allowed for connecting and writing

    Returns:
        True once the message was written

    Raises:
        TransportError: If the connection fails before the message is written
        DeliveryTimeoutError: If the timeout fires first
    """
    loop = loop or asyncio.get_running_loop()
    tracer = get_tracer()
    outcome = loop.create_future()
    protocol = SyslogTCPSenderProtocol(payload, outcome, host=host, port=port)

    with tracer.start_as_current_span(
        "syslog.tcp.send",
        attributes={**protocol.log_extra, "message.length": len(payload)},
    ):
        timer = loop.call_later(timeout, protocol.timeout_expired, timeout)
        connect_task = loop.create_task(
            loop.create_connection(lambda: protocol, host, port)
        )
        connect_task.add_done_callback(protocol.connect_done)
        try:
            return await outcome
        finally:
            timer.cancel()
            if not connect_task.done():
                connect_task.cancel()
