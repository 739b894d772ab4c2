# -*- coding: utf-8 -*-

# SPDX-License-Identifier: BSL-1.1
# Copyright (c) 2025 Ziggiz Inc.
#
# This file is part of the ziggiz-courier-core-data-processing and is licensed under the
# Business Source License 1.1. You may not use this file except in
# compliance with the License. You may obtain a copy of the License at:
# https://github.com/ziggiz-courier/ziggiz-courier-core-data-processing/blob/main/LICENSE
# UDP delivery of syslog messages


# Standard library imports
import asyncio
import logging
import socket

from typing import Any, List, Optional, Tuple

# Local/package imports
from ziggiz_courier_dropoff_syslog.errors import TransportError
from ziggiz_courier_dropoff_syslog.telemetry import get_tracer

LOGGER_NAME = "ziggiz_courier_dropoff_syslog.protocol.udp"


class SyslogUDPSenderProtocol(asyncio.DatagramProtocol):
    """
    Datagram protocol owning a single outgoing syslog datagram.

    One instance is created per message. The socket is unconnected, so ICMP
    port-unreachable replies are never reported back: datagram delivery is
    unconfirmed and a send to a closed port still counts as a success.
    """

    def __init__(self, closed: asyncio.Future):
        """
        Initialize the protocol.

        Args:
            closed: Future resolved once the transport has been released
        """
        self.logger = logging.getLogger(LOGGER_NAME)
        self.transport: Optional[asyncio.DatagramTransport] = None
        self.error: Optional[Exception] = None
        self.closed = closed

    def connection_made(self, transport: asyncio.BaseTransport) -> None:
        self.transport = transport  # type: ignore[assignment]
        self.logger.debug("UDP sender socket opened", extra={"net.transport": "ip_udp"})

    def error_received(self, exc: Exception) -> None:
        """
        Called when the send operation raises an OSError.

        Only the first error is kept; it decides the delivery outcome.
        """
        if self.error is None:
            self.error = exc
        self.logger.warning(
            "Error sending UDP datagram",
            extra={"net.transport": "ip_udp", "error": str(exc)},
        )

    def connection_lost(self, exc: Optional[Exception]) -> None:
        if exc is not None and self.error is None:
            self.error = exc
        self.logger.debug("UDP sender socket closed", extra={"net.transport": "ip_udp"})
        if not self.closed.done():
            self.closed.set_result(None)


def select_address(addr_info: List[Tuple[Any, ...]]) -> Tuple[int, Tuple[Any, ...]]:
    """
    Pick the destination from getaddrinfo results, preferring IPv4.

    Hosts resolving to both families (e.g. "localhost" as ::1 and 127.0.0.1)
    are reached over IPv4; IPv6 is used only when no IPv4 address exists.
    """
    for family, _, _, _, sockaddr in addr_info:
        if family == socket.AF_INET:
            return family, sockaddr
    family, _, _, _, sockaddr = addr_info[0]
    return family, sockaddr


async def send_udp(
    payload: bytes,
    host: str,
    port: int,
    loop: Optional[asyncio.AbstractEventLoop] = None,
) -> bool:
    """
    Send a syslog payload as a single UDP datagram.

    A fresh socket is opened for every call and closed once the datagram has
    been handed to the kernel. No timeout is applied.

    Args:
        payload: The encoded syslog message (no trailing newline is added)
        host: Destination host name or address
        port: Destination port

    Returns:
        True once the datagram was sent

    Raises:
        TransportError: If the host cannot be resolved or the send fails
    """
    loop = loop or asyncio.get_running_loop()
    logger = logging.getLogger(LOGGER_NAME)
    tracer = get_tracer()
    log_extra = {
        "net.transport": "ip_udp",
        "net.peer.name": host,
        "net.peer.port": port,
    }

    with tracer.start_as_current_span(
        "syslog.udp.send",
        attributes={**log_extra, "message.length": len(payload)},
    ):
        try:
            addr_info = await loop.getaddrinfo(host, port, type=socket.SOCK_DGRAM)
            family, sockaddr = select_address(addr_info)
            closed = loop.create_future()
            transport, protocol = await loop.create_datagram_endpoint(
                lambda: SyslogUDPSenderProtocol(closed), family=family
            )
        except OSError as e:
            logger.error(f"Failed to open UDP socket to {host}:{port}: {e}", extra=log_extra)
            raise TransportError(
                f"Failed to open UDP socket to {host}:{port}: {e}",
                protocol="udp",
                host=host,
                port=port,
            ) from e

        try:
            transport.sendto(payload, sockaddr)
        finally:
            # close() flushes anything still buffered before releasing the socket
            transport.close()
        await closed

        if protocol.error is not None:
            raise TransportError(
                f"Failed to send UDP datagram to {host}:{port}: {protocol.error}",
                protocol="udp",
                host=host,
                port=port,
            ) from protocol.error

    logger.debug("Sent UDP datagram", extra={**log_extra, "bytes_sent": len(payload)})
    return True
