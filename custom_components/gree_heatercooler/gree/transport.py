"""UDP transport for a single Gree unit.

The local socket is bound to ``8000 + <last octet of the unit's IPv4>`` so
that several engine instances on one host each own a distinct port without
coordinating.  Only datagrams coming from the configured unit address are
passed upwards; everything else arriving on the port is dropped.
"""

from __future__ import annotations

import asyncio
import logging
from collections.abc import Callable

from .protocol import scan_message

_LOGGER = logging.getLogger(__name__)

LOCAL_PORT_BASE = 8000
BIND_RETRY_DELAY = 5.0
"""Seconds to wait before retrying a failed socket bind."""


def local_port_for(host: str) -> int:
    """Return the deterministic local UDP port used for *host*.

    Raises:
        ValueError: If *host* is not a dotted IPv4 address.
    """
    last_octet = int(host.rsplit(".", 1)[-1])
    if not 0 <= last_octet <= 255:
        raise ValueError(f"Invalid IPv4 address: {host}")
    return LOCAL_PORT_BASE + last_octet


class _GreeDatagramProtocol(asyncio.DatagramProtocol):
    def __init__(self, outer: GreeTransport) -> None:
        self._outer = outer

    def datagram_received(self, data: bytes, addr: tuple[str, int]) -> None:
        self._outer._handle_datagram(data, addr)

    def error_received(self, exc: Exception) -> None:
        self._outer._handle_error(exc)


class GreeTransport:
    """Owns the UDP socket used to talk to one unit.

    Args:
        host:            IPv4 address of the unit.
        discovery_port:  Port the unit listens on (7000 for Gree firmware).
        on_datagram:     Called with ``(data, (address, port))`` for every
                         datagram from *host*.
        on_error:        Called with the exception on socket errors.
        on_disconnected: Called when binding the local socket fails.
        on_started:      Called once the socket is bound and the scan sent,
                         including after a successful retry.
    """

    def __init__(
        self,
        host: str,
        discovery_port: int,
        on_datagram: Callable[[bytes, tuple[str, int]], None],
        on_error: Callable[[Exception], None],
        on_disconnected: Callable[[], None],
        on_started: Callable[[], None] | None = None,
    ) -> None:
        self.host = host
        self.discovery_port = discovery_port
        self.local_port = local_port_for(host)
        self._on_datagram = on_datagram
        self._on_error = on_error
        self._on_disconnected = on_disconnected
        self._on_started = on_started
        self._transport: asyncio.DatagramTransport | None = None
        self._retry_handle: asyncio.TimerHandle | None = None
        self._retry_task: asyncio.Task[None] | None = None
        self._stopped = False

    @property
    def is_open(self) -> bool:
        return self._transport is not None

    async def async_start(self) -> bool:
        """Bind the local socket and send the discovery scan.

        On failure a retry is scheduled after :data:`BIND_RETRY_DELAY`
        seconds; retries continue until a bind succeeds or :meth:`async_stop`
        is called.

        Returns:
            ``True`` if the socket is bound and the scan was sent.
        """
        self._stopped = False
        if self._transport is not None:
            return True

        loop = asyncio.get_running_loop()
        try:
            transport, _ = await loop.create_datagram_endpoint(
                lambda: _GreeDatagramProtocol(self),
                local_addr=("0.0.0.0", self.local_port),
            )
        except OSError as exc:
            _LOGGER.warning(
                "[%s] Cannot bind UDP port %d: %s – retrying in %.0f s",
                self.host, self.local_port, exc, BIND_RETRY_DELAY,
            )
            self._on_disconnected()
            self._schedule_retry()
            return False

        if self._stopped:
            transport.close()
            return False

        self._transport = transport
        _LOGGER.debug(
            "[%s] Connecting [using source port %d]", self.host, self.local_port
        )
        self.send(scan_message(), self.host, self.discovery_port)
        if self._on_started is not None:
            self._on_started()
        return True

    async def async_stop(self) -> None:
        """Cancel any pending bind retry and close the socket."""
        self._stopped = True
        if self._retry_handle is not None:
            self._retry_handle.cancel()
            self._retry_handle = None
        if self._retry_task is not None and not self._retry_task.done():
            self._retry_task.cancel()
        self._retry_task = None
        transport = self._transport
        self._transport = None
        if transport is not None:
            transport.close()
            _LOGGER.debug("[%s] UDP socket closed", self.host)

    def send(self, data: bytes, address: str, port: int) -> None:
        """Fire-and-forget datagram send.  Errors are reported, never raised."""
        if self._transport is None:
            self._handle_error(ConnectionError("UDP socket is not open"))
            return
        _LOGGER.debug("[%s] → %s:%d %s", self.host, address, port, data)
        try:
            self._transport.sendto(data, (address, port))
        except OSError as exc:
            self._handle_error(exc)

    # ── Internal ──────────────────────────────────────────────────────────────

    def _schedule_retry(self) -> None:
        if self._stopped:
            return
        loop = asyncio.get_running_loop()

        def _retry() -> None:
            self._retry_handle = None
            if not self._stopped:
                self._retry_task = loop.create_task(self.async_start())

        self._retry_handle = loop.call_later(BIND_RETRY_DELAY, _retry)

    def _handle_datagram(self, data: bytes, addr: tuple[str, int]) -> None:
        if addr[0] != self.host:
            _LOGGER.debug(
                "[%s] Ignoring datagram from %s:%d", self.host, addr[0], addr[1]
            )
            return
        _LOGGER.debug("[%s] ← %s:%d %s", self.host, addr[0], addr[1], data)
        self._on_datagram(data, addr)

    def _handle_error(self, exc: Exception) -> None:
        _LOGGER.warning("[%s] UDP socket error: %s", self.host, exc)
        self._on_error(exc)
