"""Shared fixtures: a fake UDP endpoint and unit-side datagram builders.

Nothing here opens a real socket.  ``create_datagram_endpoint`` is replaced on
the event loop class, so :class:`GreeTransport` runs unchanged on top of a
recording transport.
"""
from __future__ import annotations

import asyncio
import json
from typing import Any

import pytest

from custom_components.gree_heatercooler.gree.crypto import decrypt_pack, encrypt_pack

UNIT_HOST = "192.168.1.50"
UNIT_PORT = 7000
UNIT_ADDR = (UNIT_HOST, UNIT_PORT)
UNIT_MAC = "AABBCC"
SESSION_KEY = "Qm9UbGlLZTJrZXlz"


class FakeDatagramTransport:
    """Records every ``sendto`` instead of touching the network."""

    def __init__(self) -> None:
        self.sent: list[tuple[bytes, tuple[str, int]]] = []
        self.closed = False
        self.send_error: OSError | None = None

    def sendto(self, data: bytes, addr: tuple[str, int]) -> None:
        if self.send_error is not None:
            raise self.send_error
        self.sent.append((data, addr))

    def close(self) -> None:
        self.closed = True


class FakeEndpoint:
    """Stands in for ``loop.create_datagram_endpoint``.

    Set :attr:`fail` to make the next N bind attempts raise ``OSError``.
    """

    def __init__(self) -> None:
        self.fail = 0
        self.local_addrs: list[Any] = []
        self.transports: list[FakeDatagramTransport] = []
        self.protocols: list[asyncio.DatagramProtocol] = []

    @property
    def transport(self) -> FakeDatagramTransport:
        return self.transports[-1]

    @property
    def protocol(self) -> asyncio.DatagramProtocol:
        return self.protocols[-1]

    @property
    def sent(self) -> list[tuple[bytes, tuple[str, int]]]:
        return [item for transport in self.transports for item in transport.sent]

    def deliver(self, data: bytes, addr: tuple[str, int] = UNIT_ADDR) -> None:
        self.protocol.datagram_received(data, addr)

    async def create(self, protocol_factory, local_addr=None, **kwargs):
        self.local_addrs.append(local_addr)
        if self.fail:
            self.fail -= 1
            raise OSError(98, "Address already in use")
        transport = FakeDatagramTransport()
        protocol = protocol_factory()
        protocol.connection_made(transport)
        self.transports.append(transport)
        self.protocols.append(protocol)
        return transport, protocol


@pytest.fixture
def endpoint(monkeypatch) -> FakeEndpoint:
    fake = FakeEndpoint()

    async def _create(loop, protocol_factory, local_addr=None, **kwargs):
        return await fake.create(protocol_factory, local_addr=local_addr, **kwargs)

    monkeypatch.setattr(asyncio.BaseEventLoop, "create_datagram_endpoint", _create)
    return fake


def unit_datagram(payload: dict[str, Any], key: str | None = None, cid: str = UNIT_MAC) -> bytes:
    """Envelope as a unit would send it, pack encrypted with *key*."""
    envelope = {"cid": cid, "i": 0, "t": "pack", "uid": 0, "pack": encrypt_pack(payload, key)}
    return json.dumps(envelope).encode("utf-8")


def open_envelope(data: bytes, key: str | None = None) -> tuple[dict[str, Any], dict[str, Any]]:
    """Return ``(envelope, decrypted pack)`` for an outbound datagram."""
    envelope = json.loads(data.decode("utf-8"))
    return envelope, decrypt_pack(envelope, key)


@pytest.fixture
def make_datagram():
    return unit_datagram


@pytest.fixture
def open_sent():
    return open_envelope
