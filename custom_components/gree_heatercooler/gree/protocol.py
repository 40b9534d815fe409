"""Gree UDP wire format: envelopes, payload builders and the inbound parser.

Outbound envelope (one JSON object per datagram)::

    {"cid": "app", "i": 0, "t": "pack", "uid": 0, "pack": "<base64>"}

``i`` is ``1`` only for the bind request.  The unit answers with an envelope
whose ``cid`` is its MAC-like identifier; the semantic message type is the
``t`` field of the *decrypted* pack, never the outer ``t``.

Inner message types:

======== ========= ==========================================================
``t``    direction meaning
======== ========= ==========================================================
scan     →         discovery probe (sent in clear, no envelope)
dev      ←         handshake response (name, mac …)
bind     →         bind request, generic key
bindok   ←         bind confirmation carrying the session ``key``
status   →         status request, ``cols`` = codes to report
dat      ←         status report, parallel ``cols`` / ``dat`` arrays
cmd      →         command, parallel ``opt`` / ``p`` arrays
res      ←         command result, parallel ``opt`` / ``val`` arrays
======== ========= ==========================================================
"""

from __future__ import annotations

import json
import logging
from dataclasses import dataclass, field
from enum import Enum
from typing import Any

from .crypto import AesEcbCodec, PackCodec
from .exceptions import PackDecodeError

_LOGGER = logging.getLogger(__name__)

_DEFAULT_CODEC = AesEcbCodec()


# ═════════════════════════════════════════════════════════════════════════════
# Outbound
# ═════════════════════════════════════════════════════════════════════════════

def scan_message() -> bytes:
    """Discovery probe.  This is the only datagram sent without encryption."""
    return json.dumps({"t": "scan"}, separators=(",", ":")).encode("utf-8")


def build_envelope(pack: str, i: int = 0) -> bytes:
    """Wrap an encrypted pack into the outer envelope and serialise it.

    Args:
        pack: Output of :func:`~.crypto.encrypt_pack`.
        i:    ``1`` for the bind request, ``0`` otherwise.

    Returns:
        UTF-8 JSON datagram.
    """
    envelope = {"cid": "app", "i": i, "t": "pack", "uid": 0, "pack": pack}
    return json.dumps(envelope, separators=(",", ":")).encode("utf-8")


def bind_payload(mac: str) -> dict[str, Any]:
    return {"mac": mac, "t": "bind", "uid": 0}


def status_payload(mac: str, cols: list[str]) -> dict[str, Any]:
    return {"cols": list(cols), "mac": mac, "t": "status"}


def command_payload(opt: list[str], p: list[int]) -> dict[str, Any]:
    """Build a ``cmd`` message.

    Raises:
        ValueError: If *opt* and *p* differ in length.
    """
    if len(opt) != len(p):
        raise ValueError(
            f"Command codes and values must match 1:1 ({len(opt)} != {len(p)})"
        )
    return {"opt": list(opt), "p": list(p), "t": "cmd"}


# ═════════════════════════════════════════════════════════════════════════════
# Inbound
# ═════════════════════════════════════════════════════════════════════════════

class PackType(str, Enum):
    """Category of an inbound datagram after decryption."""
    DEV = "dev"
    BINDOK = "bindok"
    DAT = "dat"
    RES = "res"
    UNKNOWN = "unknown"
    ERROR = "error"


@dataclass
class ParsedPack:
    """Decoded inbound datagram.

    Attributes:
        type:    Category of the message.
        cid:     Sender identifier from the outer envelope (``None`` if absent).
        payload: Decrypted inner message (``None`` for ERROR).
        name:    Device name (DEV only).
        key:     Session key (BINDOK only).
        values:  Code → value mapping zipped from the parallel arrays
                 (DAT and RES only).
        reason:  Human-readable failure description (ERROR only).
    """
    type: PackType
    cid: str | None = None
    payload: dict[str, Any] | None = None
    name: str | None = None
    key: str | None = None
    values: dict[str, int] = field(default_factory=dict)
    reason: str | None = None


def _zip_columns(payload: dict[str, Any], codes_field: str, values_field: str) -> dict[str, int]:
    codes = payload.get(codes_field)
    values = payload.get(values_field)
    if not isinstance(codes, list) or not isinstance(values, list):
        raise PackDecodeError(f"'{codes_field}'/'{values_field}' must be lists")
    if len(codes) != len(values):
        raise PackDecodeError(
            f"'{codes_field}' and '{values_field}' differ in length "
            f"({len(codes)} != {len(values)})"
        )
    return dict(zip(codes, values))


def parse_datagram(
    data: bytes,
    key: str | bytes | None = None,
    codec: PackCodec | None = None,
) -> ParsedPack:
    """Decode an inbound datagram into a :class:`ParsedPack`.

    Never raises: every failure is reported as ``PackType.ERROR`` with a
    ``reason``, so the caller can turn it into an error notification.

    Args:
        data:  Raw datagram bytes.
        key:   Session key, or ``None`` to decrypt with the generic key.
        codec: Pack codec (defaults to AES/ECB).

    Returns:
        The parsed message.
    """
    codec = codec or _DEFAULT_CODEC

    try:
        envelope = json.loads(data.decode("utf-8"))
    except (UnicodeDecodeError, ValueError) as exc:
        return ParsedPack(type=PackType.ERROR, reason=f"Datagram is not JSON: {exc}")
    if not isinstance(envelope, dict):
        return ParsedPack(type=PackType.ERROR, reason="Datagram is not a JSON object")

    cid = envelope.get("cid")
    try:
        payload = codec.decrypt(envelope, key)
    except PackDecodeError as exc:
        return ParsedPack(type=PackType.ERROR, cid=cid, reason=str(exc))

    kind = payload.get("t")
    try:
        if kind == PackType.DEV.value:
            device_id = cid or payload.get("mac")
            if not isinstance(device_id, str) or not device_id:
                raise PackDecodeError("dev carries neither cid nor mac")
            return ParsedPack(
                type=PackType.DEV,
                cid=device_id,
                payload=payload,
                name=payload.get("name"),
            )
        if kind == PackType.BINDOK.value:
            session_key = payload.get("key")
            if not isinstance(session_key, str) or not session_key:
                raise PackDecodeError("bindok carries no key")
            return ParsedPack(
                type=PackType.BINDOK, cid=cid or payload.get("mac"),
                payload=payload, key=session_key,
            )
        if kind == PackType.DAT.value:
            return ParsedPack(
                type=PackType.DAT, cid=cid, payload=payload,
                values=_zip_columns(payload, "cols", "dat"),
            )
        if kind == PackType.RES.value:
            return ParsedPack(
                type=PackType.RES, cid=cid, payload=payload,
                values=_zip_columns(payload, "opt", "val"),
            )
    except PackDecodeError as exc:
        return ParsedPack(type=PackType.ERROR, cid=cid, payload=payload, reason=str(exc))

    _LOGGER.debug("Unhandled pack type %r: %s", kind, payload)
    return ParsedPack(type=PackType.UNKNOWN, cid=cid, payload=payload)
