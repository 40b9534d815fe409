"""Gree ``pack`` encryption.

Every UDP datagram after the initial scan carries its semantic message as the
``pack`` field of a JSON envelope.  The pack is:

  * the inner JSON message, serialised compactly,
  * PKCS#7-padded and encrypted with AES-128/ECB,
  * base64-encoded into ASCII.

Before binding, both sides use the generic key shared by all units
(:data:`DEFAULT_KEY`).  The ``bindok`` answer hands out a per-device session
key that is used for all later traffic.

Units are not consistent about padding on the way back (some pad with
``0x0f`` regardless of length), so decryption cuts the plaintext after the
last closing brace instead of trusting the pad byte.
"""

from __future__ import annotations

import base64
import binascii
import json
import logging
from typing import Any, Protocol

from Crypto.Cipher import AES as _AES  # type: ignore[import-untyped]
from Crypto.Util.Padding import pad

from .exceptions import PackDecodeError

_LOGGER = logging.getLogger(__name__)

DEFAULT_KEY = "a3K8Bx%2r8Y7#xDh"
"""Generic 16-byte AES key used for discovery and binding traffic."""


def _key_bytes(key: str | bytes | None) -> bytes:
    if key is None:
        key = DEFAULT_KEY
    if isinstance(key, str):
        key = key.encode("utf-8")
    if len(key) != 16:
        raise ValueError(f"Key must be 16 bytes, got {len(key)}")
    return key


def encrypt_pack(payload: dict[str, Any], key: str | bytes | None = None) -> str:
    """Serialise *payload* and encrypt it into a base64 ``pack`` string.

    Args:
        payload: Inner message (``{"t": "bind", ...}``).
        key:     Session key, or ``None`` for :data:`DEFAULT_KEY`.

    Returns:
        ASCII ciphertext ready to be placed in the envelope's ``pack`` field.

    Raises:
        ValueError: If *key* is not exactly 16 bytes.
    """
    plain = json.dumps(payload, separators=(",", ":")).encode("utf-8")
    cipher = _AES.new(_key_bytes(key), _AES.MODE_ECB)
    encrypted = cipher.encrypt(pad(plain, _AES.block_size))
    return base64.b64encode(encrypted).decode("ascii")


def decrypt_pack(
    envelope: dict[str, Any] | str, key: str | bytes | None = None
) -> dict[str, Any]:
    """Decrypt an envelope's ``pack`` and parse it as a JSON object.

    Args:
        envelope: Outer envelope dict, or the bare ``pack`` string.
        key:      Session key, or ``None`` for :data:`DEFAULT_KEY`.

    Returns:
        The inner message.

    Raises:
        PackDecodeError: On a missing pack, bad key, bad base64, wrong key
            (garbage plaintext) or a payload that is not a JSON object.
    """
    pack = envelope.get("pack") if isinstance(envelope, dict) else envelope
    if not isinstance(pack, str):
        raise PackDecodeError("Envelope carries no pack")

    try:
        raw = base64.b64decode(pack, validate=True)
        cipher = _AES.new(_key_bytes(key), _AES.MODE_ECB)
        plain = cipher.decrypt(raw)
    except (binascii.Error, ValueError) as exc:
        raise PackDecodeError(f"Cannot decrypt pack: {exc}") from exc

    text = plain.decode("utf-8", errors="replace")
    end = text.rfind("}")
    if end < 0:
        raise PackDecodeError("Decrypted pack contains no JSON object")

    try:
        message = json.loads(text[: end + 1])
    except ValueError as exc:
        raise PackDecodeError(f"Decrypted pack is not valid JSON: {exc}") from exc

    if not isinstance(message, dict):
        raise PackDecodeError("Decrypted pack is not a JSON object")
    _LOGGER.debug("Decrypted pack: %s", message)
    return message


class PackCodec(Protocol):
    """Anything able to turn inner messages into ``pack`` strings and back."""

    def encrypt(self, payload: dict[str, Any], key: str | bytes | None = None) -> str:
        ...

    def decrypt(
        self, envelope: dict[str, Any] | str, key: str | bytes | None = None
    ) -> dict[str, Any]:
        ...


class AesEcbCodec:
    """Default codec: the AES-128/ECB scheme implemented above."""

    def encrypt(self, payload: dict[str, Any], key: str | bytes | None = None) -> str:
        return encrypt_pack(payload, key)

    def decrypt(
        self, envelope: dict[str, Any] | str, key: str | bytes | None = None
    ) -> dict[str, Any]:
        return decrypt_pack(envelope, key)
