"""Tests for the AES pack codec.

No network and no Home Assistant: plain dictionaries in, base64 out.
"""
from __future__ import annotations

import base64

import pytest
from Crypto.Cipher import AES

from custom_components.gree_heatercooler.gree.crypto import (
    DEFAULT_KEY,
    AesEcbCodec,
    decrypt_pack,
    encrypt_pack,
)
from custom_components.gree_heatercooler.gree.exceptions import PackDecodeError

SESSION_KEY = "Qm9UbGlLZTJrZXlz"


class TestEncrypt:
    def test_default_key_is_16_bytes(self):
        assert len(DEFAULT_KEY.encode("utf-8")) == 16

    def test_ciphertext_is_whole_blocks(self):
        pack = encrypt_pack({"mac": "AABBCC", "t": "bind", "uid": 0})
        assert len(base64.b64decode(pack)) % 16 == 0

    def test_bad_key_length_is_rejected(self):
        with pytest.raises(ValueError):
            encrypt_pack({"t": "status"}, "short")

    def test_session_key_differs_from_default(self):
        payload = {"cols": ["Pow"], "mac": "AABBCC", "t": "status"}
        assert encrypt_pack(payload) != encrypt_pack(payload, SESSION_KEY)


class TestDecrypt:
    def test_symmetric_with_session_key(self):
        payload = {"opt": ["TemUn", "SetTem"], "p": [0, 22], "t": "cmd"}
        assert decrypt_pack(encrypt_pack(payload, SESSION_KEY), SESSION_KEY) == payload

    def test_accepts_envelope_dict(self):
        envelope = {"cid": "AABBCC", "t": "pack", "pack": encrypt_pack({"t": "dev"})}
        assert decrypt_pack(envelope) == {"t": "dev"}

    def test_wrong_key_fails(self):
        pack = encrypt_pack({"t": "bindok", "key": SESSION_KEY})
        with pytest.raises(PackDecodeError):
            decrypt_pack(pack, SESSION_KEY)

    def test_trailing_bytes_after_object_are_cut(self):
        """Some firmwares pad with 0x0f regardless of length."""
        plain = b'{"t":"dev"}' + b"\x0f" * 5
        cipher = AES.new(DEFAULT_KEY.encode("utf-8"), AES.MODE_ECB)
        pack = base64.b64encode(cipher.encrypt(plain)).decode("ascii")
        assert decrypt_pack(pack) == {"t": "dev"}

    def test_missing_pack(self):
        with pytest.raises(PackDecodeError):
            decrypt_pack({"cid": "AABBCC", "t": "pack"})

    def test_invalid_base64(self):
        with pytest.raises(PackDecodeError):
            decrypt_pack("not base64!!")

    def test_partial_block(self):
        with pytest.raises(PackDecodeError):
            decrypt_pack(base64.b64encode(b"12345").decode("ascii"))

    def test_non_object_payload(self):
        with pytest.raises(PackDecodeError):
            decrypt_pack(encrypt_pack([1, 2, 3]))  # type: ignore[arg-type]


class TestCodec:
    def test_codec_uses_module_functions(self):
        codec = AesEcbCodec()
        payload = {"t": "status", "mac": "AABBCC", "cols": ["Pow"]}
        assert codec.encrypt(payload, SESSION_KEY) == encrypt_pack(payload, SESSION_KEY)
        assert codec.decrypt(codec.encrypt(payload)) == payload
