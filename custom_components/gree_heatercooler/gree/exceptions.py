"""Exceptions raised by the Gree protocol layer."""

from __future__ import annotations


class GreeError(Exception):
    """Base class for Gree protocol errors."""


class PackDecodeError(GreeError):
    """A ``pack`` could not be decrypted or parsed into a JSON object."""
