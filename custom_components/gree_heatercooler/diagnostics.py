"""Diagnostics support for the Gree HeaterCooler integration.

The unit's address and its session key are redacted so the snapshot can be
attached to public bug reports.
"""

from __future__ import annotations

from typing import Any

from homeassistant.components.diagnostics import async_redact_data
from homeassistant.config_entries import ConfigEntry
from homeassistant.core import HomeAssistant

from .const import CONF_HOST, DOMAIN
from .gree.device import GreeDevice

_TO_REDACT: set[str] = {CONF_HOST, "address", "key"}


async def async_get_config_entry_diagnostics(
    hass: HomeAssistant,
    entry: ConfigEntry,
) -> dict[str, Any]:
    """Return diagnostics for a Gree config entry."""
    device: GreeDevice = hass.data[DOMAIN][entry.entry_id]
    record = device.record

    return async_redact_data(
        {
            "entry_data": dict(entry.data),
            "entry_options": dict(entry.options),
            "session": {
                "state": device.state.value,
                "local_port": device.transport.local_port,
                "socket_open": device.transport.is_open,
                "last_error": device.last_error,
            },
            "device": {
                "id": record.id,
                "name": record.name,
                "address": record.address,
                "port": record.port,
                "bound": record.bound,
                "key": record.key,
                "props": dict(record.props),
            },
        },
        _TO_REDACT,
    )
