"""Gree HeaterCooler – local UDP control for Gree-protocol air conditioners.

Architecture overview
---------------------
``gree/``
    Pure-Python protocol layer: vocabulary, AES ``pack`` codec, UDP transport
    and the binding/polling session (:class:`~gree.device.GreeDevice`).  Has
    zero Home Assistant dependencies.

``mapping.py``
    Raw Gree values ↔ climate-entity modes, also HA-free.

``climate.py``
    :class:`homeassistant.components.climate.ClimateEntity` driving one unit.

``config_flow.py``
    Manual setup by IP address plus an options flow for polling and the
    temperature-sensor offset.

Home Assistant types are only imported for type checking here so that the
``gree`` sub-package stays importable without Home Assistant installed.
"""

from __future__ import annotations

import logging
from typing import TYPE_CHECKING

from .const import (
    CONF_HOST,
    CONF_PORT,
    CONF_UPDATE_INTERVAL,
    DEFAULT_PORT,
    DEFAULT_UPDATE_INTERVAL,
    DOMAIN,
    PLATFORMS,
)
from .gree.device import GreeDevice

if TYPE_CHECKING:
    from homeassistant.config_entries import ConfigEntry
    from homeassistant.core import HomeAssistant

_LOGGER = logging.getLogger(__name__)


def _entry_option(entry: ConfigEntry, key: str, default):
    # entry.options takes precedence over entry.data
    return entry.options.get(key, entry.data.get(key, default))


async def async_setup_entry(hass: HomeAssistant, entry: ConfigEntry) -> bool:
    """Set up a Gree unit from a config entry.

    Creates the :class:`~gree.device.GreeDevice` session, starts discovery
    (non-blocking; a busy local port is retried in the background) and
    forwards setup to the climate platform.
    """
    host: str = entry.data[CONF_HOST]
    device = GreeDevice(
        host,
        discovery_port=int(_entry_option(entry, CONF_PORT, DEFAULT_PORT)),
        update_interval=float(
            _entry_option(entry, CONF_UPDATE_INTERVAL, DEFAULT_UPDATE_INTERVAL)
        ),
    )
    _LOGGER.debug("Setting up Gree unit: host=%s", host)

    hass.data.setdefault(DOMAIN, {})[entry.entry_id] = device
    await device.async_start()

    await hass.config_entries.async_forward_entry_setups(entry, PLATFORMS)
    entry.async_on_unload(entry.add_update_listener(_async_update_listener))
    return True


async def _async_update_listener(hass: HomeAssistant, entry: ConfigEntry) -> None:
    """Reload the entry so new options reach a fresh session."""
    await hass.config_entries.async_reload(entry.entry_id)


async def async_unload_entry(hass: HomeAssistant, entry: ConfigEntry) -> bool:
    """Unload a config entry and close the unit's socket."""
    if unload_ok := await hass.config_entries.async_unload_platforms(entry, PLATFORMS):
        device: GreeDevice = hass.data[DOMAIN].pop(entry.entry_id)
        await device.async_stop()
        _LOGGER.debug("Gree entry unloaded: %s", entry.data[CONF_HOST])

    return unload_ok
