"""Config flow for the Gree HeaterCooler integration.

Units are added manually by IPv4 address: the local UDP port used to talk to a
unit is derived from the last octet of that address, so a hostname would not
do.  The address doubles as the unique id of the entry.
"""

from __future__ import annotations

import ipaddress
import logging
from typing import Any

import voluptuous as vol

from homeassistant.config_entries import ConfigEntry, ConfigFlow, OptionsFlow
from homeassistant.core import callback
from homeassistant.data_entry_flow import FlowResult

from .const import (
    CONF_HOST,
    CONF_MODEL,
    CONF_NAME,
    CONF_PORT,
    CONF_TEMP_SENSOR_SHIFT,
    CONF_UPDATE_INTERVAL,
    CONF_USE_TARGET_TEMP_AS_CURRENT,
    DEFAULT_MODEL,
    DEFAULT_NAME,
    DEFAULT_PORT,
    DEFAULT_TEMP_SENSOR_SHIFT,
    DEFAULT_UPDATE_INTERVAL,
    DOMAIN,
)

_LOGGER = logging.getLogger(__name__)


def _validate_host(value: str) -> str:
    """Return the normalised IPv4 address.

    Raises:
        vol.Invalid: If *value* is not a dotted IPv4 address.
    """
    try:
        return str(ipaddress.IPv4Address(value.strip()))
    except ValueError as exc:
        raise vol.Invalid("Invalid IPv4 address") from exc


def _options_schema(defaults: dict[str, Any]) -> vol.Schema:
    return vol.Schema(
        {
            vol.Required(
                CONF_UPDATE_INTERVAL,
                default=defaults.get(CONF_UPDATE_INTERVAL, DEFAULT_UPDATE_INTERVAL),
            ): vol.All(vol.Coerce(int), vol.Range(min=1, max=3600)),
            vol.Required(
                CONF_TEMP_SENSOR_SHIFT,
                default=defaults.get(CONF_TEMP_SENSOR_SHIFT, DEFAULT_TEMP_SENSOR_SHIFT),
            ): vol.Coerce(int),
            vol.Required(
                CONF_USE_TARGET_TEMP_AS_CURRENT,
                default=defaults.get(CONF_USE_TARGET_TEMP_AS_CURRENT, False),
            ): bool,
        }
    )


class GreeHeaterCoolerConfigFlow(ConfigFlow, domain=DOMAIN):
    """Handle creation of a config entry for one unit."""

    VERSION = 1

    @staticmethod
    @callback
    def async_get_options_flow(config_entry: ConfigEntry) -> GreeHeaterCoolerOptionsFlow:
        return GreeHeaterCoolerOptionsFlow(config_entry)

    async def async_step_user(
        self, user_input: dict[str, Any] | None = None
    ) -> FlowResult:
        """Ask for the unit's address, display name and polling options."""
        errors: dict[str, str] = {}

        if user_input is not None:
            try:
                host = _validate_host(user_input[CONF_HOST])
            except vol.Invalid:
                errors[CONF_HOST] = "invalid_host"
            else:
                await self.async_set_unique_id(host)
                self._abort_if_unique_id_configured()
                return self.async_create_entry(
                    title=user_input[CONF_NAME],
                    data={**user_input, CONF_HOST: host},
                )

        schema = vol.Schema(
            {
                vol.Required(CONF_HOST): str,
                vol.Optional(CONF_NAME, default=DEFAULT_NAME): str,
                vol.Optional(CONF_MODEL, default=DEFAULT_MODEL): str,
                vol.Required(CONF_PORT, default=DEFAULT_PORT): vol.All(
                    vol.Coerce(int), vol.Range(min=1, max=65535)
                ),
            }
        ).extend(_options_schema({}).schema)

        return self.async_show_form(step_id="user", data_schema=schema, errors=errors)


class GreeHeaterCoolerOptionsFlow(OptionsFlow):
    """Change polling interval and temperature display options."""

    def __init__(self, config_entry: ConfigEntry) -> None:
        self._config_entry = config_entry

    async def async_step_init(
        self, user_input: dict[str, Any] | None = None
    ) -> FlowResult:
        if user_input is not None:
            return self.async_create_entry(title="", data=user_input)

        current = {**self._config_entry.data, **self._config_entry.options}
        return self.async_show_form(step_id="init", data_schema=_options_schema(current))
