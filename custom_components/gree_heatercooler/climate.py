"""Climate platform for the Gree HeaterCooler integration.

One :class:`GreeClimate` entity per unit.  The entity holds no state of its
own: every property reads the session's cached device record, and every
setter sends a command whose ``res`` answer updates the record and triggers a
state write through the session's *update* notification.
"""

from __future__ import annotations

import logging
from collections.abc import Callable
from typing import Any

from homeassistant.components.climate import (
    ClimateEntity,
    ClimateEntityFeature,
    HVACMode,
)
from homeassistant.config_entries import ConfigEntry
from homeassistant.const import ATTR_TEMPERATURE, UnitOfTemperature
from homeassistant.core import HomeAssistant, callback
from homeassistant.helpers.device_registry import DeviceInfo
from homeassistant.helpers.entity_platform import AddEntitiesCallback

from .const import (
    CONF_HOST,
    CONF_MODEL,
    CONF_NAME,
    CONF_TEMP_SENSOR_SHIFT,
    CONF_USE_TARGET_TEMP_AS_CURRENT,
    DEFAULT_MODEL,
    DEFAULT_NAME,
    DEFAULT_TEMP_SENSOR_SHIFT,
    DOMAIN,
    MANUFACTURER,
    MAX_TEMP,
    MIN_TEMP,
)
from .gree.device import DeviceEvent, DeviceRecord, GreeDevice
from .mapping import (
    FAN_SPEED_TO_NAME,
    MODE_TO_HVAC,
    SWING_OFF,
    SWING_VERTICAL,
    current_temperature,
    fan_mode_from_device,
    fan_speed_from_mode,
    hvac_mode_from_device,
    mode_from_hvac,
    swing_mode_from_device,
    swing_vert_from_mode,
)

_LOGGER = logging.getLogger(__name__)


async def async_setup_entry(
    hass: HomeAssistant,
    entry: ConfigEntry,
    async_add_entities: AddEntitiesCallback,
) -> None:
    """Set up the climate entity for a config entry."""
    device: GreeDevice = hass.data[DOMAIN][entry.entry_id]
    async_add_entities([GreeClimate(device, entry)])


class GreeClimate(ClimateEntity):
    """A Gree air conditioner controlled over the local network."""

    _attr_has_entity_name = True
    _attr_name = None
    _attr_should_poll = False
    _attr_temperature_unit = UnitOfTemperature.CELSIUS
    _attr_target_temperature_step = 1
    _attr_min_temp = MIN_TEMP
    _attr_max_temp = MAX_TEMP
    _attr_hvac_modes = [HVACMode.OFF, *(HVACMode(m) for m in MODE_TO_HVAC.values())]
    _attr_fan_modes = list(FAN_SPEED_TO_NAME.values())
    _attr_swing_modes = [SWING_OFF, SWING_VERTICAL]
    _attr_supported_features = (
        ClimateEntityFeature.TARGET_TEMPERATURE
        | ClimateEntityFeature.FAN_MODE
        | ClimateEntityFeature.SWING_MODE
        | ClimateEntityFeature.TURN_ON
        | ClimateEntityFeature.TURN_OFF
    )

    def __init__(self, device: GreeDevice, entry: ConfigEntry) -> None:
        self._device = device
        self._entry = entry
        host: str = entry.data[CONF_HOST]
        self._attr_unique_id = host
        self._attr_device_info = DeviceInfo(
            identifiers={(DOMAIN, host)},
            name=entry.data.get(CONF_NAME, DEFAULT_NAME),
            manufacturer=MANUFACTURER,
            model=entry.data.get(CONF_MODEL, DEFAULT_MODEL),
            serial_number=host.replace(".", ""),
        )
        self._remove_callbacks: list[Callable[[], None]] = []

    # ── Options ────────────────────────────────────────────────────────────────

    def _option(self, key: str, default: Any) -> Any:
        return self._entry.options.get(key, self._entry.data.get(key, default))

    # ── HA lifecycle ───────────────────────────────────────────────────────────

    async def async_added_to_hass(self) -> None:
        """Subscribe to session notifications."""
        for event in (DeviceEvent.STATUS, DeviceEvent.UPDATE, DeviceEvent.CONNECTED):
            self._remove_callbacks.append(
                self._device.register_callback(event, self._handle_device_update)
            )
        for event in (DeviceEvent.ERROR, DeviceEvent.DISCONNECTED):
            self._remove_callbacks.append(
                self._device.register_callback(event, self._handle_device_fault)
            )

    async def async_will_remove_from_hass(self) -> None:
        for remove in self._remove_callbacks:
            remove()
        self._remove_callbacks.clear()

    @callback
    def _handle_device_update(self, record: DeviceRecord) -> None:
        self.async_write_ha_state()

    @callback
    def _handle_device_fault(self, record: DeviceRecord) -> None:
        _LOGGER.debug(
            "Fault on %s (%s): %s", record.name, record.address, self._device.last_error
        )

    # ── State ──────────────────────────────────────────────────────────────────

    @property
    def available(self) -> bool:
        return self._device.bound

    @property
    def hvac_mode(self) -> HVACMode:
        return HVACMode(
            hvac_mode_from_device(self._device.get_power(), self._device.get_mode())
        )

    @property
    def target_temperature(self) -> float:
        return float(self._device.get_temp())

    @property
    def current_temperature(self) -> float:
        return current_temperature(
            self._device.get_room_temp(),
            self._device.get_temp(),
            int(self._option(CONF_TEMP_SENSOR_SHIFT, DEFAULT_TEMP_SENSOR_SHIFT)),
            bool(self._option(CONF_USE_TARGET_TEMP_AS_CURRENT, False)),
        )

    @property
    def fan_mode(self) -> str:
        return fan_mode_from_device(self._device.get_fan_speed())

    @property
    def swing_mode(self) -> str:
        return swing_mode_from_device(self._device.get_swing_vert())

    # ── Commands ───────────────────────────────────────────────────────────────

    async def async_set_hvac_mode(self, hvac_mode: HVACMode) -> None:
        mode = mode_from_hvac(hvac_mode)
        if mode is None:
            self._device.set_power(False)
            return
        if not self._device.get_power():
            self._device.set_power(True)
        self._device.set_mode(mode)

    async def async_turn_on(self) -> None:
        self._device.set_power(True)

    async def async_turn_off(self) -> None:
        self._device.set_power(False)

    async def async_set_temperature(self, **kwargs: Any) -> None:
        if (temperature := kwargs.get(ATTR_TEMPERATURE)) is None:
            return
        if (hvac_mode := kwargs.get("hvac_mode")) is not None:
            await self.async_set_hvac_mode(hvac_mode)
        self._device.set_temp(int(temperature))

    async def async_set_fan_mode(self, fan_mode: str) -> None:
        self._device.set_fan_speed(fan_speed_from_mode(fan_mode))

    async def async_set_swing_mode(self, swing_mode: str) -> None:
        self._device.set_swing_vert(swing_vert_from_mode(swing_mode))
