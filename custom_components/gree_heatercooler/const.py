"""Constants for the Gree HeaterCooler integration."""

from __future__ import annotations

DOMAIN = "gree_heatercooler"
MANUFACTURER = "Gree"
DEFAULT_MODEL = "Gree HeaterCooler"

PLATFORMS: list[str] = ["climate"]

CONF_HOST = "host"
CONF_NAME = "name"
CONF_MODEL = "model"
CONF_PORT = "port"
CONF_UPDATE_INTERVAL = "update_interval"
CONF_TEMP_SENSOR_SHIFT = "temp_sensor_shift"
CONF_USE_TARGET_TEMP_AS_CURRENT = "use_target_temp_as_current"

DEFAULT_NAME = "Gree HeaterCooler"
DEFAULT_PORT = 7000
DEFAULT_UPDATE_INTERVAL = 10
"""Seconds between status polls."""

DEFAULT_TEMP_SENSOR_SHIFT = 40
"""Offset the unit adds to its internal sensor reading (``TemSen``)."""

MIN_TEMP = 18
MAX_TEMP = 30
