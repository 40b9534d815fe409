"""Translation between raw Gree values and climate-entity concepts.

Kept free of Home Assistant imports: the mode and fan names below are the
string values of ``HVACMode`` and the ``FAN_*`` constants, so the climate
platform can use them directly while the helpers stay testable standalone.
"""

from __future__ import annotations

from .gree.commands import SWING_VERT_FIXED_VALUES, FanSpeed, Mode, Power, SwingVert

HVAC_MODE_OFF = "off"

MODE_TO_HVAC: dict[int, str] = {
    Mode.AUTO: "auto",
    Mode.COOL: "cool",
    Mode.DRY: "dry",
    Mode.FAN: "fan_only",
    Mode.HEAT: "heat",
}
HVAC_TO_MODE: dict[str, int] = {name: mode for mode, name in MODE_TO_HVAC.items()}

FAN_SPEED_TO_NAME: dict[int, str] = {
    FanSpeed.AUTO: "auto",
    FanSpeed.LOW: "low",
    FanSpeed.MEDIUM_LOW: "medium_low",
    FanSpeed.MEDIUM: "medium",
    FanSpeed.MEDIUM_HIGH: "medium_high",
    FanSpeed.HIGH: "high",
}
NAME_TO_FAN_SPEED: dict[str, int] = {name: speed for speed, name in FAN_SPEED_TO_NAME.items()}

SWING_OFF = "off"
SWING_VERTICAL = "vertical"


def hvac_mode_from_device(power: int, mode: int) -> str:
    """HVAC mode name for the unit's ``Pow``/``Mod`` pair."""
    if power == Power.OFF:
        return HVAC_MODE_OFF
    return MODE_TO_HVAC.get(mode, "auto")


def mode_from_hvac(hvac_mode: str) -> int | None:
    """``Mod`` value for an HVAC mode name, ``None`` for ``off``.

    Raises:
        ValueError: For names the unit has no mode for.
    """
    if hvac_mode == HVAC_MODE_OFF:
        return None
    try:
        return HVAC_TO_MODE[hvac_mode]
    except KeyError:
        raise ValueError(f"Unsupported HVAC mode: {hvac_mode}") from None


def fan_mode_from_device(speed: int) -> str:
    # Auto (0) is a real wire value, not "unknown"
    return FAN_SPEED_TO_NAME.get(speed, "auto")


def fan_speed_from_mode(fan_mode: str) -> int:
    try:
        return NAME_TO_FAN_SPEED[fan_mode]
    except KeyError:
        raise ValueError(f"Unsupported fan mode: {fan_mode}") from None


def swing_mode_from_device(swing: int) -> str:
    return SWING_OFF if swing in SWING_VERT_FIXED_VALUES else SWING_VERTICAL


def swing_vert_from_mode(swing_mode: str) -> int:
    """``SwUpDn`` value for a swing mode: full range or the default position."""
    return SwingVert.DEFAULT if swing_mode == SWING_OFF else SwingVert.FULL


def current_temperature(
    room_temp: int,
    target_temp: int,
    sensor_shift: int,
    use_target_temp: bool = False,
) -> float:
    """Temperature to display as "current".

    Units report ``TemSen`` with a fixed positive offset; units without an
    internal sensor can be configured to show the set-point instead.
    """
    if use_target_temp:
        return float(target_temp)
    return float(room_temp - sensor_shift)
