"""Tests for the raw value ↔ climate mode translation (no Home Assistant needed)."""
from __future__ import annotations

import pytest

from custom_components.gree_heatercooler.gree.commands import FanSpeed, Mode, SwingVert
from custom_components.gree_heatercooler.mapping import (
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


class TestHvacMode:
    def test_power_off_wins(self):
        assert hvac_mode_from_device(0, Mode.HEAT) == "off"

    def test_modes(self):
        assert hvac_mode_from_device(1, Mode.COOL) == "cool"
        assert hvac_mode_from_device(1, Mode.FAN) == "fan_only"

    def test_mode_from_hvac(self):
        assert mode_from_hvac("off") is None
        assert mode_from_hvac("heat") == Mode.HEAT
        assert mode_from_hvac("dry") == Mode.DRY

    def test_unknown_hvac_mode(self):
        with pytest.raises(ValueError):
            mode_from_hvac("heat_cool")


class TestFanMode:
    def test_auto_is_zero_both_ways(self):
        assert fan_mode_from_device(FanSpeed.AUTO) == "auto"
        assert fan_speed_from_mode("auto") == 0

    def test_named_speeds(self):
        assert fan_mode_from_device(FanSpeed.MEDIUM_HIGH) == "medium_high"
        assert fan_speed_from_mode("low") == FanSpeed.LOW
        assert fan_speed_from_mode("high") == FanSpeed.HIGH

    def test_unknown_fan_mode(self):
        with pytest.raises(ValueError):
            fan_speed_from_mode("turbo")


class TestSwing:
    def test_fixed_positions_read_as_off(self):
        for value in (SwingVert.DEFAULT, SwingVert.FIXED_TOP, SwingVert.FIXED_BOTTOM):
            assert swing_mode_from_device(value) == SWING_OFF

    def test_swinging_positions_read_as_vertical(self):
        for value in (SwingVert.FULL, SwingVert.SWING_MID, SwingVert.SWING_TOP):
            assert swing_mode_from_device(value) == SWING_VERTICAL

    def test_enable_full_disable_default(self):
        assert swing_vert_from_mode(SWING_VERTICAL) == SwingVert.FULL
        assert swing_vert_from_mode(SWING_OFF) == SwingVert.DEFAULT


class TestCurrentTemperature:
    def test_sensor_offset_removed(self):
        assert current_temperature(63, 24, 40) == 23.0

    def test_target_used_when_configured(self):
        assert current_temperature(0, 24, 40, use_target_temp=True) == 24.0
