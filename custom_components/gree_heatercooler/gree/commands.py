"""Gree command vocabulary.

Every controllable or reportable attribute of the unit is addressed on the
wire by a short ASCII code (``Pow``, ``Mod``, ``SetTem`` …).  Enumerated
attributes only ever carry one of their declared integer values; the
temperature attributes carry the raw number.

``TemUn`` and ``SetTem`` form a pair: the unit firmware only accepts a new
set-point when both are sent in the same ``cmd`` pack.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from enum import IntEnum


class Power(IntEnum):
    OFF = 0
    ON = 1


class Mode(IntEnum):
    AUTO = 0
    COOL = 1
    DRY = 2
    FAN = 3
    HEAT = 4


class TemperatureUnit(IntEnum):
    CELSIUS = 0
    FAHRENHEIT = 1


class FanSpeed(IntEnum):
    """``WdSpd`` values.  MEDIUM_LOW / MEDIUM_HIGH are missing on 3-speed units."""
    AUTO = 0
    LOW = 1
    MEDIUM_LOW = 2
    MEDIUM = 3
    MEDIUM_HIGH = 4
    HIGH = 5


class SwingVert(IntEnum):
    """Vertical blade position / swing range (``SwUpDn``)."""
    DEFAULT = 0
    FULL = 1              # swing in full range
    FIXED_TOP = 2         # fixed in the upmost position (1/5)
    FIXED_MID_TOP = 3     # (2/5)
    FIXED_MID = 4         # (3/5)
    FIXED_MID_BOTTOM = 5  # (4/5)
    FIXED_BOTTOM = 6      # fixed in the lowest position (5/5)
    SWING_BOTTOM = 7      # swing in the downmost region (5/5)
    SWING_MID_BOTTOM = 8
    SWING_MID = 9
    SWING_MID_TOP = 10
    SWING_TOP = 11        # swing in the upmost region (1/5)


SWING_VERT_FIXED_VALUES: tuple[int, ...] = (
    SwingVert.DEFAULT,
    SwingVert.FIXED_TOP,
    SwingVert.FIXED_MID_TOP,
    SwingVert.FIXED_MID,
    SwingVert.FIXED_MID_BOTTOM,
    SwingVert.FIXED_BOTTOM,
)
"""``SwUpDn`` values for which the blades do not move."""


@dataclass(frozen=True)
class Command:
    """One entry of the vocabulary.

    Attributes:
        code:   Wire code used in ``cols``/``opt`` lists.
        values: Enumeration of accepted values, or ``None`` for attributes
                carrying a raw number (temperatures).
    """

    code: str
    values: type[IntEnum] | None = field(default=None)

    def validate(self, value: int) -> int:
        """Return *value* as ``int`` or raise ``ValueError`` if it is outside
        the declared enumeration."""
        value = int(value)
        if self.values is not None and value not in {v.value for v in self.values}:
            raise ValueError(f"{value} is not a valid value for {self.code}")
        return value


POWER = Command("Pow", Power)
MODE = Command("Mod", Mode)
TEMPERATURE_UNIT = Command("TemUn", TemperatureUnit)
TEMPERATURE = Command("SetTem")
ROOM_TEMPERATURE = Command("TemSen")
FAN_SPEED = Command("WdSpd", FanSpeed)
SWING_VERT = Command("SwUpDn", SwingVert)

VOCABULARY: tuple[Command, ...] = (
    POWER,
    MODE,
    TEMPERATURE_UNIT,
    TEMPERATURE,
    ROOM_TEMPERATURE,
    FAN_SPEED,
    SWING_VERT,
)

_BY_CODE: dict[str, Command] = {cmd.code: cmd for cmd in VOCABULARY}


def status_columns() -> list[str]:
    """Codes requested in every ``status`` pack, in vocabulary order."""
    return [cmd.code for cmd in VOCABULARY]


def command_for_code(code: str) -> Command | None:
    return _BY_CODE.get(code)
