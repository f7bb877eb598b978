"""CarNet status field to channel mapping.

The stored vehicle data report identifies each value by a hex field id
(``0x0101010002`` is the odometer). This module maps those ids to a symbolic
name, a channel inside a channel group and the item type and unit the value
is published with.

Symbolic name prefixes drive the switch mapping in ``status.py``:
``LOCK2_`` and ``STATE2_`` are on at value 2, ``LOCK3_``, ``STATE3_`` and
``SAFETY_`` are on at value 3, every other switch is on at value 1.
"""

from __future__ import annotations

from dataclasses import dataclass, replace
import logging

from homeassistant.const import (
    PERCENTAGE,
    UnitOfLength,
    UnitOfTemperature,
    UnitOfTime,
    UnitOfVolume,
)

from .const import (
    GROUP_DOORS,
    GROUP_GENERAL,
    GROUP_MAINT,
    GROUP_RANGE,
    GROUP_STATUS,
    GROUP_TIRES,
    GROUP_WINDOWS,
    ITEM_NUMBER,
    ITEM_STRING,
    ITEM_SWITCH,
)
from .models import CarNetStatusField

_LOGGER = logging.getLogger(__name__)


@dataclass(frozen=True)
class ChannelIdMapEntry:
    """Definition of a channel fed by a status field."""

    id: str
    """Field id as reported by the API"""

    symbolic_name: str
    """Symbolic name, its prefix selects the switch mapping"""

    channel: str
    """Channel name inside the group, empty if the value is not published"""

    group: str
    """Channel group"""

    item_type: str = ITEM_NUMBER
    """Item type: Switch, String or Number"""

    unit: str | None = None
    """Unit of measurement"""

    scale: float = 1.0
    """Factor applied to the raw value before unit conversion"""

    @property
    def key(self) -> str:
        """Return the "group#channel" key used for the value map."""
        return f"{self.group}#{self.channel}"


# Unit strings reported by the API -> (unit, scale)
SOURCE_UNITS: dict[str, tuple[str, float]] = {
    "km": (UnitOfLength.KILOMETERS, 1.0),
    "mi": (UnitOfLength.MILES, 1.0),
    "dK": (UnitOfTemperature.KELVIN, 0.1),
    "K": (UnitOfTemperature.KELVIN, 1.0),
    "°C": (UnitOfTemperature.CELSIUS, 1.0),
    "°F": (UnitOfTemperature.FAHRENHEIT, 1.0),
    "%": (PERCENTAGE, 1.0),
    "d": (UnitOfTime.DAYS, 1.0),
    "h": (UnitOfTime.HOURS, 1.0),
    "min": (UnitOfTime.MINUTES, 1.0),
    "l": (UnitOfVolume.LITERS, 1.0),
    "gal": (UnitOfVolume.GALLONS, 1.0),
}


def _entry(
    field_id: str,
    symbolic_name: str,
    channel: str,
    group: str,
    item_type: str = ITEM_NUMBER,
    unit: str | None = None,
) -> ChannelIdMapEntry:
    return ChannelIdMapEntry(field_id, symbolic_name, channel, group, item_type, unit)


def _door(base: int, side: str, name: str) -> list[ChannelIdMapEntry]:
    return [
        _entry(f"0x03010400{base:02X}", f"LOCK2_{side}", f"lock{name}", GROUP_DOORS, ITEM_SWITCH),
        _entry(f"0x03010400{base + 1:02X}", f"STATE3_{side}", f"door{name}Closed", GROUP_DOORS, ITEM_SWITCH),
        _entry(f"0x03010400{base + 2:02X}", f"SAFETY_{side}", f"safety{name}", GROUP_DOORS, ITEM_SWITCH),
    ]


def _window(base: int, side: str, name: str) -> list[ChannelIdMapEntry]:
    return [
        _entry(f"0x03010500{base:02X}", f"STATE3_WINDOWS_{side}", f"window{name}Closed", GROUP_WINDOWS, ITEM_SWITCH),
        _entry(f"0x03010500{base + 1:02X}", f"POS_WINDOWS_{side}", f"window{name}Pos", GROUP_WINDOWS, ITEM_NUMBER, PERCENTAGE),
    ]


def _tire(base: int, side: str, name: str) -> list[ChannelIdMapEntry]:
    return [
        _entry(f"0x03010600{base:02X}", f"TIREPRESS_{side}_CURRENT", f"tirePress{name}", GROUP_TIRES, ITEM_SWITCH),
        _entry(f"0x03010600{base + 1:02X}", f"TIREPRESS_{side}_DESIRED", "", GROUP_TIRES, ITEM_STRING),
    ]


CHANNEL_DEFINITIONS: list[ChannelIdMapEntry] = [
    # General
    _entry("0x0101010002", "KILOMETER_STATUS", "odometer", GROUP_GENERAL, ITEM_NUMBER, UnitOfLength.KILOMETERS),
    _entry("0x0301020001", "TEMPERATURE_OUTSIDE", "tempOutside", GROUP_GENERAL, ITEM_NUMBER, UnitOfTemperature.CELSIUS),
    _entry("0x0101010001", "UTC_TIME_STATUS", "", GROUP_GENERAL, ITEM_STRING),
    # Status
    _entry("0x0301010001", "PARKING_LIGHT", "parkingLight", GROUP_STATUS, ITEM_SWITCH),
    _entry("0x0301030001", "PARKING_BRAKE", "parkingBrake", GROUP_STATUS, ITEM_SWITCH),
    _entry("0x0301030004", "SPEED", "", GROUP_STATUS),
    # Range
    _entry("0x030103000A", "LEVEL_FUEL", "fuelLevel", GROUP_RANGE, ITEM_NUMBER, PERCENTAGE),
    _entry("0x0301030005", "TOTAL_RANGE", "totalRange", GROUP_RANGE, ITEM_NUMBER, UnitOfLength.KILOMETERS),
    _entry("0x0301030006", "PRIMARY_RANGE", "primaryRange", GROUP_RANGE, ITEM_NUMBER, UnitOfLength.KILOMETERS),
    _entry("0x0301030007", "PRIMARY_DRIVE", "primaryFuelType", GROUP_RANGE, ITEM_STRING),
    _entry("0x0301030008", "SECONDARY_RANGE", "secondaryRange", GROUP_RANGE, ITEM_NUMBER, UnitOfLength.KILOMETERS),
    _entry("0x0301030009", "SECONDARY_DRIVE", "secondaryFuelType", GROUP_RANGE, ITEM_STRING),
    _entry("0x0301030002", "STATE_OF_CHARGE", "stateOfCharge", GROUP_RANGE, ITEM_NUMBER, PERCENTAGE),
    # Maintenance
    _entry("0x0203010001", "MAINT_OIL_DISTANCE_TO", "oilDistance", GROUP_MAINT, ITEM_NUMBER, UnitOfLength.KILOMETERS),
    _entry("0x0203010002", "MAINT_OIL_TIME_TO", "oilIntervalDays", GROUP_MAINT, ITEM_NUMBER, UnitOfTime.DAYS),
    _entry("0x0203010003", "MAINT_INSPECTION_DISTANCE_TO", "inspectionDistance", GROUP_MAINT, ITEM_NUMBER, UnitOfLength.KILOMETERS),
    _entry("0x0203010004", "MAINT_INSPECTION_TIME_TO", "inspectionDays", GROUP_MAINT, ITEM_NUMBER, UnitOfTime.DAYS),
    _entry("0x0203010005", "WARNING_OIL_CHANGE", "oilWarningChange", GROUP_MAINT, ITEM_SWITCH),
    _entry("0x0203010006", "MAINT_ALARM_INSPECTION", "alarmInspection", GROUP_MAINT, ITEM_SWITCH),
    _entry("0x0203010007", "MAINT_MONTHLY_MILEAGE", "monthlyMileage", GROUP_MAINT, ITEM_NUMBER, UnitOfLength.KILOMETERS),
    _entry("0x02040C0001", "AD_BLUE_RANGE", "adBlueRange", GROUP_MAINT, ITEM_NUMBER, UnitOfLength.KILOMETERS),
    # Doors: lock, open state and safety lock per door
    *_door(0x01, "DOOR_LEFT_FRONT", "LeftFront"),
    *_door(0x04, "DOOR_LEFT_REAR", "LeftRear"),
    *_door(0x07, "DOOR_RIGHT_FRONT", "RightFront"),
    *_door(0x0A, "DOOR_RIGHT_REAR", "RightRear"),
    *_door(0x0D, "TRUNK_LID", "Trunk"),
    *_door(0x10, "HOOD", "Hood"),
    # Windows: closed state and position
    *_window(0x01, "LEFT_FRONT", "LeftFront"),
    *_window(0x03, "LEFT_REAR", "LeftRear"),
    *_window(0x05, "RIGHT_FRONT", "RightFront"),
    *_window(0x07, "RIGHT_REAR", "RightRear"),
    *_window(0x0B, "ROOF_COVER", "RoofCover"),
    *_window(0x0D, "SUN_ROOF", "SunRoof"),
    # Tires: current pressure ok flag and desired pressure
    *_tire(0x01, "LEFT_FRONT", "LeftFront"),
    *_tire(0x03, "LEFT_REAR", "LeftRear"),
    *_tire(0x05, "RIGHT_FRONT", "RightFront"),
    *_tire(0x07, "RIGHT_REAR", "RightRear"),
    *_tire(0x09, "SPARE", "Spare"),
]


class CarNetIdMapper:
    """Lookup of channel definitions by field id."""

    def __init__(self, definitions: list[ChannelIdMapEntry] | None = None) -> None:
        """Initialize the mapper.

        Args:
            definitions: Channel definitions, the built-in table if None
        """
        self._map: dict[str, ChannelIdMapEntry] = {}
        for definition in definitions or CHANNEL_DEFINITIONS:
            self._map[definition.id.upper()] = definition

    def __len__(self) -> int:
        return len(self._map)

    def find(self, field_id: str) -> ChannelIdMapEntry | None:
        """Return the definition for a field id, or None if unknown."""
        return self._map.get(field_id.upper())

    def update_definition(
        self, status_field: CarNetStatusField, definition: ChannelIdMapEntry
    ) -> ChannelIdMapEntry:
        """Return the definition with unit and scale taken from the field.

        The returned entry describes the value as it was reported, the unit of
        the passed definition is the unit the channel is published in. If
        the reported unit is unknown the definition is returned unchanged.
        """
        if not status_field.unit:
            return definition

        source = SOURCE_UNITS.get(status_field.unit)
        if source is None:
            _LOGGER.debug(
                "Unknown unit %s for field %s (%s)",
                status_field.unit,
                status_field.id,
                definition.symbolic_name,
            )
            return definition

        unit, scale = source
        return replace(definition, unit=unit, scale=scale)
