"""CarNet vehicle status processing.

Turns a stored vehicle data report into channel values and the aggregated
vehicle state (locked, maintenance required, tires ok, windows closed).
"""

from __future__ import annotations

from dataclasses import dataclass, field
from decimal import ROUND_HALF_UP, Decimal, InvalidOperation
import logging
from typing import Any

from homeassistant.util.unit_conversion import (
    BaseUnitConverter,
    DistanceConverter,
    DurationConverter,
    TemperatureConverter,
    VolumeConverter,
)

from .channels import CarNetIdMapper, ChannelIdMapEntry
from .const import (
    API_STATUS_CLASS_SECURITY,
    API_STATUS_DISABLED,
    API_STATUS_MESSAGES,
    ITEM_STRING,
    ITEM_SWITCH,
)
from .models import CarNetApiErrorMessage, CarNetStatusField, CarNetVehicleStatus

_LOGGER = logging.getLogger(__name__)

UNIT_CONVERTERS: list[type[BaseUnitConverter]] = [
    DistanceConverter,
    DurationConverter,
    TemperatureConverter,
    VolumeConverter,
]

AD_BLUE_MIN_RANGE = 1000  # km


@dataclass
class CarNetStatusAggregate:
    """Aggregated vehicle state, computed over all fields with a value."""

    vehicle_locked: bool = True
    maintenance_required: bool = False
    tires_ok: bool = True
    windows_closed: bool = True

    def update(self, definition: ChannelIdMapEntry, status_field: CarNetStatusField) -> None:
        """Fold a single status field into the aggregate."""
        value = status_field.value
        if not value:
            return

        name = definition.symbolic_name
        if "LOCK" in name:
            locked = ("LOCK2" in name and value == "2") or (
                "LOCK3" in name and value == "3"
            )
            if not locked:
                _LOGGER.debug("Vehicle is not completely locked: %s", definition.channel)
                self.vehicle_locked = False

        if "MAINT_ALARM" in name and value != "1":
            _LOGGER.debug("Maintenance required: %s", name)
            self.maintenance_required = True
        if "AD_BLUE_RANGE" in name:
            try:
                if int(float(value)) < AD_BLUE_MIN_RANGE:
                    _LOGGER.debug("Maintenance required: AdBlue at %s (< 1.000km)", value)
                    self.maintenance_required = True
            except ValueError:
                _LOGGER.debug("Invalid AdBlue range: %s", value)

        if "WINDOWS" in name and "STATE" in name and value != "3":
            _LOGGER.debug("Window %s is not closed", definition.channel)
            self.windows_closed = False

        if "TIREPRESS" in name and "CURRENT" in name and value != "1":
            _LOGGER.debug("Tire pressure for %s is not ok", definition.channel)
            self.tires_ok = False


@dataclass
class CarNetStatusUpdate:
    """Result of processing a status report."""

    values: dict[str, Any] = field(default_factory=dict)
    """Channel values keyed by "group#channel"."""

    aggregate: CarNetStatusAggregate = field(default_factory=CarNetStatusAggregate)


def discover_channels(
    status: CarNetVehicleStatus, mapper: CarNetIdMapper
) -> dict[str, ChannelIdMapEntry]:
    """Collect the channels the vehicle reports values for.

    Returns:
        Definitions keyed by "group#channel"
    """
    channels: dict[str, ChannelIdMapEntry] = {}
    for block, status_field in status.iter_fields():
        definition = mapper.find(status_field.id)
        if definition is None:
            _LOGGER.debug(
                "Unknown data field %s.%s, value=%s %s",
                block.id,
                status_field.id,
                status_field.value,
                status_field.unit or "",
            )
            continue

        _LOGGER.debug(
            "%s=%s%s (channel %s)",
            definition.symbolic_name,
            status_field.value,
            status_field.unit or "",
            definition.key,
        )
        if definition.channel and definition.key not in channels:
            channels[definition.key] = definition
    return channels


def switch_state(definition: ChannelIdMapEntry, value: str | None) -> bool | None:
    """Map a raw switch value to on/off.

    STATE2_/LOCK2_ are on at 2, STATE3_/SAFETY_/LOCK3_ are on at 3, anything
    else is on at 1.
    """
    if not value:
        return None
    try:
        number = int(float(value))
    except ValueError:
        _LOGGER.debug("Invalid switch value %s for %s", value, definition.symbolic_name)
        return None

    name = definition.symbolic_name.upper()
    if "STATE2_" in name or "LOCK2_" in name:
        return number == 2
    if "STATE3_" in name or "SAFETY_" in name or "LOCK3_" in name:
        return number == 3
    return number == 1


def _find_converter(
    from_unit: str, to_unit: str
) -> type[BaseUnitConverter] | None:
    for converter in UNIT_CONVERTERS:
        if from_unit in converter.VALID_UNITS and to_unit in converter.VALID_UNITS:
            return converter
    return None


def round_half_up(value: float, digits: int = 2) -> float:
    """Round a value like BigDecimal ROUND_HALF_UP does."""
    quantum = Decimal(1).scaleb(-digits)
    return float(Decimal(repr(value)).quantize(quantum, rounding=ROUND_HALF_UP))


def number_state(
    definition: ChannelIdMapEntry,
    source: ChannelIdMapEntry,
    value: str | None,
) -> float | None:
    """Convert a raw number to the channel unit.

    Args:
        definition: Channel definition, its unit is the target unit
        source: Definition describing the reported value (unit and scale)
        value: Raw value

    Returns:
        The converted value, None if no value was reported
    """
    if not value:
        return None
    try:
        number = float(Decimal(value.strip()))
    except (InvalidOperation, ValueError):
        _LOGGER.debug("Invalid number %s for %s", value, definition.symbolic_name)
        return None

    if definition.unit is None:
        return number

    from_unit = source.unit or definition.unit
    if source.scale != 1.0:
        number = number * source.scale
    if from_unit == definition.unit:
        return round_half_up(number) if source.scale != 1.0 else number

    converter = _find_converter(from_unit, definition.unit)
    if converter is None:
        _LOGGER.debug(
            "Unable to convert %s from %s to %s",
            definition.symbolic_name,
            from_unit,
            definition.unit,
        )
        return number
    return round_half_up(converter.convert(number, from_unit, definition.unit))


def channel_value(
    mapper: CarNetIdMapper,
    definition: ChannelIdMapEntry,
    status_field: CarNetStatusField,
) -> Any:
    """Return the channel value of a status field according to its item type."""
    if definition.item_type == ITEM_SWITCH:
        return switch_state(definition, status_field.value)
    if definition.item_type == ITEM_STRING:
        return status_field.value or ""
    source = mapper.update_definition(status_field, definition)
    return number_state(definition, source, status_field.value)


def process_status(
    status: CarNetVehicleStatus,
    mapper: CarNetIdMapper,
    channels: dict[str, ChannelIdMapEntry] | None = None,
) -> CarNetStatusUpdate:
    """Compute channel values and aggregates from a status report.

    Args:
        status: Stored vehicle data report
        mapper: Field id mapper
        channels: Discovered channels, values of other channels are dropped.
            All mapped channels are published if None.
    """
    result = CarNetStatusUpdate()
    for _block, status_field in status.iter_fields():
        definition = mapper.find(status_field.id)
        if definition is None or not definition.channel:
            continue

        if channels is None or definition.key in channels:
            result.values[definition.key] = channel_value(mapper, definition, status_field)
        else:
            _LOGGER.debug("Channel %s not found", definition.key)

        result.aggregate.update(definition, status_field)
    return result


def get_api_status(description: str, error_class: str = API_STATUS_CLASS_SECURITY) -> str:
    """Translate a status error like "(VSR.security.9007)" into a message.

    Returns:
        The readable message, an empty string if none is known
    """
    marker = error_class + "."
    if marker not in description:
        return ""
    code = description.rsplit(marker, 1)[1].split(")", 1)[0].strip()
    return API_STATUS_MESSAGES.get(code, "")


def get_error_message(error: CarNetApiErrorMessage) -> str:
    """Return a readable message for an API error document."""
    message = get_api_status(error.description)
    if message:
        return message
    if error.code in API_STATUS_MESSAGES:
        return API_STATUS_MESSAGES[error.code]
    if error.reason:
        return f"{error.description or error.error} ({error.reason})"
    return error.description or error.error or "Unknown error"


def is_configuration_pending(error: CarNetApiErrorMessage) -> bool:
    """Return True if the error means the vehicle side service is disabled.

    This is a setup issue on the vehicle (data privacy settings in the MMI),
    not a communication error.
    """
    return (
        "disabled " in error.description
        or f"{API_STATUS_CLASS_SECURITY}.{API_STATUS_DISABLED}" in error.description
    )
