"""Tests for CarNet channel mapping and status processing."""

from __future__ import annotations

import pytest

from homeassistant.const import PERCENTAGE, UnitOfLength, UnitOfTemperature

from custom_components.carnet.channels import (
    CHANNEL_DEFINITIONS,
    CarNetIdMapper,
    ChannelIdMapEntry,
)
from custom_components.carnet.const import API_STATUS_MESSAGES, GROUP_DOORS, ITEM_NUMBER
from custom_components.carnet.models import (
    CarNetApiErrorMessage,
    CarNetStatusField,
    CarNetVehicleStatus,
)
from custom_components.carnet.status import (
    CarNetStatusAggregate,
    discover_channels,
    get_api_status,
    get_error_message,
    is_configuration_pending,
    number_state,
    process_status,
    round_half_up,
    switch_state,
)

VIN = "WAUZZZF21LN046449"


def _status(*fields: dict) -> CarNetVehicleStatus:
    return CarNetVehicleStatus.from_dict(
        {
            "StoredVehicleDataResponse": {
                "vin": VIN,
                "vehicleData": {"data": [{"id": "0x030104FFFF", "field": list(fields)}]},
            }
        }
    )


def _field(field_id: str, value: str, unit: str | None = None) -> dict:
    data = {"id": field_id, "value": value, "tsCarSentUtc": "2020-02-20T19:05:18Z"}
    if unit:
        data["unit"] = unit
    return data


def test_channel_definitions_are_unique() -> None:
    """Test no field id is defined twice."""
    ids = [definition.id.upper() for definition in CHANNEL_DEFINITIONS]
    assert len(ids) == len(set(ids))
    assert len(CarNetIdMapper()) == len(ids)


def test_door_definitions() -> None:
    """Test the door helper builds lock, closed and safety channels."""
    mapper = CarNetIdMapper()

    lock = mapper.find("0x0301040001")
    assert lock.symbolic_name == "LOCK2_DOOR_LEFT_FRONT"
    assert lock.key == f"{GROUP_DOORS}#lockLeftFront"
    assert mapper.find("0x0301040002").channel == "doorLeftFrontClosed"
    assert mapper.find("0x0301040003").channel == "safetyLeftFront"
    assert mapper.find("0x0301040010").channel == "lockHood"


def test_find_is_case_insensitive() -> None:
    """Test field ids are matched regardless of case."""
    mapper = CarNetIdMapper()

    assert mapper.find("0x030103000a").channel == "fuelLevel"
    assert mapper.find("0xFFFFFFFFFF") is None


def test_update_definition_uses_reported_unit() -> None:
    """Test the reported unit and scale replace the definition's unit."""
    mapper = CarNetIdMapper()
    definition = mapper.find("0x0301020001")

    source = mapper.update_definition(
        CarNetStatusField(id="0x0301020001", value="2815", unit="dK"), definition
    )
    assert source.unit == UnitOfTemperature.KELVIN
    assert source.scale == 0.1
    # The definition itself keeps the published unit
    assert definition.unit == UnitOfTemperature.CELSIUS

    unknown = CarNetStatusField(id="0x0301020001", value="1", unit="parsec")
    assert mapper.update_definition(unknown, definition) is definition


@pytest.mark.parametrize(
    ("symbolic_name", "value", "expected"),
    [
        ("LOCK2_DOOR_LEFT_FRONT", "2", True),
        ("LOCK2_DOOR_LEFT_FRONT", "3", False),
        ("STATE3_DOOR_LEFT_FRONT", "3", True),
        ("SAFETY_DOOR_LEFT_FRONT", "2", False),
        ("PARKING_LIGHT", "1", True),
        ("PARKING_LIGHT", "0", False),
        ("PARKING_LIGHT", "", None),
        ("PARKING_LIGHT", "n/a", None),
    ],
)
def test_switch_state(symbolic_name: str, value: str, expected: bool | None) -> None:
    """Test the prefix based switch mapping."""
    definition = ChannelIdMapEntry("0x1", symbolic_name, "channel", "group", "Switch")
    assert switch_state(definition, value) is expected


def test_round_half_up() -> None:
    """Test rounding away from zero at the half."""
    assert round_half_up(2.345) == 2.35
    assert round_half_up(2.344) == 2.34
    assert round_half_up(1.005) == 1.01


def test_number_state_scaled_kelvin_to_celsius() -> None:
    """Test deci Kelvin is scaled and converted to Celsius."""
    mapper = CarNetIdMapper()
    definition = mapper.find("0x0301020001")
    status_field = CarNetStatusField(id="0x0301020001", value="2815", unit="dK")

    value = number_state(
        definition, mapper.update_definition(status_field, definition), "2815"
    )

    assert value == pytest.approx(8.35)


def test_number_state_miles_to_kilometers() -> None:
    """Test distances reported in miles are converted."""
    mapper = CarNetIdMapper()
    definition = mapper.find("0x0301030005")
    source = mapper.update_definition(
        CarNetStatusField(id="0x0301030005", value="100", unit="mi"), definition
    )

    assert number_state(definition, source, "100") == pytest.approx(160.93)


def test_number_state_same_unit_unchanged() -> None:
    """Test values in the channel unit are passed through."""
    definition = ChannelIdMapEntry(
        "0x1", "FUEL", "fuelLevel", "range", ITEM_NUMBER, PERCENTAGE
    )

    assert number_state(definition, definition, "42.123") == 42.123
    assert number_state(definition, definition, "") is None
    assert number_state(definition, definition, "abc") is None


def test_discover_channels() -> None:
    """Test only mapped fields with a channel name are discovered."""
    status = _status(
        _field("0x0101010002", "3944", "km"),
        _field("0x0101010001", "2020-02-20T19:05:18Z"),
        _field("0x9999999999", "1"),
    )

    channels = discover_channels(status, CarNetIdMapper())

    assert list(channels) == ["general#odometer"]


def test_process_status_values() -> None:
    """Test values are converted according to item type."""
    status = _status(
        _field("0x0101010002", "3944", "km"),
        _field("0x0301020001", "2815", "dK"),
        _field("0x0301040001", "2"),
        _field("0x0301040002", "3"),
        _field("0x0301030007", "gasoline"),
    )

    update = process_status(status, CarNetIdMapper())

    assert update.values["general#odometer"] == 3944.0
    assert update.values["general#tempOutside"] == pytest.approx(8.35)
    assert update.values["doors#lockLeftFront"] is True
    assert update.values["doors#doorLeftFrontClosed"] is True
    assert update.values["range#primaryFuelType"] == "gasoline"
    assert update.aggregate.vehicle_locked is True


def test_process_status_drops_undiscovered_channels() -> None:
    """Test values of channels that were not discovered are dropped."""
    status = _status(
        _field("0x0101010002", "3944", "km"),
        _field("0x0301040001", "3"),
    )
    mapper = CarNetIdMapper()
    channels = {"general#odometer": mapper.find("0x0101010002")}

    update = process_status(status, mapper, channels)

    assert list(update.values) == ["general#odometer"]
    # Aggregates still see every field
    assert update.aggregate.vehicle_locked is False


def test_aggregate_defaults() -> None:
    """Test an empty report keeps the optimistic defaults."""
    update = process_status(_status(), CarNetIdMapper())

    assert update.aggregate == CarNetStatusAggregate()


def test_aggregate_open_window_and_low_tire() -> None:
    """Test windows and tires are checked per value."""
    status = _status(
        _field("0x0301050001", "3"),
        _field("0x0301050003", "2"),
        _field("0x0301060001", "1"),
        _field("0x0301060003", "0"),
    )

    aggregate = process_status(status, CarNetIdMapper()).aggregate

    assert aggregate.windows_closed is False
    assert aggregate.tires_ok is False


def test_aggregate_closed_windows_and_good_tires() -> None:
    """Test closed windows and good tires keep the aggregates set."""
    status = _status(
        _field("0x0301050001", "3"),
        _field("0x0301060001", "1"),
        _field("0x0301060003", ""),
    )

    aggregate = process_status(status, CarNetIdMapper()).aggregate

    assert aggregate.windows_closed is True
    assert aggregate.tires_ok is True


@pytest.mark.parametrize(
    ("field_id", "value", "expected"),
    [
        ("0x0203010006", "1", False),
        ("0x0203010006", "0", True),
        ("0x02040C0001", "800", True),
        ("0x02040C0001", "2500", False),
    ],
)
def test_aggregate_maintenance(field_id: str, value: str, expected: bool) -> None:
    """Test inspection alarm and AdBlue range flag maintenance."""
    status = _status(_field(field_id, value))

    aggregate = process_status(status, CarNetIdMapper()).aggregate

    assert aggregate.maintenance_required is expected


def test_get_api_status() -> None:
    """Test security status codes are translated."""
    assert get_api_status("Service disabled (VSR.security.9007)") == (
        API_STATUS_MESSAGES["9007"]
    )
    assert get_api_status("Something else") == ""
    assert get_api_status("(VSR.security.1234)") == ""


def test_error_messages() -> None:
    """Test readable messages for API error documents."""
    pending = CarNetApiErrorMessage(
        error="gw.error.validation",
        code="gw.error.validation",
        description="Service disabled (VSR.security.9007)",
    )
    assert is_configuration_pending(pending)
    assert get_error_message(pending) == API_STATUS_MESSAGES["9007"]

    auth = CarNetApiErrorMessage(error="x", code="gw.error.authorization")
    assert not is_configuration_pending(auth)
    assert get_error_message(auth) == API_STATUS_MESSAGES["gw.error.authorization"]

    reason = CarNetApiErrorMessage(error="e", description="Failed", reason="timeout")
    assert get_error_message(reason) == "Failed (timeout)"
    assert get_error_message(CarNetApiErrorMessage()) == "Unknown error"


def test_kilometers_definition() -> None:
    """Test the odometer is published in kilometers."""
    assert CarNetIdMapper().find("0x0101010002").unit == UnitOfLength.KILOMETERS


@pytest.mark.parametrize(
    ("description", "expected"),
    [
        ("Service disabled (VSR.security.9007)", True),
        ("(VSR.security.9007)", True),
        ("Vehicle not reachable (VSR.security.9006)", False),
        ("Service locked (VSR.security.9005)", False),
        ("", False),
    ],
)
def test_configuration_pending_only_for_disabled_service(
    description: str, expected: bool
) -> None:
    """Test other security errors are not taken for a pending configuration."""
    error = CarNetApiErrorMessage(error="e", description=description)

    assert is_configuration_pending(error) is expected
