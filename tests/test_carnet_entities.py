"""Tests for the CarNet entities."""

from __future__ import annotations

from unittest.mock import AsyncMock, MagicMock

import pytest

from homeassistant.components.sensor import SensorDeviceClass, SensorStateClass
from homeassistant.const import UnitOfLength

from custom_components.carnet.channels import ChannelIdMapEntry
from custom_components.carnet.const import (
    CHANNEL_LOCATION_GEO,
    CHANNEL_LOCATION_TIME,
    CHANNEL_STORED_POS,
    CONTROL_PREHEAT,
    CONTROL_WINHEAT,
    ITEM_NUMBER,
)
from custom_components.carnet.entities import (
    ChannelSensor,
    ControlSwitch,
    LocationTimeSensor,
    VehicleTracker,
    aggregate_sensors,
    channel_label,
    channel_unique_id,
)
from custom_components.carnet.status import CarNetStatusAggregate

VIN = "WAUZZZF21LN046449"

ODOMETER = ChannelIdMapEntry(
    "0x0101010002",
    "KILOMETER_STATUS",
    "odometer",
    "general",
    ITEM_NUMBER,
    UnitOfLength.KILOMETERS,
)


@pytest.fixture
def coordinator() -> MagicMock:
    """Coordinator stub with one status update."""
    stub = MagicMock()
    stub.vin = VIN
    stub.data = {
        "values": {"general#odometer": 3944.0},
        "aggregate": CarNetStatusAggregate(vehicle_locked=False),
        "location": {
            CHANNEL_LOCATION_GEO: (48.123456, 11.654321),
            CHANNEL_STORED_POS: None,
            CHANNEL_LOCATION_TIME: "2020-02-20T19:05:18Z",
        },
        "controls": {CONTROL_WINHEAT: True},
    }
    return stub


def test_channel_names() -> None:
    """Test channel names are turned into labels and unique ids."""
    assert channel_label("tempOutside") == "Temp outside"
    assert channel_unique_id("doors#lockLeftFront") == "doors_lock_left_front"


def test_channel_sensor(coordinator: MagicMock) -> None:
    """Test a number channel sensor."""
    sensor = ChannelSensor(coordinator, ODOMETER)

    assert sensor.unique_id == f"carnet_{VIN.lower()}_general_odometer"
    assert sensor.native_value == 3944.0
    assert sensor.device_class == SensorDeviceClass.DISTANCE
    assert sensor.state_class == SensorStateClass.TOTAL_INCREASING

    coordinator.data = None
    assert sensor.native_value is None


def test_aggregate_sensors(coordinator: MagicMock) -> None:
    """Test aggregate sensors read the status aggregate."""
    states = {sensor.name: sensor.is_on for sensor in aggregate_sensors(coordinator)}

    assert states["Vehicle locked"] is False
    assert states["Windows closed"] is True

    coordinator.data = None
    assert aggregate_sensors(coordinator)[0].is_on is None


def test_trackers_and_timestamps(coordinator: MagicMock) -> None:
    """Test position trackers and the position timestamp."""
    current = VehicleTracker(coordinator, CHANNEL_LOCATION_GEO)
    stored = VehicleTracker(coordinator, CHANNEL_STORED_POS)

    assert (current.latitude, current.longitude) == (48.123456, 11.654321)
    assert stored.latitude is None
    assert stored.name == "Parking position"

    timestamp = LocationTimeSensor(coordinator, CHANNEL_LOCATION_TIME, "mdi:clock")
    assert timestamp.native_value.year == 2020


@pytest.mark.asyncio
async def test_control_switch(coordinator: MagicMock) -> None:
    """Test control switches call the matching coordinator action."""
    coordinator.async_set_window_heating = AsyncMock()
    coordinator.async_set_pre_heating = AsyncMock()
    window_heating = ControlSwitch(coordinator, CONTROL_WINHEAT, "Window heating", "mdi:x")
    pre_heating = ControlSwitch(coordinator, CONTROL_PREHEAT, "Pre-heating", "mdi:x")

    assert window_heating.is_on is True
    assert pre_heating.is_on is None

    await window_heating.async_turn_off()
    await pre_heating.async_turn_on()

    coordinator.async_set_window_heating.assert_awaited_once_with(False)
    coordinator.async_set_pre_heating.assert_awaited_once_with(True)
