"""Home Assistant entity definitions for CarNet integration.

Status channels are created from the channels the vehicle reported on the
first status update. Aggregates, location and controls are fixed entities.
"""

from __future__ import annotations

from abc import ABC
from dataclasses import dataclass
import logging
import re
from typing import Any

from homeassistant.components.binary_sensor import (
    BinarySensorDeviceClass,
    BinarySensorEntity,
)
from homeassistant.components.button import ButtonEntity
from homeassistant.components.device_tracker.config_entry import TrackerEntity
from homeassistant.components.device_tracker.const import SourceType
from homeassistant.components.lock import LockEntity
from homeassistant.components.sensor import (
    SensorDeviceClass,
    SensorEntity,
    SensorStateClass,
)
from homeassistant.components.switch import SwitchEntity
from homeassistant.const import (
    EntityCategory,
    UnitOfLength,
    UnitOfTemperature,
    UnitOfTime,
)
from homeassistant.helpers.update_coordinator import CoordinatorEntity
from homeassistant.util import dt as dt_util

from .channels import ChannelIdMapEntry
from .const import (
    CHANNEL_LOCATION_GEO,
    CHANNEL_LOCATION_PARK,
    CHANNEL_LOCATION_TIME,
    CHANNEL_LOCKED,
    CHANNEL_MAINT_REQUIRED,
    CHANNEL_STORED_POS,
    CHANNEL_TIRES_OK,
    CHANNEL_WINDOWS_CLOSED,
    CONTROL_CLIMA,
    CONTROL_LOCK,
    CONTROL_PREHEAT,
    CONTROL_WINHEAT,
    DOMAIN,
    GROUP_GENERAL,
    GROUP_LOCATION,
)

_LOGGER = logging.getLogger(__name__)

DEVICE_CLASS_BY_UNIT: dict[str, SensorDeviceClass] = {
    UnitOfLength.KILOMETERS: SensorDeviceClass.DISTANCE,
    UnitOfLength.MILES: SensorDeviceClass.DISTANCE,
    UnitOfTemperature.CELSIUS: SensorDeviceClass.TEMPERATURE,
    UnitOfTime.DAYS: SensorDeviceClass.DURATION,
}


def channel_label(channel: str) -> str:
    """Turn a channel name like "tempOutside" into "Temp outside"."""
    words = re.sub(r"(?<!^)(?=[A-Z])", " ", channel).lower()
    return words[:1].upper() + words[1:]


def channel_unique_id(key: str) -> str:
    """Turn a "group#channel" key into a unique id suffix."""
    group, _, channel = key.partition("#")
    snake = re.sub(r"(?<!^)(?=[A-Z])", "_", channel).lower()
    return f"{group}_{snake}"


@dataclass
class EntityConfig:
    """Configuration for an entity."""

    unique_id: str
    """Unique identifier for the entity"""

    name: str
    """Human-readable entity name"""

    icon: str | None = None
    """Home Assistant icon name"""

    unit_of_measurement: str | None = None
    """Unit of measurement for sensors"""


class CarNetEntity(CoordinatorEntity, ABC):
    """Base class for CarNet entities."""

    _attr_should_poll = False
    _attr_has_entity_name = True

    def __init__(self, coordinator: Any, config: EntityConfig) -> None:
        """Initialize CarNet entity.

        Args:
            coordinator: Data coordinator for updates
            config: Entity configuration
        """
        super().__init__(coordinator)
        self.vin = coordinator.vin
        self._attr_unique_id = f"carnet_{self.vin.lower()}_{config.unique_id}"
        self._attr_name = config.name
        if config.icon:
            self._attr_icon = config.icon
        if config.unit_of_measurement:
            self._attr_native_unit_of_measurement = config.unit_of_measurement

    @property
    def device_info(self) -> dict:
        """Return device info for device registry."""
        details = self.coordinator.vehicle.details
        api_config = self.coordinator.api_client.config

        device_info = {
            "identifiers": {(DOMAIN, self.vin)},
            "name": details.model_name or self.vin,
            "manufacturer": details.brand or api_config.brand,
            "model": details.model_name or "CarNet Vehicle",
            "serial_number": self.vin,
        }
        if details.model_year:
            device_info["hw_version"] = details.model_year
        if details.mmi:
            device_info["sw_version"] = details.mmi
        return device_info

    @property
    def _values(self) -> dict[str, Any]:
        return self.coordinator.data.get("values", {}) if self.coordinator.data else {}

    @property
    def _location(self) -> dict[str, Any]:
        return self.coordinator.data.get("location", {}) if self.coordinator.data else {}

    @property
    def _controls(self) -> dict[str, Any]:
        return self.coordinator.data.get("controls", {}) if self.coordinator.data else {}


class ChannelSensor(CarNetEntity, SensorEntity):
    """Sensor for a number or string status channel."""

    def __init__(self, coordinator: Any, definition: ChannelIdMapEntry) -> None:
        """Initialize channel sensor.

        Args:
            coordinator: Data coordinator
            definition: Channel definition
        """
        config = EntityConfig(
            unique_id=channel_unique_id(definition.key),
            name=channel_label(definition.channel),
            unit_of_measurement=definition.unit,
        )
        super().__init__(coordinator, config)
        self.definition = definition
        if definition.unit in DEVICE_CLASS_BY_UNIT:
            self._attr_device_class = DEVICE_CLASS_BY_UNIT[definition.unit]
        if definition.unit:
            self._attr_state_class = SensorStateClass.MEASUREMENT
        if definition.channel == "odometer":
            self._attr_state_class = SensorStateClass.TOTAL_INCREASING
            self._attr_icon = "mdi:counter"

    @property
    def native_value(self) -> Any:
        """Return the channel value."""
        return self._values.get(self.definition.key)


class ChannelBinarySensor(CarNetEntity, BinarySensorEntity):
    """Binary sensor for a switch status channel."""

    def __init__(self, coordinator: Any, definition: ChannelIdMapEntry) -> None:
        """Initialize channel binary sensor.

        Args:
            coordinator: Data coordinator
            definition: Channel definition
        """
        config = EntityConfig(
            unique_id=channel_unique_id(definition.key),
            name=channel_label(definition.channel),
        )
        super().__init__(coordinator, config)
        self.definition = definition

    @property
    def is_on(self) -> bool | None:
        """Return the channel state."""
        return self._values.get(self.definition.key)


class AggregateBinarySensor(CarNetEntity, BinarySensorEntity):
    """Binary sensor for an aggregated vehicle state."""

    def __init__(
        self,
        coordinator: Any,
        channel: str,
        attribute: str,
        icon: str,
        device_class: BinarySensorDeviceClass | None = None,
    ) -> None:
        """Initialize aggregate sensor.

        Args:
            coordinator: Data coordinator
            channel: Aggregate channel name
            attribute: Attribute of the status aggregate
            icon: Icon name
            device_class: Binary sensor device class
        """
        config = EntityConfig(
            unique_id=channel_unique_id(f"{GROUP_GENERAL}#{channel}"),
            name=channel_label(channel),
            icon=icon,
        )
        super().__init__(coordinator, config)
        self.attribute = attribute
        if device_class:
            self._attr_device_class = device_class

    @property
    def is_on(self) -> bool | None:
        """Return the aggregated state."""
        if not self.coordinator.data:
            return None
        return getattr(self.coordinator.data["aggregate"], self.attribute)


def aggregate_sensors(coordinator: Any) -> list[AggregateBinarySensor]:
    """Create the aggregated state sensors."""
    return [
        AggregateBinarySensor(coordinator, CHANNEL_LOCKED, "vehicle_locked", "mdi:car-key"),
        AggregateBinarySensor(
            coordinator,
            CHANNEL_MAINT_REQUIRED,
            "maintenance_required",
            "mdi:car-wrench",
            BinarySensorDeviceClass.PROBLEM,
        ),
        AggregateBinarySensor(coordinator, CHANNEL_TIRES_OK, "tires_ok", "mdi:car-tire-alert"),
        AggregateBinarySensor(
            coordinator, CHANNEL_WINDOWS_CLOSED, "windows_closed", "mdi:car-door"
        ),
    ]


class LocationTimeSensor(CarNetEntity, SensorEntity):
    """Timestamp sensor for the position update and parking time."""

    _attr_device_class = SensorDeviceClass.TIMESTAMP

    def __init__(self, coordinator: Any, channel: str, icon: str) -> None:
        """Initialize timestamp sensor."""
        config = EntityConfig(
            unique_id=channel_unique_id(f"{GROUP_LOCATION}#{channel}"),
            name=channel_label(channel),
            icon=icon,
        )
        super().__init__(coordinator, config)
        self.channel = channel

    @property
    def native_value(self):
        """Return the timestamp."""
        value = self._location.get(self.channel)
        if not value:
            return None
        return dt_util.parse_datetime(value)


class VehicleTracker(CarNetEntity, TrackerEntity):
    """Device tracker for the current or the stored vehicle position."""

    def __init__(self, coordinator: Any, channel: str = CHANNEL_LOCATION_GEO) -> None:
        """Initialize vehicle tracker.

        Args:
            coordinator: Data coordinator
            channel: Location channel, current or stored position
        """
        config = EntityConfig(
            unique_id=channel_unique_id(f"{GROUP_LOCATION}#{channel}"),
            name="Location" if channel == CHANNEL_LOCATION_GEO else "Parking position",
            icon="mdi:car" if channel == CHANNEL_LOCATION_GEO else "mdi:parking",
        )
        super().__init__(coordinator, config)
        self.channel = channel

    @property
    def latitude(self) -> float | None:
        """Return latitude value of the device."""
        position = self._location.get(self.channel)
        return position[0] if position else None

    @property
    def longitude(self) -> float | None:
        """Return longitude value of the device."""
        position = self._location.get(self.channel)
        return position[1] if position else None

    @property
    def source_type(self) -> SourceType:
        """Return the source type of the device."""
        return SourceType.GPS


class DoorLockEntity(CarNetEntity, LockEntity):
    """Remote lock/unlock, requires the security PIN."""

    def __init__(self, coordinator: Any) -> None:
        """Initialize lock entity."""
        config = EntityConfig(unique_id="control_lock", name="Door lock", icon="mdi:lock")
        super().__init__(coordinator, config)

    @property
    def is_locked(self) -> bool | None:
        """Return lock state."""
        return self._controls.get(CONTROL_LOCK)

    async def async_lock(self, **kwargs: Any) -> None:
        """Lock the vehicle."""
        await self.coordinator.async_lock(True)

    async def async_unlock(self, **kwargs: Any) -> None:
        """Unlock the vehicle."""
        await self.coordinator.async_lock(False)


class ControlSwitch(CarNetEntity, SwitchEntity):
    """Switch for a climate control action.

    CarNet does not report these states back, the switch shows the last
    requested state.
    """

    _attr_assumed_state = True

    def __init__(self, coordinator: Any, control: str, name: str, icon: str) -> None:
        """Initialize control switch.

        Args:
            coordinator: Data coordinator
            control: Control channel name
            name: Entity name
            icon: Icon name
        """
        config = EntityConfig(unique_id=f"control_{control.lower()}", name=name, icon=icon)
        super().__init__(coordinator, config)
        self.control = control

    @property
    def is_on(self) -> bool | None:
        """Return the last requested state."""
        return self._controls.get(self.control)

    async def _async_set(self, on: bool) -> None:
        if self.control == CONTROL_CLIMA:
            await self.coordinator.async_set_climatisation(on)
        elif self.control == CONTROL_WINHEAT:
            await self.coordinator.async_set_window_heating(on)
        elif self.control == CONTROL_PREHEAT:
            await self.coordinator.async_set_pre_heating(on)

    async def async_turn_on(self, **kwargs: Any) -> None:
        """Start the action."""
        await self._async_set(True)

    async def async_turn_off(self, **kwargs: Any) -> None:
        """Stop the action."""
        await self._async_set(False)


def control_switches(coordinator: Any) -> list[ControlSwitch]:
    """Create the climate control switches."""
    return [
        ControlSwitch(coordinator, CONTROL_CLIMA, "Climatisation", "mdi:air-conditioner"),
        ControlSwitch(coordinator, CONTROL_WINHEAT, "Window heating", "mdi:car-defrost-front"),
        ControlSwitch(coordinator, CONTROL_PREHEAT, "Pre-heating", "mdi:radiator"),
    ]


class RefreshButton(CarNetEntity, ButtonEntity):
    """Button entity to manually refresh vehicle data."""

    _attr_entity_category = EntityCategory.DIAGNOSTIC

    def __init__(self, coordinator: Any) -> None:
        """Initialize refresh button."""
        config = EntityConfig(unique_id="control_update", name="Refresh data", icon="mdi:refresh")
        super().__init__(coordinator, config)

    async def async_press(self) -> None:
        """Refresh vehicle data immediately."""
        _LOGGER.info("Manual refresh requested for vehicle %s", self.vin)
        await self.coordinator.async_request_refresh()


def location_entities(coordinator: Any) -> list[LocationTimeSensor]:
    """Create the location timestamp sensors."""
    return [
        LocationTimeSensor(coordinator, CHANNEL_LOCATION_TIME, "mdi:clock-outline"),
        LocationTimeSensor(coordinator, CHANNEL_LOCATION_PARK, "mdi:car-clock"),
    ]


def trackers(coordinator: Any) -> list[VehicleTracker]:
    """Create the current and stored position trackers."""
    return [
        VehicleTracker(coordinator, CHANNEL_LOCATION_GEO),
        VehicleTracker(coordinator, CHANNEL_STORED_POS),
    ]
