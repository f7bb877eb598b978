"""Sensor entities for CarNet integration."""

import logging

from homeassistant.config_entries import ConfigEntry
from homeassistant.core import HomeAssistant
from homeassistant.helpers.entity_platform import AddEntitiesCallback

from .const import ITEM_SWITCH
from .coordinator import CarNetDataCoordinator
from .entities import ChannelSensor, location_entities

_LOGGER = logging.getLogger(__name__)


async def async_setup_entry(
    hass: HomeAssistant,
    config_entry: ConfigEntry,
    async_add_entities: AddEntitiesCallback,
) -> None:
    """Set up sensor entities for the discovered number and string channels."""
    coordinator: CarNetDataCoordinator = config_entry.runtime_data["coordinator"]

    entities = [
        ChannelSensor(coordinator, definition)
        for definition in coordinator.vehicle.channels.values()
        if definition.item_type != ITEM_SWITCH
    ]
    entities.extend(location_entities(coordinator))

    _LOGGER.debug("%s: Adding %d sensors", coordinator.vin, len(entities))
    async_add_entities(entities)
