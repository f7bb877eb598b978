"""Binary sensor entities for CarNet integration."""

import logging

from homeassistant.config_entries import ConfigEntry
from homeassistant.core import HomeAssistant
from homeassistant.helpers.entity_platform import AddEntitiesCallback

from .const import ITEM_SWITCH
from .coordinator import CarNetDataCoordinator
from .entities import ChannelBinarySensor, aggregate_sensors

_LOGGER = logging.getLogger(__name__)


async def async_setup_entry(
    hass: HomeAssistant,
    config_entry: ConfigEntry,
    async_add_entities: AddEntitiesCallback,
) -> None:
    """Set up binary sensor entities."""
    coordinator: CarNetDataCoordinator = config_entry.runtime_data["coordinator"]

    # Aggregates are always available, switch channels only if reported
    entities = aggregate_sensors(coordinator)
    entities.extend(
        ChannelBinarySensor(coordinator, definition)
        for definition in coordinator.vehicle.channels.values()
        if definition.item_type == ITEM_SWITCH
    )

    async_add_entities(entities)
