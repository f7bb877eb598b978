"""Lock entity for CarNet integration."""

from homeassistant.config_entries import ConfigEntry
from homeassistant.core import HomeAssistant
from homeassistant.helpers.entity_platform import AddEntitiesCallback

from .coordinator import CarNetDataCoordinator
from .entities import DoorLockEntity


async def async_setup_entry(
    hass: HomeAssistant,
    config_entry: ConfigEntry,
    async_add_entities: AddEntitiesCallback,
) -> None:
    """Set up the door lock."""
    coordinator: CarNetDataCoordinator = config_entry.runtime_data["coordinator"]
    async_add_entities([DoorLockEntity(coordinator)])
