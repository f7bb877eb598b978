"""Number entities for MusicCast integration."""

from homeassistant.config_entries import ConfigEntry
from homeassistant.core import HomeAssistant
from homeassistant.helpers.entity_platform import AddEntitiesCallback

from .coordinator import MusicCastDataCoordinator
from .entities import VolumeNumber


async def async_setup_entry(
    hass: HomeAssistant,
    config_entry: ConfigEntry,
    async_add_entities: AddEntitiesCallback,
) -> None:
    """Set up the absolute volume of every zone."""
    coordinator: MusicCastDataCoordinator = config_entry.runtime_data["coordinator"]
    async_add_entities(
        VolumeNumber(coordinator, zone) for zone in coordinator.device.zone_ids
    )
