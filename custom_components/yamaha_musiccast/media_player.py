"""Media player entities for MusicCast integration."""

from homeassistant.config_entries import ConfigEntry
from homeassistant.core import HomeAssistant
from homeassistant.helpers.entity_platform import AddEntitiesCallback

from .coordinator import MusicCastDataCoordinator
from .entities import MusicCastMediaPlayer


async def async_setup_entry(
    hass: HomeAssistant,
    config_entry: ConfigEntry,
    async_add_entities: AddEntitiesCallback,
) -> None:
    """Set up one media player per zone."""
    coordinator: MusicCastDataCoordinator = config_entry.runtime_data["coordinator"]
    async_add_entities(
        MusicCastMediaPlayer(coordinator, zone) for zone in coordinator.device.zone_ids
    )
