"""Button entities for MusicCast integration."""

from homeassistant.config_entries import ConfigEntry
from homeassistant.core import HomeAssistant
from homeassistant.helpers.entity_platform import AddEntitiesCallback

from .coordinator import MusicCastDataCoordinator
from .entities import UnlinkServerButton


async def async_setup_entry(
    hass: HomeAssistant,
    config_entry: ConfigEntry,
    async_add_entities: AddEntitiesCallback,
) -> None:
    """Set up button entities."""
    coordinator: MusicCastDataCoordinator = config_entry.runtime_data["coordinator"]
    async_add_entities([UnlinkServerButton(coordinator)])
