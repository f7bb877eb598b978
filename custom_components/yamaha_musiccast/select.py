"""Select entities for MusicCast integration."""

from homeassistant.config_entries import ConfigEntry
from homeassistant.core import HomeAssistant
from homeassistant.helpers.entity_platform import AddEntitiesCallback

from .coordinator import MusicCastDataCoordinator
from .entities import LinkServerSelect, PresetSelect, SleepSelect


async def async_setup_entry(
    hass: HomeAssistant,
    config_entry: ConfigEntry,
    async_add_entities: AddEntitiesCallback,
) -> None:
    """Set up preset, link server and sleep timer selects for every zone."""
    coordinator: MusicCastDataCoordinator = config_entry.runtime_data["coordinator"]

    entities = []
    for zone in coordinator.device.zone_ids:
        entities.extend(
            [
                PresetSelect(coordinator, zone),
                LinkServerSelect(coordinator, zone),
                SleepSelect(coordinator, zone),
            ]
        )
    async_add_entities(entities)
