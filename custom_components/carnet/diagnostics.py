"""Diagnostics support for CarNet integration."""

from __future__ import annotations

from dataclasses import asdict
from typing import Any

from homeassistant.components.diagnostics import async_redact_data
from homeassistant.config_entries import ConfigEntry
from homeassistant.const import CONF_PASSWORD, CONF_USERNAME
from homeassistant.core import HomeAssistant

from .const import CONF_SPIN, CONF_VIN
from .coordinator import CarNetDataCoordinator

TO_REDACT = {
    CONF_PASSWORD,
    CONF_USERNAME,
    CONF_SPIN,
    CONF_VIN,
    "location",
    "user_id",
    "userId",
    "vehicle_users",
    "latitude",
    "longitude",
}


async def async_get_config_entry_diagnostics(
    hass: HomeAssistant, entry: ConfigEntry
) -> dict[str, Any]:
    """Return diagnostics for a config entry.

    Includes the additional data sets (rights, timers, trips, charger, ...)
    which are not used for entities but help with unsupported vehicles.

    Args:
        hass: Home Assistant instance
        entry: Config entry

    Returns:
        Dictionary with diagnostic data
    """
    coordinator: CarNetDataCoordinator = entry.runtime_data["coordinator"]
    vehicle = coordinator.vehicle

    return {
        "config_entry": {
            "entry_id": entry.entry_id,
            "version": entry.version,
            "domain": entry.domain,
            "title": entry.title,
            "data": async_redact_data(dict(entry.data), TO_REDACT),
            "options": dict(entry.options),
        },
        "coordinator": {
            "update_interval": str(coordinator.update_interval),
            "last_update_success": coordinator.last_update_success,
            "initialized": vehicle.initialized,
            "home_region_url": coordinator.api_client.config.home_region_url,
        },
        "vehicle": async_redact_data(
            {
                "details": asdict(vehicle.details),
                "services": asdict(vehicle.services),
                "channels": {key: asdict(definition) for key, definition in vehicle.channels.items()},
                "values": vehicle.values,
                "aggregate": asdict(vehicle.aggregate),
                "location": vehicle.location,
            },
            TO_REDACT,
        ),
        "additional_data": async_redact_data(
            await vehicle.async_get_additional_data(), TO_REDACT
        ),
    }
