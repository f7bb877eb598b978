"""Diagnostics support for MusicCast integration."""

from __future__ import annotations

from dataclasses import asdict
from typing import Any

from homeassistant.components.diagnostics import async_redact_data
from homeassistant.config_entries import ConfigEntry
from homeassistant.core import HomeAssistant

from .coordinator import MusicCastDataCoordinator

TO_REDACT = {"device_id", "system_id", "group_id"}


async def async_get_config_entry_diagnostics(
    hass: HomeAssistant, entry: ConfigEntry
) -> dict[str, Any]:
    """Return diagnostics for a config entry."""
    coordinator: MusicCastDataCoordinator = entry.runtime_data["coordinator"]
    device = coordinator.device

    return {
        "config_entry": {
            "entry_id": entry.entry_id,
            "title": entry.title,
            "data": dict(entry.data),
            "options": dict(entry.options),
        },
        "coordinator": {
            "last_update_success": coordinator.last_update_success,
            "keep_alive_running": device.keep_alive_running,
        },
        "device_info": async_redact_data(asdict(device.info), TO_REDACT),
        "features": asdict(device.features),
        "state": async_redact_data(device.as_dict(), TO_REDACT),
    }
