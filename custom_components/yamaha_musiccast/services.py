"""Services for the MusicCast integration.

Scenes have no entity of their own, they are recalled with a service call.
"""

from __future__ import annotations

import logging

import voluptuous as vol

from homeassistant.const import CONF_HOST
from homeassistant.core import HomeAssistant, ServiceCall, callback
from homeassistant.exceptions import ServiceValidationError
from homeassistant.helpers import config_validation as cv

from .const import ATTR_SCENE, DOMAIN, SERVICE_RECALL_SCENE, ZONE_MAIN, ZONES

_LOGGER = logging.getLogger(__name__)

ATTR_ZONE = "zone"

RECALL_SCENE_SCHEMA = vol.Schema(
    {
        vol.Required(CONF_HOST): cv.string,
        vol.Optional(ATTR_ZONE, default=ZONE_MAIN): vol.In(ZONES),
        vol.Required(ATTR_SCENE): vol.All(vol.Coerce(int), vol.Range(min=1, max=8)),
    }
)


def _get_coordinator(hass: HomeAssistant, host: str):
    """Get coordinator for the device with the given host."""
    for entry in hass.config_entries.async_loaded_entries(DOMAIN):
        runtime_data = getattr(entry, "runtime_data", None)
        if not isinstance(runtime_data, dict):
            continue
        coordinator = runtime_data.get("coordinator")
        if coordinator and coordinator.device.host == host:
            return coordinator

    return None


async def async_recall_scene(hass: HomeAssistant, call: ServiceCall) -> None:
    """Handle recall_scene service call.

    Args:
        hass: Home Assistant instance
        call: Service call data containing host, zone and scene

    Raises:
        ServiceValidationError: If the device or zone is unknown
    """
    host = call.data[CONF_HOST]
    zone = call.data[ATTR_ZONE]
    scene = call.data[ATTR_SCENE]

    coordinator = _get_coordinator(hass, host)
    if not coordinator:
        raise ServiceValidationError(f"MusicCast device {host} not found")
    if zone not in coordinator.device.zone_ids:
        raise ServiceValidationError(f"MusicCast device {host} has no zone {zone}")

    _LOGGER.info("Recalling scene %d on %s (%s)", scene, host, zone)
    await coordinator.async_run(
        "recall scene", coordinator.device.async_recall_scene(zone, scene)
    )


@callback
def async_setup_services(hass: HomeAssistant) -> None:
    """Register the MusicCast services."""
    if hass.services.has_service(DOMAIN, SERVICE_RECALL_SCENE):
        return

    async def _recall_scene(call: ServiceCall) -> None:
        await async_recall_scene(hass, call)

    hass.services.async_register(
        DOMAIN, SERVICE_RECALL_SCENE, _recall_scene, schema=RECALL_SCENE_SCHEMA
    )
