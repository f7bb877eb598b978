"""Yamaha MusicCast Home Assistant Integration.

Controls MusicCast speakers and receivers over the Yamaha Extended Control
API. State changes are pushed by the devices over UDP; one listener is
shared by all configured devices.

Configuration via configuration.yaml:
    yamaha_musiccast:
      devices:
        - host: 192.168.1.20
          name: Living Room
          sync_volume: true
"""

from __future__ import annotations

from functools import partial
import logging

import voluptuous as vol

from homeassistant.config_entries import ConfigEntry
from homeassistant.const import CONF_HOST, CONF_NAME, Platform
from homeassistant.core import HomeAssistant
from homeassistant.exceptions import ConfigEntryNotReady
from homeassistant.helpers import config_validation as cv
from homeassistant.helpers.aiohttp_client import async_get_clientsession
from homeassistant.helpers.typing import ConfigType

from .api import MusicCastApiClient
from .const import CONF_SYNC_VOLUME, DEFAULT_SYNC_VOLUME, DOMAIN
from .coordinator import MusicCastDataCoordinator
from .device import MusicCastDevice
from .listener import MusicCastUdpListener
from .services import async_setup_services

_LOGGER = logging.getLogger(__name__)

PLATFORMS: list[Platform] = [
    Platform.BUTTON,
    Platform.MEDIA_PLAYER,
    Platform.NUMBER,
    Platform.SELECT,
]

CONFIG_SCHEMA = vol.Schema(
    {
        DOMAIN: vol.Schema(
            {
                vol.Optional("devices", default=[]): [
                    {
                        vol.Required(CONF_HOST): cv.string,
                        vol.Optional(CONF_NAME): cv.string,
                        vol.Optional(
                            CONF_SYNC_VOLUME, default=DEFAULT_SYNC_VOLUME
                        ): cv.boolean,
                    }
                ],
            }
        )
    },
    extra=vol.ALLOW_EXTRA,
)


def _get_listener(hass: HomeAssistant) -> MusicCastUdpListener:
    """Return the UDP listener shared by all entries."""
    domain_data = hass.data.setdefault(DOMAIN, {})
    if "listener" not in domain_data:
        domain_data["listener"] = MusicCastUdpListener()
    return domain_data["listener"]


def _known_devices(hass: HomeAssistant) -> list[tuple[str, str]]:
    """Return (label, host) of every configured device."""
    return [
        (entry.title, entry.data[CONF_HOST])
        for entry in hass.config_entries.async_entries(DOMAIN)
    ]


async def async_setup(hass: HomeAssistant, config: ConfigType) -> bool:
    """Set up MusicCast from configuration.yaml.

    Args:
        hass: Home Assistant instance
        config: Configuration dictionary

    Returns:
        True if setup was successful
    """
    async_setup_services(hass)

    if DOMAIN not in config:
        return True

    for device in config[DOMAIN].get("devices", []):
        hass.async_create_task(
            hass.config_entries.flow.async_init(
                DOMAIN,
                context={"source": "import"},
                data=dict(device),
            )
        )

    return True


async def async_setup_entry(hass: HomeAssistant, entry: ConfigEntry) -> bool:
    """Set up a MusicCast device from a config entry.

    Args:
        hass: Home Assistant instance
        entry: Config entry

    Returns:
        True if setup was successful
    """
    host = entry.data[CONF_HOST]
    api_client = MusicCastApiClient(host, session=async_get_clientsession(hass))
    device = MusicCastDevice(
        api_client,
        entry.title,
        sync_volume=entry.options.get(
            CONF_SYNC_VOLUME, entry.data.get(CONF_SYNC_VOLUME, DEFAULT_SYNC_VOLUME)
        ),
        peers=lambda: _known_devices(hass),
    )
    coordinator = MusicCastDataCoordinator(hass, device)

    await coordinator.async_config_entry_first_refresh()

    listener = _get_listener(hass)
    try:
        await listener.async_start()
    except OSError as err:
        raise ConfigEntryNotReady(
            f"Unable to listen for MusicCast events on port {listener.port}: {err}"
        ) from err

    # Also runs when the setup below fails
    entry.async_on_unload(partial(async_release_device, listener, device))

    entry.runtime_data = {
        "coordinator": coordinator,
        "api_client": api_client,
    }

    await hass.config_entries.async_forward_entry_setups(entry, PLATFORMS)

    # Only devices that finished setup receive events
    listener.register(device.device_id, coordinator.handle_event)
    device.start_keep_alive()

    entry.async_on_unload(entry.add_update_listener(async_update_options))
    return True


async def async_update_options(hass: HomeAssistant, entry: ConfigEntry) -> None:
    """Apply a changed volume sync option.

    Args:
        hass: Home Assistant instance
        entry: Config entry with updated options
    """
    coordinator: MusicCastDataCoordinator = entry.runtime_data["coordinator"]
    coordinator.device.sync_volume = entry.options.get(
        CONF_SYNC_VOLUME, DEFAULT_SYNC_VOLUME
    )
    _LOGGER.debug(
        "%s: Volume sync %s",
        coordinator.device.host,
        "enabled" if coordinator.device.sync_volume else "disabled",
    )


async def async_unload_entry(hass: HomeAssistant, entry: ConfigEntry) -> bool:
    """Unload a config entry.

    Args:
        hass: Home Assistant instance
        entry: Config entry to unload

    Returns:
        True if unload was successful
    """
    return await hass.config_entries.async_unload_platforms(entry, PLATFORMS)


async def async_release_device(
    listener: MusicCastUdpListener, device: MusicCastDevice
) -> None:
    """Stop routing events to a device and its keep alive.

    The listener is closed with the last device.
    """
    listener.unregister(device.device_id)
    await device.stop_keep_alive()
    if not listener.device_ids:
        await listener.async_stop()
