"""VW/Audi CarNet Home Assistant Integration.

This integration reads vehicle status, position and maintenance data from the
CarNet backend and exposes the remote lock and climate controls.

Configuration via configuration.yaml:
    carnet:
      username: your_carnet_user
      password: your_carnet_password
      brand: Audi
      country: DE
      vehicles:
        - vin: WAUZZZF21LN046449
          name: My Car
          spin: "1234"
          scan_interval: 900
"""

from __future__ import annotations

from datetime import timedelta
import logging

import voluptuous as vol

from homeassistant.config_entries import ConfigEntry
from homeassistant.const import (
    CONF_NAME,
    CONF_PASSWORD,
    CONF_SCAN_INTERVAL,
    CONF_USERNAME,
    Platform,
)
from homeassistant.core import HomeAssistant
from homeassistant.exceptions import ConfigEntryAuthFailed, ConfigEntryNotReady
from homeassistant.helpers import config_validation as cv
from homeassistant.helpers.aiohttp_client import async_get_clientsession
from homeassistant.helpers.typing import ConfigType

from .api import (
    CarNetAccountConfig,
    CarNetApiClient,
    CarNetAuthenticationError,
    CarNetConnectionError,
    CarNetError,
)
from .const import (
    BRAND_AUDI,
    BRANDS,
    CONF_BRAND,
    CONF_COUNTRY,
    CONF_SPIN,
    CONF_VIN,
    DEFAULT_COUNTRY,
    DEFAULT_SCAN_INTERVAL,
    DOMAIN,
    MIN_SCAN_INTERVAL,
)
from .coordinator import CarNetDataCoordinator

_LOGGER = logging.getLogger(__name__)

PLATFORMS: list[Platform] = [
    Platform.BINARY_SENSOR,
    Platform.BUTTON,
    Platform.DEVICE_TRACKER,
    Platform.LOCK,
    Platform.SENSOR,
    Platform.SWITCH,
]

CONFIG_SCHEMA = vol.Schema(
    {
        DOMAIN: vol.Schema(
            {
                vol.Required(CONF_USERNAME): cv.string,
                vol.Required(CONF_PASSWORD): cv.string,
                vol.Optional(CONF_BRAND, default=BRAND_AUDI): vol.In(BRANDS),
                vol.Optional(CONF_COUNTRY, default=DEFAULT_COUNTRY): cv.string,
                vol.Optional("vehicles", default=[]): [
                    {
                        vol.Required(CONF_VIN): cv.string,
                        vol.Optional(CONF_NAME): cv.string,
                        vol.Optional(CONF_SPIN): cv.string,
                        vol.Optional(
                            CONF_SCAN_INTERVAL, default=DEFAULT_SCAN_INTERVAL
                        ): vol.All(cv.positive_int, vol.Range(min=MIN_SCAN_INTERVAL)),
                    }
                ],
            }
        )
    },
    extra=vol.ALLOW_EXTRA,
)


def account_config_from_entry(data: dict) -> CarNetAccountConfig:
    """Build the API account configuration from config entry data."""
    return CarNetAccountConfig(
        user=data[CONF_USERNAME],
        password=data[CONF_PASSWORD],
        brand=data.get(CONF_BRAND, BRAND_AUDI),
        country=data.get(CONF_COUNTRY, DEFAULT_COUNTRY),
        vin=data.get(CONF_VIN, "").upper(),
        spin=data.get(CONF_SPIN) or "",
    )


async def async_setup(hass: HomeAssistant, config: ConfigType) -> bool:
    """Set up CarNet from configuration.yaml.

    YAML configuration is imported as one config entry per vehicle.

    Args:
        hass: Home Assistant instance
        config: Configuration dictionary

    Returns:
        True if setup was successful
    """
    if DOMAIN not in config:
        return True

    carnet_config = config[DOMAIN]
    for vehicle in carnet_config.get("vehicles", []):
        entry_data = {
            CONF_USERNAME: carnet_config[CONF_USERNAME],
            CONF_PASSWORD: carnet_config[CONF_PASSWORD],
            CONF_BRAND: carnet_config.get(CONF_BRAND, BRAND_AUDI),
            CONF_COUNTRY: carnet_config.get(CONF_COUNTRY, DEFAULT_COUNTRY),
            CONF_VIN: vehicle[CONF_VIN].upper(),
            CONF_NAME: vehicle.get(CONF_NAME, vehicle[CONF_VIN].upper()),
            CONF_SPIN: vehicle.get(CONF_SPIN, ""),
            CONF_SCAN_INTERVAL: vehicle.get(CONF_SCAN_INTERVAL, DEFAULT_SCAN_INTERVAL),
        }
        hass.async_create_task(
            hass.config_entries.flow.async_init(
                DOMAIN,
                context={"source": "import"},
                data=entry_data,
            )
        )

    return True


async def async_setup_entry(hass: HomeAssistant, entry: ConfigEntry) -> bool:
    """Set up a CarNet vehicle from a config entry.

    Args:
        hass: Home Assistant instance
        entry: Config entry

    Returns:
        True if setup was successful
    """
    api_client = CarNetApiClient(
        account_config_from_entry(entry.data),
        session=async_get_clientsession(hass),
    )

    try:
        await api_client.connect()
    except CarNetAuthenticationError as err:
        raise ConfigEntryAuthFailed(f"CarNet authentication failed: {err}") from err
    except CarNetConnectionError as err:
        raise ConfigEntryNotReady(f"Unable to connect to CarNet: {err}") from err
    except CarNetError as err:
        raise ConfigEntryNotReady(f"CarNet API error: {err}") from err
    _LOGGER.info("Connected to CarNet as %s", entry.data[CONF_USERNAME])

    scan_interval = entry.options.get(
        CONF_SCAN_INTERVAL,
        entry.data.get(CONF_SCAN_INTERVAL, DEFAULT_SCAN_INTERVAL),
    )
    coordinator = CarNetDataCoordinator(
        hass,
        api_client,
        entry.data[CONF_VIN],
        scan_interval=scan_interval,
    )

    entry.runtime_data = {
        "coordinator": coordinator,
        "api_client": api_client,
    }

    await coordinator.async_config_entry_first_refresh()

    await hass.config_entries.async_forward_entry_setups(entry, PLATFORMS)

    entry.async_on_unload(entry.add_update_listener(async_update_options))
    return True


async def async_update_options(hass: HomeAssistant, entry: ConfigEntry) -> None:
    """Apply a changed scan interval.

    Args:
        hass: Home Assistant instance
        entry: Config entry with updated options
    """
    coordinator: CarNetDataCoordinator = entry.runtime_data["coordinator"]

    new_scan_interval = entry.options.get(
        CONF_SCAN_INTERVAL,
        entry.data.get(CONF_SCAN_INTERVAL, DEFAULT_SCAN_INTERVAL),
    )

    if (
        coordinator.update_interval
        and coordinator.update_interval.total_seconds() != new_scan_interval
    ):
        _LOGGER.debug("%s: New scan interval %ss", coordinator.vin, new_scan_interval)
        coordinator.update_interval = timedelta(seconds=new_scan_interval)
        await coordinator.async_request_refresh()


async def async_unload_entry(hass: HomeAssistant, entry: ConfigEntry) -> bool:
    """Unload a config entry.

    Args:
        hass: Home Assistant instance
        entry: Config entry to unload

    Returns:
        True if unload was successful
    """
    unload_ok = await hass.config_entries.async_unload_platforms(entry, PLATFORMS)

    if unload_ok:
        api_client: CarNetApiClient = entry.runtime_data["api_client"]
        await api_client.disconnect()

    return unload_ok
