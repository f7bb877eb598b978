"""CarNet data coordinator.

Polls the vehicle status and position at a fixed interval and runs the
remote actions, each followed by a refresh.
"""

from __future__ import annotations

from datetime import timedelta
import logging
from typing import Any

from homeassistant.core import HomeAssistant
from homeassistant.exceptions import ConfigEntryAuthFailed, HomeAssistantError
from homeassistant.helpers.update_coordinator import DataUpdateCoordinator, UpdateFailed

from .api import CarNetApiClient, CarNetAuthenticationError, CarNetError
from .const import DEFAULT_SCAN_INTERVAL
from .status import get_error_message, is_configuration_pending
from .vehicle import CarNetVehicle

_LOGGER = logging.getLogger(__name__)


class CarNetDataCoordinator(DataUpdateCoordinator):
    """Coordinator to manage CarNet data fetching and vehicle actions."""

    def __init__(
        self,
        hass: HomeAssistant,
        api_client: CarNetApiClient,
        vin: str,
        scan_interval: int = DEFAULT_SCAN_INTERVAL,
    ) -> None:
        """Initialize coordinator.

        Args:
            hass: Home Assistant instance
            api_client: CarNet API client
            vin: Vehicle identification number
            scan_interval: Update interval in seconds
        """
        super().__init__(
            hass,
            _LOGGER,
            name=f"CarNet {vin}",
            update_interval=timedelta(seconds=scan_interval),
        )
        self.api_client = api_client
        self.vehicle = CarNetVehicle(api_client, vin)
        self.vin = self.vehicle.vin

    async def _async_update_data(self) -> dict[str, Any]:
        """Fetch vehicle status and position.

        Raises:
            ConfigEntryAuthFailed: If the credentials were rejected
            UpdateFailed: If the update failed
        """
        try:
            await self.vehicle.async_update()
        except CarNetAuthenticationError as err:
            raise ConfigEntryAuthFailed(f"CarNet authentication failed: {err}") from err
        except CarNetError as err:
            error = err.api_result.api_error
            if is_configuration_pending(error):
                message = get_error_message(error)
                _LOGGER.warning("%s: Configuration pending: %s", self.vin, message)
                raise UpdateFailed(f"Configuration pending: {message}") from err
            if error.is_error():
                _LOGGER.info("%s: API call failed: %s", self.vin, error)
                if error.reason:
                    _LOGGER.debug("%s: %s", self.vin, error.reason)
            raise UpdateFailed(f"CarNet update failed: {err}") from err

        return self.vehicle.as_dict()

    async def _async_run_action(self, name: str, action) -> None:
        try:
            await action
        except CarNetError as err:
            _LOGGER.error("%s: %s failed: %s", self.vin, name, err)
            raise HomeAssistantError(f"CarNet {name} failed: {err}") from err
        await self.async_request_refresh()

    async def async_lock(self, lock: bool) -> None:
        """Lock or unlock the vehicle."""
        await self._async_run_action(
            "lock" if lock else "unlock", self.vehicle.async_lock(lock)
        )

    async def async_set_climatisation(self, on: bool) -> None:
        """Start or stop climatisation."""
        await self._async_run_action(
            "climatisation", self.vehicle.async_set_climatisation(on)
        )

    async def async_set_window_heating(self, on: bool) -> None:
        """Start or stop window heating."""
        await self._async_run_action(
            "window heating", self.vehicle.async_set_window_heating(on)
        )

    async def async_set_pre_heating(self, on: bool) -> None:
        """Start or stop the auxiliary heater."""
        await self._async_run_action(
            "pre-heating", self.vehicle.async_set_pre_heating(on)
        )
