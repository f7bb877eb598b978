"""MusicCast data coordinator.

The device pushes its changes over UDP, so the coordinator does not poll.
Events from the shared listener are applied to the device and published to
the entities; commands refresh the entities with the optimistic state.
"""

from __future__ import annotations

from collections.abc import Awaitable
import logging
from typing import Any

from homeassistant.core import HomeAssistant, callback
from homeassistant.exceptions import HomeAssistantError
from homeassistant.helpers.update_coordinator import DataUpdateCoordinator, UpdateFailed

from .api import MusicCastError
from .device import MusicCastDevice
from .models import MusicCastUdpMessage

_LOGGER = logging.getLogger(__name__)


class MusicCastDataCoordinator(DataUpdateCoordinator):
    """Coordinator for one MusicCast device."""

    def __init__(self, hass: HomeAssistant, device: MusicCastDevice) -> None:
        """Initialize coordinator.

        Args:
            hass: Home Assistant instance
            device: Device state and commands
        """
        super().__init__(
            hass,
            _LOGGER,
            name=f"MusicCast {device.host}",
            update_interval=None,
        )
        self.device = device

    async def _async_update_data(self) -> dict[str, Any]:
        """Read the complete device state.

        Runs the device setup first if it did not complete yet.

        Raises:
            UpdateFailed: If the device cannot be reached
        """
        try:
            if not self.device.device_id:
                await self.device.async_setup()
            else:
                await self.device.async_refresh()
        except MusicCastError as err:
            raise UpdateFailed(f"MusicCast update failed: {err}") from err
        return self.device.as_dict()

    @callback
    def handle_event(self, message: MusicCastUdpMessage, track: str) -> None:
        """Receive an event from the UDP listener."""
        _LOGGER.debug("%s: %s: Processing event", self.device.host, track)
        self.hass.async_create_task(self._async_process_event(message))

    async def _async_process_event(self, message: MusicCastUdpMessage) -> None:
        try:
            await self.device.async_process_event(message)
        except MusicCastError as err:
            _LOGGER.warning("%s: Processing event failed: %s", self.device.host, err)
        self.async_set_updated_data(self.device.as_dict())

    async def async_run(self, name: str, action: Awaitable[Any]) -> None:
        """Run a device command and publish the new state.

        Raises:
            HomeAssistantError: If the device rejected the command
        """
        try:
            await action
        except MusicCastError as err:
            _LOGGER.error("%s: %s failed: %s", self.device.host, name, err)
            raise HomeAssistantError(f"MusicCast {name} failed: {err}") from err
        self.async_set_updated_data(self.device.as_dict())
