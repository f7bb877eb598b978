"""CarNet vehicle state.

Holds everything known about one vehicle and implements the one time
initialization, the periodic status/position update and the remote actions
on top of ``CarNetApiClient``.
"""

from __future__ import annotations

import asyncio
import logging
from typing import Any

from .api import HTTP_NO_CONTENT, CarNetApiClient, CarNetApiError, CarNetError
from .channels import CarNetIdMapper, ChannelIdMapEntry
from .const import (
    CHANNEL_LOCATION_GEO,
    CHANNEL_LOCATION_PARK,
    CHANNEL_LOCATION_TIME,
    CHANNEL_STORED_POS,
    CONTROL_CLIMA,
    CONTROL_LOCK,
    CONTROL_PREHEAT,
    CONTROL_WINHEAT,
)
from .models import (
    CarNetServiceList,
    CarNetVehicleDetails,
    CarNetVehiclePosition,
    CarNetVehicleStatus,
)
from .status import CarNetStatusAggregate, discover_channels, process_status

_LOGGER = logging.getLogger(__name__)


class CarNetVehicle:
    """State and behavior of a single vehicle."""

    def __init__(
        self,
        api: CarNetApiClient,
        vin: str,
        mapper: CarNetIdMapper | None = None,
    ) -> None:
        """Initialize vehicle.

        Args:
            api: CarNet API client
            vin: Vehicle identification number
            mapper: Field id mapper, the built-in table if None
        """
        self.api = api
        self.vin = vin.upper()
        self.mapper = mapper or CarNetIdMapper()
        self.initialized = False
        self.details = CarNetVehicleDetails()
        self.services = CarNetServiceList()
        self.channels: dict[str, ChannelIdMapEntry] = {}
        self.values: dict[str, Any] = {}
        self.aggregate = CarNetStatusAggregate()
        self.location: dict[str, Any] = self._empty_location()
        self.controls: dict[str, bool | None] = {
            CONTROL_LOCK: None,
            CONTROL_CLIMA: None,
            CONTROL_WINHEAT: None,
            CONTROL_PREHEAT: None,
        }

    @staticmethod
    def _empty_location() -> dict[str, Any]:
        return {
            CHANNEL_LOCATION_GEO: None,
            CHANNEL_STORED_POS: None,
            CHANNEL_LOCATION_TIME: None,
            CHANNEL_LOCATION_PARK: None,
        }

    async def async_initialize(self) -> None:
        """Read home region, user and details, then discover the channels.

        Raises:
            CarNetError: If any of the required calls fails
        """
        _LOGGER.debug("%s: Initializing vehicle", self.vin)
        self.api.config.vin = self.vin
        self.api.config.home_region_url = await self.api.get_home_region_url(self.vin)

        self.services = await self.api.get_services(self.vin)
        self.api.config.user_id = self.services.user_id or ""
        _LOGGER.debug(
            "%s: Active userId = %s, role = %s (securityLevel %s), status = %s",
            self.vin,
            self.api.config.user_id,
            self.services.role,
            self.services.security_level,
            self.services.status,
        )

        try:
            self.details = await self.api.get_vehicle_details(self.vin)
        except CarNetApiError as err:
            # Not every vehicle/market provides carport data
            _LOGGER.debug("%s: Vehicle details not available: %s", self.vin, err)

        status = await self.api.get_vehicle_status(self.vin)
        self.channels = discover_channels(status, self.mapper)
        _LOGGER.info("%s: %d channels discovered", self.vin, len(self.channels))

        self._apply_status(status)
        await self.async_update_location()
        self.initialized = True

    async def async_update(self) -> None:
        """Refresh status, aggregates and location.

        Runs the initialization first if it did not complete yet.
        """
        if not self.initialized:
            await self.async_initialize()
            return

        _LOGGER.debug("%s: Get vehicle status", self.vin)
        status = await self.api.get_vehicle_status(self.vin)
        self._apply_status(status)
        await self.async_update_location()

    def _apply_status(self, status: CarNetVehicleStatus) -> None:
        update = process_status(status, self.mapper, self.channels)
        self.values.update(update.values)
        self.aggregate = update.aggregate
        self.controls[CONTROL_LOCK] = update.aggregate.vehicle_locked

    async def async_update_location(self) -> None:
        """Refresh stored and current position.

        HTTP 204 means the position is not available, location values are
        cleared and the update continues. Other errors are raised.
        """
        try:
            _LOGGER.debug("%s: Get vehicle position", self.vin)
            stored = await self.api.get_stored_position(self.vin)
            self.location[CHANNEL_STORED_POS] = self._coordinates(stored)

            position = await self.api.get_vehicle_position(self.vin)
            self.location[CHANNEL_LOCATION_GEO] = self._coordinates(position)
            self.location[CHANNEL_LOCATION_TIME] = position.car_sent_time
            self.location[CHANNEL_LOCATION_PARK] = position.parking_time
        except CarNetError as err:
            self.location = self._empty_location()
            if err.api_result.http_code != HTTP_NO_CONTENT:
                raise
            _LOGGER.debug("%s: Position not available", self.vin)

    @staticmethod
    def _coordinates(position: CarNetVehiclePosition) -> tuple[float, float] | None:
        if position.latitude is None or position.longitude is None:
            return None
        return position.latitude, position.longitude

    async def async_lock(self, lock: bool) -> None:
        """Lock or unlock the doors."""
        response = await self.api.lock_door(self.vin, lock)
        _LOGGER.debug("%s: Lock request %s accepted", self.vin, response.request_id)
        self.controls[CONTROL_LOCK] = lock

    async def async_set_climatisation(self, on: bool) -> None:
        """Start or stop climatisation."""
        await self.api.clima_control(self.vin, on)
        self.controls[CONTROL_CLIMA] = on

    async def async_set_window_heating(self, on: bool) -> None:
        """Start or stop window heating."""
        await self.api.control_window_heating(self.vin, on)
        self.controls[CONTROL_WINHEAT] = on

    async def async_set_pre_heating(self, on: bool) -> None:
        """Start or stop the auxiliary heater."""
        await self.api.control_pre_heating(self.vin, on)
        self.controls[CONTROL_PREHEAT] = on

    async def async_get_additional_data(self) -> dict[str, Any]:
        """Fetch the additional data sets (users, rights, timers, trips, ...).

        Failing calls are reported as an error string instead of raising.
        """
        calls = {
            "vehicle_management_info": self.api.get_vehicle_management_info(self.vin),
            "vehicle_data": self.api.get_vehicle_data(self.vin),
            "vehicle_rights": self.api.get_vehicle_rights(self.vin),
            "vehicle_users": self.api.get_vehicle_users(self.vin),
            "climater_timer": self.api.get_climater_timer(self.vin),
            "clima_status": self.api.get_clima_status(self.vin),
            "charger_status": self.api.get_charger_status(self.vin),
            "history": self.api.get_history(self.vin),
            "trip_data_short_term": self.api.get_trip_data(self.vin, "shortTerm"),
            "trip_data_long_term": self.api.get_trip_data(self.vin, "longTerm"),
            "destinations": self.api.get_destinations(self.vin),
            "pois": self.api.get_pois(self.vin),
            "rlu_action_history": self.api.get_rlu_action_history(self.vin),
        }
        results = await asyncio.gather(*calls.values(), return_exceptions=True)

        data: dict[str, Any] = {}
        for name, result in zip(calls, results, strict=True):
            if isinstance(result, CarNetError):
                _LOGGER.debug("%s: Failed to fetch %s: %s", self.vin, name, result)
                data[name] = {"error": str(result)}
            elif isinstance(result, BaseException):
                raise result
            else:
                data[name] = result
        return data

    def as_dict(self) -> dict[str, Any]:
        """Return the vehicle state as coordinator data."""
        return {
            "vin": self.vin,
            "details": self.details,
            "channels": self.channels,
            "values": dict(self.values),
            "aggregate": self.aggregate,
            "location": dict(self.location),
            "controls": dict(self.controls),
        }
