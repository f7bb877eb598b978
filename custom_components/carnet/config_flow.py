"""Config flow for CarNet integration."""

from __future__ import annotations

from collections.abc import Mapping
import logging
from typing import Any

import voluptuous as vol

from homeassistant import config_entries
from homeassistant.config_entries import ConfigFlowResult
from homeassistant.const import (
    CONF_NAME,
    CONF_PASSWORD,
    CONF_SCAN_INTERVAL,
    CONF_USERNAME,
)
from homeassistant.core import callback
from homeassistant.helpers import config_validation as cv
from homeassistant.helpers.aiohttp_client import async_get_clientsession

from . import account_config_from_entry
from .api import CarNetApiClient, CarNetAuthenticationError, CarNetConnectionError, CarNetError
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

_LOGGER = logging.getLogger(__name__)

MAX_SCAN_INTERVAL = 86400


class CarNetConfigFlow(config_entries.ConfigFlow, domain=DOMAIN):
    """Handle a config flow for CarNet."""

    VERSION = 1

    @staticmethod
    @callback
    def async_get_options_flow(
        config_entry: config_entries.ConfigEntry,
    ) -> config_entries.OptionsFlow:
        """Get the options flow for this handler."""
        return CarNetOptionsFlowHandler()

    async def _async_validate(self, data: dict[str, Any]) -> str:
        """Log in and return the VIN to use.

        If no VIN was entered the first vehicle of the account is used.

        Raises:
            CarNetError: If login fails or no vehicle is registered
        """
        client = CarNetApiClient(
            account_config_from_entry(data),
            session=async_get_clientsession(self.hass),
        )
        await client.connect()
        vin = (data.get(CONF_VIN) or "").upper()
        if not vin:
            vehicles = await client.get_vehicles()
            if not vehicles.vehicles:
                raise CarNetError("No vehicle registered for this account")
            vin = vehicles.vehicles[0].upper()
        return vin

    async def async_step_import(
        self, import_data: dict[str, Any]
    ) -> ConfigFlowResult:
        """Handle import from configuration.yaml.

        Args:
            import_data: Data from YAML configuration

        Returns:
            Configuration flow result
        """
        vin = import_data[CONF_VIN]
        _LOGGER.info("Importing CarNet configuration for vehicle %s", vin)

        await self.async_set_unique_id(vin)
        self._abort_if_unique_id_configured()

        # Credentials are validated during async_setup_entry
        return self.async_create_entry(
            title=import_data.get(CONF_NAME) or f"CarNet {vin}",
            data=import_data,
        )

    async def async_step_user(
        self, user_input: dict[str, Any] | None = None
    ) -> ConfigFlowResult:
        """Handle a user-initiated config flow.

        Args:
            user_input: User input from the configuration form

        Returns:
            Configuration flow result
        """
        errors: dict[str, str] = {}

        if user_input is not None:
            try:
                vin = await self._async_validate(user_input)
            except CarNetAuthenticationError:
                errors["base"] = "invalid_auth"
            except CarNetConnectionError:
                errors["base"] = "cannot_connect"
            except CarNetError as err:
                _LOGGER.debug("CarNet setup failed: %s", err)
                errors["base"] = "no_vehicle"
            else:
                await self.async_set_unique_id(vin)
                self._abort_if_unique_id_configured()
                user_input[CONF_VIN] = vin
                return self.async_create_entry(
                    title=f"{user_input.get(CONF_BRAND, BRAND_AUDI)} {vin}",
                    data=user_input,
                )

        return self.async_show_form(
            step_id="user",
            data_schema=vol.Schema(
                {
                    vol.Required(CONF_USERNAME): cv.string,
                    vol.Required(CONF_PASSWORD): cv.string,
                    vol.Required(CONF_BRAND, default=BRAND_AUDI): vol.In(BRANDS),
                    vol.Required(CONF_COUNTRY, default=DEFAULT_COUNTRY): cv.string,
                    vol.Optional(CONF_VIN): cv.string,
                    vol.Optional(CONF_SPIN): cv.string,
                }
            ),
            errors=errors,
        )

    async def async_step_reauth(
        self, entry_data: Mapping[str, Any]
    ) -> ConfigFlowResult:
        """Handle re-authentication after the credentials were rejected."""
        return await self.async_step_reauth_confirm()

    async def async_step_reauth_confirm(
        self, user_input: dict[str, Any] | None = None
    ) -> ConfigFlowResult:
        """Ask for a new password."""
        errors: dict[str, str] = {}
        entry = self._get_reauth_entry()

        if user_input is not None:
            data = {**entry.data, **user_input}
            try:
                await self._async_validate(data)
            except CarNetAuthenticationError:
                errors["base"] = "invalid_auth"
            except CarNetError:
                errors["base"] = "cannot_connect"
            else:
                return self.async_update_reload_and_abort(entry, data=data)

        return self.async_show_form(
            step_id="reauth_confirm",
            data_schema=vol.Schema(
                {
                    vol.Required(CONF_PASSWORD): cv.string,
                    vol.Optional(CONF_SPIN): cv.string,
                }
            ),
            errors=errors,
        )


class CarNetOptionsFlowHandler(config_entries.OptionsFlow):
    """Handle CarNet options."""

    async def async_step_init(
        self, user_input: dict[str, Any] | None = None
    ) -> ConfigFlowResult:
        """Manage the options."""
        if user_input is not None:
            return self.async_create_entry(title="", data=user_input)

        return self.async_show_form(
            step_id="init",
            data_schema=vol.Schema(
                {
                    vol.Optional(
                        CONF_SCAN_INTERVAL,
                        default=self.config_entry.options.get(
                            CONF_SCAN_INTERVAL,
                            self.config_entry.data.get(
                                CONF_SCAN_INTERVAL, DEFAULT_SCAN_INTERVAL
                            ),
                        ),
                    ): vol.All(
                        vol.Coerce(int),
                        vol.Range(min=MIN_SCAN_INTERVAL, max=MAX_SCAN_INTERVAL),
                    ),
                }
            ),
        )
