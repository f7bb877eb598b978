"""Config flow for Yamaha MusicCast integration."""

from __future__ import annotations

import logging
from typing import Any

import voluptuous as vol

from homeassistant import config_entries
from homeassistant.config_entries import ConfigFlowResult
from homeassistant.const import CONF_HOST, CONF_NAME
from homeassistant.core import callback
from homeassistant.helpers import config_validation as cv
from homeassistant.helpers.aiohttp_client import async_get_clientsession

from .api import MusicCastApiClient, MusicCastConnectionError, MusicCastError
from .const import CONF_SYNC_VOLUME, DEFAULT_SYNC_VOLUME, DOMAIN
from .models import MusicCastDeviceInfo

_LOGGER = logging.getLogger(__name__)


class MusicCastConfigFlow(config_entries.ConfigFlow, domain=DOMAIN):
    """Handle a config flow for MusicCast."""

    VERSION = 1

    @staticmethod
    @callback
    def async_get_options_flow(
        config_entry: config_entries.ConfigEntry,
    ) -> config_entries.OptionsFlow:
        """Get the options flow for this handler."""
        return MusicCastOptionsFlowHandler()

    async def _async_get_device_info(self, host: str) -> MusicCastDeviceInfo:
        """Query the device.

        Raises:
            MusicCastError: If the device does not answer or has no id
        """
        client = MusicCastApiClient(host, session=async_get_clientsession(self.hass))
        info = await client.get_device_info()
        if not info.device_id:
            raise MusicCastError(f"{host} did not report a device id")
        return info

    async def async_step_import(
        self, import_data: dict[str, Any]
    ) -> ConfigFlowResult:
        """Handle import from configuration.yaml.

        Args:
            import_data: Data from YAML configuration

        Returns:
            Configuration flow result
        """
        host = import_data[CONF_HOST]
        _LOGGER.info("Importing MusicCast configuration for %s", host)

        await self.async_set_unique_id(host)
        self._abort_if_unique_id_configured()

        # The device is queried during async_setup_entry
        return self.async_create_entry(
            title=import_data.get(CONF_NAME) or host,
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
            host = user_input[CONF_HOST]
            try:
                info = await self._async_get_device_info(host)
            except MusicCastConnectionError:
                errors["base"] = "cannot_connect"
            except MusicCastError as err:
                _LOGGER.debug("MusicCast setup failed: %s", err)
                errors["base"] = "unknown"
            else:
                await self.async_set_unique_id(host)
                self._abort_if_unique_id_configured()
                return self.async_create_entry(
                    title=user_input.get(CONF_NAME) or info.model_name or host,
                    data=user_input,
                )

        return self.async_show_form(
            step_id="user",
            data_schema=vol.Schema(
                {
                    vol.Required(CONF_HOST): cv.string,
                    vol.Optional(CONF_NAME): cv.string,
                    vol.Optional(CONF_SYNC_VOLUME, default=DEFAULT_SYNC_VOLUME): bool,
                }
            ),
            errors=errors,
        )


class MusicCastOptionsFlowHandler(config_entries.OptionsFlow):
    """Handle MusicCast options."""

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
                        CONF_SYNC_VOLUME,
                        default=self.config_entry.options.get(
                            CONF_SYNC_VOLUME,
                            self.config_entry.data.get(
                                CONF_SYNC_VOLUME, DEFAULT_SYNC_VOLUME
                            ),
                        ),
                    ): bool,
                }
            ),
        )
