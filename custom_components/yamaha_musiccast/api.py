"""Yamaha Extended Control (YXC) HTTP API client.

All calls go to ``http://<host>/YamahaExtendedControl/v1/...``. Calls that
configure a MusicCast link also target other devices, so every method takes
an optional host that defaults to the device of the client.
"""

from __future__ import annotations

import logging
from typing import Any, Self

import aiohttp
from yarl import URL

from .const import (
    API_BASE_PATH,
    APP_NAME,
    CONNECTION_TIMEOUT,
    HEADER_APP_NAME,
    HEADER_APP_PORT,
    LONG_CONNECTION_TIMEOUT,
    RESPONSE_CODE_OK,
    UDP_PORT,
)
from .models import (
    MusicCastDeviceInfo,
    MusicCastDistributionInfo,
    MusicCastFeatures,
    MusicCastPlayInfo,
    MusicCastPresetInfo,
    MusicCastRecentInfo,
    MusicCastZoneStatus,
)

_LOGGER = logging.getLogger(__name__)


class MusicCastError(Exception):
    """Base class for MusicCast errors."""


class MusicCastConnectionError(MusicCastError):
    """Raised when a device cannot be reached."""


class MusicCastApiError(MusicCastError):
    """Raised when a device answers with a non zero response code."""

    def __init__(self, message: str, response_code: str) -> None:
        """Initialize error with the device response code."""
        super().__init__(message)
        self.response_code = response_code


class MusicCastApiClient:
    """Async client for the YXC API of one device."""

    def __init__(
        self,
        host: str,
        session: aiohttp.ClientSession | None = None,
    ) -> None:
        """Initialize MusicCast API client.

        Args:
            host: Device host name or IP address
            session: Shared aiohttp session, a private one is created if None
        """
        self.host = host
        self.session = session
        self._owns_session = session is None

    async def __aenter__(self) -> Self:
        """Async context manager entry."""
        await self.connect()
        return self

    async def __aexit__(
        self,
        exc_type: type[BaseException] | None,
        exc_val: BaseException | None,
        exc_tb: object,
    ) -> None:
        """Async context manager exit."""
        await self.disconnect()

    async def connect(self) -> None:
        """Create the HTTP session if needed."""
        if self.session is None:
            self.session = aiohttp.ClientSession()
            self._owns_session = True

    async def disconnect(self) -> None:
        """Close the HTTP session if it is owned by this client."""
        if self.session and self._owns_session:
            await self.session.close()
        self.session = None

    def _url(self, path: str, host: str | None = None, version: str = "v1") -> URL:
        return URL.build(
            scheme="http",
            host=host or self.host,
            path=f"/{API_BASE_PATH}/{version}/{path}",
        )

    async def _request(
        self,
        path: str,
        host: str | None = None,
        params: dict[str, Any] | None = None,
        json_data: dict[str, Any] | None = None,
        timeout: int = CONNECTION_TIMEOUT,
        headers: dict[str, str] | None = None,
        version: str = "v1",
    ) -> dict[str, Any]:
        """Send a request to a device.

        A GET is sent unless a JSON body is given.

        Returns:
            Decoded response

        Raises:
            MusicCastConnectionError: If the device is not reachable
            MusicCastApiError: If the response code is not 0
        """
        if not self.session:
            raise MusicCastConnectionError("Not connected")

        url = self._url(path, host, version)
        if params:
            url = url.with_query({key: str(value) for key, value in params.items()})
        method = "POST" if json_data is not None else "GET"
        _LOGGER.debug("YXC %s %s %s", method, url, json_data or "")

        try:
            async with self.session.request(
                method,
                url,
                json=json_data,
                headers=headers,
                timeout=aiohttp.ClientTimeout(total=timeout),
            ) as response:
                response.raise_for_status()
                data = await response.json(content_type=None)
        except TimeoutError as e:
            raise MusicCastConnectionError(f"Request to {url} timed out") from e
        except aiohttp.ClientError as e:
            raise MusicCastConnectionError(f"Request to {url} failed: {e}") from e
        except ValueError as e:
            raise MusicCastApiError(f"Invalid response from {url}: {e}", "") from e

        _LOGGER.debug("YXC response %s", data)
        if not isinstance(data, dict):
            raise MusicCastApiError(f"Unexpected response from {url}", "")

        response_code = str(data.get("response_code", RESPONSE_CODE_OK))
        if response_code != RESPONSE_CODE_OK:
            raise MusicCastApiError(
                f"{path} failed with response code {response_code}", response_code
            )
        return data

    # -----------------------------------------------------------------
    # Zone
    # -----------------------------------------------------------------

    async def get_status(self, zone: str, host: str | None = None) -> MusicCastZoneStatus:
        """Get power, volume, input and sound program of a zone."""
        data = await self._request(f"{zone}/getStatus", host)
        return MusicCastZoneStatus.from_dict(data)

    async def set_power(self, zone: str, power: str) -> None:
        """Set zone power, "on" or "standby"."""
        await self._request(f"{zone}/setPower", params={"power": power})

    async def set_mute(self, zone: str, mute: bool) -> None:
        """Mute or unmute a zone."""
        await self._request(
            f"{zone}/setMute", params={"enable": "true" if mute else "false"}
        )

    async def set_volume(self, zone: str, volume: int, host: str | None = None) -> None:
        """Set the absolute volume of a zone."""
        await self._request(f"{zone}/setVolume", host, params={"volume": volume})

    async def set_input(self, zone: str, input_id: str) -> None:
        """Select the input of a zone."""
        await self._request(f"{zone}/setInput", params={"input": input_id})

    async def set_sound_program(self, zone: str, program: str) -> None:
        """Select the sound program of a zone."""
        await self._request(f"{zone}/setSoundProgram", params={"program": program})

    async def set_sleep(self, zone: str, minutes: int) -> None:
        """Set the sleep timer of a zone (0, 30, 60, 90 or 120 minutes)."""
        await self._request(f"{zone}/setSleep", params={"sleep": minutes})

    async def recall_scene(self, zone: str, scene: int) -> None:
        """Recall a scene of a zone."""
        await self._request(f"{zone}/recallScene", params={"num": scene})

    # -----------------------------------------------------------------
    # Net/USB
    # -----------------------------------------------------------------

    async def recall_preset(self, zone: str, preset: int) -> None:
        """Recall a net/USB preset in a zone."""
        await self._request(
            "netusb/recallPreset",
            params={"zone": zone, "num": preset},
            timeout=LONG_CONNECTION_TIMEOUT,
        )

    async def get_preset_info(self) -> MusicCastPresetInfo:
        """Get the net/USB preset list."""
        data = await self._request(
            "netusb/getPresetInfo", timeout=LONG_CONNECTION_TIMEOUT, version="v2"
        )
        return MusicCastPresetInfo.from_dict(data)

    async def get_recent_info(self) -> MusicCastRecentInfo:
        """Get the recently played net/USB items."""
        data = await self._request("netusb/getRecentInfo", timeout=LONG_CONNECTION_TIMEOUT)
        return MusicCastRecentInfo.from_dict(data)

    async def get_play_info(self) -> MusicCastPlayInfo:
        """Get playback state and metadata of the net/USB player."""
        data = await self._request("netusb/getPlayInfo", timeout=LONG_CONNECTION_TIMEOUT)
        return MusicCastPlayInfo.from_dict(data)

    async def set_playback(self, playback: str) -> None:
        """Control the player (play, pause, next, previous, ...)."""
        await self._request(
            "netusb/setPlayback",
            params={"playback": playback},
            timeout=LONG_CONNECTION_TIMEOUT,
        )

    async def set_repeat(self, mode: str) -> None:
        """Set the repeat mode."""
        await self._request(
            "netusb/setRepeat", params={"mode": mode}, timeout=LONG_CONNECTION_TIMEOUT
        )

    async def set_shuffle(self, mode: str) -> None:
        """Set the shuffle mode."""
        await self._request(
            "netusb/setShuffle", params={"mode": mode}, timeout=LONG_CONNECTION_TIMEOUT
        )

    # -----------------------------------------------------------------
    # Distribution (MusicCast link)
    # -----------------------------------------------------------------

    async def get_distribution_info(
        self, host: str | None = None
    ) -> MusicCastDistributionInfo:
        """Get role, group id and clients of a device."""
        data = await self._request("dist/getDistributionInfo", host)
        return MusicCastDistributionInfo.from_dict(data)

    async def set_server_info(self, data: dict[str, Any], host: str | None = None) -> None:
        """Configure a device as link server."""
        _LOGGER.info("setServerInfo %s: %s", host or self.host, data)
        await self._request(
            "dist/setServerInfo", host, json_data=data, timeout=LONG_CONNECTION_TIMEOUT
        )

    async def set_client_info(self, data: dict[str, Any], host: str | None = None) -> None:
        """Configure a device as link client."""
        _LOGGER.info("setClientInfo %s: %s", host or self.host, data)
        await self._request(
            "dist/setClientInfo", host, json_data=data, timeout=LONG_CONNECTION_TIMEOUT
        )

    async def start_distribution(self, host: str | None = None) -> None:
        """Start distributing the server's audio to its clients."""
        await self._request(
            "dist/startDistribution",
            host,
            params={"num": 1},
            timeout=LONG_CONNECTION_TIMEOUT,
        )

    # -----------------------------------------------------------------
    # System
    # -----------------------------------------------------------------

    async def get_features(self, host: str | None = None) -> MusicCastFeatures:
        """Get the feature list (zone count, inputs, sound programs)."""
        data = await self._request(
            "system/getFeatures", host, timeout=LONG_CONNECTION_TIMEOUT
        )
        return MusicCastFeatures.from_dict(data)

    async def get_device_info(self) -> MusicCastDeviceInfo:
        """Get model and device id."""
        data = await self._request("system/getDeviceInfo")
        return MusicCastDeviceInfo.from_dict(data)

    async def keep_alive(self) -> None:
        """Ask the device to keep pushing UDP events to this host."""
        await self._request(
            "system/getDeviceInfo",
            headers={HEADER_APP_NAME: APP_NAME, HEADER_APP_PORT: str(UDP_PORT)},
        )
