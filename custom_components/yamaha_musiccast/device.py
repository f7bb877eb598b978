"""MusicCast device state.

Holds the zone, preset, player and link state of one device and implements
the UDP event handling, the MusicCast link setup and the keep alive loop on
top of ``MusicCastApiClient``.
"""

from __future__ import annotations

import asyncio
from collections.abc import Callable
from contextlib import suppress
from dataclasses import asdict, dataclass, field
import logging
from typing import Any
import uuid

from .api import MusicCastApiClient, MusicCastApiError, MusicCastError
from .const import (
    KEEP_ALIVE_DELAY,
    KEEP_ALIVE_INTERVAL,
    POWER_ON,
    POWER_STANDBY,
    ROLE_CLIENT,
    ROLE_NONE,
    ROLE_SERVER,
    SERVER_SEPARATOR,
    STANDALONE,
    STANDALONE_LABEL,
    ZONE_MAIN,
)
from .models import (
    MusicCastDeviceInfo,
    MusicCastFeatures,
    MusicCastPlayInfo,
    MusicCastUdpMessage,
    MusicCastZoneStatus,
)

_LOGGER = logging.getLogger(__name__)

# (label, host) of every device known to the integration
PeerProvider = Callable[[], list[tuple[str, str]]]


def volume_to_percent(volume: int, max_volume: int) -> int:
    """Convert an absolute volume to percent of the maximum volume."""
    if max_volume <= 0:
        return 0
    return volume * 100 // max_volume


def percent_to_volume(percent: int, max_volume: int) -> int:
    """Convert a volume in percent to the absolute device volume."""
    return max_volume * percent // 100


def generate_group_id() -> str:
    """Return a new 32 hex character link group id."""
    return uuid.uuid4().hex[:32]


@dataclass
class MusicCastZoneState:
    """State of one zone."""

    power: bool | None = None
    mute: bool | None = None
    volume: int = 0
    max_volume: int = 0
    input: str | None = None
    sound_program: str | None = None
    sleep: int = 0
    link_server: str | None = None
    """Selected link server option, "" when standalone, None if unknown"""

    @property
    def volume_percent(self) -> int:
        """Volume in percent of the zone's maximum volume."""
        return volume_to_percent(self.volume, self.max_volume)

    def apply_status(self, status: MusicCastZoneStatus) -> None:
        """Take over a getStatus response."""
        if status.power == POWER_ON:
            self.power = True
        elif status.power == POWER_STANDBY:
            self.power = False
        self.mute = status.mute
        self.volume = status.volume
        if status.max_volume:
            self.max_volume = status.max_volume
        self.input = status.input
        self.sound_program = status.sound_program
        self.sleep = status.sleep


@dataclass
class MusicCastPlayerState:
    """State of the net/USB player."""

    state: str | None = None
    artist: str = ""
    track: str = ""
    album: str = ""
    albumart_url: str = ""
    repeat: str | None = None
    shuffle: str | None = None
    play_time: int = 0
    total_time: int = 0


@dataclass
class MusicCastPresetOption:
    """A selectable preset."""

    number: int
    label: str


@dataclass
class MusicCastLinkOption:
    """A selectable link server, ``value`` is "<host>***<zone>"."""

    value: str
    label: str


@dataclass
class MusicCastDeviceState:
    """Everything the entities read, rebuilt on each update."""

    zones: dict[str, MusicCastZoneState] = field(default_factory=dict)
    player: MusicCastPlayerState = field(default_factory=MusicCastPlayerState)
    presets: list[MusicCastPresetOption] = field(default_factory=list)
    current_preset: int = 0
    link_options: list[MusicCastLinkOption] = field(default_factory=list)
    role: str | None = None


class MusicCastDevice:
    """State and behavior of a single MusicCast device."""

    def __init__(
        self,
        api: MusicCastApiClient,
        name: str,
        sync_volume: bool = False,
        peers: PeerProvider | None = None,
    ) -> None:
        """Initialize device.

        Args:
            api: API client bound to the device host
            name: Display name, used for the link server options
            sync_volume: Push volume changes of a server to its clients
            peers: Returns (label, host) of every known device, this one
                included
        """
        self.api = api
        self.name = name
        self.sync_volume = sync_volume
        self._peers = peers or (lambda: [(self.name, self.host)])
        self.info = MusicCastDeviceInfo()
        self.features = MusicCastFeatures()
        self.state = MusicCastDeviceState()
        self._keep_alive_task: asyncio.Task | None = None

    @property
    def host(self) -> str:
        """Host of the device."""
        return self.api.host

    @property
    def device_id(self) -> str:
        """Device id used to route UDP events, empty before setup."""
        return (self.info.device_id or "").upper()

    @property
    def zone_ids(self) -> list[str]:
        """Zones of the device."""
        return self.features.zone_ids

    def zone(self, zone: str) -> MusicCastZoneState:
        """Return the state of a zone, created on first access."""
        return self.state.zones.setdefault(zone, MusicCastZoneState())

    async def async_setup(self) -> None:
        """Read device info and features, then refresh everything.

        Raises:
            MusicCastError: If the device cannot be queried
        """
        self.info = await self.api.get_device_info()
        self.features = await self.api.get_features()
        _LOGGER.info(
            "%s: %s (%s) with %d zone(s)",
            self.host,
            self.info.model_name,
            self.device_id,
            len(self.zone_ids),
        )
        for zone in self.zone_ids:
            self.zone(zone)
        await self.async_refresh()

    async def async_refresh(self) -> None:
        """Refresh zones, presets, player, link options and link status."""
        for zone in self.zone_ids:
            await self.async_update_zone(zone)
        await self.async_update_presets()
        await self.async_update_player()
        await self.async_update_link_options()
        await self.async_update_link_status()

    async def async_update_zone(self, zone: str) -> None:
        """Refresh the status of one zone.

        A rejected request leaves the zone untouched.
        """
        try:
            status = await self.api.get_status(zone)
        except MusicCastApiError as err:
            _LOGGER.info("%s: Nothing to do for %s: %s", self.host, zone, err)
            return
        self.zone(zone).apply_status(status)

    async def async_update_presets(self, preset_number: int = 0) -> None:
        """Refresh the preset list and the current preset.

        Args:
            preset_number: Preset reported by the device, 0 to derive the
                current preset from the most recent input
        """
        try:
            preset_info = await self.api.get_preset_info()
            recent = await self.api.get_recent_info()
        except MusicCastError as err:
            _LOGGER.info("%s: Fetching presets failed: %s", self.host, err)
            return

        last_input = recent.last_input
        options: list[MusicCastPresetOption] = []
        current = 0
        for number, preset in enumerate(preset_info.presets, start=1):
            if not preset.text:
                continue
            options.append(MusicCastPresetOption(number, f"#{number} {preset.text}"))
            if preset.text == last_input:
                current = number

        self.state.presets = options
        self.state.current_preset = preset_number or current

    async def async_update_player(self) -> None:
        """Refresh the net/USB player."""
        try:
            play_info = await self.api.get_play_info()
        except MusicCastApiError as err:
            _LOGGER.debug("%s: No play info: %s", self.host, err)
            return
        self._apply_play_info(play_info)

    def _apply_play_info(self, play_info: MusicCastPlayInfo) -> None:
        player = self.state.player
        player.state = play_info.playback
        player.artist = play_info.artist
        player.track = play_info.track
        player.album = play_info.album
        player.albumart_url = (
            f"http://{self.host}{play_info.albumart_url}" if play_info.albumart_url else ""
        )
        player.repeat = play_info.repeat
        player.shuffle = play_info.shuffle
        player.play_time = play_info.play_time
        player.total_time = play_info.total_time

    async def async_update_link_options(self) -> None:
        """Build the link server options from every known device."""
        options: list[MusicCastLinkOption] = []
        for label, host in self._peers():
            try:
                zones = (await self.api.get_features(host)).zone_ids
            except MusicCastError as err:
                _LOGGER.warning("%s: Error fetching zones of %s: %s", self.host, host, err)
                continue
            options.extend(
                MusicCastLinkOption(
                    f"{host}{SERVER_SEPARATOR}{zone}", f"{label} - {zone} ({host})"
                )
                for zone in zones
            )
        options.append(MusicCastLinkOption(STANDALONE, STANDALONE_LABEL))
        self.state.link_options = options

    async def async_update_link_status(self) -> None:
        """Read the link role; a device without role is standalone."""
        try:
            distribution = await self.api.get_distribution_info()
        except MusicCastApiError as err:
            _LOGGER.debug("%s: No distribution info: %s", self.host, err)
            return
        self.state.role = distribution.role
        if distribution.role == ROLE_NONE:
            for zone in self.zone_ids:
                self.zone(zone).link_server = STANDALONE

    async def async_process_event(self, message: MusicCastUdpMessage) -> None:
        """Apply a pushed event and fetch what it announced as changed."""
        for zone_id, event in message.zones.items():
            zone = self.zone(zone_id)
            if event.power == POWER_ON:
                zone.power = True
            elif event.power == POWER_STANDBY:
                zone.power = False
            if event.mute == "true":
                zone.mute = True
            elif event.mute == "false":
                zone.mute = False
            if event.input:
                zone.input = event.input
            if event.volume:
                zone.volume = event.volume
            if event.status_updated:
                await self.async_update_zone(zone_id)

        if message.netusb is not None:
            if message.netusb.preset_number:
                _LOGGER.debug("%s: Preset %d", self.host, message.netusb.preset_number)
                await self.async_update_presets(message.netusb.preset_number)
            if message.netusb.play_info_updated:
                await self.async_update_player()

    # -----------------------------------------------------------------
    # Commands
    # -----------------------------------------------------------------

    async def async_set_power(self, zone: str, on: bool) -> None:
        """Switch a zone on or to standby."""
        await self.api.set_power(zone, POWER_ON if on else POWER_STANDBY)
        self.zone(zone).power = on

    async def async_set_mute(self, zone: str, mute: bool) -> None:
        """Mute or unmute a zone."""
        await self.api.set_mute(zone, mute)
        self.zone(zone).mute = mute

    async def async_set_volume_percent(self, zone: str, percent: int) -> None:
        """Set the volume of a zone in percent of its maximum."""
        state = self.zone(zone)
        volume = percent_to_volume(percent, state.max_volume)
        await self.api.set_volume(zone, volume)
        state.volume = volume
        await self._async_sync_volume(percent)

    async def async_set_volume(self, zone: str, volume: int) -> None:
        """Set the absolute volume of a zone."""
        state = self.zone(zone)
        await self.api.set_volume(zone, volume)
        state.volume = volume
        await self._async_sync_volume(volume_to_percent(volume, state.max_volume))

    async def _async_sync_volume(self, percent: int) -> None:
        """Apply a volume to every zone of every client when serving a link."""
        if not self.sync_volume:
            return
        distribution = await self.api.get_distribution_info()
        self.state.role = distribution.role
        if distribution.role != ROLE_SERVER:
            return
        for client in distribution.client_list:
            _LOGGER.info("%s: Syncing volume %d%% to %s", self.host, percent, client)
            features = await self.api.get_features(client)
            for zone in features.zone_ids:
                status = await self.api.get_status(zone, client)
                await self.api.set_volume(
                    zone, percent_to_volume(percent, status.max_volume), client
                )

    async def async_set_input(self, zone: str, input_id: str) -> None:
        """Select the input of a zone."""
        await self.api.set_input(zone, input_id)
        self.zone(zone).input = input_id

    async def async_set_sound_program(self, zone: str, program: str) -> None:
        """Select the sound program of a zone."""
        await self.api.set_sound_program(zone, program)
        self.zone(zone).sound_program = program

    async def async_select_preset(self, zone: str, number: int) -> None:
        """Recall a preset in a zone."""
        await self.api.recall_preset(zone, number)
        self.state.current_preset = number

    async def async_set_sleep(self, zone: str, minutes: int) -> None:
        """Set the sleep timer of a zone."""
        await self.api.set_sleep(zone, minutes)
        self.zone(zone).sleep = minutes

    async def async_recall_scene(self, zone: str, scene: int) -> None:
        """Recall a scene in a zone."""
        await self.api.recall_scene(zone, scene)

    async def async_set_playback(self, playback: str) -> None:
        """Send a player command."""
        await self.api.set_playback(playback)

    async def async_set_repeat(self, mode: str) -> None:
        """Set the repeat mode of the player."""
        await self.api.set_repeat(mode)
        self.state.player.repeat = mode

    async def async_set_shuffle(self, mode: str) -> None:
        """Set the shuffle mode of the player."""
        await self.api.set_shuffle(mode)
        self.state.player.shuffle = mode

    async def async_select_link_server(self, zone: str, option: str) -> None:
        """Join the link of a server zone, or leave any link.

        Args:
            zone: Zone the selection was made for
            option: "<host>***<zone>" of the server, "" to go standalone
        """
        if option == STANDALONE:
            await self.async_unlink()
        else:
            await self.async_link(option)
        self.zone(zone).link_server = option

    async def async_link(self, option: str) -> None:
        """Link this device as a client of a server zone.

        Raises:
            ValueError: If the option is not "<host>***<zone>"
            MusicCastError: If one of the link calls fails
        """
        server, separator, server_zone = option.partition(SERVER_SEPARATOR)
        if not separator or not server or not server_zone:
            raise ValueError(f"Invalid link server: {option}")

        distribution = await self.api.get_distribution_info(server)
        if distribution.role == ROLE_SERVER:
            group_id = distribution.group_id
        elif distribution.role == ROLE_CLIENT:
            group_id = ""
        else:
            group_id = generate_group_id()

        await self.api.set_server_info(
            {
                "group_id": group_id,
                "zone": server_zone,
                "type": "add",
                "client_list": [self.host],
            },
            server,
        )
        # The client side must name every zone of the model
        await self.api.set_client_info(
            {"group_id": group_id, "zone": self.zone_ids or [ZONE_MAIN]}, self.host
        )
        await self.api.start_distribution(server)

    async def async_unlink(self) -> None:
        """Leave the link this device is a client of."""
        await self.api.set_client_info({"group_id": ""}, self.host)

    async def async_unlink_server(self) -> None:
        """Dissolve the link this device is the server of."""
        await self.api.set_server_info({"group_id": ""}, self.host)

    # -----------------------------------------------------------------
    # Keep alive
    # -----------------------------------------------------------------

    @property
    def keep_alive_running(self) -> bool:
        """Return True if the keep alive loop is active."""
        return self._keep_alive_task is not None and not self._keep_alive_task.done()

    def start_keep_alive(self) -> None:
        """Start announcing the UDP port to the device."""
        if self._keep_alive_task is None or self._keep_alive_task.done():
            self._keep_alive_task = asyncio.ensure_future(self._keep_alive_loop())
            _LOGGER.debug(
                "%s: Keep alive started (interval: %ds)", self.host, KEEP_ALIVE_INTERVAL
            )

    async def stop_keep_alive(self) -> None:
        """Stop the keep alive loop."""
        if self._keep_alive_task and not self._keep_alive_task.done():
            self._keep_alive_task.cancel()
            with suppress(asyncio.CancelledError):
                await self._keep_alive_task
        self._keep_alive_task = None

    async def _keep_alive_loop(self) -> None:
        """Send the keep alive request after a short delay, then periodically."""
        try:
            await asyncio.sleep(KEEP_ALIVE_DELAY)
            while True:
                try:
                    await self.api.keep_alive()
                    _LOGGER.debug("%s: Keep alive sent", self.host)
                except MusicCastError as err:
                    _LOGGER.warning("%s: Keep alive failed: %s", self.host, err)
                await asyncio.sleep(KEEP_ALIVE_INTERVAL)
        except asyncio.CancelledError:
            _LOGGER.debug("%s: Keep alive cancelled", self.host)
            raise

    def as_dict(self) -> dict[str, Any]:
        """Return the device state for the coordinator and diagnostics."""
        return {
            "device_id": self.device_id,
            "model": self.info.model_name,
            "zones": {zone: asdict(state) for zone, state in self.state.zones.items()},
            "player": asdict(self.state.player),
            "presets": [asdict(preset) for preset in self.state.presets],
            "current_preset": self.state.current_preset,
            "link_options": [asdict(option) for option in self.state.link_options],
            "role": self.state.role,
        }
