"""Home Assistant entity definitions for MusicCast integration.

Every zone gets a media player, a preset, a link server and a sleep timer
select and an absolute volume number. The player controls act on the net/USB
player of the device, which all zones share.
"""

from __future__ import annotations

from abc import ABC
import logging
from typing import Any

from homeassistant.components.button import ButtonEntity
from homeassistant.components.media_player import (
    MediaPlayerEntity,
    MediaPlayerEntityFeature,
    MediaPlayerState,
    RepeatMode,
)
from homeassistant.components.number import NumberEntity, NumberMode
from homeassistant.components.select import SelectEntity
from homeassistant.const import EntityCategory
from homeassistant.exceptions import HomeAssistantError
from homeassistant.helpers.update_coordinator import CoordinatorEntity

from .const import (
    DOMAIN,
    PLAYBACK_FAST_FORWARD,
    PLAYBACK_NEXT,
    PLAYBACK_PAUSE,
    PLAYBACK_PLAY,
    PLAYBACK_PREVIOUS,
    PLAYBACK_REWIND,
    PLAYBACK_STATES,
    PLAYBACK_STOP,
    PLAYER_PAUSED,
    REPEAT_MODES,
    SLEEP_OPTIONS,
    ZONE_MAIN,
)
from .device import MusicCastZoneState

_LOGGER = logging.getLogger(__name__)

SHUFFLE_OFF = "off"
SHUFFLE_ON = "on"


def zone_label(zone: str) -> str:
    """Turn a zone id like "zone2" into "Zone 2"."""
    if zone == ZONE_MAIN:
        return "Main"
    return f"Zone {zone.removeprefix('zone')}"


class MusicCastEntity(CoordinatorEntity, ABC):
    """Base class for MusicCast entities."""

    _attr_should_poll = False
    _attr_has_entity_name = True

    def __init__(self, coordinator: Any, unique_id: str, name: str | None) -> None:
        """Initialize MusicCast entity.

        Args:
            coordinator: Data coordinator for updates
            unique_id: Unique id suffix
            name: Entity name, None to use the device name
        """
        super().__init__(coordinator)
        self.device = coordinator.device
        self._attr_unique_id = f"musiccast_{self.device.device_id.lower()}_{unique_id}"
        self._attr_name = name

    @property
    def device_info(self) -> dict:
        """Return device info for device registry."""
        info = self.device.info
        device_info = {
            "identifiers": {(DOMAIN, self.device.device_id)},
            "name": self.device.name,
            "manufacturer": "Yamaha",
            "model": info.model_name or "MusicCast",
            "configuration_url": f"http://{self.device.host}",
        }
        if info.system_version is not None:
            device_info["sw_version"] = str(info.system_version)
        return device_info


class MusicCastZoneEntity(MusicCastEntity):
    """An entity bound to one zone."""

    def __init__(
        self, coordinator: Any, zone: str, suffix: str, name: str | None
    ) -> None:
        """Initialize zone entity."""
        super().__init__(coordinator, f"{zone}_{suffix}", name)
        self.zone_id = zone

    @property
    def _zone(self) -> MusicCastZoneState:
        return self.device.zone(self.zone_id)


class MusicCastMediaPlayer(MusicCastZoneEntity, MediaPlayerEntity):
    """Media player for a zone."""

    _attr_supported_features = (
        MediaPlayerEntityFeature.TURN_ON
        | MediaPlayerEntityFeature.TURN_OFF
        | MediaPlayerEntityFeature.VOLUME_SET
        | MediaPlayerEntityFeature.VOLUME_STEP
        | MediaPlayerEntityFeature.VOLUME_MUTE
        | MediaPlayerEntityFeature.SELECT_SOURCE
        | MediaPlayerEntityFeature.SELECT_SOUND_MODE
        | MediaPlayerEntityFeature.PLAY
        | MediaPlayerEntityFeature.PAUSE
        | MediaPlayerEntityFeature.STOP
        | MediaPlayerEntityFeature.NEXT_TRACK
        | MediaPlayerEntityFeature.PREVIOUS_TRACK
        | MediaPlayerEntityFeature.REPEAT_SET
        | MediaPlayerEntityFeature.SHUFFLE_SET
    )

    def __init__(self, coordinator: Any, zone: str) -> None:
        """Initialize media player."""
        super().__init__(
            coordinator,
            zone,
            "media_player",
            None if zone == ZONE_MAIN else zone_label(zone),
        )

    @property
    def state(self) -> MediaPlayerState | None:
        """Return the zone state, refined by the player state when on."""
        if self._zone.power is None:
            return None
        if not self._zone.power:
            return MediaPlayerState.OFF
        player_state = PLAYBACK_STATES.get(self.device.state.player.state or "")
        if player_state == PLAYER_PAUSED:
            return MediaPlayerState.PAUSED
        if player_state is not None:
            # Fast forward and rewind are shown as playing
            return MediaPlayerState.PLAYING
        return MediaPlayerState.ON

    @property
    def volume_level(self) -> float | None:
        """Volume between 0 and 1."""
        if not self._zone.max_volume:
            return None
        return self._zone.volume_percent / 100

    @property
    def is_volume_muted(self) -> bool | None:
        """Return True if the zone is muted."""
        return self._zone.mute

    @property
    def source(self) -> str | None:
        """Current input."""
        return self._zone.input

    @property
    def source_list(self) -> list[str]:
        """Inputs of the zone."""
        return self.device.features.inputs.get(self.zone_id, [])

    @property
    def sound_mode(self) -> str | None:
        """Current sound program."""
        return self._zone.sound_program

    @property
    def sound_mode_list(self) -> list[str]:
        """Sound programs of the zone."""
        return self.device.features.sound_programs.get(self.zone_id, [])

    @property
    def media_title(self) -> str | None:
        """Track of the net/USB player."""
        return self.device.state.player.track or None

    @property
    def media_artist(self) -> str | None:
        """Artist of the net/USB player."""
        return self.device.state.player.artist or None

    @property
    def media_album_name(self) -> str | None:
        """Album of the net/USB player."""
        return self.device.state.player.album or None

    @property
    def media_image_url(self) -> str | None:
        """Album art of the net/USB player."""
        return self.device.state.player.albumart_url or None

    @property
    def media_duration(self) -> int | None:
        """Duration of the track in seconds."""
        return self.device.state.player.total_time or None

    @property
    def repeat(self) -> RepeatMode | None:
        """Repeat mode of the player."""
        repeat = self.device.state.player.repeat
        return RepeatMode(repeat) if repeat in REPEAT_MODES else None

    @property
    def shuffle(self) -> bool | None:
        """Return True if shuffle is active."""
        shuffle = self.device.state.player.shuffle
        if shuffle is None:
            return None
        return shuffle != SHUFFLE_OFF

    async def async_turn_on(self) -> None:
        """Switch the zone on."""
        await self.coordinator.async_run(
            "power on", self.device.async_set_power(self.zone_id, True)
        )

    async def async_turn_off(self) -> None:
        """Switch the zone to standby."""
        await self.coordinator.async_run(
            "standby", self.device.async_set_power(self.zone_id, False)
        )

    async def async_set_volume_level(self, volume: float) -> None:
        """Set the volume, 0 to 1."""
        await self.coordinator.async_run(
            "volume",
            self.device.async_set_volume_percent(self.zone_id, round(volume * 100)),
        )

    async def async_mute_volume(self, mute: bool) -> None:
        """Mute or unmute the zone."""
        await self.coordinator.async_run(
            "mute", self.device.async_set_mute(self.zone_id, mute)
        )

    async def async_select_source(self, source: str) -> None:
        """Select an input."""
        await self.coordinator.async_run(
            "input", self.device.async_set_input(self.zone_id, source)
        )

    async def async_select_sound_mode(self, sound_mode: str) -> None:
        """Select a sound program."""
        await self.coordinator.async_run(
            "sound program", self.device.async_set_sound_program(self.zone_id, sound_mode)
        )

    async def async_media_play(self) -> None:
        """Start playback."""
        await self._async_playback(PLAYBACK_PLAY)

    async def async_media_pause(self) -> None:
        """Pause playback."""
        await self._async_playback(PLAYBACK_PAUSE)

    async def async_media_stop(self) -> None:
        """Stop playback."""
        await self._async_playback(PLAYBACK_STOP)

    async def async_media_next_track(self) -> None:
        """Skip to the next track."""
        await self._async_playback(PLAYBACK_NEXT)

    async def async_media_previous_track(self) -> None:
        """Go back to the previous track."""
        await self._async_playback(PLAYBACK_PREVIOUS)

    async def async_media_rewind(self) -> None:
        """Rewind."""
        await self._async_playback(PLAYBACK_REWIND)

    async def async_media_fast_forward(self) -> None:
        """Fast forward."""
        await self._async_playback(PLAYBACK_FAST_FORWARD)

    async def _async_playback(self, playback: str) -> None:
        await self.coordinator.async_run(
            "playback", self.device.async_set_playback(playback)
        )

    async def async_set_repeat(self, repeat: RepeatMode) -> None:
        """Set the repeat mode."""
        await self.coordinator.async_run(
            "repeat", self.device.async_set_repeat(str(repeat.value))
        )

    async def async_set_shuffle(self, shuffle: bool) -> None:
        """Enable or disable shuffle."""
        await self.coordinator.async_run(
            "shuffle", self.device.async_set_shuffle(SHUFFLE_ON if shuffle else SHUFFLE_OFF)
        )

    @property
    def extra_state_attributes(self) -> dict[str, Any]:
        """Return the link role and player state."""
        return {
            "zone": self.zone_id,
            "link_role": self.device.state.role,
            "playback": self.device.state.player.state,
            "sleep": self._zone.sleep,
        }


class PresetSelect(MusicCastZoneEntity, SelectEntity):
    """Recall a net/USB preset in a zone."""

    _attr_icon = "mdi:playlist-star"

    def __init__(self, coordinator: Any, zone: str) -> None:
        """Initialize preset select."""
        super().__init__(coordinator, zone, "preset", f"{zone_label(zone)} preset")

    @property
    def options(self) -> list[str]:
        """Labels of the presets with text."""
        return [preset.label for preset in self.device.state.presets]

    @property
    def current_option(self) -> str | None:
        """Label of the current preset."""
        current = self.device.state.current_preset
        return next(
            (p.label for p in self.device.state.presets if p.number == current), None
        )

    async def async_select_option(self, option: str) -> None:
        """Recall the preset with the given label."""
        number = next(
            (p.number for p in self.device.state.presets if p.label == option), None
        )
        if number is None:
            raise HomeAssistantError(f"Unknown preset: {option}")
        await self.coordinator.async_run(
            "preset", self.device.async_select_preset(self.zone_id, number)
        )


class LinkServerSelect(MusicCastZoneEntity, SelectEntity):
    """Join the MusicCast link of another zone or go standalone."""

    _attr_icon = "mdi:speaker-multiple"

    def __init__(self, coordinator: Any, zone: str) -> None:
        """Initialize link server select."""
        super().__init__(
            coordinator, zone, "link_server", f"{zone_label(zone)} link server"
        )

    @property
    def options(self) -> list[str]:
        """Labels of all server zones plus standalone."""
        return [option.label for option in self.device.state.link_options]

    @property
    def current_option(self) -> str | None:
        """Label of the selected server."""
        value = self._zone.link_server
        return next(
            (o.label for o in self.device.state.link_options if o.value == value), None
        )

    async def async_select_option(self, option: str) -> None:
        """Link to the selected server, or unlink."""
        value = next(
            (o.value for o in self.device.state.link_options if o.label == option), None
        )
        if value is None:
            raise HomeAssistantError(f"Unknown link server: {option}")
        await self.coordinator.async_run(
            "link", self.device.async_select_link_server(self.zone_id, value)
        )


class SleepSelect(MusicCastZoneEntity, SelectEntity):
    """Sleep timer of a zone in minutes."""

    _attr_icon = "mdi:timer-outline"
    _attr_options = [str(minutes) for minutes in SLEEP_OPTIONS]

    def __init__(self, coordinator: Any, zone: str) -> None:
        """Initialize sleep select."""
        super().__init__(coordinator, zone, "sleep", f"{zone_label(zone)} sleep timer")

    @property
    def current_option(self) -> str | None:
        """Current sleep timer."""
        sleep = str(self._zone.sleep)
        return sleep if sleep in self._attr_options else None

    async def async_select_option(self, option: str) -> None:
        """Set the sleep timer."""
        await self.coordinator.async_run(
            "sleep timer", self.device.async_set_sleep(self.zone_id, int(option))
        )


class VolumeNumber(MusicCastZoneEntity, NumberEntity):
    """Absolute device volume of a zone."""

    _attr_icon = "mdi:volume-high"
    _attr_mode = NumberMode.SLIDER
    _attr_native_min_value = 0
    _attr_native_step = 1

    def __init__(self, coordinator: Any, zone: str) -> None:
        """Initialize volume number."""
        super().__init__(coordinator, zone, "volume_abs", f"{zone_label(zone)} volume")

    @property
    def native_max_value(self) -> float:
        """Maximum volume reported by the zone."""
        return self._zone.max_volume or 100

    @property
    def native_value(self) -> float | None:
        """Absolute volume."""
        return self._zone.volume

    async def async_set_native_value(self, value: float) -> None:
        """Set the absolute volume."""
        await self.coordinator.async_run(
            "volume", self.device.async_set_volume(self.zone_id, int(value))
        )


class UnlinkServerButton(MusicCastEntity, ButtonEntity):
    """Dissolve the link this device serves."""

    _attr_icon = "mdi:link-variant-off"
    _attr_entity_category = EntityCategory.CONFIG

    def __init__(self, coordinator: Any) -> None:
        """Initialize unlink button."""
        super().__init__(coordinator, "unlink_server", "Unlink server")

    async def async_press(self) -> None:
        """Clear the server group."""
        await self.coordinator.async_run(
            "unlink server", self.device.async_unlink_server()
        )
