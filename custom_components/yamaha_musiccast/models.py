"""Yamaha Extended Control data objects.

Responses of the YXC HTTP API and the UDP event packets are mapped to
dataclasses. Every response carries a ``response_code``; ``"0"`` means
success.
"""

from __future__ import annotations

from dataclasses import dataclass, field, fields
import logging
from typing import Any, TypeVar, get_args, get_type_hints

from .const import RESPONSE_CODE_OK, ZONES

_LOGGER = logging.getLogger(__name__)

T = TypeVar("T")


def _convert_value(value: Any, target_type: type) -> Any:
    """Convert a value to the target type.

    Raises:
        ValueError: If conversion fails
    """
    if isinstance(value, target_type):
        return value

    if target_type is bool:
        if isinstance(value, str):
            return value.lower() in ("true", "1", "on")
        return bool(value)
    if target_type is int:
        return int(value)
    if target_type is str:
        # JSON booleans arrive as True/False, the device text form is lower case
        if isinstance(value, bool):
            return "true" if value else "false"
        return str(value)

    return value


def _from_dict_with_type_conversion(cls: type[T], data: dict | None) -> T:
    """Create dataclass instance from dict with proper type conversion.

    Only flat members are mapped, nested objects are handled by the caller.

    Args:
        cls: Dataclass type to create
        data: Dictionary with data from API

    Returns:
        Instance of the dataclass with properly typed fields
    """
    if not data:
        return cls()

    hints = get_type_hints(cls)
    filtered_data = {}

    for dc_field in fields(cls):  # type: ignore[arg-type]
        value = data.get(dc_field.metadata.get("key", dc_field.name))
        if value is None or isinstance(value, (dict, list)):
            continue

        type_args = get_args(hints[dc_field.name])
        actual_type = next((t for t in type_args if t is not type(None)), None)
        if actual_type is None:
            actual_type = hints[dc_field.name]

        try:
            filtered_data[dc_field.name] = _convert_value(value, actual_type)
        except (ValueError, TypeError) as e:
            _LOGGER.debug(
                "Failed to convert %s=%s to %s: %s", dc_field.name, value, actual_type, e
            )

    return cls(**filtered_data)


@dataclass
class MusicCastResponse:
    """Base for API responses."""

    response_code: str = RESPONSE_CODE_OK

    def is_ok(self) -> bool:
        """Return True if the device accepted the request."""
        return self.response_code == RESPONSE_CODE_OK


@dataclass
class MusicCastDeviceInfo(MusicCastResponse):
    """system/getDeviceInfo."""

    model_name: str | None = None
    destination: str | None = None
    device_id: str | None = None
    system_id: str | None = None
    system_version: float | None = None
    api_version: float | None = None
    netmodule_version: str | None = None

    @classmethod
    def from_dict(cls, data: dict) -> MusicCastDeviceInfo:
        """Create device info from API response dictionary."""
        return _from_dict_with_type_conversion(cls, data)


@dataclass
class MusicCastFeatures(MusicCastResponse):
    """system/getFeatures, reduced to the zone layout."""

    zone_num: int = 0
    zones: list[str] = field(default_factory=list)
    sound_programs: dict[str, list[str]] = field(default_factory=dict)
    inputs: dict[str, list[str]] = field(default_factory=dict)

    @classmethod
    def from_dict(cls, data: dict) -> MusicCastFeatures:
        """Create features from API response dictionary."""
        system = data.get("system") or {}
        zone_list = data.get("zone") or []
        return cls(
            response_code=str(data.get("response_code", RESPONSE_CODE_OK)),
            zone_num=int(system.get("zone_num", 0)),
            zones=[str(zone.get("id")) for zone in zone_list if zone.get("id")],
            sound_programs={
                str(zone.get("id")): list(zone.get("sound_program_list") or [])
                for zone in zone_list
                if zone.get("id")
            },
            inputs={
                str(zone.get("id")): list(zone.get("input_list") or [])
                for zone in zone_list
                if zone.get("id")
            },
        )

    @property
    def zone_ids(self) -> list[str]:
        """Zones of the device, "main" first."""
        return ZONES[: max(0, min(self.zone_num, len(ZONES)))]


@dataclass
class MusicCastZoneStatus(MusicCastResponse):
    """<zone>/getStatus."""

    power: str | None = None
    sleep: int = 0
    volume: int = 0
    mute: bool = False
    max_volume: int = 0
    input: str | None = None
    sound_program: str | None = None

    @classmethod
    def from_dict(cls, data: dict) -> MusicCastZoneStatus:
        """Create zone status from API response dictionary."""
        return _from_dict_with_type_conversion(cls, data)


@dataclass
class MusicCastPlayInfo(MusicCastResponse):
    """netusb/getPlayInfo."""

    input: str | None = None
    playback: str | None = None
    repeat: str | None = None
    shuffle: str | None = None
    play_time: int = 0
    total_time: int = 0
    artist: str = ""
    album: str = ""
    track: str = ""
    albumart_url: str = ""

    @classmethod
    def from_dict(cls, data: dict) -> MusicCastPlayInfo:
        """Create play info from API response dictionary."""
        return _from_dict_with_type_conversion(cls, data)


@dataclass
class MusicCastPreset:
    """One entry of the preset list."""

    input: str = ""
    text: str = ""


@dataclass
class MusicCastPresetInfo(MusicCastResponse):
    """netusb/getPresetInfo (v2)."""

    presets: list[MusicCastPreset] = field(default_factory=list)

    @classmethod
    def from_dict(cls, data: dict) -> MusicCastPresetInfo:
        """Create preset info from API response dictionary."""
        return cls(
            response_code=str(data.get("response_code", RESPONSE_CODE_OK)),
            presets=[
                MusicCastPreset(
                    input=str(preset.get("input", "")), text=str(preset.get("text", ""))
                )
                for preset in data.get("preset_info") or []
            ],
        )


@dataclass
class MusicCastRecentInfo(MusicCastResponse):
    """netusb/getRecentInfo, reduced to the entry texts."""

    texts: list[str] = field(default_factory=list)

    @classmethod
    def from_dict(cls, data: dict) -> MusicCastRecentInfo:
        """Create recent info from API response dictionary."""
        return cls(
            response_code=str(data.get("response_code", RESPONSE_CODE_OK)),
            texts=[str(recent.get("text", "")) for recent in data.get("recent_info") or []],
        )

    @property
    def last_input(self) -> str:
        """Text of the most recent entry, empty if there is none."""
        return self.texts[0] if self.texts else ""


@dataclass
class MusicCastDistributionInfo(MusicCastResponse):
    """dist/getDistributionInfo."""

    group_id: str = ""
    group_name: str = ""
    role: str = ""
    server_zone: str = ""
    client_list: list[str] = field(default_factory=list)
    """IP addresses of the linked clients"""

    @classmethod
    def from_dict(cls, data: dict) -> MusicCastDistributionInfo:
        """Create distribution info from API response dictionary."""
        info = _from_dict_with_type_conversion(cls, data)
        info.client_list = [
            str(client["ip_address"])
            for client in data.get("client_list") or []
            if client.get("ip_address")
        ]
        return info


@dataclass
class MusicCastZoneEvent:
    """Zone part of a UDP event."""

    power: str = ""
    mute: str = ""
    input: str = ""
    volume: int = 0
    status_updated: bool = False

    @classmethod
    def from_dict(cls, data: dict) -> MusicCastZoneEvent:
        """Create zone event from the zone object of a packet."""
        return _from_dict_with_type_conversion(cls, data)


@dataclass
class MusicCastNetUsbEvent:
    """netusb part of a UDP event."""

    preset_number: int = 0
    play_info_updated: bool = False

    @classmethod
    def from_dict(cls, data: dict) -> MusicCastNetUsbEvent:
        """Create netusb event from the netusb object of a packet."""
        preset_control = data.get("preset_control")
        if not isinstance(preset_control, dict):
            preset_control = {}
        try:
            preset_number = int(preset_control.get("num", 0))
        except (TypeError, ValueError):
            preset_number = 0
        return cls(
            preset_number=preset_number,
            play_info_updated=_convert_value(data.get("play_info_updated", False), bool),
        )


@dataclass
class MusicCastUdpMessage:
    """An event packet pushed by a device.

    {"device_id": "AC44F2851234", "main": {"volume": 51},
     "netusb": {"play_info_updated": true}}
    """

    device_id: str = ""
    zones: dict[str, MusicCastZoneEvent] = field(default_factory=dict)
    netusb: MusicCastNetUsbEvent | None = None

    @classmethod
    def from_dict(cls, data: dict) -> MusicCastUdpMessage:
        """Create UDP message from a decoded packet."""
        zones = {
            zone: MusicCastZoneEvent.from_dict(data[zone])
            for zone in ZONES
            if isinstance(data.get(zone), dict)
        }
        netusb = data.get("netusb")
        return cls(
            device_id=str(data.get("device_id", "")),
            zones=zones,
            netusb=MusicCastNetUsbEvent.from_dict(netusb) if isinstance(netusb, dict) else None,
        )
