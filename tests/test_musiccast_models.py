"""Tests for the MusicCast data objects."""

from __future__ import annotations

from custom_components.yamaha_musiccast.models import (
    MusicCastDeviceInfo,
    MusicCastFeatures,
    MusicCastPlayInfo,
    MusicCastRecentInfo,
    MusicCastUdpMessage,
    MusicCastZoneStatus,
)


def test_udp_message_zones_and_netusb() -> None:
    """Test zone and netusb parts of an event packet."""
    message = MusicCastUdpMessage.from_dict(
        {
            "device_id": "ac44f2851234",
            "main": {"power": "on", "mute": False, "volume": 51},
            "zone2": {"status_updated": True},
            "netusb": {"preset_control": {"type": "recall", "num": 3, "result": "success"}},
            "system": {"func_status_updated": True},
        }
    )

    assert message.device_id == "ac44f2851234"
    assert set(message.zones) == {"main", "zone2"}
    main = message.zones["main"]
    assert main.power == "on"
    assert main.mute == "false"
    assert main.volume == 51
    assert not main.status_updated
    assert message.zones["zone2"].status_updated
    assert message.netusb is not None
    assert message.netusb.preset_number == 3
    assert not message.netusb.play_info_updated


def test_udp_message_without_parts() -> None:
    """Test a packet with only a device id."""
    message = MusicCastUdpMessage.from_dict({"device_id": "AC44"})

    assert message.zones == {}
    assert message.netusb is None


def test_netusb_play_info_updated() -> None:
    """Test the player update flag."""
    message = MusicCastUdpMessage.from_dict(
        {"device_id": "AC44", "netusb": {"play_info_updated": True, "preset_control": {}}}
    )

    assert message.netusb.play_info_updated
    assert message.netusb.preset_number == 0


def test_response_code_is_ok() -> None:
    """Test the response code check."""
    assert MusicCastZoneStatus.from_dict({"response_code": 0}).is_ok()
    assert not MusicCastZoneStatus.from_dict({"response_code": 5}).is_ok()


def test_device_info_ignores_nested_objects() -> None:
    """Test nested members are not mapped onto flat attributes."""
    info = MusicCastDeviceInfo.from_dict(
        {
            "response_code": 0,
            "model_name": "RX-V685",
            "device_id": "AC44F2851234",
            "system_version": 2.54,
            "destination": {"unexpected": True},
        }
    )

    assert info.model_name == "RX-V685"
    assert info.device_id == "AC44F2851234"
    assert info.system_version == 2.54
    assert info.destination is None


def test_features_zone_count_is_bounded() -> None:
    """Test the zone count never exceeds the known zones."""
    assert MusicCastFeatures.from_dict({"system": {"zone_num": 9}}).zone_ids == [
        "main",
        "zone2",
        "zone3",
        "zone4",
    ]
    assert MusicCastFeatures.from_dict({}).zone_ids == []


def test_recent_info_last_input() -> None:
    """Test the most recent entry is the first one."""
    recent = MusicCastRecentInfo.from_dict(
        {"recent_info": [{"text": "Radio 1"}, {"text": "Radio 2"}]}
    )

    assert recent.last_input == "Radio 1"
    assert MusicCastRecentInfo.from_dict({}).last_input == ""


def test_play_info() -> None:
    """Test play info metadata."""
    play_info = MusicCastPlayInfo.from_dict(
        {
            "response_code": 0,
            "playback": "play",
            "repeat": "off",
            "shuffle": "on",
            "play_time": 12,
            "total_time": 240,
            "artist": "Artist",
            "track": "Track",
            "album": "Album",
            "albumart_url": "/YamahaRemoteControl/AlbumART/AlbumART.jpg",
        }
    )

    assert play_info.playback == "play"
    assert play_info.total_time == 240
    assert play_info.albumart_url.endswith("AlbumART.jpg")


def test_netusb_unexpected_preset_control() -> None:
    """Test a preset control that is not an object is ignored."""
    message = MusicCastUdpMessage.from_dict(
        {"device_id": "AC44", "netusb": {"preset_control": "recall"}}
    )

    assert message.netusb.preset_number == 0
