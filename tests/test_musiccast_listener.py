"""Tests for the MusicCast UDP event listener."""

from __future__ import annotations

import json
from unittest.mock import MagicMock

import pytest

from custom_components.yamaha_musiccast.listener import (
    MusicCastUdpListener,
    MusicCastUdpProtocol,
    tracking_id,
)

ADDR = ("192.168.1.10", 41100)


def _packet(data: object) -> bytes:
    return json.dumps(data).encode("utf-8")


def test_tracking_id() -> None:
    """Test tracking ids are 32 hex characters and unique."""
    first = tracking_id()

    assert len(first) == 32
    int(first, 16)
    assert first != tracking_id()


def test_dispatch_to_registered_device() -> None:
    """Test packets are routed by device id regardless of case."""
    listener = MusicCastUdpListener()
    handler = MagicMock()
    other = MagicMock()
    listener.register("ac44f2851234", handler)
    listener.register("00A0DE000001", other)

    listener.handle_packet(
        _packet({"device_id": "AC44F2851234", "main": {"volume": 40}}), ADDR
    )

    handler.assert_called_once()
    message, track = handler.call_args.args
    assert message.zones["main"].volume == 40
    assert len(track) == 32
    other.assert_not_called()
    assert sorted(listener.device_ids) == ["00A0DE000001", "AC44F2851234"]


@pytest.mark.parametrize(
    "data",
    [
        b"\xff\xfe",
        b"{not json",
        _packet([1, 2, 3]),
        _packet({"device_id": "UNKNOWN"}),
    ],
)
def test_packets_dropped(data: bytes) -> None:
    """Test malformed and unrouted packets are dropped."""
    listener = MusicCastUdpListener()
    handler = MagicMock()
    listener.register("AC44F2851234", handler)

    listener.handle_packet(data, ADDR)

    handler.assert_not_called()


def test_unregister() -> None:
    """Test unregistered devices receive no more events."""
    listener = MusicCastUdpListener()
    handler = MagicMock()
    listener.register("AC44F2851234", handler)
    listener.unregister("ac44f2851234")

    listener.handle_packet(_packet({"device_id": "AC44F2851234"}), ADDR)

    handler.assert_not_called()
    assert listener.device_ids == []


def test_protocol_truncates_packets() -> None:
    """Test the protocol passes at most one buffer to the listener."""
    listener = MagicMock()
    protocol = MusicCastUdpProtocol(listener)

    protocol.datagram_received(b"x" * 6000, ADDR)

    data, addr = listener.handle_packet.call_args.args
    assert len(data) == 5120
    assert addr == ADDR


@pytest.mark.asyncio
async def test_start_and_stop() -> None:
    """Test the socket is opened once and closed on stop."""
    listener = MusicCastUdpListener(port=0)

    await listener.async_start()
    assert listener.running
    await listener.async_start()
    assert listener.running

    await listener.async_stop()
    assert not listener.running


def test_unexpected_preset_control_is_dispatched() -> None:
    """Test an odd preset control does not break packet handling."""
    listener = MusicCastUdpListener()
    handler = MagicMock()
    listener.register("AC44F2851234", handler)

    listener.handle_packet(
        _packet({"device_id": "AC44F2851234", "netusb": {"preset_control": [3]}}), ADDR
    )

    message, _ = handler.call_args.args
    assert message.netusb.preset_number == 0
