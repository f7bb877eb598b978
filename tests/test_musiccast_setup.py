"""Tests for releasing MusicCast devices on unload."""

from __future__ import annotations

from unittest.mock import AsyncMock, MagicMock

import pytest

from custom_components.yamaha_musiccast import async_release_device
from custom_components.yamaha_musiccast.listener import MusicCastUdpListener


def _device(device_id: str) -> MagicMock:
    device = MagicMock()
    device.device_id = device_id
    device.stop_keep_alive = AsyncMock()
    return device


@pytest.mark.asyncio
async def test_release_keeps_listener_for_other_devices() -> None:
    """Test the listener stays open while other devices are registered."""
    listener = MusicCastUdpListener()
    listener.async_stop = AsyncMock()
    first = _device("AC44F2851234")
    listener.register(first.device_id, MagicMock())
    listener.register("00A0DE000001", MagicMock())

    await async_release_device(listener, first)

    first.stop_keep_alive.assert_awaited_once()
    assert listener.device_ids == ["00A0DE000001"]
    listener.async_stop.assert_not_awaited()


@pytest.mark.asyncio
async def test_release_last_device_stops_listener() -> None:
    """Test the listener is closed with the last device."""
    listener = MusicCastUdpListener()
    listener.async_stop = AsyncMock()
    device = _device("AC44F2851234")
    listener.register(device.device_id, MagicMock())

    await async_release_device(listener, device)

    assert listener.device_ids == []
    listener.async_stop.assert_awaited_once()


@pytest.mark.asyncio
async def test_release_before_registration() -> None:
    """Test a device whose setup failed before it was registered is released."""
    listener = MusicCastUdpListener()
    listener.async_stop = AsyncMock()
    device = _device("AC44F2851234")

    await async_release_device(listener, device)

    device.stop_keep_alive.assert_awaited_once()
    listener.async_stop.assert_awaited_once()
