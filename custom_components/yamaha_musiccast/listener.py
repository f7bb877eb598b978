"""UDP event listener shared by all MusicCast devices.

Devices push JSON event packets to UDP port 41100 once a client announced
itself with the keep alive request. One socket serves every device; packets
are routed by their ``device_id``.
"""

from __future__ import annotations

import asyncio
from collections.abc import Callable
import json
import logging
import uuid

from .const import BUFFER_SIZE, UDP_PORT
from .models import MusicCastUdpMessage

_LOGGER = logging.getLogger(__name__)

MusicCastEventHandler = Callable[[MusicCastUdpMessage, str], None]


def tracking_id() -> str:
    """Return a new 32 hex character id used to follow a packet in the log."""
    return uuid.uuid4().hex[:32]


class MusicCastUdpProtocol(asyncio.DatagramProtocol):
    """Decode event packets and hand them to the listener."""

    def __init__(self, listener: MusicCastUdpListener) -> None:
        """Initialize protocol."""
        self._listener = listener

    def datagram_received(self, data: bytes, addr: tuple) -> None:
        """Handle one event packet."""
        self._listener.handle_packet(data[:BUFFER_SIZE], addr)

    def error_received(self, exc: Exception) -> None:
        """Log socket errors, the endpoint stays open."""
        _LOGGER.warning("MusicCast UDP error: %s", exc)

    def connection_lost(self, exc: Exception | None) -> None:
        """Log closing of the socket."""
        if exc:
            _LOGGER.warning("MusicCast UDP listener lost: %s", exc)
        else:
            _LOGGER.debug("MusicCast UDP listener closed")


class MusicCastUdpListener:
    """Route pushed events to registered devices."""

    def __init__(self, port: int = UDP_PORT) -> None:
        """Initialize listener.

        Args:
            port: Local UDP port the devices send to
        """
        self.port = port
        self._handlers: dict[str, MusicCastEventHandler] = {}
        self._transport: asyncio.DatagramTransport | None = None

    @property
    def running(self) -> bool:
        """Return True if the socket is open."""
        return self._transport is not None

    def register(self, device_id: str, handler: MusicCastEventHandler) -> None:
        """Route the events of a device to a handler."""
        _LOGGER.debug("Registering MusicCast device %s", device_id)
        self._handlers[device_id.upper()] = handler

    def unregister(self, device_id: str) -> None:
        """Stop routing the events of a device."""
        self._handlers.pop(device_id.upper(), None)

    @property
    def device_ids(self) -> list[str]:
        """Registered device ids."""
        return list(self._handlers)

    async def async_start(self) -> None:
        """Open the UDP socket.

        Raises:
            OSError: If the port cannot be bound
        """
        if self._transport is not None:
            return
        loop = asyncio.get_running_loop()
        transport, _ = await loop.create_datagram_endpoint(
            lambda: MusicCastUdpProtocol(self),
            local_addr=("0.0.0.0", self.port),
            reuse_port=True,
        )
        self._transport = transport
        _LOGGER.info("MusicCast UDP listener started on port %d", self.port)

    async def async_stop(self) -> None:
        """Close the UDP socket."""
        if self._transport is not None:
            self._transport.close()
            self._transport = None
            _LOGGER.info("MusicCast UDP listener stopped")

    def handle_packet(self, data: bytes, addr: tuple | None = None) -> None:
        """Decode a packet and dispatch it to the device it belongs to."""
        track = tracking_id()
        try:
            payload = json.loads(data.decode("utf-8"))
        except (UnicodeDecodeError, ValueError) as err:
            _LOGGER.debug("%s: Dropping malformed packet from %s: %s", track, addr, err)
            return
        if not isinstance(payload, dict):
            _LOGGER.debug("%s: Dropping unexpected packet from %s", track, addr)
            return

        message = MusicCastUdpMessage.from_dict(payload)
        _LOGGER.debug("%s: Event from %s: %s", track, addr, payload)

        handler = self._handlers.get(message.device_id.upper())
        if handler is None:
            _LOGGER.debug("%s: No device registered for %s", track, message.device_id)
            return
        handler(message, track)
