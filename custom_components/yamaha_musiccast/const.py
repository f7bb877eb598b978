"""Constants for the Yamaha MusicCast integration."""

from __future__ import annotations

from typing import Final

DOMAIN: Final = "yamaha_musiccast"

CONF_SYNC_VOLUME: Final = "sync_volume"
DEFAULT_SYNC_VOLUME: Final = False

# UDP event push
UDP_PORT: Final = 41100
BUFFER_SIZE: Final = 5120
KEEP_ALIVE_DELAY: Final = 5  # seconds
KEEP_ALIVE_INTERVAL: Final = 300  # 5 minutes
HEADER_APP_NAME: Final = "X-AppName"
HEADER_APP_PORT: Final = "X-AppPort"
APP_NAME: Final = "MusicCast/1"

# HTTP timeouts in seconds
CONNECTION_TIMEOUT: Final = 5
LONG_CONNECTION_TIMEOUT: Final = 60

API_BASE_PATH: Final = "YamahaExtendedControl"

# Zones in the order they are counted by system.zone_num
ZONE_MAIN: Final = "main"
ZONES: Final = ["main", "zone2", "zone3", "zone4"]
NETUSB: Final = "netusb"

RESPONSE_CODE_OK: Final = "0"

POWER_ON: Final = "on"
POWER_STANDBY: Final = "standby"

# Distribution roles
ROLE_SERVER: Final = "server"
ROLE_CLIENT: Final = "client"
ROLE_NONE: Final = "none"

# Link server option "<host>***<zone>", empty means standalone
SERVER_SEPARATOR: Final = "***"
STANDALONE: Final = ""
STANDALONE_LABEL: Final = "Standalone"

# Playback commands
PLAYBACK_PLAY: Final = "play"
PLAYBACK_PAUSE: Final = "pause"
PLAYBACK_STOP: Final = "stop"
PLAYBACK_NEXT: Final = "next"
PLAYBACK_PREVIOUS: Final = "previous"
PLAYBACK_REWIND: Final = "fast_reverse_start"
PLAYBACK_FAST_FORWARD: Final = "fast_forward_end"

# Player states derived from the reported playback
PLAYER_PLAYING: Final = "playing"
PLAYER_PAUSED: Final = "paused"
PLAYER_REWINDING: Final = "rewinding"
PLAYER_FAST_FORWARDING: Final = "fast_forwarding"

PLAYBACK_STATES: Final[dict[str, str]] = {
    "play": PLAYER_PLAYING,
    "stop": PLAYER_PAUSED,
    "pause": PLAYER_PAUSED,
    "fast_reverse": PLAYER_REWINDING,
    "fast_forward": PLAYER_FAST_FORWARDING,
}

REPEAT_MODES: Final = ["off", "one", "all"]
SHUFFLE_MODES: Final = ["off", "on", "songs", "albums"]
SLEEP_OPTIONS: Final = [0, 30, 60, 90, 120]

SERVICE_RECALL_SCENE: Final = "recall_scene"
ATTR_SCENE: Final = "scene"
