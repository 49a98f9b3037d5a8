"""Constants for pyhomerelay library."""

from __future__ import annotations


# Hub (Z-Way) API Configuration
HUB_PATH_PREFIX = "/ZAutomation/api/v1"
DEFAULT_HUB_HOST = "localhost"
DEFAULT_HUB_PORT = 8083
SESSION_HEADER = "ZWAYSession"

# Relay server
DEFAULT_RELAY_PORT = 8080

# No timeout on outbound requests unless configured
DEFAULT_TIMEOUT: float | None = None  # seconds

# IR repeat pacing
PAUSE_SECONDS = 1.0
MAX_IR_REPEAT = 50  # guards against request amplification

# TV key identifiers understood by the IR emitter
TV_KEY_POWER = "KEY_POWER"
TV_KEY_VOLUME_UP = "KEY_VOLUMEUP"
TV_KEY_VOLUME_DOWN = "KEY_VOLUMEDOWN"
TV_KEY_MUTE = "KEY_MUTE"

# Endpoint resources
RESOURCE_POWER = "power"
RESOURCE_CHANNEL = "channel"
RESOURCE_INPUT = "input"
RESOURCE_VOLUME = "volume"
RESOURCE_PLAYBACK = "playback"

# Built-in endpoint ids
ENDPOINT_TV = "tv"
ENDPOINT_TELEVISION = "television"
ENDPOINT_ROKU = "roku"
