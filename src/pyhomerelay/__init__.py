"""Protocol-translation relay between a REST endpoint surface and home backends.

This package exposes television, streaming device and hub-managed endpoints
and forwards operations to a session-authenticated home-automation hub (Z-Way)
or a stateless IR emitter.

The library is organized into three layers:
1. **Transport Layer** (pyhomerelay.hub, pyhomerelay.ir): HTTP clients for the hub and IR emitter
2. **Relay Layer** (pyhomerelay.client, pyhomerelay.repeater): Request dispatch and paced IR repeats
3. **Web Layer** (pyhomerelay.server): aiohttp application serving ``/endpoints``

Example:
    Running the relay:

    ```python
    from aiohttp import web
    from pyhomerelay import RelayConfig, build_app, configure_logging

    config = RelayConfig.from_env()
    configure_logging(config.verbose)
    web.run_app(build_app(config), port=config.port)
    ```

    Using the hub client directly:

    ```python
    from pyhomerelay import SessionRelayClient

    async with SessionRelayClient(username="admin", password="secret") as hub:
        devices = await hub.get_devices()
    ```
"""

from __future__ import annotations

from pyhomerelay.auth import AuthenticationHandler
from pyhomerelay.client import EndpointRelay
from pyhomerelay.config import RelayConfig, configure_logging
from pyhomerelay.devices import STATIC_DEVICES, classify
from pyhomerelay.exceptions import (
    AuthError,
    RelayError,
    TransportError,
    UnsupportedOperationError,
    ValidationError,
)
from pyhomerelay.hub import SessionRelayClient
from pyhomerelay.ir import IrEmitterClient
from pyhomerelay.models import (
    DeviceClass,
    DeviceDescriptor,
    HubSession,
    PowerStateReport,
    RepeatJob,
    RepeatRequest,
    RepeatState,
)
from pyhomerelay.parsers import is_hub_device_valid, parse_hub_device, parse_hub_devices
from pyhomerelay.repeater import CommandRepeater
from pyhomerelay.server import build_app, create_app


__version__ = "0.1.0"

__all__ = [
    "STATIC_DEVICES",
    "AuthError",
    "AuthenticationHandler",
    "CommandRepeater",
    "DeviceClass",
    "DeviceDescriptor",
    "EndpointRelay",
    "HubSession",
    "IrEmitterClient",
    "PowerStateReport",
    "RelayConfig",
    "RelayError",
    "RepeatJob",
    "RepeatRequest",
    "RepeatState",
    "SessionRelayClient",
    "TransportError",
    "UnsupportedOperationError",
    "ValidationError",
    "__version__",
    "build_app",
    "classify",
    "configure_logging",
    "create_app",
    "is_hub_device_valid",
    "parse_hub_device",
    "parse_hub_devices",
]
