"""Endpoint relay coordinating the hub and IR emitter clients.

This module maps endpoint/resource requests onto the hub client or the IR
repeater and builds the reply bodies.
"""

from __future__ import annotations

import logging
import math
from typing import TYPE_CHECKING, Any

from pyhomerelay.const import (
    RESOURCE_CHANNEL,
    RESOURCE_PLAYBACK,
    RESOURCE_POWER,
    RESOURCE_VOLUME,
    TV_KEY_MUTE,
    TV_KEY_POWER,
    TV_KEY_VOLUME_DOWN,
    TV_KEY_VOLUME_UP,
)
from pyhomerelay.devices import STATIC_DEVICES, classify
from pyhomerelay.exceptions import RelayError, UnsupportedOperationError, ValidationError
from pyhomerelay.hub import SessionRelayClient
from pyhomerelay.ir import IrEmitterClient
from pyhomerelay.models import DeviceClass, DeviceDescriptor, PowerStateReport
from pyhomerelay.parsers import parse_hub_devices
from pyhomerelay.repeater import CommandRepeater


if TYPE_CHECKING:
    from types import TracebackType

    from aiohttp import ClientSession

    from pyhomerelay.config import RelayConfig

_LOGGER = logging.getLogger(__name__)

NOT_IMPLEMENTED = "Not yet implemented"
SUCCESS_BODY: dict[str, Any] = {"code": 200, "message": "200 OK"}


class EndpointRelay:
    """Dispatch endpoint requests to the hub or the IR emitter.

    Each request is served by exactly one backend:
    - Television endpoints go to the IR emitter (single press or repeat)
    - The streaming device has no supported resources yet
    - Every other endpoint is forwarded to the hub by id

    Example:
        ```python
        config = RelayConfig.from_env()

        async with EndpointRelay.from_config(config) as relay:
            endpoints = await relay.list_endpoints()
            await relay.handle_put("tv", "volume", {"volumeSteps": -3})
        ```
    """

    def __init__(
        self,
        *,
        hub: SessionRelayClient,
        emitter: IrEmitterClient,
        repeater: CommandRepeater | None = None,
    ) -> None:
        """Initialize the relay.

        Args:
            hub: Client for hub-managed devices.
            emitter: Client for single IR emissions.
            repeater: Optional repeater. Defaults to one built on ``emitter``.
        """
        self._hub = hub
        self._emitter = emitter
        self._repeater = repeater if repeater is not None else CommandRepeater(emitter)

    @classmethod
    def from_config(cls, config: RelayConfig, *, session: ClientSession | None = None) -> EndpointRelay:
        """Build a relay and its clients from configuration.

        Args:
            config: Relay configuration.
            session: Optional shared aiohttp ClientSession.

        Returns:
            A relay ready to be entered with ``async with``.
        """
        hub = SessionRelayClient(
            username=config.username,
            password=config.password,
            base_url=config.hub_base_url,
            session=session,
            timeout=config.request_timeout,
        )
        emitter = IrEmitterClient(config.ir_base_url, session=session, timeout=config.request_timeout)
        return cls(hub=hub, emitter=emitter)

    @property
    def hub(self) -> SessionRelayClient:
        """Get the hub client."""
        return self._hub

    @property
    def repeater(self) -> CommandRepeater:
        """Get the IR command repeater."""
        return self._repeater

    async def __aenter__(self) -> EndpointRelay:
        """Enter the hub and IR emitter client contexts."""
        await self._hub.__aenter__()
        try:
            await self._emitter.__aenter__()
        except Exception:
            await self._hub.__aexit__(None, None, None)
            raise
        return self

    async def __aexit__(
        self,
        exc_type: type[BaseException] | None,
        exc_val: BaseException | None,
        exc_tb: TracebackType | None,
    ) -> None:
        """Stop background repeats and close the clients."""
        await self._repeater.shutdown()
        await self._emitter.__aexit__(exc_type, exc_val, exc_tb)
        await self._hub.__aexit__(exc_type, exc_val, exc_tb)

    async def list_endpoints(self) -> list[DeviceDescriptor]:
        """List the built-in endpoints followed by valid hub devices.

        Hub failures are logged and the built-in list is returned alone.

        Returns:
            Endpoint descriptors.
        """
        endpoints = list(STATIC_DEVICES)

        try:
            hub_devices = await self._hub.get_devices()
        except RelayError as exc:
            _LOGGER.warning("Hub device discovery error: %s", exc)
            return endpoints

        hub_endpoints = parse_hub_devices(hub_devices)
        _LOGGER.debug("Discovered %d hub endpoints", len(hub_endpoints))
        return endpoints + hub_endpoints

    async def handle_put(self, endpoint_id: str, resource_id: str, body: dict[str, Any]) -> dict[str, Any]:
        """Apply a resource change to an endpoint.

        Args:
            endpoint_id: Endpoint id from the request path.
            resource_id: Resource name from the request path.
            body: Decoded request body.

        Returns:
            Reply body for a successful request.

        Raises:
            UnsupportedOperationError: If the endpoint has no handler for the resource.
            ValidationError: If the body lacks the fields the resource needs.
            AuthError: If the hub rejects the relay's credentials.
            TransportError: If a backend is unreachable or refuses the command.
        """
        device_class = classify(endpoint_id)
        _LOGGER.debug("PUT %s/%s classified as %s", endpoint_id, resource_id, device_class.value)

        if device_class is DeviceClass.TELEVISION:
            return await self._handle_tv(endpoint_id, resource_id, body)
        if device_class is DeviceClass.STREAMING_DEVICE:
            return await self._handle_streaming_device(endpoint_id, resource_id, body)
        return await self._handle_hub_device(endpoint_id, resource_id, body)

    # -------------------------------------------------------------------------
    # Handlers
    # -------------------------------------------------------------------------

    async def _handle_tv(self, endpoint_id: str, resource_id: str, body: dict[str, Any]) -> dict[str, Any]:
        if resource_id == RESOURCE_POWER:
            await self._emitter.send_command(TV_KEY_POWER, endpoint_id)
            return PowerStateReport(state=body.get("state")).as_dict()

        if resource_id == RESOURCE_VOLUME:
            return await self._handle_tv_volume(endpoint_id, body)

        if resource_id in (RESOURCE_CHANNEL, RESOURCE_PLAYBACK):
            raise UnsupportedOperationError(NOT_IMPLEMENTED, endpoint_id=endpoint_id, resource_id=resource_id)

        raise _unsupported(endpoint_id, resource_id)

    async def _handle_tv_volume(self, endpoint_id: str, body: dict[str, Any]) -> dict[str, Any]:
        # The TV reports no volume state, so success only means "accepted"
        mute = body.get("mute")
        if isinstance(mute, bool):
            await self._emitter.send_command(TV_KEY_MUTE, endpoint_id)
            return dict(SUCCESS_BODY)

        steps = _parse_volume_steps(body.get("volumeSteps"))
        if steps is None:
            msg = "Invalid request: expected boolean 'mute' or non-zero 'volumeSteps'"
            raise ValidationError(msg, parameter_name="volumeSteps")

        key = TV_KEY_VOLUME_DOWN if steps < 0 else TV_KEY_VOLUME_UP
        self._repeater.start(key, endpoint_id, int(abs(steps)))
        return dict(SUCCESS_BODY)

    async def _handle_streaming_device(
        self,
        endpoint_id: str,
        resource_id: str,
        body: dict[str, Any],
    ) -> dict[str, Any]:
        if resource_id in (RESOURCE_CHANNEL, RESOURCE_PLAYBACK):
            raise UnsupportedOperationError(NOT_IMPLEMENTED, endpoint_id=endpoint_id, resource_id=resource_id)

        raise _unsupported(endpoint_id, resource_id)

    async def _handle_hub_device(self, endpoint_id: str, resource_id: str, body: dict[str, Any]) -> dict[str, Any]:
        if resource_id != RESOURCE_POWER:
            raise _unsupported(endpoint_id, resource_id)

        state = body.get("state")
        if not isinstance(state, str) or not state:
            msg = "Invalid request: missing power 'state'"
            raise ValidationError(msg, parameter_name="state")

        response = await self._hub.send_command(endpoint_id, state)
        _LOGGER.debug("Hub command response: %s", response)
        return PowerStateReport(state=state).as_dict()


def _unsupported(endpoint_id: str, resource_id: str) -> UnsupportedOperationError:
    msg = f"Endpoint {endpoint_id} does not support {resource_id}"
    return UnsupportedOperationError(msg, endpoint_id=endpoint_id, resource_id=resource_id)


def _parse_volume_steps(value: Any) -> float | None:
    """Return a finite, non-zero step count, or None if there is none.

    Form-encoded bodies carry numbers as strings, so those are parsed too.
    """
    if isinstance(value, bool):
        return None
    if isinstance(value, str):
        try:
            value = float(value)
        except ValueError:
            return None
    if not isinstance(value, int | float) or not math.isfinite(value) or not value:
        return None
    return value
