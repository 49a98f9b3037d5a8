"""Session-authenticated client for the hub (Z-Way) API.

This module hides session acquisition and renewal from callers. All methods
return decoded response bodies or raise a typed error.
"""

from __future__ import annotations

import json
import logging
from http import HTTPStatus
from typing import TYPE_CHECKING, Any
from urllib.parse import quote

from aiohttp import ClientError, ClientSession, ClientTimeout

from pyhomerelay.auth import AuthenticationHandler
from pyhomerelay.const import DEFAULT_HUB_HOST, DEFAULT_HUB_PORT, DEFAULT_TIMEOUT, HUB_PATH_PREFIX, SESSION_HEADER
from pyhomerelay.exceptions import AuthError, TransportError


if TYPE_CHECKING:
    from types import TracebackType

    from pyhomerelay.models import HubSession

_LOGGER = logging.getLogger(__name__)


class SessionRelayClient:
    """Authenticated reads and commands against the hub.

    The client logs in lazily on first use and renews the session when the hub
    rejects it. Each call makes at most one renewal and one retry, so a
    failing call costs at most two GETs.

    Example:
        ```python
        from pyhomerelay.hub import SessionRelayClient

        async with SessionRelayClient(username="admin", password="secret") as hub:
            devices = await hub.get_devices()
            await hub.send_command("ZWayVDev_zway_2-0-37", "on")
        ```

    Attributes:
        base_url: Hub base URL (scheme, host and port).
    """

    def __init__(
        self,
        username: str = "",
        password: str = "",
        base_url: str | None = None,
        *,
        session: ClientSession | None = None,
        auth_handler: AuthenticationHandler | None = None,
        hub_session: HubSession | None = None,
        timeout: float | None = DEFAULT_TIMEOUT,
    ) -> None:
        """Initialize the hub client.

        Args:
            username: Hub login name.
            password: Hub password.
            base_url: Hub base URL. Defaults to the local hub on port 8083.
            session: Optional aiohttp ClientSession. If not provided, one will be
                created when entering the context manager.
            auth_handler: Optional pre-configured AuthenticationHandler. If not
                provided, one will be created with the given credentials.
            hub_session: Optional session holder passed to the created handler.
            timeout: Optional total timeout in seconds per request. None
                disables the timeout.
        """
        self.base_url = (base_url or f"http://{DEFAULT_HUB_HOST}:{DEFAULT_HUB_PORT}").rstrip("/")
        self._session = session
        self._owns_session = session is None
        self._timeout = timeout

        if auth_handler is not None:
            self._auth_handler = auth_handler
        else:
            self._auth_handler = AuthenticationHandler(
                username=username,
                password=password,
                base_url=self.base_url,
                session=session,
                hub_session=hub_session,
                timeout=timeout,
            )

    @property
    def auth_handler(self) -> AuthenticationHandler:
        """Get the authentication handler."""
        return self._auth_handler

    async def __aenter__(self) -> SessionRelayClient:
        """Enter the context manager.

        Creates a session if needed and shares it with the auth handler.

        Returns:
            Self for use in async with statements.
        """
        if self._session is None:
            self._session = ClientSession()
            self._owns_session = True

        self._auth_handler.set_session(self._session)
        await self._auth_handler.__aenter__()
        return self

    async def __aexit__(
        self,
        exc_type: type[BaseException] | None,
        exc_val: BaseException | None,
        exc_tb: TracebackType | None,
    ) -> None:
        """Exit the context manager, closing the session if owned."""
        await self._auth_handler.__aexit__(exc_type, exc_val, exc_tb)

        if self._owns_session and self._session is not None:
            await self._session.close()

    def _validate_session(self) -> ClientSession:
        if self._session is None:
            msg = "Session not initialized. Use 'async with' or provide a session."
            raise RuntimeError(msg)

        if self._session.closed:
            msg = "Session is closed. Cannot make request."
            raise RuntimeError(msg)

        return self._session

    async def authenticate(self) -> str:
        """Log in to the hub and replace the current session.

        Returns:
            The new session id.

        Raises:
            AuthError: If the login fails for any reason.
        """
        return await self._auth_handler.authenticate()

    async def authenticated_get(self, path: str) -> dict[str, Any]:
        """GET a hub path with the current session, renewing it once if rejected.

        Args:
            path: Path below the API prefix (e.g., "/devices").

        Returns:
            Decoded JSON body, or an empty dict if the body is not JSON.

        Raises:
            AuthError: If login fails, or the hub rejects the renewed session.
            TransportError: On network failure or a non-success status.
        """
        session = self._validate_session()

        if not self._auth_handler.is_authenticated():
            await self.authenticate()

        status, data = await self._get(session, path)

        if self._auth_handler.should_retry_on_status(status):
            _LOGGER.warning("Hub rejected session with status %d, reauthenticating", status)
            await self.authenticate()

            status, data = await self._get(session, path)
            if self._auth_handler.should_retry_on_status(status):
                msg = f"Hub rejected renewed session with status {status}"
                raise AuthError(msg)

        if not HTTPStatus.OK <= status < HTTPStatus.MULTIPLE_CHOICES:
            msg = f"Hub request {path} failed with status {status}"
            raise TransportError(msg, status=status)

        return data

    async def _get(self, session: ClientSession, path: str) -> tuple[int, dict[str, Any]]:
        """Issue one GET with the session header attached."""
        url = f"{self.base_url}{HUB_PATH_PREFIX}{path}"
        headers = {SESSION_HEADER: self._auth_handler.session_id or ""}

        _LOGGER.debug("GET %s", url)

        try:
            async with session.get(url, headers=headers, timeout=ClientTimeout(total=self._timeout)) as response:
                response_data: dict[str, Any] = {}
                if response.status < HTTPStatus.MULTIPLE_CHOICES and "application/json" in response.content_type:
                    response_data = await response.json()
                _LOGGER.debug("Hub replied %d for %s", response.status, path)
                return response.status, response_data

        except TimeoutError as exc:
            msg = f"Hub request {path} timed out"
            raise TransportError(msg) from exc

        except ClientError as exc:
            msg = f"Failed to reach hub: {exc}"
            raise TransportError(msg) from exc

        except json.JSONDecodeError as exc:
            msg = f"Invalid JSON response from hub: {exc}"
            raise TransportError(msg) from exc

    # -------------------------------------------------------------------------
    # Device Endpoints
    # -------------------------------------------------------------------------

    async def get_devices(self) -> list[Any]:
        """Get the raw device listing from the hub.

        Returns:
            The ``data.devices`` list, unfiltered.

        Raises:
            TransportError: If the body has no device list.
        """
        body = await self.authenticated_get("/devices")
        data = body.get("data")
        devices = data.get("devices") if isinstance(data, dict) else None
        if not isinstance(devices, list):
            msg = "Hub device listing has no data.devices list"
            raise TransportError(msg)
        return devices

    async def send_command(self, device_id: str, command: str) -> dict[str, Any]:
        """Send a command verb (e.g., "on", "off") to a hub device.

        Args:
            device_id: Hub device id.
            command: Command verb.

        Returns:
            Decoded hub response body.
        """
        path = f"/devices/{quote(device_id, safe='')}/command/{quote(command, safe='')}"
        return await self.authenticated_get(path)
