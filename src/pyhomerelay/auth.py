"""Authentication handler for the hub (Z-Way) API."""

from __future__ import annotations

import json
import logging
from http import HTTPStatus
from typing import TYPE_CHECKING, Any

from aiohttp import ClientError, ClientSession, ClientTimeout

from pyhomerelay.const import DEFAULT_TIMEOUT, HUB_PATH_PREFIX
from pyhomerelay.exceptions import AuthError
from pyhomerelay.models import HubSession


if TYPE_CHECKING:
    from collections.abc import Callable
    from types import TracebackType

_LOGGER = logging.getLogger(__name__)


class AuthenticationHandler:
    """Handle session authentication with the hub.

    The handler logs in with the configured credentials and stores the
    returned session id in a ``HubSession`` holder. It never tracks expiry:
    callers detect an invalid session from a 401/403 response and ask for a
    new login.

    The holder can be injected so several clients share one session. No lock
    guards it. Two renewals running at the same time both log in and the
    last one to finish wins.

    Attributes:
        username: Hub login name.
        password: Hub password.
        base_url: Hub base URL (scheme, host and port, no trailing slash).
        hub_session: Holder for the current session id.
    """

    def __init__(
        self,
        username: str,
        password: str,
        base_url: str,
        *,
        session: ClientSession | None = None,
        hub_session: HubSession | None = None,
        timeout: float | None = DEFAULT_TIMEOUT,
        on_session_updated: Callable[[HubSession], None] | None = None,
    ) -> None:
        """Initialize the authentication handler.

        Args:
            username: Hub login name.
            password: Hub password.
            base_url: Hub base URL, e.g. ``http://localhost:8083``.
            session: Optional aiohttp ClientSession. If not provided, one will be
                created when entering the context manager.
            hub_session: Optional session holder to share with other clients.
            timeout: Optional total timeout in seconds for the login request.
                None disables the timeout.
            on_session_updated: Optional callback invoked with the holder after
                every successful login.
        """
        self.username = username
        self.password = password
        self.base_url = base_url.rstrip("/")
        self.hub_session = hub_session if hub_session is not None else HubSession()

        self._session = session
        self._owns_session = session is None
        self._timeout = timeout
        self._on_session_updated = on_session_updated

    def set_session(self, session: ClientSession) -> None:
        """Set the aiohttp session for this handler.

        The handler will not take ownership and will not close this session.

        Args:
            session: The aiohttp ClientSession to use for requests.
        """
        self._session = session
        self._owns_session = False

    async def __aenter__(self) -> AuthenticationHandler:
        """Enter the context manager, creating a session if needed."""
        if self._session is None:
            self._session = ClientSession()
            self._owns_session = True
        return self

    async def __aexit__(
        self,
        exc_type: type[BaseException] | None,
        exc_val: BaseException | None,
        exc_tb: TracebackType | None,
    ) -> None:
        """Exit the context manager, closing the session if owned."""
        if self._owns_session and self._session is not None:
            await self._session.close()

    @property
    def session_id(self) -> str | None:
        """Get the current session id."""
        return self.hub_session.sid

    def is_authenticated(self) -> bool:
        """Check if a session id is held."""
        return self.hub_session.is_active

    def _validate_session(self) -> ClientSession:
        """Validate that the session is initialized and open.

        Returns:
            The open ClientSession.

        Raises:
            RuntimeError: If session is not initialized or is closed.
        """
        if self._session is None:
            msg = "Session not initialized. Use 'async with' or provide a session."
            raise RuntimeError(msg)

        if self._session.closed:
            msg = "Session is closed. Cannot make requests."
            raise RuntimeError(msg)

        return self._session

    async def authenticate(self) -> str:
        """Log in to the hub and store the new session id.

        Sends ``{login, password}`` to ``{prefix}/login`` and reads the session
        id from ``data.sid``.

        Returns:
            The new session id.

        Raises:
            AuthError: If the hub is unreachable, returns a non-success status,
                or the response lacks a session id.
            RuntimeError: If the aiohttp session is not open.
        """
        session = self._validate_session()
        url = f"{self.base_url}{HUB_PATH_PREFIX}/login"
        payload = {"login": self.username, "password": self.password}

        _LOGGER.debug("POST %s", url)

        try:
            async with session.post(url, json=payload, timeout=ClientTimeout(total=self._timeout)) as response:
                if response.status != HTTPStatus.OK:
                    msg = f"Hub login failed with status {response.status}"
                    raise AuthError(msg)

                auth_data = await response.json(content_type=None)

        except TimeoutError as exc:
            msg = "Hub login request timed out"
            raise AuthError(msg) from exc

        except ClientError as exc:
            msg = f"Failed to connect to hub: {exc}"
            raise AuthError(msg) from exc

        except json.JSONDecodeError as exc:
            msg = f"Invalid JSON response from hub login: {exc}"
            raise AuthError(msg) from exc

        sid = self._extract_sid(auth_data)
        if not sid:
            msg = "Missing session id in hub login response"
            raise AuthError(msg)

        self.hub_session.sid = sid
        _LOGGER.info("Hub authentication successful for %s", self.username)

        if self._on_session_updated is not None:
            self._on_session_updated(self.hub_session)

        return sid

    @staticmethod
    def _extract_sid(auth_data: Any) -> str | None:
        """Read ``data.sid`` from a login response body."""
        if not isinstance(auth_data, dict):
            return None
        data = auth_data.get("data")
        if not isinstance(data, dict):
            return None
        sid = data.get("sid")
        return str(sid) if sid else None

    def should_retry_on_status(self, status_code: int) -> bool:
        """Check if a status code means the session was rejected.

        Args:
            status_code: HTTP status code from a hub response.

        Returns:
            True for 401 Unauthorized or 403 Forbidden.
        """
        return status_code in (HTTPStatus.UNAUTHORIZED, HTTPStatus.FORBIDDEN)
