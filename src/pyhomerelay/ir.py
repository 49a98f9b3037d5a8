"""Client for the stateless IR emitter service."""

from __future__ import annotations

import logging
from http import HTTPStatus
from typing import TYPE_CHECKING
from urllib.parse import quote

from aiohttp import ClientError, ClientSession, ClientTimeout

from pyhomerelay.const import DEFAULT_TIMEOUT
from pyhomerelay.exceptions import TransportError


if TYPE_CHECKING:
    from types import TracebackType

_LOGGER = logging.getLogger(__name__)


class IrEmitterClient:
    """Send single key presses to IR receivers.

    Every call is one ``POST /receivers/{endpointId}/command`` with body
    ``{"key": key}``. Any 2xx status counts as acknowledgment; the body is
    ignored.

    Attributes:
        base_url: IR emitter base URL (scheme, host and port).
    """

    def __init__(
        self,
        base_url: str,
        *,
        session: ClientSession | None = None,
        timeout: float | None = DEFAULT_TIMEOUT,
    ) -> None:
        """Initialize the IR emitter client.

        Args:
            base_url: IR emitter base URL, e.g. ``http://irserver:3000``.
            session: Optional aiohttp ClientSession. If not provided, one will be
                created when entering the context manager.
            timeout: Optional total timeout in seconds per request.
        """
        self.base_url = base_url.rstrip("/")
        self._session = session
        self._owns_session = session is None
        self._timeout = timeout

    async def __aenter__(self) -> IrEmitterClient:
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

    async def send_command(self, key: str, endpoint_id: str) -> None:
        """Emit one key press at an endpoint.

        Args:
            key: Hardware key identifier (e.g., "KEY_POWER").
            endpoint_id: Receiver the key is aimed at.

        Raises:
            TransportError: If the emitter is unreachable or returns a
                non-success status.
            RuntimeError: If the session is not open.
        """
        if self._session is None or self._session.closed:
            msg = "Session not initialized. Use 'async with' or provide a session."
            raise RuntimeError(msg)

        url = f"{self.base_url}/receivers/{quote(endpoint_id, safe='')}/command"

        _LOGGER.debug("POST %s key=%s", url, key)

        try:
            async with self._session.post(
                url,
                json={"key": key},
                timeout=ClientTimeout(total=self._timeout),
            ) as response:
                if not HTTPStatus.OK <= response.status < HTTPStatus.MULTIPLE_CHOICES:
                    msg = f"IR emitter rejected {key} for {endpoint_id} with status {response.status}"
                    raise TransportError(msg, status=response.status)

        except TimeoutError as exc:
            msg = f"IR command {key} for {endpoint_id} timed out"
            raise TransportError(msg) from exc

        except ClientError as exc:
            msg = f"Failed to reach IR emitter: {exc}"
            raise TransportError(msg) from exc
