"""Pytest configuration and shared fixtures."""

from __future__ import annotations

import asyncio
from dataclasses import dataclass, field
from http import HTTPStatus
from typing import TYPE_CHECKING, Any
from unittest.mock import AsyncMock, MagicMock

import pytest
from aiohttp import ClientSession, web


if TYPE_CHECKING:
    from collections.abc import AsyncGenerator


HUB_PREFIX = "/ZAutomation/api/v1"

SAMPLE_HUB_DEVICES = [
    {
        "id": "ZWayVDev_zway_2-0-37",
        "deviceType": "switchBinary",
        "metrics": {"title": "Lamp", "level": "off"},
    },
    {
        "id": "ZWayVDev_zway_3-0-38",
        "deviceType": "switchMultilevel",
        "metrics": {"title": "Dimmer"},
    },
    # Invalid: no title
    {"id": "ZWayVDev_zway_4-0-49", "deviceType": "sensorMultilevel", "metrics": {}},
    # Invalid: no device type
    {"id": "ZWayVDev_zway_5-0-37", "metrics": {"title": "Orphan"}},
]


@dataclass
class HubStub:
    """Scriptable Z-Way hub.

    ``get_statuses`` is consumed one status per GET; once empty every GET
    succeeds. ``login_delays`` works the same way for login latency.
    """

    valid_logins: bool = True
    get_statuses: list[int] = field(default_factory=list)
    login_delays: list[float] = field(default_factory=list)
    login_calls: list[dict[str, Any]] = field(default_factory=list)
    get_calls: list[tuple[str, str | None]] = field(default_factory=list)
    devices: list[dict[str, Any]] = field(default_factory=lambda: list(SAMPLE_HUB_DEVICES))

    def build_app(self) -> web.Application:
        """Create the aiohttp application serving this stub."""
        app = web.Application()
        app.router.add_post(f"{HUB_PREFIX}/login", self.login)
        app.router.add_get(f"{HUB_PREFIX}/devices", self.get_devices)
        app.router.add_get(f"{HUB_PREFIX}/devices/{{device_id}}/command/{{command}}", self.command)
        return app

    async def login(self, request: web.Request) -> web.Response:
        """Mock POST /login endpoint."""
        body = await request.json()
        self.login_calls.append(body)
        number = len(self.login_calls)
        if self.login_delays:
            await asyncio.sleep(self.login_delays.pop(0))
        if not self.valid_logins:
            return web.json_response({"error": "bad credentials"}, status=HTTPStatus.UNAUTHORIZED)
        return web.json_response({"data": {"sid": f"sid-{number}"}, "code": 200})

    def _next_status(self, request: web.Request) -> int:
        self.get_calls.append((request.path, request.headers.get("ZWAYSession")))
        if self.get_statuses:
            return self.get_statuses.pop(0)
        return HTTPStatus.OK

    async def get_devices(self, request: web.Request) -> web.Response:
        """Mock GET /devices endpoint."""
        status = self._next_status(request)
        if status != HTTPStatus.OK:
            return web.Response(status=status)
        return web.json_response({"data": {"devices": self.devices}, "code": 200})

    async def command(self, request: web.Request) -> web.Response:
        """Mock GET /devices/{id}/command/{command} endpoint."""
        status = self._next_status(request)
        if status != HTTPStatus.OK:
            return web.Response(status=status)
        return web.json_response({"data": None, "code": 200, "message": "200 OK"})


@dataclass
class IrStub:
    """IR emitter recording every command it receives."""

    fail_with: int | None = None
    commands: list[tuple[str, str, float]] = field(default_factory=list)

    def build_app(self) -> web.Application:
        """Create the aiohttp application serving this stub."""
        app = web.Application()
        app.router.add_post("/receivers/{endpoint_id}/command", self.command)
        return app

    async def command(self, request: web.Request) -> web.Response:
        """Mock POST /receivers/{endpoint_id}/command endpoint."""
        body = await request.json()
        self.commands.append((request.match_info["endpoint_id"], body["key"], asyncio.get_running_loop().time()))
        if self.fail_with is not None:
            return web.Response(status=self.fail_with)
        return web.Response(status=HTTPStatus.OK)


@pytest.fixture
def hub_stub() -> HubStub:
    """Create a scriptable hub stub."""
    return HubStub()


@pytest.fixture
def ir_stub() -> IrStub:
    """Create a recording IR emitter stub."""
    return IrStub()


@pytest.fixture
async def mock_session() -> AsyncGenerator[ClientSession]:
    """Create a mock aiohttp ClientSession.

    Yields:
        Mock ClientSession for testing.
    """
    session = AsyncMock(spec=ClientSession)
    session.closed = False

    async def mock_close() -> None:
        session.closed = True

    session.close = mock_close

    yield session

    if not session.closed:
        await session.close()


@pytest.fixture
def mock_response() -> MagicMock:
    """Create a mock aiohttp ClientResponse usable as an async context manager.

    Returns:
        Mock ClientResponse for testing.
    """
    response = MagicMock()
    response.status = HTTPStatus.OK
    response.headers = {}
    response.content_type = "application/json"
    response.__aenter__ = AsyncMock(return_value=response)
    response.__aexit__ = AsyncMock(return_value=None)
    return response
