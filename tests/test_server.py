"""Tests for the aiohttp web application using pytest-aiohttp."""

from __future__ import annotations

import asyncio
from http import HTTPStatus
from typing import TYPE_CHECKING
from unittest.mock import AsyncMock, MagicMock

import pytest

from pyhomerelay.client import EndpointRelay
from pyhomerelay.config import RelayConfig
from pyhomerelay.devices import STATIC_DEVICES
from pyhomerelay.exceptions import TransportError, UnsupportedOperationError
from pyhomerelay.hub import SessionRelayClient
from pyhomerelay.ir import IrEmitterClient
from pyhomerelay.repeater import CommandRepeater
from pyhomerelay.server import build_app, create_app


if TYPE_CHECKING:
    from aiohttp.test_utils import TestClient, TestServer

    from tests.conftest import HubStub, IrStub


@pytest.fixture
def mock_relay() -> MagicMock:
    """Create a mock relay."""
    relay = MagicMock(spec=EndpointRelay)
    relay.list_endpoints = AsyncMock(return_value=list(STATIC_DEVICES))
    relay.handle_put = AsyncMock(return_value={"code": 200, "message": "200 OK"})
    return relay


class TestRoutes:
    """Test request handling with a mocked relay."""

    async def test_get_endpoints(self, aiohttp_client, mock_relay: MagicMock) -> None:
        """Test that GET /endpoints returns descriptors as JSON."""
        client: TestClient = await aiohttp_client(create_app(mock_relay))

        response = await client.get("/endpoints")

        assert response.status == HTTPStatus.OK
        body = await response.json()
        assert [endpoint["id"] for endpoint in body] == ["tv", "television", "roku"]
        assert body[0]["manufacturer"] == "Sharp"

    async def test_put_json_body(self, aiohttp_client, mock_relay: MagicMock) -> None:
        """Test that the path and JSON body reach the relay."""
        client: TestClient = await aiohttp_client(create_app(mock_relay))

        response = await client.put("/endpoints/tv/volume", json={"volumeSteps": 2})

        assert response.status == HTTPStatus.OK
        assert await response.json() == {"code": 200, "message": "200 OK"}
        mock_relay.handle_put.assert_awaited_once_with("tv", "volume", {"volumeSteps": 2})

    async def test_put_form_body(self, aiohttp_client, mock_relay: MagicMock) -> None:
        """Test that form-encoded bodies are accepted."""
        client: TestClient = await aiohttp_client(create_app(mock_relay))

        response = await client.put("/endpoints/lamp/power", data={"state": "on"})

        assert response.status == HTTPStatus.OK
        mock_relay.handle_put.assert_awaited_once_with("lamp", "power", {"state": "on"})

    async def test_put_without_body(self, aiohttp_client, mock_relay: MagicMock) -> None:
        """Test that a missing body is passed on as empty."""
        client: TestClient = await aiohttp_client(create_app(mock_relay))

        await client.put("/endpoints/tv/channel")

        mock_relay.handle_put.assert_awaited_once_with("tv", "channel", {})

    @pytest.mark.parametrize("payload", [b"{not json", b"[1, 2]", b'{"mute": "\xff"}'])
    async def test_put_invalid_json(self, aiohttp_client, mock_relay: MagicMock, payload: bytes) -> None:
        """Test that malformed bodies fail with 500 before dispatch."""
        client: TestClient = await aiohttp_client(create_app(mock_relay))

        response = await client.put(
            "/endpoints/tv/volume",
            data=payload,
            headers={"Content-Type": "application/json"},
        )

        assert response.status == HTTPStatus.INTERNAL_SERVER_ERROR
        assert "error" in await response.json()
        mock_relay.handle_put.assert_not_awaited()

    async def test_relay_error_is_500(self, aiohttp_client, mock_relay: MagicMock) -> None:
        """Test that every relay error becomes a generic 500 with its message."""
        mock_relay.handle_put.side_effect = UnsupportedOperationError("Not yet implemented")
        client: TestClient = await aiohttp_client(create_app(mock_relay))

        response = await client.put("/endpoints/roku/channel", json={})

        assert response.status == HTTPStatus.INTERNAL_SERVER_ERROR
        assert await response.json() == {"error": "Not yet implemented"}

    async def test_transport_error_message(self, aiohttp_client, mock_relay: MagicMock) -> None:
        """Test that backend failures carry their message to the client."""
        mock_relay.handle_put.side_effect = TransportError("IR emitter rejected KEY_POWER")
        client: TestClient = await aiohttp_client(create_app(mock_relay))

        response = await client.put("/endpoints/tv/power", json={"state": "on"})

        assert (await response.json())["error"] == "IR emitter rejected KEY_POWER"


class TestEndToEnd:
    """Test the full stack against stub hub and IR servers."""

    @pytest.fixture
    async def stack(self, aiohttp_server, aiohttp_client, hub_stub: HubStub, ir_stub: IrStub):
        """Serve the relay app wired to both stub backends."""
        hub_server: TestServer = await aiohttp_server(hub_stub.build_app())
        ir_server: TestServer = await aiohttp_server(ir_stub.build_app())

        hub = SessionRelayClient(username="admin", password="secret", base_url=str(hub_server.make_url("")))
        emitter = IrEmitterClient(str(ir_server.make_url("")))
        relay = EndpointRelay(hub=hub, emitter=emitter, repeater=CommandRepeater(emitter, pause=0.05))

        async with relay:
            client: TestClient = await aiohttp_client(create_app(relay))
            yield client, relay

    async def test_endpoints_include_hub_devices(self, stack, hub_stub: HubStub) -> None:
        """Test discovery through a real login and device listing."""
        client, _ = stack

        response = await client.get("/endpoints")

        body = await response.json()
        assert [endpoint["id"] for endpoint in body][3:] == ["ZWayVDev_zway_2-0-37", "ZWayVDev_zway_3-0-38"]
        assert len(hub_stub.login_calls) == 1

    async def test_endpoints_degrade_when_hub_fails(self, stack, hub_stub: HubStub) -> None:
        """Test that a failing hub still yields the built-in list."""
        client, _ = stack
        hub_stub.get_statuses = [HTTPStatus.INTERNAL_SERVER_ERROR]

        response = await client.get("/endpoints")

        assert response.status == HTTPStatus.OK
        assert [endpoint["id"] for endpoint in await response.json()] == ["tv", "television", "roku"]

    async def test_volume_repeat_runs_after_reply(self, stack, ir_stub: IrStub) -> None:
        """Test that the reply precedes the paced emissions."""
        client, relay = stack

        response = await client.put("/endpoints/tv/volume", json={"volumeSteps": -3})

        assert response.status == HTTPStatus.OK
        assert relay.repeater.pending_count == 1

        while relay.repeater.pending_count:
            await asyncio.sleep(0.01)

        assert [(endpoint, key) for endpoint, key, _ in ir_stub.commands] == [("tv", "KEY_VOLUMEDOWN")] * 3

    async def test_form_volume_steps(self, stack, ir_stub: IrStub) -> None:
        """Test that form-encoded steps run the same repeat as JSON numbers."""
        client, relay = stack

        response = await client.put("/endpoints/tv/volume", data={"volumeSteps": "-3"})

        assert response.status == HTTPStatus.OK
        assert await response.json() == {"code": 200, "message": "200 OK"}

        while relay.repeater.pending_count:
            await asyncio.sleep(0.01)

        assert [key for _, key, _ in ir_stub.commands] == ["KEY_VOLUMEDOWN"] * 3

    @pytest.mark.parametrize("constant", ["NaN", "Infinity", "-Infinity"])
    async def test_non_finite_volume_steps(self, stack, ir_stub: IrStub, constant: str) -> None:
        """Test that non-finite JSON numbers get the JSON error reply."""
        client, relay = stack

        response = await client.put(
            "/endpoints/tv/volume",
            data=f'{{"volumeSteps": {constant}}}',
            headers={"Content-Type": "application/json"},
        )

        assert response.status == HTTPStatus.INTERNAL_SERVER_ERROR
        assert response.content_type == "application/json"
        assert "volumeSteps" in (await response.json())["error"]
        assert relay.repeater.pending_count == 0
        assert ir_stub.commands == []

    async def test_tv_power_failure_is_500(self, stack, ir_stub: IrStub) -> None:
        """Test that a refused single emission fails the request."""
        client, _ = stack
        ir_stub.fail_with = HTTPStatus.BAD_GATEWAY

        response = await client.put("/endpoints/tv/power", json={"state": "on"})

        assert response.status == HTTPStatus.INTERNAL_SERVER_ERROR
        assert "502" in (await response.json())["error"]

    async def test_hub_power_renews_session(self, stack, hub_stub: HubStub) -> None:
        """Test a hub power command that needs one session renewal."""
        client, _ = stack
        hub_stub.get_statuses = [HTTPStatus.UNAUTHORIZED]

        response = await client.put("/endpoints/ZWayVDev_zway_2-0-37/power", json={"state": "on"})

        assert response.status == HTTPStatus.OK
        assert (await response.json())["state"] == "on"
        assert len(hub_stub.login_calls) == 2
        assert hub_stub.get_calls[-1][0] == "/ZAutomation/api/v1/devices/ZWayVDev_zway_2-0-37/command/on"


class TestBuildApp:
    """Test the configured application lifecycle."""

    async def test_relay_opened_and_closed_with_app(self, aiohttp_client, hub_stub: HubStub, aiohttp_server) -> None:
        """Test that build_app enters the relay on startup."""
        hub_server: TestServer = await aiohttp_server(hub_stub.build_app())
        config = RelayConfig(
            username="admin",
            password="secret",
            ir_host="127.0.0.1",
            ir_port=9,
            hub_host=hub_server.host,
            hub_port=hub_server.port,
        )
        client: TestClient = await aiohttp_client(build_app(config))

        response = await client.get("/endpoints")

        assert response.status == HTTPStatus.OK
        assert len(await response.json()) == 5
