"""aiohttp web application exposing the endpoint REST surface."""

from __future__ import annotations

import logging
from typing import TYPE_CHECKING, Any

from aiohttp import web

from pyhomerelay.client import EndpointRelay
from pyhomerelay.exceptions import RelayError, ValidationError


if TYPE_CHECKING:
    from collections.abc import AsyncIterator, Awaitable, Callable

    from pyhomerelay.config import RelayConfig

_LOGGER = logging.getLogger(__name__)

RELAY_KEY = web.AppKey("relay", EndpointRelay)


@web.middleware
async def log_requests(
    request: web.Request,
    handler: Callable[[web.Request], Awaitable[web.StreamResponse]],
) -> web.StreamResponse:
    """Log every inbound request and its reply status."""
    _LOGGER.info("%s request for %s received", request.method, request.path)
    response = await handler(request)
    _LOGGER.debug("REPLY %d for %s %s", response.status, request.method, request.path)
    return response


def error_response(error: Exception | str) -> web.Response:
    """Build the generic failure reply.

    Every failure maps to status 500; the category only shows in the message.
    """
    message = str(error)
    _LOGGER.debug("REPLY 500 %s", message)
    return web.json_response({"error": message}, status=500)


async def read_body(request: web.Request) -> dict[str, Any]:
    """Decode a JSON or form-encoded request body.

    Returns:
        The body as a dict; empty if the request has no body.

    Raises:
        ValidationError: If the body is not valid JSON or not an object.
    """
    if not request.body_exists:
        return {}

    if request.content_type == "application/x-www-form-urlencoded":
        return dict(await request.post())

    try:
        body = await request.json()
    except ValueError as exc:
        # JSONDecodeError, or UnicodeDecodeError from a non-UTF-8 body
        msg = f"Invalid JSON body: {exc}"
        raise ValidationError(msg) from exc

    if not isinstance(body, dict):
        msg = "Request body must be a JSON object"
        raise ValidationError(msg)
    return body


async def get_endpoints(request: web.Request) -> web.Response:
    """Handle ``GET /endpoints``."""
    relay = request.app[RELAY_KEY]
    endpoints = await relay.list_endpoints()
    return web.json_response([endpoint.as_dict() for endpoint in endpoints])


async def put_endpoint_resource(request: web.Request) -> web.Response:
    """Handle ``PUT /endpoints/{endpointId}/{resourceId}``."""
    relay = request.app[RELAY_KEY]
    endpoint_id = request.match_info["endpointId"]
    resource_id = request.match_info["resourceId"]

    try:
        body = await read_body(request)
        _LOGGER.debug("RECV %s", body)
        payload = await relay.handle_put(endpoint_id, resource_id, body)
    except RelayError as exc:
        _LOGGER.warning("PUT %s/%s failed: %s", endpoint_id, resource_id, exc)
        return error_response(exc)

    return web.json_response(payload)


def create_app(relay: EndpointRelay) -> web.Application:
    """Create the web application around an entered relay.

    The caller owns the relay's lifecycle.

    Args:
        relay: Relay used by the request handlers.

    Returns:
        The configured application.
    """
    app = web.Application(middlewares=[log_requests])
    app[RELAY_KEY] = relay
    app.router.add_get("/endpoints", get_endpoints)
    app.router.add_put("/endpoints/{endpointId}/{resourceId}", put_endpoint_resource)
    return app


def build_app(config: RelayConfig) -> web.Application:
    """Create the web application and tie the relay to its lifecycle.

    The relay and its HTTP sessions are opened on startup and closed on
    cleanup, which also cancels background repeats.

    Args:
        config: Relay configuration.

    Returns:
        The configured application.
    """
    relay = EndpointRelay.from_config(config)
    app = create_app(relay)

    async def relay_context(_app: web.Application) -> AsyncIterator[None]:
        async with relay:
            yield

    app.cleanup_ctx.append(relay_context)
    return app
