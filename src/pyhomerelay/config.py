"""Configuration and logging setup for the relay."""

from __future__ import annotations

import logging
import os
from dataclasses import dataclass
from typing import TYPE_CHECKING

from dotenv import load_dotenv

from pyhomerelay.const import DEFAULT_HUB_HOST, DEFAULT_HUB_PORT, DEFAULT_RELAY_PORT, DEFAULT_TIMEOUT
from pyhomerelay.exceptions import ValidationError


if TYPE_CHECKING:
    from collections.abc import Mapping
    from pathlib import Path

_TRUTHY = frozenset({"1", "true", "yes", "y", "on"})

LOG_FORMAT = "%(asctime)s %(levelname)s %(name)s: %(message)s"


@dataclass
class RelayConfig:
    """Startup parameters for the relay.

    Attributes:
        username: Hub login name.
        password: Hub password.
        ir_host: IR emitter host name.
        ir_port: IR emitter port.
        hub_host: Hub host name.
        hub_port: Hub port.
        port: Port the relay listens on.
        verbose: Log request traces at DEBUG level.
        request_timeout: Optional total timeout in seconds for outbound
            requests. None disables the timeout.
    """

    username: str
    password: str
    ir_host: str
    ir_port: int
    hub_host: str = DEFAULT_HUB_HOST
    hub_port: int = DEFAULT_HUB_PORT
    port: int = DEFAULT_RELAY_PORT
    verbose: bool = False
    request_timeout: float | None = DEFAULT_TIMEOUT

    @property
    def hub_base_url(self) -> str:
        """Get the hub base URL."""
        return f"http://{self.hub_host}:{self.hub_port}"

    @property
    def ir_base_url(self) -> str:
        """Get the IR emitter base URL."""
        return f"http://{self.ir_host}:{self.ir_port}"

    @classmethod
    def from_env(
        cls,
        environ: Mapping[str, str] | None = None,
        *,
        dotenv_path: str | Path | None = None,
    ) -> RelayConfig:
        """Load configuration from environment variables.

        When ``environ`` is not given, variables from an optional ``.env`` file
        are loaded into the process environment first.

        Variables: USERNAME, PASSWORD, IR_SERVER_HOST, IR_SERVER_PORT,
        HUB_HOST, HUB_PORT, PORT, IS_VERBOSE, REQUEST_TIMEOUT.

        Args:
            environ: Optional mapping to read instead of ``os.environ``.
            dotenv_path: Optional path of the ``.env`` file.

        Returns:
            The loaded configuration.

        Raises:
            ValidationError: If a required variable is missing or a number is
                malformed.
        """
        if environ is None:
            load_dotenv(dotenv_path)
            environ = os.environ

        username = environ.get("USERNAME", "")
        password = environ.get("PASSWORD", "")
        ir_host = environ.get("IR_SERVER_HOST", "")

        for name, value in (("USERNAME", username), ("PASSWORD", password), ("IR_SERVER_HOST", ir_host)):
            if not value:
                msg = f"Missing required environment variable {name}"
                raise ValidationError(msg, parameter_name=name)

        raw_timeout = environ.get("REQUEST_TIMEOUT", "").strip()

        return cls(
            username=username,
            password=password,
            ir_host=ir_host,
            ir_port=_read_int(environ, "IR_SERVER_PORT", None),
            hub_host=environ.get("HUB_HOST", DEFAULT_HUB_HOST),
            hub_port=_read_int(environ, "HUB_PORT", DEFAULT_HUB_PORT),
            port=_read_int(environ, "PORT", DEFAULT_RELAY_PORT),
            verbose=environ.get("IS_VERBOSE", "").strip().lower() in _TRUTHY,
            request_timeout=_read_float(raw_timeout, "REQUEST_TIMEOUT") if raw_timeout else DEFAULT_TIMEOUT,
        )


def _read_int(environ: Mapping[str, str], name: str, default: int | None) -> int:
    raw = environ.get(name, "").strip()
    if not raw:
        if default is None:
            msg = f"Missing required environment variable {name}"
            raise ValidationError(msg, parameter_name=name)
        return default
    try:
        return int(raw)
    except ValueError as exc:
        msg = f"Environment variable {name} must be an integer, got {raw!r}"
        raise ValidationError(msg, parameter_name=name) from exc


def _read_float(raw: str, name: str) -> float:
    try:
        return float(raw)
    except ValueError as exc:
        msg = f"Environment variable {name} must be a number, got {raw!r}"
        raise ValidationError(msg, parameter_name=name) from exc


def configure_logging(verbose: bool = False) -> None:
    """Configure root logging for the relay process.

    Args:
        verbose: Log request traces (DEBUG) instead of INFO and above.
    """
    logging.basicConfig(level=logging.DEBUG if verbose else logging.INFO, format=LOG_FORMAT)
