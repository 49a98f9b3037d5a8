"""Run the relay server from environment configuration.

Usage:
    USERNAME=admin PASSWORD=secret IR_SERVER_HOST=irserver IR_SERVER_PORT=3000 \
        PORT=8080 python examples/run_relay.py
"""

from aiohttp import web

from pyhomerelay import RelayConfig, build_app, configure_logging


def main() -> None:
    """Load configuration and serve until interrupted."""
    config = RelayConfig.from_env()
    configure_logging(config.verbose)
    web.run_app(build_app(config), port=config.port)


if __name__ == "__main__":
    main()
