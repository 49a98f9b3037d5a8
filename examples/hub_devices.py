"""List hub devices with the session-authenticated client."""

import asyncio

from pyhomerelay import SessionRelayClient, parse_hub_devices


async def main() -> None:
    """Print every hub device the relay would expose."""
    async with SessionRelayClient(
        username="admin",
        password="your_password",
        base_url="http://localhost:8083",
    ) as hub:
        devices = parse_hub_devices(await hub.get_devices())
        print(f"Found {len(devices)} device(s)")

        for device in devices:
            print(f"  {device.id}: {device.name} ({device.type})")


if __name__ == "__main__":
    asyncio.run(main())
