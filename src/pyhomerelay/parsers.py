"""Parsing utilities for hub API responses.

This module converts raw Z-Way device listings into the descriptors exposed
by the relay.
"""

from __future__ import annotations

from typing import Any

from pyhomerelay.models import DeviceDescriptor


__all__ = [
    "is_hub_device_valid",
    "parse_hub_device",
    "parse_hub_devices",
]


def is_hub_device_valid(hub_device: Any) -> bool:
    """Check if a hub device entry can be exposed as an endpoint.

    A usable entry has a non-empty ``id``, a ``metrics.title`` and a
    ``deviceType``.

    Args:
        hub_device: Raw device entry from ``data.devices``.

    Returns:
        True if the entry has every field the descriptor needs.
    """
    if not isinstance(hub_device, dict):
        return False
    metrics = hub_device.get("metrics")
    return bool(
        hub_device.get("id")
        and isinstance(metrics, dict)
        and metrics.get("title")
        and hub_device.get("deviceType")
    )


def parse_hub_device(hub_device: dict[str, Any]) -> DeviceDescriptor:
    """Parse a single valid hub device entry.

    The hub only reports a title, so it doubles as name, description and
    manufacturer.

    Args:
        hub_device: Raw device entry that passed ``is_hub_device_valid``.

    Returns:
        DeviceDescriptor for the hub device.
    """
    title = str(hub_device["metrics"]["title"])
    return DeviceDescriptor(
        id=str(hub_device["id"]),
        type=str(hub_device["deviceType"]),
        name=title,
        description=title,
        manufacturer=title,
    )


def parse_hub_devices(devices: list[Any]) -> list[DeviceDescriptor]:
    """Parse a hub device listing, dropping invalid entries.

    Args:
        devices: Raw ``data.devices`` list from ``GET /devices``.

    Returns:
        Descriptors for the valid entries, in hub order.
    """
    return [parse_hub_device(device) for device in devices if is_hub_device_valid(device)]
