"""Built-in device registry and endpoint classification."""

from __future__ import annotations

from pyhomerelay.const import ENDPOINT_ROKU, ENDPOINT_TELEVISION, ENDPOINT_TV
from pyhomerelay.models import DeviceClass, DeviceDescriptor


__all__ = [
    "ROKU",
    "STATIC_DEVICES",
    "TELEVISION",
    "TV",
    "classify",
]


TV = DeviceDescriptor(
    id=ENDPOINT_TV,
    type="television",
    name="TV",
    description="Sharp AQUOS N6000U",
    manufacturer="Sharp",
)

TELEVISION = DeviceDescriptor(
    id=ENDPOINT_TELEVISION,
    type="television",
    name="Television",
    description="Sharp AQUOS N6000U",
    manufacturer="Sharp",
)

ROKU = DeviceDescriptor(
    id=ENDPOINT_ROKU,
    type="roku",
    name="Roku",
    description="Roku Streaming Stick 3600",
    manufacturer="Roku",
)

STATIC_DEVICES: tuple[DeviceDescriptor, ...] = (TV, TELEVISION, ROKU)

_TELEVISION_IDS = frozenset({TV.id, TELEVISION.id})


def classify(endpoint_id: str) -> DeviceClass:
    """Classify an endpoint id for routing.

    Args:
        endpoint_id: Endpoint id taken from the request path.

    Returns:
        TELEVISION and STREAMING_DEVICE for the built-in IR devices,
        HUB_MANAGED for every other id.
    """
    if endpoint_id in _TELEVISION_IDS:
        return DeviceClass.TELEVISION
    if endpoint_id == ROKU.id:
        return DeviceClass.STREAMING_DEVICE
    return DeviceClass.HUB_MANAGED
