"""Data models for relay requests, devices and repeat progress."""

from __future__ import annotations

from dataclasses import asdict, dataclass, field
from datetime import UTC, datetime
from enum import Enum
from typing import Any


__all__ = [
    "DeviceClass",
    "DeviceDescriptor",
    "HubSession",
    "PowerStateReport",
    "RepeatJob",
    "RepeatRequest",
    "RepeatState",
]


class DeviceClass(Enum):
    """How requests for an endpoint are routed."""

    TELEVISION = "television"
    STREAMING_DEVICE = "streaming_device"
    HUB_MANAGED = "hub_managed"


class RepeatState(Enum):
    """Lifecycle of a single repeat invocation."""

    PENDING = "pending"
    EMITTING = "emitting"
    PAUSED = "paused"
    COMPLETED = "completed"
    FAILED = "failed"


@dataclass(frozen=True)
class DeviceDescriptor:
    """Read-only description of an endpoint exposed by the relay.

    Attributes:
        id: Endpoint identifier used in request paths.
        type: Device type (e.g., "television").
        name: Human-readable name.
        description: Free-form description.
        manufacturer: Manufacturer name.
    """

    id: str
    type: str
    name: str
    description: str
    manufacturer: str

    def as_dict(self) -> dict[str, str]:
        """Return the JSON representation of the descriptor."""
        return asdict(self)


@dataclass
class HubSession:
    """Holder for the hub session token.

    The token is opaque. It is replaced on every successful login and is
    never expired locally.

    Attributes:
        sid: Current session id, or None before the first login.
    """

    sid: str | None = None

    @property
    def is_active(self) -> bool:
        """Check if a session token is held."""
        return bool(self.sid)


@dataclass(frozen=True)
class RepeatRequest:
    """A key to emit ``count`` times at an endpoint."""

    key: str
    endpoint_id: str
    count: int


@dataclass
class RepeatJob:
    """Progress of one repeat invocation.

    Attributes:
        request: The request as received.
        effective_count: Number of emissions after clamping.
        state: Current lifecycle state.
        emitted: Number of successful emissions so far.
        started_at: When the job was created.
    """

    request: RepeatRequest
    effective_count: int
    state: RepeatState = RepeatState.PENDING
    emitted: int = 0
    started_at: datetime = field(default_factory=lambda: datetime.now(UTC))


@dataclass
class PowerStateReport:
    """Body returned after a power state change.

    Attributes:
        state: Requested power state, echoed back.
        timestamp: When the command was acknowledged.
        uncertainty_ms: Uncertainty of the reported state in milliseconds.
    """

    state: Any
    timestamp: datetime = field(default_factory=lambda: datetime.now(UTC))
    uncertainty_ms: int = 0

    def as_dict(self) -> dict[str, Any]:
        """Return the JSON representation used on the wire."""
        return {
            "state": self.state,
            "isoTimestamp": self.timestamp.isoformat(),
            "uncertaintyMs": self.uncertainty_ms,
        }
