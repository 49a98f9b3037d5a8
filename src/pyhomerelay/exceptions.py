"""Custom exceptions for pyhomerelay library."""

from __future__ import annotations


class RelayError(Exception):
    """Base exception for all relay errors."""


class AuthError(RelayError):
    """Exception raised when the hub rejects credentials or a renewed session."""


class TransportError(RelayError):
    """Exception raised for network failures or non-success backend statuses.

    Attributes:
        status: Optional HTTP status returned by the backend.
    """

    def __init__(self, message: str = "", status: int | None = None) -> None:
        """Initialize TransportError.

        Args:
            message: Error message.
            status: Optional HTTP status returned by the backend.
        """
        super().__init__(message)
        self.status = status


class UnsupportedOperationError(RelayError):
    """Exception raised when an endpoint has no handler for a resource.

    Attributes:
        endpoint_id: Optional endpoint the request targeted.
        resource_id: Optional resource the request targeted.
    """

    def __init__(
        self,
        message: str = "",
        endpoint_id: str | None = None,
        resource_id: str | None = None,
    ) -> None:
        """Initialize UnsupportedOperationError.

        Args:
            message: Error message.
            endpoint_id: Optional endpoint the request targeted.
            resource_id: Optional resource the request targeted.
        """
        super().__init__(message)
        self.endpoint_id = endpoint_id
        self.resource_id = resource_id


class ValidationError(RelayError):
    """Exception raised for malformed request bodies or configuration.

    Attributes:
        parameter_name: Optional name of the offending parameter.
    """

    def __init__(self, message: str = "", parameter_name: str | None = None) -> None:
        """Initialize ValidationError.

        Args:
            message: Error message.
            parameter_name: Optional name of the offending parameter.
        """
        super().__init__(message)
        self.parameter_name = parameter_name
