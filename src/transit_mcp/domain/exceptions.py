from __future__ import annotations


class TransitError(Exception):
    """Base exception for all transit client errors."""


class NetworkError(TransitError):
    """Raised when the backend cannot be reached (DNS, connection, timeout)."""


class InvalidResponseError(TransitError):
    """Raised when the backend returns a body that is not JSON or cannot be mapped."""

    def __init__(self, message: str = "", status_code: int | None = None) -> None:
        self.status_code = status_code
        super().__init__(message or "Invalid response format received from server.")


class RemoteError(TransitError):
    """Raised when the backend answers with an error payload, whatever the HTTP status."""

    def __init__(
        self,
        message: str,
        code: int | None = None,
        details: str | None = None,
        status_code: int | None = None,
    ) -> None:
        self.message = message
        self.code = code
        self.details = details
        self.status_code = status_code
        super().__init__(message)


class UnknownError(TransitError):
    """Raised for any other failure while talking to the backend."""


class ValidationError(TransitError):
    """Raised when input parameters fail validation before any network call."""
