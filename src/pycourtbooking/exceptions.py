"""Library exceptions."""

from __future__ import annotations

from typing import Any


class PyCourtBookingError(Exception):
    """Base exception for the library."""

    error_code = "unknown"


class ValidationError(PyCourtBookingError):
    """Raised when inputs fail validation."""

    error_code = "validation_error"


class ApiError(PyCourtBookingError):
    """Raised when a request does not produce a successful response."""

    error_code = "api_error"

    def __init__(self, message: str, *, status: int, payload: Any = None) -> None:
        super().__init__(message)
        self.message = message
        self.status = status
        self.payload = payload


class NetworkError(ApiError):
    """Raised when network communication fails.

    Transport failures carry status ``0`` so callers can tell them apart from
    server responses.
    """

    error_code = "network_error"

    def __init__(self, message: str = "Network error", *, payload: Any = None) -> None:
        super().__init__(message, status=0, payload=payload)


class ServerError(ApiError):
    """Raised when the server answers with a non-success status."""

    error_code = "server_error"


class AuthError(ApiError):
    """Raised when authentication fails."""

    error_code = "auth_error"


class UnauthorizedError(AuthError):
    """Raised for a 401 that is not about the token, or a 403."""

    error_code = "unauthorized"


class SessionExpiredError(AuthError):
    """Raised when the session cannot be refreshed and must be re-established."""

    error_code = "session_expired"
