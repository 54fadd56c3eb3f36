"""pyCourtBooking package."""

from __future__ import annotations

from importlib.metadata import PackageNotFoundError, version

from .api import ApiClient
from .bookings import BookingService
from .client import Client
from .consolidation import merge_consecutive_bookings
from .exceptions import (
    ApiError,
    AuthError,
    NetworkError,
    PyCourtBookingError,
    ServerError,
    SessionExpiredError,
    UnauthorizedError,
    ValidationError,
)
from .models import (
    ApiResponse,
    AuthTokens,
    BookingRecord,
    BookingStatus,
    LoginResult,
    MergedBookingGroup,
    User,
)
from .refresh import RefreshCoordinator, RefreshState
from .store import CredentialStore, MemoryCredentialStore

try:
    __version__ = version("pycourtbooking")
except PackageNotFoundError:  # pragma: no cover - not installed
    __version__ = "0.0.0"

__all__ = [
    "ApiClient",
    "ApiError",
    "ApiResponse",
    "AuthError",
    "AuthTokens",
    "BookingRecord",
    "BookingService",
    "BookingStatus",
    "Client",
    "CredentialStore",
    "LoginResult",
    "MemoryCredentialStore",
    "MergedBookingGroup",
    "NetworkError",
    "PyCourtBookingError",
    "RefreshCoordinator",
    "RefreshState",
    "ServerError",
    "SessionExpiredError",
    "UnauthorizedError",
    "User",
    "ValidationError",
    "__version__",
    "merge_consecutive_bookings",
]
