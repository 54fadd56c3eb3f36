"""Constants for the owner API and the booking engine."""

from datetime import timedelta

DEFAULT_BASE_URL = "http://localhost:3000"
BASE_URL_ENV = "PYCOURTBOOKING_API_URL"
DEFAULT_TIMEOUT_SECONDS = 30

LOGIN_ENDPOINT = "/api/auth/login"
REFRESH_ENDPOINT = "/api/auth/refresh"
BOOKINGS_ENDPOINT = "/api/owner/bookings"
BOOKING_DETAIL_ENDPOINT = "/api/owner/bookings/{booking_id}"

LOGIN_ROLE = "court_owner"
DEFAULT_BOOKING_LIMIT = 200

ACCESS_TOKEN_KEY = "access_token"
REFRESH_TOKEN_KEY = "refresh_token"
USER_KEY = "user"
STORAGE_KEYS = (ACCESS_TOKEN_KEY, REFRESH_TOKEN_KEY, USER_KEY)

AUTH_HEADER = "Authorization"
AUTH_PREFIX = "Bearer "

DEFAULT_HEADERS = {
    "Accept": "application/json",
    "Content-Type": "application/json",
    "User-Agent": "pycourtbooking",
}

# Lowercased fragments of a 401 reason that mean the access token can be refreshed.
TOKEN_FAILURE_MARKERS = (
    "expired",
    "invalid token",
    "missing authorization",
)

SESSION_EXPIRED_MESSAGE = "Session expired. Please login again."

# Absorbs timezone/rounding noise between the end of one slot and the start of the next.
CONSECUTIVE_TOLERANCE = timedelta(milliseconds=60_000)
