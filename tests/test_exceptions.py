from pycourtbooking.exceptions import (
    ApiError,
    AuthError,
    NetworkError,
    PyCourtBookingError,
    ServerError,
    SessionExpiredError,
    UnauthorizedError,
    ValidationError,
)


def test_error_types_have_codes() -> None:
    assert PyCourtBookingError("nope").error_code == "unknown"
    assert ValidationError("nope").error_code == "validation_error"
    assert NetworkError("nope").error_code == "network_error"
    assert ServerError("nope", status=500).error_code == "server_error"
    assert AuthError("nope", status=401).error_code == "auth_error"
    assert UnauthorizedError("nope", status=403).error_code == "unauthorized"
    assert SessionExpiredError("nope", status=401).error_code == "session_expired"


def test_network_error_defaults() -> None:
    exc = NetworkError()
    assert exc.status == 0
    assert exc.message == "Network error"
    assert exc.payload is None


def test_api_error_carries_status_and_payload() -> None:
    exc = ServerError("Slot taken", status=409, payload={"error": "Slot taken"})
    assert str(exc) == "Slot taken"
    assert exc.status == 409
    assert exc.payload == {"error": "Slot taken"}


def test_auth_errors_share_a_base() -> None:
    assert issubclass(UnauthorizedError, AuthError)
    assert issubclass(SessionExpiredError, AuthError)
    assert issubclass(AuthError, ApiError)
    assert not issubclass(ServerError, AuthError)
