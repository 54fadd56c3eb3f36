from datetime import UTC, datetime

import pytest

from pycourtbooking.exceptions import ValidationError
from pycourtbooking.models import (
    AuthTokens,
    BookingRecord,
    BookingStatus,
    MergedBookingGroup,
    User,
)


def test_booking_from_owner_listing_payload() -> None:
    record = BookingRecord.from_payload(
        {
            "id": "b1",
            "courtId": "court-1",
            "timeSlotStart": "2024-01-01T16:00:00+07:00",
            "timeSlotEnd": "2024-01-01T17:00:00+07:00",
            "status": "CONFIRMED",
            "totalPrice": "350.00",
            "court": {"id": "court-1", "name": "Court A"},
            "serviceUser": {"id": "c1", "name": "Somchai", "phone": "0811111111"},
            "notes": "Bring balls",
        }
    )
    assert record.id == "b1"
    assert record.facility_id == "court-1"
    assert record.time_slot_start == datetime(2024, 1, 1, 9, tzinfo=UTC)
    assert record.time_slot_end == datetime(2024, 1, 1, 10, tzinfo=UTC)
    assert record.status == BookingStatus.CONFIRMED
    assert record.total_price == 350.0
    assert record.is_paid is None
    assert record.customer_phone == "0811111111"
    assert record.customer_name == "Somchai"
    assert record.facility_name == "Court A"
    assert record.notes == "Bring balls"


def test_booking_from_lookup_payload() -> None:
    record = BookingRecord.from_payload(
        {
            "id": 42,
            "facility": {"type": "court", "id": "F1", "name": "Court 1"},
            "customer": {"id": "c1", "name": "Nok", "phone": ""},
            "timeSlotStart": "2024-01-01T09:00:00.000Z",
            "timeSlotEnd": "2024-01-01T10:00:00.000Z",
            "status": "PENDING",
            "totalPrice": 200,
            "isPaid": True,
        }
    )
    assert record.id == "42"
    assert record.facility_id == "F1"
    assert record.customer_phone is None
    assert record.is_paid is True


def test_booking_from_payload_rejects_bad_fields() -> None:
    base = {
        "id": "b1",
        "facilityId": "F1",
        "timeSlotStart": "2024-01-01T09:00:00Z",
        "timeSlotEnd": "2024-01-01T10:00:00Z",
        "status": "PENDING",
        "totalPrice": 100,
    }
    with pytest.raises(ValidationError):
        BookingRecord.from_payload({**base, "timeSlotEnd": None})
    with pytest.raises(ValidationError):
        BookingRecord.from_payload({**base, "totalPrice": "abc"})
    with pytest.raises(ValidationError):
        BookingRecord.from_payload({**base, "id": None})
    with pytest.raises(ValidationError):
        BookingRecord.from_payload(["not", "a", "mapping"])  # type: ignore[arg-type]


def test_group_passthrough_properties() -> None:
    record = BookingRecord(
        id="a",
        facility_id="F1",
        time_slot_start=datetime(2024, 1, 1, 9, tzinfo=UTC),
        time_slot_end=datetime(2024, 1, 1, 11, tzinfo=UTC),
        status=BookingStatus.PENDING,
        total_price=400.0,
        is_paid=False,
        customer_phone="0811111111",
    )
    group = MergedBookingGroup(representative=record, member_ids=("a", "b"))
    assert group.count == 2
    assert group.is_merged
    assert group.id == "a"
    assert group.facility_id == "F1"
    assert group.total_price == 400.0
    assert group.is_paid is False
    assert group.status == "PENDING"


def test_auth_tokens_from_payload() -> None:
    tokens = AuthTokens.from_payload(
        {"accessToken": "a", "refreshToken": "", "expiresIn": 900, "tokenType": "Bearer"}
    )
    assert tokens == AuthTokens(access_token="a", refresh_token=None, expires_in=900)
    with pytest.raises(ValidationError):
        AuthTokens.from_payload({"refreshToken": "r"})
    with pytest.raises(ValidationError):
        AuthTokens.from_payload(None)


def test_user_payload_round_trip() -> None:
    user = User.from_payload({"id": "u1", "username": "owner", "role": "court_owner"})
    assert user.to_payload() == {"id": "u1", "username": "owner", "role": "court_owner"}
    with pytest.raises(ValidationError):
        User.from_payload({"username": "owner"})
