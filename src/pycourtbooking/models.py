"""Public data models."""

from __future__ import annotations

from collections.abc import Mapping
from dataclasses import dataclass
from datetime import datetime
from enum import StrEnum
from typing import Any

from .exceptions import ValidationError
from .util import coerce_price, parse_timestamp


class BookingStatus(StrEnum):
    PENDING = "PENDING"
    CONFIRMED = "CONFIRMED"
    CANCELLED = "CANCELLED"
    NO_SHOW = "NO_SHOW"
    COMPLETED = "COMPLETED"
    EXPIRED = "EXPIRED"


def _as_mapping(value: Any) -> Mapping[str, Any]:
    return value if isinstance(value, Mapping) else {}


def _optional_str(*values: Any) -> str | None:
    for value in values:
        if value is None or isinstance(value, bool):
            continue
        text = str(value)
        if text:
            return text
    return None


@dataclass(frozen=True, slots=True)
class BookingRecord:
    id: str
    facility_id: str
    time_slot_start: datetime
    time_slot_end: datetime
    status: str
    total_price: float
    is_paid: bool | None = None
    customer_phone: str | None = None
    facility_name: str | None = None
    customer_name: str | None = None
    notes: str | None = None

    @classmethod
    def from_payload(cls, payload: Mapping[str, Any]) -> BookingRecord:
        """Build a record from a backend booking object.

        Both the owner listing shape (``courtId``/``serviceUser``) and the lookup
        shape (``facility``/``customer``) are accepted.
        """
        if not isinstance(payload, Mapping):
            raise ValidationError("Booking payload must be a JSON object.")
        booking_id = _optional_str(payload.get("id"))
        if booking_id is None:
            raise ValidationError("Booking payload is missing an id.")
        facility = _as_mapping(payload.get("facility"))
        court = _as_mapping(payload.get("court"))
        customer = _as_mapping(payload.get("customer")) or _as_mapping(payload.get("serviceUser"))
        is_paid = payload.get("isPaid")
        return cls(
            id=booking_id,
            facility_id=_optional_str(
                payload.get("facilityId"),
                facility.get("id"),
                payload.get("courtId"),
                court.get("id"),
            )
            or "",
            time_slot_start=parse_timestamp(payload.get("timeSlotStart")),
            time_slot_end=parse_timestamp(payload.get("timeSlotEnd")),
            status=_optional_str(payload.get("status")) or "",
            total_price=coerce_price(payload.get("totalPrice")),
            is_paid=is_paid if isinstance(is_paid, bool) else None,
            customer_phone=_optional_str(payload.get("customerPhone"), customer.get("phone")),
            facility_name=_optional_str(facility.get("name"), court.get("name")),
            customer_name=_optional_str(payload.get("customerName"), customer.get("name")),
            notes=_optional_str(payload.get("notes")),
        )


@dataclass(frozen=True, slots=True)
class MergedBookingGroup:
    """One or more consecutive, compatible bookings shown as one reservation."""

    representative: BookingRecord
    member_ids: tuple[str, ...]

    @property
    def count(self) -> int:
        return len(self.member_ids)

    @property
    def is_merged(self) -> bool:
        return self.count > 1

    @property
    def id(self) -> str:
        return self.representative.id

    @property
    def facility_id(self) -> str:
        return self.representative.facility_id

    @property
    def time_slot_start(self) -> datetime:
        return self.representative.time_slot_start

    @property
    def time_slot_end(self) -> datetime:
        return self.representative.time_slot_end

    @property
    def status(self) -> str:
        return self.representative.status

    @property
    def total_price(self) -> float:
        return self.representative.total_price

    @property
    def is_paid(self) -> bool | None:
        return self.representative.is_paid

    @property
    def customer_phone(self) -> str | None:
        return self.representative.customer_phone


@dataclass(frozen=True, slots=True)
class AuthTokens:
    access_token: str
    refresh_token: str | None = None
    expires_in: int | None = None
    expires_at: str | None = None

    @classmethod
    def from_payload(cls, payload: Any) -> AuthTokens:
        data = _as_mapping(payload)
        access_token = data.get("accessToken")
        if not isinstance(access_token, str) or not access_token:
            raise ValidationError("Token response did not include an access token.")
        refresh_token = data.get("refreshToken")
        if not isinstance(refresh_token, str) or not refresh_token:
            refresh_token = None
        expires_in = data.get("expiresIn")
        if isinstance(expires_in, bool) or not isinstance(expires_in, int):
            expires_in = None
        return cls(
            access_token=access_token,
            refresh_token=refresh_token,
            expires_in=expires_in,
            expires_at=_optional_str(data.get("expiresAt")),
        )


@dataclass(frozen=True, slots=True)
class User:
    id: str
    username: str
    email: str | None = None
    role: str | None = None

    @classmethod
    def from_payload(cls, payload: Any) -> User:
        data = _as_mapping(payload)
        user_id = _optional_str(data.get("id"))
        if user_id is None:
            raise ValidationError("User payload is missing an id.")
        return cls(
            id=user_id,
            username=_optional_str(data.get("username")) or "",
            email=_optional_str(data.get("email")),
            role=_optional_str(data.get("role")),
        )

    def to_payload(self) -> dict[str, Any]:
        payload: dict[str, Any] = {"id": self.id, "username": self.username}
        if self.email is not None:
            payload["email"] = self.email
        if self.role is not None:
            payload["role"] = self.role
        return payload


@dataclass(frozen=True, slots=True)
class LoginResult:
    tokens: AuthTokens
    user: User


@dataclass(frozen=True, slots=True)
class ApiResponse:
    data: Any
    status: int
