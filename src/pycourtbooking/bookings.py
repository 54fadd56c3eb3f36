"""Owner booking endpoints."""

from __future__ import annotations

import logging
from collections.abc import Mapping
from datetime import datetime
from typing import Any

from .api import ApiClient
from .consolidation import merge_consecutive_bookings
from .const import BOOKING_DETAIL_ENDPOINT, BOOKINGS_ENDPOINT, DEFAULT_BOOKING_LIMIT
from .exceptions import ValidationError
from .models import BookingRecord, MergedBookingGroup
from .util import format_utc_timestamp

_LOGGER = logging.getLogger(__name__)

_UPDATE_FIELDS = {
    "court_id": "courtId",
    "date": "date",
    "start_time": "startTime",
    "end_time": "endTime",
    "customer_name": "customerName",
    "customer_phone": "customerPhone",
    "price": "price",
    "status": "status",
}


class BookingService:
    """List, create and edit bookings for the logged-in owner."""

    def __init__(self, api: ApiClient) -> None:
        self._api = api

    async def list_bookings(
        self,
        date_from: datetime,
        date_to: datetime,
        *,
        court_id: str | None = None,
        limit: int = DEFAULT_BOOKING_LIMIT,
    ) -> list[BookingRecord]:
        if date_to < date_from:
            raise ValidationError("date_to must not be before date_from.")
        if isinstance(limit, bool) or not isinstance(limit, int) or limit < 1:
            raise ValidationError("limit must be a positive integer.")
        params = {
            "dateFrom": format_utc_timestamp(date_from),
            "dateTo": format_utc_timestamp(date_to),
            "limit": str(limit),
        }
        if court_id:
            params["courtId"] = court_id
        response = await self._api.get(BOOKINGS_ENDPOINT, params=params)
        bookings = self._map_bookings(response.data)
        _LOGGER.debug("Fetched %s bookings", len(bookings))
        return bookings

    async def list_merged_bookings(
        self,
        date_from: datetime,
        date_to: datetime,
        *,
        court_id: str | None = None,
        limit: int = DEFAULT_BOOKING_LIMIT,
    ) -> list[MergedBookingGroup]:
        bookings = await self.list_bookings(date_from, date_to, court_id=court_id, limit=limit)
        return merge_consecutive_bookings(bookings)

    async def get_booking(self, booking_id: str) -> BookingRecord | None:
        response = await self._api.get(self._detail_path(booking_id))
        if response.data is None:
            return None
        return BookingRecord.from_payload(response.data)

    async def create_booking(
        self,
        *,
        court_id: str,
        date: str,
        start_time: str,
        end_time: str,
        customer_name: str,
        customer_phone: str,
        price: float | None = None,
        status: str | None = None,
    ) -> BookingRecord | None:
        payload: dict[str, Any] = {
            "courtId": court_id,
            "date": date,
            "startTime": start_time,
            "endTime": end_time,
            "customerName": customer_name,
            "customerPhone": customer_phone,
        }
        if price is not None:
            payload["price"] = price
        if status is not None:
            payload["status"] = str(status)
        response = await self._api.post(BOOKINGS_ENDPOINT, payload)
        if response.data is None:
            return None
        return BookingRecord.from_payload(response.data)

    async def update_booking(self, booking_id: str, **changes: Any) -> BookingRecord | None:
        payload = self._build_update_payload(changes)
        response = await self._api.put(self._detail_path(booking_id), payload)
        if response.data is None:
            return None
        return BookingRecord.from_payload(response.data)

    async def update_group(
        self,
        group: MergedBookingGroup,
        *,
        status: str | None = None,
        price: float | None = None,
        customer_name: str | None = None,
        customer_phone: str | None = None,
    ) -> list[BookingRecord | None]:
        """Apply one edit to every booking of a merged group.

        ``price`` is the price of the whole group. It is split evenly across its
        slots and each share is rounded to cents. Time fields are not editable here since each slot keeps its own.
        """
        changes: dict[str, Any] = {
            "status": status,
            "customer_name": customer_name,
            "customer_phone": customer_phone,
        }
        if price is not None:
            changes["price"] = round(price / group.count, 2)
        changes = {key: value for key, value in changes.items() if value is not None}
        if not changes:
            raise ValidationError("At least one field must be updated.")
        _LOGGER.debug("Updating %s bookings of group %s", group.count, group.id)
        results: list[BookingRecord | None] = []
        for booking_id in group.member_ids:
            results.append(await self.update_booking(booking_id, **changes))
        return results

    def _build_update_payload(self, changes: Mapping[str, Any]) -> dict[str, Any]:
        unknown = sorted(set(changes) - set(_UPDATE_FIELDS))
        if unknown:
            raise ValidationError(f"Unsupported booking fields: {', '.join(unknown)}.")
        payload = {
            _UPDATE_FIELDS[key]: str(value) if key == "status" else value
            for key, value in changes.items()
            if value is not None
        }
        if not payload:
            raise ValidationError("At least one field must be updated.")
        return payload

    def _map_bookings(self, data: Any) -> list[BookingRecord]:
        """Map a listing payload to records.

        Entries that are not objects are skipped. An object that fails to parse as
        a booking raises :class:`ValidationError` for the whole listing, so a bad
        record never silently drops out of the merged view.
        """
        items = data.get("items") if isinstance(data, Mapping) else data
        if items is None:
            return []
        if not isinstance(items, list):
            raise ValidationError("Booking list response did not include a list of items.")
        return [BookingRecord.from_payload(item) for item in items if isinstance(item, Mapping)]

    def _detail_path(self, booking_id: str) -> str:
        if not isinstance(booking_id, str) or not booking_id.strip():
            raise ValidationError("booking_id must be a non-empty string.")
        return BOOKING_DETAIL_ENDPOINT.format(booking_id=booking_id.strip())
