"""Consolidation of consecutive booking slots into merged groups."""

from __future__ import annotations

import logging
from collections.abc import Iterable, Sequence
from dataclasses import replace
from datetime import datetime

from .const import CONSECUTIVE_TOLERANCE
from .models import BookingRecord, BookingStatus, MergedBookingGroup
from .util import coerce_price, within_tolerance

_LOGGER = logging.getLogger(__name__)

CHECKABLE_STATUSES = frozenset({BookingStatus.PENDING, BookingStatus.CONFIRMED})
TERMINAL_STATUSES = frozenset(
    {BookingStatus.CANCELLED, BookingStatus.NO_SHOW, BookingStatus.EXPIRED}
)


def same_facility(current: BookingRecord, candidate: BookingRecord) -> bool:
    return (current.facility_id or "").strip() == (candidate.facility_id or "").strip()


def status_compatible(current: BookingRecord, candidate: BookingRecord) -> bool:
    if current.status == candidate.status:
        return True
    return current.status in CHECKABLE_STATUSES and candidate.status in CHECKABLE_STATUSES


def consecutive(current: BookingRecord, candidate: BookingRecord) -> bool:
    return within_tolerance(
        current.time_slot_end,
        candidate.time_slot_start,
        CONSECUTIVE_TOLERANCE,
    )


def same_customer(current: BookingRecord, candidate: BookingRecord) -> bool:
    # Records without a phone (e.g. from a QR lookup) are compatible with anyone.
    current_phone = current.customer_phone or ""
    candidate_phone = candidate.customer_phone or ""
    return not current_phone or not candidate_phone or current_phone == candidate_phone


def can_merge(current: BookingRecord, candidate: BookingRecord) -> bool:
    return (
        same_facility(current, candidate)
        and status_compatible(current, candidate)
        and consecutive(current, candidate)
        and same_customer(current, candidate)
    )


def status_group(status: str) -> int:
    """Active statuses sort first (0), terminal ones last (1)."""
    return 1 if status in TERMINAL_STATUSES else 0


def booking_sort_key(record: BookingRecord) -> tuple[str, int, datetime]:
    return (record.facility_id or "", status_group(record.status), record.time_slot_start)


def sort_bookings(records: Iterable[BookingRecord]) -> list[BookingRecord]:
    return sorted(records, key=booking_sort_key)


class _GroupBuilder:
    """Running accumulator for one group; the representative is copied on extend."""

    def __init__(self, first: BookingRecord) -> None:
        self.representative = replace(first, total_price=coerce_price(first.total_price))
        self.member_ids: list[str] = [first.id]

    def extend(self, record: BookingRecord) -> None:
        current = self.representative
        is_paid = current.is_paid
        if current.is_paid is not None or record.is_paid is not None:
            is_paid = bool(current.is_paid) and bool(record.is_paid)
        self.representative = replace(
            current,
            time_slot_end=record.time_slot_end,
            total_price=current.total_price + coerce_price(record.total_price),
            is_paid=is_paid,
        )
        self.member_ids.append(record.id)

    def build(self) -> MergedBookingGroup:
        return MergedBookingGroup(
            representative=self.representative,
            member_ids=tuple(self.member_ids),
        )


def merge_consecutive_bookings(records: Sequence[BookingRecord]) -> list[MergedBookingGroup]:
    """Collapse consecutive compatible bookings into merged groups.

    Records are sorted by facility, status group and start time, then scanned
    once from left to right. Each record is compared with the running group only,
    so a chain A-B-C merges whenever A-B and (extended A)-C are compatible, even
    if A and C alone would not be.
    """
    if not records:
        return []
    ordered = sort_bookings(records)
    _LOGGER.debug("Merging %s bookings", len(ordered))

    groups: list[MergedBookingGroup] = []
    builder = _GroupBuilder(ordered[0])
    for record in ordered[1:]:
        if can_merge(builder.representative, record):
            builder.extend(record)
            continue
        groups.append(builder.build())
        builder = _GroupBuilder(record)
    groups.append(builder.build())

    _LOGGER.debug("Merged %s bookings into %s groups", len(ordered), len(groups))
    return groups
