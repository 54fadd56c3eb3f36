"""Manual live check against an owner API.

Run from the repository root with:
  PYCOURTBOOKING_API_URL=https://api.example USERNAME=... PASSWORD=... \
  PYTHONPATH=src python scripts/live_check.py

Optional flags:
  --date YYYY-MM-DD lists bookings for that day (default: today, UTC).
  --days N widens the window to N days.
  --court-id restricts the listing to one court.
  --sanitize-output masks customer phone numbers.
  --debug enables library debug logging.
  --traceback prints full tracebacks on errors.
"""

from __future__ import annotations

import argparse
import asyncio
import logging
import os
import sys
import traceback
from datetime import UTC, date, datetime, timedelta

from sanitize import mask_phone as _mask_phone

from pycourtbooking import (
    BookingRecord,
    Client,
    MergedBookingGroup,
    merge_consecutive_bookings,
)
from pycourtbooking.exceptions import PyCourtBookingError

_LOGGER = logging.getLogger(__name__)


def _require_value(name: str, value: str | None) -> str:
    if not value:
        print(f"Missing required value: {name}", file=sys.stderr)
        raise SystemExit(2)
    return value


def _print_exception(label: str, exc: Exception, *, trace: bool) -> None:
    print(f"{label}: {exc.__class__.__name__}: {exc}", file=sys.stderr)
    if trace:
        traceback.print_exc()


def _format_phone(phone: str | None, *, sanitize: bool) -> str:
    if not phone:
        return "-"
    return _mask_phone(phone) if sanitize else phone


def _format_booking(booking: BookingRecord, *, sanitize: bool) -> str:
    return (
        f"{booking.id} | {booking.facility_id} | "
        f"{booking.time_slot_start.isoformat()} -> {booking.time_slot_end.isoformat()} | "
        f"{booking.status} | {booking.total_price:.2f} | "
        f"{_format_phone(booking.customer_phone, sanitize=sanitize)}"
    )


def _format_group(group: MergedBookingGroup, *, sanitize: bool) -> str:
    members = ", ".join(group.member_ids)
    return f"{_format_booking(group.representative, sanitize=sanitize)} | [{members}]"


def _build_window(day: str | None, days: int) -> tuple[datetime, datetime]:
    start_day = date.fromisoformat(day) if day else datetime.now(UTC).date()
    start = datetime(start_day.year, start_day.month, start_day.day, tzinfo=UTC)
    return start, start + timedelta(days=max(1, days))


def _parse_args() -> argparse.Namespace:
    parser = argparse.ArgumentParser(description="Run an owner API live check.")
    parser.add_argument("--base-url", dest="base_url", help="API base URL.")
    parser.add_argument("--username", dest="username", help="Username for login.")
    parser.add_argument("--password", dest="password", help="Password for login.")
    parser.add_argument("--date", dest="day", help="First day to list (YYYY-MM-DD).")
    parser.add_argument("--days", dest="days", type=int, default=1, help="Days to list.")
    parser.add_argument("--court-id", dest="court_id", help="Only list this court.")
    parser.add_argument(
        "--sanitize-output",
        dest="sanitize_output",
        action="store_true",
        help="Mask customer phone numbers.",
    )
    parser.add_argument("--debug", action="store_true", help="Enable debug logging.")
    parser.add_argument("--traceback", action="store_true", help="Print tracebacks.")
    return parser.parse_args()


async def main() -> int:
    args = _parse_args()
    logging.basicConfig(level=logging.DEBUG if args.debug else logging.WARNING)
    username = _require_value("USERNAME", args.username or os.environ.get("USERNAME"))
    password = _require_value("PASSWORD", args.password or os.environ.get("PASSWORD"))
    date_from, date_to = _build_window(args.day, args.days)

    def _on_auth_failure() -> None:
        print("Session ended; login required.", file=sys.stderr)

    async with Client(base_url=args.base_url, on_auth_failure=_on_auth_failure) as client:
        try:
            result = await client.login(username, password)
            print(f"Logged in as: {result.user.username}")
            bookings = await client.bookings.list_bookings(
                date_from,
                date_to,
                court_id=args.court_id,
            )
        except PyCourtBookingError as exc:
            _print_exception("Error", exc, trace=args.traceback)
            return 1

    groups = merge_consecutive_bookings(bookings)
    print(f"Bookings: {len(bookings)}")
    for booking in bookings:
        print(f"- {_format_booking(booking, sanitize=args.sanitize_output)}")
    print(f"Merged bookings: {len(groups)}")
    for group in groups:
        print(f"- {_format_group(group, sanitize=args.sanitize_output)}")
    _LOGGER.debug("Live check completed")
    return 0


if __name__ == "__main__":
    raise SystemExit(asyncio.run(main()))
