"""Shared utilities for timestamps, prices and time ranges."""

from __future__ import annotations

import math
import os
from datetime import UTC, datetime, timedelta
from typing import Any

from .const import BASE_URL_ENV, CONSECUTIVE_TOLERANCE, DEFAULT_BASE_URL
from .exceptions import ValidationError


def parse_timestamp(value: str) -> datetime:
    if not isinstance(value, str) or not value:
        raise ValidationError("Timestamp must be a non-empty string.")
    raw = value.strip()
    if raw.endswith("Z"):
        raw = f"{raw[:-1]}+00:00"
    try:
        parsed = datetime.fromisoformat(raw)
    except ValueError as exc:
        raise ValidationError("Timestamp is not a valid ISO 8601 value.") from exc
    if parsed.tzinfo is None:
        raise ValidationError("Timestamp must include timezone information.")
    return parsed.astimezone(UTC)


def format_utc_timestamp(value: datetime) -> str:
    if value.tzinfo is None:
        raise ValidationError("Timestamp must include timezone information.")
    normalized = value.astimezone(UTC).replace(microsecond=0)
    return normalized.isoformat().replace("+00:00", "Z")


def coerce_price(value: Any) -> float:
    """Return a price as a float, accepting numbers and numeric strings."""
    if value is None:
        return 0.0
    if isinstance(value, bool):
        raise ValidationError("Price must be numeric.")
    if isinstance(value, int | float):
        price = float(value)
    elif isinstance(value, str):
        stripped = value.strip()
        if not stripped:
            return 0.0
        try:
            price = float(stripped)
        except ValueError as exc:
            raise ValidationError("Price is not a numeric value.") from exc
    else:
        raise ValidationError("Price must be numeric.")
    if not math.isfinite(price):
        raise ValidationError("Price must be finite.")
    return price


def time_gap(end: datetime, start: datetime) -> timedelta:
    """Absolute distance between the end of one range and the start of another."""
    return abs(start - end)


def within_tolerance(
    end: datetime,
    start: datetime,
    tolerance: timedelta = CONSECUTIVE_TOLERANCE,
) -> bool:
    return time_gap(end, start) <= tolerance


def normalize_base_url(base_url: str) -> str:
    if not isinstance(base_url, str) or not base_url.strip():
        raise ValidationError("base_url must be a non-empty string.")
    return base_url.strip().rstrip("/")


def resolve_base_url(base_url: str | None = None) -> str:
    """Pick the explicit base URL, then the environment, then the default."""
    if base_url is not None:
        return normalize_base_url(base_url)
    env_value = os.environ.get(BASE_URL_ENV)
    if env_value and env_value.strip():
        return normalize_base_url(env_value)
    return DEFAULT_BASE_URL
