from datetime import UTC, datetime, timedelta, timezone

import pytest

from pycourtbooking.const import BASE_URL_ENV, DEFAULT_BASE_URL
from pycourtbooking.exceptions import ValidationError
from pycourtbooking.util import (
    coerce_price,
    format_utc_timestamp,
    parse_timestamp,
    resolve_base_url,
    within_tolerance,
)


def test_parse_timestamp_converts_to_utc() -> None:
    parsed = parse_timestamp("2024-01-01T16:00:00+07:00")
    assert parsed == datetime(2024, 1, 1, 9, 0, tzinfo=UTC)


def test_parse_timestamp_accepts_zulu_with_millis() -> None:
    parsed = parse_timestamp("2024-01-01T09:00:00.000Z")
    assert parsed == datetime(2024, 1, 1, 9, 0, tzinfo=UTC)


@pytest.mark.parametrize("value", ["", "yesterday", "2024-01-01T09:00:00", None])
def test_parse_timestamp_invalid(value: object) -> None:
    with pytest.raises(ValidationError):
        parse_timestamp(value)  # type: ignore[arg-type]


def test_format_utc_timestamp_converts_offset() -> None:
    dt = datetime(2024, 1, 1, 12, 0, tzinfo=timezone(timedelta(hours=2)))
    assert format_utc_timestamp(dt) == "2024-01-01T10:00:00Z"


def test_coerce_price() -> None:
    assert coerce_price(200) == 200.0
    assert coerce_price("150.50") == 150.5
    assert coerce_price(None) == 0.0
    assert coerce_price(" ") == 0.0
    with pytest.raises(ValidationError):
        coerce_price("free")
    with pytest.raises(ValidationError):
        coerce_price(True)
    with pytest.raises(ValidationError):
        coerce_price("nan")


def test_within_tolerance_boundary() -> None:
    end = datetime(2024, 1, 1, 10, 0, tzinfo=UTC)
    assert within_tolerance(end, end + timedelta(milliseconds=60_000))
    assert within_tolerance(end, end - timedelta(milliseconds=60_000))
    assert not within_tolerance(end, end + timedelta(milliseconds=60_001))


def test_resolve_base_url_prefers_explicit(monkeypatch: pytest.MonkeyPatch) -> None:
    monkeypatch.setenv(BASE_URL_ENV, "https://env.example")
    assert resolve_base_url(" https://api.example/ ") == "https://api.example"


def test_resolve_base_url_reads_environment(monkeypatch: pytest.MonkeyPatch) -> None:
    monkeypatch.setenv(BASE_URL_ENV, "https://env.example/")
    assert resolve_base_url() == "https://env.example"


def test_resolve_base_url_default(monkeypatch: pytest.MonkeyPatch) -> None:
    monkeypatch.delenv(BASE_URL_ENV, raising=False)
    assert resolve_base_url() == DEFAULT_BASE_URL


def test_resolve_base_url_rejects_blank() -> None:
    with pytest.raises(ValidationError):
        resolve_base_url("  ")
