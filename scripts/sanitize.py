"""Sanitize owner API JSON payloads for safe sharing."""

from __future__ import annotations

import argparse
import json
import sys
from collections.abc import Mapping
from datetime import datetime
from pathlib import Path
from typing import Any

_SENSITIVE_KEYS = {
    "password",
    "token",
    "authorization",
    "secret",
}
_PII_KEYS = {
    "email",
    "username",
    "name",
    "notes",
}
_PHONE_KEYS = {
    "phone",
}


def mask_value(value: Any) -> Any:
    """Return a length-preserving mask for a value."""
    if value is None or isinstance(value, bool):
        return value
    return "*" * len(str(value))


def mask_phone(phone: Any) -> Any:
    """Mask every digit but the last two, keeping separators."""
    if not isinstance(phone, str):
        return mask_value(phone)
    digits = sum(1 for ch in phone if ch.isdigit())
    if digits <= 2:
        return "*" * len(phone)
    masked: list[str] = []
    seen = 0
    for ch in phone:
        if ch.isdigit():
            seen += 1
            masked.append(ch if seen > digits - 2 else "*")
        else:
            masked.append(ch)
    return "".join(masked)


def _mask_container(value: Any) -> Any:
    if isinstance(value, dict):
        return {str(k): _mask_container(v) for k, v in value.items()}
    if isinstance(value, list):
        return [_mask_container(item) for item in value]
    return mask_value(value)


def _mask_value_for_key(key: str, value: Any) -> Any:
    key_lower = key.lower()
    if any(fragment in key_lower for fragment in _SENSITIVE_KEYS):
        return _mask_container(value)
    if any(fragment in key_lower for fragment in _PHONE_KEYS):
        return mask_phone(value)
    if any(fragment in key_lower for fragment in _PII_KEYS):
        return _mask_container(value)
    return value


def sanitize_data(value: Any, *, key: str | None = None) -> Any:
    """Return a sanitized representation of a value."""
    if key is not None:
        masked = _mask_value_for_key(key, value)
        if masked is not value:
            return masked
    if isinstance(value, dict):
        return {str(k): sanitize_data(v, key=str(k)) for k, v in value.items()}
    if isinstance(value, list):
        return [sanitize_data(item) for item in value]
    if isinstance(value, datetime):
        return value.isoformat()
    if value is None or isinstance(value, (str, int, float, bool)):
        return value
    return str(value)


def sanitize_headers(headers: Mapping[str, Any]) -> dict[str, Any]:
    """Return sanitized headers."""
    return {key: sanitize_data(value, key=key) for key, value in headers.items()}


def _parse_args() -> argparse.Namespace:
    parser = argparse.ArgumentParser(description="Sanitize a JSON file for sharing.")
    parser.add_argument("input", help="Path to the JSON file.")
    parser.add_argument(
        "--indent",
        dest="indent",
        type=int,
        default=2,
        help="Indent level for JSON output (default: 2).",
    )
    return parser.parse_args()


def main() -> int:
    """CLI entrypoint for sanitizing JSON files."""
    args = _parse_args()
    input_path = Path(args.input)
    if not input_path.exists():
        print(f"File not found: {input_path}", file=sys.stderr)
        return 2
    try:
        data = json.loads(input_path.read_text(encoding="utf-8"))
    except json.JSONDecodeError as exc:
        print(f"Invalid JSON: {exc}", file=sys.stderr)
        return 2
    print(json.dumps(sanitize_data(data), indent=args.indent, sort_keys=True, ensure_ascii=False))
    return 0


if __name__ == "__main__":
    raise SystemExit(main())
