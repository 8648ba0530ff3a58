"""Parsing helpers for raw filter and request values."""

import math
from datetime import date, datetime, timezone
from typing import Any


def parse_bool_param(value: str | None) -> bool | None:
    """
    Parse string to bool, returning None for empty values.

    Accepts: "true"/"false", "1"/"0", "yes"/"no"
    """
    if not value:
        return None
    lower = value.lower()
    if lower in ("true", "1", "yes"):
        return True
    if lower in ("false", "0", "no"):
        return False
    return None


def parse_number(value: Any) -> float | None:
    """
    Coerce a cell or operand to a float.

    Returns None for None, blank strings, unparseable text and NaN.
    """
    if value is None:
        return None
    if isinstance(value, str):
        value = value.strip()
        if not value:
            return None
    try:
        number = float(value)
    except (ValueError, TypeError):
        return None
    if math.isnan(number):
        return None
    return number


def parse_timestamp_ms(value: Any) -> float | None:
    """
    Coerce a cell or operand to milliseconds since the epoch.

    Accepts datetime (naive values are taken as UTC), date (midnight UTC),
    numbers (already milliseconds) and ISO 8601 strings. Returns None when
    the value can't be read as a point in time.
    """
    if value is None or isinstance(value, bool):
        return None
    if isinstance(value, datetime):
        if value.tzinfo is None:
            value = value.replace(tzinfo=timezone.utc)
        return value.timestamp() * 1000
    if isinstance(value, date):
        midnight = datetime(value.year, value.month, value.day, tzinfo=timezone.utc)
        return midnight.timestamp() * 1000
    if isinstance(value, (int, float)):
        return None if math.isnan(value) else float(value)
    if isinstance(value, str):
        text = value.strip()
        if not text:
            return None
        try:
            parsed = datetime.fromisoformat(text)
        except ValueError:
            return None
        return parse_timestamp_ms(parsed)
    return None
