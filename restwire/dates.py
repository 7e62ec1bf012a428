"""Date parsing with multi-format fallback.

Handles the date shapes commonly found in REST payloads and headers:
Microsoft JSON dates (``\\/Date(1262304000000+0100)\\/``), JavaScript
constructor literals (``new Date(1262304000000)``), a handful of ISO 8601
variants, and HTTP dates (RFC 1123 and friends).
"""

from __future__ import annotations

import re
from datetime import datetime, timedelta, timezone
from email.utils import parsedate_to_datetime

EPOCH = datetime(1970, 1, 1, tzinfo=timezone.utc)

_MS_JSON_DATE = re.compile(r"\\?/Date\((-?\d+)([+-])?(\d{4})?\)\\?/")
_JS_NEW_DATE = re.compile(r"newDate\((-?\d+)\)")

# Tried in order; the first format that matches wins.
_ISO8601_FORMATS = (
    "%Y-%m-%d %H:%M:%SZ",
    "%Y-%m-%dT%H:%M:%S",
    "%Y-%m-%dT%H:%M:%SZ",
    "%Y-%m-%dT%H:%M:%S%z",
    "%Y-%m-%d %H:%M:%S",
)


def parse_json_date(value: str) -> datetime | None:
    """Parse a date as it appears in a JSON document.

    Args:
        value: Raw JSON token, optionally still wrapped in double quotes.

    Returns:
        The parsed datetime, or None if no known format matches. Epoch-based
        forms return timezone-aware UTC datetimes.
    """
    value = value.replace("\n", "").replace("\r", "")

    if len(value) >= 2 and value.startswith('"') and value.endswith('"'):
        value = value[1:-1]

    if "/Date(" in value:
        return _extract_epoch_date(value, _MS_JSON_DATE)
    if "new Date(" in value:
        # Whitespace is stripped, so "new Date(" becomes "newDate("
        return _extract_epoch_date(re.sub(r"\s", "", value), _JS_NEW_DATE)

    return parse_iso8601_date(value)


def parse_iso8601_date(value: str) -> datetime | None:
    """Try each supported ISO 8601 layout in turn. 'Z' suffixes yield UTC."""
    for fmt in _ISO8601_FORMATS:
        try:
            parsed = datetime.strptime(value, fmt)
        except ValueError:
            continue
        if fmt.endswith("Z"):
            parsed = parsed.replace(tzinfo=timezone.utc)
        return parsed
    return None


def parse_http_date(value: str) -> datetime:
    """Parse an HTTP header date, falling back to ISO 8601.

    Raises:
        ValueError: If the value matches no supported format.
    """
    try:
        return parsedate_to_datetime(value)
    except (TypeError, ValueError):
        pass

    parsed = parse_iso8601_date(value.strip())
    if parsed is None:
        raise ValueError(f"Unrecognized date: {value!r}")
    return parsed


def _extract_epoch_date(value: str, pattern: re.Pattern[str]) -> datetime | None:
    match = pattern.search(value)
    if match is None:
        return None

    try:
        result = EPOCH + timedelta(milliseconds=int(match.group(1)))

        if pattern is _MS_JSON_DATE and match.group(3):
            offset = match.group(3)
            shift = timedelta(hours=int(offset[:2]), minutes=int(offset[2:]))
            result = result + shift if match.group(2) == "+" else result - shift
    except OverflowError:
        # Outside the range datetime can represent
        return None

    return result
