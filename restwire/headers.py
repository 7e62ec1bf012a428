"""Header Dispatcher - Applies caller headers to an outgoing request.

Some header names are "restricted": the transport computes them itself or
gives them dedicated fields. Those names are routed through a fixed table of
effects instead of the generic header collection. Names match
case-insensitively.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from datetime import datetime, timezone
from email.utils import format_datetime
from enum import Enum
from typing import Iterable

import httpx

from restwire.dates import parse_http_date
from restwire.models import HttpHeader


class HeaderError(Exception):
    """Base class for header application errors."""


class UnsupportedHeaderError(HeaderError):
    """Raised for a header the core cannot apply (e.g., Range)."""


class InvalidHeaderValueError(HeaderError):
    """Raised when a restricted header's value cannot be parsed."""


class HeaderEffect(str, Enum):
    """What applying a restricted header does to the outgoing request."""

    IGNORE = "ignore"
    UNSUPPORTED = "unsupported"
    SET_CONTENT_LENGTH = "set_content_length"
    SET_CONDITIONAL = "set_conditional"
    SET_TRANSFER_ENCODING_CHUNKED = "set_transfer_encoding_chunked"
    SET_DIRECT = "set_direct"


# Lower-cased header name -> effect
RESTRICTED_HEADERS: dict[str, HeaderEffect] = {
    "accept": HeaderEffect.SET_DIRECT,
    "connection": HeaderEffect.SET_DIRECT,
    "content-length": HeaderEffect.SET_CONTENT_LENGTH,
    "content-type": HeaderEffect.SET_DIRECT,
    "expect": HeaderEffect.SET_DIRECT,
    "date": HeaderEffect.IGNORE,
    "host": HeaderEffect.IGNORE,
    "if-modified-since": HeaderEffect.SET_CONDITIONAL,
    "range": HeaderEffect.UNSUPPORTED,
    "referer": HeaderEffect.SET_DIRECT,
    "transfer-encoding": HeaderEffect.SET_TRANSFER_ENCODING_CHUNKED,
    "user-agent": HeaderEffect.SET_DIRECT,
}

# SET_DIRECT header name -> OutgoingRequest attribute
_DIRECT_FIELDS: dict[str, str] = {
    "accept": "accept",
    "connection": "connection",
    "content-type": "content_type",
    "expect": "expect",
    "referer": "referer",
    "user-agent": "user_agent",
}

# Rendering order and wire names for the dedicated fields
_FIELD_HEADER_NAMES: tuple[tuple[str, str], ...] = (
    ("accept", "Accept"),
    ("connection", "Connection"),
    ("content_type", "Content-Type"),
    ("expect", "Expect"),
    ("referer", "Referer"),
    ("user_agent", "User-Agent"),
    ("transfer_encoding", "Transfer-Encoding"),
)


@dataclass
class OutgoingRequest:
    """Mutable transport-level request assembled before the call is issued.

    Restricted headers live in dedicated fields; everything else goes into
    ``headers``. ``header_items()`` renders both for httpx.
    """

    method: str
    url: str
    content: bytes | None = None
    headers: httpx.Headers = field(default_factory=httpx.Headers)
    accept: str | None = None
    connection: str | None = None
    content_length: int | None = None
    content_type: str | None = None
    expect: str | None = None
    if_modified_since: datetime | None = None
    referer: str | None = None
    transfer_encoding: str | None = None
    send_chunked: bool = False
    user_agent: str | None = None

    def header_items(self) -> list[tuple[str, str]]:
        """Render dedicated fields followed by generic headers."""
        items: list[tuple[str, str]] = []
        for attr, name in _FIELD_HEADER_NAMES:
            value = getattr(self, attr)
            if value is not None:
                items.append((name, value))
        if self.content_length is not None:
            items.append(("Content-Length", str(self.content_length)))
        if self.if_modified_since is not None:
            items.append(("If-Modified-Since", format_http_date(self.if_modified_since)))
        items.extend(self.headers.multi_items())
        return items


def format_http_date(value: datetime) -> str:
    """Format as an RFC 1123 GMT date. Naive datetimes are taken as UTC."""
    if value.tzinfo is None:
        value = value.replace(tzinfo=timezone.utc)
    return format_datetime(value.astimezone(timezone.utc), usegmt=True)


def header_effect(name: str) -> HeaderEffect | None:
    """Return the restricted-header effect for a name, or None if unrestricted."""
    return RESTRICTED_HEADERS.get(name.lower())


def apply_header(outgoing: OutgoingRequest, header: HttpHeader) -> None:
    """Apply a single header to the outgoing request.

    Raises:
        UnsupportedHeaderError: For Range.
        InvalidHeaderValueError: For unparseable Content-Length or
            If-Modified-Since values.
    """
    effect = header_effect(header.name)

    if effect is None:
        outgoing.headers[header.name] = header.value
    elif effect is HeaderEffect.IGNORE:
        # Set by the transport
        return
    elif effect is HeaderEffect.UNSUPPORTED:
        raise UnsupportedHeaderError(f"Header '{header.name}' is not supported")
    elif effect is HeaderEffect.SET_CONTENT_LENGTH:
        try:
            outgoing.content_length = int(header.value)
        except ValueError as e:
            raise InvalidHeaderValueError(
                f"Invalid Content-Length '{header.value}': must be an integer"
            ) from e
    elif effect is HeaderEffect.SET_CONDITIONAL:
        try:
            outgoing.if_modified_since = parse_http_date(header.value)
        except ValueError as e:
            raise InvalidHeaderValueError(
                f"Invalid If-Modified-Since '{header.value}': {e}"
            ) from e
    elif effect is HeaderEffect.SET_TRANSFER_ENCODING_CHUNKED:
        outgoing.transfer_encoding = header.value
        outgoing.send_chunked = True
    else:
        setattr(outgoing, _DIRECT_FIELDS[header.name.lower()], header.value)


def apply_headers(headers: Iterable[HttpHeader], outgoing: OutgoingRequest) -> None:
    """Apply headers in order; the first failing header aborts the rest."""
    for header in headers:
        apply_header(outgoing, header)
