"""Request Encoder - Builds the wire payload for a request.

Exactly one encoding path runs per request, in this order of precedence:

    files present       -> multipart/form-data
    parameters present  -> application/x-www-form-urlencoded
    raw body present    -> text/xml, ASCII bytes

Multipart output depends only on the inputs and the boundary, so encoding
the same request twice with the same boundary yields identical bytes.
"""

from __future__ import annotations

import uuid
from dataclasses import dataclass
from typing import TYPE_CHECKING, Iterable
from urllib.parse import quote_plus

if TYPE_CHECKING:
    from restwire.models import HttpFile, HttpParameter, HttpRequest


DEFAULT_BOUNDARY = "-----------------------------28947758029299"
DEFAULT_FILE_CONTENT_TYPE = "application/octet-stream"
FORM_URLENCODED = "application/x-www-form-urlencoded"
# Legacy default for raw bodies. Callers that send JSON set Content-Type themselves.
RAW_BODY_CONTENT_TYPE = "text/xml"

_CRLF = "\r\n"


@dataclass(frozen=True)
class EncodedBody:
    """Request body bytes and the Content-Type that describes them."""

    content: bytes
    content_type: str


def random_boundary() -> str:
    """Return a fresh boundary token for a single multipart request."""
    return f"---------------------------{uuid.uuid4().hex}"


def multipart_content_type(boundary: str) -> str:
    return f"multipart/form-data; boundary={boundary}"


def encode_parameters(parameters: Iterable[HttpParameter]) -> str:
    """URL-encode parameters as name=value pairs joined by '&'.

    Names and values are both percent-encoded (spaces become '+'). Order and
    duplicates are preserved.
    """
    return "&".join(
        f"{quote_plus(p.name)}={quote_plus(p.value)}" for p in parameters
    )


def encode_multipart(
    files: Iterable[HttpFile],
    parameters: Iterable[HttpParameter],
    boundary: str,
) -> bytes:
    """Serialize files then parameters as a multipart/form-data body.

    Each file part names its field after the file's filename. File bytes are
    copied as-is; part headers and parameter values are UTF-8.
    """
    body = bytearray()

    for file in files:
        header = (
            f"--{boundary}{_CRLF}"
            f'Content-Disposition: form-data; name="{file.filename}"; filename="{file.filename}"{_CRLF}'
            f"Content-Type: {file.content_type or DEFAULT_FILE_CONTENT_TYPE}{_CRLF}"
            f"{_CRLF}"
        )
        body += header.encode("utf-8")
        body += file.data
        body += _CRLF.encode("ascii")

    for param in parameters:
        part = (
            f"--{boundary}{_CRLF}"
            f'Content-Disposition: form-data; name="{param.name}"{_CRLF}'
            f"{_CRLF}"
            f"{param.value}{_CRLF}"
        )
        body += part.encode("utf-8")

    body += f"--{boundary}--{_CRLF}".encode("ascii")
    return bytes(body)


def encode_raw_body(body: str) -> bytes:
    """Encode a raw body as ASCII, replacing non-ASCII characters with '?'."""
    return body.encode("ascii", errors="replace")


def encode_body(request: HttpRequest, boundary: str = DEFAULT_BOUNDARY) -> EncodedBody | None:
    """Produce the body and Content-Type for a body-carrying request.

    Args:
        request: The request whose files, parameters or raw body are encoded.
        boundary: Multipart boundary token, used only when files are present.

    Returns:
        EncodedBody, or None when the request has nothing to send.
    """
    if request.has_files:
        return EncodedBody(
            content=encode_multipart(request.files, request.parameters, boundary),
            content_type=multipart_content_type(boundary),
        )

    if request.has_parameters:
        return EncodedBody(
            content=encode_parameters(request.parameters).encode("ascii"),
            content_type=FORM_URLENCODED,
        )

    if request.has_body:
        return EncodedBody(
            content=encode_raw_body(request.body),
            content_type=RAW_BODY_CONTENT_TYPE,
        )

    return None


def append_query(url: str, parameters: Iterable[HttpParameter]) -> str:
    """Append URL-encoded parameters to a URL as its query string."""
    query = encode_parameters(parameters)
    if not query:
        return url
    separator = "&" if "?" in url else "?"
    return f"{url}{separator}{query}"
