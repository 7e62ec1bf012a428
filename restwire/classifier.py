"""Response Classifier - Reduces a transport outcome to a RestResponse.

A call ends in one of three outcomes:

    ResponseReceived       the transport returned a 2xx response
    ErrorResponseReceived  the transport returned a response but flagged its
                           status code (httpx.HTTPStatusError)
    TransportFailed        no response at all (DNS, connect, timeout, ...)

Both response-carrying outcomes classify as SUCCESS: callers inspect
``status_code`` to see 4xx/5xx. Only TransportFailed, or a failure while
reading the body, classifies as ERROR.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import Any, Union

import httpx

from restwire.models import HttpHeader, ResponseStatus, RestResponse

logger = logging.getLogger(__name__)

# Failures that mean "no usable response" rather than a caller bug
TRANSPORT_ERRORS: tuple[type[Exception], ...] = (
    httpx.HTTPError,
    httpx.InvalidURL,
    httpx.StreamError,
    UnicodeError,
)


@dataclass(frozen=True)
class ResponseReceived:
    response: httpx.Response


@dataclass(frozen=True)
class ErrorResponseReceived:
    response: httpx.Response
    error: httpx.HTTPStatusError


@dataclass(frozen=True)
class TransportFailed:
    error: Exception


TransportOutcome = Union[ResponseReceived, ErrorResponseReceived, TransportFailed]


def describe_error(error: BaseException) -> str:
    """Return a non-empty description of an exception."""
    return str(error) or type(error).__name__


def classify(outcome: TransportOutcome) -> RestResponse:
    """Classify a transport outcome and build the final response record.

    The response stream, if any, is closed before returning, including when
    reading the body fails.
    """
    if isinstance(outcome, TransportFailed):
        logger.info("Transport failure: %s", describe_error(outcome.error))
        return RestResponse(
            response_status=ResponseStatus.ERROR,
            error_message=describe_error(outcome.error),
        )

    response = outcome.response
    try:
        fields = _read_response(response)
    except TRANSPORT_ERRORS as e:
        logger.info("Failed to read response body from %s: %s", response.url, describe_error(e))
        return RestResponse(
            response_status=ResponseStatus.ERROR,
            error_message=describe_error(e),
        )
    finally:
        response.close()

    logger.debug(
        "Classified %s %s from %s as success",
        response.status_code,
        response.reason_phrase,
        response.url,
    )
    return RestResponse(response_status=ResponseStatus.SUCCESS, **fields)


def _read_response(response: httpx.Response) -> dict[str, Any]:
    """Read the body as text and copy response metadata."""
    raw = response.read()
    content = response.text

    return {
        "status_code": response.status_code,
        "status_description": response.reason_phrase,
        "content_type": response.headers.get("content-type", ""),
        "content_length": _content_length(response, raw),
        "content_encoding": response.headers.get("content-encoding", ""),
        "content": content,
        "response_uri": str(response.url),
        "server": response.headers.get("server", ""),
        "headers": [
            HttpHeader(name=name, value=value)
            for name, value in response.headers.multi_items()
        ],
    }


def _content_length(response: httpx.Response, raw: bytes) -> int:
    """Content-Length header if valid, otherwise the number of bytes read."""
    header = response.headers.get("content-length")
    if header is not None:
        try:
            return int(header)
        except ValueError:
            pass
    return len(raw)
