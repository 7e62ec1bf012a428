"""Pytest configuration and fixtures for restwire tests.

This file provides:
- RecordingHandler: httpx.MockTransport handler that records what was sent
- Fixtures: an Http wired to the recording handler
"""

from __future__ import annotations

from typing import Callable, Generator

import httpx
import pytest

from restwire.http import Http
from restwire.models import HttpConfig, HttpFile, HttpHeader, HttpParameter

TEST_BOUNDARY = "test-boundary-0001"


class RecordingHandler:
    """Records each request (body read eagerly) and replies via a responder.

    Usage:
        handler = RecordingHandler(lambda request: httpx.Response(404))
        http = Http(transport=httpx.MockTransport(handler))
        http.get(...)
        assert handler.requests[0].url == ...
    """

    def __init__(
        self,
        responder: Callable[[httpx.Request], httpx.Response] | None = None,
    ) -> None:
        self._responder = responder or (lambda request: httpx.Response(200, text="ok"))
        self.requests: list[httpx.Request] = []
        self.bodies: list[bytes] = []

    def __call__(self, request: httpx.Request) -> httpx.Response:
        self.bodies.append(request.read())
        self.requests.append(request)
        return self._responder(request)

    @property
    def last(self) -> httpx.Request:
        return self.requests[-1]

    @property
    def last_body(self) -> bytes:
        return self.bodies[-1]


def header(name: str, value: str) -> HttpHeader:
    return HttpHeader(name=name, value=value)


def param(name: str, value: str) -> HttpParameter:
    return HttpParameter(name=name, value=value)


def attachment(
    filename: str = "a.txt",
    data: bytes = b"hi",
    content_type: str | None = None,
    name: str = "f",
) -> HttpFile:
    return HttpFile(name=name, filename=filename, content_type=content_type, data=data)


@pytest.fixture
def handler() -> RecordingHandler:
    return RecordingHandler()


@pytest.fixture
def http(handler: RecordingHandler) -> Generator[Http, None, None]:
    """Http with a fixed multipart boundary, sending through the recording handler."""
    config = HttpConfig(multipart_boundary=TEST_BOUNDARY)
    with Http(config, transport=httpx.MockTransport(handler)) as client:
        yield client
