"""Transport Invoker - Issues requests over httpx and classifies the result.

Usage:
    with Http() as http:
        response = http.get(HttpRequest(url="http://example.com/api"))

GET, HEAD, OPTIONS and DELETE send parameters in the query string and never
write a body. POST and PUT encode a body (multipart, form or raw). Every call
returns a RestResponse; only header errors (e.g., Range) are raised, and
they are raised before anything is sent.
"""

from __future__ import annotations

import logging
from typing import Any

import httpx

from restwire.classifier import (
    TRANSPORT_ERRORS,
    ErrorResponseReceived,
    ResponseReceived,
    TransportFailed,
    TransportOutcome,
    classify,
)
from restwire.encoder import append_query, encode_body, random_boundary
from restwire.headers import OutgoingRequest, apply_headers
from restwire.models import HttpConfig, HttpRequest, RestResponse

logger = logging.getLogger(__name__)


class Http:
    """Synchronous HTTP caller producing classified RestResponse records.

    Args:
        config: Transport settings. Defaults to HttpConfig().
        transport: Optional httpx transport, e.g. httpx.MockTransport in tests.
    """

    def __init__(
        self,
        config: HttpConfig | None = None,
        transport: httpx.BaseTransport | None = None,
    ) -> None:
        self._config = config or HttpConfig()
        self._transport = transport
        self._client = httpx.Client(**self._build_client_kwargs())

    def __enter__(self) -> "Http":
        return self

    def __exit__(
        self,
        exc_type: type[BaseException] | None,
        exc_val: BaseException | None,
        exc_tb: Any,
    ) -> None:
        self.close()

    def close(self) -> None:
        """Close the underlying HTTP client."""
        self._client.close()

    def _build_client_kwargs(self, proxy: str | None = None) -> dict[str, Any]:
        """Build kwargs for httpx.Client from the config.

        The timeout is passed through only when configured, leaving the httpx
        default in place otherwise.
        """
        kwargs: dict[str, Any] = {
            "follow_redirects": self._config.follow_redirects,
            "verify": self._config.verify_ssl,
        }
        if self._config.timeout is not None:
            kwargs["timeout"] = self._config.timeout
        if proxy is not None:
            kwargs["proxy"] = proxy
        elif self._transport is not None:
            kwargs["transport"] = self._transport
        return kwargs

    # -------------------------------------------------------------------------
    # Verb entry points
    # -------------------------------------------------------------------------

    def get(self, request: HttpRequest) -> RestResponse:
        return self._get_style_verb("GET", request)

    def head(self, request: HttpRequest) -> RestResponse:
        return self._get_style_verb("HEAD", request)

    def options(self, request: HttpRequest) -> RestResponse:
        return self._get_style_verb("OPTIONS", request)

    def delete(self, request: HttpRequest) -> RestResponse:
        return self._get_style_verb("DELETE", request)

    def post(self, request: HttpRequest) -> RestResponse:
        return self._body_style_verb("POST", request)

    def put(self, request: HttpRequest) -> RestResponse:
        return self._body_style_verb("PUT", request)

    def execute(self, request: HttpRequest) -> RestResponse:
        """Dispatch to the verb named by request.method."""
        if request.method in ("POST", "PUT"):
            return self._body_style_verb(request.method, request)
        return self._get_style_verb(request.method, request)

    # -------------------------------------------------------------------------
    # Request assembly
    # -------------------------------------------------------------------------

    def _get_style_verb(self, method: str, request: HttpRequest) -> RestResponse:
        url = request.url
        if request.has_parameters:
            url = append_query(url, request.parameters)

        # GET-style verbs never carry a body, even when request.body is set
        outgoing = OutgoingRequest(method=method, url=url)
        apply_headers(request.headers, outgoing)
        return self._invoke(outgoing, request)

    def _body_style_verb(self, method: str, request: HttpRequest) -> RestResponse:
        outgoing = OutgoingRequest(method=method, url=request.url)

        encoded = encode_body(request, self._boundary())
        if encoded is not None:
            outgoing.content = encoded.content
            outgoing.content_type = encoded.content_type

        # Applied after encoding so a caller Content-Type header wins
        apply_headers(request.headers, outgoing)
        return self._invoke(outgoing, request)

    def _boundary(self) -> str:
        if self._config.randomize_boundary:
            return random_boundary()
        return self._config.multipart_boundary

    # -------------------------------------------------------------------------
    # Transport call
    # -------------------------------------------------------------------------

    def _proxied_client(self, proxy: str) -> httpx.Client | TransportFailed:
        """Build a client scoped to one proxied call.

        A malformed or unsupported proxy URL is reported as a transport
        failure, since httpx rejects it while constructing the client.
        """
        try:
            return httpx.Client(**self._build_client_kwargs(proxy=proxy))
        except (*TRANSPORT_ERRORS, ValueError) as e:
            logger.debug("Invalid proxy %r: %s", proxy, e)
            return TransportFailed(error=e)

    def _invoke(self, outgoing: OutgoingRequest, request: HttpRequest) -> RestResponse:
        auth = None
        if request.credentials is not None:
            auth = httpx.BasicAuth(request.credentials.username, request.credentials.password)

        logger.debug("%s %s", outgoing.method, outgoing.url)

        if request.proxy is None:
            return classify(self._get_raw_response(self._client, outgoing, auth))

        client = self._proxied_client(request.proxy)
        if isinstance(client, TransportFailed):
            return classify(client)
        with client as proxied:
            return classify(self._get_raw_response(proxied, outgoing, auth))

    def _get_raw_response(
        self,
        client: httpx.Client,
        outgoing: OutgoingRequest,
        auth: httpx.Auth | None,
    ) -> TransportOutcome:
        """Send the request and capture the outcome without reading the body.

        Returns:
            ResponseReceived for 2xx, ErrorResponseReceived when httpx flags
            the status code, TransportFailed when no response was obtained.
        """
        content: Any = outgoing.content
        if outgoing.send_chunked and content is not None:
            # An iterator makes httpx frame the body with chunked encoding
            content = iter((content,))

        try:
            http_request = client.build_request(
                method=outgoing.method,
                url=outgoing.url,
                headers=outgoing.header_items(),
                content=content,
            )
            response = client.send(http_request, auth=auth, stream=True)
        except TRANSPORT_ERRORS as e:
            return TransportFailed(error=e)

        try:
            response.raise_for_status()
        except httpx.HTTPStatusError as e:
            return ErrorResponseReceived(response=e.response, error=e)

        return ResponseReceived(response=response)
