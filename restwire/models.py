"""Internal data models for restwire.

All models use Pydantic v2. Requests are built by the caller and handed to
``restwire.http.Http``; responses are created once per call by the classifier
and are frozen afterwards.
"""

from __future__ import annotations

from enum import Enum

from pydantic import BaseModel, ConfigDict, Field, field_validator

from restwire.encoder import DEFAULT_BOUNDARY

SUPPORTED_METHODS = ("GET", "POST", "PUT", "DELETE", "HEAD", "OPTIONS")


# =============================================================================
# Parameter / Header Models
# =============================================================================


class HttpHeader(BaseModel):
    """A named request or response header."""

    model_config = ConfigDict(extra="forbid")

    name: str = Field(description="Header name, matched case-insensitively")
    value: str = Field(description="Header value")


class HttpParameter(BaseModel):
    """A named query-string or form parameter."""

    model_config = ConfigDict(extra="forbid")

    name: str = Field(description="Parameter name")
    value: str = Field(description="Parameter value")


class HttpFile(BaseModel):
    """A file attachment sent as one multipart/form-data part.

    The encoder uses ``filename`` both as the form field name and as the
    filename of the part; ``name`` is kept for callers that track it.
    """

    model_config = ConfigDict(extra="forbid")

    name: str = Field(description="Form field name as supplied by the caller")
    filename: str = Field(description="Filename written into Content-Disposition")
    content_type: str | None = Field(
        default=None, description="Part Content-Type (application/octet-stream if unset)"
    )
    data: bytes = Field(description="Raw file bytes, never mutated")


class Credentials(BaseModel):
    """Username/password pair sent as HTTP basic auth."""

    model_config = ConfigDict(extra="forbid")

    username: str
    password: str


# =============================================================================
# Request Aggregate
# =============================================================================


class HttpRequest(BaseModel):
    """Everything needed to issue one HTTP call.

    Header, parameter and file sequences keep insertion order. When any file
    is present the body is multipart/form-data and ``body`` is ignored.
    """

    model_config = ConfigDict(extra="forbid")

    url: str = Field(description="Absolute target URL")
    method: str = Field(default="GET", description="One of GET, POST, PUT, DELETE, HEAD, OPTIONS")
    credentials: Credentials | None = Field(default=None, description="Basic auth credentials")
    proxy: str | None = Field(default=None, description="Proxy URL for this request")
    headers: list[HttpHeader] = Field(default_factory=list, description="Request headers")
    parameters: list[HttpParameter] = Field(
        default_factory=list, description="Query or form parameters"
    )
    files: list[HttpFile] = Field(default_factory=list, description="File attachments")
    body: str | None = Field(default=None, description="Raw request body")

    @field_validator("method")
    @classmethod
    def validate_method(cls, v: str) -> str:
        method = v.upper()
        if method not in SUPPORTED_METHODS:
            raise ValueError(
                f"method must be one of {', '.join(SUPPORTED_METHODS)}, got {v!r}"
            )
        return method

    @property
    def has_files(self) -> bool:
        return bool(self.files)

    @property
    def has_parameters(self) -> bool:
        return bool(self.parameters)

    @property
    def has_body(self) -> bool:
        return bool(self.body)


# =============================================================================
# Response Record
# =============================================================================


class ResponseStatus(str, Enum):
    """Core-level outcome of a call, independent of the HTTP status code."""

    NONE = "none"  # Initial state, never returned to callers
    SUCCESS = "success"  # The transport produced a response (any status code)
    ERROR = "error"  # No usable response: transport or body read failure


class RestResponse(BaseModel):
    """Uniform result of one HTTP call.

    ``response_status`` says whether the transport call worked. The HTTP
    outcome (including 4xx/5xx) is carried by ``status_code``.
    """

    model_config = ConfigDict(extra="forbid", frozen=True)

    response_status: ResponseStatus = Field(default=ResponseStatus.NONE)
    status_code: int = Field(default=0, description="HTTP status code")
    status_description: str = Field(default="", description="HTTP reason phrase")
    content_type: str = Field(default="", description="Response Content-Type")
    content_length: int = Field(default=0, description="Response body length in bytes")
    content_encoding: str = Field(default="", description="Response Content-Encoding")
    content: str = Field(default="", description="Response body decoded as text")
    response_uri: str | None = Field(default=None, description="Final URL after redirects")
    server: str = Field(default="", description="Server header")
    headers: list[HttpHeader] = Field(default_factory=list, description="Response headers")
    error_message: str | None = Field(default=None, description="Failure description (ERROR only)")


# =============================================================================
# Runtime Configuration Models
# =============================================================================


class HttpConfig(BaseModel):
    """Transport settings shared by every call made through one ``Http``."""

    model_config = ConfigDict(extra="forbid")

    timeout: float | None = Field(
        default=None, description="Timeout in seconds; None keeps the httpx default"
    )
    follow_redirects: bool = Field(default=True, description="Follow 3xx redirects")
    verify_ssl: bool = Field(default=True, description="Verify server certificates")
    multipart_boundary: str = Field(
        default=DEFAULT_BOUNDARY, description="Boundary token for multipart bodies"
    )
    randomize_boundary: bool = Field(
        default=False, description="Generate a fresh boundary for every multipart request"
    )

    @field_validator("timeout")
    @classmethod
    def validate_timeout(cls, v: float | None) -> float | None:
        if v is not None and v <= 0:
            raise ValueError("timeout must be positive")
        return v

    @field_validator("multipart_boundary")
    @classmethod
    def validate_boundary(cls, v: str) -> str:
        # RFC 2046: 1-70 characters, no trailing space
        if not 0 < len(v) <= 70 or v.endswith(" "):
            raise ValueError("multipart_boundary must be 1-70 characters without trailing space")
        return v
