"""CLI entry point for restwire.

Issues a single request and prints the classified response:

    restwire get http://localhost:8000/items -p q=widgets
    restwire post http://localhost:8000/upload -f report=./report.csv;type=text/csv
"""

from __future__ import annotations

import argparse
import logging
import sys
from dataclasses import dataclass
from pathlib import Path

import httpx
from pydantic import ValidationError

from restwire.config_loader import ConfigError, load_http_config
from restwire.headers import HeaderError
from restwire.http import Http
from restwire.models import (
    SUPPORTED_METHODS,
    Credentials,
    HttpConfig,
    HttpFile,
    HttpHeader,
    HttpParameter,
    HttpRequest,
    ResponseStatus,
    RestResponse,
)

EXIT_SUCCESS = 0
EXIT_REQUEST_FAILED = 1
EXIT_USAGE_ERROR = 2


def positive_float(value: str) -> float:
    """Parse and validate a positive float value.

    Raises:
        argparse.ArgumentTypeError: If value is not a positive number.
    """
    try:
        result = float(value)
    except ValueError:
        raise argparse.ArgumentTypeError(f"Invalid number '{value}'.")
    if result <= 0:
        raise argparse.ArgumentTypeError(f"Value must be positive, got {result}.")
    return result


def parse_header(value: str) -> HttpHeader:
    """Parse 'Name: Value'."""
    if ":" not in value:
        raise argparse.ArgumentTypeError(
            f"Invalid header '{value}'. Expected 'Name: Value' (e.g., 'Accept: application/json')"
        )
    name, header_value = value.split(":", 1)
    name = name.strip()
    if not name:
        raise argparse.ArgumentTypeError(f"Invalid header '{value}'. Name cannot be empty.")
    return HttpHeader(name=name, value=header_value.strip())


def parse_parameter(value: str) -> HttpParameter:
    """Parse 'name=value'. The value may be empty."""
    if "=" not in value:
        raise argparse.ArgumentTypeError(
            f"Invalid parameter '{value}'. Expected NAME=VALUE (e.g., 'q=widgets')"
        )
    name, param_value = value.split("=", 1)
    if not name:
        raise argparse.ArgumentTypeError(f"Invalid parameter '{value}'. Name cannot be empty.")
    return HttpParameter(name=name, value=param_value)


def parse_file(value: str) -> HttpFile:
    """Parse 'field=path' with an optional ';type=content/type' suffix and read the file."""
    if "=" not in value:
        raise argparse.ArgumentTypeError(
            f"Invalid file '{value}'. Expected FIELD=PATH[;type=CONTENT_TYPE]"
        )
    name, location = value.split("=", 1)
    content_type = None
    if ";type=" in location:
        location, content_type = location.rsplit(";type=", 1)

    path = Path(location)
    try:
        data = path.read_bytes()
    except OSError as e:
        raise argparse.ArgumentTypeError(f"Cannot read file '{location}': {e.strerror}")

    return HttpFile(name=name, filename=path.name, content_type=content_type or None, data=data)


def parse_credentials(value: str) -> Credentials:
    """Parse 'user:password'."""
    if ":" not in value:
        raise argparse.ArgumentTypeError(
            f"Invalid credentials '{value}'. Expected USER:PASSWORD"
        )
    username, password = value.split(":", 1)
    return Credentials(username=username, password=password)


@dataclass
class RequestArgs:
    """Parsed arguments for one request."""

    method: str
    url: str
    headers: list[HttpHeader]
    parameters: list[HttpParameter]
    files: list[HttpFile]
    body: str | None
    credentials: Credentials | None
    proxy: str | None
    config: Path | None
    timeout: float | None
    verbose: bool

    def to_request(self) -> HttpRequest:
        return HttpRequest(
            url=self.url,
            method=self.method,
            credentials=self.credentials,
            proxy=self.proxy,
            headers=self.headers,
            parameters=self.parameters,
            files=self.files,
            body=self.body,
        )


def build_parser() -> argparse.ArgumentParser:
    """Build the argument parser with one subcommand per HTTP verb."""
    parser = argparse.ArgumentParser(
        prog="restwire",
        description="Send an HTTP request and print the classified response.",
    )

    subparsers = parser.add_subparsers(dest="command", required=True, help="HTTP method")

    for method in SUPPORTED_METHODS:
        verb_parser = subparsers.add_parser(method.lower(), help=f"Send a {method} request")
        verb_parser.add_argument("url", help="Target URL")
        verb_parser.add_argument(
            "-H", "--header",
            type=parse_header,
            action="append",
            default=[],
            dest="headers",
            metavar="'NAME: VALUE'",
            help="Request header (can be repeated)",
        )
        verb_parser.add_argument(
            "-p", "--param",
            type=parse_parameter,
            action="append",
            default=[],
            dest="parameters",
            metavar="NAME=VALUE",
            help="Query or form parameter (can be repeated)",
        )
        verb_parser.add_argument(
            "-f", "--file",
            type=parse_file,
            action="append",
            default=[],
            dest="files",
            metavar="FIELD=PATH[;type=CONTENT_TYPE]",
            help="File attachment, sent as multipart/form-data (can be repeated)",
        )
        verb_parser.add_argument(
            "--body",
            default=None,
            help="Raw request body (ignored for GET, HEAD, OPTIONS, DELETE)",
        )
        verb_parser.add_argument(
            "--user",
            type=parse_credentials,
            default=None,
            dest="credentials",
            metavar="USER:PASSWORD",
            help="Basic auth credentials",
        )
        verb_parser.add_argument("--proxy", default=None, help="Proxy URL")
        verb_parser.add_argument(
            "--config",
            type=Path,
            default=None,
            help="Path to YAML transport config",
        )
        verb_parser.add_argument(
            "--timeout",
            type=positive_float,
            default=None,
            help="Request timeout in seconds (overrides config)",
        )
        verb_parser.add_argument(
            "-v", "--verbose",
            action="store_true",
            help="Enable debug logging",
        )

    return parser


def parse_args(args: list[str] | None = None) -> RequestArgs:
    """Parse command-line arguments and return typed args dataclass.

    Raises:
        SystemExit: If arguments are invalid (argparse behavior).
    """
    namespace = build_parser().parse_args(args)
    return RequestArgs(
        method=namespace.command.upper(),
        url=namespace.url,
        headers=namespace.headers,
        parameters=namespace.parameters,
        files=namespace.files,
        body=namespace.body,
        credentials=namespace.credentials,
        proxy=namespace.proxy,
        config=namespace.config,
        timeout=namespace.timeout,
        verbose=namespace.verbose,
    )


def main(argv: list[str] | None = None) -> int:
    """Main entry point."""
    try:
        args = parse_args(argv)
        _configure_logging(args.verbose)
        return run_request(args)
    except KeyboardInterrupt:
        print("\nInterrupted", file=sys.stderr)
        return EXIT_REQUEST_FAILED


def run_request(args: RequestArgs, transport: httpx.BaseTransport | None = None) -> int:
    """Send the request described by args and print the response.

    Returns:
        EXIT_SUCCESS when a response was received (any status code),
        EXIT_REQUEST_FAILED on transport failure, EXIT_USAGE_ERROR on
        configuration or header errors.
    """
    try:
        config = load_http_config(args.config) if args.config else HttpConfig()
        if args.timeout is not None:
            config = config.model_copy(update={"timeout": args.timeout})
    except ConfigError as e:
        print(f"Error loading config: {e}", file=sys.stderr)
        return EXIT_USAGE_ERROR

    try:
        request = args.to_request()
    except ValidationError as e:
        print(f"Invalid request: {e}", file=sys.stderr)
        return EXIT_USAGE_ERROR

    with Http(config, transport=transport) as http:
        try:
            response = http.execute(request)
        except HeaderError as e:
            print(f"Error: {e}", file=sys.stderr)
            return EXIT_USAGE_ERROR

    return _print_response(response)


def _print_response(response: RestResponse) -> int:
    if response.response_status is not ResponseStatus.SUCCESS:
        print(f"Request failed: {response.error_message}", file=sys.stderr)
        return EXIT_REQUEST_FAILED

    print(f"HTTP {response.status_code} {response.status_description}")
    for header in response.headers:
        print(f"{header.name}: {header.value}")
    if response.content:
        print()
        print(response.content)
    return EXIT_SUCCESS


def _configure_logging(verbose: bool) -> None:
    logging.basicConfig(
        level=logging.DEBUG if verbose else logging.WARNING,
        format="%(asctime)s [%(levelname)s] %(name)s: %(message)s",
        datefmt="%Y-%m-%d %H:%M:%S",
        stream=sys.stderr,
    )


if __name__ == "__main__":
    sys.exit(main())
