"""
=============================================================================
HTTP RESPONSE BUILDER
=============================================================================

Builds HTTP/1.1 responses and serializes them to bytes.

=============================================================================
HTTP RESPONSE ANATOMY
=============================================================================

    ┌─────────────────────────────────────────────────────────────────────┐
    │                                                                      │
    │  ┌─ STATUS LINE ──────────────────────────────────────────────────┐ │
    │  │    HTTP/1.1 200 OK\r\n                                          │ │
    │  └─────────────────────────────────────────────────────────────────┘ │
    │                                                                      │
    │  ┌─ HEADERS ──────────────────────────────────────────────────────┐ │
    │  │    Content-Type: application/json; charset=UTF-8\r\n            │ │
    │  │    Access-Control-Allow-Origin: *\r\n                           │ │
    │  │    Content-Length: 11\r\n              ← always explicit        │ │
    │  │    Date: Sun, 18 Oct 2026 12:00:00 GMT\r\n                      │ │
    │  │    Server: CounterServer/1.0\r\n                                │ │
    │  └─────────────────────────────────────────────────────────────────┘ │
    │                                                                      │
    │  ┌─ EMPTY LINE ───────────────────────────────────────────────────┐ │
    │  │    \r\n                                                         │ │
    │  └─────────────────────────────────────────────────────────────────┘ │
    │                                                                      │
    │  ┌─ BODY ─────────────────────────────────────────────────────────┐ │
    │  │    {"count":3}                                                  │ │
    │  └─────────────────────────────────────────────────────────────────┘ │
    │                                                                      │
    └─────────────────────────────────────────────────────────────────────┘

The whole response is serialized in memory before it is written, so
the body is never chunked and Content-Length is always known.

=============================================================================
BUILDER PATTERN
=============================================================================

    response = (ResponseBuilder()
        .status(HTTPStatus.OK)
        .json({"count": 3})
        .build())

Each method returns `self` except build().

=============================================================================
"""

from dataclasses import dataclass, field
from datetime import datetime, timezone
from pathlib import Path
from typing import Optional, Dict, Any, Union
import json

from .status_codes import HTTPStatus
from .mime_types import Probe, guess_content_type, platform_probe


DEFAULT_SERVER_NAME = "CounterServer/1.0"

JSON_CONTENT_TYPE = "application/json; charset=UTF-8"
HTML_CONTENT_TYPE = "text/html; charset=UTF-8"


@dataclass
class HTTPResponse:
    """
    An HTTP response to be sent to the client.

    Use ResponseBuilder for a more convenient way to construct responses.

        Handler returns          to_bytes()              Socket sends
        HTTPResponse    ─────►   serializes    ─────►    raw bytes
    """

    status: HTTPStatus = HTTPStatus.OK
    headers: Dict[str, str] = field(default_factory=dict)
    body: bytes = b""
    version: str = "HTTP/1.1"

    @property
    def status_line(self) -> str:
        """Example: "HTTP/1.1 200 OK"."""
        return f"{self.version} {int(self.status)} {self.status.phrase}"

    def set_header(self, name: str, value: str) -> "HTTPResponse":
        self.headers[name] = value
        return self

    def get_header(self, name: str, default: Optional[str] = None) -> Optional[str]:
        """Case-insensitive header lookup."""
        lowered = name.lower()
        for key, value in self.headers.items():
            if key.lower() == lowered:
                return value
        return default

    def to_bytes(self, server_name: str = DEFAULT_SERVER_NAME) -> bytes:
        """
        Serialize the response to bytes for sending over socket.

            HTTP/1.1 200 OK\\r\\n          ← Status line
            Content-Type: ...\\r\\n
            Content-Length: 11\\r\\n       ← Auto-calculated
            Date: ...\\r\\n                ← Auto-added
            Server: CounterServer/1.0\\r\\n ← Auto-added
            \\r\\n                         ← Empty line (separator)
            {"count":3}                  ← Body bytes

        Returns:
            Complete HTTP response as bytes ready for socket.sendall()
        """
        response_headers = dict(self.headers)

        # Content-Length is always recomputed from the real body
        response_headers["Content-Length"] = str(len(self.body))

        if "Date" not in response_headers:
            response_headers["Date"] = format_http_date(datetime.now(timezone.utc))

        if "Server" not in response_headers:
            response_headers["Server"] = server_name

        lines = [self.status_line]
        for name, value in response_headers.items():
            lines.append(f"{name}: {value}")
        lines.append("")

        header_bytes = "\r\n".join(lines).encode("latin-1") + b"\r\n"
        return header_bytes + self.body


class ResponseBuilder:
    """
    Fluent builder for constructing HTTP responses.

    USAGE EXAMPLES

        # Counter value
        ResponseBuilder().json({"count": 1}).build()

        # Static file with inferred type
        ResponseBuilder().file(data, Path("static/app.js")).build()

        # Error page
        (ResponseBuilder()
            .status(HTTPStatus.INTERNAL_SERVER_ERROR)
            .html("<h1>oops</h1>")
            .build())
    """

    def __init__(self, server_name: str = DEFAULT_SERVER_NAME):
        self._status = HTTPStatus.OK
        self._headers: Dict[str, str] = {}
        self._body: bytes = b""
        self._server_name = server_name

    # =========================================================================
    # STATUS / HEADERS
    # =========================================================================

    def status(self, status: HTTPStatus) -> "ResponseBuilder":
        self._status = status
        return self

    def header(self, name: str, value: str) -> "ResponseBuilder":
        self._headers[name] = value
        return self

    def content_type(self, content_type: str) -> "ResponseBuilder":
        return self.header("Content-Type", content_type)

    # =========================================================================
    # BODY METHODS
    # =========================================================================

    def body(self, body: Union[str, bytes]) -> "ResponseBuilder":
        """
        Set the response body (raw bytes or string).

        For structured data, prefer json() or html().
        """
        if isinstance(body, str):
            self._body = body.encode("utf-8")
        else:
            self._body = body
        return self

    def html(self, html: str) -> "ResponseBuilder":
        self._body = html.encode("utf-8")
        self._headers["Content-Type"] = HTML_CONTENT_TYPE
        return self

    def json(self, data: Any) -> "ResponseBuilder":
        """
        Set a compact JSON response body.

        Serialized without whitespace, so {"count": 3} goes out as
        {"count":3}.
        """
        self._body = json.dumps(
            data, separators=(",", ":"), ensure_ascii=False
        ).encode("utf-8")
        self._headers["Content-Type"] = JSON_CONTENT_TYPE
        return self

    def file(
        self,
        content: bytes,
        path: Union[str, Path],
        probe: Probe = platform_probe,
    ) -> "ResponseBuilder":
        """
        Set a file response body.

        Content-Type is inferred from the file name, asking the platform
        probe first and the fallback table second.
        """
        self._body = content
        self._headers["Content-Type"] = guess_content_type(path, probe)
        return self

    # =========================================================================
    # CORS / CONNECTION
    # =========================================================================

    def cors(
        self,
        origin: str = "*",
        methods: Optional[list[str]] = None,
        headers: Optional[list[str]] = None,
        max_age: Optional[int] = None,
    ) -> "ResponseBuilder":
        """
        Add CORS (Cross-Origin Resource Sharing) headers.

        Args:
            origin: Allowed origin ("*" for any)
            methods: Allowed HTTP methods
            headers: Allowed request headers
            max_age: Preflight cache lifetime, omitted when None
        """
        self._headers["Access-Control-Allow-Origin"] = origin

        if methods:
            self._headers["Access-Control-Allow-Methods"] = ", ".join(methods)

        if headers:
            self._headers["Access-Control-Allow-Headers"] = ", ".join(headers)

        if max_age is not None:
            self._headers["Access-Control-Max-Age"] = str(max_age)
        return self

    # =========================================================================
    # BUILD
    # =========================================================================

    def build(self) -> HTTPResponse:
        return HTTPResponse(
            status=self._status,
            headers=dict(self._headers),
            body=self._body,
        )

    def to_bytes(self) -> bytes:
        """Build and serialize the response to bytes in one step."""
        return self.build().to_bytes(self._server_name)


# =============================================================================
# UTILITY FUNCTIONS
# =============================================================================

def format_http_date(dt: datetime) -> str:
    """
    Format a datetime as an HTTP-date (RFC 7231).

    Format: Day, DD Mon YYYY HH:MM:SS GMT
    Example: Sun, 18 Oct 2026 12:00:00 GMT

    HTTP dates are ALWAYS in GMT (UTC), never local time.
    """
    days = ["Mon", "Tue", "Wed", "Thu", "Fri", "Sat", "Sun"]
    months = ["Jan", "Feb", "Mar", "Apr", "May", "Jun",
              "Jul", "Aug", "Sep", "Oct", "Nov", "Dec"]

    return (
        f"{days[dt.weekday()]}, "
        f"{dt.day:02d} {months[dt.month - 1]} {dt.year} "
        f"{dt.hour:02d}:{dt.minute:02d}:{dt.second:02d} GMT"
    )


# =============================================================================
# CONVENIENCE FUNCTIONS
# =============================================================================
#
# Error responses from the router and the static handler carry no body:
# clients of the counter API only look at the status code.
#
# =============================================================================

def empty(status: HTTPStatus) -> HTTPResponse:
    """A response with the given status and an empty body."""
    return ResponseBuilder().status(status).build()


def not_found() -> HTTPResponse:
    return empty(HTTPStatus.NOT_FOUND)


def method_not_allowed(allowed_methods: list[str]) -> HTTPResponse:
    """
    Create a 405 Method Not Allowed response.

    Includes the Allow header listing valid methods (RFC 7231), but no
    body.
    """
    return (ResponseBuilder()
        .status(HTTPStatus.METHOD_NOT_ALLOWED)
        .header("Allow", ", ".join(allowed_methods))
        .build())


def internal_error() -> HTTPResponse:
    return empty(HTTPStatus.INTERNAL_SERVER_ERROR)


def error_json(status: HTTPStatus, message: str) -> HTTPResponse:
    """
    A JSON error body, used for requests that could not be parsed.

        {"error":"Invalid request line: ..."}
    """
    return ResponseBuilder().status(status).json({"error": message}).build()
