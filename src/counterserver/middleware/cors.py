"""
=============================================================================
CORS (Cross-Origin Resource Sharing) MIDDLEWARE
=============================================================================

Adds the fixed set of CORS headers the counter UI and browser tooling
rely on:

    Access-Control-Allow-Origin: *
    Access-Control-Allow-Methods: GET, POST, OPTIONS
    Access-Control-Allow-Headers: Content-Type

=============================================================================
WHICH RESPONSES GET CORS HEADERS
=============================================================================

    ┌──────────────────────────────────────┬──────────────┐
    │ Response                             │ CORS headers │
    ├──────────────────────────────────────┼──────────────┤
    │ 200 counter value                    │     yes      │
    │ 200 static file / index.html         │     yes      │
    │ 204 preflight (when enabled)         │     yes      │
    │ 404 unknown path / missing file      │     no       │
    │ 405 wrong method                     │     no       │
    │ 500 index.html missing               │     no       │
    └──────────────────────────────────────┴──────────────┘

Only 2xx responses are decorated. Error responses go out bare, which
keeps the missing-index page free of CORS headers.

=============================================================================
PREFLIGHT
=============================================================================

Browsers send OPTIONS before a cross-origin POST with a JSON content
type. With `handle_preflight=False` (the default) OPTIONS falls through
to the router like any other method, and the API routes answer 405.
With `handle_preflight=True` this middleware answers every OPTIONS
request itself with 204 and the CORS headers.

=============================================================================
"""

from typing import Optional, List
from dataclasses import dataclass, field
import logging

from .base import Middleware, NextHandler
from ..http.request import HTTPRequest
from ..http.response import HTTPResponse, ResponseBuilder
from ..http.status_codes import HTTPStatus


logger = logging.getLogger(__name__)


@dataclass
class CORSConfig:
    """
    CORS configuration options.

        CORSConfig()                        # fixed headers, no preflight
        CORSConfig(handle_preflight=True)   # also answer OPTIONS with 204
    """

    # ─────────────────────────────────────────────────────────────────────
    # Value of Access-Control-Allow-Origin
    # ─────────────────────────────────────────────────────────────────────
    allow_origin: str = "*"

    # ─────────────────────────────────────────────────────────────────────
    # Methods and request headers advertised to the browser
    # ─────────────────────────────────────────────────────────────────────
    allow_methods: List[str] = field(
        default_factory=lambda: ["GET", "POST", "OPTIONS"]
    )
    allow_headers: List[str] = field(default_factory=lambda: ["Content-Type"])

    # ─────────────────────────────────────────────────────────────────────
    # Answer OPTIONS here instead of routing it
    # ─────────────────────────────────────────────────────────────────────
    handle_preflight: bool = False

    # ─────────────────────────────────────────────────────────────────────
    # Access-Control-Max-Age on preflight answers; omitted when None
    # ─────────────────────────────────────────────────────────────────────
    max_age: Optional[int] = None

    @property
    def headers(self) -> dict:
        """The CORS headers as a dict, in a stable order."""
        return {
            "Access-Control-Allow-Origin": self.allow_origin,
            "Access-Control-Allow-Methods": ", ".join(self.allow_methods),
            "Access-Control-Allow-Headers": ", ".join(self.allow_headers),
        }


class CORSMiddleware(Middleware):
    """
    CORS middleware.

    1. Optionally intercepts OPTIONS requests (preflight)
    2. Adds CORS headers to successful responses
    """

    def __init__(self, config: Optional[CORSConfig] = None):
        self.config = config or CORSConfig()

    def __call__(self, request: HTTPRequest, next: NextHandler) -> HTTPResponse:
        if self.config.handle_preflight and request.method == "OPTIONS":
            return self._handle_preflight(request)

        response = next(request)

        if HTTPStatus(response.status).is_success:
            self._add_cors_headers(response)

        return response

    def _handle_preflight(self, request: HTTPRequest) -> HTTPResponse:
        """
        Answer a preflight with 204 No Content (empty body, just headers).
        """
        logger.debug(
            f"Preflight for {request.path} "
            f"(method={request.get_header('access-control-request-method') or '-'})"
        )
        return (ResponseBuilder()
            .status(HTTPStatus.NO_CONTENT)
            .cors(
                origin=self.config.allow_origin,
                methods=self.config.allow_methods,
                headers=self.config.allow_headers,
                max_age=self.config.max_age,
            )
            .build())

    def _add_cors_headers(self, response: HTTPResponse) -> None:
        for name, value in self.config.headers.items():
            response.headers[name] = value
