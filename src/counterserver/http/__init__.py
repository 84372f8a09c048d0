"""
HTTP protocol components: request parsing, response building, routing,
status codes and content-type inference.
"""

from .request import HTTPRequest, HTTPParseError, RequestParser
from .response import HTTPResponse, ResponseBuilder
from .router import Router, Route, RouteMatch
from .status_codes import HTTPStatus
from .mime_types import guess_content_type

__all__ = [
    "HTTPRequest",
    "HTTPParseError",
    "RequestParser",
    "HTTPResponse",
    "ResponseBuilder",
    "Router",
    "Route",
    "RouteMatch",
    "HTTPStatus",
    "guess_content_type",
]
