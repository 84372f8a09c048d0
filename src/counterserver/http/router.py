"""
=============================================================================
URL ROUTER
=============================================================================

Maps method + path to a handler. Supports:
- Static paths: /api/count, /
- Dynamic parameters: /things/:id
- Wildcard paths: /static/*path
- Method filters: a route registered for GET answers 405 to POST

=============================================================================
ROUTING FLOW
=============================================================================

    ┌─────────────────────────────────────────────────────────────────────┐
    │                                                                      │
    │   POST /api/inc                                                      │
    │        │                                                             │
    │        ▼                                                             │
    │   ┌─────────────────────────────────────────────────────────────┐   │
    │   │  ROUTER                                                      │   │
    │   │  ┌────────────────────────────────────────────────────────┐ │   │
    │   │  │ GET  /             → index                             │ │   │
    │   │  │ ANY  /static/*path → static files                      │ │   │
    │   │  │ GET  /api/count    → read                              │ │   │
    │   │  │ POST /api/inc      → increment     ← MATCH!            │ │   │
    │   │  │ POST /api/dec      → decrement                         │ │   │
    │   │  │ POST /api/reset    → reset                             │ │   │
    │   │  └────────────────────────────────────────────────────────┘ │   │
    │   └─────────────────────────────────────────────────────────────┘   │
    │        │                                                             │
    │        ▼                                                             │
    │   increment(request)                                                 │
    │                                                                      │
    └─────────────────────────────────────────────────────────────────────┘

    No route for the path at all          → 404, empty body
    Path known, method not registered     → 405, Allow header, empty body

The method check happens here, before any handler runs, so a handler
with side effects is never entered on the wrong method.

=============================================================================
PATTERN COMPILATION
=============================================================================

    Pattern:  /things/:id          Regex:  ^/things/(?P<id>[^/]+)$
    Pattern:  /static/*path        Regex:  ^/static(?:/(?P<path>.*))?$
    Pattern:  /                    Regex:  ^/$

Incoming paths are normalized before matching: one leading slash, no
trailing slash. "/api/count/" therefore routes like "/api/count".

=============================================================================
"""

from dataclasses import dataclass, field
from typing import Callable, Optional, Dict, List
import logging
import re

from .request import HTTPRequest
from .response import HTTPResponse, not_found, method_not_allowed


logger = logging.getLogger(__name__)


# Handler: A function that takes a request and returns a response
Handler = Callable[[HTTPRequest], HTTPResponse]

# Reported in the Allow header for routes registered without a method
ANY_METHOD = ["GET", "POST", "PUT", "DELETE", "PATCH", "HEAD", "OPTIONS"]


@dataclass
class Route:
    """
    A URL pattern bound to a handler.

        Route(
            path="/api/inc",        # URL pattern
            method="POST",          # HTTP method filter (None = any)
            handler=increment,      # Handler function
            name="increment",       # Optional name, shown in route listings
        )
    """

    path: str
    method: Optional[str]
    handler: Handler
    name: Optional[str] = None

    _pattern: Optional[re.Pattern] = field(default=None, repr=False)
    _param_names: List[str] = field(default_factory=list, repr=False)


@dataclass
class RouteMatch:
    """
    Result of a successful route match.

    Example:
        Pattern: /static/*path
        Path:    /static/css/site.css
        Result:  RouteMatch(route=<Route>, params={"path": "css/site.css"})
    """
    route: Route
    params: Dict[str, str]


def normalize_path(path: str) -> str:
    """"/api/count/" → "/api/count", "" → "/"."""
    return "/" + path.strip("/") if path.strip("/") else "/"


class Router:
    """
    HTTP request router with dynamic path parameters.

    DECORATOR-BASED API

        router = Router()

        @router.get("/api/count")
        def read(request):
            return ...

    ROUTE GROUPS

        api = router.group("/api")

        @api.post("/inc")       # Matches /api/inc
        def increment(request):
            ...
    """

    def __init__(self, prefix: str = ""):
        """
        Args:
            prefix: URL prefix for all routes in this router.
                   Used for route groups: Router(prefix="/api")
        """
        self.prefix = prefix.rstrip("/")
        self._routes: List[Route] = []
        self._sub_routers: List[tuple[str, "Router"]] = []

    # =========================================================================
    # ROUTE REGISTRATION
    # =========================================================================

    def add_route(
        self,
        path: str,
        handler: Handler,
        method: Optional[str] = None,
        name: Optional[str] = None,
    ) -> Route:
        """
        Register a route.

        The decorator methods (get, post, route) are convenience wrappers
        around this.

        Args:
            path: URL pattern (e.g., /static/*path)
            handler: Handler function that takes request, returns response
            method: HTTP method (None for any method)
            name: Optional route name

        Returns:
            The registered Route object
        """
        full_path = (self.prefix + path).rstrip("/") or "/"
        pattern, param_names = self._compile_pattern(full_path)

        route = Route(
            path=full_path,
            method=method.upper() if method else None,
            handler=handler,
            name=name,
            _pattern=pattern,
            _param_names=param_names,
        )
        self._routes.append(route)
        logger.debug(f"Route registered: {route.method or 'ANY'} {route.path}")
        return route

    def _compile_pattern(self, path: str) -> tuple[re.Pattern, List[str]]:
        """
        Compile a path pattern into a regex.

        Patterns:
            :param - Match a single path segment (no slashes)
            *param - Match the rest of the path; the slash before it is
                     optional so "/static" alone still matches with an
                     empty parameter

        Returns:
            Tuple of (compiled regex, list of parameter names)
        """
        param_names: List[str] = []
        regex_parts = ["^"]

        for segment in path.split("/"):
            if not segment:
                continue

            if segment.startswith(":"):
                param_name = segment[1:]
                param_names.append(param_name)
                regex_parts.append(f"/(?P<{param_name}>[^/]+)")

            elif segment.startswith("*"):
                param_name = segment[1:] or "wildcard"
                param_names.append(param_name)
                regex_parts.append(f"(?:/(?P<{param_name}>.*))?")
                break  # Wildcard consumes everything

            else:
                regex_parts.append("/" + re.escape(segment))

        if len(regex_parts) == 1:
            # Root pattern "/"
            regex_parts.append("/")

        regex_parts.append("$")
        return re.compile("".join(regex_parts)), param_names

    # =========================================================================
    # ROUTE MATCHING
    # =========================================================================

    def match(self, method: str, path: str) -> Optional[RouteMatch]:
        """
        Find the first route matching method and path.

        Order matters: first-registered, first-matched. Sub-routers are
        consulted after this router's own routes.
        """
        path = normalize_path(path)

        for route in self._routes:
            if route.method and route.method != method.upper():
                continue

            if route._pattern:
                found = route._pattern.match(path)
                if found:
                    params = {
                        key: value or ""
                        for key, value in found.groupdict().items()
                    }
                    return RouteMatch(route=route, params=params)

        for _, sub_router in self._sub_routers:
            result = sub_router.match(method, path)
            if result:
                return result

        return None

    def get_allowed_methods(self, path: str) -> List[str]:
        """
        Methods registered for a path, across this router and its groups.

        Used to generate the Allow header for 405 responses. An empty
        list means the path is unknown.
        """
        path = normalize_path(path)
        methods = set()

        for route in self._routes:
            if route._pattern and route._pattern.match(path):
                if not route.method:
                    return list(ANY_METHOD)
                methods.add(route.method)

        for _, sub_router in self._sub_routers:
            sub_methods = sub_router.get_allowed_methods(path)
            if sub_methods == ANY_METHOD:
                return list(ANY_METHOD)
            methods.update(sub_methods)

        return sorted(methods)

    def handle(self, request: HTTPRequest) -> HTTPResponse:
        """
        Route a request to the appropriate handler.

        1. Find matching route
        2. Inject path parameters into request.path_params
        3. Call handler
        4. Otherwise 405 (known path) or 404 (unknown path)
        """
        match = self.match(request.method, request.path)

        if match:
            request.path_params = match.params
            return match.route.handler(request)

        allowed = self.get_allowed_methods(request.path)
        if allowed:
            return method_not_allowed(allowed)

        return not_found()

    # =========================================================================
    # DECORATOR-STYLE ROUTE REGISTRATION
    # =========================================================================

    def route(
        self,
        path: str,
        method: Optional[str] = None,
        name: Optional[str] = None,
    ) -> Callable[[Handler], Handler]:
        """
        Decorator for registering routes.

        Usage:
            @router.route("/static/*path")
            def serve(request):
                ...
        """
        def decorator(handler: Handler) -> Handler:
            self.add_route(path, handler, method, name)
            return handler
        return decorator

    def get(self, path: str, name: Optional[str] = None) -> Callable[[Handler], Handler]:
        """Register a GET route."""
        return self.route(path, "GET", name)

    def post(self, path: str, name: Optional[str] = None) -> Callable[[Handler], Handler]:
        """Register a POST route."""
        return self.route(path, "POST", name)

    # =========================================================================
    # ROUTER COMPOSITION
    # =========================================================================

    def group(self, prefix: str) -> "Router":
        """
        Create a route group with a prefix.

            api = router.group("/api")

            @api.get("/count")      # Matches /api/count
            def read(request):
                ...
        """
        sub_router = Router(self.prefix + prefix)
        self._sub_routers.append((prefix, sub_router))
        return sub_router

    def routes(self) -> List[Route]:
        """All registered routes, including those of sub-routers."""
        all_routes = list(self._routes)
        for _, sub_router in self._sub_routers:
            all_routes.extend(sub_router.routes())
        return all_routes
