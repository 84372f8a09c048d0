"""
Unit tests for URL router.
"""

import pytest

from counterserver.http.router import Router, ANY_METHOD, normalize_path
from counterserver.http.request import HTTPRequest
from counterserver.http.response import HTTPResponse, ResponseBuilder, HTTPStatus


def make_request(method: str, path: str) -> HTTPRequest:
    """Helper to create a request for testing."""
    return HTTPRequest(method=method, path=path)


def dummy_handler(request: HTTPRequest) -> HTTPResponse:
    return ResponseBuilder().json({"path": request.path}).build()


class TestRouter:
    """Tests for Router class."""

    def test_add_route(self):
        router = Router()
        router.add_route("/api/count", dummy_handler, method="get")

        assert len(router._routes) == 1
        assert router._routes[0].path == "/api/count"
        assert router._routes[0].method == "GET"

    def test_match_static_path(self):
        router = Router()
        router.add_route("/api/inc", dummy_handler, method="POST")
        router.add_route("/api/dec", dummy_handler, method="POST")

        match = router.match("POST", "/api/inc")
        assert match is not None
        assert match.route.path == "/api/inc"

        match = router.match("POST", "/api/dec")
        assert match is not None
        assert match.route.path == "/api/dec"

    def test_match_root_only(self):
        router = Router()
        router.add_route("/", dummy_handler, method="GET")

        assert router.match("GET", "/") is not None
        assert router.match("GET", "/index.html") is None
        assert router.match("GET", "/anything") is None

    def test_match_trailing_slash(self):
        router = Router()
        router.add_route("/api/count", dummy_handler, method="GET")

        assert router.match("GET", "/api/count/") is not None

    def test_match_dynamic_params(self):
        router = Router()
        router.add_route("/items/:id", dummy_handler, method="GET")

        match = router.match("GET", "/items/123")
        assert match is not None
        assert match.params == {"id": "123"}

    def test_match_wildcard(self):
        router = Router()
        router.add_route("/static/*path", dummy_handler)

        match = router.match("GET", "/static/css/style.css")
        assert match is not None
        assert match.params == {"path": "css/style.css"}

        match = router.match("DELETE", "/static/app.js")
        assert match is not None
        assert match.params["path"] == "app.js"

    @pytest.mark.parametrize("path", ["/static", "/static/"])
    def test_match_wildcard_empty(self, path: str):
        router = Router()
        router.add_route("/static/*path", dummy_handler)

        match = router.match("GET", path)
        assert match is not None
        assert match.params == {"path": ""}

    def test_wildcard_prefix_is_whole_segment(self):
        router = Router()
        router.add_route("/static/*path", dummy_handler)

        assert router.match("GET", "/staticfoo") is None

    def test_no_match(self):
        router = Router()
        router.add_route("/api/count", dummy_handler, method="GET")

        assert router.match("GET", "/api/other") is None
        assert router.match("POST", "/api/count") is None

    def test_get_allowed_methods(self):
        router = Router()
        router.add_route("/api/count", dummy_handler, method="GET")
        router.add_route("/api/count", dummy_handler, method="POST")

        assert router.get_allowed_methods("/api/count") == ["GET", "POST"]
        assert router.get_allowed_methods("/nowhere") == []

    def test_get_allowed_methods_any(self):
        router = Router()
        router.add_route("/static/*path", dummy_handler)

        assert router.get_allowed_methods("/static/a.js") == ANY_METHOD

    def test_handle_success(self):
        router = Router()

        @router.get("/hello")
        def hello(request):
            return ResponseBuilder().body("Hello!").build()

        response = router.handle(make_request("GET", "/hello"))

        assert response.status == HTTPStatus.OK
        assert response.body == b"Hello!"

    def test_handle_not_found(self):
        router = Router()
        router.add_route("/api/count", dummy_handler, method="GET")

        response = router.handle(make_request("GET", "/posts"))

        assert response.status == HTTPStatus.NOT_FOUND
        assert response.body == b""

    def test_handle_method_not_allowed(self):
        router = Router()
        called = []
        router.add_route("/api/inc", lambda request: called.append(1), method="POST")

        response = router.handle(make_request("GET", "/api/inc"))

        assert response.status == HTTPStatus.METHOD_NOT_ALLOWED
        assert response.headers["Allow"] == "POST"
        assert response.body == b""
        assert called == []

    def test_path_params_in_request(self):
        router = Router()
        captured_params = {}

        @router.route("/static/*path")
        def serve(request):
            captured_params.update(request.path_params)
            return ResponseBuilder().build()

        router.handle(make_request("POST", "/static/img/logo.png"))

        assert captured_params == {"path": "img/logo.png"}


class TestRouterDecorators:
    """Tests for decorator-style route registration."""

    def test_get_decorator(self):
        router = Router()

        @router.get("/test")
        def handler(request):
            return ResponseBuilder().build()

        assert len(router._routes) == 1
        assert router._routes[0].method == "GET"
        assert handler is router._routes[0].handler

    def test_post_decorator(self):
        router = Router()

        @router.post("/test", name="test")
        def handler(request):
            return ResponseBuilder().build()

        assert router._routes[0].method == "POST"
        assert router._routes[0].name == "test"

    def test_route_decorator_any_method(self):
        router = Router()

        @router.route("/any")
        def handler(request):
            return ResponseBuilder().build()

        assert router._routes[0].method is None


class TestRouterGroups:
    """Tests for route groups and sub-routers."""

    def test_group_prefix(self):
        router = Router()
        api = router.group("/api")

        @api.get("/count")
        def read(request):
            return ResponseBuilder().json({"count": 0}).build()

        match = router.match("GET", "/api/count")
        assert match is not None
        assert match.route.path == "/api/count"
        assert router.match("GET", "/count") is None

    def test_nested_groups(self):
        router = Router()
        v1 = router.group("/api").group("/v1")
        v1.add_route("/count", dummy_handler, method="GET")

        assert router.match("GET", "/api/v1/count") is not None

    def test_group_method_not_allowed(self):
        router = Router()
        router.group("/api").add_route("/reset", dummy_handler, method="POST")

        response = router.handle(make_request("GET", "/api/reset"))

        assert response.status == HTTPStatus.METHOD_NOT_ALLOWED
        assert response.headers["Allow"] == "POST"

    def test_routes_lists_groups(self):
        router = Router()
        router.add_route("/", dummy_handler, method="GET")
        router.group("/api").add_route("/count", dummy_handler, method="GET")

        assert [route.path for route in router.routes()] == ["/", "/api/count"]


class TestNormalizePath:

    @pytest.mark.parametrize("raw, expected", [
        ("", "/"),
        ("/", "/"),
        ("/api/count/", "/api/count"),
        ("api/count", "/api/count"),
    ])
    def test_normalize(self, raw: str, expected: str):
        assert normalize_path(raw) == expected
