"""
Unit tests for the static file handler.
"""

import os
from pathlib import Path

import pytest

from counterserver.handlers.static import StaticFileHandler
from counterserver.http.mime_types import no_probe
from counterserver.http.request import HTTPRequest
from counterserver.http.response import HTML_CONTENT_TYPE
from counterserver.http.status_codes import HTTPStatus



def static_request(relpath: str, method: str = "GET") -> HTTPRequest:
    request = HTTPRequest(method=method, path="/static/" + relpath)
    request.path_params = {"path": relpath}
    return request


class TestIndex:

    def test_serves_index(self, static_root: Path):
        handler = StaticFileHandler(static_root)
        response = handler.index(HTTPRequest(method="GET", path="/"))

        assert response.status == HTTPStatus.OK
        assert response.body == (static_root / "index.html").read_bytes()
        assert response.headers["Content-Type"] == HTML_CONTENT_TYPE

    def test_missing_index_is_500_html(self, tmp_path: Path):
        handler = StaticFileHandler(tmp_path)
        response = handler.index(HTTPRequest(method="GET", path="/"))

        assert response.status == HTTPStatus.INTERNAL_SERVER_ERROR
        assert response.headers["Content-Type"] == HTML_CONTENT_TYPE
        assert b"index.html not found in" in response.body
        assert str(tmp_path).encode() in response.body

    def test_missing_root_does_not_raise(self, tmp_path: Path):
        handler = StaticFileHandler(tmp_path / "nope")
        response = handler.index(HTTPRequest(method="GET", path="/"))
        assert response.status == HTTPStatus.INTERNAL_SERVER_ERROR

    def test_error_page_escapes_root(self, tmp_path: Path):
        root = tmp_path / "<b>"
        root.mkdir()
        response = StaticFileHandler(root).index(HTTPRequest(method="GET", path="/"))
        assert b"<b>" not in response.body
        assert b"&lt;b&gt;" in response.body

    def test_custom_index_file(self, static_root: Path):
        (static_root / "home.html").write_bytes(b"home")
        handler = StaticFileHandler(static_root, index_file="home.html")
        assert handler.index(HTTPRequest(method="GET", path="/")).body == b"home"


class TestStaticFiles:

    def test_serves_file(self, static_root: Path):
        response = StaticFileHandler(static_root).handle(static_request("app.js"))

        assert response.status == HTTPStatus.OK
        assert response.body == (static_root / "app.js").read_bytes()

    def test_serves_nested_file(self, static_root: Path):
        handler = StaticFileHandler(static_root, probe=no_probe)
        response = handler.handle(static_request("css/site.css"))

        assert response.status == HTTPStatus.OK
        assert response.headers["Content-Type"] == "text/css;charset=UTF-8"

    def test_content_type_from_probe(self, static_root: Path):
        handler = StaticFileHandler(static_root, probe=lambda path: "text/x-probe")
        response = handler.handle(static_request("app.js"))
        assert response.headers["Content-Type"] == "text/x-probe"

    def test_unknown_type_is_octet_stream(self, static_root: Path):
        (static_root / "blob.xyz123").write_bytes(b"\x00\x01")
        handler = StaticFileHandler(static_root, probe=no_probe)
        response = handler.handle(static_request("blob.xyz123"))
        assert response.headers["Content-Type"] == "application/octet-stream"

    def test_any_method_serves_file(self, static_root: Path):
        response = StaticFileHandler(static_root).handle(static_request("app.js", "DELETE"))
        assert response.status == HTTPStatus.OK

    @pytest.mark.parametrize("relpath", ["missing.js", "css", "", "css/"])
    def test_missing_or_directory_is_404(self, static_root: Path, relpath: str):
        response = StaticFileHandler(static_root).handle(static_request(relpath))

        assert response.status == HTTPStatus.NOT_FOUND
        assert response.body == b""

    @pytest.mark.parametrize("relpath", ["../secret.txt", "css/../../secret.txt"])
    def test_traversal_is_404(self, static_root: Path, relpath: str):
        (static_root.parent / "secret.txt").write_text("top secret")
        response = StaticFileHandler(static_root).handle(static_request(relpath))

        assert response.status == HTTPStatus.NOT_FOUND
        assert response.body == b""

    @pytest.mark.skipif(not hasattr(os, "symlink"), reason="needs symlinks")
    def test_symlink_out_of_root_is_404(self, static_root: Path):
        secret = static_root.parent / "secret.txt"
        secret.write_text("top secret")
        (static_root / "link.txt").symlink_to(secret)

        response = StaticFileHandler(static_root).handle(static_request("link.txt"))
        assert response.status == HTTPStatus.NOT_FOUND

    def test_resolve_inside_root(self, static_root: Path):
        handler = StaticFileHandler(static_root)
        assert handler.resolve("css/site.css") == (static_root / "css" / "site.css").resolve()
        assert handler.resolve("../x") is None
