"""
Unit tests for Content-Type inference.
"""

from pathlib import Path

import pytest

from counterserver.http.mime_types import (
    DEFAULT_MIME_TYPE,
    FALLBACK_TYPES,
    get_fallback_type,
    guess_content_type,
    no_probe,
    platform_probe,
)


class TestFallbackTable:

    @pytest.mark.parametrize("name, expected", [
        ("index.html", "text/html;charset=UTF-8"),
        ("page.htm", "text/html;charset=UTF-8"),
        ("style.css", "text/css;charset=UTF-8"),
        ("app.js", "application/javascript;charset=UTF-8"),
        ("data.json", "application/json;charset=UTF-8"),
        ("logo.png", "image/png"),
        ("photo.jpg", "image/jpeg"),
        ("photo.jpeg", "image/jpeg"),
        ("icon.svg", "image/svg+xml"),
    ])
    def test_known_extensions(self, name: str, expected: str):
        assert get_fallback_type(name) == expected

    def test_case_insensitive(self):
        assert get_fallback_type("LOGO.PNG") == "image/png"
        assert get_fallback_type("STYLE.CSS") == "text/css;charset=UTF-8"

    def test_unknown_extension(self):
        assert get_fallback_type("archive.xyz123") == DEFAULT_MIME_TYPE

    def test_no_extension(self):
        assert get_fallback_type("README") == DEFAULT_MIME_TYPE

    def test_table_values_have_no_space_before_charset(self):
        for value in FALLBACK_TYPES.values():
            if "charset" in value:
                assert ";charset=UTF-8" in value and "; " not in value


class TestGuessContentType:

    def test_probe_answer_wins(self):
        assert guess_content_type("a.css", lambda path: "text/x-custom") == "text/x-custom"

    def test_probe_receives_path(self):
        seen = []
        guess_content_type("dir/a.css", lambda path: seen.append(path))
        assert seen == [Path("dir/a.css")]

    def test_empty_probe_answer_uses_fallback(self):
        assert guess_content_type("a.css", lambda path: "") == "text/css;charset=UTF-8"

    def test_no_probe_uses_fallback(self):
        assert guess_content_type("a.js", no_probe) == "application/javascript;charset=UTF-8"

    def test_no_probe_unknown_is_octet_stream(self):
        assert guess_content_type("blob.xyz123", no_probe) == "application/octet-stream"

    def test_platform_probe_knows_png(self):
        assert platform_probe(Path("logo.png")) == "image/png"

    def test_platform_probe_unknown(self):
        assert platform_probe(Path("blob.xyz123")) is None
