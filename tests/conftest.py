"""
pytest configuration and fixtures.
"""

import http.client
import threading
from pathlib import Path
from typing import Generator

import pytest

# Add src to path for imports
import sys
sys.path.insert(0, str(Path(__file__).parent.parent / "src"))

from counterserver import HTTPServer, ServerConfig, CounterStore, create_app


INDEX_HTML = b"<!DOCTYPE html><html><body><h1>Counter</h1></body></html>\n"
APP_JS = b"console.log('counter');\n"


@pytest.fixture
def sample_get_request() -> bytes:
    """Sample HTTP GET request."""
    return (
        b"GET /api/count?verbose=1 HTTP/1.1\r\n"
        b"Host: localhost:8080\r\n"
        b"User-Agent: pytest\r\n"
        b"Accept: application/json\r\n"
        b"Connection: keep-alive\r\n"
        b"\r\n"
    )


@pytest.fixture
def sample_post_request() -> bytes:
    """Sample HTTP POST request with a (ignored) body."""
    body = b'{"by": 1}'
    return (
        b"POST /api/inc HTTP/1.1\r\n"
        b"Host: localhost:8080\r\n"
        b"Content-Type: application/json\r\n"
        + f"Content-Length: {len(body)}\r\n".encode()
        + b"Connection: close\r\n"
        b"\r\n"
    ) + body


@pytest.fixture
def static_root(tmp_path: Path) -> Path:
    """A static directory with index.html, app.js and a subdirectory."""
    root = tmp_path / "static"
    root.mkdir()
    (root / "index.html").write_bytes(INDEX_HTML)
    (root / "app.js").write_bytes(APP_JS)
    (root / "css").mkdir()
    (root / "css" / "site.css").write_text("body { color: red; }\n")
    return root


@pytest.fixture
def store() -> CounterStore:
    return CounterStore()


@pytest.fixture
def config(static_root: Path) -> ServerConfig:
    """Test server configuration on an ephemeral port."""
    return ServerConfig(
        host="127.0.0.1",
        port=0,  # Let OS pick a free port
        static_dir=str(static_root),
        timeout=5.0,
        keep_alive_timeout=1.0,
        log_level="WARNING",
    )


class LiveServer:
    """Runs an HTTPServer in a background thread."""

    def __init__(self, server: HTTPServer):
        self.server = server
        self._thread: threading.Thread = None

    @property
    def port(self) -> int:
        return self.server.port

    def start(self):
        self._thread = threading.Thread(target=self.server.serve, daemon=True)
        self._thread.start()
        if not self.server.wait_until_ready(5.0):
            raise RuntimeError("Server failed to start")

    def stop(self):
        self.server.shutdown()
        if self._thread and self._thread.is_alive():
            self._thread.join(timeout=10.0)

    def connection(self) -> http.client.HTTPConnection:
        return http.client.HTTPConnection("127.0.0.1", self.port, timeout=5.0)

    def request(self, method: str, path: str, body=None, headers=None):
        """
        Send one request on a fresh connection.

        Returns:
            (status, headers dict, body bytes)
        """
        conn = self.connection()
        try:
            conn.request(method, path, body=body, headers=headers or {})
            response = conn.getresponse()
            return response.status, dict(response.getheaders()), response.read()
        finally:
            conn.close()


def start_live_server(config: ServerConfig, store: CounterStore) -> LiveServer:
    live = LiveServer(create_app(config, store))
    live.start()
    return live


@pytest.fixture
def live_server(config: ServerConfig, store: CounterStore) -> Generator[LiveServer, None, None]:
    """A running counter server backed by the `store` fixture."""
    live = start_live_server(config, store)
    yield live
    live.stop()
