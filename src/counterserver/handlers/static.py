"""
=============================================================================
STATIC FILE HANDLER
=============================================================================

Serves the browser UI: index.html at "/" and everything else under
"/static/<relpath>", all from one configured root directory.

=============================================================================
ROUTES
=============================================================================

    ┌─────────────────────────────────────────────────────────────────────┐
    │                                                                      │
    │   GET /                                                             │
    │     <root>/index.html exists  → 200, text/html; charset=UTF-8       │
    │     otherwise                 → 500, small HTML error page          │
    │                                                                      │
    │   ANY /static/<relpath>                                             │
    │     regular file inside root  → 200, inferred Content-Type          │
    │     missing / directory       → 404, empty body                     │
    │     resolves outside root     → 404, empty body (logged)            │
    │                                                                      │
    └─────────────────────────────────────────────────────────────────────┘

The "/static/" route carries no method filter, so POST or DELETE on a
file serves it like GET does.

=============================================================================
SECURITY: PATH TRAVERSAL
=============================================================================

    GET /static/../../../etc/passwd HTTP/1.1

The request parser already rejects ".." segments. This handler checks
again on the filesystem side, which also covers symlinks that point out
of the root:

    full_path = (root_dir / relpath).resolve()
    full_path.relative_to(root_dir)  # Raises if outside root!

=============================================================================
"""

import html
import logging
from pathlib import Path

from ..http.request import HTTPRequest
from ..http.response import (
    HTTPResponse, ResponseBuilder, HTML_CONTENT_TYPE, not_found
)
from ..http.mime_types import Probe, platform_probe
from ..http.status_codes import HTTPStatus


logger = logging.getLogger(__name__)


class StaticFileHandler:
    """
    Handler for the index page and files under the static root.

        static = StaticFileHandler("static")
        router.get("/", static.index)
        router.route("/static/*path")(static.handle)

    A root that does not exist is not an error at construction time: the
    server still starts, "/" answers 500 and "/static/..." answers 404.
    """

    def __init__(
        self,
        root_dir: str | Path,
        index_file: str = "index.html",
        probe: Probe = platform_probe,
    ):
        """
        Args:
            root_dir: Directory to serve files from. All served files
                      MUST resolve inside it.
            index_file: File served at "/".
            probe: Platform Content-Type lookup, tried before the
                   fallback table.
        """
        self.display_root = str(root_dir)
        self.root_dir = Path(root_dir).resolve()
        self.index_file = index_file
        self.probe = probe

        if not self.root_dir.is_dir():
            logger.warning(f"Static root directory does not exist: {self.root_dir}")

    # =========================================================================
    # INDEX PAGE
    # =========================================================================

    def index(self, request: HTTPRequest) -> HTTPResponse:
        """
        Serve the index file with a fixed HTML content type.

        A missing index is a server misconfiguration, so it is reported
        as 500 rather than 404.
        """
        index_path = self.root_dir / self.index_file
        if not index_path.is_file():
            logger.warning(f"Index file missing: {index_path}")
            return self._missing_index()

        content = index_path.read_bytes()
        return (ResponseBuilder()
            .status(HTTPStatus.OK)
            .content_type(HTML_CONTENT_TYPE)
            .body(content)
            .build())

    def _missing_index(self) -> HTTPResponse:
        message = html.escape(f"{self.index_file} not found in {self.display_root}")
        return (ResponseBuilder()
            .status(HTTPStatus.INTERNAL_SERVER_ERROR)
            .html(f"<html><body><h1>{message}</h1></body></html>")
            .build())

    # =========================================================================
    # FILES UNDER /static/
    # =========================================================================

    def handle(self, request: HTTPRequest) -> HTTPResponse:
        """
        Serve a file under the static root.

        Read errors other than the file disappearing (permissions, I/O)
        propagate to the connection worker, which answers 500.
        """
        file_path = request.path_params.get("path", "").lstrip("/")
        if not file_path:
            return not_found()

        full_path = self.resolve(file_path)
        if full_path is None:
            return not_found()

        if not full_path.is_file():
            return not_found()

        try:
            content = full_path.read_bytes()
        except (FileNotFoundError, IsADirectoryError):
            # Removed or replaced between the check and the read
            return not_found()

        return (ResponseBuilder()
            .status(HTTPStatus.OK)
            .file(content, full_path, self.probe)
            .build())

    def resolve(self, file_path: str) -> Path | None:
        """
        Map a relative URL path to a filesystem path inside the root.

        Returns None when the resolved path escapes the root directory.
        """
        # resolve() follows symlinks and normalizes .. components
        full_path = (self.root_dir / file_path).resolve()

        try:
            full_path.relative_to(self.root_dir)
        except ValueError:
            logger.warning(f"Path traversal attempt: {file_path}")
            return None

        return full_path
