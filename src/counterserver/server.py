"""
=============================================================================
HTTP SERVER
=============================================================================

Ties the socket server, the cached thread pool, the request parser, the
router and the middleware pipeline together.

=============================================================================
ARCHITECTURE OVERVIEW
=============================================================================

    ┌─────────────────────────────────────────────────────────────────────┐
    │                    HTTP SERVER ARCHITECTURE                         │
    ├─────────────────────────────────────────────────────────────────────┤
    │                                                                      │
    │                        ┌─────────────────┐                          │
    │                        │   HTTPServer    │                          │
    │                        └────────┬────────┘                          │
    │            ┌────────────────────┼────────────────────┐              │
    │            ▼                    ▼                    ▼              │
    │    ┌──────────────┐    ┌──────────────────┐  ┌──────────────┐      │
    │    │SocketServer  │    │ CachedThreadPool │  │    Router    │      │
    │    │ (accept)     │    │ (one worker per  │  │ (dispatch)   │      │
    │    └──────┬───────┘    │  connection)     │  └──────────────┘      │
    │           ▼            └──────────────────┘                        │
    │    ┌──────────────┐                                                 │
    │    │  Connection  │    Middleware: CORS → Router                    │
    │    └──────────────┘                                                 │
    │                                                                      │
    └─────────────────────────────────────────────────────────────────────┘

=============================================================================
REQUEST LIFECYCLE
=============================================================================

    1. SocketServer accepts a TCP connection
    2. The connection is submitted to the thread pool
    3. Worker: read request bytes        (Connection.read_request)
    4. Worker: parse                      (RequestParser)
           malformed → JSON error, Connection: close
    5. Worker: middleware + router        (CORS → Router.handle)
           handler raised → empty 500, Connection: close
    6. Worker: serialize and send
    7. Keep-alive → back to 3, otherwise close

=============================================================================
"""

import logging
from typing import Optional, Callable, Tuple

from .config import ServerConfig
from .core import SocketServer, Connection, CachedThreadPool
from .http import HTTPRequest, RequestParser, HTTPParseError, HTTPResponse, HTTPStatus, Router
from .http.response import error_json, internal_error
from .middleware import MiddlewarePipeline, Middleware


logger = logging.getLogger(__name__)


LOG_FORMAT = "%(asctime)s [%(levelname)s] %(name)s: %(message)s"
LOG_DATE_FORMAT = "%Y-%m-%d %H:%M:%S"


def setup_logging(level: str = "INFO") -> None:
    """Configure the root logger once for the whole process."""
    numeric_level = getattr(logging, level.upper(), logging.INFO)
    logging.basicConfig(
        level=numeric_level,
        format=LOG_FORMAT,
        datefmt=LOG_DATE_FORMAT,
    )
    logging.getLogger("counterserver").setLevel(numeric_level)


class HTTPServer:
    """
    Threaded HTTP/1.1 server.

        router = Router()
        router.get("/hello")(hello)

        server = HTTPServer(config, router)
        server.use(CORSMiddleware())
        server.run()          # blocks until SIGINT/SIGTERM or shutdown()

    Tests run it on a background thread instead:

        server = HTTPServer(ServerConfig(port=0), router)
        threading.Thread(target=server.serve, daemon=True).start()
        server.wait_until_ready(5)
        ...
        server.shutdown()
    """

    def __init__(self, config: Optional[ServerConfig] = None, router: Optional[Router] = None):
        """
        Args:
            config: Server configuration, validated here.
            router: Routes to dispatch to. An empty Router answers 404.

        Raises:
            ValueError: If the configuration is invalid.
        """
        self.config = config or ServerConfig()
        self.config.validate()

        # ─────────────────────────────────────────────────────────────────
        # CORE COMPONENTS
        # ─────────────────────────────────────────────────────────────────

        self._socket_server = SocketServer(self.config)
        self._thread_pool = CachedThreadPool(idle_timeout=self.config.worker_idle_timeout)
        self._parser = RequestParser(max_request_size=self.config.max_request_size)

        # ─────────────────────────────────────────────────────────────────
        # APPLICATION COMPONENTS
        # ─────────────────────────────────────────────────────────────────

        self._router = router or Router()
        self._middleware = MiddlewarePipeline()

        # middleware.wrap(router.handle), built when serving starts
        self._handler: Optional[Callable[[HTTPRequest], HTTPResponse]] = None

        self._running = False

    # =========================================================================
    # CONFIGURATION
    # =========================================================================

    def use(self, middleware: Middleware) -> "HTTPServer":
        """Add middleware. Middleware runs in the order added."""
        self._middleware.add(middleware)
        return self

    @property
    def router(self) -> Router:
        return self._router

    @property
    def thread_pool(self) -> CachedThreadPool:
        return self._thread_pool

    @property
    def address(self) -> Tuple[str, int]:
        return self._socket_server.address

    @property
    def port(self) -> int:
        return self._socket_server.port

    # =========================================================================
    # SERVER LIFECYCLE
    # =========================================================================

    def bind(self) -> Tuple[str, int]:
        """
        Bind the listening socket without serving yet.

        Raises:
            OSError: If the address is unavailable.
        """
        return self._socket_server.bind()

    def run(self):
        """Configure logging and serve until shutdown (blocking)."""
        setup_logging(self.config.log_level)
        self.serve()

    def serve(self):
        """
        Serve until shutdown() is called or a signal arrives (blocking).
        """
        self._running = True
        self._handler = self._middleware.wrap(self._router.handle)
        self._thread_pool.start()

        logger.info(f"Starting {self.config.server_name}, static root {self.config.static_dir!r}")

        try:
            self._socket_server.start(self._handle_connection)
        except KeyboardInterrupt:
            logger.info("Received keyboard interrupt")
        finally:
            self._shutdown()

    def wait_until_ready(self, timeout: Optional[float] = None) -> bool:
        """Block until the server is accepting connections."""
        return self._socket_server.wait_until_ready(timeout)

    def shutdown(self):
        """Stop accepting connections. serve() returns once workers drain."""
        self._socket_server.shutdown()

    def _shutdown(self):
        logger.info("Shutting down server...")
        self._running = False

        # Idle keep-alive connections give up within keep_alive_timeout
        self._thread_pool.shutdown(wait=True, timeout=self.config.keep_alive_timeout + 1.0)

        logger.info("Server stopped")

    # =========================================================================
    # REQUEST HANDLING
    # =========================================================================

    def _handle_connection(self, conn: Connection):
        """Hand an accepted connection to a pool worker."""
        try:
            self._thread_pool.submit(self._process_connection, args=(conn,))
        except RuntimeError:
            logger.warning(f"[{conn.id}] Server shutting down, dropping connection")
            conn.close()

    def _process_connection(self, conn: Connection):
        """
        Keep-alive loop for one connection (runs in a worker thread).

            1. Read request from socket
            2. Parse HTTP request
            3. Process through middleware + router
            4. Send response
            5. If keep-alive: repeat from step 1
        """
        with conn:
            while self._running:
                try:
                    raw_request = conn.read_request()
                except TimeoutError:
                    logger.debug(f"[{conn.id}] No request before timeout, closing")
                    break
                except HTTPParseError as e:
                    self._send_error(conn, e)
                    break

                if raw_request is None:
                    break

                try:
                    request = self._parser.parse(raw_request, conn.address)
                except HTTPParseError as e:
                    self._send_error(conn, e)
                    break

                try:
                    response = self._handler(request)
                except Exception as e:
                    logger.exception(f"[{conn.id}] Handler error on {request.method} {request.path}: {e}")
                    response = internal_error()
                    response.headers["Connection"] = "close"

                keep_alive = (
                    self.config.keep_alive
                    and request.is_keep_alive
                    and response.get_header("Connection", "").lower() != "close"
                )

                if keep_alive:
                    response.headers.setdefault("Connection", "keep-alive")
                    response.headers.setdefault(
                        "Keep-Alive",
                        f"timeout={int(self.config.keep_alive_timeout)}"
                    )
                else:
                    response.headers["Connection"] = "close"

                if not conn.send_response(response.to_bytes(self.config.server_name)):
                    break

                if not keep_alive:
                    break

                conn.set_keep_alive()

    def _send_error(self, conn: Connection, error: HTTPParseError):
        """Answer a request that could not be read or parsed, then close."""
        logger.info(f"[{conn.id}] Rejected request from {conn.client_ip}: {error}")
        response = error_json(HTTPStatus(error.status_code), str(error))
        response.headers["Connection"] = "close"
        conn.send_response(response.to_bytes(self.config.server_name))
