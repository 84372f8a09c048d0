"""
=============================================================================
APPLICATION FACTORY
=============================================================================

Builds the counter server from a config and (optionally) an existing
store:

    Router
    ├── GET  /                 StaticFileHandler.index
    ├── ANY  /static/*path     StaticFileHandler.handle
    └── /api
        ├── GET  /count        CounterHandler.count
        ├── POST /inc          CounterHandler.increment
        ├── POST /dec          CounterHandler.decrement
        └── POST /reset        CounterHandler.reset

    Middleware: CORSMiddleware (headers on every 2xx response)

Any other path is 404.

=============================================================================
"""

from typing import Optional

from .config import ServerConfig
from .handlers import CounterHandler, StaticFileHandler
from .http import Router
from .middleware import CORSConfig, CORSMiddleware
from .server import HTTPServer
from .store import CounterStore


def create_router(config: ServerConfig, store: CounterStore) -> Router:
    """Register the index page, the static files and the counter API."""
    router = Router()

    static = StaticFileHandler(config.static_dir, index_file=config.index_file)
    router.add_route("/", static.index, method="GET", name="index")
    router.add_route("/static/*path", static.handle, name="static")

    CounterHandler(store).register(router.group("/api"))

    return router


def create_app(
    config: Optional[ServerConfig] = None,
    store: Optional[CounterStore] = None,
) -> HTTPServer:
    """
    Create a counter server.

    Args:
        config: Server configuration. Defaults to ServerConfig().
        store: Counter state. A fresh store starting at 0 if omitted;
               pass one in to inspect or share it.

    Returns:
        An HTTPServer ready for run() or serve().

    Example:
        store = CounterStore()
        app = create_app(ServerConfig(port=0), store)
    """
    config = config or ServerConfig()
    store = store if store is not None else CounterStore()

    server = HTTPServer(config, create_router(config, store))
    server.use(CORSMiddleware(CORSConfig(handle_preflight=config.cors_preflight)))
    return server
