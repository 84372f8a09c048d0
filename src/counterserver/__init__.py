"""
=============================================================================
COUNTERSERVER - Minimal HTTP Counter Service
=============================================================================

A single in-memory integer counter behind a small JSON API, plus a static
browser UI, served by an HTTP/1.1 server built on raw sockets.

=============================================================================
PROJECT OVERVIEW
=============================================================================

    ┌─────────────────────────────────────────────────────────────────────┐
    │                      COUNTER SERVER                                 │
    ├─────────────────────────────────────────────────────────────────────┤
    │                                                                      │
    │   GET  /api/count    → {"count":N}                                  │
    │   POST /api/inc      → {"count":N+1}                                │
    │   POST /api/dec      → {"count":N-1}                                │
    │   POST /api/reset    → {"count":0}                                  │
    │   GET  /             → <static>/index.html                          │
    │   ANY  /static/...   → files under <static>                         │
    │                                                                      │
    │   One worker thread per connection (cached, unbounded pool)         │
    │   CORS headers on every successful response                         │
    │                                                                      │
    └─────────────────────────────────────────────────────────────────────┘

=============================================================================
PACKAGE STRUCTURE
=============================================================================

    counterserver/
    ├── __init__.py          # This file - package exports
    ├── __main__.py          # CLI entry point (python -m counterserver)
    ├── app.py               # create_app(): routes + middleware
    ├── server.py            # HTTPServer: accept → pool → parse → dispatch
    ├── config.py            # ServerConfig dataclass
    ├── store.py             # CounterStore: the shared counter
    ├── core/                # Low-level components
    │   ├── socket_server.py # TCP socket handling
    │   ├── connection.py    # Connection wrapper
    │   └── thread_pool.py   # Cached thread pool
    ├── http/                # HTTP protocol components
    │   ├── request.py       # HTTP request parsing
    │   ├── response.py      # HTTP response building
    │   ├── router.py        # URL routing
    │   ├── status_codes.py  # HTTP status enums
    │   └── mime_types.py    # Content-Type inference
    ├── middleware/
    │   ├── base.py          # Middleware base and pipeline
    │   └── cors.py          # CORS headers
    └── handlers/
        ├── counter.py       # /api/* endpoints
        └── static.py        # "/" and /static/*

=============================================================================
QUICK START
=============================================================================

    from counterserver import create_app, ServerConfig, CounterStore

    store = CounterStore()
    app = create_app(ServerConfig(port=8080, static_dir="static"), store)
    app.run()

=============================================================================
"""

__version__ = "1.0.0"

from .config import ServerConfig
from .store import CounterStore
from .server import HTTPServer
from .app import create_app

__all__ = ["HTTPServer", "ServerConfig", "CounterStore", "create_app", "__version__"]
