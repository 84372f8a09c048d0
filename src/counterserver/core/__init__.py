"""
=============================================================================
CORE SERVER COMPONENTS
=============================================================================

The networking plumbing under the HTTP layer.

    ┌─────────────────────────────────────────────────────────────────────┐
    │                         SOCKET SERVER                                │
    │  • Binds, listens and runs the accept() loop                        │
    │  • Stops on SIGINT/SIGTERM or shutdown()                            │
    └─────────────────────────────────────────────────────────────────────┘
                                    │ new connections
                                    ▼
    ┌─────────────────────────────────────────────────────────────────────┐
    │                       CACHED THREAD POOL                             │
    │  • One worker per live connection, no upper bound                   │
    │  • Idle workers are reused, then retire after a timeout             │
    └─────────────────────────────────────────────────────────────────────┘
                                    │ worker serves connection
                                    ▼
    ┌─────────────────────────────────────────────────────────────────────┐
    │                          CONNECTION                                  │
    │  • Buffered request reads, keep-alive, graceful close               │
    └─────────────────────────────────────────────────────────────────────┘

=============================================================================
"""

from .socket_server import SocketServer
from .connection import Connection, ConnectionState
from .thread_pool import CachedThreadPool

__all__ = [
    "SocketServer",
    "Connection",
    "ConnectionState",
    "CachedThreadPool",
]
