"""
=============================================================================
COUNTER API HANDLERS
=============================================================================

    GET  /api/count  → {"count":N}          read
    POST /api/inc    → {"count":N+1}        increment
    POST /api/dec    → {"count":N-1}        decrement
    POST /api/reset  → {"count":0}          reset

Every success is 200 with Content-Type "application/json; charset=UTF-8"
and a compact body. Request bodies and query strings are ignored. The
method check lives in the router, so these handlers run only for the
method they are registered under.

=============================================================================
"""

from ..http.request import HTTPRequest
from ..http.response import HTTPResponse, ResponseBuilder
from ..http.router import Router
from ..store import CounterStore


def count_response(value: int) -> HTTPResponse:
    """{"count":<value>} as a 200 JSON response."""
    return ResponseBuilder().json({"count": value}).build()


class CounterHandler:
    """
    Binds the four counter operations to a CounterStore.

        handler = CounterHandler(CounterStore())
        handler.register(router.group("/api"))
    """

    def __init__(self, store: CounterStore):
        self.store = store

    def count(self, request: HTTPRequest) -> HTTPResponse:
        return count_response(self.store.read())

    def increment(self, request: HTTPRequest) -> HTTPResponse:
        return count_response(self.store.increment())

    def decrement(self, request: HTTPRequest) -> HTTPResponse:
        return count_response(self.store.decrement())

    def reset(self, request: HTTPRequest) -> HTTPResponse:
        return count_response(self.store.reset())

    def register(self, router: Router) -> None:
        """Register the four routes on a router (usually the /api group)."""
        router.add_route("/count", self.count, method="GET", name="count")
        router.add_route("/inc", self.increment, method="POST", name="increment")
        router.add_route("/dec", self.decrement, method="POST", name="decrement")
        router.add_route("/reset", self.reset, method="POST", name="reset")
