"""
=============================================================================
COUNTER STATE STORE
=============================================================================

The single piece of shared mutable state in the server: one integer.

    ┌────────────────────────────────────────────────────────────────────┐
    │                         CounterStore                               │
    ├────────────────────────────────────────────────────────────────────┤
    │                                                                     │
    │   worker 1 ──┐                                                     │
    │   worker 2 ──┼──►  [ lock ]  ──►  value: int                       │
    │   worker N ──┘                                                     │
    │                                                                     │
    │   read()       → value                                             │
    │   increment()  → value += 1, return value                          │
    │   decrement()  → value -= 1, return value                          │
    │   reset()      → value = 0,  return 0                              │
    │                                                                     │
    └────────────────────────────────────────────────────────────────────┘

Every operation holds the lock for its whole read-modify-write, so the
operations are linearizable: concurrent increments and decrements from
any number of workers always end at the net sum. Python integers do not
overflow, and there is no floor at zero.

The store is an ordinary object handed to the handlers that need it.
Each application (and each test) owns its own instance.

=============================================================================
"""

import threading


class CounterStore:
    """Thread-safe integer counter."""

    def __init__(self, initial: int = 0):
        self._value = initial
        self._lock = threading.Lock()

    def read(self) -> int:
        with self._lock:
            return self._value

    def increment(self) -> int:
        """Add one and return the new value."""
        with self._lock:
            self._value += 1
            return self._value

    def decrement(self) -> int:
        """Subtract one and return the new value. May go negative."""
        with self._lock:
            self._value -= 1
            return self._value

    def reset(self) -> int:
        with self._lock:
            self._value = 0
            return self._value

    def __repr__(self) -> str:
        return f"CounterStore(value={self.read()})"
