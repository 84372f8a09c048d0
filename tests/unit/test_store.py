"""
Unit tests for the counter store.
"""

import threading

from counterserver.store import CounterStore


class TestCounterStore:

    def test_starts_at_zero(self):
        assert CounterStore().read() == 0

    def test_initial_value(self):
        assert CounterStore(initial=5).read() == 5

    def test_increment_returns_new_value(self):
        store = CounterStore()
        assert store.increment() == 1
        assert store.increment() == 2
        assert store.read() == 2

    def test_decrement_can_go_negative(self):
        store = CounterStore()
        assert store.decrement() == -1
        assert store.decrement() == -2

    def test_reset(self):
        store = CounterStore(initial=7)
        assert store.reset() == 0
        assert store.read() == 0

    def test_inc_inc_dec(self):
        store = CounterStore()
        store.increment()
        store.increment()
        assert store.decrement() == 1

    def test_stores_are_independent(self):
        first, second = CounterStore(), CounterStore()
        first.increment()
        assert second.read() == 0

    def test_concurrent_updates_are_not_lost(self):
        store = CounterStore()
        increments, decrements = 1000, 400

        def bump(op, times):
            for _ in range(times):
                op()

        threads = [
            threading.Thread(target=bump, args=(store.increment, increments))
            for _ in range(8)
        ] + [
            threading.Thread(target=bump, args=(store.decrement, decrements))
            for _ in range(8)
        ]
        for thread in threads:
            thread.start()
        for thread in threads:
            thread.join()

        assert store.read() == 8 * increments - 8 * decrements

    def test_repr(self):
        assert repr(CounterStore(initial=3)) == "CounterStore(value=3)"
