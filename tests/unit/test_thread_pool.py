"""
Unit tests for the cached thread pool.
"""

import threading
import time

import pytest

from counterserver.core.thread_pool import CachedThreadPool


def wait_for(condition, timeout: float = 5.0) -> bool:
    deadline = time.monotonic() + timeout
    while time.monotonic() < deadline:
        if condition():
            return True
        time.sleep(0.01)
    return condition()


@pytest.fixture
def pool():
    pool = CachedThreadPool(idle_timeout=30.0)
    pool.start()
    yield pool
    pool.shutdown(wait=True, timeout=2.0)


class TestCachedThreadPool:

    def test_submit_before_start_fails(self):
        with pytest.raises(RuntimeError):
            CachedThreadPool().submit(lambda: None)

    def test_no_workers_until_first_task(self, pool: CachedThreadPool):
        assert pool.worker_count == 0

    def test_runs_task_with_args(self, pool: CachedThreadPool):
        done = threading.Event()
        results = []

        def task(a, b=0):
            results.append(a + b)
            done.set()

        pool.submit(task, args=(1,), kwargs={"b": 2})

        assert done.wait(5.0)
        assert results == [3]

    def test_unbounded_concurrency(self, pool: CachedThreadPool):
        tasks = 20
        barrier = threading.Barrier(tasks + 1)

        for _ in range(tasks):
            pool.submit(barrier.wait, kwargs={"timeout": 5.0})

        # Every task must be running at once for the barrier to open
        barrier.wait(timeout=5.0)

        assert pool.worker_count >= tasks

    def test_idle_worker_is_reused(self, pool: CachedThreadPool):
        names = set()

        for _ in range(5):
            done = threading.Event()

            def task():
                names.add(threading.current_thread().name)
                done.set()

            pool.submit(task)
            assert done.wait(5.0)
            assert wait_for(lambda: pool.stats["workers"]["busy"] == 0)
            time.sleep(0.05)

        assert len(names) == 1
        assert pool.worker_count == 1

    def test_idle_worker_retires(self):
        pool = CachedThreadPool(idle_timeout=0.1)
        pool.start()
        try:
            done = threading.Event()
            pool.submit(done.set)
            assert done.wait(5.0)

            assert wait_for(lambda: pool.worker_count == 0)
        finally:
            pool.shutdown(wait=True, timeout=2.0)

    def test_new_task_after_retirement(self):
        pool = CachedThreadPool(idle_timeout=0.1)
        pool.start()
        try:
            first = threading.Event()
            pool.submit(first.set)
            assert first.wait(5.0)
            assert wait_for(lambda: pool.worker_count == 0)

            second = threading.Event()
            pool.submit(second.set)
            assert second.wait(5.0)
        finally:
            pool.shutdown(wait=True, timeout=2.0)

    def test_failing_task_is_counted_and_worker_survives(self, pool: CachedThreadPool):
        def boom():
            raise ValueError("boom")

        pool.submit(boom)
        assert wait_for(lambda: pool.stats["tasks"]["failed"] == 1)

        done = threading.Event()
        pool.submit(done.set)
        assert done.wait(5.0)
        assert wait_for(lambda: pool.stats["tasks"]["completed"] == 1)

    def test_shutdown_stops_workers(self):
        pool = CachedThreadPool()
        pool.start()
        done = threading.Event()
        pool.submit(done.set)
        assert done.wait(5.0)

        pool.shutdown(wait=True, timeout=2.0)

        assert wait_for(lambda: pool.worker_count == 0)
        with pytest.raises(RuntimeError):
            pool.submit(lambda: None)

    def test_shutdown_waits_for_running_task(self):
        pool = CachedThreadPool()
        pool.start()
        started = threading.Event()
        finished = threading.Event()

        def slow():
            started.set()
            time.sleep(0.2)
            finished.set()

        pool.submit(slow)
        assert started.wait(5.0)
        pool.shutdown(wait=True, timeout=5.0)

        assert finished.is_set()
