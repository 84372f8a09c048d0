"""
=============================================================================
CACHED THREAD POOL
=============================================================================

Every accepted connection gets its own worker thread for as long as the
connection lives. Idle workers are reused; when none is idle a new one
is started. There is no upper bound on workers and no bound on the task
queue.

=============================================================================
ARCHITECTURE
=============================================================================

    ┌─────────────────────────────────────────────────────────────────────┐
    │                        CachedThreadPool                              │
    ├─────────────────────────────────────────────────────────────────────┤
    │                                                                      │
    │   submit(task)                                                       │
    │        │                                                             │
    │        ├── put task on queue                                         │
    │        │                                                             │
    │        ├── idle worker available? (idle semaphore > 0)              │
    │        │      yes → take one idle slot, that worker picks it up     │
    │        │      no  → start a new Worker                               │
    │        ▼                                                             │
    │   ┌─────────────────────────────────────────────────────────────┐   │
    │   │  TASK QUEUE (unbounded)                                      │   │
    │   │  [Task] [Task] ...                                           │   │
    │   └──────────────────────┬──────────────────────────────────────┘   │
    │                          │ get(timeout=idle_timeout)                │
    │                          ▼                                           │
    │   ┌──────────┐ ┌──────────┐ ┌──────────┐                            │
    │   │ Worker 0 │ │ Worker 1 │ │ Worker 2 │  ...                       │
    │   │ (busy)   │ │ (idle)   │ │ (busy)   │                            │
    │   └──────────┘ └──────────┘ └──────────┘                            │
    │                                                                      │
    └─────────────────────────────────────────────────────────────────────┘

=============================================================================
IDLE ACCOUNTING
=============================================================================

The idle semaphore counts workers that finished a task and have not
been promised another one:

    worker finishes a task       → release()   (one more idle worker)
    submit() finds an idle one   → acquire()   (that worker is spoken for)
    worker idle for idle_timeout → acquire(blocking=False)
                                     success: retire the thread
                                     failure: a task is on its way, keep going

Because submit() queues the task before it tries the semaphore, every
interleaving with a retiring worker either leaves a live worker for the
task or starts a new one.

=============================================================================
SHUTDOWN
=============================================================================

One "poison pill" (None) per live worker is queued. Workers finish the
connection they are serving, take a pill, and exit.

=============================================================================
"""

import threading
import queue
import time
import logging
from typing import Callable, Optional, Any
from dataclasses import dataclass, field
from enum import Enum


logger = logging.getLogger(__name__)


class WorkerState(Enum):
    IDLE = "idle"
    BUSY = "busy"
    STOPPED = "stopped"


@dataclass
class Task:
    """
    A deferred function call: "call func(*args, **kwargs) later".
    """
    func: Callable[..., Any]
    args: tuple = ()
    kwargs: dict = field(default_factory=dict)
    submitted_at: float = field(default_factory=time.time)


class Worker(threading.Thread):
    """
    Worker thread that processes tasks from the pool's queue.

        1. Wait for a task (up to idle_timeout)
              ├── timed out and no task promised → exit
              └── timed out but a task is coming → wait again
        2. Poison pill (None)?                   → exit
        3. Run the task, log any exception
        4. Report idle, go back to step 1
    """

    def __init__(self, pool: "CachedThreadPool", worker_id: int):
        # daemon=True: a stuck connection never keeps the process alive
        super().__init__(name=f"Worker-{worker_id}", daemon=True)

        self.pool = pool
        self.worker_id = worker_id
        self.state = WorkerState.IDLE

        self.tasks_completed = 0
        self.tasks_failed = 0

    def run(self):
        logger.debug(f"Worker {self.worker_id} started")

        try:
            while True:
                try:
                    task = self.pool._task_queue.get(timeout=self.pool.idle_timeout)
                except queue.Empty:
                    if self.pool._idle_semaphore.acquire(blocking=False):
                        logger.debug(f"Worker {self.worker_id} retiring after idle timeout")
                        break
                    continue

                if task is None:
                    break

                self._execute_task(task)
                self.pool._idle_semaphore.release()
        finally:
            self.state = WorkerState.STOPPED
            self.pool._remove_worker(self)
            logger.debug(f"Worker {self.worker_id} stopped")

    def _execute_task(self, task: Task):
        self.state = WorkerState.BUSY
        start_time = time.time()

        try:
            task.func(*task.args, **task.kwargs)
            self.tasks_completed += 1
            self.pool._record(completed=True)
            logger.debug(
                f"Worker {self.worker_id} completed task in {time.time() - start_time:.3f}s"
            )
        except Exception as e:
            # One failing connection must not take the worker down
            self.tasks_failed += 1
            self.pool._record(completed=False)
            logger.exception(
                f"Worker {self.worker_id} task failed after "
                f"{time.time() - start_time:.3f}s: {e}"
            )
        finally:
            self.state = WorkerState.IDLE


class CachedThreadPool:
    """
    Unbounded thread pool that reuses idle workers.

        pool = CachedThreadPool(idle_timeout=60.0)
        pool.start()
        pool.submit(handle_connection, args=(conn,))
        pool.shutdown(wait=True, timeout=5.0)
    """

    def __init__(self, idle_timeout: float = 60.0):
        """
        Args:
            idle_timeout: Seconds a worker waits for new work before
                          its thread exits.
        """
        self.idle_timeout = idle_timeout

        self._task_queue: queue.Queue[Optional[Task]] = queue.Queue()
        self._idle_semaphore = threading.Semaphore(0)

        self._workers: list[Worker] = []
        self._lock = threading.Lock()  # Protects _workers and counters
        self._started = False
        self._shutdown = False
        self._next_worker_id = 0

        self._tasks_completed = 0
        self._tasks_failed = 0

    def start(self):
        """Workers are created on demand; start() only opens the pool."""
        if self._started:
            return
        logger.debug(f"Starting cached thread pool (idle timeout {self.idle_timeout}s)")
        self._shutdown = False
        self._started = True

    def submit(
        self,
        func: Callable[..., Any],
        args: tuple = (),
        kwargs: Optional[dict] = None,
    ) -> None:
        """
        Submit a task for execution.

        Raises:
            RuntimeError: If the pool is not started or is shutting down.
        """
        if not self._started:
            raise RuntimeError("Thread pool not started")

        if self._shutdown:
            raise RuntimeError("Thread pool is shutting down")

        self._task_queue.put(Task(func=func, args=args, kwargs=kwargs or {}))

        if self._idle_semaphore.acquire(blocking=False):
            return

        self._add_worker()

    def _add_worker(self) -> Worker:
        with self._lock:
            worker = Worker(pool=self, worker_id=self._next_worker_id)
            self._next_worker_id += 1
            self._workers.append(worker)
            logger.debug(f"Scaling up: {len(self._workers)} workers")
        worker.start()
        return worker

    def _remove_worker(self, worker: Worker) -> None:
        with self._lock:
            if worker in self._workers:
                self._workers.remove(worker)

    def _record(self, completed: bool) -> None:
        with self._lock:
            if completed:
                self._tasks_completed += 1
            else:
                self._tasks_failed += 1

    def shutdown(self, wait: bool = True, timeout: Optional[float] = None):
        """
        Shutdown the thread pool.

        1. Reject new tasks
        2. Queue one poison pill per live worker
        3. If wait=True: join workers (each bounded by timeout)

        Args:
            wait: Whether to wait for workers to exit.
            timeout: Per-worker join timeout; None waits indefinitely.
        """
        if not self._started:
            return

        logger.debug("Shutting down thread pool...")
        self._shutdown = True

        with self._lock:
            workers = list(self._workers)

        for _ in workers:
            self._task_queue.put(None)

        if wait:
            for worker in workers:
                worker.join(timeout=timeout)
                if worker.is_alive():
                    logger.warning(f"Worker {worker.worker_id} still busy at shutdown")

        self._started = False
        logger.debug("Thread pool shutdown complete")

    # =========================================================================
    # MONITORING
    # =========================================================================

    @property
    def worker_count(self) -> int:
        with self._lock:
            return len(self._workers)

    @property
    def stats(self) -> dict:
        """Worker and task counts for logs and tests."""
        with self._lock:
            total = len(self._workers)
            busy = sum(1 for w in self._workers if w.state == WorkerState.BUSY)
            return {
                "workers": {
                    "total": total,
                    "busy": busy,
                    "idle": total - busy,
                },
                "tasks": {
                    "queued": self._task_queue.qsize(),
                    "completed": self._tasks_completed,
                    "failed": self._tasks_failed,
                },
            }
