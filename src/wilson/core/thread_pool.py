"""
=============================================================================
WORKER POOL
=============================================================================

A fixed set of worker threads draining one FIFO queue of tasks. One task
is one accepted connection, handled start to finish by one worker.

=============================================================================
ARCHITECTURE
=============================================================================

    ┌─────────────────────────────────────────────────────────────────────┐
    │                          WorkerPool                                  │
    ├─────────────────────────────────────────────────────────────────────┤
    │                                                                      │
    │   accept loop ──enqueue(task)──►  ┌──────────────────────────────┐  │
    │                                    │  deque: [T1] [T2] [T3] ...   │  │
    │                notify(1) ────────► │  guarded by ONE Condition    │  │
    │                                    └──────────────┬───────────────┘  │
    │                                                   │ popleft()        │
    │                         ┌─────────────┬───────────┴─┬─────────────┐  │
    │                         ▼             ▼             ▼             ▼  │
    │                    ┌────────┐   ┌────────┐   ┌────────┐   ┌────────┐ │
    │                    │Worker-0│   │Worker-1│   │Worker-2│   │Worker-3│ │
    │                    │ (busy) │   │ (idle) │   │ (busy) │   │ (idle) │ │
    │                    └────────┘   └────────┘   └────────┘   └────────┘ │
    │                                                                      │
    └─────────────────────────────────────────────────────────────────────┘

=============================================================================
WORKER LOOP
=============================================================================

    with cond:
        cond.wait_for(lambda: stopping or queue)
        if stopping and not queue:
            exit                      ← only exit path
        task = queue.popleft()
    run(task)                         ← outside the lock

Note the exit condition: a stopping pool still drains its queue. Every task
that was accepted by enqueue() runs to completion; none is dropped.

=============================================================================
SHUTDOWN
=============================================================================

    pool.shutdown()
        ├── stopping = True            enqueue() now raises RuntimeError
        ├── cond.notify_all()          wake every idle worker
        └── join() each worker         returns when the queue is empty
                                       and every task has finished

A worker never dies from a task: exceptions are logged and the worker goes
back to waiting.
=============================================================================
"""

import logging
import os
import threading
import time
from collections import deque
from dataclasses import dataclass, field
from enum import Enum
from typing import Callable, Deque, List, Optional

logger = logging.getLogger(__name__)


class WorkerState(Enum):
    """Worker thread states, for monitoring."""
    IDLE = "idle"        # Waiting for a task
    BUSY = "busy"        # Running a task
    STOPPED = "stopped"  # Thread exited


@dataclass
class Task:
    """
    A queued unit of work: a zero-argument callable plus bookkeeping.

    Attributes:
        func: What to run.
        submitted_at: time.monotonic() at enqueue, for queue-wait logging.
    """
    func: Callable[[], object]
    submitted_at: float = field(default_factory=time.monotonic)

    def __call__(self):
        return self.func()


class Worker(threading.Thread):
    """One pool thread. Pulls tasks until the pool stops and the queue is empty."""

    def __init__(self, pool: "WorkerPool", worker_id: int):
        super().__init__(name=f"Worker-{worker_id}", daemon=True)
        self.pool = pool
        self.worker_id = worker_id
        self.state = WorkerState.IDLE
        self.tasks_completed = 0
        self.tasks_failed = 0

    def run(self):
        logger.debug(f"Worker {self.worker_id} started")

        while True:
            task = self.pool._next_task()
            if task is None:
                break
            self._execute_task(task)

        self.state = WorkerState.STOPPED
        logger.debug(f"Worker {self.worker_id} stopped")

    def _execute_task(self, task: Task):
        self.state = WorkerState.BUSY
        start_time = time.monotonic()
        waited = start_time - task.submitted_at

        try:
            task()
            self.tasks_completed += 1
            logger.debug(
                f"Worker {self.worker_id} completed task in "
                f"{time.monotonic() - start_time:.3f}s (queued {waited:.3f}s)"
            )
        except Exception as e:
            # ─────────────────────────────────────────────────────────────
            # TASK FAILURE
            # ─────────────────────────────────────────────────────────────
            # The worker outlives its tasks. Log and keep serving.
            self.tasks_failed += 1
            logger.exception(f"Worker {self.worker_id} task failed: {e}")
        finally:
            self.state = WorkerState.IDLE


class WorkerPool:
    """
    Fixed-size pool of worker threads.

    Workers start at construction and live until shutdown():

        with WorkerPool(workers=4) as pool:
            pool.enqueue(lambda: handle(conn))
        # every queued task has run by here

    Args:
        workers: Number of threads. Defaults to the CPU count.
    """

    def __init__(self, workers: Optional[int] = None):
        self.size = workers or os.cpu_count() or 1
        if self.size < 1:
            raise ValueError(f"workers must be >= 1, got {self.size}")

        # ─────────────────────────────────────────────────────────────────
        # SHARED STATE
        # ─────────────────────────────────────────────────────────────────
        # The deque and the stop flag are only touched while holding
        # _cond's lock.
        self._cond = threading.Condition()
        self._queue: Deque[Task] = deque()
        self._stopping = False

        self._workers: List[Worker] = [Worker(self, i) for i in range(self.size)]
        for worker in self._workers:
            worker.start()

        logger.info(f"Worker pool started with {self.size} workers")

    def enqueue(self, func: Callable[[], object]) -> None:
        """
        Queue a zero-argument callable and wake one idle worker.

        Raises:
            RuntimeError: If the pool is shutting down.
        """
        task = func if isinstance(func, Task) else Task(func)
        with self._cond:
            if self._stopping:
                raise RuntimeError("Worker pool is shutting down")
            self._queue.append(task)
            self._cond.notify(1)

    def _next_task(self) -> Optional[Task]:
        # Blocks; None tells the calling worker to exit
        with self._cond:
            self._cond.wait_for(lambda: self._stopping or self._queue)
            if not self._queue:
                return None
            return self._queue.popleft()

    def shutdown(self) -> None:
        """
        Stop accepting tasks, let queued and running ones finish, and join
        every worker. Safe to call more than once.
        """
        with self._cond:
            first_call = not self._stopping
            self._stopping = True
            pending = len(self._queue)
            self._cond.notify_all()

        if first_call:
            logger.info(f"Shutting down worker pool ({pending} tasks still queued)")

        for worker in self._workers:
            worker.join()

        if first_call:
            logger.info("Worker pool shutdown complete")

    @property
    def is_shutdown(self) -> bool:
        return self._stopping

    def __enter__(self) -> "WorkerPool":
        return self

    def __exit__(self, exc_type, exc_val, exc_tb):
        self.shutdown()
        return False

    # =========================================================================
    # MONITORING
    # =========================================================================

    @property
    def active_workers(self) -> int:
        return sum(1 for w in self._workers if w.state != WorkerState.STOPPED)

    @property
    def busy_workers(self) -> int:
        return sum(1 for w in self._workers if w.state == WorkerState.BUSY)

    @property
    def queue_size(self) -> int:
        with self._cond:
            return len(self._queue)

    @property
    def stats(self) -> dict:
        """Worker and task counts, for logging and debugging."""
        return {
            "workers": {
                "total": len(self._workers),
                "active": self.active_workers,
                "busy": self.busy_workers,
            },
            "tasks": {
                "queued": self.queue_size,
                "completed": sum(w.tasks_completed for w in self._workers),
                "failed": sum(w.tasks_failed for w in self._workers),
            },
        }
