"""
Unit tests for the worker pool.
"""

import threading
import time

import pytest

from wilson.core.thread_pool import WorkerPool, WorkerState


class TestWorkerPool:
    """Tests for WorkerPool."""

    def test_workers_start_at_construction(self):
        pool = WorkerPool(workers=3)
        try:
            assert pool.active_workers == 3
            assert pool.stats["workers"]["total"] == 3
        finally:
            pool.shutdown()

    def test_runs_enqueued_tasks(self):
        done = threading.Event()

        with WorkerPool(workers=2) as pool:
            pool.enqueue(done.set)

            assert done.wait(timeout=2.0)

    def test_shutdown_drains_queue(self):
        """Every accepted task runs before shutdown() returns."""
        results = []
        lock = threading.Lock()

        def task(i):
            time.sleep(0.01)
            with lock:
                results.append(i)

        pool = WorkerPool(workers=2)
        for i in range(20):
            pool.enqueue(lambda i=i: task(i))
        pool.shutdown()

        assert sorted(results) == list(range(20))

    def test_single_worker_runs_fifo(self):
        order = []

        with WorkerPool(workers=1) as pool:
            for i in range(10):
                pool.enqueue(lambda i=i: order.append(i))

        assert order == list(range(10))

    def test_enqueue_after_shutdown_raises(self):
        pool = WorkerPool(workers=1)
        pool.shutdown()

        with pytest.raises(RuntimeError):
            pool.enqueue(lambda: None)

    def test_shutdown_is_idempotent(self):
        pool = WorkerPool(workers=2)
        pool.shutdown()
        pool.shutdown()

        assert pool.active_workers == 0

    def test_task_exception_does_not_kill_worker(self):
        """A failing task is logged; the same worker keeps serving."""
        done = threading.Event()

        def boom():
            raise ValueError("task failure")

        with WorkerPool(workers=1) as pool:
            pool.enqueue(boom)
            pool.enqueue(done.set)

            assert done.wait(timeout=2.0)

        assert pool.stats["tasks"]["failed"] == 1
        assert pool.stats["tasks"]["completed"] == 1

    def test_tasks_run_concurrently(self):
        """N workers can all be inside a task at once."""
        barrier = threading.Barrier(4, timeout=2.0)
        passed = []

        def meet():
            barrier.wait()
            passed.append(True)

        with WorkerPool(workers=4) as pool:
            for _ in range(4):
                pool.enqueue(meet)

        assert len(passed) == 4

    def test_in_flight_task_finishes_during_shutdown(self):
        started = threading.Event()
        finished = []

        def slow():
            started.set()
            time.sleep(0.2)
            finished.append(True)

        pool = WorkerPool(workers=1)
        pool.enqueue(slow)
        assert started.wait(timeout=2.0)
        pool.shutdown()

        assert finished == [True]

    def test_worker_states_after_shutdown(self):
        pool = WorkerPool(workers=2)
        pool.shutdown()

        assert all(w.state == WorkerState.STOPPED for w in pool._workers)
        assert pool.is_shutdown

    def test_default_size_uses_cpu_count(self, monkeypatch):
        monkeypatch.setattr("wilson.core.thread_pool.os.cpu_count", lambda: 3)

        pool = WorkerPool()
        try:
            assert pool.size == 3
        finally:
            pool.shutdown()
