"""
A fixed-size pool of worker threads consuming a FIFO queue of tasks.

The queue tracks how much work is outstanding so callers can wait for it to
drain with finish() and still submit more work afterwards.
"""

import logging
import threading
from collections import deque
from typing import Callable, Deque, List

from ..utils.config import ConfigurationError
from ..utils.monitoring import get_monitor


Task = Callable[[], None]


class WorkQueue:
    """
    Runs submitted tasks on a pool of background threads.
    """

    DEFAULT_THREADS = 5

    def __init__(self, threads: int = DEFAULT_THREADS, name: str = "work-queue"):
        if threads < 1:
            raise ConfigurationError(f"A work queue needs at least one thread, got {threads}")

        self.name = name
        self.logger = logging.getLogger(__name__)

        self._queue: Deque[Task] = deque()
        self._queue_condition = threading.Condition()
        self._shutdown = False

        self._pending = 0
        self._pending_condition = threading.Condition()

        self._workers: List[threading.Thread] = []
        for i in range(threads):
            worker = threading.Thread(
                target=self._run_worker,
                name=f"{name}-worker-{i}",
                daemon=True
            )
            self._workers.append(worker)
            worker.start()

        self.logger.debug(f"Started {name} with {threads} workers")

    def __enter__(self):
        return self

    def __exit__(self, exc_type, exc_val, exc_tb):
        self.join()

    @property
    def size(self) -> int:
        """Number of worker threads."""
        return len(self._workers)

    @property
    def pending(self) -> int:
        """Number of tasks submitted but not yet completed."""
        with self._pending_condition:
            return self._pending

    def execute(self, task: Task):
        """
        Add a task to the queue. A worker runs it when one is available.

        Args:
            task: zero-argument callable
        """
        with self._queue_condition:
            if self._shutdown:
                raise RuntimeError(f"{self.name} has been shut down")

            self._add_pending_work()
            self._queue.append(task)
            self._queue_condition.notify()

    def finish(self):
        """Wait for all pending work, including work queued by tasks, to complete."""
        with self._pending_condition:
            while self._pending > 0:
                self._pending_condition.wait()

    def shutdown(self):
        """
        Ask the workers to stop. Tasks already running finish; queued tasks
        that have not started are abandoned.
        """
        with self._queue_condition:
            self._shutdown = True
            abandoned = len(self._queue)
            self._queue.clear()
            self._queue_condition.notify_all()

        if abandoned:
            self.logger.warning(f"{self.name} shut down with {abandoned} unstarted tasks")
            self._remove_pending_work(abandoned)

    def join(self):
        """Finish all work, shut down and wait for the worker threads to exit."""
        self.finish()
        self.shutdown()
        for worker in self._workers:
            worker.join()

    def _add_pending_work(self):
        with self._pending_condition:
            self._pending += 1

    def _remove_pending_work(self, count: int = 1):
        with self._pending_condition:
            self._pending -= count
            if self._pending <= 0:
                self._pending_condition.notify_all()

    def _run_worker(self):
        while True:
            with self._queue_condition:
                while not self._queue and not self._shutdown:
                    self._queue_condition.wait()

                if self._shutdown:
                    break

                task = self._queue.popleft()

            try:
                task()
            except Exception:
                # A failing task must not kill the worker
                self.logger.exception(f"{threading.current_thread().name} task raised")
                monitor = get_monitor()
                if monitor:
                    monitor.record_task_failed()
            finally:
                self._remove_pending_work()
