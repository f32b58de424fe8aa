import threading

import pytest

from searchindex.concurrency.work_queue import WorkQueue
from searchindex.utils.config import ConfigurationError


class Counter:

    def __init__(self):
        self.value = 0
        self.lock = threading.Lock()

    def __call__(self):
        with self.lock:
            self.value += 1


def test_runs_every_task(queue):
    counter = Counter()
    for _ in range(200):
        queue.execute(counter)

    queue.finish()

    assert counter.value == 200
    assert queue.pending == 0


def test_finish_waits_for_tasks_added_by_tasks(queue):
    counter = Counter()

    def spawn(depth):
        counter()
        if depth > 0:
            queue.execute(lambda: spawn(depth - 1))
            queue.execute(lambda: spawn(depth - 1))

    queue.execute(lambda: spawn(5))
    queue.finish()

    assert counter.value == 2 ** 6 - 1


def test_queue_is_reusable_after_finish(queue):
    counter = Counter()

    queue.execute(counter)
    queue.finish()
    queue.execute(counter)
    queue.finish()

    assert counter.value == 2


def test_finish_with_no_work_returns(queue):
    queue.finish()
    assert queue.pending == 0


def test_failing_task_does_not_stop_workers(monitor):
    counter = Counter()

    def fail():
        raise RuntimeError("boom")

    with WorkQueue(1) as queue:
        queue.execute(fail)
        queue.execute(counter)
        queue.finish()

        assert counter.value == 1
        assert queue.pending == 0

    assert monitor.metrics.get_current_values()['tasks_failed_total'] == 1


def test_needs_at_least_one_thread():
    with pytest.raises(ConfigurationError):
        WorkQueue(0)


def test_size_and_default():
    queue = WorkQueue()
    try:
        assert queue.size == WorkQueue.DEFAULT_THREADS
    finally:
        queue.join()


def test_execute_after_shutdown_fails():
    queue = WorkQueue(2)
    queue.join()

    with pytest.raises(RuntimeError):
        queue.execute(lambda: None)
    assert queue.pending == 0


def test_shutdown_abandons_unstarted_tasks():
    release = threading.Event()
    started = threading.Event()
    counter = Counter()

    def block():
        started.set()
        release.wait(5)

    queue = WorkQueue(1)
    queue.execute(block)
    assert started.wait(5)
    queue.execute(counter)
    queue.execute(counter)

    queue.shutdown()
    release.set()
    queue.finish()

    assert counter.value == 0
    assert queue.pending == 0


def test_workers_are_named():
    queue = WorkQueue(2, name="builder")
    try:
        names = {thread.name for thread in threading.enumerate()}
        assert {"builder-worker-0", "builder-worker-1"} <= names
    finally:
        queue.join()
