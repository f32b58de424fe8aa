"""
A read/write lock built from a single condition variable.

The read lock may be held simultaneously by many threads as long as there are
no writers. The write lock is exclusive and remembers the thread that holds it,
so only that thread may release it.
"""

import threading
from typing import Optional


class LockMisuseError(RuntimeError):
    """A lock was released in a way that indicates a programming error."""
    pass


class ConcurrentModificationError(LockMisuseError):
    """The write lock was released by a thread that does not hold it."""
    pass


class IllegalLockStateError(LockMisuseError):
    """The write lock was released while no writer held it."""
    pass


def same_thread(ident: Optional[int]) -> bool:
    """True if ident is not None and names the calling thread."""
    return ident is not None and ident == threading.get_ident()


class SimpleLock:
    """Common surface of the read and write locks."""

    def lock(self):
        raise NotImplementedError

    def unlock(self):
        raise NotImplementedError

    def __enter__(self):
        self.lock()
        return self

    def __exit__(self, exc_type, exc_val, exc_tb):
        self.unlock()


class SimpleReadWriteLock:
    """
    Maintains a pair of associated locks sharing one monitor.

    Waiters are not served in FIFO order; whichever thread wakes first and
    finds the lock available proceeds.
    """

    def __init__(self):
        self._condition = threading.Condition(threading.Lock())
        self._readers = 0
        self._writers = 0
        self._owner: Optional[int] = None

        self._read_lock = _ReadLock(self)
        self._write_lock = _WriteLock(self)

    def read_lock(self) -> SimpleLock:
        """Return the reader lock."""
        return self._read_lock

    def write_lock(self) -> SimpleLock:
        """Return the writer lock."""
        return self._write_lock

    def readers(self) -> int:
        """Return the number of active readers."""
        with self._condition:
            return self._readers

    def writers(self) -> int:
        """Return the number of active writers."""
        with self._condition:
            return self._writers


class _ReadLock(SimpleLock):

    def __init__(self, parent: SimpleReadWriteLock):
        self._parent = parent

    def lock(self):
        """Wait until there are no active writers, then register a reader."""
        parent = self._parent
        with parent._condition:
            while parent._writers > 0:
                parent._condition.wait()

            assert parent._writers == 0
            parent._readers += 1

    def unlock(self):
        """Unregister a reader; wake waiters once the last reader leaves."""
        parent = self._parent
        with parent._condition:
            if parent._readers > 0:
                parent._readers -= 1

            # Unlocking with no readers only wakes waiters
            if parent._readers == 0:
                parent._condition.notify_all()


class _WriteLock(SimpleLock):

    def __init__(self, parent: SimpleReadWriteLock):
        self._parent = parent

    def lock(self):
        """Wait until there are no readers or writers, then take ownership."""
        parent = self._parent
        with parent._condition:
            while parent._readers > 0 or parent._writers > 0:
                parent._condition.wait()

            parent._writers += 1
            parent._owner = threading.get_ident()
            assert parent._readers == 0

    def unlock(self):
        """
        Release ownership and wake all waiters.

        Raises:
            ConcurrentModificationError: if called by a thread other than the owner
            IllegalLockStateError: if no writer holds the lock
        """
        parent = self._parent
        with parent._condition:
            if same_thread(parent._owner):
                if parent._writers > 0:
                    parent._writers -= 1
                    parent._owner = None
                    parent._condition.notify_all()
                else:
                    raise IllegalLockStateError("Write lock is not held")
            elif parent._writers > 0:
                raise ConcurrentModificationError("Write lock is held by another thread")
            else:
                raise IllegalLockStateError("Write lock is not held")
