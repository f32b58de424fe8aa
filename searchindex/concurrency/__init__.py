"""
Thread pool and locking primitives shared by the builders, crawler and query handlers.
"""

from .work_queue import WorkQueue
from .rwlock import (
    SimpleLock, SimpleReadWriteLock, LockMisuseError,
    ConcurrentModificationError, IllegalLockStateError
)

__all__ = [
    'WorkQueue',
    'SimpleLock', 'SimpleReadWriteLock', 'LockMisuseError',
    'ConcurrentModificationError', 'IllegalLockStateError'
]
