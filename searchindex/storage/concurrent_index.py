"""
Thread-safe inverted index.
"""

from pathlib import Path
from typing import Dict, Iterable, List, Union

from .inverted_index import InvertedIndex, QueryResult
from ..concurrency.rwlock import SimpleReadWriteLock


class ConcurrentInvertedIndex(InvertedIndex):
    """
    InvertedIndex guarded by a SimpleReadWriteLock. Mutators hold the write
    lock and every read, search or serialization holds the read lock for the
    whole call.

    The index passed to add_all is read without locking; it is expected to be
    a private index owned by the calling task.
    """

    def __init__(self):
        super().__init__()
        self._lock = SimpleReadWriteLock()

    def add_item(self, item: str, location: str, position: int) -> bool:
        with self._lock.write_lock():
            return super().add_item(item, location, position)

    def add_all(self, other: InvertedIndex):
        with self._lock.write_lock():
            super().add_all(other)

    def get_word_count(self, location: str) -> int:
        with self._lock.read_lock():
            return super().get_word_count(location)

    def get_word_counts(self) -> Dict[str, int]:
        with self._lock.read_lock():
            return super().get_word_counts()

    def get_all_items(self) -> List[str]:
        with self._lock.read_lock():
            return super().get_all_items()

    def get_item_paths(self, item: str) -> List[str]:
        with self._lock.read_lock():
            return super().get_item_paths(item)

    def get_item_positions(self, item: str, location: str) -> List[int]:
        with self._lock.read_lock():
            return super().get_item_positions(item, location)

    def get_item_counts_by_path(self, item: str, location: str) -> int:
        with self._lock.read_lock():
            return super().get_item_counts_by_path(item, location)

    def has_item(self, item: str) -> bool:
        with self._lock.read_lock():
            return super().has_item(item)

    def has_path(self, item: str, location: str) -> bool:
        with self._lock.read_lock():
            return super().has_path(item, location)

    def has_position(self, item: str, location: str, position: int) -> bool:
        with self._lock.read_lock():
            return super().has_position(item, location, position)

    def __len__(self) -> int:
        with self._lock.read_lock():
            return super().__len__()

    def __contains__(self, item: str) -> bool:
        with self._lock.read_lock():
            return super().__contains__(item)

    def __eq__(self, other) -> bool:
        with self._lock.read_lock():
            return super().__eq__(other)

    __hash__ = None

    def to_json(self) -> str:
        with self._lock.read_lock():
            return super().to_json()

    def write_json(self, output_path: Union[str, Path]):
        with self._lock.read_lock():
            super().write_json(output_path)

    def write_word_counts(self, output_path: Union[str, Path]):
        with self._lock.read_lock():
            super().write_word_counts(output_path)

    def exact_search(self, queries: Iterable[str]) -> List[QueryResult]:
        with self._lock.read_lock():
            return super().exact_search(queries)

    def partial_search(self, queries: Iterable[str]) -> List[QueryResult]:
        with self._lock.read_lock():
            return super().partial_search(queries)
