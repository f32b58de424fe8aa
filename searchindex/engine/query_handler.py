"""
Query handling: turns query lines into stem sets, searches the index once per
distinct stem set and keeps the ranked results keyed by the joined stems.
"""

import logging
import threading
from abc import ABC, abstractmethod
from pathlib import Path
from typing import Dict, List, Set, Union

from . import text
from ..concurrency.work_queue import WorkQueue
from ..storage import json_writer
from ..storage.inverted_index import InvertedIndex, QueryResult
from ..storage.concurrent_index import ConcurrentInvertedIndex
from ..utils.monitoring import get_monitor


class QueryHandlerInterface(ABC):
    """Common surface of the sequential and concurrent query handlers."""

    def perform_search(self, exact: bool, query_path: Union[str, Path]):
        """
        Search every line of query_path.

        Raises:
            OSError: if the query file cannot be read
        """
        with open(query_path, 'r', encoding='utf-8') as file:
            for line in file:
                self.parse_query(line, exact)

    @abstractmethod
    def parse_query(self, line: str, exact: bool):
        """Search one query line unless an equivalent query was already searched."""

    @abstractmethod
    def get_results(self) -> Dict[str, List[QueryResult]]:
        """Results so far, ordered by query."""

    def output_results(self, output_path: Union[str, Path]):
        """Write all results as pretty JSON to output_path."""
        json_writer.write_file(json_writer.as_query_results, self.get_results(), output_path)


class QueryHandler(QueryHandlerInterface):
    """Searches queries one at a time on the calling thread."""

    def __init__(self, index: InvertedIndex):
        self.index = index
        self.results: Dict[str, List[QueryResult]] = {}
        self.logger = logging.getLogger(__name__)

    def parse_query(self, line: str, exact: bool):
        stems = text.unique_stems(line)
        joined = text.join_query(stems)
        if not stems or joined in self.results:
            return

        self.results[joined] = self.index.search(stems, exact)
        self.logger.debug(f"Query '{joined}' matched {len(self.results[joined])} locations")

        monitor = get_monitor()
        if monitor:
            monitor.record_query(joined)

    def get_results(self) -> Dict[str, List[QueryResult]]:
        return {query: self.results[query] for query in sorted(self.results)}


class QueryTask:
    """Searches one query line on a worker thread."""

    def __init__(self, handler: 'ConcurrentQueryHandler', line: str, exact: bool):
        self.handler = handler
        self.line = line
        self.exact = exact

    def __call__(self):
        handler = self.handler
        stems = text.unique_stems(self.line)
        joined = text.join_query(stems)

        with handler._lock:
            if not stems or joined in handler.results or joined in handler._in_progress:
                return
            handler._in_progress.add(joined)

        try:
            results = handler.index.search(stems, self.exact)
            with handler._lock:
                handler.results[joined] = results
        finally:
            with handler._lock:
                handler._in_progress.discard(joined)

        handler.logger.debug(f"Query '{joined}' matched {len(results)} locations")
        monitor = get_monitor()
        if monitor:
            monitor.record_query(joined)


class ConcurrentQueryHandler(QueryHandlerInterface):
    """Searches every query line as a separate work queue task."""

    def __init__(self, index: ConcurrentInvertedIndex, queue: WorkQueue):
        self.index = index
        self.queue = queue
        self.results: Dict[str, List[QueryResult]] = {}
        self.logger = logging.getLogger(__name__)

        # Guards results and _in_progress
        self._lock = threading.Lock()
        self._in_progress: Set[str] = set()

    def parse_query(self, line: str, exact: bool):
        self.queue.execute(QueryTask(self, line, exact))

    def perform_search(self, exact: bool, query_path: Union[str, Path]):
        super().perform_search(exact, query_path)
        self.queue.finish()

    def get_results(self) -> Dict[str, List[QueryResult]]:
        with self._lock:
            return {query: self.results[query] for query in sorted(self.results)}

    def search_now(self, line: str, exact: bool) -> List[QueryResult]:
        """
        Return the results for one query line, searching it first if no
        equivalent query has been searched yet.
        """
        stems = text.unique_stems(line)
        if not stems:
            return []
        joined = text.join_query(stems)

        with self._lock:
            if joined in self.results:
                return self.results[joined]

        self.queue.execute(QueryTask(self, line, exact))
        self.queue.finish()

        with self._lock:
            return self.results.get(joined, [])
