"""
Builds an inverted index from text files, sequentially or on a work queue.
"""

import logging
from pathlib import Path
from typing import Union

from . import text
from .file_finder import find_text_files
from ..concurrency.work_queue import WorkQueue
from ..storage.inverted_index import InvertedIndex
from ..storage.concurrent_index import ConcurrentInvertedIndex
from ..utils.logger import get_index_logger
from ..utils.monitoring import get_monitor


logger = get_index_logger(__name__)


def index_file(path: Union[str, Path], index: InvertedIndex) -> int:
    """
    Stream path line by line and add every stemmed word to index. Positions
    start at 1 and continue across lines.

    Returns:
        number of words read

    Raises:
        OSError: if the file cannot be opened or read
        UnicodeDecodeError: if the file is not valid UTF-8
    """
    location = str(path)
    position = 0

    with open(path, 'r', encoding='utf-8') as file:
        for line in file:
            for word in text.parse(line):
                position += 1
                index.add_item(text.stem(word), location, position)

    return position


def safe_index_file(path: Union[str, Path], index: InvertedIndex) -> bool:
    """Index one file, logging and counting it as failed if it cannot be read."""
    monitor = get_monitor()
    try:
        words = index_file(path, index)
    except (OSError, UnicodeDecodeError) as e:
        logger.log_location_event(logging.WARNING, str(path), f"could not read file {path}: {e}")
        if monitor:
            monitor.record_file_failed(str(path))
        return False

    logger.log_location_event(logging.DEBUG, str(path), f"Indexed {words} words from {path}")
    if monitor:
        monitor.record_file_indexed(str(path))
    return True


class InvertedIndexBuilder:
    """Populates an inverted index from a file or a directory of text files."""

    def __init__(self, index: InvertedIndex):
        self.index = index

    def parse_file(self, path: Path):
        """Index a single file."""
        safe_index_file(path, self.index)

    def create_index(self, start: Union[str, Path]):
        """Index start if it is a file, otherwise every text file below it."""
        files = find_text_files(start)
        logger.info(f"Indexing {len(files)} files from {start}")

        for path in files:
            self.parse_file(path)

    def write_results(self, output_path: Union[str, Path]):
        self.index.write_json(output_path)

    def write_word_counts(self, output_path: Union[str, Path]):
        self.index.write_word_counts(output_path)


class BuilderTask:
    """Indexes one file into a private index and merges it into the shared one."""

    def __init__(self, path: Path, index: ConcurrentInvertedIndex):
        self.path = path
        self.index = index

    def __call__(self):
        local = InvertedIndex()
        if safe_index_file(self.path, local):
            self.index.add_all(local)


class ConcurrentIndexBuilder(InvertedIndexBuilder):
    """InvertedIndexBuilder that indexes each file as a separate work queue task."""

    def __init__(self, index: ConcurrentInvertedIndex, queue: WorkQueue):
        super().__init__(index)
        self.queue = queue

    def parse_file(self, path: Path):
        self.queue.execute(BuilderTask(path, self.index))

    def create_index(self, start: Union[str, Path]):
        super().create_index(start)
        self.queue.finish()
