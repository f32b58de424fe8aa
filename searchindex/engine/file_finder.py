"""
Finds the text files to index under a starting path.
"""

import logging
import os
from pathlib import Path
from typing import Dict, List, Tuple, Union


TEXT_EXTENSIONS = ('.txt', '.text')

logger = logging.getLogger(__name__)


def is_text_file(path: Path) -> bool:
    """True for regular, non-hidden files ending in .txt or .text (any case)."""
    name = path.name.lower()
    return path.is_file() and name.endswith(TEXT_EXTENSIONS) and not name.startswith('.')


def _report_walk_error(error: OSError):
    logger.warning(f"could not read directory {error.filename}: {error.strerror or error}")


def find_text_files(start: Union[str, Path]) -> List[Path]:
    """
    Return the text files to index. A file is returned as is, whatever its
    extension; a directory is walked recursively following symbolic links.
    A link back to a directory already on the current path is not followed.
    """
    start = Path(start)
    if not start.is_dir():
        return [start]

    entered: Dict[str, Tuple[int, int]] = {}
    found = []
    for root, dirs, files in os.walk(start, followlinks=True, onerror=_report_walk_error):
        try:
            stat = os.stat(root)
        except OSError as e:
            _report_walk_error(e)
            dirs[:] = []
            continue

        key = (stat.st_dev, stat.st_ino)
        ancestors = {entered[str(parent)] for parent in Path(root).parents if str(parent) in entered}
        if key in ancestors:
            logger.warning(f"Skipping directory cycle at {root}")
            dirs[:] = []
            continue
        entered[str(Path(root))] = key

        for name in files:
            path = Path(root) / name
            if is_text_file(path):
                found.append(path)

    return sorted(found)
