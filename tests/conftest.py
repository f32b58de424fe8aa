import pytest

from searchindex.concurrency.work_queue import WorkQueue
from searchindex.utils.monitoring import initialize_monitoring, reset_monitoring


@pytest.fixture(autouse=True)
def monitor():
    monitor = initialize_monitoring()
    yield monitor
    reset_monitoring()


@pytest.fixture
def queue():
    queue = WorkQueue(3)
    yield queue
    queue.join()


@pytest.fixture
def corpus(tmp_path):
    """A small directory tree of text files."""
    root = tmp_path / "corpus"
    (root / "nested").mkdir(parents=True)

    (root / "animals.txt").write_text("The cat chased the dogs.\nDogs run; cats ran!\n", encoding="utf-8")
    (root / "computers.TEXT").write_text("Computers compute.\nA computer company.\n", encoding="utf-8")
    (root / "nested" / "running.txt").write_text("Running runners run.\n", encoding="utf-8")
    (root / "notes.md").write_text("cat cat cat\n", encoding="utf-8")
    (root / ".hidden.txt").write_text("cat cat cat\n", encoding="utf-8")
    (root / "empty.txt").write_text("", encoding="utf-8")

    return root


@pytest.fixture
def query_file(tmp_path):
    path = tmp_path / "queries.txt"
    path.write_text("Cats\ncat!\n\n   \nrun dogs\ncomp\nzebra\n", encoding="utf-8")
    return path
