"""Shared fixtures for crud unit tests"""

import pytest

from mdblocks.crud.store import DocumentStore
from mdblocks.crud.write_tracker import WriteTracker


DOC_PATH = "notes/doc.md"
DOC_TEXT = "# Title\n\nFirst paragraph.\n\nSecond paragraph.\n"


class MemoryIO:
    """In-memory DocumentIO that logs every write into a shared event list."""

    def __init__(self, events: list):
        self.files: dict[str, str] = {}
        self.writes: list[tuple[str, str]] = []
        self.events = events
        self.fail_writes = False
        self.on_write = None

    def read(self, path: str) -> str:
        if path not in self.files:
            raise FileNotFoundError(2, "No such file or directory", path)
        return self.files[path]

    def write(self, path: str, text: str) -> None:
        self.events.append(("write", path))
        if self.on_write:
            self.on_write()
        if self.fail_writes:
            raise PermissionError(13, "Permission denied", path)
        self.files[path] = text
        self.writes.append((path, text))


class RecordingTracker(WriteTracker):
    """WriteTracker that also logs record_write calls into the event list."""

    def __init__(self, events: list):
        super().__init__()
        self.events = events

    def record_write(self, path: str) -> None:
        self.events.append(("record", path))
        super().record_write(path)


@pytest.fixture(name="events")
def events_fixture():
    return []


@pytest.fixture(name="io")
def io_fixture(events):
    io = MemoryIO(events)
    io.files[DOC_PATH] = DOC_TEXT
    return io


@pytest.fixture(name="tracker")
def tracker_fixture(events):
    return RecordingTracker(events)


@pytest.fixture(name="store")
def store_fixture(io, tracker):
    return DocumentStore(io, tracker, lock_timeout=1.0)


@pytest.fixture(name="doc_id")
def doc_id_fixture(store):
    """Open the sample document and return its id."""
    return store.open_document(DOC_PATH).doc_id


@pytest.fixture(name="doc_path")
def doc_path_fixture():
    return DOC_PATH


@pytest.fixture(name="doc_text")
def doc_text_fixture():
    return DOC_TEXT
