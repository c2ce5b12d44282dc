"""Explicit construction and teardown of the long-lived services"""

from contextlib import contextmanager
from dataclasses import dataclass
from typing import Iterator, Optional

from mdblocks.config import Settings, load_config
from mdblocks.core.utils.logger import get_logger
from mdblocks.crud.fileio import DocumentIO, LocalFileIO
from mdblocks.crud.store import DocumentStore
from mdblocks.crud.write_tracker import WriteTracker


logger = get_logger(__name__)


@dataclass
class Services:
    """Everything a request handler needs, built once at startup."""
    settings: Settings
    io:       DocumentIO
    tracker:  WriteTracker
    store:    DocumentStore

    def stop(self) -> None:
        """Drop all open documents and forget recorded writes."""
        self.store.close_all()
        self.tracker.clear()
        logger.info("%s services stopped", self.settings.app_name)


def start_services(settings: Optional[Settings] = None, io: Optional[DocumentIO] = None) -> Services:
    """Build the file I/O, write tracker and document store for one application run."""
    settings = settings or load_config()
    io = io or LocalFileIO(encoding=settings.encoding)
    tracker = WriteTracker(
        echo_window_ms=settings.echo_window_ms,
        retention_s=settings.echo_retention_s,
    )
    store = DocumentStore(io, tracker, lock_timeout=settings.lock_timeout)
    logger.info("%s services started", settings.app_name)
    return Services(settings=settings, io=io, tracker=tracker, store=store)


@contextmanager
def running(settings: Optional[Settings] = None, io: Optional[DocumentIO] = None) -> Iterator[Services]:
    """Context manager tying service lifetime to a block of code."""
    services = start_services(settings, io)
    try:
        yield services
    finally:
        services.stop()
