"""Recent-write registry that lets a filesystem watcher ignore its own echoes.

The store records every path immediately before writing it. A watcher that
receives a modification event asks ``was_recently_written`` and drops the
event when the write came from us rather than from an external editor.
"""

import threading
import time
from typing import Callable

from mdblocks.core.utils.logger import get_logger


logger = get_logger(__name__)


def normalize_path(path: str) -> str:
    """Forward slashes, lowercase: the comparison key for tracked paths."""
    return path.replace("\\", "/").lower()


class WriteTracker:
    """Thread-safe map of normalized path -> monotonic time of the last self-write."""

    def __init__(
        self,
        echo_window_ms: int = 2000,
        retention_s: float = 10.0,
        clock: Callable[[], float] = time.monotonic,
        ):
        self.echo_window = echo_window_ms / 1000.0
        self.retention = retention_s
        self._clock = clock
        self._writes: dict[str, float] = {}
        self._lock = threading.Lock()

    def record_write(self, path: str) -> None:
        """Remember that path is about to be written; prunes stale entries."""
        now = self._clock()
        cutoff = now - self.retention
        with self._lock:
            self._writes[normalize_path(path)] = now
            self._writes = {p: t for p, t in self._writes.items() if t > cutoff}
        logger.debug("Recorded write: %s", path)

    def was_recently_written(self, path: str) -> bool:
        """True if path was recorded within the echo window."""
        with self._lock:
            written_at = self._writes.get(normalize_path(path))
        return written_at is not None and self._clock() - written_at < self.echo_window

    def clear(self) -> None:
        with self._lock:
            self._writes.clear()

    def __len__(self) -> int:
        with self._lock:
            return len(self._writes)
