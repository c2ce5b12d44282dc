"""Filesystem collaborator used by the document store to load and persist text"""

from pathlib import Path
from typing import Protocol


class DocumentIO(Protocol):
    """Read/write interface the store depends on; swap in fakes for tests."""

    def read(self, path: str) -> str:
        ...

    def write(self, path: str, text: str) -> None:
        ...


class LocalFileIO:
    """DocumentIO backed by the local filesystem."""

    def __init__(self, encoding: str = "utf-8"):
        self.encoding = encoding

    def read(self, path: str) -> str:
        return Path(path).read_text(encoding=self.encoding)

    def write(self, path: str, text: str) -> None:
        """Write text, creating parent directories first."""
        p = Path(path)
        p.parent.mkdir(parents=True, exist_ok=True)
        p.write_text(text, encoding=self.encoding)
