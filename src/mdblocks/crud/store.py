"""In-memory store of open documents split into blocks.

One lock guards the whole id -> DocumentData map. Critical sections are plain
list operations; file reads happen before locking and ``save_document`` only
holds the lock while copying the reassembled text, so a slow disk never
blocks handlers working on other documents.
"""

import re
import threading
from contextlib import contextmanager
from typing import Iterable, Iterator

from mdblocks.core.scan import reassemble, scan
from mdblocks.core.utils.logger import get_logger
from mdblocks.crud.errors import (
    DocumentNotFoundError,
    StoreIOError,
    StoreLockError,
)
from mdblocks.crud.fileio import DocumentIO
from mdblocks.crud.models import (
    BlockContent,
    BlockMeta,
    BlockSearchMatch,
    BlockUpdate,
    DocumentData,
    DocumentHandle,
    WindowUpdateResult,
)
from mdblocks.crud.write_tracker import WriteTracker


logger = get_logger(__name__)


def normalize_doc_id(path: str) -> str:
    """Stable document id for a filesystem path (forward slashes)."""
    return path.replace("\\", "/")


class DocumentStore:
    """Registry of open documents shared by all request handlers."""

    def __init__(self, io: DocumentIO, tracker: WriteTracker, lock_timeout: float = 5.0):
        self._io = io
        self._tracker = tracker
        self._lock_timeout = lock_timeout
        self._lock = threading.Lock()
        self._documents: dict[str, DocumentData] = {}

    @contextmanager
    def _locked(self) -> Iterator[dict[str, DocumentData]]:
        if not self._lock.acquire(timeout=self._lock_timeout):
            raise StoreLockError(f"Lock error: document map busy for more than {self._lock_timeout}s")
        try:
            yield self._documents
        finally:
            self._lock.release()

    @staticmethod
    def _get(docs: dict[str, DocumentData], doc_id: str) -> DocumentData:
        doc = docs.get(doc_id)
        if doc is None:
            raise DocumentNotFoundError(doc_id)
        return doc

    # --- open / close ---

    def open_document(self, path: str) -> DocumentHandle:
        """Read path, scan it into blocks and cache the result."""
        logger.info("Opening document: %s", path)
        try:
            content = self._io.read(path)
        except OSError as e:
            raise StoreIOError(f"Failed to read file '{path}': {e}", path) from e
        return self.add_document(path, content)

    def add_document(self, path: str, content: str) -> DocumentHandle:
        """Scan content already read from path and cache it as a clean document."""
        blocks = scan(content)
        doc_id = normalize_doc_id(path)
        metas = [BlockMeta.from_block(b) for b in blocks]

        with self._locked() as docs:
            docs[doc_id] = DocumentData(doc_id=doc_id, path=path, blocks=blocks)

        logger.info("Opened '%s' (%d blocks)", doc_id, len(blocks))
        return DocumentHandle(doc_id=doc_id, path=path, total_blocks=len(blocks), blocks=metas)

    def close_document(self, doc_id: str) -> None:
        """Forget a document; closing an unknown id is not an error."""
        with self._locked() as docs:
            docs.pop(doc_id, None)
        logger.info("Closed document: %s", doc_id)

    def close_all(self) -> None:
        with self._locked() as docs:
            count = len(docs)
            docs.clear()
        logger.info("Closed %d document(s)", count)

    def list_documents(self) -> list[str]:
        """Ids of all open documents, sorted."""
        with self._locked() as docs:
            return sorted(docs)

    def is_dirty(self, doc_id: str) -> bool:
        with self._locked() as docs:
            return self._get(docs, doc_id).dirty

    def mark_dirty(self, doc_id: str) -> None:
        """Force the next save to write, even without block edits."""
        with self._locked() as docs:
            self._get(docs, doc_id).touch()

    def render(self, doc_id: str) -> str:
        """Reassembled text of the document as it would be saved."""
        with self._locked() as docs:
            return reassemble(self._get(docs, doc_id).blocks)

    # --- reads ---

    def get_blocks(self, doc_id: str, start: int, end: int) -> list[BlockContent]:
        """Markdown for blocks [start, min(end, len)); empty when out of range."""
        with self._locked() as docs:
            doc = self._get(docs, doc_id)
            start = max(start, 0)
            end = min(end, len(doc.blocks))
            return [BlockContent(id=b.id, markdown=b.markdown) for b in doc.blocks[start:end]]

    def get_metadata(self, doc_id: str) -> list[BlockMeta]:
        """Fresh metadata for every block of a document."""
        with self._locked() as docs:
            return [BlockMeta.from_block(b) for b in self._get(docs, doc_id).blocks]

    def search_blocks(self, doc_id: str, query: str) -> list[BlockSearchMatch]:
        """Case-insensitive substring search; first hit per block, in the block's own casing.

        An empty query matches every block with empty match text.
        """
        pattern = re.compile(re.escape(query), re.IGNORECASE)
        with self._locked() as docs:
            doc = self._get(docs, doc_id)
            matches = []
            for block in doc.blocks:
                m = pattern.search(block.markdown)
                if m:
                    matches.append(BlockSearchMatch(
                        block_id=block.id,
                        start_line=block.start_line,
                        match_text=m.group(0),
                    ))
            return matches

    # --- writes ---

    def update_blocks(self, doc_id: str, updates: Iterable[BlockUpdate]) -> int:
        """Replace block bodies in place without changing the block count.

        Unknown block ids are logged and skipped; the rest of the batch still
        applies. Returns the number of blocks updated.
        """
        applied = 0
        with self._locked() as docs:
            doc = self._get(docs, doc_id)
            for upd in updates:
                if 0 <= upd.id < len(doc.blocks):
                    doc.blocks[upd.id].set_markdown(upd.markdown)
                    doc.touch()
                    applied += 1
                else:
                    logger.warning("Block %d not found in %s", upd.id, doc_id)
        return applied

    def update_visible_window(
        self,
        doc_id: str,
        start_block: int,
        end_block: int,
        window_markdown: str,
        ) -> WindowUpdateResult:
        """Re-scan the edited window and splice it over [start_block, end_block).

        Block splits and merges inside the window fall out of the re-scan, so
        callers need not know how many blocks the edit produced. All ids are
        renumbered afterwards.
        """
        new_blocks = scan(window_markdown)
        with self._locked() as docs:
            doc = self._get(docs, doc_id)
            start = min(max(start_block, 0), len(doc.blocks))
            end = min(max(end_block, start), len(doc.blocks))
            for i, b in enumerate(new_blocks):
                b.id = start + i
            doc.blocks[start:end] = new_blocks
            doc.reindex()
            doc.touch()
            metas = [BlockMeta.from_block(b) for b in doc.blocks]

        logger.info("Window updated for '%s': %d total blocks", doc_id, len(metas))
        return WindowUpdateResult(new_total_blocks=len(metas), blocks=metas)

    # --- save ---

    def save_document(self, doc_id: str) -> bool:
        """Reassemble and write the document if dirty. Returns True if written.

        The write tracker is notified strictly before the write. The dirty flag
        is cleared only if no edit arrived while the write was in flight.
        """
        with self._locked() as docs:
            doc = self._get(docs, doc_id)
            if not doc.dirty:
                logger.info("Document '%s' not dirty, skipping save", doc_id)
                return False
            path, content, revision = doc.path, reassemble(doc.blocks), doc.revision

        logger.info("Saving '%s' (%d bytes)", path, len(content.encode("utf-8")))
        self._tracker.record_write(path)
        try:
            self._io.write(path, content)
        except OSError as e:
            raise StoreIOError(f"Failed to write '{path}': {e}", path) from e

        with self._locked() as docs:
            doc = docs.get(doc_id)
            if doc is not None and doc.revision == revision:
                doc.dirty = False

        logger.info("Saved: %s", path)
        return True
