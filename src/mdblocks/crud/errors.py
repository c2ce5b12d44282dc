"""Document store error taxonomy"""


class StoreError(Exception):
    """Base class for all failures surfaced by the document store."""


class DocumentNotFoundError(StoreError):
    """No open document is registered under the requested id."""

    def __init__(self, doc_id: str):
        super().__init__(f"Document not found: {doc_id}")
        self.doc_id = doc_id


class StoreIOError(StoreError):
    """Reading, writing or creating directories for a document failed."""

    def __init__(self, msg: str, path: str):
        super().__init__(msg)
        self.path = path


class StoreLockError(StoreError):
    """The document map lock could not be acquired in time."""
