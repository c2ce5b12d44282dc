"""Request handlers: the JSON-shaped command surface over DocumentStore.

Each handler takes the shared store plus plain arguments, validates inbound
payloads with pydantic and returns camelCase structures ready for
``json.dumps``. ``dispatch`` routes a named command with keyword arguments in
either snake_case or camelCase.
"""

from typing import Any, Callable

from pydantic import ConfigDict, ValidationError, validate_call
from pydantic.alias_generators import to_snake

from mdblocks.core.utils.logger import get_logger
from mdblocks.crud.models import BlockUpdate
from mdblocks.crud.store import DocumentStore


logger = get_logger(__name__)

# Arguments are coerced and checked before the store sees them; the store
# itself is only isinstance-checked.
validated = validate_call(config=ConfigDict(arbitrary_types_allowed=True))


class RequestError(ValueError):
    """Malformed request: bad command name or arguments."""


class UnknownCommandError(RequestError):
    def __init__(self, command: str):
        super().__init__(f"Unknown command: {command}")
        self.command = command


@validated
def open_document(store: DocumentStore, path: str) -> dict:
    logger.info("open_document: %s", path)
    return store.open_document(path).to_wire()


@validated
def close_document(store: DocumentStore, doc_id: str) -> None:
    logger.info("close_document: %s", doc_id)
    store.close_document(doc_id)


@validated
def get_blocks(store: DocumentStore, doc_id: str, start: int, end: int) -> list[dict]:
    logger.info("get_blocks: %s [%d, %d)", doc_id, start, end)
    return [b.to_wire() for b in store.get_blocks(doc_id, start, end)]


@validated
def update_blocks(store: DocumentStore, doc_id: str, updates: list[BlockUpdate]) -> None:
    """Apply content-only edits; entries may be dicts or BlockUpdate models."""
    logger.info("update_blocks: %s (%d updates)", doc_id, len(updates))
    store.update_blocks(doc_id, updates)


@validated
def update_visible_window(
    store: DocumentStore,
    doc_id: str,
    start_block: int,
    end_block: int,
    window_markdown: str,
    ) -> dict:
    logger.info("update_visible_window: %s [%d, %d)", doc_id, start_block, end_block)
    return store.update_visible_window(doc_id, start_block, end_block, window_markdown).to_wire()


@validated
def save_document(store: DocumentStore, doc_id: str) -> None:
    logger.info("save_document: %s", doc_id)
    store.save_document(doc_id)


@validated
def search_blocks(store: DocumentStore, doc_id: str, query: str) -> list[dict]:
    logger.info("search_blocks: %s query=%r", doc_id, query)
    return [m.to_wire() for m in store.search_blocks(doc_id, query)]


COMMANDS: dict[str, Callable[..., Any]] = {
    "open_document": open_document,
    "close_document": close_document,
    "get_blocks": get_blocks,
    "update_blocks": update_blocks,
    "update_visible_window": update_visible_window,
    "save_document": save_document,
    "search_blocks": search_blocks,
}


def dispatch(store: DocumentStore, command: str, args: dict[str, Any] = None) -> Any:
    """Invoke the handler registered under command with args."""
    if not isinstance(command, str):
        raise RequestError(f"Command must be a string, got {type(command).__name__}")
    if args is None:
        args = {}
    if not isinstance(args, dict):
        raise RequestError(f"Arguments for {command} must be an object, got {type(args).__name__}")
    handler = COMMANDS.get(command)
    if handler is None:
        raise UnknownCommandError(command)

    kwargs = {to_snake(k): v for k, v in args.items()}
    try:
        return handler(store, **kwargs)
    except ValidationError as e:
        raise RequestError(f"Invalid arguments for {command}: {e}") from e
