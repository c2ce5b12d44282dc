"""CLI command implementations"""

import json
import sys
from typing import Annotated, Any, Optional

import typer

from mdblocks import handlers
from mdblocks.config import Settings, load_config
from mdblocks.core.scan import reassemble, scan
from mdblocks.core.utils.diff import change_summary, unified_diff
from mdblocks.core.utils.logger import configure_logging
from mdblocks.crud.errors import StoreError
from mdblocks.services import running


LogLevel = Annotated[Optional[str], typer.Option("--log-level", help="DEBUG, INFO, WARNING or ERROR")]


def _fail(msg: str, cause: Exception = None) -> None:
    """Print a user-friendly error to stderr and exit 1."""
    typer.echo(f"Error: {msg}", err=True)
    if cause:
        typer.echo(f"  {cause}", err=True)
    raise typer.Exit(1)


def _settings(overrides: dict = None) -> Settings:
    """Load config with standard CLI error handling and set up logging."""
    try:
        settings = load_config(overrides=overrides)
    except ValueError as e:
        _fail(str(e))
    configure_logging(settings.log_level)
    return settings


def blocks_cmd(
    path: Annotated[str, typer.Argument(help="Markdown file to scan")],
    as_json: Annotated[bool, typer.Option("--json", help="Emit the document handle as JSON")] = False,
    log_level: LogLevel = None,
    ):
    """Scan a file and list its blocks."""
    settings = _settings(overrides={"log_level": log_level})
    with running(settings) as services:
        try:
            handle = services.store.open_document(path)
        except StoreError as e:
            _fail("Open failed", e)

    if as_json:
        typer.echo(json.dumps(handle.to_wire(), indent=2, ensure_ascii=False))
        return
    for b in handle.blocks:
        extra = f"  {b.row_count}x{b.col_count}" if b.row_count is not None else ""
        typer.echo(
            f"  {b.id:>4}  {b.block_type.value:<15} "
            f"lines {b.start_line}-{b.end_line}  {b.content_hash}{extra}"
        )
    typer.echo(f"{handle.total_blocks} block(s) in {handle.doc_id}")


def check_cmd(
    path: Annotated[str, typer.Argument(help="Markdown file to check")],
    log_level: LogLevel = None,
    ):
    """Diff a file against its canonical block layout; exit 1 if they differ."""
    settings = _settings(overrides={"log_level": log_level})
    with running(settings) as services:
        try:
            text = services.io.read(path)
        except OSError as e:
            _fail(f"Failed to read file '{path}'", e)

    canonical = reassemble(scan(text))
    lines = unified_diff(text, canonical, label=path)
    if not lines:
        typer.echo(f"ok: {path}")
        return
    for line in lines:
        typer.echo(line.rstrip("\n"))
    counts = change_summary(text, canonical)
    typer.echo(f"{path}: {counts['added']} added, {counts['deleted']} deleted, {counts['unchanged']} unchanged")
    raise typer.Exit(1)


def fmt_cmd(
    path: Annotated[str, typer.Argument(help="Markdown file to rewrite")],
    log_level: LogLevel = None,
    ):
    """Rewrite a file in canonical form (one blank line between blocks)."""
    settings = _settings(overrides={"log_level": log_level})
    with running(settings) as services:
        store = services.store
        try:
            text = services.io.read(path)
            doc_id = store.add_document(path, text).doc_id
            if store.render(doc_id) == text:
                typer.echo(f"unchanged: {path}")
                return
            store.mark_dirty(doc_id)
            store.save_document(doc_id)
        except (StoreError, OSError) as e:
            _fail("Format failed", e)
    typer.echo(f"formatted: {path}")


def search_cmd(
    path: Annotated[str, typer.Argument(help="Markdown file to search")],
    query: Annotated[str, typer.Argument(help="Case-insensitive text to find")],
    log_level: LogLevel = None,
    ):
    """Print the first match in each block as block:line: text."""
    settings = _settings(overrides={"log_level": log_level})
    with running(settings) as services:
        try:
            doc_id = services.store.open_document(path).doc_id
            matches = services.store.search_blocks(doc_id, query)
        except StoreError as e:
            _fail("Search failed", e)

    if not matches:
        typer.echo("No matches.")
        raise typer.Exit(1)
    for m in matches:
        typer.echo(f"{m.block_id}:{m.start_line}: {m.match_text}")


def _handle_request(store, raw: str) -> dict[str, Any]:
    """Run one JSON request line and build its response object."""
    try:
        request = json.loads(raw)
    except json.JSONDecodeError as e:
        return {"id": None, "ok": False, "error": f"Invalid JSON: {e}"}
    if not isinstance(request, dict):
        return {"id": None, "ok": False, "error": "Request must be a JSON object"}

    req_id = request.get("id")
    try:
        result = handlers.dispatch(store, request.get("command", ""), request.get("args"))
    except (StoreError, ValueError) as e:
        return {"id": req_id, "ok": False, "error": str(e)}
    return {"id": req_id, "ok": True, "result": result}


def serve_cmd(log_level: LogLevel = None):
    """Serve store commands as JSON lines on stdin/stdout until EOF."""
    settings = _settings(overrides={"log_level": log_level})
    with running(settings) as services:
        for raw in sys.stdin:
            if not raw.strip():
                continue
            response = _handle_request(services.store, raw)
            typer.echo(json.dumps(response, ensure_ascii=False))
