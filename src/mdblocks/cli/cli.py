"""CLI entrypoint: Typer app definition and command registration"""

import typer

from mdblocks.cli.commands import blocks_cmd, check_cmd, fmt_cmd, search_cmd, serve_cmd


app = typer.Typer(name="mdblocks", no_args_is_help=True, help="Block-level markdown scanning and editing")

app.command(name="blocks")(blocks_cmd)
app.command(name="check")(check_cmd)
app.command(name="fmt")(fmt_cmd)
app.command(name="search")(search_cmd)
app.command(name="serve")(serve_cmd)
