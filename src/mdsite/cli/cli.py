"""CLI entrypoint: Typer app definition and command registration"""

import typer

from mdsite.cli.commands import build_cmd, list_cmd, new_cmd


app = typer.Typer(name="mdsite", no_args_is_help=True, help="Markdown blog -> static site (HTML, RSS, JSON)")

app.command(name="build")(build_cmd)
app.command(name="list")(list_cmd)
app.command(name="new")(new_cmd)
