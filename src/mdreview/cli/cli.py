"""CLI entrypoint: Typer app definition and command registration"""

import typer

from mdreview.cli.commands import (
    diff_cmd,
    import_cmd,
    init_cmd,
    list_cmd,
    nodes_cmd,
    resolve_cmd,
    show_cmd,
    suggest_cmd,
    versions_cmd,
)


app = typer.Typer(name="mdreview", no_args_is_help=True, help="Review AI-suggested markdown edits")

app.command(name="init")(init_cmd)
app.command(name="import")(import_cmd)
app.command(name="list")(list_cmd)
app.command(name="show")(show_cmd)
app.command(name="diff")(diff_cmd)
app.command(name="nodes")(nodes_cmd)
app.command(name="resolve")(resolve_cmd)
app.command(name="suggest")(suggest_cmd)
app.command(name="versions")(versions_cmd)
