import typer

from pathfinder.cli.definition import definition
from pathfinder.cli.serve import serve

app = typer.Typer(
    name="pathfinder",
    help="Pathfinder: MCP server bridging to Language Server Protocol servers.",
    no_args_is_help=True,
    context_settings={"help_option_names": ["-h", "--help"]},
)

app.command(
    "serve",
    epilog=(
        "Examples: pathfinder serve -e py -- pyright-langserver --stdio; "
        "pathfinder serve -e rs -w /path/to/project -- rust-analyzer"
    ),
)(serve)
app.command("definition")(definition)


def main() -> None:
    app()
