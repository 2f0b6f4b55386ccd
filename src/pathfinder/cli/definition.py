import asyncio
from typing import Annotated

import typer
from rich.console import Console
from rich.table import Table

from pathfinder.cli.options import (
    ConfigOption,
    ExtensionOption,
    ServerCommandArgument,
    WorkspaceOption,
    build_config,
    err_console,
    resolve_workspace,
)
from pathfinder.logging_setup import configure_logging
from pathfinder.lsp.errors import PathfinderError
from pathfinder.models import DefinitionRequest, DefinitionResponse
from pathfinder.service import PathfinderService

console = Console()


def _render_targets(response: DefinitionResponse) -> None:
    table = Table(show_lines=False)
    for header in ("uri", "start", "end"):
        table.add_column(header)
    for target in response.targets:
        r = target.range
        table.add_row(target.uri, f"{r.start_line}:{r.start_character}", f"{r.end_line}:{r.end_character}")
    console.print(table)
    console.print(f"({len(response.targets)} targets)")


def definition(
    uri: Annotated[str, typer.Option("--uri", help="file:// URI of the document.")],
    line: Annotated[int, typer.Option("--line", min=0, help="Zero-based line index.")],
    character: Annotated[int, typer.Option("--character", min=0, help="Zero-based character index.")],
    command: ServerCommandArgument = None,
    extension: ExtensionOption = None,
    workspace: WorkspaceOption = None,
    config: ConfigOption = None,
) -> None:
    """Run a single definition lookup and print the targets."""
    configure_logging()

    async def _run() -> DefinitionResponse:
        cfg = build_config(config, extension, command)
        async with PathfinderService(cfg, resolve_workspace(workspace)) as service:
            return await service.definition(DefinitionRequest(uri=uri, line=line, character=character))

    try:
        response = asyncio.run(_run())
    except (PathfinderError, OSError) as err:
        err_console.print(f"[red]definition failed: {err}[/red]")
        raise typer.Exit(1) from err

    _render_targets(response)
