import logging

import typer

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

logger = logging.getLogger(__name__)


def serve(
    command: ServerCommandArgument = None,
    extension: ExtensionOption = None,
    workspace: WorkspaceOption = None,
    config: ConfigOption = None,
    transport: str = "stdio",
) -> None:
    """Start the MCP server in front of a language server."""
    from pathfinder.mcp.server import create_mcp_server
    from pathfinder.service import PathfinderService

    configure_logging()
    try:
        cfg = build_config(config, extension, command)
        workspace_base = resolve_workspace(workspace)
    except PathfinderError as err:
        err_console.print(f"[red]{err}[/red]")
        raise typer.Exit(1) from err

    logger.info(
        "Starting pathfinder (workspace: %s, extensions: %s, command: %s)",
        workspace_base,
        cfg.server.extensions,
        cfg.server.command,
    )
    service = PathfinderService(cfg, workspace_base)
    server = create_mcp_server(service)
    server.run(transport=transport)  # type: ignore[arg-type]
