"""Option types and helpers shared by CLI commands."""

from __future__ import annotations

from pathlib import Path
from typing import Annotated

import typer
from rich.console import Console

from pathfinder.config import Config
from pathfinder.lsp.errors import ConfigError

err_console = Console(stderr=True)

ExtensionOption = Annotated[
    list[str] | None,
    typer.Option("--extension", "-e", metavar="EXT", help="File extension to handle (repeatable), e.g. py, rs."),
]
WorkspaceOption = Annotated[
    Path | None,
    typer.Option("--workspace", "-w", help="Workspace base directory (defaults to current directory)."),
]
ConfigOption = Annotated[
    Path | None,
    typer.Option("--config", "-c", help="JSON config file describing the language server."),
]
ServerCommandArgument = Annotated[
    list[str] | None,
    typer.Argument(metavar="-- CMD [ARGS]...", help="Language server command and arguments, after '--'."),
]


def build_config(config_file: Path | None, extensions: list[str] | None, command: list[str] | None) -> Config:
    if config_file is not None:
        if extensions or command:
            raise ConfigError("--config cannot be combined with --extension or a server command")
        return Config.from_file(config_file)
    if not extensions:
        raise ConfigError("at least one --extension must be specified")
    if not command:
        raise ConfigError("server command cannot be empty (pass it after '--')")
    return Config.from_server_spec(extensions, command)


def resolve_workspace(workspace: Path | None) -> Path:
    if workspace is None:
        return Path.cwd()
    try:
        return workspace.resolve(strict=True)
    except OSError as exc:
        raise ConfigError(f"failed to canonicalize workspace path: {workspace}") from exc
