"""Language server configuration from a JSON file or command-line flags.

Example file::

    {"server": {"extensions": ["rs"], "command": ["rust-analyzer"], "rootDir": "."}}
"""

from __future__ import annotations

import os
from collections.abc import Sequence
from pathlib import Path

from pydantic import BaseModel, ConfigDict, Field, ValidationError

from pathfinder.lsp.errors import ConfigError

DEFAULT_LOG_LEVEL = "INFO"


def get_log_level() -> str:
    return os.getenv("LOG_LEVEL", DEFAULT_LOG_LEVEL).upper()


class ServerConfig(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    extensions: list[str]
    command: list[str]
    root_dir: Path = Field(default=Path("."), alias="rootDir")

    @property
    def executable(self) -> str:
        return self.command[0]

    @property
    def arguments(self) -> list[str]:
        return self.command[1:]

    def resolve_root_dir(self, base: Path) -> Path:
        path = self.root_dir if self.root_dir.is_absolute() else base / self.root_dir
        try:
            return path.resolve(strict=True)
        except OSError as exc:
            raise ConfigError(f"failed to resolve root directory: {path}") from exc


class Config(BaseModel):
    server: ServerConfig

    @classmethod
    def from_file(cls, path: Path) -> Config:
        try:
            content = path.read_text(encoding="utf-8")
        except OSError as exc:
            raise ConfigError(f"failed to read config file: {path}") from exc
        return cls.from_json_str(content)

    @classmethod
    def from_json_str(cls, text: str) -> Config:
        try:
            config = cls.model_validate_json(text)
        except ValidationError as exc:
            raise ConfigError(f"failed to parse config JSON: {exc}") from exc
        config.validate_server()
        return config

    @classmethod
    def from_server_spec(cls, extensions: Sequence[str], command: Sequence[str]) -> Config:
        config = cls(server=ServerConfig(extensions=list(extensions), command=list(command)))
        config.validate_server()
        return config

    def validate_server(self) -> None:
        if not self.server.extensions:
            raise ConfigError("server has no extensions")
        if not self.server.command or not self.server.command[0]:
            raise ConfigError("server has empty command")

    def has_extension(self, extension: str) -> bool:
        normalized = extension.lstrip(".")
        return any(e.lstrip(".") == normalized for e in self.server.extensions)
