"""Tests for configuration parsing and validation."""

from __future__ import annotations

from pathlib import Path

import pytest

from pathfinder.config import Config, get_log_level
from pathfinder.lsp.errors import ConfigError


def test_parse_valid_config() -> None:
    config = Config.from_json_str(
        '{"server": {"extensions": ["js", "ts"], "command": ["typescript-language-server", "--stdio"], "rootDir": "."}}'
    )
    assert config.server.extensions == ["js", "ts"]
    assert config.server.executable == "typescript-language-server"
    assert config.server.arguments == ["--stdio"]
    assert config.server.root_dir == Path(".")


def test_root_dir_defaults_to_current() -> None:
    config = Config.from_json_str('{"server": {"extensions": ["rs"], "command": ["rust-analyzer"]}}')
    assert config.server.root_dir == Path(".")


@pytest.mark.parametrize(
    ("text", "message"),
    [
        ('{"server": {"extensions": [], "command": ["server1"]}}', "no extensions"),
        ('{"server": {"extensions": ["py"], "command": []}}', "empty command"),
        ('{"server": {"extensions": ["py"]}}', "failed to parse"),
        ("not json", "failed to parse"),
    ],
)
def test_reject_invalid_config(text: str, message: str) -> None:
    with pytest.raises(ConfigError, match=message):
        Config.from_json_str(text)


def test_from_file(tmp_path: Path) -> None:
    path = tmp_path / "pathfinder.json"
    path.write_text('{"server": {"extensions": ["py"], "command": ["pyright-langserver", "--stdio"], "rootDir": "src"}}')
    config = Config.from_file(path)
    assert config.server.root_dir == Path("src")


def test_from_missing_file(tmp_path: Path) -> None:
    with pytest.raises(ConfigError, match="failed to read config file"):
        Config.from_file(tmp_path / "nope.json")


def test_from_server_spec() -> None:
    config = Config.from_server_spec(["py", "pyi"], ["uv", "run", "pyright-langserver", "--stdio"])
    assert config.has_extension("py")
    assert config.has_extension(".pyi")
    assert not config.has_extension("rs")
    assert config.server.arguments == ["run", "pyright-langserver", "--stdio"]


def test_from_server_spec_requires_extensions() -> None:
    with pytest.raises(ConfigError):
        Config.from_server_spec([], ["rust-analyzer"])


class TestResolveRootDir:
    def test_relative_root(self, tmp_path: Path) -> None:
        (tmp_path / "src").mkdir()
        config = Config.from_json_str('{"server": {"extensions": ["py"], "command": ["x"], "rootDir": "src"}}')
        assert config.server.resolve_root_dir(tmp_path) == (tmp_path / "src").resolve()

    def test_absolute_root_ignores_base(self, tmp_path: Path) -> None:
        config = Config.from_server_spec(["py"], ["x"])
        config.server.root_dir = tmp_path
        assert config.server.resolve_root_dir(Path("/nonexistent")) == tmp_path.resolve()

    def test_missing_root(self, tmp_path: Path) -> None:
        config = Config.from_server_spec(["py"], ["x"])
        with pytest.raises(ConfigError, match="failed to resolve root directory"):
            config.server.resolve_root_dir(tmp_path / "missing")


def test_log_level_from_env(monkeypatch: pytest.MonkeyPatch) -> None:
    monkeypatch.setenv("LOG_LEVEL", "debug")
    assert get_log_level() == "DEBUG"
    monkeypatch.delenv("LOG_LEVEL")
    assert get_log_level() == "INFO"
