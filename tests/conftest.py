"""Shared fixtures and helpers for tests."""

import sys
from pathlib import Path

import pytest

from pathfinder.config import Config

_REPO_ROOT = Path(__file__).parent.parent

STUB_SERVER = _REPO_ROOT / "tests" / "fixtures" / "stub_lsp_server.py"


# ---------------------------------------------------------------------------
# Auto-marker: tag tests as "unit" or "integration" based on directory
# ---------------------------------------------------------------------------


def pytest_collection_modifyitems(items: list[pytest.Item]) -> None:
    for item in items:
        test_path = Path(str(item.fspath))
        rel = test_path.relative_to(_REPO_ROOT / "tests")
        parts = rel.parts
        if parts and parts[0] == "integration":
            item.add_marker(pytest.mark.integration)
        else:
            item.add_marker(pytest.mark.unit)


# ---------------------------------------------------------------------------
# Shared fixtures
# ---------------------------------------------------------------------------


@pytest.fixture
def stub_command() -> list[str]:
    """Command line that runs the stub language server with this interpreter."""
    return [sys.executable, str(STUB_SERVER)]


@pytest.fixture
def stub_config(stub_command: list[str]) -> Config:
    return Config.from_server_spec(["py", "rs"], stub_command)


@pytest.fixture
def source_file(tmp_path: Path) -> Path:
    path = tmp_path / "main.rs"
    path.write_text("fn main() {\n    let sum = add(1, 2);\n}\n\nfn add(a: i32, b: i32) -> i32 {\n    a + b\n}\n")
    return path
