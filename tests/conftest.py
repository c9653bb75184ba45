from __future__ import annotations

import sys
from pathlib import Path
from typing import Any

import pytest
from rich.console import Console
from typer.testing import CliRunner

ROOT = Path(__file__).resolve().parent.parent
SRC = ROOT / "src"
if str(SRC) not in sys.path:
    sys.path.insert(0, str(SRC))

_KEY_VARS = (
    "ANTHROPIC_API_KEY",
    "OPENAI_API_KEY",
    "AUTOCOMMIT_MODEL",
    "AUTOCOMMIT_LOG_LEVEL",
    "AUTOCOMMIT_MAX_DIFF_SIZE",
)


@pytest.fixture
def runner() -> CliRunner:
    return CliRunner()


@pytest.fixture(autouse=True)
def isolate_config(tmp_path: Path, monkeypatch: Any) -> Path:
    """Point config at a temp path and keep real keys and .env files out of tests."""
    cfg_path = tmp_path / "config.toml"
    monkeypatch.setenv("AUTOCOMMIT_CONFIG", str(cfg_path))
    for name in _KEY_VARS:
        monkeypatch.delenv(name, raising=False)
    monkeypatch.chdir(tmp_path)
    return cfg_path


@pytest.fixture(autouse=True)
def capture_console(monkeypatch: Any) -> Console:
    """Use an in-memory Rich console during tests."""
    test_console = Console(record=True, width=120)
    import autocommit.commands.commit as commit_cmd
    import autocommit.commands.pr as pr_cmd
    import autocommit.core.console as core_console
    import autocommit.core.runtime as runtime
    import autocommit.main as main_module

    for module in (core_console, commit_cmd, pr_cmd, runtime, main_module):
        monkeypatch.setattr(module, "console", test_console)
    return test_console
