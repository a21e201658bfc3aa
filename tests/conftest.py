"""Shared test fixtures for cmdexplorer.

Provides reusable fixtures for building component containers, creating
isolated config environments, managing output state, and running CLI
commands. These fixtures are automatically discovered by pytest and
available to all test modules without explicit imports.
"""

from __future__ import annotations

from pathlib import Path
from typing import Any

import pytest

from cmdexplorer.container import Module, ModulesContainer
from cmdexplorer.models import ExplorerConfig
from cmdexplorer.output import OutputManager, reset_output, set_output


# ---------------------------------------------------------------------------
# Auto-reset global output state between tests
# ---------------------------------------------------------------------------


@pytest.fixture(autouse=True)
def _reset_output_between_tests() -> None:
    """Reset the global OutputManager after every test.

    The OutputManager caches a Rich console bound to sys.stderr at
    creation time.  When Typer's CliRunner redirects those streams during
    a test and the test finishes, the cached references become stale
    ("I/O operation on closed file").  Resetting forces a fresh manager
    to be created on next use.
    """
    yield
    reset_output()


# ---------------------------------------------------------------------------
# Container helpers
# ---------------------------------------------------------------------------


def make_container(*instances: Any, module: str = "app") -> ModulesContainer:
    """Build a one-module container holding *instances* in order.

    ``None`` entries become providers without an instance.
    """
    container = ModulesContainer()
    mod = container.add_module(Module(module))
    for position, instance in enumerate(instances):
        if instance is None:
            mod.add_provider(f"provider_{position}")
        else:
            mod.add_provider(f"{type(instance).__name__}_{position}", instance)
    return container


@pytest.fixture
def container_factory():
    """Return :func:`make_container` for tests that build their own containers."""
    return make_container


@pytest.fixture
def strict_config() -> ExplorerConfig:
    """Explorer config that rejects duplicate parameter indices."""
    return ExplorerConfig(duplicate_index="error")


# ---------------------------------------------------------------------------
# Config isolation fixture
# ---------------------------------------------------------------------------


@pytest.fixture
def isolated_config(tmp_path: Path, monkeypatch: pytest.MonkeyPatch) -> Path:
    """Isolate configuration to a temporary directory.

    Sets XDG_CONFIG_HOME and XDG_DATA_HOME to subdirectories of tmp_path so
    that tests never touch real user config. Clears all CMDEXPLORER_*
    environment variables and changes the working directory to tmp_path.

    Returns:
        The tmp_path root directory for additional file creation.
    """
    monkeypatch.setattr("cmdexplorer.config._is_xdg_platform", lambda: True)
    monkeypatch.setenv("XDG_CONFIG_HOME", str(tmp_path / "config"))
    monkeypatch.setenv("XDG_DATA_HOME", str(tmp_path / "data"))

    for var in [
        "CMDEXPLORER_PROG_NAME",
        "CMDEXPLORER_DUPLICATE_INDEX",
        "CMDEXPLORER_ENTRY_POINT_GROUP",
    ]:
        monkeypatch.delenv(var, raising=False)

    monkeypatch.chdir(tmp_path)
    return tmp_path


# ---------------------------------------------------------------------------
# Output fixtures
# ---------------------------------------------------------------------------


@pytest.fixture
def quiet_output() -> OutputManager:
    """Install a quiet, colourless output manager for the duration of a test."""
    output = OutputManager(no_color=True, quiet=True)
    set_output(output)
    yield output
    reset_output()


# ---------------------------------------------------------------------------
# CLI runner fixture
# ---------------------------------------------------------------------------


@pytest.fixture
def cli_runner():
    """Typer CLI test runner.

    Returns a CliRunner instance that captures stdout/stderr and
    provides a consistent interface for invoking Typer apps in tests.
    """
    from typer.testing import CliRunner

    return CliRunner()
