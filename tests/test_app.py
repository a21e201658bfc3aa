"""Tests for cmdexplorer.app.

Covers:
- create_app exposes explored commands with the root callback flags
- --version, --verbose, --quiet and --no-color handling
- run exit codes: success, CmdExplorerError subclasses, usage errors
- Unexpected exceptions write a crash log and exit 1
- KeyboardInterrupt exits 130
- main builds the container from entry points
"""

from __future__ import annotations

import logging
from pathlib import Path
from unittest.mock import patch

import pytest
import typer

from cmdexplorer import __version__
from cmdexplorer.app import create_app, main, run
from cmdexplorer.exceptions import CommandDefinitionError, InvalidUsageError
from cmdexplorer.exit_codes import (
    EXIT_COMMAND_DEFINITION_ERROR,
    EXIT_GENERIC_FAILURE,
    EXIT_INTERRUPTED,
    EXIT_INVALID_USAGE,
    EXIT_SUCCESS,
)
from cmdexplorer.metadata import command, option, positional
from cmdexplorer.models import ExplorerConfig
from cmdexplorer.output import get_output


class Greeter:
    def __init__(self) -> None:
        self.greeted: list[str] = []

    @command("greet", describe="Say hello")
    @option("shout", type="boolean")
    @positional("who")
    def greet(self, shout, who):
        self.greeted.append(who.upper() if shout else who)

    @command("reject")
    def reject(self):
        raise InvalidUsageError("who must not be empty")

    @command("crash")
    async def crash(self):
        raise ValueError("unexpected")


class Conflicting:
    @command("greet")
    def greet(self):
        pass


CONFIG = ExplorerConfig(prog_name="greeter")


@pytest.fixture(autouse=True)
def _no_signal_handlers(monkeypatch: pytest.MonkeyPatch) -> None:
    monkeypatch.setattr("cmdexplorer.app._setup_signal_handlers", lambda: None)


@pytest.fixture(autouse=True)
def _reset_package_logger():
    yield
    package_logger = logging.getLogger("cmdexplorer")
    for handler in list(package_logger.handlers):
        package_logger.removeHandler(handler)
    package_logger.setLevel(logging.NOTSET)


# ------------------------------------------------------------------ #
# create_app
# ------------------------------------------------------------------ #


class TestCreateApp:
    def test_returns_typer_app(self, container_factory) -> None:
        app = create_app(container_factory(Greeter()), CONFIG)
        assert isinstance(app, typer.Typer)

    def test_version(self, container_factory, cli_runner) -> None:
        app = create_app(container_factory(Greeter()), CONFIG)
        result = cli_runner.invoke(app, ["--version"])
        assert result.exit_code == 0
        assert f"cmdexplorer {__version__}" in result.output

    def test_runs_command(self, container_factory, cli_runner) -> None:
        greeter = Greeter()
        app = create_app(container_factory(greeter), CONFIG)
        result = cli_runner.invoke(app, ["greet", "--shout", "ada"])
        assert result.exit_code == 0, result.output
        assert greeter.greeted == ["ADA"]

    def test_root_flags_configure_output(self, container_factory, cli_runner) -> None:
        app = create_app(container_factory(Greeter()), CONFIG)
        result = cli_runner.invoke(app, ["--quiet", "--verbose", "--no-color", "greet", "x"])
        assert result.exit_code == 0, result.output
        output = get_output()
        assert output.is_quiet is True
        assert output.is_verbose is True

    def test_verbose_enables_debug_logging(self, container_factory, cli_runner) -> None:
        app = create_app(container_factory(Greeter()), CONFIG)
        cli_runner.invoke(app, ["-v", "greet", "x"])
        assert logging.getLogger("cmdexplorer").level == logging.DEBUG

    def test_conflicting_names_raise(self, container_factory) -> None:
        with pytest.raises(CommandDefinitionError):
            create_app(container_factory(Greeter(), Conflicting()), CONFIG)

    def test_resolves_config_when_omitted(self, container_factory, isolated_config: Path) -> None:
        (isolated_config / "cmdexplorer.json").write_text('{"prog_name": "from-file"}')
        app = create_app(container_factory(Greeter()))
        assert app.info.name == "from-file"


# ------------------------------------------------------------------ #
# run
# ------------------------------------------------------------------ #


class TestRun:
    def test_success_exits_zero(self, container_factory) -> None:
        greeter = Greeter()
        with pytest.raises(SystemExit) as exc_info:
            run(container_factory(greeter), ["greet", "ada"], config=CONFIG)
        assert exc_info.value.code == EXIT_SUCCESS
        assert greeter.greeted == ["ada"]

    def test_usage_error_exits_two(self, container_factory) -> None:
        with pytest.raises(SystemExit) as exc_info:
            run(container_factory(Greeter()), ["greet"], config=CONFIG)
        assert exc_info.value.code == EXIT_INVALID_USAGE

    def test_handler_error_uses_exit_code(self, container_factory, capsys) -> None:
        with pytest.raises(SystemExit) as exc_info:
            run(container_factory(Greeter()), ["--no-color", "reject"], config=CONFIG)
        assert exc_info.value.code == EXIT_INVALID_USAGE
        assert "who must not be empty" in capsys.readouterr().err

    def test_definition_error_exits_three(self, container_factory) -> None:
        with pytest.raises(SystemExit) as exc_info:
            run(container_factory(Greeter(), Conflicting()), ["greet", "x"], config=CONFIG)
        assert exc_info.value.code == EXIT_COMMAND_DEFINITION_ERROR

    def test_unexpected_error_writes_crash_log(
        self, container_factory, isolated_config: Path, capsys
    ) -> None:
        with pytest.raises(SystemExit) as exc_info:
            run(container_factory(Greeter()), ["--no-color", "crash"], config=CONFIG)

        assert exc_info.value.code == EXIT_GENERIC_FAILURE
        logs = list((isolated_config / "data" / "cmdexplorer" / "logs").glob("crash-*.log"))
        assert len(logs) == 1
        assert "ValueError: unexpected" in logs[0].read_text()
        assert "Debug log:" in capsys.readouterr().err

    def test_keyboard_interrupt_exits_130(self, container_factory, capsys) -> None:
        with patch("cmdexplorer.app.create_app", side_effect=KeyboardInterrupt), pytest.raises(
            SystemExit
        ) as exc_info:
            run(container_factory(Greeter()), ["greet", "x"], config=CONFIG)
        assert exc_info.value.code == EXIT_INTERRUPTED
        assert "Cancelled." in capsys.readouterr().err


# ------------------------------------------------------------------ #
# main
# ------------------------------------------------------------------ #


class TestMain:
    def test_loads_entry_points_and_runs(self, isolated_config: Path) -> None:
        with patch("cmdexplorer.app.load_modules", return_value=["files"]) as mock_load, patch(
            "cmdexplorer.app.run"
        ) as mock_run:
            main()

        container = mock_load.call_args.args[0]
        assert mock_load.call_args.args[1] == "cmdexplorer.modules"
        assert mock_run.call_args.args[0] is container
        assert mock_run.call_args.kwargs["config"] == ExplorerConfig()

    def test_config_error_exits(self, isolated_config: Path, quiet_output, capsys) -> None:
        (isolated_config / "cmdexplorer.json").write_text("[]")
        with pytest.raises(SystemExit) as exc_info:
            main()
        assert exc_info.value.code == EXIT_GENERIC_FAILURE
        assert "expected a JSON object" in capsys.readouterr().err
