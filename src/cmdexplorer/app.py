"""Typer application factory and CLI entry point for cmdexplorer.

This module wires the explorer and the generator together: it scans a
component container for ``@command`` handlers, registers them on a Typer
application with a root callback for the shared ``--version``, ``--verbose``,
``--quiet`` and ``--no-color`` flags, and runs it.

:func:`run` is what applications call from their own entry point::

    container = ModulesContainer()
    container.add_module(Module("files")).add_component(FileCommands())
    run(container)

:func:`main` is the ``cmdexplorer`` console script declared in
``pyproject.toml``; it builds the container from installed entry points.
Unhandled exceptions are written to a crash log under the data directory.

See Also:
    :mod:`cmdexplorer.config`: Configuration resolution.
    :mod:`cmdexplorer.output`: Output formatting initialised in the root callback.
"""

from __future__ import annotations

import logging
import signal
import sys
import traceback
from datetime import datetime
from typing import Any, Optional, Sequence

import typer

from cmdexplorer import __version__
from cmdexplorer.container import ModulesContainer, load_modules
from cmdexplorer.exit_codes import EXIT_GENERIC_FAILURE, EXIT_INTERRUPTED
from cmdexplorer.explorer import CommandExplorer
from cmdexplorer.generator import build_command_app
from cmdexplorer.metadata.registry import MetadataRegistry
from cmdexplorer.models import ExplorerConfig

logger = logging.getLogger(__name__)


def _version_callback(value: bool) -> None:
    """Print version and exit when --version is passed."""
    if value:
        typer.echo(f"cmdexplorer {__version__}")
        raise typer.Exit()


def main_callback(
    ctx: typer.Context,
    version: bool = typer.Option(
        False,
        "--version",
        callback=_version_callback,
        is_eager=True,
        help="Show version and exit.",
    ),
    verbose: bool = typer.Option(
        False, "--verbose", "-v", help="Enable debug output."
    ),
    quiet: bool = typer.Option(
        False, "--quiet", "-q", help="Suppress non-essential output."
    ),
    no_color: bool = typer.Option(
        False, "--no-color", help="Disable color output."
    ),
) -> None:
    """Root callback executed before every command.

    Initialises the global :class:`~cmdexplorer.output.OutputManager` and
    logging from CLI flags, and stores the flags in ``ctx.obj`` so command
    handlers can read them through the Click context.
    """
    from cmdexplorer.output import OutputManager, set_output

    set_output(OutputManager(no_color=no_color, quiet=quiet, verbose=verbose))
    _configure_logging(verbose)

    ctx.ensure_object(dict)
    ctx.obj["verbose"] = verbose
    ctx.obj["quiet"] = quiet
    ctx.obj["no_color"] = no_color


def _configure_logging(verbose: bool) -> None:
    """Send cmdexplorer log records to stderr, at DEBUG level with ``--verbose``."""
    package_logger = logging.getLogger("cmdexplorer")
    package_logger.setLevel(logging.DEBUG if verbose else logging.WARNING)
    if not package_logger.handlers:
        handler = logging.StreamHandler(sys.stderr)
        handler.setFormatter(logging.Formatter("%(levelname)s %(name)s: %(message)s"))
        package_logger.addHandler(handler)


def create_app(
    container: ModulesContainer,
    config: Optional[ExplorerConfig] = None,
    registry: Optional[MetadataRegistry] = None,
) -> typer.Typer:
    """Explore *container* and return a Typer app exposing every command found.

    Args:
        container: Component container to scan.
        config: Effective configuration. Defaults to
            :func:`~cmdexplorer.config.resolve_config`.
        registry: Metadata registry the commands were declared in.

    Raises:
        CommandDefinitionError: If command declarations conflict.
    """
    if config is None:
        from cmdexplorer.config import resolve_config

        config = resolve_config()

    app = typer.Typer(
        name=config.prog_name,
        help=config.help,
        no_args_is_help=config.no_args_is_help,
        add_completion=False,
        rich_markup_mode="rich",
    )
    app.callback()(main_callback)

    commands = CommandExplorer(container, registry=registry, config=config).explore()
    return build_command_app(commands, config, app=app)


def _setup_signal_handlers() -> None:
    """Install a SIGINT handler so Ctrl-C exits cleanly."""

    def _handler(signum: int, frame: Any) -> None:  # noqa: ANN401
        sys.stderr.write("\nCancelled.\n")
        sys.exit(EXIT_INTERRUPTED)

    signal.signal(signal.SIGINT, _handler)


def _write_crash_log(exc: Exception) -> str:
    """Write a crash traceback to disk and return the log file path."""
    from cmdexplorer.config import get_data_dir

    logs_dir = get_data_dir() / "logs"
    logs_dir.mkdir(parents=True, exist_ok=True)
    timestamp = datetime.now().strftime("%Y%m%d-%H%M%S")
    log_path = logs_dir / f"crash-{timestamp}.log"
    log_path.write_text(
        "".join(traceback.format_exception(type(exc), exc, exc.__traceback__))
    )
    return str(log_path)


def run(
    container: ModulesContainer,
    args: Optional[Sequence[str]] = None,
    config: Optional[ExplorerConfig] = None,
    registry: Optional[MetadataRegistry] = None,
) -> None:
    """Build the CLI for *container* and run it.

    :class:`~cmdexplorer.exceptions.CmdExplorerError` instances, whether
    raised while exploring or by a command handler, cause a clean exit with
    the error's ``exit_code``. All other exceptions produce a crash log and a
    generic failure exit.

    Raises:
        SystemExit: Always raised (either by Click or explicitly).
    """
    _setup_signal_handlers()
    try:
        if config is None:
            from cmdexplorer.config import resolve_config

            config = resolve_config()
        app = create_app(container, config, registry)
        app(args=list(args) if args is not None else None, prog_name=config.prog_name)
    except SystemExit:
        raise
    except KeyboardInterrupt:
        sys.stderr.write("\nCancelled.\n")
        sys.exit(EXIT_INTERRUPTED)
    except Exception as exc:
        from cmdexplorer.exceptions import CmdExplorerError
        from cmdexplorer.output import error

        if isinstance(exc, CmdExplorerError):
            error(str(exc))
            sys.exit(exc.exit_code)
        else:
            log_path = _write_crash_log(exc)
            error(f"Unexpected error: {exc}. Debug log: {log_path}")
            sys.exit(EXIT_GENERIC_FAILURE)


def main() -> None:
    """CLI entry point invoked by the ``cmdexplorer`` console script.

    Loads every module registered under the configured entry-point group into
    a fresh container, then hands over to :func:`run`.
    """
    from cmdexplorer.config import resolve_config
    from cmdexplorer.exceptions import CmdExplorerError
    from cmdexplorer.output import error

    try:
        config = resolve_config()
    except CmdExplorerError as exc:
        error(str(exc))
        sys.exit(exc.exit_code)

    container = ModulesContainer()
    loaded = load_modules(container, config.entry_point_group)
    logger.debug("Loaded %d module(s) from '%s'", len(loaded), config.entry_point_group)
    run(container, config=config)
