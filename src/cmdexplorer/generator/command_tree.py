"""Register synthesized commands on a flat Typer application.

Each :class:`~cmdexplorer.models.CommandModule` becomes one Typer command.
Its ``builder`` is run against a fresh
:class:`~cmdexplorer.generator.schema.CommandSchema`, and the recorded
entries become the signature of a generated callback. Typer reads that
signature through :mod:`inspect`, so options, positionals, help text and
defaults all come from the command metadata.

When the command runs, the callback maps Typer's keyword values back to the
declared names and awaits the module's ``handler`` with
:func:`asyncio.run`. Values the user left unset, with no declared default,
are left out so the handler method's own defaults apply. Exceptions
raised by the handler are not caught here.
"""

from __future__ import annotations

import asyncio
import inspect
import logging
from typing import Any, Callable, Optional, Sequence

import click
import typer
from click.core import ParameterSource

from cmdexplorer.exceptions import CommandDefinitionError
from cmdexplorer.generator.schema import CommandSchema, sanitize_param_name
from cmdexplorer.models import CommandModule, ExplorerConfig

logger = logging.getLogger(__name__)


def build_command_app(
    commands: Sequence[CommandModule],
    config: Optional[ExplorerConfig] = None,
    app: Optional[typer.Typer] = None,
) -> typer.Typer:
    """Register *commands* on a Typer application.

    Args:
        commands: Synthesized commands, as returned by
            :meth:`~cmdexplorer.explorer.CommandExplorer.explore`.
        config: Supplies the program name, help text and ``no_args_is_help``
            when a new app is created.
        app: Existing app to register on. A new one is created when omitted.

    Returns:
        The Typer app with one command per module, plus a hidden command per
        alias.

    Raises:
        CommandDefinitionError: If two commands (or aliases) share a name.
    """
    cfg = config or ExplorerConfig()
    if app is None:
        app = typer.Typer(
            name=cfg.prog_name,
            help=cfg.help,
            no_args_is_help=cfg.no_args_is_help,
        )
        # A callback keeps Typer in group mode, so a lone command is still
        # addressed by name.
        app.callback()(_root_callback)

    registered: dict[str, str] = {}
    for module in commands:
        for name in (module.command, *module.aliases):
            if name in registered:
                raise CommandDefinitionError(
                    f"Command name '{name}' is used by both '{registered[name]}' "
                    f"and '{module.command}'"
                )
            registered[name] = module.command

        callback = _build_command_function(module)
        help_text = module.describe or None
        app.command(
            name=module.command,
            help=help_text,
            epilog=module.epilog,
            hidden=module.hidden,
            deprecated=module.deprecated,
        )(callback)
        for alias in module.aliases:
            app.command(name=alias, help=help_text, epilog=module.epilog, hidden=True)(
                callback
            )
        logger.debug("Registered command '%s'", module.command)

    return app


def _root_callback() -> None:
    pass


def _left_unset(ctx: click.Context, name: str, value: Any) -> bool:
    """True when the user omitted *name* and no default was declared for it.

    Such values are dropped from the parsed arguments so the handler
    method's own parameter default applies.
    """
    return value is None and ctx.get_parameter_source(name) is ParameterSource.DEFAULT


def _build_command_function(module: CommandModule) -> Callable[..., Any]:
    """Generate a Typer-compatible callback for *module*.

    The callback's ``__signature__`` is built from the schema entries the
    module's builder registers, so :mod:`inspect` (which Typer relies on)
    sees one keyword parameter per option and positional.
    """
    schema = CommandSchema()
    module.builder(schema)
    parameters = schema.parameters()
    dest = schema.dest_map()

    def _command(**kwargs: Any) -> None:
        ctx = click.get_current_context()
        parsed = {
            dest.get(key, key): value
            for key, value in kwargs.items()
            if not _left_unset(ctx, key, value)
        }
        asyncio.run(module.handler(parsed))

    func_name = f"_cmd_{sanitize_param_name(module.command)}"
    _command.__signature__ = inspect.Signature(parameters)  # type: ignore[attr-defined]
    _command.__annotations__ = {p.name: p.annotation for p in parameters}
    _command.__name__ = func_name
    _command.__qualname__ = func_name
    _command.__doc__ = module.describe

    return _command
