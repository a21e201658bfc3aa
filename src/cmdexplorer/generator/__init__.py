"""CLI generator -- register synthesized commands on a Typer application.

This sub-package is the second half of the cmdexplorer pipeline: taking the
:class:`~cmdexplorer.models.CommandModule` list produced by
:class:`~cmdexplorer.explorer.CommandExplorer` and turning it into a runnable
:class:`typer.Typer` application.

Typical usage::

    from cmdexplorer.explorer import CommandExplorer
    from cmdexplorer.generator import build_command_app

    commands = CommandExplorer(container).explore()
    app = build_command_app(commands)
    app()  # invoke the CLI

Sub-modules:

* :mod:`~cmdexplorer.generator.schema` -- The schema object builders
  register options and positionals on, and its mapping to Typer parameters.
* :mod:`~cmdexplorer.generator.command_tree` -- Generates one callback per
  command and registers it, with aliases, on the app.
"""

from cmdexplorer.generator.command_tree import build_command_app
from cmdexplorer.generator.schema import CommandSchema

__all__ = ["build_command_app", "CommandSchema"]
