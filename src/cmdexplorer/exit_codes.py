"""Numeric process exit codes following `clig.dev <https://clig.dev/>`_ conventions.

Each constant maps to a specific error category and is referenced by the
corresponding :class:`~cmdexplorer.exceptions.CmdExplorerError` subclass.
Shell wrappers can inspect the exit code to tell a broken command
definition apart from a bad invocation without parsing stderr.

Example::

    $ mytool copy --force
    $ echo $?
    2   # EXIT_INVALID_USAGE -- a required positional was missing
"""

EXIT_SUCCESS = 0
"""The command completed successfully."""

EXIT_GENERIC_FAILURE = 1
"""An unclassified error occurred."""

EXIT_INVALID_USAGE = 2
"""The command was invoked with invalid arguments or missing required parameters."""

EXIT_COMMAND_DEFINITION_ERROR = 3
"""A command handler was declared with inconsistent parameter bindings."""

EXIT_DISCOVERY_ERROR = 4
"""The component container could not be scanned for commands."""

EXIT_INTERRUPTED = 130
"""The process was interrupted with Ctrl-C (128 + SIGINT)."""
