"""Exception hierarchy for cmdexplorer.

All exceptions inherit from :class:`CmdExplorerError`, which carries an
``exit_code`` attribute mapped to a constant from :mod:`cmdexplorer.exit_codes`.
The top-level error handler in :func:`cmdexplorer.app.run` catches
``CmdExplorerError`` and exits with the appropriate code, while unexpected
exceptions produce a crash log and exit with :data:`EXIT_GENERIC_FAILURE`.

Subclass hierarchy::

    CmdExplorerError            (exit 1)
    +-- InvalidUsageError       (exit 2)
    +-- CommandDefinitionError  (exit 3)
    |   +-- DuplicateIndexError (exit 3)
    +-- DiscoveryError          (exit 4)
    +-- ConfigError             (exit 1)
"""

from cmdexplorer.exit_codes import (
    EXIT_COMMAND_DEFINITION_ERROR,
    EXIT_DISCOVERY_ERROR,
    EXIT_GENERIC_FAILURE,
    EXIT_INVALID_USAGE,
)


class CmdExplorerError(Exception):
    """Base exception for all cmdexplorer errors.

    Every subclass sets a class-level ``exit_code`` corresponding to one of
    the constants in :mod:`cmdexplorer.exit_codes`. The entry point catches
    this exception type and calls ``sys.exit(exc.exit_code)``.

    Args:
        message: Human-readable error description printed to stderr.
        exit_code: Optional override for the class-level exit code.
    """

    exit_code: int = EXIT_GENERIC_FAILURE

    def __init__(self, message: str, exit_code: int | None = None):
        super().__init__(message)
        if exit_code is not None:
            self.exit_code = exit_code


class InvalidUsageError(CmdExplorerError):
    """Raised by command handlers for invalid arguments the parser could not catch."""

    exit_code = EXIT_INVALID_USAGE


class CommandDefinitionError(CmdExplorerError):
    """Raised when a command decorator is misused or two commands share a name."""

    exit_code = EXIT_COMMAND_DEFINITION_ERROR


class DuplicateIndexError(CommandDefinitionError):
    """Raised when two parameter bindings of one command target the same call slot.

    Only raised when the ``duplicate_index`` policy is ``"error"``; the
    other policies let the later binding overwrite the earlier one.
    """

    def __init__(self, command: str, index: int):
        super().__init__(
            f"Command '{command}' binds more than one parameter to index {index}"
        )
        self.command = command
        self.index = index


class DiscoveryError(CmdExplorerError):
    """Raised when modules cannot be loaded into the component container."""

    exit_code = EXIT_DISCOVERY_ERROR


class ConfigError(CmdExplorerError):
    """Raised for configuration problems (invalid JSON, unknown policy values)."""

    exit_code = EXIT_GENERIC_FAILURE
