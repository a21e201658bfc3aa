"""Terminal output for generated CLIs, with stdout reserved for command data.

Command handlers print their results with :func:`print_data`; everything
else (status lines, warnings, errors, debug traces) goes to stderr so that a
command's output can be piped without noise. Colour is dropped when
``NO_COLOR`` is set, when ``TERM=dumb``, or when ``--no-color`` is passed to
the root callback.

The root callback in :mod:`cmdexplorer.app` installs one
:class:`OutputManager` per invocation through :func:`set_output`; the
module-level helpers delegate to it so handlers never need a reference.
"""

from __future__ import annotations

import os
import sys
from typing import NamedTuple, Optional

from rich.console import Console
from rich.markup import escape


class _Level(NamedTuple):
    prefix: str
    style: Optional[str]
    quietable: bool


_LEVELS: dict[str, _Level] = {
    "info": _Level("", None, True),
    "success": _Level("", "green", True),
    "warning": _Level("Warning: ", "yellow", False),
    "error": _Level("Error: ", "bold red", False),
    "debug": _Level("[debug] ", "dim", True),
}


class OutputManager:
    """Routes command data to stdout and diagnostics to stderr.

    Args:
        no_color: Print diagnostics as plain text.
        quiet: Drop ``info`` and ``success`` messages.
        verbose: Show ``debug`` messages.
    """

    def __init__(
        self,
        no_color: bool = False,
        quiet: bool = False,
        verbose: bool = False,
    ) -> None:
        self._no_color = no_color or _should_disable_color()
        self._quiet = quiet
        self._verbose = verbose
        self._console = Console(file=sys.stderr, no_color=self._no_color, stderr=True)

    @property
    def is_quiet(self) -> bool:
        return self._quiet

    @property
    def is_verbose(self) -> bool:
        return self._verbose

    def print_data(self, text: str) -> None:
        """Write a command result line to stdout."""
        print(text, file=sys.stdout, flush=True)

    def info(self, message: str) -> None:
        self._emit("info", message)

    def success(self, message: str) -> None:
        self._emit("success", message)

    def warning(self, message: str) -> None:
        """Never suppressed by ``--quiet``."""
        self._emit("warning", message)

    def error(self, message: str) -> None:
        """Never suppressed by ``--quiet``."""
        self._emit("error", message)

    def debug(self, message: str) -> None:
        """Only shown with ``--verbose``."""
        if self._verbose:
            self._emit("debug", message)

    def _emit(self, level: str, message: str) -> None:
        fmt = _LEVELS[level]
        if fmt.quietable and self._quiet:
            return
        if self._no_color:
            print(f"{fmt.prefix}{message}", file=sys.stderr, flush=True)
            return
        text = escape(f"{fmt.prefix}{message}")
        self._console.print(f"[{fmt.style}]{text}[/{fmt.style}]" if fmt.style else text)


def _should_disable_color() -> bool:
    """True when ``NO_COLOR`` is set (any value) or ``TERM=dumb``."""
    return os.environ.get("NO_COLOR") is not None or os.environ.get("TERM") == "dumb"


_output: Optional[OutputManager] = None


def get_output() -> OutputManager:
    """Return the installed :class:`OutputManager`, creating a default one lazily."""
    global _output
    if _output is None:
        _output = OutputManager()
    return _output


def set_output(output: OutputManager) -> None:
    global _output
    _output = output


def reset_output() -> None:
    """Forget the installed manager; the next :func:`get_output` builds a fresh one."""
    global _output
    _output = None


def print_data(text: str) -> None:
    get_output().print_data(text)


def info(message: str) -> None:
    get_output().info(message)


def success(message: str) -> None:
    get_output().success(message)


def warning(message: str) -> None:
    get_output().warning(message)


def error(message: str) -> None:
    get_output().error(message)


def debug(message: str) -> None:
    get_output().debug(message)
