"""Canonical models shared across all cmdexplorer modules.

This is the single source of truth for data shapes in the project. Every other
module imports from here rather than defining its own models. The models fall
into three groups:

**Command metadata** -- attached to handler methods at class-definition time
by the decorators in :mod:`cmdexplorer.metadata.decorators` and read by the
explorer:
    :class:`ParamKind`, :class:`OptionConfig`, :class:`PositionalConfig`,
    :class:`CommandOption`, :class:`CommandParamItem`, and
    :class:`CommandMetadata`.

**Explorer output** -- produced once per discovery pass and handed to the CLI
runner:
    :class:`CommandCandidate` and :class:`CommandModule`.

**Configuration** -- serialised as JSON in the user or project config file:
    :class:`ExplorerConfig`.

Metadata models are frozen Pydantic v2 models. Option and command models use
``extra="allow"`` so that parser-specific settings not declared here are
preserved in ``model_extra`` and passed through untouched.
"""

from __future__ import annotations

import enum
from dataclasses import dataclass, field
from typing import Any, Awaitable, Callable, Literal, Optional, Union

from pydantic import BaseModel, ConfigDict, Field


ParsedArguments = dict[str, Any]
"""Parsed command-line input keyed by declared option and positional names."""


# --- Parameter bindings ---


class ParamKind(str, enum.Enum):
    """How a handler parameter's value is sourced at invocation time.

    ``OPTION`` and ``POSITIONAL`` read a single named value from the parsed
    arguments; ``ARGV`` receives the whole parsed-arguments mapping.
    """

    OPTION = "option"
    POSITIONAL = "positional"
    ARGV = "argv"


class OptionConfig(BaseModel):
    """Configuration of a ``--flag`` style option, passed verbatim to the schema.

    Example::

        OptionConfig(name="force", type="boolean", default=False,
                     help="Overwrite existing files.")
    """

    model_config = ConfigDict(extra="allow", frozen=True)

    name: str = Field(description="Flag name without leading dashes")
    type: str = Field(
        default="string",
        description="Value type: string, integer, number, boolean, array",
    )
    default: Any = None
    required: bool = False
    help: Optional[str] = None
    aliases: list[str] = Field(
        default_factory=list,
        description="Additional flag spellings, e.g. ['-f']",
    )
    choices: Optional[list[str]] = None
    hidden: bool = False
    envvar: Optional[str] = None


class PositionalConfig(BaseModel):
    """Configuration of a positional argument, passed verbatim to the schema."""

    model_config = ConfigDict(extra="allow", frozen=True)

    name: str
    type: str = "string"
    default: Any = None
    required: bool = True
    help: Optional[str] = None


class CommandParamItem(BaseModel):
    """One binding between a CLI value and a handler parameter slot.

    ``index`` is the zero-based position in the handler's parameter list
    (``self`` excluded). ``option`` is ``None`` for :attr:`ParamKind.ARGV`
    bindings.
    """

    model_config = ConfigDict(frozen=True)

    index: int = Field(ge=0)
    option: Optional[Union[OptionConfig, PositionalConfig]] = None


class CommandOption(BaseModel):
    """Identity and help fields of a command, merged into its :class:`CommandModule`."""

    model_config = ConfigDict(extra="allow", frozen=True)

    command: str = Field(description="Command name as typed on the command line")
    describe: str = ""
    aliases: list[str] = Field(default_factory=list)
    deprecated: bool = False
    hidden: bool = False
    epilog: Optional[str] = None


class CommandMetadata(BaseModel):
    """Metadata record attached to a command handler method."""

    model_config = ConfigDict(frozen=True)

    option: CommandOption
    params: dict[ParamKind, list[CommandParamItem]] = Field(default_factory=dict)


# --- Explorer output ---


@dataclass
class CommandCandidate:
    """A method name found on a component, with its metadata if it has any."""

    method_name: str
    metadata: Optional[CommandMetadata] = None


@dataclass
class CommandModule:
    """A synthesized command, ready to be registered with the CLI runner.

    Attributes:
        command: Command name.
        describe: Help text shown in command listings.
        aliases: Alternative command names.
        deprecated: Whether the command is marked deprecated in help output.
        hidden: Whether the command is hidden from help output.
        epilog: Optional text shown after the command help.
        builder: Registers the command's options and positionals against a
            schema object and returns that same object.
        handler: Coroutine function that marshals parsed arguments into call
            arguments and awaits the bound handler method.
        extra: Any additional fields declared on the command option.
    """

    command: str
    builder: Callable[[Any], Any]
    handler: Callable[[ParsedArguments], Awaitable[None]]
    describe: str = ""
    aliases: list[str] = field(default_factory=list)
    deprecated: bool = False
    hidden: bool = False
    epilog: Optional[str] = None
    extra: dict[str, Any] = field(default_factory=dict)


# --- Configuration ---


DuplicateIndexPolicy = Literal["overwrite", "warn", "error"]


class ExplorerConfig(BaseModel):
    """Effective configuration for discovery and the generated CLI.

    See Also:
        :func:`cmdexplorer.config.resolve_config` for the precedence chain.
    """

    prog_name: Optional[str] = Field(
        default=None, description="Program name shown in usage lines"
    )
    help: Optional[str] = Field(default=None, description="Top-level help text")
    duplicate_index: DuplicateIndexPolicy = Field(
        default="warn",
        description="What to do when two bindings target the same parameter "
        "index: overwrite silently, warn and overwrite, or raise",
    )
    no_args_is_help: bool = True
    entry_point_group: str = Field(
        default="cmdexplorer.modules",
        description="Entry-point group scanned for component modules",
    )
